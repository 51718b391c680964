# minigram/users/repository.py
from typing import Iterable

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from minigram.users.models import User, Follow

async def get_by_username(db: AsyncSession, username: str) -> User | None:
    res = await db.execute(select(User).where(User.username == username))
    return res.scalar_one_or_none()

async def get_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(User.email == email))
    return res.scalar_one_or_none()

async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()

async def get_many(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    res = await db.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in res.scalars()}

async def create_user(db: AsyncSession, username: str, email: str, hashed_password: str) -> User:
    user = User(username=username, email=email, hashed_password=hashed_password)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


# -------------------------
# 👥 FOLLOWS
# -------------------------
async def is_following(db: AsyncSession, follower_id: int, followee_id: int) -> bool:
    res = await db.execute(
        select(Follow.id).where(
            Follow.follower_id == follower_id,
            Follow.followee_id == followee_id,
        )
    )
    return res.scalar_one_or_none() is not None

async def add_follow(db: AsyncSession, follower_id: int, followee_id: int) -> Follow:
    edge = Follow(follower_id=follower_id, followee_id=followee_id)
    db.add(edge)
    await db.flush()
    return edge

async def remove_follow(db: AsyncSession, follower_id: int, followee_id: int) -> int:
    res = await db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.followee_id == followee_id,
        )
    )
    await db.flush()
    return res.rowcount or 0

async def list_following(db: AsyncSession, user_id: int) -> list[User]:
    """Usuarios a los que sigue `user_id`, en orden de follow."""
    res = await db.execute(
        select(User)
        .join(Follow, Follow.followee_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.asc(), Follow.id.asc())
    )
    return list(res.scalars())

async def list_followers(db: AsyncSession, user_id: int) -> list[User]:
    """Usuarios que siguen a `user_id`, en orden de follow."""
    res = await db.execute(
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.followee_id == user_id)
        .order_by(Follow.created_at.asc(), Follow.id.asc())
    )
    return list(res.scalars())

def following_ids_subquery(user_id: int):
    """SELECT followee_id … para usar dentro de un IN (feed de seguidos)."""
    return select(Follow.followee_id).where(Follow.follower_id == user_id)
