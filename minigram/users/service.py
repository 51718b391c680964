# minigram/users/service.py
from __future__ import annotations
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from minigram.core.errors import (
    AlreadyFollowing,
    AlreadyRegistered,
    InvalidOperation,
    NotFollowing,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from minigram.core.security import hash_password, verify_password
from minigram.users import repository as repo
from minigram.users.models import User
from minigram.users.schemas import UserCreate, ProfileUpdate

INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def user_mini(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "profile_image": user.profile_image,
    }


async def hydrate_user_out(db: AsyncSession, user: User) -> dict:
    """
    Usuario público: sin password, con followers/following expandidos.
    """
    followers = await repo.list_followers(db, user.id)
    following = await repo.list_following(db, user.id)
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "full_name": user.full_name,
        "bio": user.bio,
        "profile_image": user.profile_image,
        "followers": [user_mini(u) for u in followers],
        "following": [user_mini(u) for u in following],
        "follower_count": len(followers),
        "following_count": len(following),
        "created_at": user.created_at,
    }


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    if data.password != data.password_confirm:
        raise ValidationError("Passwords do not match")

    email = normalize_email(data.email)
    if await repo.get_by_email(db, email):
        raise AlreadyRegistered("Email already registered")
    if await repo.get_by_username(db, data.username):
        raise AlreadyRegistered("Username already taken")

    hashed = hash_password(data.password)
    try:
        user = await repo.create_user(db, data.username, email, hashed)
    except IntegrityError:
        # otro registro con el mismo email/username ganó la carrera
        raise AlreadyRegistered("Username or email already registered")

    # El commit lo hace el router
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await repo.get_by_email(db, normalize_email(email))
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def login_user(db: AsyncSession, email: str | None, password: str | None) -> User:
    if not (email or "").strip() or not password:
        raise ValidationError("Email and password are required")
    # mismo error si no existe el email o si la password no coincide
    user = await authenticate_user(db, email, password)
    if not user:
        raise Unauthenticated(INVALID_CREDENTIALS)
    return user


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    """Actualiza solo los campos que llegaron en el body."""
    changes = data.model_dump(exclude_unset=True)
    for field in ("full_name", "bio", "profile_image"):
        if field in changes:
            setattr(user, field, changes[field])
    if changes:
        await db.flush()
        await db.refresh(user)
    return user


async def get_public_user(db: AsyncSession, username: str) -> User:
    user = await repo.get_by_username(db, username)
    if not user:
        raise NotFound("User not found")
    return user


async def follow_user(db: AsyncSession, caller: User, target_id: int) -> None:
    if caller.id == target_id:
        raise InvalidOperation("You cannot follow yourself")

    target = await repo.get_by_id(db, target_id)
    if not target:
        raise NotFound("User not found")

    if await repo.is_following(db, caller.id, target_id):
        raise AlreadyFollowing()

    # una sola fila: following del caller y followers del target a la vez
    try:
        await repo.add_follow(db, caller.id, target_id)
    except IntegrityError:
        raise AlreadyFollowing()


async def unfollow_user(db: AsyncSession, caller: User, target_id: int) -> None:
    if caller.id == target_id:
        raise InvalidOperation("You cannot unfollow yourself")

    removed = await repo.remove_follow(db, caller.id, target_id)
    if not removed:
        raise NotFollowing()
