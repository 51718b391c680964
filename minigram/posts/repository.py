# minigram/posts/repository.py
from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from sqlalchemy import select, desc, func, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from minigram.posts.models import Post, PostTag, PostLike, Comment
from minigram.users.repository import following_ids_subquery


# -------------------------
# POSTS
# -------------------------
async def create_post(
    db: AsyncSession,
    author_id: int,
    caption: str,
    image_url: str,
    tags: Sequence[str] = (),
    ai_generated: bool = False,
    original_caption: str | None = None,
) -> Post:
    post = Post(
        author_id=author_id,
        caption=caption,
        image_url=image_url,
        ai_generated=ai_generated,
        original_caption=original_caption,
    )
    db.add(post)
    await db.flush()
    await replace_tags(db, post.id, tags)
    await db.refresh(post)
    return post


async def get_post(db: AsyncSession, post_id: int) -> Post | None:
    res = await db.execute(select(Post).where(Post.id == post_id))
    return res.scalar_one_or_none()


async def delete_post(db: AsyncSession, post: Post) -> None:
    # borrado explícito de lo que cuelga del post (no dependemos de ON DELETE)
    await db.execute(delete(PostTag).where(PostTag.post_id == post.id))
    await db.execute(delete(PostLike).where(PostLike.post_id == post.id))
    await db.execute(delete(Comment).where(Comment.post_id == post.id))
    await db.delete(post)
    await db.flush()


# -------------------------
# 📄 LISTADOS PAGINADOS
# -------------------------
def author_filter(author_id: int) -> ColumnElement[bool]:
    return Post.author_id == author_id


def following_feed_filter(viewer_id: int) -> ColumnElement[bool]:
    # autores = seguidos ∪ {viewer}
    return or_(
        Post.author_id == viewer_id,
        Post.author_id.in_(following_ids_subquery(viewer_id)),
    )


def tag_filter(tag: str) -> ColumnElement[bool]:
    return Post.id.in_(select(PostTag.post_id).where(PostTag.tag == tag))


async def list_posts(
    db: AsyncSession,
    where: ColumnElement[bool] | None = None,
    limit: int = 10,
    offset: int = 0,
) -> list[Post]:
    """
    Más nuevos primero; a igual created_at desempata el id (más alto primero).
    """
    q = select(Post)
    if where is not None:
        q = q.where(where)
    q = (
        q.order_by(desc(Post.created_at), desc(Post.id))
        .limit(limit)
        .offset(offset)
    )
    res = await db.execute(q)
    return list(res.scalars())


async def count_posts(db: AsyncSession, where: ColumnElement[bool] | None = None) -> int:
    q = select(func.count()).select_from(Post)
    if where is not None:
        q = q.where(where)
    res = await db.execute(q)
    return int(res.scalar_one() or 0)


# -------------------------
# 🏷️ TAGS
# -------------------------
async def replace_tags(db: AsyncSession, post_id: int, tags: Sequence[str]) -> None:
    await db.execute(delete(PostTag).where(PostTag.post_id == post_id))
    for i, tag in enumerate(tags):
        db.add(PostTag(post_id=post_id, tag=tag, position=i))
    await db.flush()


async def tags_for_posts(db: AsyncSession, post_ids: list[int]) -> dict[int, list[str]]:
    out: dict[int, list[str]] = defaultdict(list)
    if not post_ids:
        return out
    res = await db.execute(
        select(PostTag.post_id, PostTag.tag)
        .where(PostTag.post_id.in_(post_ids))
        .order_by(PostTag.post_id, PostTag.position)
    )
    for post_id, tag in res.all():
        out[post_id].append(tag)
    return out


# -------------------------
# ❤️ LIKES
# -------------------------
async def has_liked(db: AsyncSession, post_id: int, user_id: int) -> bool:
    q = select(PostLike.id).where(
        PostLike.post_id == post_id,
        PostLike.user_id == user_id,
    )
    res = await db.execute(q)
    return res.scalar_one_or_none() is not None


async def add_like(db: AsyncSession, post_id: int, user_id: int) -> None:
    db.add(PostLike(post_id=post_id, user_id=user_id))
    await db.flush()


async def remove_like(db: AsyncSession, post_id: int, user_id: int) -> int:
    res = await db.execute(
        delete(PostLike).where(
            PostLike.post_id == post_id,
            PostLike.user_id == user_id,
        )
    )
    await db.flush()
    return res.rowcount or 0


async def likers_for_posts(db: AsyncSession, post_ids: list[int]) -> dict[int, list[int]]:
    """post_id → [user_id, …] en orden de like."""
    out: dict[int, list[int]] = defaultdict(list)
    if not post_ids:
        return out
    res = await db.execute(
        select(PostLike.post_id, PostLike.user_id)
        .where(PostLike.post_id.in_(post_ids))
        .order_by(PostLike.created_at.asc(), PostLike.id.asc())
    )
    for post_id, user_id in res.all():
        out[post_id].append(user_id)
    return out


# -------------------------
# 💬 COMMENTS
# -------------------------
async def create_comment(db: AsyncSession, *, post_id: int, author_id: int, text: str) -> Comment:
    c = Comment(post_id=post_id, author_id=author_id, text=text)
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


async def get_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    res = await db.execute(select(Comment).where(Comment.id == comment_id))
    return res.scalar_one_or_none()


async def delete_comment(db: AsyncSession, comment: Comment) -> None:
    await db.delete(comment)
    await db.flush()


async def comments_for_posts(db: AsyncSession, post_ids: list[int]) -> dict[int, list[Comment]]:
    # ordenados por fecha (y por id para desempatar)
    out: dict[int, list[Comment]] = defaultdict(list)
    if not post_ids:
        return out
    res = await db.execute(
        select(Comment)
        .where(Comment.post_id.in_(post_ids))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    for c in res.scalars():
        out[c.post_id].append(c)
    return out
