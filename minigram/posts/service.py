# minigram/posts/service.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from minigram.core.errors import (
    AlreadyLiked,
    Forbidden,
    NotFound,
    NotLiked,
    ValidationError,
)
from minigram.posts import repository as repo
from minigram.posts.models import Post, TAG_MAX
from minigram.posts.schemas import PostCreate, PostUpdate
from minigram.users.models import User
from minigram.users.repository import get_many as get_users

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass
class Page:
    items: list[dict] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
        }


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """minúsculas + trim, sin vacíos ni repetidos (conserva el orden)."""
    out: list[str] = []
    for raw in tags or ():
        tag = (raw or "").strip().lower()
        if not tag or tag in out:
            continue
        if len(tag) > TAG_MAX:
            raise ValidationError(f"Tag must be at most {TAG_MAX} characters")
        out.append(tag)
    return out


# -------------------------
# 🧩 EXPANSIÓN (author / likes / comments.author)
# -------------------------
def _author_mini(user_id: int, users: dict[int, User], expand: bool) -> dict:
    u = users.get(user_id)
    if not expand or u is None:
        return {"id": user_id}
    return {
        "id": u.id,
        "username": u.username,
        "full_name": u.full_name,
        "profile_image": u.profile_image,
    }


def _liker_mini(user_id: int, users: dict[int, User], expand: bool) -> dict:
    u = users.get(user_id)
    if not expand or u is None:
        return {"id": user_id}
    return {"id": u.id, "username": u.username}


def _commenter_mini(user_id: int, users: dict[int, User], expand: bool) -> dict:
    u = users.get(user_id)
    if not expand or u is None:
        return {"id": user_id}
    return {"id": u.id, "username": u.username, "profile_image": u.profile_image}


async def hydrate_posts(
    db: AsyncSession, posts: list[Post], *, expand: bool = True
) -> list[dict]:
    """
    Devuelve los dicts que espera el front para una lista de posts.
    Tags, likes y comments se cargan con una query cada uno para toda la
    página, y los usuarios referenciados con una más (solo si expand).
    """
    if not posts:
        return []

    ids = [p.id for p in posts]
    tags = await repo.tags_for_posts(db, ids)
    likers = await repo.likers_for_posts(db, ids)
    comments = await repo.comments_for_posts(db, ids)

    users: dict[int, User] = {}
    if expand:
        user_ids: set[int] = {p.author_id for p in posts}
        for uids in likers.values():
            user_ids.update(uids)
        for cs in comments.values():
            user_ids.update(c.author_id for c in cs)
        users = await get_users(db, user_ids)

    out: list[dict] = []
    for p in posts:
        post_likes = likers.get(p.id, [])
        post_comments = comments.get(p.id, [])
        out.append(
            {
                "id": p.id,
                "caption": p.caption,
                "image_url": p.image_url,
                "author": _author_mini(p.author_id, users, expand),
                "tags": tags.get(p.id, []),
                "likes": [_liker_mini(uid, users, expand) for uid in post_likes],
                "like_count": len(post_likes),
                "comments": [
                    {
                        "id": c.id,
                        "author": _commenter_mini(c.author_id, users, expand),
                        "text": c.text,
                        "created_at": c.created_at,
                    }
                    for c in post_comments
                ],
                "comment_count": len(post_comments),
                "ai_generated": p.ai_generated,
                "original_caption": p.original_caption,
                "created_at": p.created_at,
                "updated_at": p.updated_at,
            }
        )
    return out


async def hydrate_post(db: AsyncSession, post: Post, *, expand: bool = True) -> dict:
    return (await hydrate_posts(db, [post], expand=expand))[0]


# -------------------------
# 📄 FEEDS
# -------------------------
async def _paginate(
    db: AsyncSession,
    where: ColumnElement[bool] | None,
    page: int,
    limit: int,
    expand: bool,
) -> Page:
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1:
        raise ValidationError("limit must be >= 1")

    total = await repo.count_posts(db, where)
    offset = (page - 1) * limit
    posts = await repo.list_posts(db, where, limit=limit, offset=offset) if offset < total else []
    items = await hydrate_posts(db, posts, expand=expand)
    return Page(items=items, total=total, page=page, limit=limit)


async def list_all(
    db: AsyncSession, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, *, expand: bool = True
) -> Page:
    return await _paginate(db, None, page, limit, expand)


async def list_following_feed(
    db: AsyncSession,
    viewer_id: int,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    *,
    expand: bool = True,
) -> Page:
    """Posts del viewer y de todos los que sigue."""
    return await _paginate(db, repo.following_feed_filter(viewer_id), page, limit, expand)


async def list_by_author(
    db: AsyncSession,
    author_id: int,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    *,
    expand: bool = True,
) -> Page:
    return await _paginate(db, repo.author_filter(author_id), page, limit, expand)


async def list_by_tag(
    db: AsyncSession,
    tag: str | None,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    *,
    expand: bool = True,
) -> Page:
    tag_norm = (tag or "").strip().lower()
    if not tag_norm:
        raise ValidationError("Tag is required")
    return await _paginate(db, repo.tag_filter(tag_norm), page, limit, expand)


async def get_by_id(db: AsyncSession, post_id: int, *, expand: bool = True) -> dict:
    post = await _get_post_or_404(db, post_id)
    return await hydrate_post(db, post, expand=expand)


# -------------------------
# ✏️ MUTACIONES
# -------------------------
async def _get_post_or_404(db: AsyncSession, post_id: int) -> Post:
    post = await repo.get_post(db, post_id)
    if not post:
        raise NotFound("Post not found")
    return post


async def _get_own_post(db: AsyncSession, post_id: int, caller_id: int, action: str) -> Post:
    post = await _get_post_or_404(db, post_id)
    if post.author_id != caller_id:
        raise Forbidden(f"Not authorized to {action} this post")
    return post


async def create_post(db: AsyncSession, author_id: int, data: PostCreate) -> Post:
    caption = (data.caption or "").strip()
    image_url = (data.image_url or "").strip()
    if not caption or not image_url:
        raise ValidationError("Caption and image URL are required")

    # El commit lo hace el router
    return await repo.create_post(
        db,
        author_id=author_id,
        caption=caption,
        image_url=image_url,
        tags=normalize_tags(data.tags),
        ai_generated=data.ai_generated,
        original_caption=data.original_caption,
    )


async def update_post(db: AsyncSession, post_id: int, caller_id: int, data: PostUpdate) -> Post:
    post = await _get_own_post(db, post_id, caller_id, "update")

    changes = data.model_dump(exclude_unset=True)
    # caption vacío o en blanco: se deja el que había
    caption = (changes.get("caption") or "").strip()
    if caption:
        post.caption = caption
    if changes.get("tags") is not None:
        await repo.replace_tags(db, post.id, normalize_tags(changes["tags"]))

    if changes:
        # tocar updated_at aunque solo cambien los tags
        post.updated_at = func.now()
        await db.flush()
        await db.refresh(post)
    return post


async def delete_post(db: AsyncSession, post_id: int, caller_id: int) -> None:
    post = await _get_own_post(db, post_id, caller_id, "delete")
    await repo.delete_post(db, post)


async def like_post(db: AsyncSession, post_id: int, user_id: int) -> Post:
    post = await _get_post_or_404(db, post_id)
    if await repo.has_liked(db, post_id, user_id):
        raise AlreadyLiked()
    try:
        await repo.add_like(db, post_id, user_id)
    except IntegrityError:
        # like concurrente del mismo usuario
        raise AlreadyLiked()
    return post


async def unlike_post(db: AsyncSession, post_id: int, user_id: int) -> Post:
    post = await _get_post_or_404(db, post_id)
    removed = await repo.remove_like(db, post_id, user_id)
    if not removed:
        raise NotLiked()
    return post


async def add_comment(db: AsyncSession, post_id: int, author_id: int, text: str | None) -> Post:
    body = (text or "").strip()
    if not body:
        raise ValidationError("Comment text is required")

    post = await _get_post_or_404(db, post_id)
    await repo.create_comment(db, post_id=post.id, author_id=author_id, text=body)
    return post


async def delete_comment(db: AsyncSession, post_id: int, comment_id: int, caller_id: int) -> Post:
    post = await _get_post_or_404(db, post_id)

    comment = await repo.get_comment(db, comment_id)
    if not comment or comment.post_id != post.id:
        raise NotFound("Comment not found")
    if comment.author_id != caller_id:
        raise Forbidden("Not authorized to delete this comment")

    await repo.delete_comment(db, comment)
    return post
