# minigram/posts/router.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from minigram.core.json import UTF8JSONResponse, ok
from minigram.core.schemas import Envelope
from minigram.db.session import get_session
from minigram.posts import service as svc
from minigram.posts.schemas import (
    CommentCreate,
    PostCreate,
    PostEnvelope,
    PostListEnvelope,
    PostUpdate,
)
from minigram.users.deps import get_current_user
from minigram.users.models import User

router = APIRouter(
    prefix="/api/posts",
    tags=["posts"],
    default_response_class=UTF8JSONResponse,
)


def _page_out(page: svc.Page) -> dict:
    return ok(posts=page.items, pagination=page.pagination())


# ⚠️ rutas fijas (/feed, /search/tag, /user/…) antes de /{post_id}

@router.get("", response_model=PostListEnvelope)
async def list_all(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    db: AsyncSession = Depends(get_session),
):
    return _page_out(await svc.list_all(db, page, limit))


@router.get("/feed", response_model=PostListEnvelope)
async def following_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return _page_out(await svc.list_following_feed(db, current.id, page, limit))


@router.get("/search/tag", response_model=PostListEnvelope)
async def search_by_tag(
    tag: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    db: AsyncSession = Depends(get_session),
):
    return _page_out(await svc.list_by_tag(db, tag, page, limit))


@router.get("/user/{user_id}", response_model=PostListEnvelope)
async def user_posts(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    db: AsyncSession = Depends(get_session),
):
    return _page_out(await svc.list_by_author(db, user_id, page, limit))


@router.post("", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    post = await svc.create_post(db, current.id, payload)
    await db.commit()
    return ok("Post created successfully", post=await svc.hydrate_post(db, post))


@router.get("/{post_id}", response_model=PostEnvelope)
async def get_post(
    post_id: int,
    db: AsyncSession = Depends(get_session),
):
    return ok(post=await svc.get_by_id(db, post_id))


@router.put("/{post_id}", response_model=PostEnvelope)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Solo el autor puede editar (caption y/o tags)."""
    post = await svc.update_post(db, post_id, current.id, payload)
    await db.commit()
    return ok("Post updated successfully", post=await svc.hydrate_post(db, post))


@router.delete("/{post_id}", response_model=Envelope)
async def delete_post(
    post_id: int,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Solo el autor puede borrar. Se van también tags, likes y comentarios."""
    await svc.delete_post(db, post_id, current.id)
    await db.commit()
    return ok("Post deleted successfully")


@router.post("/{post_id}/like", response_model=PostEnvelope)
async def like_post(
    post_id: int,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    post = await svc.like_post(db, post_id, current.id)
    await db.commit()
    return ok("Post liked successfully", post=await svc.hydrate_post(db, post))


@router.delete("/{post_id}/like", response_model=PostEnvelope)
async def unlike_post(
    post_id: int,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    post = await svc.unlike_post(db, post_id, current.id)
    await db.commit()
    return ok("Post unliked successfully", post=await svc.hydrate_post(db, post))


@router.post(
    "/{post_id}/comments",
    response_model=PostEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    post = await svc.add_comment(db, post_id, current.id, payload.text)
    await db.commit()
    return ok("Comment added successfully", post=await svc.hydrate_post(db, post))


@router.delete("/{post_id}/comments/{comment_id}", response_model=PostEnvelope)
async def delete_comment(
    post_id: int,
    comment_id: int,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Solo el autor del comentario puede borrarlo."""
    post = await svc.delete_comment(db, post_id, comment_id, current.id)
    await db.commit()
    return ok("Comment deleted successfully", post=await svc.hydrate_post(db, post))
