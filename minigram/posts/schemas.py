# minigram/posts/schemas.py
from datetime import datetime

from pydantic import Field

from minigram.core.schemas import CamelModel, Envelope
from minigram.posts.models import CAPTION_MAX, COMMENT_MAX
from minigram.users.schemas import UserMini


class PostCreate(CamelModel):
    # opcionales aquí: el service responde "Caption and image URL are required"
    caption: str | None = Field(None, max_length=CAPTION_MAX)
    image_url: str | None = None
    tags: list[str] = []
    ai_generated: bool = False
    original_caption: str | None = None


class PostUpdate(CamelModel):
    """
    Edición parcial: solo se aplican los campos presentes.
    """
    caption: str | None = Field(None, max_length=CAPTION_MAX)
    tags: list[str] | None = None


class CommentCreate(CamelModel):
    text: str | None = Field(None, max_length=COMMENT_MAX)


class LikerOut(CamelModel):
    id: int
    username: str | None = None


class CommenterOut(CamelModel):
    id: int
    username: str | None = None
    profile_image: str | None = None


class CommentOut(CamelModel):
    id: int
    author: CommenterOut
    text: str
    created_at: datetime | None = None


class PostOut(CamelModel):
    id: int
    caption: str
    image_url: str
    author: UserMini
    tags: list[str] = []
    likes: list[LikerOut] = []
    like_count: int = 0
    comments: list[CommentOut] = []
    comment_count: int = 0
    ai_generated: bool = False
    original_caption: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class PostEnvelope(Envelope):
    post: PostOut


class PostListEnvelope(Envelope):
    posts: list[PostOut]
    pagination: Pagination
