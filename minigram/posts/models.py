# minigram/posts/models.py
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Integer,
    Boolean,
    DateTime,
    func,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.types import UnicodeText
from minigram.db.base import Base

CAPTION_MAX = 2000
COMMENT_MAX = 500
TAG_MAX = 100


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    caption: Mapped[str] = mapped_column(String(CAPTION_MAX), nullable=False)
    # URL o data URI; el backend no lo interpreta
    image_url: Mapped[str] = mapped_column(UnicodeText, nullable=False)

    ai_generated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # descripción usada como prompt cuando el caption salió de la IA
    original_caption: Mapped[str | None] = mapped_column(UnicodeText, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class PostTag(Base):
    __tablename__ = "post_tags"

    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    # siempre en minúsculas y sin espacios a los lados
    tag: Mapped[str] = mapped_column(String(TAG_MAX), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class PostLike(Base):
    """
    Like de un usuario sobre un post.
    Un usuario solo puede dar like una vez al mismo post.
    """
    __tablename__ = "post_likes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_like"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    text: Mapped[str] = mapped_column(String(COMMENT_MAX), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
