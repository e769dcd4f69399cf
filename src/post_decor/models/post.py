"""SQLAlchemy models for posts and the images embedded in them."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from post_decor.db.session import Base


class Post(Base):
    """Shared post whose images can be decorated by any user."""

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")

    images: Mapped[list[PostImage]] = relationship(
        "PostImage",
        back_populates="post",
        order_by="PostImage.sort_order",
        passive_deletes=True,
    )


class PostImage(Base):
    """One image of a post; the canvas decorations are placed on."""

    __tablename__ = "post_image"
    __table_args__ = (Index("ix_post_image_post_id", "post_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    post: Mapped[Post] = relationship("Post", back_populates="images")
