"""SQLAlchemy model for stickers placed on post images."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from post_decor.db.session import Base

from .post import Post, PostImage
from .sticker import Sticker


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


class PostDecoration(Base):
    """One sticker instance placed on one image by one user.

    ``post_id`` duplicates ``post_image.post_id`` for whole-post queries; it is
    always copied from the image at creation time. ``user_id`` is the placer
    and never changes after insert.
    """

    __tablename__ = "post_decoration"
    __table_args__ = (
        Index("ix_post_decoration_user_image", "user_id", "post_image_id"),
        Index("ix_post_decoration_post_id", "post_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_image_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post_image.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id"),
        nullable=False,
    )
    sticker_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sticker.id"),
        nullable=False,
    )

    # Canvas coordinates belong to the client; no range is enforced here.
    pos_x: Mapped[float] = mapped_column(Float, nullable=False)
    pos_y: Mapped[float] = mapped_column(Float, nullable=False)
    scale: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    rotation: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # Ties are allowed; listing falls back to insertion order.
    z_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    post: Mapped[Post] = relationship("Post")
    post_image: Mapped[PostImage] = relationship("PostImage")
    sticker: Mapped[Sticker] = relationship("Sticker")

    @property
    def post_owner_id(self) -> int:
        """Return the id of the user who owns the decorated post."""
        return self.post.owner_user_id
