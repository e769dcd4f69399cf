"""Read-only lookups for the reference data decorations point at.

Images, users and stickers are owned by other parts of the platform. The
placement engine only reads them through the protocols below so tests and
alternative deployments can swap in their own sources.
"""
from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from post_decor.models import Post, PostImage, Sticker, User

__all__ = [
    "ImageCatalog",
    "ImageRef",
    "SqlImageCatalog",
    "SqlStickerCatalog",
    "SqlUserCatalog",
    "StickerCatalog",
    "UserCatalog",
]


@dataclass(frozen=True)
class ImageRef:
    """An image together with the post that owns it."""

    id: int
    post_id: int
    post_owner_id: int


class ImageCatalog(Protocol):
    """Contract for resolving an image and its owning post."""

    def get(self, image_id: int) -> ImageRef | None: ...


class UserCatalog(Protocol):
    """Contract for resolving a user by id."""

    def get(self, user_id: int) -> User | None: ...


class StickerCatalog(Protocol):
    """Contract for resolving many stickers in one lookup."""

    def get_many(self, sticker_ids: Collection[int]) -> list[Sticker]: ...


class SqlImageCatalog:
    """Resolve images from the ``post_image`` and ``post`` tables."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, image_id: int) -> ImageRef | None:
        row = self.session.execute(
            select(PostImage.id, PostImage.post_id, Post.owner_user_id)
            .join(Post, Post.id == PostImage.post_id)
            .where(PostImage.id == image_id)
        ).first()
        if row is None:
            return None
        return ImageRef(id=row.id, post_id=row.post_id, post_owner_id=row.owner_user_id)


class SqlUserCatalog:
    """Resolve users from the ``app_user`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)


class SqlStickerCatalog:
    """Resolve stickers from the ``sticker`` table with a single IN query."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_many(self, sticker_ids: Collection[int]) -> list[Sticker]:
        if not sticker_ids:
            return []
        result = self.session.scalars(select(Sticker).where(Sticker.id.in_(sticker_ids)))
        return list(result)
