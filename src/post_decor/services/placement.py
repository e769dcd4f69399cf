"""Placement engine for stickers on post images.

The engine owns the rules around decorations: the per-user, per-image quota,
resolution of every referenced entity before anything is written, atomic batch
inserts, and the placer / post-owner authorization for later changes.

One engine is built per request around that request's ``Session``; it keeps
no state between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from post_decor.core.settings import settings
from post_decor.models import PostDecoration
from post_decor.repositories.decoration_repo import DecorationRepository
from post_decor.services.authorization import MutationAction, authorize_mutation
from post_decor.services.catalogs import (
    ImageCatalog,
    SqlImageCatalog,
    SqlStickerCatalog,
    SqlUserCatalog,
    StickerCatalog,
    UserCatalog,
)
from post_decor.services.errors import (
    InvalidReferenceError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
)
from post_decor.services.notifications import NotificationSink, get_notification_sink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecorationInput:
    """One requested placement within a batch."""

    sticker_id: int
    pos_x: float
    pos_y: float
    scale: float = 1.0
    rotation: float = 0.0
    z_index: int = 0


@dataclass(frozen=True)
class Geometry:
    """New placement values for an existing decoration."""

    pos_x: float
    pos_y: float
    scale: float
    rotation: float


class PlacementEngine:
    """Create, reposition and remove decorations under the placement rules."""

    def __init__(
        self,
        session: Session,
        *,
        store: DecorationRepository | None = None,
        images: ImageCatalog | None = None,
        users: UserCatalog | None = None,
        stickers: StickerCatalog | None = None,
        notifier: NotificationSink | None = None,
        quota: int | None = None,
    ) -> None:
        self.session = session
        self.store = store or DecorationRepository(session)
        self.images = images or SqlImageCatalog(session)
        self.users = users or SqlUserCatalog(session)
        self.stickers = stickers or SqlStickerCatalog(session)
        self.notifier = notifier or get_notification_sink()
        self.quota = quota if quota is not None else settings.decoration_quota_per_image

    def place(
        self,
        image_id: int,
        placer_user_id: int,
        items: Sequence[DecorationInput],
    ) -> list[PostDecoration]:
        """Place a batch of stickers on one image.

        Args:
            image_id: Image receiving the stickers.
            placer_user_id: Caller placing them.
            items: Requested placements, persisted in the given order.

        Returns:
            The stored decorations in insertion order.

        Raises:
            QuotaExceededError: If the batch would exceed the per-image quota.
            NotFoundError: If the image or the placer does not exist.
            InvalidReferenceError: If any requested sticker does not exist.

        Notes:
            The quota is checked against a count read before the insert, so
            concurrent batches from the same user can overshoot it. It is an
            anti-spam ceiling, not a consistency guarantee.
        """
        if not items:
            return []

        existing = self.store.count_for_user_on_image(placer_user_id, image_id)
        if existing + len(items) > self.quota:
            logger.info(
                "Rejected %d decorations on image %s for user %s: %d already placed",
                len(items),
                image_id,
                placer_user_id,
                existing,
            )
            raise QuotaExceededError(existing=existing, requested=len(items), limit=self.quota)

        image = self.images.get(image_id)
        if image is None:
            raise NotFoundError("image", image_id)
        placer = self.users.get(placer_user_id)
        if placer is None:
            raise NotFoundError("user", placer_user_id)

        # Distinct ids, first-seen order, resolved in a single lookup.
        sticker_ids = list(dict.fromkeys(item.sticker_id for item in items))
        stickers = {sticker.id: sticker for sticker in self.stickers.get_many(sticker_ids)}
        missing = [sticker_id for sticker_id in sticker_ids if sticker_id not in stickers]
        if missing:
            raise InvalidReferenceError(missing)

        decorations = [
            PostDecoration(
                post_id=image.post_id,
                post_image_id=image.id,
                user_id=placer.id,
                sticker_id=item.sticker_id,
                sticker=stickers[item.sticker_id],
                pos_x=item.pos_x,
                pos_y=item.pos_y,
                scale=item.scale,
                rotation=item.rotation,
                z_index=item.z_index,
            )
            for item in items
        ]

        try:
            saved = self.store.add_batch(decorations)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to store %d decorations on image %s", len(items), image_id)
            raise

        logger.info(
            "User %s placed %d decorations on image %s",
            placer.id,
            len(saved),
            image.id,
        )

        if placer.id != image.post_owner_id:
            self._notify_post_owner(placer.id, placer.nickname, image.post_owner_id)

        return saved

    def list_by_image(self, image_id: int) -> list[PostDecoration]:
        """Return every decoration on one image."""
        return self.store.list_by_image(image_id)

    def list_by_post(self, post_id: int) -> list[PostDecoration]:
        """Return every decoration across all images of a post."""
        return self.store.list_by_post(post_id)

    def update(
        self,
        decoration_id: int,
        requesting_user_id: int,
        geometry: Geometry,
    ) -> PostDecoration:
        """Reposition a decoration on behalf of its placer.

        Raises:
            NotFoundError: If the decoration does not exist.
            PermissionDeniedError: If the caller is not the placer.
        """
        decoration = self._get_or_raise(decoration_id)
        self._authorize(decoration, requesting_user_id, MutationAction.UPDATE)

        updated = self.store.update_position(
            decoration_id,
            pos_x=geometry.pos_x,
            pos_y=geometry.pos_y,
            scale=geometry.scale,
            rotation=geometry.rotation,
        )
        if not updated:
            # Removed by a concurrent request after it was loaded.
            self.session.rollback()
            raise NotFoundError("decoration", decoration_id)
        self.session.commit()
        self.session.refresh(decoration)

        logger.info(
            "Decoration %s moved to (%s, %s) by user %s",
            decoration_id,
            geometry.pos_x,
            geometry.pos_y,
            requesting_user_id,
        )
        return decoration

    def delete(self, decoration_id: int, requesting_user_id: int) -> None:
        """Remove a decoration on behalf of its placer or the post owner.

        Raises:
            NotFoundError: If the decoration does not exist.
            PermissionDeniedError: If the caller is neither placer nor post owner.
        """
        decoration = self._get_or_raise(decoration_id)
        self._authorize(decoration, requesting_user_id, MutationAction.DELETE)

        if not self.store.delete(decoration_id):
            self.session.rollback()
            raise NotFoundError("decoration", decoration_id)
        self.session.commit()
        logger.info("Decoration %s deleted by user %s", decoration_id, requesting_user_id)

    def remove_for_post(self, post_id: int) -> int:
        """Clear all decorations of a post that is being removed."""
        removed = self.store.delete_cascade_by_post(post_id)
        self.session.commit()
        logger.info("Removed %d decorations with post %s", removed, post_id)
        return removed

    def remove_for_image(self, image_id: int) -> int:
        """Clear all decorations of an image that is being removed."""
        removed = self.store.delete_cascade_by_image(image_id)
        self.session.commit()
        logger.info("Removed %d decorations with image %s", removed, image_id)
        return removed

    def _get_or_raise(self, decoration_id: int) -> PostDecoration:
        decoration = self.store.get_by_id(decoration_id)
        if decoration is None:
            raise NotFoundError("decoration", decoration_id)
        return decoration

    def _authorize(
        self,
        decoration: PostDecoration,
        requesting_user_id: int,
        action: MutationAction,
    ) -> None:
        verdict = authorize_mutation(decoration, requesting_user_id, action)
        if not verdict.allowed:
            logger.info(
                "User %s denied %s on decoration %s: %s",
                requesting_user_id,
                action.value,
                decoration.id,
                verdict.reason,
            )
            raise PermissionDeniedError(verdict.reason or "permission denied")

    def _notify_post_owner(self, actor_id: int, actor_nickname: str, owner_id: int) -> None:
        message = f"{actor_nickname} decorated your photo!"
        try:
            self.notifier.notify(actor_id, owner_id, message)
        except Exception:
            logger.warning(
                "Could not notify user %s about decorations by user %s",
                owner_id,
                actor_id,
                exc_info=True,
            )


__all__ = ["DecorationInput", "Geometry", "PlacementEngine"]
