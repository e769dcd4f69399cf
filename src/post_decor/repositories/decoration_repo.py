"""Data access helpers for placed decorations."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from post_decor.models import PostDecoration
from post_decor.models.decoration import utcnow

__all__ = ["DecorationRepository"]


class DecorationRepository:
    """Thin wrapper around database access for decoration rows.

    Writes are flushed but never committed here; the caller owns the
    transaction boundary.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def count_for_user_on_image(self, user_id: int, image_id: int) -> int:
        """Return how many decorations ``user_id`` holds on ``image_id``."""
        count = self.session.scalar(
            select(func.count())
            .select_from(PostDecoration)
            .where(
                PostDecoration.user_id == user_id,
                PostDecoration.post_image_id == image_id,
            )
        )
        return int(count or 0)

    def add_batch(self, decorations: Sequence[PostDecoration]) -> list[PostDecoration]:
        """Insert every decoration or none of them.

        The rows are flushed inside a savepoint, so a failure on any row rolls
        back the whole batch and re-raises.
        """
        with self.session.begin_nested():
            self.session.add_all(decorations)
        return list(decorations)

    def get_by_id(self, decoration_id: int) -> PostDecoration | None:
        """Return a decoration by identifier."""
        return self.session.get(PostDecoration, decoration_id)

    def list_by_image(self, image_id: int) -> list[PostDecoration]:
        """Return all decorations on one image in stacking order.

        Sticker rows are loaded with one IN query per call rather than per row.
        """
        result = self.session.scalars(
            select(PostDecoration)
            .options(selectinload(PostDecoration.sticker))
            .where(PostDecoration.post_image_id == image_id)
            .order_by(PostDecoration.z_index, PostDecoration.id)
        )
        return list(result)

    def list_by_post(self, post_id: int) -> list[PostDecoration]:
        """Return decorations across every image of a post."""
        result = self.session.scalars(
            select(PostDecoration)
            .options(selectinload(PostDecoration.sticker))
            .where(PostDecoration.post_id == post_id)
            .order_by(
                PostDecoration.post_image_id,
                PostDecoration.z_index,
                PostDecoration.id,
            )
        )
        return list(result)

    def update_position(
        self,
        decoration_id: int,
        *,
        pos_x: float,
        pos_y: float,
        scale: float,
        rotation: float,
    ) -> bool:
        """Overwrite the geometric fields of one decoration.

        Stacking order, sticker and ownership columns are left untouched.
        Returns False when no row matched.
        """
        result = self.session.execute(
            update(PostDecoration)
            .where(PostDecoration.id == decoration_id)
            .values(
                pos_x=pos_x,
                pos_y=pos_y,
                scale=scale,
                rotation=rotation,
                updated_at=utcnow(),
            )
        )
        return result.rowcount > 0

    def delete(self, decoration_id: int) -> bool:
        """Remove one decoration; return False when it did not exist."""
        result = self.session.execute(
            delete(PostDecoration).where(PostDecoration.id == decoration_id)
        )
        return result.rowcount > 0

    def delete_cascade_by_post(self, post_id: int) -> int:
        """Remove every decoration attached to a post; return the row count."""
        result = self.session.execute(
            delete(PostDecoration).where(PostDecoration.post_id == post_id)
        )
        return result.rowcount

    def delete_cascade_by_image(self, image_id: int) -> int:
        """Remove every decoration attached to one image; return the row count."""
        result = self.session.execute(
            delete(PostDecoration).where(PostDecoration.post_image_id == image_id)
        )
        return result.rowcount
