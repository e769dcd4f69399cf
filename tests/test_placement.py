# tests/test_placement.py
"""Tests for the placement engine: quota, resolution, authorization, cascades."""

import logging

import pytest

from post_decor.core.settings import settings
from post_decor.repositories.decoration_repo import DecorationRepository
from post_decor.services.catalogs import SqlStickerCatalog
from post_decor.services.errors import (
    InvalidReferenceError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
)
from post_decor.services.placement import DecorationInput, Geometry, PlacementEngine

from tests.conftest import (
    IMAGE_ID,
    OTHER_IMAGE_ID,
    OWNER_ID,
    PLACER_ID,
    POST_ID,
    STRANGER_ID,
    RecordingSink,
)


def items(*sticker_ids: int, **geometry) -> list[DecorationInput]:
    return [DecorationInput(sticker_id=sticker_id, pos_x=5.0, pos_y=7.0, **geometry) for sticker_id in sticker_ids]


class CountingStickerCatalog(SqlStickerCatalog):
    def __init__(self, session):
        super().__init__(session)
        self.calls: list[list[int]] = []

    def get_many(self, sticker_ids):
        self.calls.append(list(sticker_ids))
        return super().get_many(sticker_ids)


class RemovedElsewhereRepository(DecorationRepository):
    """Store whose target row is deleted and committed by another request first."""

    def _remove_elsewhere(self, decoration_id):
        super().delete(decoration_id)
        self.session.commit()

    def update_position(self, decoration_id, **geometry):
        self._remove_elsewhere(decoration_id)
        return super().update_position(decoration_id, **geometry)

    def delete(self, decoration_id):
        self._remove_elsewhere(decoration_id)
        return super().delete(decoration_id)


class ExplodingSink:
    def notify(self, actor_id: int, recipient_id: int, message: str) -> None:
        raise RuntimeError("notification service down")


class TestPlace:
    def test_places_batch_and_lists_it(self, placement: PlacementEngine):
        placed = placement.place(IMAGE_ID, PLACER_ID, items(1, 2))

        assert len(placed) == 2
        assert [d.sticker_id for d in placed] == [1, 2]
        assert all(d.post_id == POST_ID and d.post_image_id == IMAGE_ID for d in placed)
        assert all(d.user_id == PLACER_ID for d in placed)
        listed = placement.list_by_image(IMAGE_ID)
        assert [d.id for d in listed] == [d.id for d in placed]

    def test_keeps_requested_geometry(self, placement: PlacementEngine):
        [placed] = placement.place(
            IMAGE_ID,
            PLACER_ID,
            [DecorationInput(sticker_id=2, pos_x=-3.5, pos_y=400.0, scale=2.5, rotation=720.0, z_index=4)],
        )

        assert (placed.pos_x, placed.pos_y, placed.scale, placed.rotation, placed.z_index) == (
            -3.5,
            400.0,
            2.5,
            720.0,
            4,
        )
        assert placed.sticker.name == "Heart"

    def test_empty_batch_is_a_no_op(self, placement: PlacementEngine, notifier: RecordingSink):
        assert placement.place(IMAGE_ID, PLACER_ID, []) == []
        assert placement.list_by_image(IMAGE_ID) == []
        assert notifier.sent == []

    def test_duplicate_stickers_resolved_once(self, db_session, post, stickers, notifier):
        catalog = CountingStickerCatalog(db_session)
        engine = PlacementEngine(db_session, stickers=catalog, notifier=notifier)

        placed = engine.place(IMAGE_ID, PLACER_ID, items(1, 1, 2, 1))

        assert len(placed) == 4
        assert catalog.calls == [[1, 2]]

    def test_list_by_post_spans_images(self, placement: PlacementEngine):
        placement.place(OTHER_IMAGE_ID, PLACER_ID, items(2))
        placement.place(IMAGE_ID, STRANGER_ID, items(1))

        listed = placement.list_by_post(POST_ID)

        assert [d.post_image_id for d in listed] == [IMAGE_ID, OTHER_IMAGE_ID]


class TestQuota:
    def test_rejects_batch_past_limit(self, placement: PlacementEngine):
        placement.place(IMAGE_ID, PLACER_ID, items(*([1] * 49)))

        with pytest.raises(QuotaExceededError) as exc_info:
            placement.place(IMAGE_ID, PLACER_ID, items(1, 2))

        assert exc_info.value.existing == 49
        assert exc_info.value.requested == 2
        assert exc_info.value.limit == 50
        assert len(placement.list_by_image(IMAGE_ID)) == 49

    def test_batch_reaching_limit_exactly_is_allowed(self, placement: PlacementEngine):
        placement.place(IMAGE_ID, PLACER_ID, items(*([1] * 48)))

        placed = placement.place(IMAGE_ID, PLACER_ID, items(1, 2))

        assert len(placed) == 2
        assert len(placement.list_by_image(IMAGE_ID)) == 50

    def test_quota_is_per_user_and_image(self, placement: PlacementEngine):
        placement.place(IMAGE_ID, PLACER_ID, items(*([1] * 50)))

        assert len(placement.place(OTHER_IMAGE_ID, PLACER_ID, items(1, 2))) == 2
        assert len(placement.place(IMAGE_ID, STRANGER_ID, items(1, 2))) == 2

    def test_quota_follows_settings(self, db_session, post, stickers, notifier, monkeypatch):
        monkeypatch.setattr(settings, "decoration_quota_per_image", 3)
        engine = PlacementEngine(db_session, notifier=notifier)

        engine.place(IMAGE_ID, PLACER_ID, items(1, 2))
        with pytest.raises(QuotaExceededError):
            engine.place(IMAGE_ID, PLACER_ID, items(1, 2))

    def test_quota_checked_before_lookups(self, db_session, post, stickers, notifier):
        engine = PlacementEngine(db_session, notifier=notifier, quota=1)

        with pytest.raises(QuotaExceededError):
            engine.place(999, PLACER_ID, items(1, 2))


class TestResolution:
    def test_unknown_image(self, placement: PlacementEngine):
        with pytest.raises(NotFoundError) as exc_info:
            placement.place(999, PLACER_ID, items(1))
        assert exc_info.value.entity == "image"
        assert str(exc_info.value) == "Image 999 not found"

    def test_unknown_user(self, placement: PlacementEngine):
        with pytest.raises(NotFoundError) as exc_info:
            placement.place(IMAGE_ID, 999, items(1))
        assert exc_info.value.entity == "user"

    def test_unknown_sticker_writes_nothing(self, placement: PlacementEngine, notifier: RecordingSink):
        with pytest.raises(InvalidReferenceError) as exc_info:
            placement.place(IMAGE_ID, PLACER_ID, items(1, 77, 2, 76, 77))

        assert exc_info.value.missing_sticker_ids == [76, 77]
        assert placement.list_by_image(IMAGE_ID) == []
        assert notifier.sent == []


class TestNotifications:
    def test_post_owner_is_told(self, placement: PlacementEngine, notifier: RecordingSink):
        placement.place(IMAGE_ID, PLACER_ID, items(1, 2))

        assert notifier.sent == [(PLACER_ID, OWNER_ID, "placer decorated your photo!")]

    def test_owner_decorating_own_post_is_silent(self, placement: PlacementEngine, notifier: RecordingSink):
        placement.place(IMAGE_ID, OWNER_ID, items(1))

        assert notifier.sent == []

    def test_failing_sink_does_not_fail_placement(self, db_session, post, stickers, caplog):
        caplog.set_level(logging.WARNING, logger="post_decor.services.placement")
        engine = PlacementEngine(db_session, notifier=ExplodingSink())

        placed = engine.place(IMAGE_ID, PLACER_ID, items(1))

        assert len(placed) == 1
        assert len(engine.list_by_image(IMAGE_ID)) == 1
        assert any(
            record.levelno == logging.WARNING and "Could not notify user" in record.getMessage()
            for record in caplog.records
        )


class TestUpdate:
    def test_placer_moves_decoration(self, placement: PlacementEngine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1, z_index=3))

        updated = placement.update(placed.id, PLACER_ID, Geometry(pos_x=50.0, pos_y=60.0, scale=0.5, rotation=90.0))

        assert (updated.pos_x, updated.pos_y, updated.scale, updated.rotation) == (50.0, 60.0, 0.5, 90.0)
        assert updated.z_index == 3
        assert updated.updated_at is not None

    def test_stranger_is_denied_and_nothing_moves(self, placement: PlacementEngine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1))

        with pytest.raises(PermissionDeniedError) as exc_info:
            placement.update(placed.id, STRANGER_ID, Geometry(pos_x=0.0, pos_y=0.0, scale=1.0, rotation=0.0))

        assert exc_info.value.reason == "not the placer"
        [stored] = placement.list_by_image(IMAGE_ID)
        assert (stored.pos_x, stored.pos_y) == (5.0, 7.0)

    def test_post_owner_may_not_move(self, placement: PlacementEngine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1))

        with pytest.raises(PermissionDeniedError):
            placement.update(placed.id, OWNER_ID, Geometry(pos_x=0.0, pos_y=0.0, scale=1.0, rotation=0.0))

    def test_missing_decoration(self, placement: PlacementEngine):
        with pytest.raises(NotFoundError) as exc_info:
            placement.update(999, PLACER_ID, Geometry(pos_x=0.0, pos_y=0.0, scale=1.0, rotation=0.0))
        assert exc_info.value.entity == "decoration"


class TestDelete:
    def test_post_owner_removes_others_sticker(self, placement: PlacementEngine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1))

        placement.delete(placed.id, OWNER_ID)

        assert placement.list_by_image(IMAGE_ID) == []

    def test_placer_removes_own_sticker(self, placement: PlacementEngine):
        first, second = placement.place(IMAGE_ID, PLACER_ID, items(1, 2))

        placement.delete(first.id, PLACER_ID)

        assert [d.id for d in placement.list_by_image(IMAGE_ID)] == [second.id]

    def test_stranger_is_denied(self, placement: PlacementEngine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1))

        with pytest.raises(PermissionDeniedError) as exc_info:
            placement.delete(placed.id, STRANGER_ID)

        assert exc_info.value.reason == "not the placer or post owner"
        assert len(placement.list_by_image(IMAGE_ID)) == 1

    def test_missing_decoration(self, placement: PlacementEngine):
        with pytest.raises(NotFoundError):
            placement.delete(999, OWNER_ID)


class TestCascades:
    def test_remove_for_image(self, placement: PlacementEngine):
        placement.place(IMAGE_ID, PLACER_ID, items(1, 2))
        placement.place(OTHER_IMAGE_ID, PLACER_ID, items(1))

        assert placement.remove_for_image(IMAGE_ID) == 2
        assert placement.list_by_image(IMAGE_ID) == []
        assert len(placement.list_by_image(OTHER_IMAGE_ID)) == 1

    def test_remove_for_post(self, placement: PlacementEngine):
        placement.place(IMAGE_ID, PLACER_ID, items(1, 2))
        placement.place(OTHER_IMAGE_ID, STRANGER_ID, items(1))

        assert placement.remove_for_post(POST_ID) == 3
        assert placement.list_by_post(POST_ID) == []

    def test_remove_for_post_without_decorations(self, placement: PlacementEngine):
        assert placement.remove_for_post(POST_ID) == 0


class TestRemovedDuringMutation:
    """A row deleted between lookup and write is reported as missing."""

    @pytest.fixture()
    def racing_engine(self, db_session, placement, notifier):
        return PlacementEngine(
            db_session,
            store=RemovedElsewhereRepository(db_session),
            notifier=notifier,
        )

    def test_update_reports_not_found(self, placement, racing_engine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1))

        with pytest.raises(NotFoundError) as exc_info:
            racing_engine.update(placed.id, PLACER_ID, Geometry(pos_x=1.0, pos_y=1.0, scale=1.0, rotation=0.0))

        assert exc_info.value.entity == "decoration"
        assert placement.list_by_image(IMAGE_ID) == []

    def test_delete_reports_not_found(self, placement, racing_engine):
        [placed] = placement.place(IMAGE_ID, PLACER_ID, items(1))

        with pytest.raises(NotFoundError):
            racing_engine.delete(placed.id, OWNER_ID)

        assert placement.list_by_image(IMAGE_ID) == []
