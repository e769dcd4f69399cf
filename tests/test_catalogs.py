# tests/test_catalogs.py
"""Tests for the SQL-backed reference catalogs."""

from post_decor.services.catalogs import ImageRef, SqlImageCatalog, SqlStickerCatalog, SqlUserCatalog

from tests.conftest import IMAGE_ID, OWNER_ID, PLACER_ID, POST_ID


def test_image_resolves_owning_post(db_session, post):
    ref = SqlImageCatalog(db_session).get(IMAGE_ID)
    assert ref == ImageRef(id=IMAGE_ID, post_id=POST_ID, post_owner_id=OWNER_ID)


def test_missing_image(db_session, post):
    assert SqlImageCatalog(db_session).get(999) is None


def test_user_lookup(db_session, users):
    catalog = SqlUserCatalog(db_session)
    assert catalog.get(PLACER_ID).nickname == "placer"
    assert catalog.get(999) is None


def test_sticker_lookup_skips_unknown_ids(db_session, stickers):
    found = SqlStickerCatalog(db_session).get_many([2, 1, 50])
    assert sorted(sticker.id for sticker in found) == [1, 2]


def test_sticker_lookup_with_no_ids(db_session, stickers):
    assert SqlStickerCatalog(db_session).get_many([]) == []
