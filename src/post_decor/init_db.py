"""Create the schema and seed a starter sticker catalog."""

import logging

from sqlalchemy import func, select

from post_decor.core.log_config import configure_logging
from post_decor.db.session import SessionLocal, create_tables
from post_decor.models import Sticker

logger = logging.getLogger(__name__)

DEFAULT_STICKERS = (
    ("Sparkles", "/stickers/activities/sparkles.png", "activities"),
    ("Heart", "/stickers/smileys/heart.png", "smileys"),
    ("Star", "/stickers/symbols/star.png", "symbols"),
    ("Party Popper", "/stickers/activities/party-popper.png", "activities"),
)


def seed_stickers() -> int:
    """Insert the default stickers if the catalog is empty; return rows added."""
    with SessionLocal() as db:
        existing = db.scalar(select(func.count()).select_from(Sticker)) or 0
        if existing:
            return 0
        db.add_all(
            Sticker(name=name, image_url=image_url, category=category)
            for name, image_url, category in DEFAULT_STICKERS
        )
        db.commit()
    return len(DEFAULT_STICKERS)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    added = seed_stickers()
    logger.info("Database initialized (%d stickers seeded)", added)


if __name__ == "__main__":
    configure_logging()
    init_db()
