"""Logging setup for the Post Decor service."""

from __future__ import annotations

import logging

from post_decor.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: int | str | None = None) -> None:
    """Configure root logging with a single stream handler."""
    desired_level = level or settings.log_level
    logging.root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=desired_level, handlers=[handler])

    # SQL echo is controlled by SQL_DEBUG on the engine itself.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["configure_logging", "LOG_FORMAT"]
