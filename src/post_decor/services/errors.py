"""Exceptions raised by the decoration placement engine.

Every error here is recoverable: the caller may adjust the request and retry.
The HTTP layer maps each class to its own status code.
"""

from __future__ import annotations

from collections.abc import Iterable


class DecorationError(RuntimeError):
    """Base exception for decoration placement failures."""


class NotFoundError(DecorationError):
    """Raised when a referenced image, user or decoration does not exist."""

    def __init__(self, entity: str, identifier: int) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity.capitalize()} {identifier} not found")


class InvalidReferenceError(DecorationError):
    """Raised when a placement batch names stickers that do not exist."""

    def __init__(self, missing_sticker_ids: Iterable[int]) -> None:
        self.missing_sticker_ids = sorted(set(missing_sticker_ids))
        ids = ", ".join(str(sticker_id) for sticker_id in self.missing_sticker_ids)
        super().__init__(f"Unknown sticker ids: {ids}")


class QuotaExceededError(DecorationError):
    """Raised when a batch would push a user past the per-image ceiling."""

    def __init__(self, *, existing: int, requested: int, limit: int) -> None:
        self.existing = existing
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"Cannot place {requested} more decorations on this image "
            f"({existing} already placed, limit {limit})"
        )


class PermissionDeniedError(DecorationError):
    """Raised when the caller may not mutate a decoration."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


__all__ = [
    "DecorationError",
    "InvalidReferenceError",
    "NotFoundError",
    "PermissionDeniedError",
    "QuotaExceededError",
]
