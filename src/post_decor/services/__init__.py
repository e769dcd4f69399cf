"""Business logic services for the Post Decor application."""

from .authorization import MutationAction, Verdict, authorize_mutation
from .errors import (
    DecorationError,
    InvalidReferenceError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
)
from .placement import DecorationInput, Geometry, PlacementEngine

__all__ = [
    "DecorationError",
    "DecorationInput",
    "Geometry",
    "InvalidReferenceError",
    "MutationAction",
    "NotFoundError",
    "PermissionDeniedError",
    "PlacementEngine",
    "QuotaExceededError",
    "Verdict",
    "authorize_mutation",
]
