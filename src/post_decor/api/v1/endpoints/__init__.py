"""API endpoint modules for version 1."""

from .decorations import router as decorations_router

__all__ = ["decorations_router"]
