"""Version 1 API endpoints."""

from .endpoints import decorations_router

__all__ = ["decorations_router"]
