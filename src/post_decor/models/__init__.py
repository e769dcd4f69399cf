"""SQLAlchemy models for the Post Decor service."""

from .decoration import PostDecoration
from .post import Post, PostImage
from .sticker import Sticker
from .user import User

__all__ = [
    "Post", "PostImage",
    "PostDecoration",
    "Sticker",
    "User",
]
