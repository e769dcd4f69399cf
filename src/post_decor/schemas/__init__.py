"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .decoration import (
    DecorationBatchCreate,
    DecorationGeometry,
    DecorationItem,
    DecorationResponse,
    DecorationUpdate,
    MAX_ID,
)

__all__ = [
    "DecorationBatchCreate",
    "DecorationGeometry",
    "DecorationItem",
    "DecorationResponse",
    "DecorationUpdate",
    "MAX_ID",
]
