"""Decoration-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Geometry arrives from a client-owned canvas: every value must be a real
# number and scale must be positive, nothing else is bounded.
_FINITE = ConfigDict(allow_inf_nan=False)

# Identifiers are stored as signed 64-bit integers.
MAX_ID = 2**63 - 1


class DecorationGeometry(BaseModel):
    """Mutable placement fields of a decoration."""

    model_config = _FINITE

    pos_x: float = Field(..., description="Horizontal canvas coordinate")
    pos_y: float = Field(..., description="Vertical canvas coordinate")
    scale: float = Field(..., gt=0, description="Size multiplier, must be positive")
    rotation: float = Field(..., description="Rotation in degrees; the client wraps")


class DecorationItem(DecorationGeometry):
    """One sticker to place as part of a batch."""

    sticker_id: int = Field(..., ge=1, le=MAX_ID, description="Sticker asset to place")
    scale: float = Field(1.0, gt=0, description="Size multiplier, must be positive")
    rotation: float = Field(0.0, description="Rotation in degrees; the client wraps")
    z_index: int = Field(
        0,
        ge=-(2**31),
        le=2**31 - 1,
        description="Stacking order; ties keep insertion order",
    )


class DecorationBatchCreate(BaseModel):
    """Schema for placing several stickers on one image at once."""

    post_image_id: int = Field(
        ..., ge=1, le=MAX_ID, description="Image the stickers are placed on"
    )
    decorations: list[DecorationItem] = Field(..., min_length=1)


class DecorationUpdate(DecorationGeometry):
    """Schema for repositioning an existing decoration.

    All four geometric fields are required; the stored values are replaced.
    """


class DecorationResponse(BaseModel):
    """Schema for decoration information returned by the API."""

    decoration_id: int
    post_id: int
    post_image_id: int
    user_id: int
    sticker_id: int
    sticker_name: str | None = None
    sticker_image_url: str | None = None
    pos_x: float
    pos_y: float
    scale: float
    rotation: float
    z_index: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
