"""Map stored decorations onto the shapes returned to callers."""
from __future__ import annotations

from collections.abc import Iterable

from post_decor.models import PostDecoration
from post_decor.schemas.decoration import DecorationResponse


def to_decoration_response(decoration: PostDecoration) -> DecorationResponse:
    """Convert a PostDecoration ORM instance to an API schema."""
    sticker = decoration.sticker
    return DecorationResponse.model_construct(
        decoration_id=decoration.id,
        post_id=decoration.post_id,
        post_image_id=decoration.post_image_id,
        user_id=decoration.user_id,
        sticker_id=decoration.sticker_id,
        sticker_name=sticker.name if sticker is not None else None,
        sticker_image_url=sticker.image_url if sticker is not None else None,
        pos_x=float(decoration.pos_x),
        pos_y=float(decoration.pos_y),
        scale=float(decoration.scale),
        rotation=float(decoration.rotation),
        z_index=int(decoration.z_index),
        created_at=decoration.created_at,
        updated_at=decoration.updated_at,
    )


def to_decoration_responses(decorations: Iterable[PostDecoration]) -> list[DecorationResponse]:
    """Convert a sequence of decorations, preserving order."""
    return [to_decoration_response(decoration) for decoration in decorations]


__all__ = ["to_decoration_response", "to_decoration_responses"]
