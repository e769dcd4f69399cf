"""Decoration endpoints for the Post Decor API."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from post_decor.schemas.decoration import (
    DecorationBatchCreate,
    DecorationResponse,
    DecorationUpdate,
    MAX_ID,
)
from post_decor.services.errors import (
    DecorationError,
    InvalidReferenceError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
)
from post_decor.services.placement import DecorationInput, Geometry, PlacementEngine
from post_decor.services.projection import to_decoration_response, to_decoration_responses

from ..dependencies import CurrentUserIdDep, NotificationSinkDep, SessionDep

router = APIRouter(prefix="/decorations", tags=["decorations"])
logger = logging.getLogger(__name__)

# Out-of-range ids are rejected before they reach the database driver.
IdPath = Annotated[int, Path(ge=1, le=MAX_ID)]

_ERROR_STATUS: dict[type[DecorationError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidReferenceError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    QuotaExceededError: status.HTTP_409_CONFLICT,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
}


def _to_http_error(exc: DecorationError) -> HTTPException:
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=str(exc))


@router.post(
    "/",
    response_model=list[DecorationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def place_decorations(
    batch: DecorationBatchCreate,
    current_user_id: CurrentUserIdDep,
    db: SessionDep,
    notifier: NotificationSinkDep,
) -> list[DecorationResponse]:
    """Place a batch of stickers on one post image.

    Args:
        batch: Target image and the stickers to place on it
        current_user_id: Authenticated caller, recorded as the placer
        db: Database session
        notifier: Sink used to tell the post owner about the new stickers

    Returns:
        The created decorations in request order

    Raises:
        HTTPException: If the quota is exceeded, the image or user is missing,
                      or a sticker id does not exist
    """
    logger.info(
        "Placement request for %d stickers on image %s",
        len(batch.decorations),
        batch.post_image_id,
    )
    items = [DecorationInput(**item.model_dump()) for item in batch.decorations]
    engine = PlacementEngine(db, notifier=notifier)
    try:
        decorations = engine.place(batch.post_image_id, current_user_id, items)
    except DecorationError as exc:
        raise _to_http_error(exc) from exc
    return to_decoration_responses(decorations)


@router.get("/image/{image_id}", response_model=list[DecorationResponse])
async def list_image_decorations(
    image_id: IdPath,
    db: SessionDep,
) -> list[DecorationResponse]:
    """List the decorations placed on one image, in stacking order."""
    engine = PlacementEngine(db)
    return to_decoration_responses(engine.list_by_image(image_id))


@router.get("/post/{post_id}", response_model=list[DecorationResponse])
async def list_post_decorations(
    post_id: IdPath,
    db: SessionDep,
) -> list[DecorationResponse]:
    """List the decorations on every image of a post for page hydration."""
    engine = PlacementEngine(db)
    return to_decoration_responses(engine.list_by_post(post_id))


@router.put("/{decoration_id}", response_model=DecorationResponse)
async def update_decoration(
    decoration_id: IdPath,
    update_data: DecorationUpdate,
    current_user_id: CurrentUserIdDep,
    db: SessionDep,
) -> DecorationResponse:
    """Move, resize or rotate a decoration.

    Args:
        decoration_id: Decoration to change
        update_data: New position, scale and rotation
        current_user_id: Authenticated caller (must be the placer)
        db: Database session

    Raises:
        HTTPException: If the decoration is missing or the caller is not the placer
    """
    engine = PlacementEngine(db)
    geometry = Geometry(**update_data.model_dump())
    try:
        decoration = engine.update(decoration_id, current_user_id, geometry)
    except DecorationError as exc:
        raise _to_http_error(exc) from exc
    return to_decoration_response(decoration)


@router.delete("/{decoration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_decoration(
    decoration_id: IdPath,
    current_user_id: CurrentUserIdDep,
    db: SessionDep,
) -> None:
    """Remove a decoration (placer or post owner only).

    Raises:
        HTTPException: If the decoration is missing or the caller may not remove it
    """
    engine = PlacementEngine(db)
    try:
        engine.delete(decoration_id, current_user_id)
    except DecorationError as exc:
        raise _to_http_error(exc) from exc
