"""Shared API dependencies for caller identity and common services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from post_decor.core.security import InvalidTokenError, decode_user_id
from post_decor.db.session import get_db
from post_decor.services.notifications import NotificationSink, get_notification_sink

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> int:
    """Return the caller's user id from the bearer token.

    The identity provider is trusted: the id is not checked against the user
    table here. Placement resolves the user itself and reports a missing one.

    Raises:
        HTTPException: If the token is invalid or carries no usable subject
    """
    try:
        return decode_user_id(credentials.credentials)
    except InvalidTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


def get_notification_sink_dep() -> NotificationSink:
    """Return the shared notification sink."""
    return get_notification_sink()


# Type aliases for identity and notification dependencies
CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
NotificationSinkDep = Annotated[NotificationSink, Depends(get_notification_sink_dep)]
