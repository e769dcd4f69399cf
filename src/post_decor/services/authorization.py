"""Who may change or remove a placed decoration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

REASON_NOT_PLACER = "not the placer"
REASON_NOT_PLACER_OR_OWNER = "not the placer or post owner"


class MutationAction(Enum):
    """Mutations a caller can request on an existing decoration."""

    UPDATE = "update"
    DELETE = "delete"


class DecorationOwnership(Protocol):
    """The two identities that can hold rights over a decoration."""

    @property
    def user_id(self) -> int: ...

    @property
    def post_owner_id(self) -> int: ...


@dataclass(frozen=True)
class Verdict:
    """Outcome of an authorization check."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> Verdict:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> Verdict:
        return cls(allowed=False, reason=reason)


def authorize_mutation(
    decoration: DecorationOwnership,
    requesting_user_id: int,
    action: MutationAction,
) -> Verdict:
    """Decide whether ``requesting_user_id`` may apply ``action``.

    Only the placer may reposition a decoration. Removal is also open to the
    owner of the post, who can clear stickers other people left on it.
    """
    if requesting_user_id == decoration.user_id:
        return Verdict.allow()

    if action is MutationAction.UPDATE:
        return Verdict.deny(REASON_NOT_PLACER)

    if requesting_user_id == decoration.post_owner_id:
        return Verdict.allow()
    return Verdict.deny(REASON_NOT_PLACER_OR_OWNER)


__all__ = [
    "DecorationOwnership",
    "MutationAction",
    "REASON_NOT_PLACER",
    "REASON_NOT_PLACER_OR_OWNER",
    "Verdict",
    "authorize_mutation",
]
