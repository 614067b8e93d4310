# engine/lifecycle.py

"""
Lock state machine for gradebooks.

A gradebook is either OPEN (initial state) or LOCKED. Only administrative actors
(see `models.user.can_administer`) may move it between the two states. While LOCKED
every mutation on the gradebook is rejected by the gradebook itself; reads and
score computation are unaffected.

Locks are per gradebook. Locking one gradebook has no effect on any other.

The functions here mutate the gradebook they are given. `engine.service` always
passes a copy and persists it, so callers holding the stored gradebook never see
a half-applied transition.
"""

from __future__ import annotations

import logging
from enum import Enum

from core.response import ErrorCode, Response
from models.gradebook import Gradebook
from models.user import User, can_administer

logger = logging.getLogger(__name__)


class LockState(Enum):
    OPEN = "OPEN"
    LOCKED = "LOCKED"


def lock_state(gradebook: Gradebook) -> LockState:
    return LockState.LOCKED if gradebook.is_locked else LockState.OPEN


def _transition(gradebook: Gradebook, actor: User | None, target: LockState) -> Response:
    """
    Moves the gradebook to the target state on behalf of an actor.

    Returns:
        Response: A structured response with the following contract:
            - success (bool):
                - True if the gradebook is in the target state afterwards.
                - False if the actor is not allowed to change the lock state.
            - detail (str | None):
                - A human-readable description of the outcome.
            - error (ErrorCode | str | None):
                - `ErrorCode.PERMISSION_DENIED` if the actor lacks an administrative role.
            - status_code (int | None):
                - 200 on success
                - 403 if permission is denied
            - data (dict | None): Payload with the following keys:
                - On success:
                    - "gradebook" (Gradebook): The gradebook in its new state.
                    - "state" (LockState): The resulting state.
                    - "changed" (bool): False if the gradebook was already in the target state.
                - On failure:
                    - None

    Notes:
        - Requesting the current state is a successful no-op, reported with `changed=False`.
    """
    if not can_administer(actor):
        logger.warning(
            "Permission denied: %s tried to set %s on %s",
            actor.id if actor else None,
            target.value,
            gradebook.id,
        )
        return Response.fail(
            detail=f"Only administrative roles may set a gradebook to {target.value}.",
            error=ErrorCode.PERMISSION_DENIED,
            status_code=403,
        )

    if lock_state(gradebook) is target:
        return Response.succeed(
            detail=f"No changes made - gradebook {gradebook.id} is already {target.value}.",
            data={
                "gradebook": gradebook,
                "state": target,
                "changed": False,
            },
        )

    gradebook.set_locked(target is LockState.LOCKED)

    logger.info("Gradebook %s set to %s by %s", gradebook.id, target.value, actor.id)

    return Response.succeed(
        detail=f"Gradebook {gradebook.id} is now {target.value}.",
        data={
            "gradebook": gradebook,
            "state": target,
            "changed": True,
        },
    )


def lock(gradebook: Gradebook, actor: User | None) -> Response:
    return _transition(gradebook, actor, LockState.LOCKED)


def unlock(gradebook: Gradebook, actor: User | None) -> Response:
    return _transition(gradebook, actor, LockState.OPEN)


def toggle_lock(gradebook: Gradebook, actor: User | None) -> Response:
    target = LockState.OPEN if gradebook.is_locked else LockState.LOCKED
    return _transition(gradebook, actor, target)
