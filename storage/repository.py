# storage/repository.py

"""
Collaborator interfaces the engine depends on, plus the write rules every store enforces.

The engine never reaches for storage on its own. A `GradebookRepository` and a `StudentDirectory`
are injected into `engine.service`, and the reporting functions only see what those return.

Every stored gradebook carries an integer version, starting at 1 and bumped on each write.
`put(gradebook, expected_version=...)` is a compare-and-swap on that version; pass 0 to require
that the gradebook does not exist yet, or None to write unconditionally.

Stores also refuse, independently of the gradebook model, to overwrite a locked gradebook
with anything but a change of the lock flag itself.
"""

from __future__ import annotations

import logging
from typing import Protocol

from core.response import ErrorCode, Response
from models.gradebook import Gradebook
from models.user import Student

logger = logging.getLogger(__name__)


class GradebookRepository(Protocol):
    def get(self, key: str) -> Response:
        """
        On success, data holds "gradebook" (an independent `Gradebook` copy) and "version" (int).
        Fails with `ErrorCode.NOT_FOUND` (404) if nothing is stored under the key.
        """
        ...

    def put(self, gradebook: Gradebook, expected_version: int | None = None) -> Response:
        """
        On success, data holds "gradebook" and the new "version".
        Fails with `ErrorCode.VERSION_CONFLICT` (409) or `ErrorCode.LOCK_VIOLATION` (423).
        """
        ...

    def list_gradebooks(
        self,
        subject: str | None = None,
        grade: str | None = None,
        group: str | None = None,
        period: str | None = None,
    ) -> list[Gradebook]: ...


class StudentDirectory(Protocol):
    def get_student(self, student_id: str) -> Response: ...

    def list_students(
        self,
        grade: str | None = None,
        group: str | None = None,
        jornada: str | None = None,
    ) -> list[Student]: ...


def student_matches(
    student: Student,
    grade: str | None = None,
    group: str | None = None,
    jornada: str | None = None,
) -> bool:
    return (
        (grade is None or student.grade == grade)
        and (group is None or student.group == group)
        and (jornada is None or student.jornada == jornada)
    )


def _without_lock_flag(data: dict) -> dict:
    return {k: v for k, v in data.items() if k != "is_locked"}


def check_write(
    key: str,
    stored: dict | None,
    stored_version: int,
    incoming: dict,
    expected_version: int | None,
) -> Response | None:
    """
    Applies the shared write rules to a pending `put`.

    Args:
        key (str): The gradebook id being written.
        stored (dict | None): The serialized gradebook currently stored, or None if there is none.
        stored_version (int): The current version, 0 if nothing is stored.
        incoming (dict): The serialized gradebook about to be written.
        expected_version (int | None): The version the caller read, or None to skip the check.

    Returns:
        A failed `Response` if the write must be refused, otherwise None.
    """
    if expected_version is not None and expected_version != stored_version:
        logger.warning(
            "Version conflict on %s: expected %s, stored %s",
            key,
            expected_version,
            stored_version,
        )
        return Response.fail(
            detail=f"Gradebook {key} was modified concurrently (expected version {expected_version}, found {stored_version}).",
            error=ErrorCode.VERSION_CONFLICT,
            status_code=409,
        )

    if (
        stored is not None
        and stored.get("is_locked")
        and _without_lock_flag(stored) != _without_lock_flag(incoming)
    ):
        logger.warning("Storage refused a content change to locked gradebook %s", key)
        return Response.fail(
            detail=f"The gradebook {key} is locked. Only the lock flag may change.",
            error=ErrorCode.LOCK_VIOLATION,
            status_code=423,
        )

    return None
