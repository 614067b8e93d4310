# storage/memory.py

"""
In-memory stores, used by tests and by callers that bring their own persistence.

Gradebooks are kept in serialized form, so every `get()` hands out a fresh object and no caller
can modify the stored state without going through `put()`.
"""

from __future__ import annotations

import logging
from typing import Iterable

from core.response import ErrorCode, Response
from models.gradebook import Gradebook
from models.user import Student
from storage.repository import check_write, student_matches

logger = logging.getLogger(__name__)


class InMemoryGradebookRepository:

    def __init__(self, gradebooks: Iterable[Gradebook] = ()):
        # id -> (version, serialized gradebook)
        self._records: dict[str, tuple[int, dict]] = {}

        for gradebook in gradebooks:
            self.put(gradebook)

    def version_of(self, key: str) -> int:
        record = self._records.get(key)
        return record[0] if record else 0

    def get(self, key: str) -> Response:
        record = self._records.get(key)

        if record is None:
            return Response.fail(
                detail=f"No gradebook found for {key}.",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        version, data = record

        return Response.succeed(
            data={
                "gradebook": Gradebook.from_dict(data),
                "version": version,
            },
        )

    def put(self, gradebook: Gradebook, expected_version: int | None = None) -> Response:
        key = gradebook.id
        stored_version, stored = self._records.get(key, (0, None))
        incoming = gradebook.to_dict()

        refusal = check_write(key, stored, stored_version, incoming, expected_version)
        if refusal:
            return refusal

        version = stored_version + 1
        self._records[key] = (version, incoming)

        logger.debug("Stored gradebook %s at version %s", key, version)

        return Response.succeed(
            detail=f"Gradebook {key} saved.",
            data={
                "gradebook": Gradebook.from_dict(incoming),
                "version": version,
            },
        )

    def list_gradebooks(
        self,
        subject: str | None = None,
        grade: str | None = None,
        group: str | None = None,
        period: str | None = None,
    ) -> list[Gradebook]:
        gradebooks = (Gradebook.from_dict(data) for _, data in self._records.values())
        return [
            gb
            for gb in gradebooks
            if gb.matches(subject=subject, grade=grade, group=group, period=period)
        ]


class InMemoryStudentDirectory:

    def __init__(self, students: Iterable[Student] = ()):
        self._students: dict[str, Student] = {s.id: s for s in students}

    def add_student(self, student: Student) -> Response:
        if student.id in self._students:
            return Response.fail(
                detail=f"A student with the id '{student.id}' already exists.",
                error=ErrorCode.VALIDATION_FAILED,
            )

        self._students[student.id] = student

        return Response.succeed(
            detail=f"Student {student.name} successfully added.",
            data={
                "record": student,
            },
        )

    def get_student(self, student_id: str) -> Response:
        student = self._students.get(student_id)

        if student is None:
            return Response.fail(
                detail=f"No student found for {student_id}.",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        return Response.succeed(
            data={
                "record": student,
            },
        )

    def list_students(
        self,
        grade: str | None = None,
        group: str | None = None,
        jornada: str | None = None,
    ) -> list[Student]:
        return [
            s
            for s in self._students.values()
            if student_matches(s, grade=grade, group=group, jornada=jornada)
        ]
