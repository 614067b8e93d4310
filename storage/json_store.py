# storage/json_store.py

"""
JSON-file stores rooted at a data directory (`GradingSettings.data_dir` by default).

Layout:

    <data_dir>/
        students.json               list of serialized students
        gradebooks/
            <gradebook id>.json     {"version": int, "gradebook": {...}}, id percent-encoded

Every gradebook is its own document, so writing one never rewrites another. Files are written
with `indent=2, sort_keys=True` and replaced atomically through a temporary file in the same
directory.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Iterable
from urllib.parse import quote

from core.config import get_settings
from core.response import ErrorCode, Response
from models.gradebook import Gradebook
from models.user import Student
from storage.repository import check_write, student_matches

logger = logging.getLogger(__name__)

GRADEBOOKS_DIRNAME = "gradebooks"
STUDENTS_FILENAME = "students.json"


def read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: str, data: list | dict) -> None:
    """
    Serializes data to JSON and replaces the file at `path` in one step.

    Notes:
        - This intentionally overwrites existing data.
    """
    tmp_path = f"{path}.tmp"

    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)

    os.replace(tmp_path, path)


def safe_filename(key: str) -> str:
    """
    Percent-encodes a gradebook id into a file name; distinct ids always map to distinct files.
    """
    return quote(key, safe="") + ".json"


class JsonGradebookRepository:

    def __init__(self, data_dir: str | None = None):
        self._dir_path = os.path.join(
            data_dir or get_settings().data_dir, GRADEBOOKS_DIRNAME
        )
        os.makedirs(self._dir_path, exist_ok=True)

    @property
    def dir_path(self) -> str:
        return self._dir_path

    def _path_for(self, key: str) -> str:
        return os.path.join(self._dir_path, safe_filename(key))

    def _read_record(self, path: str) -> tuple[int, dict]:
        raw = read_json(path)

        if not isinstance(raw, dict) or not isinstance(raw.get("gradebook"), dict):
            raise ValueError(f"{os.path.basename(path)} must contain a gradebook document.")

        return int(raw.get("version", 0)), raw["gradebook"]

    def version_of(self, key: str) -> int:
        path = self._path_for(key)
        return self._read_record(path)[0] if os.path.exists(path) else 0

    def get(self, key: str) -> Response:
        """
        Loads one gradebook from disk.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the gradebook was found and loaded.
                - error (ErrorCode | str | None):
                    - `ErrorCode.NOT_FOUND` if no file exists for the key.
                    - `ErrorCode.INVALID_INPUT` if the file is not valid JSON.
                    - `ErrorCode.INVALID_FIELD_VALUE` if the content fails validation.
                    - `ErrorCode.MISSING_REQUIRED_FIELD` if a required key is missing.
                    - `ErrorCode.INTERNAL_ERROR` if the file cannot be read.
                - status_code (int | None): 200 on success, 404 if not found, 400 on other failures.
                - data (dict | None): On success, "gradebook" (Gradebook) and "version" (int).
        """
        path = self._path_for(key)

        if not os.path.exists(path):
            return Response.fail(
                detail=f"No gradebook found for {key}.",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        try:
            version, data = self._read_record(path)
            gradebook = Gradebook.from_dict(data)

        except json.JSONDecodeError as e:
            return Response.fail(
                detail=f"Failed to parse JSON data: {e}",
                error=ErrorCode.INVALID_INPUT,
            )

        except ValueError as e:
            return Response.fail(
                detail=f"Invalid field value: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        except KeyError as e:
            return Response.fail(
                detail=f"Missing required field: {e}",
                error=ErrorCode.MISSING_REQUIRED_FIELD,
            )

        except OSError as e:
            return Response.fail(
                detail=f"Failed to read data from disk: {e}",
                error=ErrorCode.INTERNAL_ERROR,
            )

        else:
            return Response.succeed(
                data={
                    "gradebook": gradebook,
                    "version": version,
                },
            )

    def put(self, gradebook: Gradebook, expected_version: int | None = None) -> Response:
        """
        Writes one gradebook to disk, bumping its version.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the gradebook was written.
                - error (ErrorCode | str | None):
                    - `ErrorCode.VERSION_CONFLICT` if `expected_version` does not match the stored version.
                    - `ErrorCode.LOCK_VIOLATION` if the stored gradebook is locked and its content would change.
                    - `ErrorCode.INTERNAL_ERROR` if the file cannot be read or written.
                - status_code (int | None): 200 on success, 409 on conflict, 423 if locked, 400 otherwise.
                - data (dict | None): On success, "gradebook" (Gradebook) and "version" (int).
        """
        key = gradebook.id
        path = self._path_for(key)
        incoming = gradebook.to_dict()

        try:
            stored_version, stored = (
                self._read_record(path) if os.path.exists(path) else (0, None)
            )

            refusal = check_write(key, stored, stored_version, incoming, expected_version)
            if refusal:
                return refusal

            version = stored_version + 1
            write_json(path, {"version": version, "gradebook": incoming})

        except (json.JSONDecodeError, ValueError) as e:
            return Response.fail(
                detail=f"Stored gradebook {key} is unreadable: {e}",
                error=ErrorCode.INVALID_INPUT,
            )

        except OSError as e:
            return Response.fail(
                detail=f"Failed to write data to disk: {e}",
                error=ErrorCode.INTERNAL_ERROR,
            )

        logger.debug("Wrote gradebook %s at version %s to %s", key, version, path)

        return Response.succeed(
            detail=f"Gradebook {key} successfully saved to disk.",
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
        """
        Loads every readable gradebook matching the filters. Unreadable files are logged and skipped.
        """
        gradebooks = []

        for filename in sorted(os.listdir(self._dir_path)):
            if not filename.endswith(".json"):
                continue

            path = os.path.join(self._dir_path, filename)

            try:
                _, data = self._read_record(path)
                gradebook = Gradebook.from_dict(data)

            except (OSError, KeyError, ValueError) as e:
                logger.error("Skipping unreadable gradebook file %s: %s", path, e)
                continue

            if gradebook.matches(subject=subject, grade=grade, group=group, period=period):
                gradebooks.append(gradebook)

        return gradebooks


class JsonStudentDirectory:

    def __init__(self, data_dir: str | None = None):
        data_dir = data_dir or get_settings().data_dir
        os.makedirs(data_dir, exist_ok=True)
        self._path = os.path.join(data_dir, STUDENTS_FILENAME)

    def _load(self) -> dict[str, Student]:
        if not os.path.exists(self._path):
            return {}

        data = read_json(self._path)
        if not isinstance(data, list):
            raise ValueError(f"Expected {STUDENTS_FILENAME} to contain a list.")

        students = (Student.from_dict(record) for record in data)
        return {s.id: s for s in students}

    def _save(self, students: Iterable[Student]) -> None:
        write_json(self._path, [s.to_dict() for s in students])

    def add_student(self, student: Student) -> Response:
        try:
            students = self._load()

            if student.id in students:
                return Response.fail(
                    detail=f"A student with the id '{student.id}' already exists.",
                    error=ErrorCode.VALIDATION_FAILED,
                )

            students[student.id] = student
            self._save(students.values())

        except (json.JSONDecodeError, KeyError, ValueError) as e:
            return Response.fail(
                detail=f"Invalid student data: {e}",
                error=ErrorCode.INVALID_INPUT,
            )

        except OSError as e:
            return Response.fail(
                detail=f"Failed to write data to disk: {e}",
                error=ErrorCode.INTERNAL_ERROR,
            )

        return Response.succeed(
            detail=f"Student {student.name} successfully added.",
            data={
                "record": student,
            },
        )

    def get_student(self, student_id: str) -> Response:
        student = self._load().get(student_id)

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
            for s in self._load().values()
            if student_matches(s, grade=grade, group=group, jornada=jornada)
        ]
