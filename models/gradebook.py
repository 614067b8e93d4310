# models/gradebook.py

"""
The Gradebook model is the unit of work for one subject taught to one grade/group during one academic period,
and the only source of truth for that subject's grades.

A Gradebook is identified by its natural key (subject, grade, group, period). It holds the ordered set of
`GradeItem` records, the `StudentScore` records against them, free-text observations per student, period-level
descriptor references, and the `is_locked` flag.

Final scores and performance tiers are never stored here. They are computed on read by `engine.calculator`
and `engine.classifier`.

Every manipulator returns a `Response` and refuses to run while the gradebook is locked. Validation failures
are reported through the `Response`, never raised. Lock transitions themselves are governed by
`engine.lifecycle`, which is the only caller of `set_locked()`.
"""

from __future__ import annotations

import copy
import logging
import math
from typing import Any, Callable, Iterable

from core.config import get_settings
from core.formatters import parse_score_input
from core.response import ErrorCode, PolicyWarning, Response
from core.utils import gradebook_key, normalize
from models.grade_item import GradeItem
from models.student_score import StudentScore
from models.types import RecordType

logger = logging.getLogger(__name__)


class Gradebook:

    def __init__(
        self,
        subject: str,
        grade: str,
        group: str,
        period: str,
        owner_id: str,
    ):
        self._subject = subject
        self._grade = grade
        self._group = group
        self._period = period
        self._owner_id = owner_id
        self._items: dict[str, GradeItem] = {}
        self._scores: dict[tuple[str, str], StudentScore] = {}
        self._observations: dict[str, str] = {}
        self._period_descriptor_ids: list[str] = []
        self._is_locked: bool = False

    # === properties ===

    # --- identity ---

    @property
    def id(self) -> str:
        return gradebook_key(self._subject, self._grade, self._group, self._period)

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (self._subject, self._grade, self._group, self._period)

    @property
    def subject(self) -> str:
        return self._subject

    @property
    def grade(self) -> str:
        return self._grade

    @property
    def group(self) -> str:
        return self._group

    @property
    def period(self) -> str:
        return self._period

    @property
    def owner_id(self) -> str:
        return self._owner_id

    # --- core data structures ---

    # records handed out are detached copies; edits go through the manipulators below

    @property
    def items(self) -> list[GradeItem]:
        return [copy.deepcopy(item) for item in self._items.values()]

    @property
    def scores(self) -> list[StudentScore]:
        return [copy.deepcopy(score) for score in self._scores.values()]

    @property
    def observations(self) -> dict[str, str]:
        return dict(self._observations)

    @property
    def period_descriptor_ids(self) -> list[str]:
        return list(self._period_descriptor_ids)

    @property
    def total_weight(self) -> float:
        return sum(item.weight for item in self._items.values())

    # --- status markers ---

    @property
    def is_locked(self) -> bool:
        return self._is_locked

    @property
    def lock_status(self) -> str:
        return "'LOCKED'" if self._is_locked else "'OPEN'"

    def weight_warnings(self) -> list[PolicyWarning]:
        """
        Lists the policy warnings raised by the current item weights.

        A total above the configured threshold (1.0 by default) is allowed; the warning is informational and
        has no effect on score calculation, which normalizes by the graded weight anyway.
        """
        threshold = get_settings().weight_warning_threshold
        total = self.total_weight

        if total > threshold and not math.isclose(total, threshold):
            return [PolicyWarning.WEIGHT_OVER_100]

        return []

    # === public classmethods ===

    @classmethod
    def create(
        cls,
        subject: str,
        grade: str,
        group: str,
        period: str,
        owner_id: str,
    ) -> Response:
        """
        Creates and returns a new, empty and unlocked `Gradebook` instance.

        Args:
            subject (str): The subject name.
            grade (str): The grade level (e.g. "10º").
            group (str): The group within the grade (e.g. "A").
            period (str): The academic period.
            owner_id (str): The id of the instructor of record.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the `Gradebook` object was created successfully.
                    - False if any key field is missing or blank.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, None.
                - error (ErrorCode | str | None):
                    - `ErrorCode.INVALID_FIELD_VALUE` if a key field is blank.
                    - `ErrorCode.MISSING_REQUIRED_FIELD` if a key field is not a string.
                - status_code (int | None):
                    - 200 on success
                    - 400 on failure
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "gradebook" (Gradebook): The newly created `Gradebook` object.
                    - On failure:
                        - None

        Notes:
            - This method does not persist anything. Storage is the caller's concern (see `engine.service`).
        """
        try:
            key = cls.normalize_key(subject, grade, group, period)
            cls.validate_key_field("owner_id", owner_id)

            gradebook = cls(*key, owner_id=owner_id.strip())

        except ValueError as e:
            return Response.fail(
                detail=f"Invalid field value: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        except TypeError as e:
            return Response.fail(
                detail=f"Missing required field: {e}",
                error=ErrorCode.MISSING_REQUIRED_FIELD,
            )

        else:
            return Response.succeed(
                data={
                    "gradebook": gradebook,
                },
            )

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "subject": self._subject,
            "grade": self._grade,
            "group": self._group,
            "period": self._period,
            "owner_id": self._owner_id,
            "items": [item.to_dict() for item in self._items.values()],
            "scores": [score.to_dict() for score in self._scores.values()],
            "observations": dict(self._observations),
            "period_descriptor_ids": list(self._period_descriptor_ids),
            "is_locked": self._is_locked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Gradebook:
        """
        Rebuilds a `Gradebook` from its serialized form.

        Raises:
            - KeyError:
                - If a required top-level key is missing.
            - ValueError:
                - If an item or score record is malformed or fails validation.

        Notes:
            - Items and scores are imported before the lock flag is applied, so locked gradebooks load intact.
        """
        gradebook = cls(
            subject=data["subject"],
            grade=data["grade"],
            group=data["group"],
            period=data["period"],
            owner_id=data["owner_id"],
        )

        gradebook._import_records(
            data=data.get("items", []),
            from_dict_fn=GradeItem.from_dict,
            add_fn=gradebook.add_item,
            record_name="grade item",
        )
        gradebook._import_records(
            data=data.get("scores", []),
            from_dict_fn=StudentScore.from_dict,
            add_fn=gradebook._add_score_record,
            record_name="score",
        )

        gradebook._observations = {
            str(student_id): text
            for student_id, text in data.get("observations", {}).items()
        }
        gradebook._period_descriptor_ids = list(
            dict.fromkeys(data.get("period_descriptor_ids", []))
        )
        gradebook._is_locked = bool(data.get("is_locked", False))

        return gradebook

    def copy(self) -> Gradebook:
        """
        Returns an independent deep copy, used for replace-on-write mutation.
        """
        return copy.deepcopy(self)

    def _import_records(
        self,
        data: list[dict[str, Any]],
        from_dict_fn: Callable[[dict[str, Any]], RecordType],
        add_fn: Callable[[RecordType], Response],
        record_name: str,
    ) -> None:
        """
        Deserializes and imports a list of records into the gradebook, failing fast on error.

        Args:
            data (list[dict[str, Any]]): A list of dictionaries representing serialized records.
            from_dict_fn (Callable[[dict[str, Any]], RecordType]): Deserializes one record dictionary.
            add_fn (Callable[[RecordType], Response]): Attempts to add the deserialized record.
            record_name (str): A human-readable name used in error messages (e.g., "grade item", "score").

        Raises:
            ValueError: If a record fails deserialization or insertion.
        """
        for record_dict in data:
            try:
                record = from_dict_fn(record_dict)
            except (KeyError, ValueError, TypeError) as e:
                raise ValueError(
                    f"Failed to deserialize {record_name}: {record_dict} - {e}"
                ) from None

            response = add_fn(record)

            if not response.success:
                raise ValueError(
                    f"Failed to import {record_name}: {record_dict} - {response.detail}"
                )

    # === data accessors ===

    def find_item_by_id(self, item_id: str) -> Response:
        """
        Finds a `GradeItem` object by id within the gradebook.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the item was found.
                - error (ErrorCode | str | None): `ErrorCode.NOT_FOUND` if no match is found.
                - status_code (int | None): 200 on success, 404 if not found.
                - data (dict): On success, "record" (GradeItem): a copy of the matched item.

        Notes:
            - This method is read-only and does not raise.
            - Changing the returned copy has no effect on the gradebook.
        """
        item_response = self._find_item(item_id)
        if not item_response.success:
            return item_response

        return Response.succeed(
            data={
                "record": copy.deepcopy(item_response.data["record"]),
            },
        )

    def _find_item(self, item_id: str) -> Response:
        # manipulator path: hands out the stored record itself
        item = self._items.get(item_id)

        if item is None:
            return Response.fail(
                detail=f"No grade item found for {item_id} in {self.id}.",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        return Response.succeed(
            data={
                "record": item,
            },
        )

    def find_score(self, student_id: str, item_id: str) -> StudentScore | None:
        record = self._scores.get((student_id, item_id))
        return copy.deepcopy(record) if record else None

    def get_score(self, student_id: str, item_id: str) -> float | None:
        record = self._scores.get((student_id, item_id))
        return record.score if record else None

    def scores_for_student(self, student_id: str) -> list[StudentScore]:
        return [
            copy.deepcopy(s)
            for s in self._scores.values()
            if s.student_id == student_id
        ]

    def observation_for(self, student_id: str) -> str:
        return self._observations.get(student_id, "")

    def matches(
        self,
        subject: str | None = None,
        grade: str | None = None,
        group: str | None = None,
        period: str | None = None,
    ) -> bool:
        """
        Returns True if every non-None filter equals the corresponding key field.
        """
        return all(
            wanted is None or wanted == actual
            for wanted, actual in (
                (subject, self._subject),
                (grade, self._grade),
                (group, self._group),
                (period, self._period),
            )
        )

    # === data manipulators ===

    def _reject_if_locked(self, action: str) -> Response | None:
        """
        Returns a LOCK_VIOLATION failure if the gradebook is locked, otherwise None.
        """
        if not self._is_locked:
            return None

        logger.warning("Rejected %s on locked gradebook %s", action, self.id)

        return Response.fail(
            detail=f"The gradebook {self.id} is locked. Cannot {action}.",
            error=ErrorCode.LOCK_VIOLATION,
            status_code=423,
        )

    def set_locked(self, is_locked: bool) -> None:
        """
        Sets the lock flag without any permission check.

        Notes:
            - Only `engine.lifecycle` should call this; it owns the OPEN/LOCKED transitions and the role check.
        """
        self._is_locked = is_locked

    # --- grade item manipulation ---

    def add_item(self, item: GradeItem) -> Response:
        """
        Appends a `GradeItem` to the gradebook.

        Args:
            item (GradeItem): The item to add. Its weight has already been validated by `GradeItem`.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the item was added.
                    - False if the gradebook is locked or the item id/name is already in use.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, a simple confirmation message.
                - error (ErrorCode | str | None):
                    - `ErrorCode.LOCK_VIOLATION` if the gradebook is locked.
                    - `ErrorCode.VALIDATION_FAILED` if the id or name is not unique.
                - status_code (int | None):
                    - 200 on success
                    - 423 if locked
                    - 400 on other failures
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "record" (GradeItem): A copy of the added item. The gradebook keeps its own copy, so later changes to `item` have no effect.
                        - "warnings" (list[PolicyWarning]): `WEIGHT_OVER_100` if the new total exceeds the threshold.
                    - On failure:
                        - None

        Notes:
            - This method mutates `Gradebook` state.
            - An over-100% total never blocks the operation.
        """
        locked_response = self._reject_if_locked("add a grade item")
        if locked_response:
            return locked_response

        try:
            self.require_unique_item_id(item.id)
            self.require_unique_item_name(item.name)

        except ValueError as e:
            return Response.fail(
                detail=f"Unique record validation failed: {e}",
                error=ErrorCode.VALIDATION_FAILED,
            )

        self._items[item.id] = copy.deepcopy(item)

        return Response.succeed(
            detail=f"Grade item {item.name} successfully added to the gradebook.",
            data={
                "record": copy.deepcopy(item),
                "warnings": self.weight_warnings(),
            },
        )

    def save_item(self, item: GradeItem) -> Response:
        """
        Adds the item, or replaces the existing item with the same id in its current position.

        Returns:
            Response: Same contract as `add_item()`. Replacing an item keeps every score recorded against it.
        """
        if item.id not in self._items:
            return self.add_item(item)

        locked_response = self._reject_if_locked("edit a grade item")
        if locked_response:
            return locked_response

        try:
            self.require_unique_item_name(item.name, exclude_id=item.id)

        except ValueError as e:
            return Response.fail(
                detail=f"Unique record validation failed: {e}",
                error=ErrorCode.VALIDATION_FAILED,
            )

        # dict assignment to an existing key keeps insertion order
        self._items[item.id] = copy.deepcopy(item)

        return Response.succeed(
            detail=f"Grade item {item.name} successfully updated.",
            data={
                "record": copy.deepcopy(item),
                "warnings": self.weight_warnings(),
            },
        )

    def update_item_name(self, item_id: str, name: str) -> Response:
        locked_response = self._reject_if_locked("rename a grade item")
        if locked_response:
            return locked_response

        item_response = self._find_item(item_id)
        if not item_response.success:
            return Response.forward(item_response, "Failed to rename grade item")

        item = item_response.data["record"]

        try:
            self.require_unique_item_name(name, exclude_id=item_id)
            item.name = name

        except ValueError as e:
            return Response.fail(
                detail=f"Input validation failed: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        return Response.succeed(
            detail=f"Grade item name successfully updated to: {item.name}.",
            data={
                "record": copy.deepcopy(item),
            },
        )

    def update_item_weight(self, item_id: str, weight: float) -> Response:
        """
        Updates the weight of a grade item.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if the weight was updated.
                - error (ErrorCode | str | None):
                    - `ErrorCode.LOCK_VIOLATION` if the gradebook is locked.
                    - `ErrorCode.NOT_FOUND` if the item does not exist.
                    - `ErrorCode.INVALID_FIELD_VALUE` if the weight is not a finite number greater than zero.
                - data (dict | None):
                    - On success, "record" (GradeItem) and "warnings" (list[PolicyWarning]).

        Notes:
            - A rejected weight leaves the item unchanged.
        """
        locked_response = self._reject_if_locked("change a grade item weight")
        if locked_response:
            return locked_response

        item_response = self._find_item(item_id)
        if not item_response.success:
            return Response.forward(item_response, "Failed to update grade item weight")

        item = item_response.data["record"]

        try:
            item.weight = weight

        except (TypeError, ValueError) as e:
            return Response.fail(
                detail=f"Input validation failed: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        return Response.succeed(
            detail=f"Grade item weight successfully updated to: {item.weight}.",
            data={
                "record": copy.deepcopy(item),
                "warnings": self.weight_warnings(),
            },
        )

    def update_item_descriptors(
        self, item_id: str, descriptor_ids: Iterable[str]
    ) -> Response:
        locked_response = self._reject_if_locked("edit grade item descriptors")
        if locked_response:
            return locked_response

        item_response = self._find_item(item_id)
        if not item_response.success:
            return Response.forward(item_response, "Failed to update descriptors")

        item = item_response.data["record"]
        item.performance_descriptor_ids = descriptor_ids

        return Response.succeed(
            detail="Grade item descriptors successfully updated.",
            data={
                "record": copy.deepcopy(item),
            },
        )

    def remove_item(self, item_id: str) -> Response:
        """
        Removes a `GradeItem` and every `StudentScore` recorded against it.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the item and its scores were removed.
                    - False if the gradebook is locked or the item cannot be found.
                - error (ErrorCode | str | None):
                    - `ErrorCode.LOCK_VIOLATION` if the gradebook is locked.
                    - `ErrorCode.NOT_FOUND` if the item cannot be found.
                - status_code (int | None):
                    - 200 on success
                    - 423 if locked
                    - 404 if the item cannot be found
                - data (dict | None):
                    - On success, "removed_scores" (int): how many linked scores were deleted.

        Notes:
            - This method mutates `Gradebook` state and cascades to linked scores.
        """
        locked_response = self._reject_if_locked("remove a grade item")
        if locked_response:
            return locked_response

        item_response = self._find_item(item_id)
        if not item_response.success:
            return Response.forward(item_response, "Failed to remove grade item")

        item = item_response.data["record"]
        linked_keys = [key for key in self._scores if key[1] == item_id]

        for key in linked_keys:
            del self._scores[key]

        del self._items[item_id]

        return Response.succeed(
            detail=f"Grade item {item.name} and {len(linked_keys)} linked scores successfully removed.",
            data={
                "removed_scores": len(linked_keys),
            },
        )

    # --- score manipulation ---

    def _add_score_record(self, record: StudentScore) -> Response:
        # import path: the record is already validated and clamped by StudentScore
        if record.grade_item_id not in self._items:
            return Response.fail(
                detail=f"Score references unknown grade item {record.grade_item_id}.",
                error=ErrorCode.NOT_FOUND,
                status_code=404,
            )

        try:
            self.require_unique_score(record.student_id, record.grade_item_id)

        except ValueError as e:
            return Response.fail(
                detail=f"Unique record validation failed: {e}",
                error=ErrorCode.VALIDATION_FAILED,
            )

        self._scores[record.key] = record

        return Response.succeed(data={"record": record})

    def write_score(self, student_id: str, item_id: str, score: Any) -> Response:
        """
        Records, replaces, or clears one student's score on one grade item.

        Args:
            student_id (str): The student being graded.
            item_id (str): The grade item being graded.
            score (Any): A number, a numeric string (either decimal separator), or None/blank to clear the score.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the score was written or cleared.
                    - False if the gradebook is locked, the item is unknown, or the input is not a number.
                - detail (str | None):
                    - On failure, a human-readable description of the error.
                    - On success, a confirmation message with the stored value.
                - error (ErrorCode | str | None):
                    - `ErrorCode.LOCK_VIOLATION` if the gradebook is locked.
                    - `ErrorCode.NOT_FOUND` if the item is not part of this gradebook.
                    - `ErrorCode.INVALID_FIELD_VALUE` if the input is not a finite number.
                - status_code (int | None):
                    - 200 on success
                    - 423 if locked
                    - 404 if the item cannot be found
                    - 400 on other failures
                - data (dict | None): Payload with the following keys:
                    - On success:
                        - "record" (StudentScore | None): The stored score, or None if it was cleared.
                        - "clamped" (bool): True if the input was outside [0, 5] and was clamped.
                    - On failure:
                        - None

        Notes:
            - Out-of-range input is clamped, never rejected. The clamp is logged and reported so the caller can surface it.
            - Clearing a score removes the `StudentScore` entirely; the item then counts as ungraded.
        """
        locked_response = self._reject_if_locked("write a score")
        if locked_response:
            return locked_response

        item_response = self._find_item(item_id)
        if not item_response.success:
            return Response.forward(item_response, "Failed to write score")

        try:
            raw_value = parse_score_input(score)

        except (TypeError, ValueError) as e:
            return Response.fail(
                detail=f"Input validation failed: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        if raw_value is None:
            self._scores.pop((student_id, item_id), None)

            return Response.succeed(
                detail="Score cleared.",
                data={
                    "record": None,
                    "clamped": False,
                },
            )

        clamped = StudentScore.is_out_of_range(raw_value)
        if clamped:
            logger.warning(
                "Clamped out-of-range score %s for student %s on %s/%s",
                raw_value,
                student_id,
                self.id,
                item_id,
            )

        record = self._scores.get((student_id, item_id))
        if record is None:
            record = StudentScore(student_id, item_id, raw_value)
            self._scores[record.key] = record
        else:
            record.score = raw_value

        logger.debug(
            "Wrote score %s for student %s on %s/%s",
            record.score,
            student_id,
            self.id,
            item_id,
        )

        return Response.succeed(
            detail=f"Score successfully recorded: {record.score}.",
            data={
                "record": copy.deepcopy(record),
                "clamped": clamped,
            },
        )

    def clear_score(self, student_id: str, item_id: str) -> Response:
        return self.write_score(student_id, item_id, None)

    def batch_write_scores(self, entries: Iterable[tuple[str, str, Any]]) -> Response:
        """
        Writes several (student_id, item_id, score) entries, stopping at the first failure.

        Returns:
            Response: A structured response with the following contract:
                - success (bool): True if every entry was written.
                - error (ErrorCode | str | None): The error of the first failed entry.
                - data (dict | None):
                    - "written" (list[StudentScore | None]): Results of the entries written before any failure.
                    - "clamped" (list[tuple[str, str]]): (student_id, item_id) pairs whose input was clamped.

        Notes:
            - This method is not transactional on its own. `engine.service` runs it against a copy and only
              persists the copy if every entry succeeded.
        """
        written = []
        clamped = []

        for student_id, item_id, score in entries:
            write_response = self.write_score(student_id, item_id, score)

            if not write_response.success:
                return Response.fail(
                    detail=f"Failed to write score for {student_id} on {item_id}: {write_response.detail}",
                    error=write_response.error,
                    status_code=write_response.status_code,
                    data={
                        "written": written,
                        "clamped": clamped,
                    },
                )

            written.append(write_response.data["record"])
            if write_response.data["clamped"]:
                clamped.append((student_id, item_id))

        return Response.succeed(
            detail=f"{len(written)} scores successfully recorded.",
            data={
                "written": written,
                "clamped": clamped,
            },
        )

    # --- observation and descriptor manipulation ---

    def set_observation(self, student_id: str, text: str | None) -> Response:
        """
        Sets the free-text observation shown on a student's report card. Blank text removes it.
        """
        locked_response = self._reject_if_locked("edit an observation")
        if locked_response:
            return locked_response

        text = (text or "").strip()

        if text:
            self._observations[student_id] = text
        else:
            self._observations.pop(student_id, None)

        return Response.succeed(
            detail="Observation successfully saved." if text else "Observation removed.",
            data={
                "observation": text,
            },
        )

    def set_period_descriptors(self, descriptor_ids: Iterable[str]) -> Response:
        locked_response = self._reject_if_locked("edit period descriptors")
        if locked_response:
            return locked_response

        self._period_descriptor_ids = list(dict.fromkeys(descriptor_ids))

        return Response.succeed(
            detail="Period descriptors successfully updated.",
            data={
                "period_descriptor_ids": list(self._period_descriptor_ids),
            },
        )

    # === data validators ===

    @classmethod
    def normalize_key(
        cls, subject: Any, grade: Any, group: Any, period: Any
    ) -> tuple[str, str, str, str]:
        """
        Validates and strips the four natural-key fields.

        Raises:
            TypeError: If a field is not a string.
            ValueError: If a field is blank.
        """
        fields = {"subject": subject, "grade": grade, "group": group, "period": period}

        for field_name, value in fields.items():
            cls.validate_key_field(field_name, value)

        return (subject.strip(), grade.strip(), group.strip(), period.strip())

    @staticmethod
    def validate_key_field(field_name: str, value: Any) -> None:
        if not isinstance(value, str):
            raise TypeError(f"{field_name} must be a string.")

        if not value.strip():
            raise ValueError(f"{field_name} cannot be empty.")

    def require_unique_item_id(self, item_id: str) -> None:
        """
        Raises:
            ValueError: If an item with the same id already exists.
        """
        if item_id in self._items:
            raise ValueError(f"A grade item with the id '{item_id}' already exists.")

    def require_unique_item_name(self, name: str, exclude_id: str | None = None) -> None:
        """
        Validates that no other grade item shares the given name.

        Args:
            name (str): The item name to validate for uniqueness.
            exclude_id (str | None): The id of the item being renamed, which is allowed to keep its own name.

        Raises:
            ValueError: If another item with the same normalized name already exists.
        """
        normalized = normalize(name)
        if any(
            normalize(i.name) == normalized and i.id != exclude_id
            for i in self._items.values()
        ):
            raise ValueError(f"A grade item with the name '{name}' already exists.")

    def require_unique_score(self, student_id: str, item_id: str) -> None:
        if (student_id, item_id) in self._scores:
            raise ValueError(
                f"A score for student {student_id} on item {item_id} already exists."
            )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"Gradebook({self.id}, {self._owner_id}, locked={self._is_locked})"

    def __str__(self) -> str:
        return f"GRADEBOOK: {self._subject}, {self._grade} - {self._group}, {self._period} {self.lock_status}"
