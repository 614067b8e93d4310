# engine/service.py

"""
Entry points that tie the gradebook model to an injected repository.

`GradebookService` runs every mutation as a whole-record replace-on-write:

    1. read the current gradebook and its version from the repository,
    2. apply the change to an independent copy,
    3. write the copy back with `put(copy, expected_version=version)`.

A failed change is never written, and readers holding the previous gradebook never observe a
partial update. If another writer got there first, the `put` fails with `VERSION_CONFLICT` and
the caller may retry.

`ReportingService` gathers students and gradebooks from the injected collaborators, filters
them, and hands them to the pure views in `engine.aggregator`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from core.response import ErrorCode, Response
from core.utils import generate_uuid, gradebook_key
from engine import aggregator, lifecycle
from engine.records import Dashboard
from models.grade_item import GradeItem
from models.gradebook import Gradebook
from models.user import RosterEntry, User, can_edit_gradebook
from storage.repository import GradebookRepository, StudentDirectory

logger = logging.getLogger(__name__)


def _permission_denied(actor: User | None, action: str, key: str) -> Response:
    logger.warning(
        "Permission denied: %s tried to %s on %s",
        actor.id if actor else None,
        action,
        key,
    )
    return Response.fail(
        detail=f"You are not allowed to {action} on gradebook {key}.",
        error=ErrorCode.PERMISSION_DENIED,
        status_code=403,
    )


class GradebookService:

    def __init__(self, repository: GradebookRepository):
        self._repository = repository

    @property
    def repository(self) -> GradebookRepository:
        return self._repository

    # === reads ===

    def get_gradebook(self, key: str) -> Response:
        return self._repository.get(key)

    def open_gradebook(
        self,
        actor: User | None,
        subject: str,
        grade: str,
        group: str,
        period: str,
        owner_id: str | None = None,
    ) -> Response:
        """
        Returns the gradebook for a (subject, grade, group, period) key, creating it on first request.

        Args:
            actor (User | None): The user opening the gradebook.
            subject (str), grade (str), group (str), period (str): The natural key.
            owner_id (str | None): The instructor of record for a new gradebook. Defaults to the actor.

        Returns:
            Response: A structured response with the following contract:
                - success (bool):
                    - True if the gradebook exists or was created.
                    - False if it does not exist and the actor may not create it, or the key is invalid.
                - error (ErrorCode | str | None):
                    - `ErrorCode.PERMISSION_DENIED` if the actor may not create the gradebook.
                    - `ErrorCode.INVALID_FIELD_VALUE` / `ErrorCode.MISSING_REQUIRED_FIELD` for a bad key.
                - status_code (int | None): 200 on success, 403 if permission is denied, 400 otherwise.
                - data (dict | None):
                    - On success:
                        - "gradebook" (Gradebook): The stored gradebook.
                        - "version" (int): Its stored version.
                        - "created" (bool): True if this call created it.

        Notes:
            - Existing gradebooks are returned to any caller; reading is never restricted here.
            - Gradebooks are never deleted.
        """
        try:
            subject, grade, group, period = Gradebook.normalize_key(subject, grade, group, period)

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

        key = gradebook_key(subject, grade, group, period)
        existing = self._repository.get(key)

        if existing.success:
            return self._opened(existing)

        if existing.error is not ErrorCode.NOT_FOUND:
            return existing

        owner_id = owner_id or (actor.id if actor else "")
        if not can_edit_gradebook(actor, owner_id):
            return _permission_denied(actor, "create a gradebook", key)

        create_response = Gradebook.create(subject, grade, group, period, owner_id)
        if not create_response.success:
            return create_response

        put_response = self._repository.put(
            create_response.data["gradebook"], expected_version=0
        )

        if put_response.error is ErrorCode.VERSION_CONFLICT:
            # created concurrently by someone else; read theirs once
            existing = self._repository.get(key)
            if not existing.success:
                return Response.forward(existing, f"Failed to open gradebook {key}")
            return self._opened(existing)

        if not put_response.success:
            return put_response

        logger.info("Created gradebook %s for owner %s", key, owner_id)

        return Response.succeed(
            detail=f"Gradebook {key} created.",
            data={
                "gradebook": put_response.data["gradebook"],
                "version": put_response.data["version"],
                "created": True,
            },
        )

    @staticmethod
    def _opened(get_response: Response) -> Response:
        return Response.succeed(
            data={
                "gradebook": get_response.data["gradebook"],
                "version": get_response.data["version"],
                "created": False,
            },
        )

    # === replace-on-write ===

    def _apply(
        self,
        key: str,
        change: Callable[[Gradebook], Response],
        actor: User | None = None,
        action: str = "edit",
        check_editor: bool = True,
    ) -> Response:
        """
        Applies a change to a copy of the stored gradebook and writes the copy back.

        Args:
            key (str): The gradebook id.
            change (Callable[[Gradebook], Response]): Mutates the copy it receives and reports the outcome.
            actor (User | None): The acting user.
            action (str): A short description of the change, used in errors and logs.
            check_editor (bool): If True, the actor must be the owner or an administrator.

        Returns:
            Response: The change's own response on failure, or the change's response enriched with
            "gradebook" (the stored copy) and "version" on success. Repository failures
            (`VERSION_CONFLICT`, storage-level `LOCK_VIOLATION`) are returned as-is. A change that
            reports "changed": False is not written, and the stored version is returned unchanged.
        """
        get_response = self._repository.get(key)
        if not get_response.success:
            return Response.forward(get_response, f"Failed to {action}")

        stored = get_response.data["gradebook"]
        version = get_response.data["version"]

        if check_editor and not can_edit_gradebook(actor, stored.owner_id):
            return _permission_denied(actor, action, key)

        working_copy = stored.copy()
        change_response = change(working_copy)

        if not change_response.success:
            return change_response

        if change_response.data.get("changed") is False:
            # nothing to write; the stored version stays as it is
            return Response.succeed(
                detail=change_response.detail,
                status_code=change_response.status_code,
                data={
                    **change_response.data,
                    "gradebook": stored,
                    "version": version,
                },
            )

        put_response = self._repository.put(working_copy, expected_version=version)
        if not put_response.success:
            return put_response

        return Response.succeed(
            detail=change_response.detail,
            status_code=change_response.status_code,
            data={
                **change_response.data,
                "gradebook": put_response.data["gradebook"],
                "version": put_response.data["version"],
            },
        )

    # === grade items ===

    def add_item(
        self,
        actor: User | None,
        key: str,
        name: str,
        weight: Any,
        performance_descriptor_ids: Iterable[str] | None = None,
    ) -> Response:
        """
        Creates a grade item and appends it to the gradebook.

        Returns:
            Response: Same contract as `Gradebook.add_item()`, plus "gradebook" and "version" on success.
            Fails with `ErrorCode.INVALID_FIELD_VALUE` if the name is blank or the weight is not a
            finite number greater than zero.
        """
        try:
            item = GradeItem(
                id=generate_uuid(),
                name=name,
                weight=weight,
                performance_descriptor_ids=performance_descriptor_ids,
            )

        except (TypeError, ValueError) as e:
            return Response.fail(
                detail=f"Input validation failed: {e}",
                error=ErrorCode.INVALID_FIELD_VALUE,
            )

        return self._apply(key, lambda gb: gb.add_item(item), actor, "add a grade item")

    def save_item(self, actor: User | None, key: str, item: GradeItem) -> Response:
        return self._apply(key, lambda gb: gb.save_item(item), actor, "save a grade item")

    def rename_item(self, actor: User | None, key: str, item_id: str, name: str) -> Response:
        return self._apply(
            key, lambda gb: gb.update_item_name(item_id, name), actor, "rename a grade item"
        )

    def set_item_weight(
        self, actor: User | None, key: str, item_id: str, weight: Any
    ) -> Response:
        return self._apply(
            key,
            lambda gb: gb.update_item_weight(item_id, weight),
            actor,
            "change a grade item weight",
        )

    def set_item_descriptors(
        self, actor: User | None, key: str, item_id: str, descriptor_ids: Iterable[str]
    ) -> Response:
        return self._apply(
            key,
            lambda gb: gb.update_item_descriptors(item_id, descriptor_ids),
            actor,
            "edit grade item descriptors",
        )

    def remove_item(self, actor: User | None, key: str, item_id: str) -> Response:
        return self._apply(
            key, lambda gb: gb.remove_item(item_id), actor, "remove a grade item"
        )

    # === scores ===

    def write_score(
        self, actor: User | None, key: str, student_id: str, item_id: str, score: Any
    ) -> Response:
        return self._apply(
            key,
            lambda gb: gb.write_score(student_id, item_id, score),
            actor,
            "write a score",
        )

    def clear_score(
        self, actor: User | None, key: str, student_id: str, item_id: str
    ) -> Response:
        return self.write_score(actor, key, student_id, item_id, None)

    def write_scores(
        self, actor: User | None, key: str, entries: Iterable[tuple[str, str, Any]]
    ) -> Response:
        """
        Writes several scores as one unit: either every entry is stored or none is.
        """
        entries = list(entries)
        return self._apply(
            key, lambda gb: gb.batch_write_scores(entries), actor, "write scores"
        )

    # === observations and descriptors ===

    def set_observation(
        self, actor: User | None, key: str, student_id: str, text: str | None
    ) -> Response:
        return self._apply(
            key,
            lambda gb: gb.set_observation(student_id, text),
            actor,
            "edit an observation",
        )

    def set_period_descriptors(
        self, actor: User | None, key: str, descriptor_ids: Iterable[str]
    ) -> Response:
        descriptor_ids = list(descriptor_ids)
        return self._apply(
            key,
            lambda gb: gb.set_period_descriptors(descriptor_ids),
            actor,
            "edit period descriptors",
        )

    # === lock state ===

    def lock(self, actor: User | None, key: str) -> Response:
        return self._apply(
            key, lambda gb: lifecycle.lock(gb, actor), actor, "lock", check_editor=False
        )

    def unlock(self, actor: User | None, key: str) -> Response:
        return self._apply(
            key, lambda gb: lifecycle.unlock(gb, actor), actor, "unlock", check_editor=False
        )

    def toggle_lock(self, actor: User | None, key: str) -> Response:
        return self._apply(
            key,
            lambda gb: lifecycle.toggle_lock(gb, actor),
            actor,
            "toggle the lock",
            check_editor=False,
        )


class ReportingService:

    def __init__(self, repository: GradebookRepository, directory: StudentDirectory):
        self._repository = repository
        self._directory = directory

    def roster(
        self,
        grade: str | None = None,
        group: str | None = None,
        jornada: str | None = None,
    ) -> list[RosterEntry]:
        students = self._directory.list_students(grade=grade, group=group, jornada=jornada)
        return [s.roster_entry() for s in students]

    def dashboard(
        self,
        period: str,
        grade: str | None = None,
        group: str | None = None,
        jornada: str | None = None,
        search: str | None = None,
    ) -> Dashboard:
        """
        Computes every academic dashboard view for the filtered population.

        The name search only narrows the student rankings; the summary, distribution and subject
        views always cover the whole filtered population.
        """
        roster = self.roster(grade=grade, group=group, jornada=jornada)
        gradebooks = self._repository.list_gradebooks(grade=grade, group=group, period=period)

        averages = aggregator.student_averages(roster, gradebooks, period)
        searched = aggregator.search_students(averages, search)
        performance = aggregator.subject_performance(roster, gradebooks, period)

        return Dashboard(
            period=period,
            grade=grade,
            group=group,
            jornada=jornada,
            summary=aggregator.dashboard_summary(averages),
            distribution=aggregator.tier_distribution(averages),
            top_students=tuple(aggregator.top_students(searched)),
            at_risk_students=tuple(aggregator.at_risk_students(searched)),
            top_subjects=tuple(aggregator.top_subjects(performance)),
            hardest_subjects=tuple(aggregator.hardest_subjects(performance)),
            group_comparison=tuple(aggregator.group_comparison(roster, averages, grade)),
        )

    def consolidated(self, grade: str, group: str, period: str) -> dict[str, list]:
        roster = self.roster(grade=grade, group=group)
        gradebooks = self._repository.list_gradebooks(grade=grade, group=group, period=period)

        return {
            "subjects": aggregator.consolidated_by_subject(
                roster, gradebooks, grade, group, period
            ),
            "students": aggregator.consolidated_by_student(
                roster, gradebooks, grade, group, period
            ),
        }

    def grade_sheet(self, key: str) -> Response:
        get_response = self._repository.get(key)
        if not get_response.success:
            return Response.forward(get_response, "Failed to build grade sheet")

        gradebook = get_response.data["gradebook"]
        roster = self.roster(grade=gradebook.grade, group=gradebook.group)

        return Response.succeed(
            data={
                "sheet": aggregator.grade_sheet(gradebook, roster),
            },
        )

    def _student_document(
        self,
        student_id: str,
        period: str,
        build: Callable[[RosterEntry, list[Gradebook], str], Any],
        name: str,
    ) -> Response:
        student_response = self._directory.get_student(student_id)
        if not student_response.success:
            return Response.forward(student_response, f"Failed to build {name}")

        student = student_response.data["record"].roster_entry()
        gradebooks = self._repository.list_gradebooks(
            grade=student.grade, group=student.group, period=period
        )

        return Response.succeed(
            data={
                name: build(student, gradebooks, period),
            },
        )

    def report_card(self, student_id: str, period: str) -> Response:
        return self._student_document(
            student_id, period, aggregator.report_card, "report_card"
        )

    def grades_certificate(self, student_id: str, period: str) -> Response:
        return self._student_document(
            student_id, period, aggregator.grades_certificate, "certificate"
        )
