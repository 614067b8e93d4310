# models/student_score.py

"""
Represents one student's raw result on one `GradeItem`.

A `StudentScore` is identified by the (student_id, grade_item_id) pair, which is unique within a gradebook.
The score is a number on the 0 to 5 scale, or None when the item has not been graded yet.

Notes:
- Values outside [0, 5] are clamped when they enter the model, never stored out of range.
  Callers that need to know whether a clamp happened should check `is_out_of_range()` first.
- Actual grade calculations are handled externally by `engine.calculator`.
"""

from __future__ import annotations

from typing import Any

from core.formatters import parse_score_input

MIN_SCORE = 0.0
MAX_SCORE = 5.0


class StudentScore:

    def __init__(
        self,
        student_id: str,
        grade_item_id: str,
        score: float | str | None = None,
    ):
        self._student_id = student_id
        self._grade_item_id = grade_item_id
        # score uses setter method for validation and clamping
        self.score = score

    # === properties ===

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def grade_item_id(self) -> str:
        return self._grade_item_id

    @property
    def key(self) -> tuple[str, str]:
        return (self._student_id, self._grade_item_id)

    @property
    def score(self) -> float | None:
        return self._score

    @score.setter
    def score(self, score: float | str | None) -> None:
        self._score = StudentScore.validate_score_input(score)

    @property
    def is_graded(self) -> bool:
        return self._score is not None

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "student_id": self._student_id,
            "grade_item_id": self._grade_item_id,
            "score": self._score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StudentScore:
        return cls(
            student_id=data["student_id"],
            grade_item_id=data["grade_item_id"],
            score=data.get("score"),
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"StudentScore({self._student_id}, {self._grade_item_id}, {self._score})"

    def __str__(self) -> str:
        return f"SCORE: student id: {self._student_id}, item id: {self._grade_item_id}, score: {self._score}"

    # === data validators ===

    @staticmethod
    def is_out_of_range(value: float | None) -> bool:
        return value is not None and (value < MIN_SCORE or value > MAX_SCORE)

    @staticmethod
    def clamp(value: float) -> float:
        return max(MIN_SCORE, min(MAX_SCORE, value))

    @staticmethod
    def validate_score_input(score: Any) -> float | None:
        """
        Validates and normalizes input for a `StudentScore` score value.

        Accepts None (ungraded), numbers, or numeric strings with either decimal separator, and then:
            - Casts to float.
            - Ensures the number is finite.
            - Clamps it into the closed interval [0, 5].

        Args:
            score (Any): The input value to validate.

        Returns:
            The normalized score (float), or None if ungraded.

        Raises:
            TypeError: If the input cannot be read as a number.
            ValueError: If the input is non-finite.
        """
        value = parse_score_input(score)

        if value is None:
            return None

        return StudentScore.clamp(value)
