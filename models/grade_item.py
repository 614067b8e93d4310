# models/grade_item.py

"""
Represents one weighted assessment component within a `Gradebook` (e.g. "Midterm Exam", weight 0.3).

Key behaviors:
- `weight`: Must be a finite number greater than zero. Weights are conventionally fractions of 1.0,
  but totals above 1.0 are tolerated by the gradebook (flagged with a warning, never blocked).
- `performance_descriptor_ids`: References into an external descriptor bank. Advisory only; never used in calculation.
- `to_dict()` / `from_dict()`: Used for serialization and persistence.

Notes:
- All weight validation is handled through `validate_weight_input()` and enforced via the setter.
"""

from __future__ import annotations

import math
from typing import Any, Iterable


class GradeItem:

    def __init__(
        self,
        id: str,
        name: str,
        weight: float,
        performance_descriptor_ids: Iterable[str] | None = None,
    ):
        self._id = id
        # name and weight use setter methods for validation
        self.name = name
        self.weight = weight
        self.performance_descriptor_ids = performance_descriptor_ids or []

    # === properties ===

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = GradeItem.validate_name_input(name)

    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, weight: float | str) -> None:
        self._weight = GradeItem.validate_weight_input(weight)

    @property
    def performance_descriptor_ids(self) -> list[str]:
        return list(self._performance_descriptor_ids)

    @performance_descriptor_ids.setter
    def performance_descriptor_ids(self, descriptor_ids: Iterable[str]) -> None:
        # set semantics, first occurrence keeps its position
        self._performance_descriptor_ids = list(dict.fromkeys(descriptor_ids))

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "name": self._name,
            "weight": self._weight,
            "performance_descriptor_ids": list(self._performance_descriptor_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> GradeItem:
        return cls(
            id=data["id"],
            name=data["name"],
            weight=data["weight"],
            performance_descriptor_ids=data.get("performance_descriptor_ids", []),
        )

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"GradeItem({self._id}, {self._name}, {self._weight})"

    def __str__(self) -> str:
        return f"GRADE ITEM: name: {self._name}, weight: {self._weight}, id: {self._id}"

    # === data validators ===

    @staticmethod
    def validate_name_input(name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Grade item name cannot be empty.")

        return name.strip()

    @staticmethod
    def validate_weight_input(weight: Any) -> float:
        """
        Validates and normalizes input for a `GradeItem` weight.

        Accepts any input, and then:
            - Casts to float.
            - Ensures the number is finite.
            - Ensures it is strictly greater than zero.

        Args:
            weight (Any): The input value to validate.

        Returns:
            The normalized weight value (float).

        Raises:
            TypeError: If the input cannot be cast to float.
            ValueError: If the input is non-finite or not positive.
        """
        if isinstance(weight, bool):
            raise TypeError("Weight must be a number.")

        try:
            weight = float(weight)

        except (TypeError, ValueError):
            raise TypeError("Weight must be a number.") from None

        if not math.isfinite(weight):
            raise ValueError("Weight must be a finite number.")

        if weight <= 0:
            raise ValueError("Weight must be greater than zero.")

        return weight
