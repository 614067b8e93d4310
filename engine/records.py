# engine/records.py

"""
Plain, immutable result records returned by the reporting views in `engine.aggregator`.

Records hold copies of the values they report, never references into a gradebook, so they can
be handed straight to a renderer (PDF, CSV, JSON). `to_dict()` returns JSON-serializable
dictionaries: tiers become their names ("HIGH") with the printable label alongside, and nested
records and tuples become dictionaries and lists.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from engine.classifier import TIER_ORDER, Tier


def _serialize(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _serialize(v) for k, v in value.items()}
    return value


class Record:
    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = _serialize(value)
            if isinstance(value, Tier):
                data[f"{f.name}_label"] = value.label
        return data


# === per-student ===


@dataclass(frozen=True)
class StudentAverage(Record):
    """
    A student's average across the subjects of one period.

    `average` is 0.0 when the student has no gradable subject. That case is flagged by
    `has_grades=False` (and `subject_count=0`) so it is never mistaken for a true average of 0.
    """

    student_id: str
    name: str
    grade: str
    group: str
    average: float
    subject_count: int
    has_grades: bool
    tier: Tier


# === per-subject ===


@dataclass(frozen=True)
class SubjectAverage(Record):
    subject: str
    grade: str
    group: str
    period: str
    average: float
    graded_count: int
    failing_count: int
    failing_rate: float


@dataclass(frozen=True)
class SubjectPerformance(Record):
    # failing_rate is a percentage of graded students
    subject: str
    average: float
    graded_count: int
    failing_count: int
    failing_rate: float


# === population statistics ===


@dataclass(frozen=True)
class TierDistribution(Record):
    superior: int = 0
    high: int = 0
    basic: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.superior + self.high + self.basic + self.low

    def count(self, tier: Tier) -> int:
        return getattr(self, tier.name.lower())

    def to_dict(self) -> dict:
        return {tier.name: self.count(tier) for tier in TIER_ORDER}


@dataclass(frozen=True)
class GroupBucket(Record):
    label: str
    grade: str
    group: str | None
    average: float
    student_count: int


@dataclass(frozen=True)
class DashboardSummary(Record):
    student_count: int = 0
    overall_average: float = 0.0
    excellent_count: int = 0
    at_risk_count: int = 0
    approval_rate: float = 0.0


# === documents ===


@dataclass(frozen=True)
class GradeSheetColumn(Record):
    item_id: str
    name: str
    weight: float


@dataclass(frozen=True)
class GradeSheetRow(Record):
    student_id: str
    name: str
    # item id -> raw score, None when ungraded
    scores: dict[str, float | None]
    final_score: float | None
    tier: Tier


@dataclass(frozen=True)
class GradeSheet(Record):
    gradebook_id: str
    subject: str
    grade: str
    group: str
    period: str
    is_locked: bool
    columns: tuple[GradeSheetColumn, ...]
    rows: tuple[GradeSheetRow, ...]
    total_weight: float


@dataclass(frozen=True)
class SubjectLine(Record):
    subject: str
    final_score: float | None
    tier: Tier
    observation: str = ""


@dataclass(frozen=True)
class ReportCard(Record):
    student_id: str
    name: str
    grade: str
    group: str
    period: str
    lines: tuple[SubjectLine, ...]
    average: StudentAverage


@dataclass(frozen=True)
class GradesCertificate(Record):
    student_id: str
    name: str
    grade: str
    group: str
    period: str
    lines: tuple[SubjectLine, ...]
    average: float
    tier: Tier


@dataclass(frozen=True)
class Dashboard(Record):
    """
    Every academic dashboard view for one filtered population, computed in a single pass.
    """

    period: str
    grade: str | None
    group: str | None
    jornada: str | None
    summary: DashboardSummary
    distribution: TierDistribution
    top_students: tuple[StudentAverage, ...]
    at_risk_students: tuple[StudentAverage, ...]
    top_subjects: tuple[SubjectPerformance, ...]
    hardest_subjects: tuple[SubjectPerformance, ...]
    group_comparison: tuple[GroupBucket, ...]
