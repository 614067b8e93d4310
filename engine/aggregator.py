# engine/aggregator.py

"""
Reporting views over a roster and a set of gradebooks.

Every function here is pure: it reads the gradebooks, calls `engine.calculator` and
`engine.classifier`, and returns fresh records from `engine.records`. Nothing is cached and
nothing is mutated.

Populations are given as `RosterEntry` projections. Filtering by grade, group or jornada is the
caller's job (see `engine.service.ReportingService`), so every view simply works with the
students it receives. An empty roster or an empty list of gradebooks yields empty lists and
zeroed statistics, never an exception.

Null vs. zero:
- A final score of None means "not gradable" and never counts towards an average.
- A student with no gradable subject gets `average=0.0` with `has_grades=False`. The
  distribution, dashboard and ranking views only count students with `has_grades` and a
  positive average, so those students never pollute the statistics.
"""

from __future__ import annotations

from typing import Iterable

from core.config import get_settings
from core.utils import mean, normalize
from engine.calculator import compute_final_score
from engine.classifier import BASIC_CUTOFF, Tier, classify
from engine.records import (
    DashboardSummary,
    GradeSheet,
    GradeSheetColumn,
    GradeSheetRow,
    GradesCertificate,
    GroupBucket,
    ReportCard,
    StudentAverage,
    SubjectAverage,
    SubjectLine,
    SubjectPerformance,
    TierDistribution,
)
from models.gradebook import Gradebook
from models.user import RosterEntry


def _is_counted(average: StudentAverage) -> bool:
    return average.has_grades and average.average > 0


def gradebooks_for_student(
    student: RosterEntry, gradebooks: Iterable[Gradebook], period: str
) -> list[Gradebook]:
    """
    Returns the gradebooks taught to the student's grade and group in a period, sorted by subject.
    """
    matching = [
        gb
        for gb in gradebooks
        if gb.matches(grade=student.grade, group=student.group, period=period)
    ]
    return sorted(matching, key=lambda gb: gb.subject)


# === per-student views ===


def student_average(
    student: RosterEntry, gradebooks: Iterable[Gradebook], period: str
) -> StudentAverage:
    """
    Averages a student's final scores across every subject of a period.

    Subjects where the student is not gradable are left out. When no subject is gradable the
    record carries `average=0.0`, `subject_count=0`, `has_grades=False` and the tier of an
    ungraded result (LOW).
    """
    finals = [
        compute_final_score(student.id, gb)
        for gb in gradebooks_for_student(student, gradebooks, period)
    ]
    graded = [score for score in finals if score is not None]
    average = mean(graded)

    return StudentAverage(
        student_id=student.id,
        name=student.name,
        grade=student.grade,
        group=student.group,
        average=average if average is not None else 0.0,
        subject_count=len(graded),
        has_grades=average is not None,
        tier=classify(average),
    )


def student_averages(
    students: Iterable[RosterEntry], gradebooks: Iterable[Gradebook], period: str
) -> list[StudentAverage]:
    gradebooks = list(gradebooks)
    return [student_average(student, gradebooks, period) for student in students]


def search_students(
    averages: Iterable[StudentAverage], term: str | None
) -> list[StudentAverage]:
    """
    Filters averages by a case-insensitive substring of the student's name. A blank term keeps everyone.
    """
    averages = list(averages)
    if not term or not term.strip():
        return averages

    needle = normalize(term)
    return [a for a in averages if needle in a.name.lower()]


def top_students(
    averages: Iterable[StudentAverage], limit: int | None = None
) -> list[StudentAverage]:
    limit = limit if limit is not None else get_settings().top_students_limit
    return sorted(averages, key=lambda a: a.average, reverse=True)[:limit]


def at_risk_students(averages: Iterable[StudentAverage]) -> list[StudentAverage]:
    """
    Students with a positive average below the passing cut point, weakest first.
    """
    at_risk = [a for a in averages if _is_counted(a) and a.average < BASIC_CUTOFF]
    return sorted(at_risk, key=lambda a: a.average)


# === per-subject views ===


def subject_group_average(
    gradebook: Gradebook, students: Iterable[RosterEntry]
) -> SubjectAverage | None:
    """
    Averages the final scores of one gradebook over the students of its grade and group.

    Returns:
        A `SubjectAverage`, or None if no student in the group is gradable in this subject.
    """
    finals = [
        compute_final_score(student.id, gradebook)
        for student in students
        if student.grade == gradebook.grade and student.group == gradebook.group
    ]
    graded = [score for score in finals if score is not None]

    if not graded:
        return None

    failing_count = sum(1 for score in graded if score < BASIC_CUTOFF)

    return SubjectAverage(
        subject=gradebook.subject,
        grade=gradebook.grade,
        group=gradebook.group,
        period=gradebook.period,
        average=mean(graded),
        graded_count=len(graded),
        failing_count=failing_count,
        failing_rate=failing_count / len(graded) * 100,
    )


def subject_performance(
    students: Iterable[RosterEntry], gradebooks: Iterable[Gradebook], period: str
) -> list[SubjectPerformance]:
    """
    Per-subject average and failing rate across the whole population for a period.

    A subject is taught through one gradebook per grade/group, so each student is scored
    against the gradebook of their own grade and group. Subjects where nobody is gradable
    are excluded rather than reported as 0.
    """
    students = list(students)
    period_gradebooks = [gb for gb in gradebooks if gb.period == period]

    by_subject: dict[str, list[float]] = {}

    for gb in period_gradebooks:
        for student in students:
            if student.grade != gb.grade or student.group != gb.group:
                continue

            score = compute_final_score(student.id, gb)
            bucket = by_subject.setdefault(gb.subject, [])
            if score is not None:
                bucket.append(score)

    performance = []

    for subject, graded in by_subject.items():
        if not graded:
            continue

        failing_count = sum(1 for score in graded if score < BASIC_CUTOFF)
        performance.append(
            SubjectPerformance(
                subject=subject,
                average=mean(graded),
                graded_count=len(graded),
                failing_count=failing_count,
                failing_rate=failing_count / len(graded) * 100,
            )
        )

    return performance


def top_subjects(
    performance: Iterable[SubjectPerformance], limit: int | None = None
) -> list[SubjectPerformance]:
    limit = limit if limit is not None else get_settings().top_subjects_limit
    return sorted(performance, key=lambda p: p.average, reverse=True)[:limit]


def hardest_subjects(
    performance: Iterable[SubjectPerformance], limit: int | None = None
) -> list[SubjectPerformance]:
    limit = limit if limit is not None else get_settings().top_subjects_limit
    return sorted(performance, key=lambda p: p.failing_rate, reverse=True)[:limit]


# === population statistics ===


def tier_distribution(averages: Iterable[StudentAverage]) -> TierDistribution:
    """
    Counts students per tier, skipping anyone without grades or with an average of 0.
    """
    counts = {tier: 0 for tier in Tier}

    for average in averages:
        if _is_counted(average):
            counts[average.tier] += 1

    return TierDistribution(
        superior=counts[Tier.SUPERIOR],
        high=counts[Tier.HIGH],
        basic=counts[Tier.BASIC],
        low=counts[Tier.LOW],
    )


def dashboard_summary(
    averages: Iterable[StudentAverage], excellent_threshold: float | None = None
) -> DashboardSummary:
    """
    Headline numbers for the academic dashboard.

    - `overall_average`: mean of the positive averages.
    - `excellent_count`: students at or above the excellence threshold (4.5 by default).
    - `at_risk_count`: students with a positive average below 3.0.
    - `approval_rate`: share of all given students (graded or not) with an average of at least 3.0, as a percentage.
    """
    averages = list(averages)
    if not averages:
        return DashboardSummary()

    if excellent_threshold is None:
        excellent_threshold = get_settings().excellent_threshold

    counted = [a.average for a in averages if _is_counted(a)]
    approved = sum(1 for a in averages if a.has_grades and a.average >= BASIC_CUTOFF)

    return DashboardSummary(
        student_count=len(averages),
        overall_average=mean(counted) or 0.0,
        excellent_count=sum(1 for a in averages if a.has_grades and a.average >= excellent_threshold),
        at_risk_count=len(at_risk_students(averages)),
        approval_rate=approved / len(averages) * 100,
    )


def group_comparison(
    students: Iterable[RosterEntry],
    averages: Iterable[StudentAverage],
    grade: str | None = None,
) -> list[GroupBucket]:
    """
    Compares average performance across grades, or across the groups of one grade.

    Args:
        students (Iterable[RosterEntry]): The population to bucket.
        averages (Iterable[StudentAverage]): Precomputed averages for those students.
        grade (str | None): When None, one bucket per grade. Otherwise one bucket per group within that grade,
            labelled "Grupo <group>".

    Returns:
        Buckets sorted by grade (or group). A bucket with no counted student has an average of 0.0.
    """
    by_student = {a.student_id: a for a in averages}
    buckets: dict[tuple[str, str | None], list[float]] = {}

    for student in students:
        if grade is None:
            key = (student.grade, None)
        elif student.grade == grade:
            key = (student.grade, student.group)
        else:
            continue

        bucket = buckets.setdefault(key, [])
        average = by_student.get(student.id)
        if average is not None and _is_counted(average):
            bucket.append(average.average)

    return [
        GroupBucket(
            label=bucket_grade if bucket_group is None else f"Grupo {bucket_group}",
            grade=bucket_grade,
            group=bucket_group,
            average=mean(values) or 0.0,
            student_count=len(values),
        )
        for (bucket_grade, bucket_group), values in sorted(
            buckets.items(), key=lambda kv: (kv[0][0], kv[0][1] or "")
        )
    ]


# === consolidated report ===


def consolidated_by_subject(
    students: Iterable[RosterEntry],
    gradebooks: Iterable[Gradebook],
    grade: str,
    group: str,
    period: str,
) -> list[SubjectAverage]:
    """
    Per-subject group averages for one grade/group/period, sorted by subject. Subjects nobody is gradable in are dropped.
    """
    students = list(students)
    results = []

    for gb in gradebooks:
        if not gb.matches(grade=grade, group=group, period=period):
            continue

        result = subject_group_average(gb, students)
        if result is not None:
            results.append(result)

    return sorted(results, key=lambda r: r.subject)


def consolidated_by_student(
    students: Iterable[RosterEntry],
    gradebooks: Iterable[Gradebook],
    grade: str,
    group: str,
    period: str,
) -> list[StudentAverage]:
    roster = [s for s in students if s.grade == grade and s.group == group]
    averages = student_averages(roster, gradebooks, period)
    return sorted(averages, key=lambda a: a.average, reverse=True)


# === documents ===


def grade_sheet(gradebook: Gradebook, students: Iterable[RosterEntry]) -> GradeSheet:
    """
    Builds the grade sheet (planilla) of one gradebook: one column per item, one row per student of its group.
    """
    items = gradebook.items
    roster = sorted(
        (s for s in students if s.grade == gradebook.grade and s.group == gradebook.group),
        key=lambda s: s.name,
    )

    rows = []
    for student in roster:
        final_score = compute_final_score(student.id, gradebook)
        rows.append(
            GradeSheetRow(
                student_id=student.id,
                name=student.name,
                scores={item.id: gradebook.get_score(student.id, item.id) for item in items},
                final_score=final_score,
                tier=classify(final_score),
            )
        )

    return GradeSheet(
        gradebook_id=gradebook.id,
        subject=gradebook.subject,
        grade=gradebook.grade,
        group=gradebook.group,
        period=gradebook.period,
        is_locked=gradebook.is_locked,
        columns=tuple(
            GradeSheetColumn(item_id=item.id, name=item.name, weight=item.weight)
            for item in items
        ),
        rows=tuple(rows),
        total_weight=gradebook.total_weight,
    )


def _subject_lines(
    student: RosterEntry,
    gradebooks: Iterable[Gradebook],
    period: str,
    with_observations: bool,
) -> tuple[SubjectLine, ...]:
    lines = []

    for gb in gradebooks_for_student(student, gradebooks, period):
        final_score = compute_final_score(student.id, gb)
        lines.append(
            SubjectLine(
                subject=gb.subject,
                final_score=final_score,
                tier=classify(final_score),
                observation=gb.observation_for(student.id) if with_observations else "",
            )
        )

    return tuple(lines)


def report_card(
    student: RosterEntry, gradebooks: Iterable[Gradebook], period: str
) -> ReportCard:
    """
    Builds a student's report card (boletín) for a period: every subject with its final score, tier and
    the teacher's observation, plus the overall average.
    """
    gradebooks = list(gradebooks)

    return ReportCard(
        student_id=student.id,
        name=student.name,
        grade=student.grade,
        group=student.group,
        period=period,
        lines=_subject_lines(student, gradebooks, period, with_observations=True),
        average=student_average(student, gradebooks, period),
    )


def grades_certificate(
    student: RosterEntry, gradebooks: Iterable[Gradebook], period: str
) -> GradesCertificate:
    gradebooks = list(gradebooks)
    average = student_average(student, gradebooks, period)

    return GradesCertificate(
        student_id=student.id,
        name=student.name,
        grade=student.grade,
        group=student.group,
        period=period,
        lines=_subject_lines(student, gradebooks, period, with_observations=False),
        average=average.average,
        tier=average.tier,
    )
