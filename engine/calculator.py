# engine/calculator.py

"""
Weighted final score for one student in one gradebook.

Only graded items count: each present score contributes `score * weight` to the numerator
and `weight` to the denominator, and ungraded items are left out of both. The result is
therefore normalized over the weight actually graded so far, which means a total item weight
above 1.0 has no effect on the outcome.

A student with no graded item (total graded weight of zero) is not gradable and gets None,
never 0.

Every reporting view goes through `compute_final_score()`; nothing else in the engine
computes a weighted average.
"""

from __future__ import annotations

from typing import Iterable

from models.gradebook import Gradebook


def _graded_pairs(student_id: str, gradebook: Gradebook) -> list[tuple[float, float]]:
    # (score, weight) for every item the student has a score on
    pairs = []

    for item in gradebook.items:
        score = gradebook.get_score(student_id, item.id)
        if score is not None:
            pairs.append((score, item.weight))

    return pairs


def compute_final_score(student_id: str, gradebook: Gradebook) -> float | None:
    """
    Computes a student's weighted final score in a gradebook.

    Args:
        student_id (str): The student to compute for.
        gradebook (Gradebook): The gradebook holding the items and scores.

    Returns:
        The weighted average of the student's graded items on the 0 to 5 scale, or None if
        the student has no graded item.

    Notes:
        - Pure and order independent: permuting the items never changes the result.
        - Scores recorded against item ids that are not part of `gradebook.items` are ignored.
    """
    weighted_sum = 0.0
    total_weight = 0.0

    for score, weight in _graded_pairs(student_id, gradebook):
        weighted_sum += score * weight
        total_weight += weight

    if total_weight == 0:
        return None

    return weighted_sum / total_weight


def compute_final_scores(
    student_ids: Iterable[str], gradebook: Gradebook
) -> dict[str, float | None]:
    return {
        student_id: compute_final_score(student_id, gradebook)
        for student_id in student_ids
    }


def graded_weight(student_id: str, gradebook: Gradebook) -> float:
    """
    Returns the denominator of the student's final score, i.e. the total weight of the items graded so far.
    """
    return sum(weight for _, weight in _graded_pairs(student_id, gradebook))
