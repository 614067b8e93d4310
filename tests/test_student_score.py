# tests/test_student_score.py

import math

import pytest

from models.student_score import StudentScore


def test_student_score_to_dict(sample_score):
    assert sample_score.to_dict() == {
        "student_id": "s001",
        "grade_item_id": "i001",
        "score": 4.0,
    }


def test_student_score_from_dict_without_score():
    score = StudentScore.from_dict({"student_id": "s001", "grade_item_id": "i001"})

    assert score.score is None
    assert not score.is_graded
    assert score.key == ("s001", "i001")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (7, 5.0),
        (-1, 0.0),
        (5, 5.0),
        (0, 0.0),
        ("3,5", 3.5),
        (" 4.2 ", 4.2),
        ("", None),
        (None, None),
    ],
)
def test_score_is_parsed_and_clamped(raw, expected):
    assert StudentScore("s001", "i001", raw).score == expected


@pytest.mark.parametrize("raw", ["abc", True, object()])
def test_non_numeric_score_rejected(raw):
    with pytest.raises(TypeError):
        StudentScore("s001", "i001", raw)


def test_non_finite_score_rejected():
    with pytest.raises(ValueError):
        StudentScore("s001", "i001", math.nan)


def test_is_out_of_range():
    assert StudentScore.is_out_of_range(5.01)
    assert StudentScore.is_out_of_range(-0.5)
    assert not StudentScore.is_out_of_range(5.0)
    assert not StudentScore.is_out_of_range(None)
