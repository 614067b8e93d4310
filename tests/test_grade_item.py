# tests/test_grade_item.py

import math

import pytest

from models.grade_item import GradeItem


def test_grade_item_to_dict(sample_exam):
    assert sample_exam.to_dict() == {
        "id": "i001",
        "name": "Exam",
        "weight": 0.6,
        "performance_descriptor_ids": [],
    }


def test_grade_item_from_dict():
    item = GradeItem.from_dict(
        {
            "id": "i003",
            "name": "Project",
            "weight": 0.25,
            "performance_descriptor_ids": ["d1", "d2"],
        }
    )

    assert item.id == "i003"
    assert item.name == "Project"
    assert item.weight == 0.25
    assert item.performance_descriptor_ids == ["d1", "d2"]


def test_grade_item_to_str(sample_exam):
    assert sample_exam.__str__() == "GRADE ITEM: name: Exam, weight: 0.6, id: i001"


def test_weight_accepts_numeric_strings():
    assert GradeItem("i001", "Exam", "0.3").weight == 0.3


@pytest.mark.parametrize("weight", [0, -0.1, -5])
def test_non_positive_weight_rejected(weight):
    with pytest.raises(ValueError):
        GradeItem("i001", "Exam", weight)


@pytest.mark.parametrize("weight", ["heavy", None, True, [0.5]])
def test_non_numeric_weight_rejected(weight):
    with pytest.raises(TypeError):
        GradeItem("i001", "Exam", weight)


def test_non_finite_weight_rejected():
    with pytest.raises(ValueError):
        GradeItem("i001", "Exam", math.inf)


def test_blank_name_rejected():
    with pytest.raises(ValueError):
        GradeItem("i001", "   ", 0.5)


def test_failed_weight_update_keeps_old_weight(sample_exam):
    with pytest.raises(ValueError):
        sample_exam.weight = 0

    assert sample_exam.weight == 0.6


def test_descriptor_ids_are_deduplicated_in_order():
    item = GradeItem("i001", "Exam", 0.5, ["d2", "d1", "d2"])
    assert item.performance_descriptor_ids == ["d2", "d1"]
