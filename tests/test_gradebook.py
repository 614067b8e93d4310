# tests/test_gradebook.py

import pytest

from core.response import ErrorCode, PolicyWarning
from models.grade_item import GradeItem
from models.gradebook import Gradebook


def test_create_new_gradebook(sample_gradebook):
    assert sample_gradebook.subject == "Matemáticas"
    assert sample_gradebook.key == ("Matemáticas", "10º", "A", "Primer Periodo")
    assert sample_gradebook.id == "Matemáticas-10º-A-Primer Periodo"
    assert sample_gradebook.owner_id == "t001"
    assert not sample_gradebook.is_locked
    assert sample_gradebook.items == []


@pytest.mark.parametrize(
    "fields, error",
    [
        (("", "10º", "A", "P1", "t001"), ErrorCode.INVALID_FIELD_VALUE),
        (("Matemáticas", "  ", "A", "P1", "t001"), ErrorCode.INVALID_FIELD_VALUE),
        (("Matemáticas", "10º", None, "P1", "t001"), ErrorCode.MISSING_REQUIRED_FIELD),
    ],
)
def test_create_rejects_bad_key(fields, error):
    response = Gradebook.create(*fields)

    assert not response.success
    assert response.error is error


# === grade item methods ===


def test_add_item(sample_gradebook, sample_exam):
    response = sample_gradebook.add_item(sample_exam)

    assert response.success
    assert response.data["record"].to_dict() == sample_exam.to_dict()
    assert response.warnings == []
    assert [i.to_dict() for i in sample_gradebook.items] == [sample_exam.to_dict()]


def test_add_item_rejects_duplicate_id(sample_gradebook, sample_exam):
    sample_gradebook.add_item(sample_exam)
    response = sample_gradebook.add_item(GradeItem("i001", "Other", 0.2))

    assert not response.success
    assert response.error is ErrorCode.VALIDATION_FAILED
    assert len(sample_gradebook.items) == 1


def test_add_item_rejects_duplicate_name(sample_gradebook, sample_exam):
    sample_gradebook.add_item(sample_exam)
    response = sample_gradebook.add_item(GradeItem("i009", " exam ", 0.2))

    assert not response.success
    assert response.error is ErrorCode.VALIDATION_FAILED


def test_weight_over_100_percent_warns_but_is_allowed(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    response = gb.add_item(GradeItem("i003", "Project", 0.5))

    assert response.success
    assert response.warnings == [PolicyWarning.WEIGHT_OVER_100]
    assert gb.total_weight == pytest.approx(1.5)
    assert len(gb.items) == 3


def test_weight_of_exactly_100_percent_does_not_warn(sample_gradebook):
    for n in range(10):
        response = sample_gradebook.add_item(GradeItem(f"i{n}", f"Item {n}", 0.1))

    assert response.success
    assert response.warnings == []


def test_weight_warning_threshold_is_configurable(monkeypatch, sample_gradebook):
    from core.config import get_settings

    monkeypatch.setenv("GRADING_WEIGHT_WARNING_THRESHOLD", "2.0")
    get_settings.cache_clear()

    response = sample_gradebook.add_item(GradeItem("i001", "Exam", 1.5))

    assert response.warnings == []


def test_save_item_replaces_in_place(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.0)

    response = gb.save_item(GradeItem("i001", "Final Exam", 0.5))

    assert response.success
    assert [item.name for item in gb.items] == ["Final Exam", "Quiz"]
    assert gb.get_score("s001", "i001") == 4.0


def test_save_item_appends_new_item(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.save_item(GradeItem("i003", "Project", 0.1))

    assert response.success
    assert [item.id for item in exam_and_quiz_gradebook.items] == ["i001", "i002", "i003"]


def test_save_item_rejects_name_of_another_item(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.save_item(GradeItem("i001", "Quiz", 0.5))

    assert not response.success
    assert response.error is ErrorCode.VALIDATION_FAILED


def test_update_item_name(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.update_item_name("i002", "Pop Quiz")

    assert response.success
    assert exam_and_quiz_gradebook.find_item_by_id("i002").data["record"].name == "Pop Quiz"


def test_update_item_weight_rejects_zero(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.update_item_weight("i001", 0)

    assert not response.success
    assert response.error is ErrorCode.INVALID_FIELD_VALUE
    assert exam_and_quiz_gradebook.find_item_by_id("i001").data["record"].weight == 0.6


def test_update_item_weight_unknown_item(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.update_item_weight("nope", 0.2)

    assert not response.success
    assert response.error is ErrorCode.NOT_FOUND
    assert response.status_code == 404


def test_update_item_descriptors(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.update_item_descriptors("i001", ["d1", "d1", "d2"])

    assert response.success
    assert response.data["record"].performance_descriptor_ids == ["d1", "d2"]


def test_remove_item_cascades_to_scores(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.0)
    gb.write_score("s002", "i001", 3.0)
    gb.write_score("s001", "i002", 2.0)

    response = gb.remove_item("i001")

    assert response.success
    assert response.data["removed_scores"] == 2
    assert [item.id for item in gb.items] == ["i002"]
    assert [score.key for score in gb.scores] == [("s001", "i002")]


# === score methods ===


def test_write_score(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.write_score("s001", "i001", "4,5")

    assert response.success
    assert not response.data["clamped"]
    assert exam_and_quiz_gradebook.get_score("s001", "i001") == 4.5


def test_write_score_replaces_existing(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.5)
    gb.write_score("s001", "i001", 3.0)

    assert gb.get_score("s001", "i001") == 3.0
    assert len(gb.scores) == 1


@pytest.mark.parametrize("raw, stored", [(7, 5.0), (-1, 0.0)])
def test_write_score_clamps_out_of_range(exam_and_quiz_gradebook, caplog, raw, stored):
    response = exam_and_quiz_gradebook.write_score("s001", "i001", raw)

    assert response.success
    assert response.data["clamped"]
    assert exam_and_quiz_gradebook.get_score("s001", "i001") == stored
    assert "Clamped out-of-range score" in caplog.text


def test_write_score_rejects_text(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.write_score("s001", "i001", "excellent")

    assert not response.success
    assert response.error is ErrorCode.INVALID_FIELD_VALUE
    assert exam_and_quiz_gradebook.scores == []


def test_write_score_unknown_item(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.write_score("s001", "missing", 4.0)

    assert not response.success
    assert response.error is ErrorCode.NOT_FOUND


@pytest.mark.parametrize("blank", [None, "", "  "])
def test_blank_score_clears_entry(exam_and_quiz_gradebook, blank):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.0)

    response = gb.write_score("s001", "i001", blank)

    assert response.success
    assert response.data["record"] is None
    assert gb.find_score("s001", "i001") is None
    assert gb.scores == []


def test_batch_write_scores_stops_at_first_failure(exam_and_quiz_gradebook):
    response = exam_and_quiz_gradebook.batch_write_scores(
        [
            ("s001", "i001", 4.0),
            ("s002", "i001", 9),
            ("s003", "i001", "bad"),
            ("s004", "i001", 3.0),
        ]
    )

    assert not response.success
    assert response.error is ErrorCode.INVALID_FIELD_VALUE
    assert len(response.data["written"]) == 2
    assert response.data["clamped"] == [("s002", "i001")]


def test_scores_for_student(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.0)
    gb.write_score("s001", "i002", 3.0)
    gb.write_score("s002", "i001", 2.0)

    assert {s.grade_item_id for s in gb.scores_for_student("s001")} == {"i001", "i002"}


# === observations and descriptors ===


def test_set_observation(sample_gradebook):
    sample_gradebook.set_observation("s001", "  Participa activamente.  ")
    assert sample_gradebook.observation_for("s001") == "Participa activamente."

    sample_gradebook.set_observation("s001", "")
    assert sample_gradebook.observation_for("s001") == ""
    assert sample_gradebook.observations == {}


def test_set_period_descriptors(sample_gradebook):
    response = sample_gradebook.set_period_descriptors(["d1", "d2", "d1"])

    assert response.success
    assert sample_gradebook.period_descriptor_ids == ["d1", "d2"]


# === lock behavior ===


def test_locked_gradebook_rejects_every_mutation(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.0)
    gb.set_observation("s001", "Bien")
    gb.set_locked(True)
    before = gb.to_dict()

    attempts = [
        gb.add_item(GradeItem("i003", "Project", 0.2)),
        gb.save_item(GradeItem("i001", "Exam", 0.9)),
        gb.update_item_name("i001", "Renamed"),
        gb.update_item_weight("i001", 0.1),
        gb.update_item_descriptors("i001", ["d1"]),
        gb.remove_item("i002"),
        gb.write_score("s001", "i001", 1.0),
        gb.clear_score("s001", "i001"),
        gb.set_observation("s001", "Cambio"),
        gb.set_period_descriptors(["d9"]),
    ]

    for response in attempts:
        assert not response.success
        assert response.error is ErrorCode.LOCK_VIOLATION
        assert response.status_code == 423

    # records handed out by the accessors are detached from the gradebook
    gb.items[0].weight = 0.1
    gb.find_item_by_id("i002").data["record"].name = "Hacked"
    gb.find_score("s001", "i001").score = 1.0
    gb.scores[0].score = 2.0
    gb.scores_for_student("s001")[0].score = 3.0

    assert gb.to_dict() == before


def test_returned_records_are_detached(sample_gradebook, sample_exam):
    add_response = sample_gradebook.add_item(sample_exam)
    sample_exam.name = "Changed afterwards"
    add_response.data["record"].weight = 0.9

    stored = sample_gradebook.find_item_by_id("i001").data["record"]
    assert stored.name == "Exam"
    assert stored.weight == 0.6

    write_response = sample_gradebook.write_score("s001", "i001", 4.0)
    write_response.data["record"].score = 0.0

    assert sample_gradebook.get_score("s001", "i001") == 4.0


def test_locked_gradebook_rejects_new_item(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.set_locked(True)

    response = gb.add_item(GradeItem("i003", "Project", 0.2))

    assert not response.success
    assert len(gb.items) == 2


def test_reads_available_while_locked(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.write_score("s001", "i001", 4.0)
    gb.set_locked(True)

    assert gb.get_score("s001", "i001") == 4.0
    assert gb.find_item_by_id("i001").success
    assert gb.lock_status == "'LOCKED'"


# === persistence ===


def test_round_trip_is_lossless(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    gb.update_item_descriptors("i001", ["d1"])
    gb.write_score("s001", "i001", 4.0)
    gb.write_score("s002", "i002", 2.5)
    gb.set_observation("s001", "Excelente")
    gb.set_period_descriptors(["p1"])
    gb.set_locked(True)

    data = gb.to_dict()
    restored = Gradebook.from_dict(data)

    assert restored.to_dict() == data
    assert restored.is_locked


def test_to_dict_shape(sample_gradebook):
    assert set(sample_gradebook.to_dict()) == {
        "subject",
        "grade",
        "group",
        "period",
        "owner_id",
        "items",
        "scores",
        "observations",
        "period_descriptor_ids",
        "is_locked",
    }


def test_from_dict_rejects_score_for_unknown_item(sample_gradebook):
    data = sample_gradebook.to_dict()
    data["scores"] = [{"student_id": "s001", "grade_item_id": "ghost", "score": 3.0}]

    with pytest.raises(ValueError):
        Gradebook.from_dict(data)


def test_copy_is_independent(exam_and_quiz_gradebook):
    gb = exam_and_quiz_gradebook
    clone = gb.copy()

    clone.write_score("s001", "i001", 5.0)
    clone.update_item_name("i002", "Changed")

    assert gb.scores == []
    assert gb.find_item_by_id("i002").data["record"].name == "Quiz"


def test_matches(sample_gradebook):
    assert sample_gradebook.matches()
    assert sample_gradebook.matches(grade="10º", period="Primer Periodo")
    assert not sample_gradebook.matches(group="B")
