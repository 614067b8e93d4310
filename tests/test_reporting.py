# tests/test_reporting.py

import pytest

from core.response import ErrorCode

PERIOD = "Primer Periodo"


@pytest.fixture
def seeded(repository, gradebook_factory):
    # directory: s001, s002 in 10º A; s003 in 10º B; s004 in 11º A
    repository.put(gradebook_factory("Matemáticas", {"s001": 5.0, "s002": 2.0}))
    repository.put(gradebook_factory("Ciencias", {"s001": 4.0, "s002": 2.5}))
    repository.put(gradebook_factory("Matemáticas", {"s003": 3.5}, group="B"))
    repository.put(gradebook_factory("Matemáticas", {"s004": 4.7}, grade="11º"))
    return repository


def test_roster_projection(reporting):
    roster = reporting.roster(grade="10º", jornada="Mañana")

    assert [entry.id for entry in roster] == ["s001", "s002"]
    assert set(roster[0].to_dict()) == {"id", "name", "grade", "group"}


def test_dashboard_for_whole_school(reporting, seeded):
    dashboard = reporting.dashboard(PERIOD)

    assert dashboard.summary.student_count == 4
    assert dashboard.distribution.total == 4
    assert [a.student_id for a in dashboard.top_students] == ["s004", "s001", "s003", "s002"]
    assert [a.student_id for a in dashboard.at_risk_students] == ["s002"]
    assert [b.label for b in dashboard.group_comparison] == ["10º", "11º"]
    assert [p.subject for p in dashboard.top_subjects] == ["Matemáticas", "Ciencias"]


def test_dashboard_filtered_by_grade_compares_groups(reporting, seeded):
    dashboard = reporting.dashboard(PERIOD, grade="10º")

    assert dashboard.summary.student_count == 3
    assert [b.label for b in dashboard.group_comparison] == ["Grupo A", "Grupo B"]


def test_dashboard_search_only_narrows_rankings(reporting, seeded):
    dashboard = reporting.dashboard(PERIOD, search="bruno")

    assert [a.student_id for a in dashboard.top_students] == ["s002"]
    assert dashboard.summary.student_count == 4


def test_dashboard_for_empty_filter(reporting, seeded):
    dashboard = reporting.dashboard(PERIOD, grade="5º")

    assert dashboard.summary.student_count == 0
    assert dashboard.distribution.total == 0
    assert dashboard.top_students == ()
    assert dashboard.top_subjects == ()
    assert dashboard.group_comparison == ()
    assert dashboard.to_dict()["summary"]["approval_rate"] == 0.0


def test_consolidated(reporting, seeded):
    report = reporting.consolidated("10º", "A", PERIOD)

    assert [r.subject for r in report["subjects"]] == ["Ciencias", "Matemáticas"]
    assert [a.student_id for a in report["students"]] == ["s001", "s002"]


def test_grade_sheet(reporting, seeded):
    response = reporting.grade_sheet("Matemáticas-10º-A-Primer Periodo")

    assert response.success
    assert [row.student_id for row in response.data["sheet"].rows] == ["s001", "s002"]


def test_grade_sheet_for_unknown_gradebook(reporting):
    response = reporting.grade_sheet("nope")

    assert response.error is ErrorCode.NOT_FOUND


def test_report_card(reporting, seeded):
    response = reporting.report_card("s001", PERIOD)
    card = response.data["report_card"]

    assert response.success
    assert [line.subject for line in card.lines] == ["Ciencias", "Matemáticas"]
    assert card.average.average == pytest.approx(4.5)


def test_grades_certificate(reporting, seeded):
    response = reporting.grades_certificate("s003", PERIOD)
    certificate = response.data["certificate"]

    assert certificate.average == pytest.approx(3.5)
    assert certificate.to_dict()["tier"] == "BASIC"


def test_report_card_for_unknown_student(reporting):
    assert reporting.report_card("s999", PERIOD).error is ErrorCode.NOT_FOUND
