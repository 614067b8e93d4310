# tests/conftest.py

import pytest

from core.config import get_settings
from engine.service import GradebookService, ReportingService
from models.grade_item import GradeItem
from models.gradebook import Gradebook
from models.student_score import StudentScore
from models.user import Guardian, Role, RosterEntry, Student, Teacher
from storage.memory import InMemoryGradebookRepository, InMemoryStudentDirectory

PERIOD = "Primer Periodo"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    # keep every test away from the user's environment and data directory
    for name in (
        "GRADING_DATA_DIR",
        "GRADING_LOG_LEVEL",
        "GRADING_WEIGHT_WARNING_THRESHOLD",
        "GRADING_TOP_STUDENTS_LIMIT",
        "GRADING_TOP_SUBJECTS_LIMIT",
        "GRADING_EXCELLENT_THRESHOLD",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_gradebook():
    gradebook_response = Gradebook.create("Matemáticas", "10º", "A", PERIOD, "t001")
    return gradebook_response.data["gradebook"]


@pytest.fixture
def sample_exam():
    return GradeItem("i001", "Exam", 0.6)


@pytest.fixture
def sample_quiz():
    return GradeItem("i002", "Quiz", 0.4)


@pytest.fixture
def exam_and_quiz_gradebook(sample_gradebook, sample_exam, sample_quiz):
    sample_gradebook.add_item(sample_exam)
    sample_gradebook.add_item(sample_quiz)
    return sample_gradebook


@pytest.fixture
def sample_score():
    return StudentScore("s001", "i001", 4.0)


@pytest.fixture
def sample_student():
    return Student("s001", "Ana Gómez", "10º", "A", jornada="Mañana")


@pytest.fixture
def sample_teacher():
    return Teacher("t001", "Carlos Ruiz", subject="Matemáticas")


@pytest.fixture
def other_teacher():
    return Teacher("t002", "Lucía Pérez", subject="Ciencias")


@pytest.fixture
def sample_coordinator():
    return Teacher("c001", "Marta Díaz", role=Role.COORDINATOR)


@pytest.fixture
def sample_guardian():
    return Guardian("g001", "Pedro Gómez", student_ids=["s001"])


@pytest.fixture
def roster():
    return [
        RosterEntry("s001", "Ana Gómez", "10º", "A"),
        RosterEntry("s002", "Bruno Díaz", "10º", "A"),
        RosterEntry("s003", "Camila Rojas", "10º", "A"),
    ]


def make_gradebook(subject, scores, grade="10º", group="A", period=PERIOD, owner_id="t001"):
    """
    Builds a gradebook with a single item of weight 1.0, scored per student from a dict.
    """
    gradebook = Gradebook.create(subject, grade, group, period, owner_id).data["gradebook"]
    gradebook.add_item(GradeItem(f"{subject}-final", "Final", 1.0))
    for student_id, score in scores.items():
        gradebook.write_score(student_id, f"{subject}-final", score)
    return gradebook


@pytest.fixture
def repository():
    return InMemoryGradebookRepository()


@pytest.fixture
def directory():
    return InMemoryStudentDirectory(
        [
            Student("s001", "Ana Gómez", "10º", "A", jornada="Mañana"),
            Student("s002", "Bruno Díaz", "10º", "A", jornada="Mañana"),
            Student("s003", "Camila Rojas", "10º", "B", jornada="Tarde"),
            Student("s004", "Daniel Mora", "11º", "A", jornada="Mañana"),
        ]
    )


@pytest.fixture
def service(repository):
    return GradebookService(repository)


@pytest.fixture
def reporting(repository, directory):
    return ReportingService(repository, directory)


@pytest.fixture
def gradebook_factory():
    return make_gradebook
