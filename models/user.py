# models/user.py

"""
People known to the grading engine: students, teachers (and other staff), and guardians.

Users form a tagged variant. Every record carries an explicit `kind` discriminant, and
`user_from_dict()` dispatches on it, so callers never need to probe for attributes to tell
the variants apart.

The reporting layer never sees a full user record. It only works with the `RosterEntry`
projection of a `Student` (id, name, grade, group).

Role policy:
- ADMIN, RECTOR and COORDINATOR are administrative roles. Only they may lock or unlock a
  gradebook. A locked gradebook is read-only for everyone until it is unlocked.
- TEACHER and PSYCHOLOGY are staff roles without administrative rights.
- STUDENT and GUARDIAN are fixed by their variant.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import ClassVar


class Role(str, Enum):
    ADMIN = "ADMIN"
    RECTOR = "RECTOR"
    COORDINATOR = "COORDINATOR"
    TEACHER = "TEACHER"
    PSYCHOLOGY = "PSYCHOLOGY"
    STUDENT = "STUDENT"
    GUARDIAN = "GUARDIAN"


class UserKind(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    GUARDIAN = "guardian"


ADMINISTRATIVE_ROLES = frozenset({Role.ADMIN, Role.RECTOR, Role.COORDINATOR})
STAFF_ROLES = frozenset(ADMINISTRATIVE_ROLES | {Role.TEACHER, Role.PSYCHOLOGY})


def can_administer(actor: User | None) -> bool:
    """
    Returns True if the actor may lock or unlock gradebooks.
    """
    return actor is not None and actor.role in ADMINISTRATIVE_ROLES


def can_edit_gradebook(actor: User | None, owner_id: str) -> bool:
    """
    Returns True if the actor may open or edit a gradebook owned by `owner_id`.

    Teachers edit their own gradebooks; administrative roles may edit any of them.
    """
    if actor is None:
        return False

    return can_administer(actor) or (
        actor.role is Role.TEACHER and actor.id == owner_id
    )


@dataclass(frozen=True)
class RosterEntry:
    """
    The narrow view of a student consumed by the reporting layer.
    """

    id: str
    name: str
    grade: str
    group: str

    def to_dict(self) -> dict:
        return asdict(self)


class User:
    KIND: ClassVar[UserKind]

    def __init__(self, id: str, name: str, role: Role, email: str | None = None):
        self._id = id
        self._name = name
        self._role = Role(role)
        self._email = User.validate_email_input(email) if email else None

    # === properties ===

    @property
    def id(self) -> str:
        return self._id

    @property
    def kind(self) -> UserKind:
        return self.KIND

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name

    @property
    def role(self) -> Role:
        return self._role

    @property
    def email(self) -> str | None:
        return self._email

    @email.setter
    def email(self, email: str | None) -> None:
        self._email = User.validate_email_input(email) if email else None

    # === persistence and import ===

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "id": self._id,
            "name": self._name,
            "role": self._role.value,
            "email": self._email,
        }

    # === dunder methods ===

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._id}, {self._name}, {self._role.value})"

    # === data validators ===

    @staticmethod
    def validate_email_input(email: str) -> str:
        """
        Validates and normalizes an email address.

        Normalizes the input by stripping whitespace and converting to lowercase.
        Ensures the email:
            - Contains exactly one '@' symbol
            - Has non-whitespace characters on both sides of the '@'
            - Contains at least one '.' after the '@' to separate the domain and TLD

        Raises:
            ValueError: If the email does not conform to the expected format.
        """
        email = email.strip().lower()
        if not re.fullmatch(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
            raise ValueError(
                "Invalid input. Email must be a valid address with one @ and a domain."
            )
        return email


class Student(User):
    KIND = UserKind.STUDENT

    def __init__(
        self,
        id: str,
        name: str,
        grade: str,
        group: str,
        jornada: str | None = None,
        email: str | None = None,
    ):
        super().__init__(id, name, Role.STUDENT, email)
        self._grade = grade
        self._group = group
        self._jornada = jornada

    @property
    def grade(self) -> str:
        return self._grade

    @property
    def group(self) -> str:
        return self._group

    @property
    def jornada(self) -> str | None:
        return self._jornada

    def roster_entry(self) -> RosterEntry:
        return RosterEntry(
            id=self._id, name=self._name, grade=self._grade, group=self._group
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            {
                "grade": self._grade,
                "group": self._group,
                "jornada": self._jornada,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Student:
        return cls(
            id=data["id"],
            name=data["name"],
            grade=data["grade"],
            group=data["group"],
            jornada=data.get("jornada"),
            email=data.get("email"),
        )


class Teacher(User):
    """
    Any staff member: classroom teachers, psychologists, coordinators, the rector, and admins.
    """

    KIND = UserKind.TEACHER

    def __init__(
        self,
        id: str,
        name: str,
        role: Role = Role.TEACHER,
        subject: str | None = None,
        email: str | None = None,
    ):
        if Role(role) not in STAFF_ROLES:
            raise ValueError(f"Role {Role(role).value} is not a staff role.")

        super().__init__(id, name, role, email)
        self._subject = subject

    @property
    def subject(self) -> str | None:
        return self._subject

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["subject"] = self._subject
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Teacher:
        return cls(
            id=data["id"],
            name=data["name"],
            role=Role(data.get("role", Role.TEACHER.value)),
            subject=data.get("subject"),
            email=data.get("email"),
        )


class Guardian(User):
    KIND = UserKind.GUARDIAN

    def __init__(
        self,
        id: str,
        name: str,
        student_ids: list[str] | None = None,
        email: str | None = None,
    ):
        super().__init__(id, name, Role.GUARDIAN, email)
        self._student_ids = list(student_ids or [])

    @property
    def student_ids(self) -> list[str]:
        return list(self._student_ids)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["student_ids"] = list(self._student_ids)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Guardian:
        return cls(
            id=data["id"],
            name=data["name"],
            student_ids=data.get("student_ids", []),
            email=data.get("email"),
        )


_VARIANTS: dict[UserKind, type[User]] = {
    UserKind.STUDENT: Student,
    UserKind.TEACHER: Teacher,
    UserKind.GUARDIAN: Guardian,
}


def user_from_dict(data: dict) -> User:
    """
    Deserializes any user variant by its `kind` discriminant.

    Raises:
        ValueError: If `kind` is missing or unrecognized.
    """
    try:
        variant = _VARIANTS[UserKind(data["kind"])]

    except (KeyError, ValueError):
        raise ValueError(f"Unrecognized user kind: {data.get('kind')!r}") from None

    return variant.from_dict(data)
