# core/utils.py

"""
Repository for program-wide utilities.
"""

import uuid


def generate_uuid() -> str:
    return str(uuid.uuid4())


def gradebook_key(subject: str, grade: str, group: str, period: str) -> str:
    """
    Builds the deterministic gradebook id from its natural key.
    """
    return f"{subject}-{grade}-{group}-{period}"


def normalize(text: str) -> str:
    return text.strip().lower()


def mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None
