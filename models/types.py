# models/types.py

"""
Holds TypeVar definition for simplifying type checks.
"""

from typing import TypeVar

from .grade_item import GradeItem
from .student_score import StudentScore

RecordType = TypeVar("RecordType", GradeItem, StudentScore)
