from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Student as seen by the analytics core (owned by the student directory)."""

    student_id: str
    name: str
    email: str
    batch: str
    class_id: str
    attendance_status: Optional[str] = None


@dataclass(frozen=True)
class ClassSection:
    class_id: str
    name: str
    coach_id: Optional[str] = None


@dataclass(frozen=True)
class Coach:
    coach_id: str
    name: str
    email: str


@dataclass(frozen=True)
class Subject:
    subject_id: str
    class_id: str
    name: str


@dataclass(frozen=True)
class Test:
    test_id: str
    name: str
    class_id: str
    subject_id: str
    test_date: Optional[date] = None
