from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Optional, Protocol, Sequence

from .model import ClassSection, Coach, Student, Subject, Test


class StudentRepository(Protocol):
    def get_by_id(self, management_id: str, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_by_ids(self, management_id: str, student_ids: Collection[str]) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_batch(self, management_id: str, batch: str) -> Sequence[Student]:
        """Students whose batch equals ``batch`` exactly (case-sensitive), ordered by name."""

        raise NotImplementedError

    def distinct_batches(self, management_id: str) -> Sequence[str]:
        raise NotImplementedError

    def set_attendance_status(self, management_id: str, student_ids: Collection[str], status: str, *, now: datetime) -> None:
        """Mirror the last recorded status onto the student row (display only)."""

        raise NotImplementedError


class ClassRepository(Protocol):
    def get_by_id(self, management_id: str, class_id: str) -> Optional[ClassSection]:
        raise NotImplementedError

    def list_all(self, management_id: str) -> Sequence[ClassSection]:
        raise NotImplementedError


class CoachRepository(Protocol):
    def is_assigned(self, management_id: str, *, email: str, coach_id: str) -> bool:
        raise NotImplementedError

    def list_by_ids(self, management_id: str, coach_ids: Collection[str]) -> Sequence[Coach]:
        raise NotImplementedError


class SubjectRepository(Protocol):
    def list_all(self, management_id: str) -> Sequence[Subject]:
        """All subjects of the tenant in their stored (insertion) order."""

        raise NotImplementedError


class TestRepository(Protocol):
    def get_by_id(self, management_id: str, test_id: str) -> Optional[Test]:
        raise NotImplementedError

    def find(
        self,
        management_id: str,
        *,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Test]:
        raise NotImplementedError
