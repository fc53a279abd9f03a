from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Mapping, Optional, Protocol, Sequence

from .model import AttendanceDay


class AttendanceRepository(Protocol):
    def merge_student_status(
        self,
        *,
        management_id: str,
        class_id: str,
        attendance_date: date,
        day: str,
        coach_id: str,
        student_id: str,
        status: str,
        reason: Optional[str],
        now: datetime,
    ) -> None:
        """Atomic upsert of one ``students.<id>`` entry; other students are left untouched.

        On insert the day is created with createdAt; ``reason`` is stored for
        the student when given and cleared otherwise.
        """

        raise NotImplementedError

    def replace_day(
        self,
        *,
        management_id: str,
        class_id: str,
        attendance_date: date,
        day: str,
        coach_id: str,
        statuses: Mapping[str, str],
        reasons: Mapping[str, str],
        now: datetime,
    ) -> None:
        """Upsert the whole student map of a day in one statement (last writer wins)."""

        raise NotImplementedError

    def remove_student(
        self,
        *,
        management_id: str,
        class_id: str,
        attendance_date: date,
        student_id: str,
        now: datetime,
    ) -> bool:
        raise NotImplementedError

    def find_days(
        self,
        *,
        management_id: str,
        class_ids: Optional[Collection[str]] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceDay]:
        """``class_ids=None`` means any class; an empty collection matches nothing."""

        raise NotImplementedError
