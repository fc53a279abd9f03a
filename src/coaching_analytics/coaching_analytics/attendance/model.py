from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceDay:
    """One class on one calendar date, with a sparse student -> status map.

    Only students explicitly marked that day appear in ``students``; leave
    reasons are kept in a parallel map for ``approved_leave`` entries.
    """

    record_id: str
    class_id: str
    attendance_date: date
    day: str
    coach_id: str
    students: dict[str, str] = field(default_factory=dict)
    leave_reasons: dict[str, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Flattened read-model: one student on one day."""

    record_id: str
    student_id: str
    attendance_date: date
    day: str
    status: str
    class_id: str
    coach_id: str
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        row = {
            "id": self.record_id,
            "studentId": self.student_id,
            "date": self.attendance_date.strftime("%Y-%m-%d"),
            "day": self.day,
            "status": self.status,
            "classId": self.class_id,
            "coachId": self.coach_id,
        }
        if self.reason is not None:
            row["reason"] = self.reason
        return row


def flatten_day(day: AttendanceDay) -> list[AttendanceRow]:
    return [
        AttendanceRow(
            record_id=day.record_id,
            student_id=student_id,
            attendance_date=day.attendance_date,
            day=day.day,
            status=status,
            class_id=day.class_id,
            coach_id=day.coach_id,
            reason=day.leave_reasons.get(student_id) if status == AttendanceStatus.APPROVED_LEAVE.value else None,
        )
        for student_id, status in day.students.items()
    ]


@dataclass(frozen=True)
class AttendanceWrite:
    """Where a write landed (the day document key)."""

    class_id: str
    attendance_date: date
    day: str
    student_count: int = 1

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "date": self.attendance_date.strftime("%Y-%m-%d"),
            "day": self.day,
            "count": self.student_count,
        }
