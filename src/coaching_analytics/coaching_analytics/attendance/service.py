from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import structlog

from ..access.model import SessionContext
from ..access.policy import AccessPolicy
from ..batches.resolver import BatchJoinResolver
from ..common.datetime_utils import now_local, today_in, weekday_name
from ..core.constants import DEFAULT_REFERENCE_TIMEZONE
from ..core.exceptions import NotFoundError, ValidationError
from ..directory.repository import ClassRepository, StudentRepository
from .model import AttendanceRow, AttendanceWrite, flatten_day
from .repository import AttendanceRepository
from .schemas import AttendanceQuery, BulkAttendanceRequest, RecordAttendanceRequest, RemoveAttendanceRequest

logger = structlog.get_logger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        resolver: BatchJoinResolver,
        access: AccessPolicy,
        *,
        timezone: str = DEFAULT_REFERENCE_TIMEZONE,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._resolver = resolver
        self._access = access
        self._timezone = timezone

    def today(self) -> date:
        return today_in(self._timezone)

    def _coach_for(self, management_id: str, class_id: str) -> str:
        section = self._classes.get_by_id(management_id, class_id)
        return (section.coach_id if section else None) or ""

    def record(self, session: SessionContext, req: RecordAttendanceRequest, *, now: datetime | None = None) -> AttendanceWrite:
        now = now or now_local(self._timezone)
        mid = session.management_id

        student = self._students.get_by_id(mid, req.student_id)
        if not student:
            raise NotFoundError("Student not found")

        self._access.ensure_can_write_class(session, student.class_id)
        if not student.class_id:
            raise ValidationError("Student is not assigned to a class")

        attendance_date = req.attendance_date or now.date()
        day = weekday_name(attendance_date)

        self._attendance.merge_student_status(
            management_id=mid,
            class_id=student.class_id,
            attendance_date=attendance_date,
            day=day,
            coach_id=self._coach_for(mid, student.class_id),
            student_id=student.student_id,
            status=req.status.value,
            reason=req.reason,
            now=now,
        )
        self._students.set_attendance_status(mid, [student.student_id], req.status.value, now=now)

        logger.info(
            "attendance_recorded",
            management_id=mid,
            class_id=student.class_id,
            date=attendance_date.isoformat(),
            student_id=student.student_id,
            status=req.status.value,
        )
        return AttendanceWrite(class_id=student.class_id, attendance_date=attendance_date, day=day)

    def record_bulk(self, session: SessionContext, req: BulkAttendanceRequest, *, now: datetime | None = None) -> AttendanceWrite:
        """Replace the day's student map for a class in a single upsert."""

        now = now or now_local(self._timezone)
        mid = session.management_id

        section = self._classes.get_by_id(mid, req.class_id)
        if not section:
            raise NotFoundError("Class not found")

        self._access.ensure_can_write_class(session, section.class_id)

        wanted = [e.student_id for e in req.entries]
        members = {s.student_id for s in self._students.list_by_ids(mid, wanted) if s.class_id == section.class_id}
        missing = [sid for sid in wanted if sid not in members]
        if missing:
            raise ValidationError(f"Some students not found or do not belong to this class: {', '.join(missing)}")

        attendance_date = req.attendance_date or now.date()
        day = weekday_name(attendance_date)

        self._attendance.replace_day(
            management_id=mid,
            class_id=section.class_id,
            attendance_date=attendance_date,
            day=day,
            coach_id=section.coach_id or "",
            statuses={e.student_id: e.status.value for e in req.entries},
            reasons={e.student_id: e.reason for e in req.entries if e.reason},
            now=now,
        )
        for status in {e.status for e in req.entries}:
            ids = [e.student_id for e in req.entries if e.status == status]
            self._students.set_attendance_status(mid, ids, status.value, now=now)

        logger.info(
            "attendance_bulk_recorded",
            management_id=mid,
            class_id=section.class_id,
            date=attendance_date.isoformat(),
            count=len(req.entries),
        )
        return AttendanceWrite(
            class_id=section.class_id,
            attendance_date=attendance_date,
            day=day,
            student_count=len(req.entries),
        )

    def remove(self, session: SessionContext, req: RemoveAttendanceRequest, *, now: datetime | None = None) -> None:
        now = now or now_local(self._timezone)
        mid = session.management_id

        student = self._students.get_by_id(mid, req.student_id)
        if not student:
            raise NotFoundError("Student not found")

        self._access.ensure_can_write_class(session, student.class_id)

        removed = self._attendance.remove_student(
            management_id=mid,
            class_id=student.class_id,
            attendance_date=req.attendance_date,
            student_id=student.student_id,
            now=now,
        )
        if not removed:
            raise NotFoundError("Attendance record not found")

        logger.info(
            "attendance_removed",
            management_id=mid,
            class_id=student.class_id,
            date=req.attendance_date.isoformat(),
            student_id=student.student_id,
        )

    def list_attendance(self, management_id: str, query: AttendanceQuery) -> list[AttendanceRow]:
        attendance_date = query.attendance_date or self.today()

        class_ids: Optional[frozenset[str]] = frozenset([query.class_id]) if query.class_id else None
        student_ids: Optional[frozenset[str]] = None

        if query.batch:
            scope = self._resolver.resolve_scope(management_id, query.batch)
            if not scope.class_ids:
                return []
            if query.class_id and query.class_id not in scope.class_ids:
                return []
            class_ids = class_ids or scope.class_ids
            # A class can mix students from several batches.
            student_ids = scope.student_ids

        days = self._attendance.find_days(management_id=management_id, class_ids=class_ids, on_date=attendance_date)

        rows: list[AttendanceRow] = []
        for day in days:
            for row in flatten_day(day):
                if student_ids is not None and row.student_id not in student_ids:
                    continue
                rows.append(row)
        return rows
