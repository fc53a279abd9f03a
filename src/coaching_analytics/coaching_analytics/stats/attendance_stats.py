from __future__ import annotations

from datetime import date
from typing import Optional

import structlog

from ..attendance.repository import AttendanceRepository
from ..batches.resolver import BatchJoinResolver
from .calculator.base import AttendanceCalculator
from .model import AttendanceDateBucket, AttendanceStats, StudentAttendanceTally
from .schemas import AttendanceStatsQuery

logger = structlog.get_logger(__name__)


class AttendanceStatsService:
    """Per-date and per-student attendance tallies for a class, batch or whole tenant."""

    def __init__(self, attendance: AttendanceRepository, resolver: BatchJoinResolver, calculator: AttendanceCalculator):
        self._attendance = attendance
        self._resolver = resolver
        self._calculator = calculator

    def build(self, management_id: str, query: AttendanceStatsQuery) -> AttendanceStats:
        class_ids: Optional[frozenset[str]] = frozenset({query.class_id}) if query.class_id else None
        batch_students: Optional[frozenset[str]] = None

        if query.batch:
            scope = self._resolver.resolve_scope(management_id, query.batch)
            if scope.is_empty:
                return AttendanceStats()
            if class_ids is None:
                class_ids = scope.class_ids
            elif not class_ids <= scope.class_ids:
                return AttendanceStats()
            batch_students = scope.student_ids

        days = self._attendance.find_days(
            management_id=management_id,
            class_ids=class_ids,
            start_date=query.start_date,
            end_date=query.end_date,
        )

        buckets: dict[date, AttendanceDateBucket] = {}
        tallies: dict[str, StudentAttendanceTally] = {}
        for day in days:
            bucket = buckets.setdefault(day.attendance_date, AttendanceDateBucket(day.attendance_date))
            for student_id, status in day.students.items():
                if query.student_id and student_id != query.student_id:
                    continue
                if batch_students is not None and student_id not in batch_students:
                    continue
                bucket.add(status)
                tallies.setdefault(student_id, StudentAttendanceTally(student_id)).add(status)

        stats = AttendanceStats(
            chart=tuple(buckets[d] for d in sorted(buckets)),
            students=tuple((t, self._calculator.percentage(t)) for t in tallies.values()),
        )
        logger.debug(
            "attendance_stats_built",
            management_id=management_id,
            days=len(days),
            students=len(stats.students),
        )
        return stats
