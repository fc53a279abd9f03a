from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ..batches.normalizer import normalize_batch_name
from ..common.validators import optional_iso_date, optional_str


@dataclass(frozen=True)
class AttendanceStatsQuery:
    class_id: Optional[str] = None
    batch: Optional[str] = None
    student_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "AttendanceStatsQuery":
        return cls(
            class_id=optional_str(args, "classId"),
            batch=normalize_batch_name(args.get("batch")) or None,
            student_id=optional_str(args, "studentId"),
            start_date=optional_iso_date(args, "startDate"),
            end_date=optional_iso_date(args, "endDate"),
        )


@dataclass(frozen=True)
class MarksStatsQuery:
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    batch: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "MarksStatsQuery":
        return cls(
            class_id=optional_str(args, "classId"),
            subject_id=optional_str(args, "subjectId"),
            batch=normalize_batch_name(args.get("batch")) or None,
            start_date=optional_iso_date(args, "startDate"),
            end_date=optional_iso_date(args, "endDate"),
        )
