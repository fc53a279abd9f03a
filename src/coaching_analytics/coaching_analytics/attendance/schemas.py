from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ..batches.normalizer import normalize_batch_name
from ..common.validators import optional_iso_date, optional_str, require_enum, require_iso_date, require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def _reason_for(status: AttendanceStatus, reason: Optional[str], *, student_id: str) -> Optional[str]:
    if status != AttendanceStatus.APPROVED_LEAVE:
        return None
    if not reason:
        raise ValidationError(f"reason is required when status is approved_leave (student {student_id})")
    return reason


@dataclass(frozen=True)
class RecordAttendanceRequest:
    student_id: str
    status: AttendanceStatus
    attendance_date: Optional[date] = None
    reason: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RecordAttendanceRequest":
        student_id = require_non_empty(payload.get("studentId"), "studentId")
        status = require_enum(require_non_empty(payload.get("status"), "status"), AttendanceStatus, "status")
        return cls(
            student_id=student_id,
            status=status,
            attendance_date=optional_iso_date(payload, "date"),
            reason=_reason_for(status, optional_str(payload, "reason"), student_id=student_id),
        )


@dataclass(frozen=True)
class BulkAttendanceEntry:
    student_id: str
    status: AttendanceStatus
    reason: Optional[str] = None


@dataclass(frozen=True)
class BulkAttendanceRequest:
    class_id: str
    entries: tuple[BulkAttendanceEntry, ...]
    attendance_date: Optional[date] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BulkAttendanceRequest":
        class_id = require_non_empty(payload.get("classId"), "classId")
        raw_entries = payload.get("attendance")
        if not isinstance(raw_entries, list):
            raise ValidationError("attendance must be an array")

        entries: list[BulkAttendanceEntry] = []
        seen: set[str] = set()
        for raw in raw_entries:
            if not isinstance(raw, Mapping):
                raise ValidationError("attendance entries must be objects")
            student_id = require_non_empty(raw.get("studentId"), "studentId")
            if student_id in seen:
                raise ValidationError(f"Duplicate attendance entry for student {student_id}")
            seen.add(student_id)
            status = require_enum(require_non_empty(raw.get("status"), "status"), AttendanceStatus, "status")
            entries.append(
                BulkAttendanceEntry(
                    student_id=student_id,
                    status=status,
                    reason=_reason_for(status, optional_str(raw, "reason"), student_id=student_id),
                )
            )

        return cls(class_id=class_id, entries=tuple(entries), attendance_date=optional_iso_date(payload, "date"))


@dataclass(frozen=True)
class RemoveAttendanceRequest:
    student_id: str
    attendance_date: date

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RemoveAttendanceRequest":
        return cls(
            student_id=require_non_empty(payload.get("studentId"), "studentId"),
            attendance_date=require_iso_date(require_non_empty(payload.get("date"), "date"), "date"),
        )


@dataclass(frozen=True)
class AttendanceQuery:
    class_id: Optional[str] = None
    batch: Optional[str] = None
    attendance_date: Optional[date] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "AttendanceQuery":
        return cls(
            class_id=optional_str(args, "classId"),
            batch=normalize_batch_name(args.get("batch")) or None,
            attendance_date=optional_iso_date(args, "date"),
        )
