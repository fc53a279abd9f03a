from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..batches.normalizer import normalize_batch_name
from ..common.validators import optional_str, require_mark_range, require_non_empty, require_number
from ..core.constants import DEFAULT_MAX_MARKS
from ..core.exceptions import ValidationError
from .model import StudentMark


def _max_marks(payload: Mapping[str, Any]) -> float:
    raw = payload.get("maxMarks")
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return DEFAULT_MAX_MARKS
    return require_number(raw, "maxMarks")


def _student_mark(payload: Mapping[str, Any], *, student_id: Optional[str] = None) -> StudentMark:
    marks = require_number(payload.get("marks"), "marks")
    max_marks = _max_marks(payload)
    require_mark_range(marks, max_marks, student_id=student_id)
    return StudentMark(marks=marks, max_marks=max_marks)


@dataclass(frozen=True)
class SetMarksRequest:
    test_id: str
    student_id: str
    mark: StudentMark

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SetMarksRequest":
        return cls(
            test_id=require_non_empty(payload.get("testId"), "testId"),
            student_id=require_non_empty(payload.get("studentId"), "studentId"),
            mark=_student_mark(payload),
        )


@dataclass(frozen=True)
class BulkMarksRequest:
    test_id: str
    class_id: str
    subject_id: str
    marks: tuple[tuple[str, StudentMark], ...]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BulkMarksRequest":
        """Validate every entry up front so one bad entry rejects the whole submission."""

        test_id = require_non_empty(payload.get("testId"), "testId")
        class_id = require_non_empty(payload.get("classId"), "classId")
        subject_id = require_non_empty(payload.get("subjectId"), "subjectId")

        raw_entries = payload.get("students")
        if not isinstance(raw_entries, list):
            raise ValidationError("students must be an array")

        marks: list[tuple[str, StudentMark]] = []
        seen: set[str] = set()
        for raw in raw_entries:
            if not isinstance(raw, Mapping):
                raise ValidationError("students entries must be objects")
            student_id = require_non_empty(raw.get("studentId"), "studentId")
            if student_id in seen:
                raise ValidationError(f"Duplicate marks entry for student {student_id}")
            seen.add(student_id)
            marks.append((student_id, _student_mark(raw, student_id=student_id)))

        return cls(test_id=test_id, class_id=class_id, subject_id=subject_id, marks=tuple(marks))


@dataclass(frozen=True)
class DeleteMarksRequest:
    test_id: str
    student_id: Optional[str] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "DeleteMarksRequest":
        return cls(
            test_id=require_non_empty(args.get("testId"), "testId"),
            student_id=optional_str(args, "studentId"),
        )


@dataclass(frozen=True)
class MarksQuery:
    test_id: Optional[str] = None
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    batch: Optional[str] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "MarksQuery":
        return cls(
            test_id=optional_str(args, "testId"),
            class_id=optional_str(args, "classId"),
            subject_id=optional_str(args, "subjectId"),
            batch=normalize_batch_name(args.get("batch")) or None,
        )
