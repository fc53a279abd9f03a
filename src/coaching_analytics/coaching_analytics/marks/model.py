from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.constants import DEFAULT_MAX_MARKS


@dataclass(frozen=True)
class StudentMark:
    marks: float
    max_marks: float = DEFAULT_MAX_MARKS

    @property
    def percentage(self) -> float:
        return self.marks * 100 / self.max_marks if self.max_marks > 0 else 0.0

    def to_dict(self) -> dict:
        return {"marks": self.marks, "maxMarks": self.max_marks}

    @classmethod
    def from_stored(cls, raw: Any) -> "StudentMark":
        """Lenient decode of a stored entry: missing marks read as 0, missing/zero maxMarks as 100."""

        raw = raw if isinstance(raw, dict) else {}
        return cls(
            marks=float(raw.get("marks") or 0),
            max_marks=float(raw.get("maxMarks") or DEFAULT_MAX_MARKS),
        )


@dataclass(frozen=True)
class MarkTest:
    """One test with a sparse student -> marks map."""

    record_id: str
    test_id: str
    class_id: str
    subject_id: str
    students: dict[str, StudentMark] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class MarkRow:
    record_id: str
    test_id: str
    student_id: str
    subject_id: str
    class_id: str
    marks: float
    max_marks: float

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "testId": self.test_id,
            "studentId": self.student_id,
            "subjectId": self.subject_id,
            "classId": self.class_id,
            "marks": self.marks,
            "maxMarks": self.max_marks,
        }


def flatten_marks(record: MarkTest) -> list[MarkRow]:
    return [
        MarkRow(
            record_id=record.record_id,
            test_id=record.test_id,
            student_id=student_id,
            subject_id=record.subject_id,
            class_id=record.class_id,
            marks=mark.marks,
            max_marks=mark.max_marks,
        )
        for student_id, mark in record.students.items()
    ]
