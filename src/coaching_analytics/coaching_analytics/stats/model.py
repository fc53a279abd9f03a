from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


def _iso(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole > 0 else 0.0


# ---------------------------------------------------------------- attendance


@dataclass
class AttendanceDateBucket:
    attendance_date: date
    present: int = 0
    absent: int = 0
    late: int = 0

    def add(self, status: str) -> None:
        if status == AttendanceStatus.PRESENT:
            self.present += 1
        elif status == AttendanceStatus.ABSENT:
            self.absent += 1
        elif status == AttendanceStatus.LATE:
            self.late += 1

    def to_dict(self) -> dict:
        return {"date": _iso(self.attendance_date), "present": self.present, "absent": self.absent, "late": self.late}


@dataclass
class StudentAttendanceTally:
    student_id: str
    present: int = 0
    absent: int = 0
    late: int = 0
    approved_leave: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent + self.late

    def add(self, status: str) -> None:
        if status == AttendanceStatus.PRESENT:
            self.present += 1
        elif status == AttendanceStatus.ABSENT:
            self.absent += 1
        elif status == AttendanceStatus.LATE:
            self.late += 1
        elif status == AttendanceStatus.APPROVED_LEAVE:
            self.approved_leave += 1


@dataclass(frozen=True)
class AttendanceStats:
    chart: tuple[AttendanceDateBucket, ...] = ()
    students: tuple[tuple[StudentAttendanceTally, float], ...] = ()

    def to_dict(self) -> dict:
        return {
            "chartData": [b.to_dict() for b in self.chart],
            "stats": {
                "totalPresent": sum(b.present for b in self.chart),
                "totalAbsent": sum(b.absent for b in self.chart),
                "totalLate": sum(b.late for b in self.chart),
                "totalStudents": len(self.students),
            },
            "studentStats": [
                {
                    "studentId": tally.student_id,
                    "present": tally.present,
                    "absent": tally.absent,
                    "late": tally.late,
                    "approvedLeave": tally.approved_leave,
                    "total": tally.total,
                    "attendancePercentage": percentage,
                }
                for tally, percentage in self.students
            ],
        }


# --------------------------------------------------------------------- marks


@dataclass
class MarksTotals:
    total_marks: float = 0.0
    total_max_marks: float = 0.0
    count: int = 0

    def add(self, marks: float, max_marks: float) -> None:
        self.total_marks += marks
        self.total_max_marks += max_marks
        self.count += 1

    @property
    def average_marks(self) -> float:
        return _ratio(self.total_marks, self.count)

    @property
    def average_percentage(self) -> float:
        return _ratio(self.total_marks * 100, self.total_max_marks)


@dataclass
class MarksDateBucket:
    test_date: date
    totals: MarksTotals = field(default_factory=MarksTotals)
    subjects: dict[str, MarksTotals] = field(default_factory=dict)
    classes: dict[str, MarksTotals] = field(default_factory=dict)


@dataclass(frozen=True)
class StudentTestResult:
    test_id: str
    test_name: str
    test_date: Optional[date]
    marks: float
    max_marks: float
    percentage: float

    def to_dict(self) -> dict:
        return {
            "testId": self.test_id,
            "testName": self.test_name,
            "testDate": _iso(self.test_date) if self.test_date else None,
            "marks": self.marks,
            "maxMarks": self.max_marks,
            "percentage": self.percentage,
        }


@dataclass
class StudentMarksTally:
    student_id: str
    totals: MarksTotals = field(default_factory=MarksTotals)
    tests: list[StudentTestResult] = field(default_factory=list)

    @property
    def test_count(self) -> int:
        return self.totals.count


@dataclass(frozen=True)
class StudentMarksSummary:
    student_id: str
    name: str
    email: str
    batch: str
    tally: StudentMarksTally

    def to_dict(self) -> dict:
        totals = self.tally.totals
        return {
            "studentId": self.student_id,
            "studentName": self.name,
            "studentEmail": self.email,
            "batch": self.batch,
            "totalMarks": totals.total_marks,
            "totalMaxMarks": totals.total_max_marks,
            "averageMarks": _ratio(totals.total_marks, self.tally.test_count),
            "averagePercentage": totals.average_percentage,
            "testCount": self.tally.test_count,
            "tests": [t.to_dict() for t in self.tally.tests],
        }


@dataclass(frozen=True)
class SubjectAverage:
    subject_key: str
    subject_name: str
    totals: MarksTotals

    def to_dict(self) -> dict:
        return {
            "subjectId": self.subject_key,
            "subjectName": self.subject_name,
            "averageMarks": self.totals.average_marks,
            "averagePercentage": self.totals.average_percentage,
            "totalMarks": self.totals.total_marks,
            "totalMaxMarks": self.totals.total_max_marks,
            "count": self.totals.count,
        }


@dataclass(frozen=True)
class MarksStats:
    chart: tuple[MarksDateBucket, ...] = ()
    students: tuple[StudentMarksSummary, ...] = ()
    subject_averages: tuple[SubjectAverage, ...] = ()
    overall: MarksTotals = field(default_factory=MarksTotals)
    total_tests: int = 0
    subject_names: dict[str, str] = field(default_factory=dict)
    class_names: dict[str, str] = field(default_factory=dict)

    def _chart_row(self, bucket: MarksDateBucket) -> dict:
        row = {
            "date": _iso(bucket.test_date),
            "averageMarks": bucket.totals.average_marks,
            "averagePercentage": bucket.totals.average_percentage,
            "totalMarks": bucket.totals.total_marks,
            "totalMaxMarks": bucket.totals.total_max_marks,
            "count": bucket.totals.count,
            "subjects": {
                key: {"name": self.subject_names.get(key, key), "averagePercentage": totals.average_percentage}
                for key, totals in bucket.subjects.items()
            },
        }
        if bucket.classes:
            row["classes"] = {
                class_id: {"name": self.class_names.get(class_id, class_id), "averagePercentage": totals.average_percentage}
                for class_id, totals in bucket.classes.items()
            }
        return row

    def to_dict(self) -> dict:
        return {
            "chartData": [self._chart_row(b) for b in self.chart],
            "stats": {
                "totalTests": self.total_tests,
                "totalStudents": len(self.students),
                "averageMarks": self.overall.average_marks,
                "averagePercentage": self.overall.average_percentage,
                "totalRecords": self.overall.count,
            },
            "studentStats": [s.to_dict() for s in self.students],
            "subjectAverages": [s.to_dict() for s in self.subject_averages],
        }
