from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Collection, Mapping, Optional

import pytest

from coaching_analytics.access.model import SessionContext
from coaching_analytics.access.policy import AccessPolicy
from coaching_analytics.attendance.model import AttendanceDay
from coaching_analytics.attendance.service import AttendanceService
from coaching_analytics.batches.resolver import BatchJoinResolver
from coaching_analytics.batches.service import BatchService
from coaching_analytics.container import Container
from coaching_analytics.core.enums import Role
from coaching_analytics.directory.model import ClassSection, Coach, Student, Subject, Test
from coaching_analytics.marks.model import MarkTest, StudentMark
from coaching_analytics.marks.service import MarksService
from coaching_analytics.stats.attendance_stats import AttendanceStatsService
from coaching_analytics.stats.calculator.late_weighted_calculator import LateWeightedCalculator
from coaching_analytics.stats.marks_stats import MarksStatsService

MID = "m1"


class InMemoryStudents:
    """Exact id matching by default; ``ignore_case`` mimics a case-insensitive column collation."""

    def __init__(self, students: list[Student], *, ignore_case: bool = False):
        self.students = {(MID, s.student_id): s for s in students}
        self.ignore_case = ignore_case

    def _key(self, student_id: str) -> str:
        return student_id.casefold() if self.ignore_case else student_id

    def get_by_id(self, management_id: str, student_id: str) -> Optional[Student]:
        return next(iter(self.list_by_ids(management_id, [student_id])), None)

    def list_by_ids(self, management_id: str, student_ids: Collection[str]):
        wanted = {self._key(sid) for sid in student_ids}
        return [s for (mid, sid), s in self.students.items() if mid == management_id and self._key(sid) in wanted]

    def list_by_batch(self, management_id: str, batch: str):
        found = [s for (mid, _), s in self.students.items() if mid == management_id and s.batch == batch]
        return sorted(found, key=lambda s: s.name)

    def distinct_batches(self, management_id: str):
        return sorted({s.batch for (mid, _), s in self.students.items() if mid == management_id})

    def set_attendance_status(self, management_id: str, student_ids, status: str, *, now: datetime) -> None:
        for sid in student_ids:
            key = (management_id, sid)
            if key in self.students:
                self.students[key] = replace(self.students[key], attendance_status=status)


@dataclass
class InMemoryClasses:
    classes: list[ClassSection]

    def get_by_id(self, management_id: str, class_id: str) -> Optional[ClassSection]:
        return next((c for c in self.classes if c.class_id == class_id), None) if management_id == MID else None

    def list_all(self, management_id: str):
        return list(self.classes) if management_id == MID else []


@dataclass
class InMemoryCoaches:
    coaches: list[Coach]

    def is_assigned(self, management_id: str, *, email: str, coach_id: str) -> bool:
        return management_id == MID and any(c.coach_id == coach_id and c.email == email for c in self.coaches)

    def list_by_ids(self, management_id: str, coach_ids):
        return sorted((c for c in self.coaches if c.coach_id in set(coach_ids)), key=lambda c: c.name)


@dataclass
class InMemorySubjects:
    subjects: list[Subject]

    def list_all(self, management_id: str):
        return list(self.subjects) if management_id == MID else []


@dataclass
class InMemoryTests:
    tests: list[Test]

    def get_by_id(self, management_id: str, test_id: str) -> Optional[Test]:
        return next((t for t in self.tests if t.test_id == test_id), None) if management_id == MID else None

    def find(self, management_id, *, class_id=None, subject_id=None, start_date=None, end_date=None):
        found = []
        for t in self.tests:
            if class_id is not None and t.class_id != class_id:
                continue
            if subject_id is not None and t.subject_id != subject_id:
                continue
            if start_date is not None and (t.test_date is None or t.test_date < start_date):
                continue
            if end_date is not None and (t.test_date is None or t.test_date > end_date):
                continue
            found.append(t)
        return found if management_id == MID else []


@dataclass
class InMemoryBatchRegistry:
    names: list[str]

    def list_names(self, management_id: str):
        return list(self.names) if management_id == MID else []


class InMemoryAttendance:
    """One document per (tenant, class, date); single-student writes touch one key only."""

    def __init__(self):
        self.days: dict[tuple[str, str, date], AttendanceDay] = {}
        self._next_id = 0

    def _existing_or_new(self, management_id, class_id, attendance_date, day, coach_id, now) -> AttendanceDay:
        key = (management_id, class_id, attendance_date)
        existing = self.days.get(key)
        if existing:
            return existing
        self._next_id += 1
        return AttendanceDay(
            record_id=str(self._next_id),
            class_id=class_id,
            attendance_date=attendance_date,
            day=day,
            coach_id=coach_id,
            created_at=now,
            updated_at=now,
        )

    def merge_student_status(self, *, management_id, class_id, attendance_date, day, coach_id, student_id, status, reason, now):
        current = self._existing_or_new(management_id, class_id, attendance_date, day, coach_id, now)
        students = dict(current.students)
        students[student_id] = status
        reasons = dict(current.leave_reasons)
        if reason:
            reasons[student_id] = reason
        else:
            reasons.pop(student_id, None)
        self.days[(management_id, class_id, attendance_date)] = replace(
            current, students=students, leave_reasons=reasons, updated_at=now
        )

    def replace_day(self, *, management_id, class_id, attendance_date, day, coach_id, statuses: Mapping[str, str], reasons, now):
        current = self._existing_or_new(management_id, class_id, attendance_date, day, coach_id, now)
        self.days[(management_id, class_id, attendance_date)] = replace(
            current, students=dict(statuses), leave_reasons=dict(reasons), coach_id=coach_id, updated_at=now
        )

    def remove_student(self, *, management_id, class_id, attendance_date, student_id, now) -> bool:
        key = (management_id, class_id, attendance_date)
        current = self.days.get(key)
        if not current or student_id not in current.students:
            return False
        students = dict(current.students)
        students.pop(student_id)
        reasons = dict(current.leave_reasons)
        reasons.pop(student_id, None)
        self.days[key] = replace(current, students=students, leave_reasons=reasons, updated_at=now)
        return True

    def find_days(self, *, management_id, class_ids=None, on_date=None, start_date=None, end_date=None):
        found = []
        for (mid, class_id, d), day in self.days.items():
            if mid != management_id:
                continue
            if class_ids is not None and class_id not in class_ids:
                continue
            if on_date is not None and d != on_date:
                continue
            if start_date is not None and d < start_date:
                continue
            if end_date is not None and d > end_date:
                continue
            found.append(day)
        return sorted(found, key=lambda x: (x.attendance_date, int(x.record_id)))


class InMemoryMarks:
    def __init__(self):
        self.tests: dict[tuple[str, str], MarkTest] = {}
        self._next_id = 0

    def _existing_or_new(self, management_id, test_id, class_id, subject_id, now) -> MarkTest:
        existing = self.tests.get((management_id, test_id))
        if existing:
            return existing
        self._next_id += 1
        return MarkTest(
            record_id=str(self._next_id),
            test_id=test_id,
            class_id=class_id,
            subject_id=subject_id,
            created_at=now,
            updated_at=now,
        )

    def merge_student_mark(self, *, management_id, test_id, class_id, subject_id, student_id, mark: StudentMark, now):
        current = self._existing_or_new(management_id, test_id, class_id, subject_id, now)
        students = dict(current.students)
        students[student_id] = mark
        self.tests[(management_id, test_id)] = replace(current, students=students, updated_at=now)

    def replace_test_marks(self, *, management_id, test_id, class_id, subject_id, marks, now):
        current = self._existing_or_new(management_id, test_id, class_id, subject_id, now)
        self.tests[(management_id, test_id)] = replace(
            current, students=dict(marks), class_id=class_id, subject_id=subject_id, updated_at=now
        )

    def get_by_test(self, management_id, test_id):
        return self.tests.get((management_id, test_id))

    def remove_student_mark(self, *, management_id, test_id, student_id, now) -> bool:
        current = self.tests.get((management_id, test_id))
        if not current or student_id not in current.students:
            return False
        students = dict(current.students)
        students.pop(student_id)
        self.tests[(management_id, test_id)] = replace(current, students=students, updated_at=now)
        return True

    def delete_test(self, *, management_id, test_id) -> bool:
        return self.tests.pop((management_id, test_id), None) is not None

    def find(self, *, management_id, test_ids=None, class_id=None, subject_id=None):
        found = []
        for (mid, tid), record in self.tests.items():
            if mid != management_id:
                continue
            if test_ids is not None and tid not in test_ids:
                continue
            if class_id is not None and record.class_id != class_id:
                continue
            if subject_id is not None and record.subject_id != subject_id:
                continue
            found.append(record)
        return list(reversed(found))


@dataclass
class World:
    students: InMemoryStudents
    classes: InMemoryClasses
    coaches: InMemoryCoaches
    subjects: InMemorySubjects
    tests: InMemoryTests
    registry: InMemoryBatchRegistry
    attendance: InMemoryAttendance
    marks: InMemoryMarks
    container: Container


def build_world(
    *,
    students: list[Student],
    classes: list[ClassSection],
    coaches: list[Coach],
    subjects: list[Subject],
    tests: list[Test],
    batches: list[str],
) -> World:
    students_repo = InMemoryStudents(students)
    classes_repo = InMemoryClasses(classes)
    coaches_repo = InMemoryCoaches(coaches)
    subjects_repo = InMemorySubjects(subjects)
    tests_repo = InMemoryTests(tests)
    registry = InMemoryBatchRegistry(batches)
    attendance_repo = InMemoryAttendance()
    marks_repo = InMemoryMarks()

    resolver = BatchJoinResolver(students_repo)
    access = AccessPolicy(classes_repo, coaches_repo)

    container = Container(
        conn=None,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        marks_repo=marks_repo,
        batch_service=BatchService(registry, students_repo, classes_repo, coaches_repo),
        attendance_service=AttendanceService(attendance_repo, students_repo, classes_repo, resolver, access),
        marks_service=MarksService(marks_repo, tests_repo, students_repo, resolver, access),
        attendance_stats_service=AttendanceStatsService(attendance_repo, resolver, LateWeightedCalculator()),
        marks_stats_service=MarksStatsService(
            marks_repo, tests_repo, students_repo, subjects_repo, classes_repo, resolver
        ),
    )
    return World(
        students=students_repo,
        classes=classes_repo,
        coaches=coaches_repo,
        subjects=subjects_repo,
        tests=tests_repo,
        registry=registry,
        attendance=attendance_repo,
        marks=marks_repo,
        container=container,
    )


@pytest.fixture
def world() -> World:
    return build_world(
        students=[
            Student("S1", "Alice", "alice@example.com", "Batch-7", "C1"),
            Student("S2", "Bob", "bob@example.com", "Batch-7", "C1"),
            Student("S3", "Carol", "carol@example.com", "Batch-8", "C2"),
            Student("S4", "Dan", "dan@example.com", "Batch-7", "C2"),
            Student("S5", "Eve", "eve@example.com", "Batch-9", ""),
        ],
        classes=[
            ClassSection("C1", "Physics A", coach_id="K1"),
            ClassSection("C2", "Chemistry B", coach_id="K2"),
            ClassSection("C3", "Biology", coach_id=None),
        ],
        coaches=[
            Coach("K1", "Ravi", "ravi@example.com"),
            Coach("K2", "Asha", "asha@example.com"),
        ],
        subjects=[
            Subject("SUB1", "C1", " Math "),
            Subject("SUB2", "C2", "math"),
            Subject("SUB3", "C1", "Physics"),
        ],
        tests=[
            Test("T1", "Unit 1", "C1", "SUB1", date(2024, 1, 10)),
            Test("T2", "Unit 1", "C2", "SUB2", date(2024, 1, 10)),
            Test("T3", "Mechanics", "C1", "SUB3", date(2024, 1, 12)),
            Test("T4", "Surprise", "C3", "", None),
        ],
        batches=["Batch-10", "Batch-7"],
    )


@pytest.fixture
def admin() -> SessionContext:
    return SessionContext(management_id=MID, role=Role.ADMIN, email="owner@example.com")


@pytest.fixture
def coach_k1() -> SessionContext:
    return SessionContext(management_id=MID, role=Role.USER, email="ravi@example.com")


@pytest.fixture
def coach_k2() -> SessionContext:
    return SessionContext(management_id=MID, role=Role.USER, email="asha@example.com")
