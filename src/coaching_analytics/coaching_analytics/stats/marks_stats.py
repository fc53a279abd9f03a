from __future__ import annotations

from datetime import date
from typing import Optional

import structlog

from ..batches.resolver import BatchJoinResolver
from ..directory.model import Subject
from ..directory.repository import ClassRepository, StudentRepository, SubjectRepository, TestRepository
from ..marks.repository import MarksRepository
from .model import (
    MarksDateBucket,
    MarksStats,
    MarksTotals,
    StudentMarksSummary,
    StudentMarksTally,
    StudentTestResult,
    SubjectAverage,
)
from .schemas import MarksStatsQuery

logger = structlog.get_logger(__name__)


def subject_key(name: str) -> str:
    return name.strip().lower()


class _SubjectIndex:
    """Maps subject ids to grouping keys and display names.

    Without a class filter, subjects are merged across classes by normalized
    name; the display name is the first one met in directory order.
    """

    def __init__(self, subjects: list[Subject], *, merge_by_name: bool):
        self.key_by_id: dict[str, str] = {}
        self.display: dict[str, str] = {}
        for subject in subjects:
            if not subject.subject_id or not subject.name:
                continue
            key = subject_key(subject.name) if merge_by_name else subject.subject_id
            self.key_by_id[subject.subject_id] = key
            self.display.setdefault(key, subject.name)

    def key_for(self, subject_id: str) -> str:
        return self.key_by_id.get(subject_id, subject_id)

    def is_known(self, subject_id: str) -> bool:
        return subject_id in self.key_by_id


class MarksStatsService:
    def __init__(
        self,
        marks: MarksRepository,
        tests: TestRepository,
        students: StudentRepository,
        subjects: SubjectRepository,
        classes: ClassRepository,
        resolver: BatchJoinResolver,
    ):
        self._marks = marks
        self._tests = tests
        self._students = students
        self._subjects = subjects
        self._classes = classes
        self._resolver = resolver

    def build(self, management_id: str, query: MarksStatsQuery) -> MarksStats:
        batch_students: Optional[frozenset[str]] = None
        if query.batch:
            batch_students = self._resolver.resolve_student_ids(management_id, query.batch)
            if not batch_students:
                return MarksStats()

        tests = self._tests.find(
            management_id,
            class_id=query.class_id,
            subject_id=query.subject_id,
            start_date=query.start_date,
            end_date=query.end_date,
        )
        if not tests:
            return MarksStats()
        tests_by_id = {t.test_id: t for t in tests}

        records = self._marks.find(
            management_id=management_id,
            test_ids=list(tests_by_id),
            class_id=query.class_id,
            subject_id=query.subject_id,
        )

        all_classes = query.class_id is None
        subjects = _SubjectIndex(list(self._subjects.list_all(management_id)), merge_by_name=all_classes)
        class_names: dict[str, str] = {}
        if all_classes:
            class_names = {c.class_id: c.name for c in self._classes.list_all(management_id)}

        overall = MarksTotals()
        buckets: dict[date, MarksDateBucket] = {}
        tallies: dict[str, StudentMarksTally] = {}
        subject_totals: dict[str, MarksTotals] = {}

        for record in records:
            test = tests_by_id.get(record.test_id)
            if test is None:
                continue
            key = subjects.key_for(record.subject_id)

            for student_id, mark in record.students.items():
                if batch_students is not None and student_id not in batch_students:
                    continue

                overall.add(mark.marks, mark.max_marks)

                tally = tallies.setdefault(student_id, StudentMarksTally(student_id))
                tally.totals.add(mark.marks, mark.max_marks)
                tally.tests.append(
                    StudentTestResult(
                        test_id=test.test_id,
                        test_name=test.name,
                        test_date=test.test_date,
                        marks=mark.marks,
                        max_marks=mark.max_marks,
                        percentage=mark.percentage,
                    )
                )

                if test.test_date is not None:
                    bucket = buckets.setdefault(test.test_date, MarksDateBucket(test.test_date))
                    bucket.totals.add(mark.marks, mark.max_marks)
                    if key:
                        bucket.subjects.setdefault(key, MarksTotals()).add(mark.marks, mark.max_marks)
                    if all_classes and record.class_id:
                        bucket.classes.setdefault(record.class_id, MarksTotals()).add(mark.marks, mark.max_marks)

                if all_classes and subjects.is_known(record.subject_id):
                    subject_totals.setdefault(key, MarksTotals()).add(mark.marks, mark.max_marks)

        directory = self._students.list_by_ids(management_id, list(tallies))
        summaries = tuple(
            StudentMarksSummary(
                student_id=s.student_id,
                name=s.name,
                email=s.email,
                batch=s.batch,
                tally=tallies[s.student_id],
            )
            for s in directory
            if s.student_id in tallies
        )

        averages = sorted(
            (SubjectAverage(subject_key=k, subject_name=subjects.display.get(k, k), totals=t) for k, t in subject_totals.items()),
            key=lambda a: (a.subject_name.lower(), a.subject_name),
        )

        logger.debug(
            "marks_stats_built",
            management_id=management_id,
            tests=len(tests),
            records=overall.count,
        )
        return MarksStats(
            chart=tuple(buckets[d] for d in sorted(buckets)),
            students=summaries,
            subject_averages=tuple(averages),
            overall=overall,
            total_tests=len(tests),
            subject_names=dict(subjects.display),
            class_names=class_names,
        )
