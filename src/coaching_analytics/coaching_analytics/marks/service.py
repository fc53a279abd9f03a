from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog

from ..access.model import SessionContext
from ..access.policy import AccessPolicy
from ..batches.resolver import BatchJoinResolver
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_REFERENCE_TIMEZONE
from ..core.exceptions import NotFoundError, ValidationError
from ..directory.model import Student, Test
from ..directory.repository import StudentRepository, TestRepository
from .model import MarkRow, flatten_marks
from .repository import MarksRepository
from .schemas import BulkMarksRequest, DeleteMarksRequest, MarksQuery, SetMarksRequest

logger = structlog.get_logger(__name__)


class MarksService:
    def __init__(
        self,
        marks: MarksRepository,
        tests: TestRepository,
        students: StudentRepository,
        resolver: BatchJoinResolver,
        access: AccessPolicy,
        *,
        timezone: str = DEFAULT_REFERENCE_TIMEZONE,
    ):
        self._marks = marks
        self._tests = tests
        self._students = students
        self._resolver = resolver
        self._access = access
        self._timezone = timezone

    def _get_test(self, management_id: str, test_id: str) -> Test:
        test = self._tests.get_by_id(management_id, test_id)
        if not test:
            raise NotFoundError("Test not found")
        return test

    @staticmethod
    def _ensure_in_class(test: Test, students: list[Student]) -> None:
        if not test.class_id:
            return
        outsiders = [s.student_id for s in students if s.class_id != test.class_id]
        if outsiders:
            raise ValidationError(f"Some students do not belong to this test's class: {', '.join(outsiders)}")

    def set_marks(self, session: SessionContext, req: SetMarksRequest, *, now: datetime | None = None) -> None:
        now = now or now_local(self._timezone)
        mid = session.management_id

        test = self._get_test(mid, req.test_id)
        self._access.ensure_can_write_class(session, test.class_id)

        student = self._students.get_by_id(mid, req.student_id)
        if not student:
            raise NotFoundError("Student not found")
        self._ensure_in_class(test, [student])

        # Keyed by the stored id; the directory lookup may match other spellings.
        self._marks.merge_student_mark(
            management_id=mid,
            test_id=test.test_id,
            class_id=test.class_id,
            subject_id=test.subject_id,
            student_id=student.student_id,
            mark=req.mark,
            now=now,
        )
        logger.info(
            "marks_recorded",
            management_id=mid,
            test_id=test.test_id,
            student_id=student.student_id,
            marks=req.mark.marks,
            max_marks=req.mark.max_marks,
        )

    def _stored_students(self, management_id: str, student_ids: list[str]) -> list[Student]:
        """Directory rows for ``student_ids`` in request order; NotFoundError if any is missing."""

        found = list(self._students.list_by_ids(management_id, student_ids))
        exact = {s.student_id: s for s in found}
        folded = {s.student_id.casefold(): s for s in found}

        resolved: list[Student] = []
        for sid in student_ids:
            student = exact.get(sid) or folded.get(sid.casefold())
            if student is None:
                raise NotFoundError("One or more students not found")
            resolved.append(student)

        stored_ids = [s.student_id for s in resolved]
        if len(set(stored_ids)) != len(stored_ids):
            raise ValidationError("Duplicate marks entries for the same student")
        return resolved

    def set_marks_for_test(self, session: SessionContext, req: BulkMarksRequest, *, now: datetime | None = None) -> int:
        """Replace the test's marks map with the submitted entries in one upsert.

        Entries were validated when the request was built; nothing is written
        unless every check below passes too.
        """

        now = now or now_local(self._timezone)
        mid = session.management_id

        test = self._get_test(mid, req.test_id)
        if test.class_id and test.class_id != req.class_id:
            raise ValidationError("classId does not match the test's class")
        if test.subject_id and test.subject_id != req.subject_id:
            raise ValidationError("subjectId does not match the test's subject")
        class_id = test.class_id or req.class_id
        subject_id = test.subject_id or req.subject_id
        self._access.ensure_can_write_class(session, class_id)

        students = self._stored_students(mid, [sid for sid, _ in req.marks])
        self._ensure_in_class(test, students)

        self._marks.replace_test_marks(
            management_id=mid,
            test_id=test.test_id,
            class_id=class_id,
            subject_id=subject_id,
            marks={s.student_id: mark for s, (_, mark) in zip(students, req.marks)},
            now=now,
        )
        logger.info("marks_bulk_recorded", management_id=mid, test_id=test.test_id, count=len(req.marks))
        return len(req.marks)

    def delete_marks(self, session: SessionContext, req: DeleteMarksRequest, *, now: datetime | None = None) -> None:
        now = now or now_local(self._timezone)
        mid = session.management_id

        record = self._marks.get_by_test(mid, req.test_id)
        if not record:
            raise NotFoundError("Test marks record not found")
        self._access.ensure_can_write_class(session, record.class_id)

        if req.student_id:
            if not self._marks.remove_student_mark(management_id=mid, test_id=req.test_id, student_id=req.student_id, now=now):
                raise NotFoundError("Marks not found for this student")
        else:
            self._marks.delete_test(management_id=mid, test_id=req.test_id)

        logger.info("marks_deleted", management_id=mid, test_id=req.test_id, student_id=req.student_id)

    def list_marks(self, management_id: str, query: MarksQuery) -> list[MarkRow]:
        student_ids: Optional[frozenset[str]] = None
        if query.batch:
            # Marks are keyed by student id, so the batch filter skips classes entirely.
            student_ids = self._resolver.resolve_student_ids(management_id, query.batch)
            if not student_ids:
                return []

        records = self._marks.find(
            management_id=management_id,
            test_ids=[query.test_id] if query.test_id else None,
            class_id=query.class_id,
            subject_id=query.subject_id,
        )

        rows = [
            row
            for record in records
            for row in flatten_marks(record)
            if student_ids is None or row.student_id in student_ids
        ]
        logger.debug(
            "marks_listed",
            management_id=management_id,
            records=len(records),
            rows=len(rows),
            test_id=query.test_id or "all",
            batch=query.batch or "all",
        )
        return rows
