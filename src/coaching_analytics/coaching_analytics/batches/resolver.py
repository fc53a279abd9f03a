from __future__ import annotations

import structlog

from ..directory.repository import StudentRepository
from .model import BatchScope
from .normalizer import normalize_batch_name

logger = structlog.get_logger(__name__)


class BatchJoinResolver:
    """Expands a batch name into class and student ids via the student directory.

    Attendance days and mark tests carry no batch index, so every batch-scoped
    read goes through here first. An unknown batch yields empty sets.
    """

    def __init__(self, students: StudentRepository):
        self._students = students

    def resolve_scope(self, management_id: str, batch: str) -> BatchScope:
        name = normalize_batch_name(batch)
        if not name:
            return BatchScope(batch="")

        members = self._students.list_by_batch(management_id, name)
        scope = BatchScope(
            batch=name,
            class_ids=frozenset(s.class_id for s in members if s.class_id),
            student_ids=frozenset(s.student_id for s in members),
        )
        logger.debug(
            "batch_resolved",
            management_id=management_id,
            batch=name,
            students=len(scope.student_ids),
            classes=len(scope.class_ids),
        )
        return scope

    def resolve_class_ids(self, management_id: str, batch: str) -> frozenset[str]:
        return self.resolve_scope(management_id, batch).class_ids

    def resolve_student_ids(self, management_id: str, batch: str) -> frozenset[str]:
        return self.resolve_scope(management_id, batch).student_ids
