from __future__ import annotations

from ..directory.repository import ClassRepository, CoachRepository, StudentRepository
from .model import BatchOverview, CoachAssignment
from .normalizer import batch_sort_key, normalize_batch_name
from .repository import BatchRegistryRepository


class BatchService:
    def __init__(
        self,
        registry: BatchRegistryRepository,
        students: StudentRepository,
        classes: ClassRepository,
        coaches: CoachRepository,
    ):
        self._registry = registry
        self._students = students
        self._classes = classes
        self._coaches = coaches

    def list_batches(self, management_id: str) -> list[str]:
        """Registered batches plus any batch still found on students (older data)."""

        names = set(self._registry.list_names(management_id))
        names.update(b for b in self._students.distinct_batches(management_id) if b)
        return sorted(names, key=batch_sort_key)

    def get_batch_overview(self, management_id: str, batch: str) -> BatchOverview:
        name = normalize_batch_name(batch)
        if not name:
            return BatchOverview(batch="")

        students = tuple(self._students.list_by_batch(management_id, name))
        class_ids: list[str] = []
        for s in students:
            if s.class_id and s.class_id not in class_ids:
                class_ids.append(s.class_id)

        classes = [c for c in self._classes.list_all(management_id) if c.class_id in set(class_ids)]
        coach_ids = {c.coach_id for c in classes if c.coach_id}
        coaches = tuple(
            CoachAssignment(
                coach=coach,
                class_names=tuple(c.name for c in classes if c.coach_id == coach.coach_id),
            )
            for coach in self._coaches.list_by_ids(management_id, coach_ids)
        )
        return BatchOverview(batch=name, students=students, class_ids=tuple(class_ids), coaches=coaches)
