from __future__ import annotations

from dataclasses import dataclass, field

from ..directory.model import Coach, Student


@dataclass(frozen=True)
class BatchScope:
    """Concrete ids a batch expands to for one tenant at query time."""

    batch: str
    class_ids: frozenset[str] = frozenset()
    student_ids: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.student_ids


@dataclass(frozen=True)
class CoachAssignment:
    coach: Coach
    class_names: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "coachId": self.coach.coach_id,
            "name": self.coach.name,
            "email": self.coach.email,
            "classes": list(self.class_names),
        }


@dataclass(frozen=True)
class BatchOverview:
    batch: str
    students: tuple[Student, ...] = ()
    class_ids: tuple[str, ...] = ()
    coaches: tuple[CoachAssignment, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "batch": self.batch,
            "students": [
                {
                    "id": s.student_id,
                    "name": s.name,
                    "email": s.email,
                    "batch": s.batch,
                    "classId": s.class_id,
                }
                for s in self.students
            ],
            "classIds": list(self.class_ids),
            "coaches": [c.to_dict() for c in self.coaches],
        }
