from __future__ import annotations

from datetime import datetime
from typing import Collection, Mapping, Optional, Protocol, Sequence

from .model import MarkTest, StudentMark


class MarksRepository(Protocol):
    def merge_student_mark(
        self,
        *,
        management_id: str,
        test_id: str,
        class_id: str,
        subject_id: str,
        student_id: str,
        mark: StudentMark,
        now: datetime,
    ) -> None:
        """Atomic upsert of one ``students.<id>`` entry; other students are left untouched."""

        raise NotImplementedError

    def replace_test_marks(
        self,
        *,
        management_id: str,
        test_id: str,
        class_id: str,
        subject_id: str,
        marks: Mapping[str, StudentMark],
        now: datetime,
    ) -> None:
        """Upsert the whole student map of a test in one statement (last writer wins)."""

        raise NotImplementedError

    def get_by_test(self, management_id: str, test_id: str) -> Optional[MarkTest]:
        raise NotImplementedError

    def remove_student_mark(self, *, management_id: str, test_id: str, student_id: str, now: datetime) -> bool:
        raise NotImplementedError

    def delete_test(self, *, management_id: str, test_id: str) -> bool:
        raise NotImplementedError

    def find(
        self,
        *,
        management_id: str,
        test_ids: Optional[Collection[str]] = None,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> Sequence[MarkTest]:
        """``test_ids=None`` means any test; an empty collection matches nothing."""

        raise NotImplementedError
