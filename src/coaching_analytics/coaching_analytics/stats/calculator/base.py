from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import StudentAttendanceTally


class AttendanceCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance percentages)."""

    @abstractmethod
    def percentage(self, tally: StudentAttendanceTally) -> float:
        raise NotImplementedError
