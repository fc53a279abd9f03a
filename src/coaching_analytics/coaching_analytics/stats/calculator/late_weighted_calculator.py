from __future__ import annotations

from .base import AttendanceCalculator
from ..model import StudentAttendanceTally
from ...core.constants import DEFAULT_LATE_WEIGHT


class LateWeightedCalculator(AttendanceCalculator):
    """(present + late * late_weight) / total * 100; approved leave is not part of total."""

    def __init__(self, late_weight: float = DEFAULT_LATE_WEIGHT):
        self.late_weight = float(late_weight)

    def percentage(self, tally: StudentAttendanceTally) -> float:
        if tally.total <= 0:
            return 0.0
        return (tally.present + tally.late * self.late_weight) * 100 / tally.total
