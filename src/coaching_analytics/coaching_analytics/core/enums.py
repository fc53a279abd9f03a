from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Session role used for write permissions."""

    ADMIN = "admin"
    USER = "user"


class AttendanceStatus(str, Enum):
    """Attendance status stored per student inside an attendance day."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    APPROVED_LEAVE = "approved_leave"
