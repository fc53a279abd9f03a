from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.policy import AccessPolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .batches.mysql_batch_repository import MySQLBatchRegistryRepository
from .batches.resolver import BatchJoinResolver
from .batches.service import BatchService
from .core.constants import DEFAULT_LATE_WEIGHT, DEFAULT_REFERENCE_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import (
    MySQLClassRepository,
    MySQLCoachRepository,
    MySQLStudentRepository,
    MySQLSubjectRepository,
    MySQLTestRepository,
)
from .directory.repository import StudentRepository
from .marks.mysql_marks_repository import MySQLMarksRepository
from .marks.repository import MarksRepository
from .marks.service import MarksService
from .stats.attendance_stats import AttendanceStatsService
from .stats.calculator.late_weighted_calculator import LateWeightedCalculator
from .stats.marks_stats import MarksStatsService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    marks_repo: MarksRepository

    batch_service: BatchService
    attendance_service: AttendanceService
    marks_service: MarksService
    attendance_stats_service: AttendanceStatsService
    marks_stats_service: MarksStatsService


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_REFERENCE_TIMEZONE,
    late_weight: float = DEFAULT_LATE_WEIGHT,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    students_repo = MySQLStudentRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    coaches_repo = MySQLCoachRepository(conn)
    subjects_repo = MySQLSubjectRepository(conn)
    tests_repo = MySQLTestRepository(conn)
    batches_repo = MySQLBatchRegistryRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    marks_repo = MySQLMarksRepository(conn)

    resolver = BatchJoinResolver(students_repo)
    access = AccessPolicy(classes_repo, coaches_repo)

    return Container(
        conn=conn,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        marks_repo=marks_repo,
        batch_service=BatchService(batches_repo, students_repo, classes_repo, coaches_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            students_repo,
            classes_repo,
            resolver,
            access,
            timezone=timezone,
        ),
        marks_service=MarksService(marks_repo, tests_repo, students_repo, resolver, access, timezone=timezone),
        attendance_stats_service=AttendanceStatsService(
            attendance_repo,
            resolver,
            LateWeightedCalculator(late_weight=late_weight),
        ),
        marks_stats_service=MarksStatsService(
            marks_repo,
            tests_repo,
            students_repo,
            subjects_repo,
            classes_repo,
            resolver,
        ),
    )
