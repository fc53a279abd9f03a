from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ClassSection, Coach, Student, Subject, Test
from .repository import ClassRepository, CoachRepository, StudentRepository, SubjectRepository, TestRepository

_STUDENT_COLUMNS = "student_id, name, email, batch, class_id, attendance_status"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        name=r.get("name") or "",
        email=r.get("email") or "",
        batch=r.get("batch") or "",
        class_id=r.get("class_id") or "",
        attendance_status=r.get("attendance_status"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, management_id: str, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE management_id=%s AND student_id=%s",
                (management_id, student_id),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_by_ids(self, management_id: str, student_ids: Collection[str]) -> Sequence[Student]:
        if not student_ids:
            return []
        clause, params = in_clause("student_id", student_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students
                WHERE management_id=%s AND {clause}
                ORDER BY student_row_id
                """,
                (management_id, *params),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_batch(self, management_id: str, batch: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students
                WHERE management_id=%s AND batch=%s
                ORDER BY name
                """,
                (management_id, batch),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def distinct_batches(self, management_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT batch FROM students WHERE management_id=%s AND batch <> ''",
                (management_id,),
            )
            return [str(r["batch"]) for r in fetchall(cur)]

    def set_attendance_status(self, management_id: str, student_ids: Collection[str], status: str, *, now: datetime) -> None:
        if not student_ids:
            return
        clause, params = in_clause("student_id", student_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE students SET attendance_status=%s, updated_at=%s WHERE management_id=%s AND {clause}",
                (status, now, management_id, *params),
            )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, management_id: str, class_id: str) -> Optional[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, coach_id FROM classes WHERE management_id=%s AND class_id=%s",
                (management_id, class_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassSection(class_id=str(r["class_id"]), name=r.get("name") or "", coach_id=r.get("coach_id") or None)

    def list_all(self, management_id: str) -> Sequence[ClassSection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, coach_id FROM classes WHERE management_id=%s ORDER BY class_row_id",
                (management_id,),
            )
            return [
                ClassSection(class_id=str(r["class_id"]), name=r.get("name") or "", coach_id=r.get("coach_id") or None)
                for r in fetchall(cur)
            ]


class MySQLCoachRepository(CoachRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_assigned(self, management_id: str, *, email: str, coach_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM coaches WHERE management_id=%s AND email=%s AND coach_id=%s",
                (management_id, email, coach_id),
            )
            return fetchone(cur) is not None

    def list_by_ids(self, management_id: str, coach_ids: Collection[str]) -> Sequence[Coach]:
        if not coach_ids:
            return []
        clause, params = in_clause("coach_id", coach_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT coach_id, name, email FROM coaches WHERE management_id=%s AND {clause} ORDER BY name",
                (management_id, *params),
            )
            return [
                Coach(coach_id=str(r["coach_id"]), name=r.get("name") or "", email=r.get("email") or "")
                for r in fetchall(cur)
            ]


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self, management_id: str) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT subject_id, class_id, name FROM subjects WHERE management_id=%s ORDER BY subject_row_id",
                (management_id,),
            )
            return [
                Subject(subject_id=str(r["subject_id"]), class_id=r.get("class_id") or "", name=r.get("name") or "")
                for r in fetchall(cur)
            ]


class MySQLTestRepository(TestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_test(r: dict) -> Test:
        return Test(
            test_id=str(r["test_id"]),
            name=r.get("name") or "",
            class_id=r.get("class_id") or "",
            subject_id=r.get("subject_id") or "",
            test_date=r.get("test_date"),
        )

    def get_by_id(self, management_id: str, test_id: str) -> Optional[Test]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT test_id, name, class_id, subject_id, test_date
                FROM tests
                WHERE management_id=%s AND test_id=%s
                """,
                (management_id, test_id),
            )
            r = fetchone(cur)
            return self._to_test(r) if r else None

    def find(
        self,
        management_id: str,
        *,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Test]:
        clauses = ["management_id=%s"]
        params: list[object] = [management_id]

        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(subject_id)
        if start_date is not None:
            clauses.append("test_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("test_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT test_id, name, class_id, subject_id, test_date
                FROM tests
                WHERE {where}
                ORDER BY test_row_id
                """,
                tuple(params),
            )
            return [self._to_test(r) for r in fetchall(cur)]
