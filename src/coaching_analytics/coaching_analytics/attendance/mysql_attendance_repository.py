from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, in_clause, json_member_path, load_json
from .model import AttendanceDay
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def merge_student_status(
        self,
        *,
        management_id: str,
        class_id: str,
        attendance_date: date,
        day: str,
        coach_id: str,
        student_id: str,
        status: str,
        reason: Optional[str],
        now: datetime,
    ) -> None:
        path = json_member_path(student_id)

        if reason:
            reasons_on_insert = "JSON_OBJECT(%s, %s)"
            insert_params: tuple = (student_id, reason)
            reasons_on_update = "JSON_SET(COALESCE(leave_reasons, JSON_OBJECT()), %s, %s)"
            update_params: tuple = (path, reason)
        else:
            reasons_on_insert = "NULL"
            insert_params = ()
            reasons_on_update = "IF(leave_reasons IS NULL, NULL, JSON_REMOVE(leave_reasons, %s))"
            update_params = (path,)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_days
                    (management_id, class_id, attendance_date, day_name, coach_id,
                     students, leave_reasons, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, JSON_OBJECT(%s, %s), {reasons_on_insert}, %s, %s)
                ON DUPLICATE KEY UPDATE
                    students = JSON_SET(students, %s, %s),
                    leave_reasons = {reasons_on_update},
                    day_name = %s,
                    coach_id = %s,
                    updated_at = %s
                """,
                (
                    management_id, class_id, attendance_date, day, coach_id,
                    student_id, status, *insert_params, now, now,
                    path, status,
                    *update_params,
                    day, coach_id, now,
                ),
            )

    def replace_day(
        self,
        *,
        management_id: str,
        class_id: str,
        attendance_date: date,
        day: str,
        coach_id: str,
        statuses: Mapping[str, str],
        reasons: Mapping[str, str],
        now: datetime,
    ) -> None:
        students_json = dump_json(dict(statuses))
        reasons_json = dump_json(dict(reasons)) if reasons else None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_days
                    (management_id, class_id, attendance_date, day_name, coach_id,
                     students, leave_reasons, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, CAST(%s AS JSON), CAST(%s AS JSON), %s, %s)
                ON DUPLICATE KEY UPDATE
                    students = CAST(%s AS JSON),
                    leave_reasons = CAST(%s AS JSON),
                    day_name = %s,
                    coach_id = %s,
                    updated_at = %s
                """,
                (
                    management_id, class_id, attendance_date, day, coach_id,
                    students_json, reasons_json, now, now,
                    students_json, reasons_json, day, coach_id, now,
                ),
            )

    def remove_student(
        self,
        *,
        management_id: str,
        class_id: str,
        attendance_date: date,
        student_id: str,
        now: datetime,
    ) -> bool:
        path = json_member_path(student_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_days
                SET students = JSON_REMOVE(students, %s),
                    leave_reasons = IF(leave_reasons IS NULL, NULL, JSON_REMOVE(leave_reasons, %s)),
                    updated_at = %s
                WHERE management_id=%s AND class_id=%s AND attendance_date=%s
                  AND JSON_CONTAINS_PATH(students, 'one', %s)
                """,
                (path, path, now, management_id, class_id, attendance_date, path),
            )
            return cur.rowcount > 0

    def find_days(
        self,
        *,
        management_id: str,
        class_ids: Optional[Collection[str]] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceDay]:
        clauses = ["management_id=%s"]
        params: list[object] = [management_id]

        if class_ids is not None:
            if not class_ids:
                return []
            clause, ids = in_clause("class_id", class_ids)
            clauses.append(clause)
            params.extend(ids)
        if on_date is not None:
            clauses.append("attendance_date=%s")
            params.append(on_date)
        if start_date is not None:
            clauses.append("attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("attendance_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT attendance_id, class_id, attendance_date, day_name, coach_id,
                       students, leave_reasons, created_at, updated_at
                FROM attendance_days
                WHERE {where}
                ORDER BY attendance_date ASC, attendance_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceDay(
                    record_id=str(r["attendance_id"]),
                    class_id=r.get("class_id") or "",
                    attendance_date=r["attendance_date"],
                    day=r.get("day_name") or "",
                    coach_id=r.get("coach_id") or "",
                    students={str(k): str(v) for k, v in load_json(r.get("students")).items()},
                    leave_reasons={str(k): str(v) for k, v in load_json(r.get("leave_reasons")).items()},
                    created_at=r.get("created_at"),
                    updated_at=r.get("updated_at"),
                )
                for r in rows
            ]
