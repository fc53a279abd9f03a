from __future__ import annotations

from datetime import datetime
from typing import Collection, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, in_clause, json_member_path, load_json
from .model import MarkTest, StudentMark
from .repository import MarksRepository

_COLUMNS = "mark_test_id, test_id, class_id, subject_id, students, created_at, updated_at"


def _to_mark_test(r: dict) -> MarkTest:
    return MarkTest(
        record_id=str(r["mark_test_id"]),
        test_id=str(r["test_id"]),
        class_id=r.get("class_id") or "",
        subject_id=r.get("subject_id") or "",
        students={str(k): StudentMark.from_stored(v) for k, v in load_json(r.get("students")).items()},
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLMarksRepository(MarksRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        path = json_member_path(student_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO mark_tests
                    (management_id, test_id, class_id, subject_id, students, created_at, updated_at)
                VALUES (%s, %s, %s, %s, JSON_OBJECT(%s, JSON_OBJECT('marks', %s, 'maxMarks', %s)), %s, %s)
                ON DUPLICATE KEY UPDATE
                    students = JSON_SET(students, %s, JSON_OBJECT('marks', %s, 'maxMarks', %s)),
                    class_id = %s,
                    subject_id = %s,
                    updated_at = %s
                """,
                (
                    management_id, test_id, class_id, subject_id,
                    student_id, mark.marks, mark.max_marks, now, now,
                    path, mark.marks, mark.max_marks,
                    class_id, subject_id, now,
                ),
            )

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
        students_json = dump_json({sid: m.to_dict() for sid, m in marks.items()})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO mark_tests
                    (management_id, test_id, class_id, subject_id, students, created_at, updated_at)
                VALUES (%s, %s, %s, %s, CAST(%s AS JSON), %s, %s)
                ON DUPLICATE KEY UPDATE
                    students = CAST(%s AS JSON),
                    class_id = %s,
                    subject_id = %s,
                    updated_at = %s
                """,
                (
                    management_id, test_id, class_id, subject_id, students_json, now, now,
                    students_json, class_id, subject_id, now,
                ),
            )

    def get_by_test(self, management_id: str, test_id: str) -> Optional[MarkTest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM mark_tests WHERE management_id=%s AND test_id=%s",
                (management_id, test_id),
            )
            r = fetchone(cur)
            return _to_mark_test(r) if r else None

    def remove_student_mark(self, *, management_id: str, test_id: str, student_id: str, now: datetime) -> bool:
        path = json_member_path(student_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE mark_tests
                SET students = JSON_REMOVE(students, %s), updated_at = %s
                WHERE management_id=%s AND test_id=%s AND JSON_CONTAINS_PATH(students, 'one', %s)
                """,
                (path, now, management_id, test_id, path),
            )
            return cur.rowcount > 0

    def delete_test(self, *, management_id: str, test_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM mark_tests WHERE management_id=%s AND test_id=%s", (management_id, test_id))
            return cur.rowcount > 0

    def find(
        self,
        *,
        management_id: str,
        test_ids: Optional[Collection[str]] = None,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> Sequence[MarkTest]:
        clauses = ["management_id=%s"]
        params: list[object] = [management_id]

        if test_ids is not None:
            if not test_ids:
                return []
            clause, ids = in_clause("test_id", test_ids)
            clauses.append(clause)
            params.extend(ids)
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(subject_id)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM mark_tests WHERE {where} ORDER BY created_at DESC, mark_test_id DESC",
                tuple(params),
            )
            return [_to_mark_test(r) for r in fetchall(cur)]
