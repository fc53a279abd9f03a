from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Collection, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any) -> Dict[str, Any]:
    """Decode a MySQL JSON column into a dict.

    mysql-connector can return JSON as:
    - str (C extension)
    - bytes/bytearray (pure Python implementation)
    - already-decoded dict
    """

    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return {}
        decoded = json.loads(value)
        if not isinstance(decoded, dict):
            raise ValueError(f"Expected a JSON object, got {type(decoded).__name__}")
        return decoded
    raise TypeError(f"Unsupported MySQL JSON value type: {type(value)!r}")


def dump_json(value: Dict[str, Any]) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def json_member_path(key: str) -> str:
    """JSON path addressing one member of a top-level object, e.g. ``$."abc"``.

    Keys are quoted so ids containing dots or spaces stay a single member.
    """

    return "$." + json.dumps(str(key), ensure_ascii=False)


def in_clause(column: str, values: Collection[Any]) -> Tuple[str, Sequence[Any]]:
    ordered = sorted({str(v) for v in values})
    placeholders = ",".join(["%s"] * len(ordered))
    return f"{column} IN ({placeholders})", ordered
