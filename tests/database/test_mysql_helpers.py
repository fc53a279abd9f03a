from pathlib import Path

import pytest

from coaching_analytics.database.bootstrap import iter_sql_statements
from coaching_analytics.database.mysql_base import in_clause, json_member_path, load_json

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_load_json_accepts_connector_return_types():
    assert load_json(None) == {}
    assert load_json(b'{"S1": "present"}') == {"S1": "present"}
    assert load_json('{"S1": "late"}') == {"S1": "late"}
    assert load_json({"S1": "absent"}) == {"S1": "absent"}


def test_load_json_rejects_non_objects():
    with pytest.raises(ValueError):
        load_json("[1, 2]")


def test_member_path_quotes_keys():
    assert json_member_path("S1") == '$."S1"'
    assert json_member_path("a.b c") == '$."a.b c"'


def test_in_clause_dedupes_and_orders_params():
    sql, params = in_clause("student_id", ["S2", "S1", "S2"])
    assert sql == "student_id IN (%s,%s)"
    assert params == ["S1", "S2"]


def test_schema_splits_into_create_statements():
    statements = list(iter_sql_statements(SCHEMA.read_text(encoding="utf-8")))
    assert len(statements) == 8
    assert all(s.upper().startswith("CREATE TABLE") for s in statements)


def test_splitter_keeps_semicolons_inside_quotes():
    assert list(iter_sql_statements("INSERT INTO t VALUES ('a;b');\n-- note;\nSELECT 1")) == [
        "INSERT INTO t VALUES ('a;b')",
        "SELECT 1",
    ]
