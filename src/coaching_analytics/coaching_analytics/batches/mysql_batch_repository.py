from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import BatchRegistryRepository


class MySQLBatchRegistryRepository(BatchRegistryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_names(self, management_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT batch_name FROM batches WHERE management_id=%s ORDER BY batch_name",
                (management_id,),
            )
            return [str(r["batch_name"]) for r in fetchall(cur)]
