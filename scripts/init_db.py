from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "coaching_analytics"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import structlog

from config import get_settings_module

from coaching_analytics.core.logging_config import configure_logging
from coaching_analytics.database.bootstrap import apply_schema, list_tables

logger = structlog.get_logger("init_db")


def main() -> None:
    configure_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    logger.info(
        "schema_ready",
        target=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        tables=len(tables),
    )


if __name__ == "__main__":
    main()
