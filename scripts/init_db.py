from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.time_tracking.time_tracking.database.bootstrap import apply_schema
from src.time_tracking.time_tracking.database.connection import DBConfig, DatabaseConnection
from src.time_tracking.time_tracking.main import configure_logging


def main() -> None:
    configure_logging("INFO")
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(dict(settings.DB_CONFIG)))

    schema_path = REPO_ROOT / "database" / "schema.sql"
    count = apply_schema(conn, schema_path=schema_path)
    print(f"OK: applied {count} statement(s) from {schema_path.name} to {conn.database_name}")


if __name__ == "__main__":
    main()
