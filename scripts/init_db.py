"""Apply database/schema.sql to the database of the selected settings module.

Usage: APP_ENV=development python scripts/init_db.py [--drop-first]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_system.hr_system.database.bootstrap import apply_schema, drop_tables, list_tables

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the HR system tables")
    parser.add_argument("--drop-first", action="store_true", help="drop every existing table before applying")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings_module = get_settings_module()
    db_config = dict(importlib.import_module(settings_module).DB_CONFIG)

    if args.drop_first:
        dropped = drop_tables(db_config)
        print(f"Dropped {dropped} table(s)")

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    print(f"[{settings_module}] {db_config.get('database')}: {len(tables)} table(s): {', '.join(sorted(tables))}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
