#!/usr/bin/env python3
"""Initialize the BMI SQLite store (creates the file and the BmiRecords table).

Usage:
    python scripts/init_db_sqlite.py [connection]

Default: the connection string from config.json / BMI_DATABASE.
"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bmi_store import ensure_database, resolve_db_path
from config import load_settings


def main():
    conn = sys.argv[1] if len(sys.argv) > 1 else load_settings().connection_string
    ensure_database(conn)
    print(f'Initialized sqlite DB at {resolve_db_path(conn)}')


if __name__ == '__main__':
    main()
