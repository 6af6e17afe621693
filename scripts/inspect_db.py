#!/usr/bin/env python3
"""Inspect the BMI store (SQLite) and print the most recent records.

Usage examples:
    python scripts/inspect_db.py --limit 20
    python scripts/inspect_db.py --db "Data Source=bmi.db" --json
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bmi_store import ensure_database, list_records
from config import load_settings
from logging_config import configure_logging
from services.report_render import records_json, records_table


def main():
    configure_logging()
    p = argparse.ArgumentParser()
    p.add_argument('--db', default=None, help='connection string or sqlite path (default: configured store)')
    p.add_argument('--limit', type=int, default=50)
    p.add_argument('--json', action='store_true', help='print records as JSON')
    args = p.parse_args()

    conn = args.db or load_settings().connection_string
    ensure_database(conn)
    result = list_records(conn, limit=args.limit)
    if not result.ok:
        print(f'Error when listing records: {result.error}')
        return 1

    records = result.value
    if args.json:
        print(records_json(records))
        return 0

    table = records_table(records)
    if table:
        print(table)
    print(f"\nPrinted {len(records)} records")
    return 0


if __name__ == '__main__':
    sys.exit(main())
