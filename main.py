#!/usr/bin/env python3
"""
main.py
BMI utility CLI:
1. add  -> validate height/weight, compute BMI, store one record
2. stat -> print aggregate statistics over all stored records

Startup loads the connection string (config.py) and makes sure the table
exists; both failures are fatal. Everything after that exits with code 0.
"""

import sys
import logging
from typing import List, Optional

import bmi_store
from bmi_calc import parse_measurement
from config import Settings, load_settings
from logging_config import configure_logging
from services.report_render import confirmation_line, stats_lines, usage_lines

# configure module-level logger; main() will configure root logging
logger = logging.getLogger(__name__)


def show_usage() -> None:
    for line in usage_lines():
        print(line)


def handle_add(settings: Settings, args: List[str]) -> None:
    if len(args) < 3:
        print("ERROR: not enough parameters for the command 'add'!!!")
        show_usage()
        return

    height = parse_measurement(args[1])
    weight = parse_measurement(args[2])
    if height is None or weight is None:
        print("ERROR: height and weight parameters should be numbers!!!")
        show_usage()
        return

    name = args[3] if len(args) > 3 else None
    result = bmi_store.add_record(settings.connection_string, height, weight, name)
    if not result.ok:
        print(f"Error when adding an record: {result.error}")
        return
    print(confirmation_line(result.value))


def handle_stat(settings: Settings) -> None:
    result = bmi_store.query_stats(settings.connection_string)
    if not result.ok:
        print(f"Error when getting statistics: {result.error}")
        return
    for line in stats_lines(result.value):
        print(line)


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = list(sys.argv[1:] if argv is None else argv)

    settings = load_settings()
    bmi_store.ensure_database(settings.connection_string)

    if not args:
        show_usage()
        return 0

    command = args[0].lower()
    logger.debug('Dispatching command %r', command)
    if command == 'add':
        handle_add(settings, args)
    elif command == 'stat':
        handle_stat(settings)
    else:
        show_usage()
    return 0


if __name__ == "__main__":
    sys.exit(main())
