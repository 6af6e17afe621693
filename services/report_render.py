from __future__ import annotations

import json
from typing import List, Optional

from bmi_calc import format_number
from bmi_store import BmiRecord, BmiStats

PROG = 'bmi-util'
PLACEHOLDER = '-'


def usage_lines(prog: str = PROG) -> List[str]:
    return [
        "Expected format:",
        f"Add a record -> \t{prog} add <height_in_cm> <weight_in_kg> [<client_name>]",
        f"View statistics -> \t{prog} stat",
    ]


def confirmation_line(record: BmiRecord) -> str:
    return (
        f"Record added: {record.name}, Height: {format_number(record.height_cm)} cm, "
        f"Weight: {format_number(record.weight_kg)} kg, BMI: {record.bmi:.2f}"
    )


def _client(value: Optional[str], unit: str) -> str:
    if not value:
        return PLACEHOLDER
    return f"{value} {unit}"


def stats_lines(stats: BmiStats) -> List[str]:
    """Six fixed-label lines; printed even when the store is empty."""
    return [
        f"total records: {stats.total_records}",
        f"underweight: {stats.underweight}",
        f"normal: {stats.normal}",
        f"overweight: {stats.overweight}",
        f"the tallest client: {_client(stats.tallest_client, 'cm')}",
        f"the heaviest client: {_client(stats.heaviest_client, 'kg')}",
    ]


def records_table(records: List[BmiRecord]) -> str:
    if not records:
        return ""
    lines = []
    for r in records:
        name = r.name if r.name is not None else ''
        lines.append(
            f"{r.id:6} | {name:20} | h={format_number(r.height_cm):>7} cm | "
            f"w={format_number(r.weight_kg):>7} kg | bmi={r.bmi:6.2f}"
        )
    return "\n".join(lines)


def records_json(records: List[BmiRecord]) -> str:
    return json.dumps([r.as_dict() for r in records], indent=2, ensure_ascii=False)
