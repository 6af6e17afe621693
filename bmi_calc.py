"""Numeric parsing and the BMI formula."""

import math
from typing import Optional


DEFAULT_CLIENT_NAME = 'unknown'

# Category thresholds used by the statistics query. The normal band stops at
# 24.9 while overweight starts at 25, so values in between fall in neither.
UNDERWEIGHT_BELOW = 18.5
NORMAL_UPPER = 24.9
OVERWEIGHT_FROM = 25.0


def parse_measurement(raw: str) -> Optional[float]:
    """Parse a CLI measurement; return None when it is not a finite number."""
    # float() also takes digit-group underscores ("1_70")
    if raw is None or '_' in raw:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def compute_bmi(height_cm: float, weight_kg: float) -> float:
    """Return weight_kg / (height_cm / 100) ** 2.

    No range checks: a zero height raises ZeroDivisionError and a negative
    height yields a positive BMI.
    """
    return weight_kg / (height_cm / 100) ** 2


def format_number(value: float) -> str:
    """Render a measurement without a trailing '.0' for whole numbers."""
    text = repr(float(value))
    if text.endswith('.0'):
        return text[:-2]
    return text
