from __future__ import annotations

import math
import re
from datetime import datetime

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DISTANCE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)")

MIN_PHONE_DIGITS = 10


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))


def is_valid_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    return len(digits) >= MIN_PHONE_DIGITS


def parse_distance(value: str) -> float:
    """
    Parse a numeric-prefixed distance like "3.2 mi" or "0.3 miles".
    Unparsable values map to +inf so they sort after every real distance.
    """
    match = _DISTANCE_RE.match(value or "")
    if not match:
        return math.inf
    return float(match.group(1))


def parse_slot_datetime(date_str: str, time_str: str) -> datetime | None:
    try:
        return datetime.fromisoformat(f"{date_str}T{time_str}")
    except (TypeError, ValueError):
        return None
