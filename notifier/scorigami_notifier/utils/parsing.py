"""
Generic, format-agnostic parsing utilities.

Provider payloads are loosely typed JSON; these helpers coerce values
without raising.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any


def parse_int(value: str | int | float | None) -> int | None:
    """Parse a value to an integer, handling common edge cases.

    Accepts strings, ints, floats, or None. Returns None for empty strings or "-".
    """
    if value in (None, "", "-"):
        return None
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return None


def parse_game_date(value: Any) -> date | None:
    """Parse a historical game date.

    The store keeps dates either as real dates or as YYYYMMDD integers.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in ("%Y%m%d", "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
