"""
Low-level timezone and timestamp utilities.

Domain-agnostic helpers for timezone-aware UTC datetimes. Baseball
calendar logic (which "day" a game belongs to) uses Eastern Time.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def now_utc() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def today_et() -> date:
    """Return the current date in US Eastern Time (sports calendar day).

    A 10 PM ET first pitch on June 5 is a "June 5 game" even though it is
    June 6 in UTC.
    """
    return datetime.now(ZoneInfo("America/New_York")).date()


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from the database."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_between(earlier: datetime, later: datetime) -> float:
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 3600
