# backend/utils/dates.py
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fastapi import HTTPException


def _parse_iso(s: str) -> datetime:
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Bad datetime format: {s}")


def parse_date_from(s: Optional[str]) -> Optional[datetime]:
    if not s:
        return None
    return _parse_iso(s)


def parse_date_to(s: Optional[str]) -> Optional[datetime]:
    """A bare YYYY-MM-DD covers the whole day."""
    if not s:
        return None
    if len(s) == 10:
        s += " 23:59:59"
    return _parse_iso(s)


def range_bounds(date_range: str, now: Optional[datetime] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Resolves the report windows: today, yesterday, a number of days back,
    or all (no bounds). The upper bound is exclusive.
    """
    now = now or datetime.utcnow()
    start_of_today = datetime(now.year, now.month, now.day)

    if date_range == "all":
        return None, None
    if date_range == "today":
        return start_of_today, None
    if date_range == "yesterday":
        return start_of_today - timedelta(days=1), start_of_today
    try:
        days = int(date_range)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown date range: {date_range}")
    return now - timedelta(days=days), None
