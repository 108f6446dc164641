"""Helpers for "YYYY-MM" month keys."""
from datetime import date
from typing import List, Optional, Tuple


def month_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def parse_month(month: str) -> Tuple[int, int]:
    year, m = month.split("-")
    return int(year), int(m)


def shift_month(month: str, delta: int) -> str:
    """Move a month key by delta months (negative goes back)."""
    year, m = parse_month(month)
    index = year * 12 + (m - 1) + delta
    return month_key(index // 12, index % 12 + 1)


def previous_month(month: str) -> str:
    return shift_month(month, -1)


def current_month(today: Optional[date] = None) -> str:
    today = today or date.today()
    return month_key(today.year, today.month)


def month_options(before: int = 3, after: int = 3, today: Optional[date] = None) -> List[str]:
    """Month keys around the current month, oldest first."""
    base = current_month(today)
    return [shift_month(base, i) for i in range(-before, after + 1)]


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of the month."""
    year, m = parse_month(month)
    first = date(year, m, 1)
    ny, nm = parse_month(shift_month(month, 1))
    last = date.fromordinal(date(ny, nm, 1).toordinal() - 1)
    return first, last


def format_month(month: str) -> str:
    year, m = parse_month(month)
    return f"{m:02d}/{year}"
