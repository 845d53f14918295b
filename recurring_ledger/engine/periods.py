"""Calendar helpers for monthly billing periods.

Period keys are "YYYY-MM" strings; months are represented by their first day.
"""

import calendar
import re
from datetime import date
from typing import Iterator

PERIOD_KEY_RE = re.compile(r"^\d{4}-\d{2}$")

# UI due dates never go past the 28th so every month has one
DISPLAY_MAX_DAY = 28


def parse_period_key(value: str) -> date:
    """Parse "YYYY-MM" into the first day of that month.

    Raises ValueError for anything else, including month 00 or 13.
    """
    s = str(value or "").strip()
    if not PERIOD_KEY_RE.match(s):
        raise ValueError(f"period key must be YYYY-MM, got {value!r}")
    year, month = int(s[:4]), int(s[5:])
    if year < 1 or not 1 <= month <= 12:
        raise ValueError(f"invalid period key {value!r}")
    return date(year, month, 1)


def is_period_key(value: str) -> bool:
    try:
        parse_period_key(value)
    except ValueError:
        return False
    return True


def period_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def month_start(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """Month-start arithmetic: add_months(2024-11-15, 3) == 2025-02-01."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def months_between(start: date, end: date) -> int:
    """Whole months from start's month to end's month (can be negative)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def iter_period_keys(start_key: str, count: int) -> Iterator[str]:
    start = parse_period_key(start_key)
    for i in range(count):
        yield period_key(add_months(start, i))


def accrual_due_date(month: date, due_day: int) -> date:
    """Due date used for interest day counts: day clamped into the real month length."""
    last = calendar.monthrange(month.year, month.month)[1]
    day = min(max(1, int(due_day or 1)), last)
    return date(month.year, month.month, day)


def display_due_date(month: date, due_day: int) -> date:
    """Due date shown to users: day clamped into [1, 28]."""
    day = min(DISPLAY_MAX_DAY, max(1, int(due_day or 1)))
    return date(month.year, month.month, day)


def period_bounds(key: str, due_day: int) -> tuple[date, date, int]:
    """(previous due date, this period's due date, calendar days between)."""
    month = parse_period_key(key)
    end = accrual_due_date(month, due_day)
    start = accrual_due_date(add_months(month, -1), due_day)
    return start, end, (end - start).days
