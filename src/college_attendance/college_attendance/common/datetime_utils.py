from __future__ import annotations

import calendar
from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def month_bounds(value: str) -> tuple[date, date]:
    """First and last calendar day of a YYYY-MM month."""
    start = datetime.strptime(value, "%Y-%m").date()
    last_day = calendar.monthrange(start.year, start.month)[1]
    return start, start.replace(day=last_day)


def year_start(today: date) -> date:
    return date(today.year, 1, 1)


def now_local() -> datetime:
    """Current local time."""
    return datetime.now()
