from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Tuple

from ..core.exceptions import ValidationError


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a pay period."""
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not 1900 <= int(year) <= 9999:
        raise ValidationError("Year is out of range")
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(int(year), 1, 1), date(int(year), 12, 31)
