from __future__ import annotations

from datetime import date

from ..core.exceptions import ValidationError

HALF_DAY = 0.5


def compute_total_days(start: date, end: date, is_half_day: bool = False) -> float:
    """Inclusive day count; a single-day half-day request counts as 0.5."""

    if start > end:
        raise ValidationError("End date must be after start date")
    days = (end - start).days + 1
    if is_half_day and days == 1:
        return HALF_DAY
    return float(days)
