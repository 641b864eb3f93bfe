from datetime import date

import pytest

from src.hr_system.hr_system.core.exceptions import ValidationError
from src.hr_system.hr_system.leaves.days import compute_total_days


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2025, 5, 5), date(2025, 5, 5), 1.0),
        (date(2025, 5, 5), date(2025, 5, 9), 5.0),
        (date(2025, 2, 27), date(2025, 3, 2), 4.0),
    ],
)
def test_full_days_are_inclusive(start, end, expected):
    assert compute_total_days(start, end) == expected


def test_same_day_half_day_counts_half():
    assert compute_total_days(date(2025, 5, 5), date(2025, 5, 5), is_half_day=True) == 0.5


def test_half_day_flag_on_a_range_counts_full_days():
    assert compute_total_days(date(2025, 5, 5), date(2025, 5, 6), is_half_day=True) == 2.0


def test_end_before_start_is_rejected():
    with pytest.raises(ValidationError):
        compute_total_days(date(2025, 5, 6), date(2025, 5, 5))
