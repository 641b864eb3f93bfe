"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Policy values that vary by company live in ``core.policy``.
"""

STANDARD_WORK_HOURS = 8
MS_PER_HOUR = 3_600_000

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

EMPLOYEE_CODE_PREFIX = "EMP"
DEFAULT_CURRENCY = "USD"
MIN_PASSWORD_LENGTH = 6

LEAVE_REASON_MIN_LENGTH = 10
LEAVE_REASON_MAX_LENGTH = 500

HIGH_PERFORMER_RATING = 4.5
LOW_PERFORMER_RATING = 3.0
