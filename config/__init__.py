import os

PAYROLL_POLICY_KEYS = (
    "days_per_month",
    "hours_per_day",
    "overtime_multiplier",
    "federal_tax_rate",
    "state_tax_rate",
    "local_tax_rate",
    "health_insurance_premium",
    "retirement_rate",
)


def get_settings_module() -> str:
    # APP_ENV selects the settings module, default is 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def policy_from_env(prefix: str, keys) -> dict:
    """Collect ``{prefix}_{KEY}`` environment overrides, e.g. PAYROLL_FEDERAL_TAX_RATE."""
    values = {}
    for key in keys:
        raw = os.getenv(f"{prefix}_{key.upper()}")
        if raw not in (None, ""):
            values[key] = raw
    return values
