"""Example: calling the service layer directly, without Flask.

Controllers are thin; every rule lives in the services, which take an Actor.
"""

import importlib
import sys
from datetime import date

from config import get_settings_module

from src.hr_system.hr_system.auth.authorizer import Actor
from src.hr_system.hr_system.container import build_container
from src.hr_system.hr_system.core.enums import Role


def main(employee_id: int = 1):
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    hr = Actor(user_id=1, role=Role.HR)

    today = date.today()
    record = container.payroll_service.calculate(hr, employee_id, today.month, today.year)
    print(record.calculations)
    print(container.leave_service.compute_balance(employee_id, today.year))


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
