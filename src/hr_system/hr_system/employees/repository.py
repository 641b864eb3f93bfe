from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageRequest
from ..core.enums import Role
from .model import Employee, EmployeeFilter, NewEmployee


class EmployeeRepository(Protocol):
    def get(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def create_with_account(
        self,
        *,
        employee_code: str,
        new: NewEmployee,
        email: str,
        password_hash: str,
        role: Role,
    ) -> Employee:
        """Insert the account and the profile in one transaction."""
        raise NotImplementedError

    def update(self, employee: Employee) -> Employee:
        raise NotImplementedError

    def terminate(self, employee_id: int, end_date: date) -> Employee:
        """Mark terminated and deactivate the linked account in one transaction."""
        raise NotImplementedError

    def list(self, filters: EmployeeFilter, page: PageRequest) -> Tuple[List[Employee], int]:
        raise NotImplementedError

    def list_active_in_department(self, department_id: int) -> List[Employee]:
        raise NotImplementedError

    def count_active_in_department(self, department_id: int) -> int:
        raise NotImplementedError
