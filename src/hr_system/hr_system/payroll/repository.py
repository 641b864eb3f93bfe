from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol, Sequence, Tuple

from ..common.pagination import PageRequest
from ..core.enums import PaymentMethod, PayrollStatus
from .model import PayrollFilter, PayrollRecord


class PayrollRepository(Protocol):
    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_for_period(self, employee_id: int, month: int, year: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(self, record: PayrollRecord) -> PayrollRecord:
        """Insert; a second record for the same (employee, month, year) raises ConflictError."""
        raise NotImplementedError

    def update(self, record: PayrollRecord) -> PayrollRecord:
        raise NotImplementedError

    def delete(self, payroll_id: int) -> bool:
        raise NotImplementedError

    def transition(
        self,
        payroll_id: int,
        *,
        expected: Sequence[PayrollStatus],
        status: PayrollStatus,
        processed_by: Optional[int] = None,
        processed_date: Optional[datetime] = None,
        payment_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> bool:
        """Change status only if the current one is in ``expected``."""
        raise NotImplementedError

    def list(
        self,
        filters: PayrollFilter,
        page: PageRequest,
        *,
        statuses: Optional[Sequence[PayrollStatus]] = None,
    ) -> Tuple[List[PayrollRecord], int]:
        raise NotImplementedError

    def list_for_year(self, year: int, statuses: Sequence[PayrollStatus]) -> List[PayrollRecord]:
        raise NotImplementedError
