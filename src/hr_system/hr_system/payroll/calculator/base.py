from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...core.policy import PayrollPolicy
from ...employees.model import Benefits
from ..model import Deductions, Earnings, OvertimePay, PayCalculations


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def overtime_amount(self, hours: float, rate: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def overtime(self, base_salary: Decimal, hours: float, policy: PayrollPolicy) -> OvertimePay:
        raise NotImplementedError

    @abstractmethod
    def statutory_deductions(self, base_salary: Decimal, benefits: Benefits, policy: PayrollPolicy) -> Deductions:
        raise NotImplementedError

    @abstractmethod
    def totals(self, earnings: Earnings, deductions: Deductions) -> PayCalculations:
        raise NotImplementedError
