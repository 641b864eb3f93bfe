from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageRequest
from ..core.enums import LeaveStatus
from .model import LeaveFilter, LeaveRequest


class LeaveRepository(Protocol):
    def get(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, leave: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def update(self, leave: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def delete(self, leave_id: int) -> bool:
        raise NotImplementedError

    def transition(
        self,
        leave_id: int,
        *,
        expected: LeaveStatus,
        status: LeaveStatus,
        approved_by: Optional[int] = None,
        approved_date: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Move a request to ``status`` only if it is still in ``expected``."""
        raise NotImplementedError

    def list(self, filters: LeaveFilter, page: PageRequest) -> Tuple[List[LeaveRequest], int]:
        raise NotImplementedError

    def list_approved_starting_between(self, employee_id: int, start: date, end: date) -> List[LeaveRequest]:
        raise NotImplementedError

    def list_applied_between(self, start: datetime, end: datetime) -> List[LeaveRequest]:
        """Requests with ``start <= applied_date < end``."""
        raise NotImplementedError
