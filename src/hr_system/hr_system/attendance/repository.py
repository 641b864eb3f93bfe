from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Sequence, Tuple

from ..common.pagination import PageRequest
from .model import AttendanceFilter, AttendanceRecord, CheckPoint


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a record; a second record for the same (employee, day) raises ConflictError."""
        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def fill_check_in(self, attendance_id: int, check_in: CheckPoint) -> bool:
        """Set the check-in leg only if it is still empty."""
        raise NotImplementedError

    def fill_check_out(self, record: AttendanceRecord) -> bool:
        """Store check-out leg and derived hours only if no check-out exists yet."""
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list(self, filters: AttendanceFilter, page: PageRequest) -> Tuple[List[AttendanceRecord], int]:
        raise NotImplementedError

    def list_between(
        self,
        start_date: date,
        end_date: date,
        *,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> List[AttendanceRecord]:
        """Records with ``start_date <= work_date <= end_date``, oldest first."""
        raise NotImplementedError
