from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..auth.authorizer import Action, Actor, can_perform, require_action
from ..common.datetime_utils import now_local, year_bounds
from ..common.pagination import Page, PageRequest
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..core.policy import LeavePolicy
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .days import compute_total_days
from .model import LeaveBalance, LeaveFilter, LeaveRequest
from .payload import apply_leave_changes, parse_leave_request
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveStats:
    year: int
    by_status: Dict[str, int]
    by_type: Dict[str, dict]
    by_month: Dict[int, int]


class LeaveService:
    """Leave ledger.

    Requests start ``pending``. Approve, reject and cancel are conditional
    writes on the ``pending`` state, so only the first decision wins.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        *,
        policy: Optional[LeavePolicy] = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._policy = policy or LeavePolicy()

    def submit(self, employee_id: int, request: LeaveRequest, *, now: Optional[datetime] = None) -> LeaveRequest:
        leave = replace(
            request,
            leave_id=0,
            employee_id=employee_id,
            status=LeaveStatus.PENDING,
            applied_date=now or now_local(),
            approved_by=None,
            approved_date=None,
            rejection_reason=None,
            total_days=compute_total_days(request.start_date, request.end_date, request.is_half_day),
        )
        created = self._leaves.create(leave)
        logger.info(
            "Leave %s submitted by employee %s (%s, %.1f days)",
            created.leave_id,
            employee_id,
            created.leave_type.value,
            created.total_days,
        )
        return created

    def apply(self, actor: Actor, data: Mapping[str, Any]) -> LeaveRequest:
        employee = self._employee_for(actor)
        return self.submit(employee.employee_id, parse_leave_request(data))

    def update(self, actor: Actor, leave_id: int, data: Mapping[str, Any]) -> LeaveRequest:
        leave = self._get(leave_id)
        self._require_owner_or(actor, leave, Action.LEAVE_EDIT_OTHERS, "Not authorized to update this leave request")
        if leave.status != LeaveStatus.PENDING:
            raise ConflictError("Can only update pending leave requests")

        updated = apply_leave_changes(leave, data)
        updated = replace(
            updated,
            total_days=compute_total_days(updated.start_date, updated.end_date, updated.is_half_day),
        )
        return self._leaves.update(updated)

    def cancel(self, actor: Actor, leave_id: int) -> LeaveRequest:
        leave = self._get(leave_id)
        self._require_owner_or(actor, leave, Action.LEAVE_EDIT_OTHERS, "Not authorized to cancel this leave request")
        if not self._leaves.transition(leave_id, expected=LeaveStatus.PENDING, status=LeaveStatus.CANCELLED):
            raise ConflictError("Can only cancel pending leave requests")
        logger.info("Leave %s cancelled by user %s", leave_id, actor.user_id)
        return replace(leave, status=LeaveStatus.CANCELLED)

    def delete(self, actor: Actor, leave_id: int) -> None:
        leave = self._get(leave_id)
        self._require_owner_or(actor, leave, Action.LEAVE_DELETE_OTHERS, "Not authorized to delete this leave request")
        if leave.status != LeaveStatus.PENDING:
            raise ConflictError("Can only delete pending leave requests")
        self._leaves.delete(leave_id)

    def approve(self, actor: Actor, leave_id: int, *, now: Optional[datetime] = None) -> LeaveRequest:
        return self._decide(actor, leave_id, LeaveStatus.APPROVED, None, now)

    def reject(
        self,
        actor: Actor,
        leave_id: int,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        return self._decide(actor, leave_id, LeaveStatus.REJECTED, (reason or "").strip() or None, now)

    def compute_balance(
        self,
        employee_id: int,
        year: int,
        *,
        policy: Optional[LeavePolicy] = None,
    ) -> List[LeaveBalance]:
        policy = policy or self._policy
        start, end = year_bounds(year)
        used: Dict[LeaveType, float] = defaultdict(float)
        for leave in self._leaves.list_approved_starting_between(employee_id, start, end):
            used[leave.leave_type] += leave.total_days

        balances = []
        for leave_type in LeaveType:
            allocated = policy.allocated(leave_type)
            balances.append(
                LeaveBalance(
                    leave_type=leave_type,
                    allocated=allocated,
                    used=used[leave_type],
                    remaining=max(0.0, allocated - used[leave_type]),
                )
            )
        return balances

    def my_balance(self, actor: Actor, year: Optional[int] = None) -> List[LeaveBalance]:
        employee = self._employee_for(actor)
        return self.compute_balance(employee.employee_id, year or now_local().year)

    def get(self, actor: Actor, leave_id: int) -> LeaveRequest:
        leave = self._get(leave_id)
        self._require_owner_or(actor, leave, Action.LEAVE_VIEW_ALL, "Not authorized to view this leave request")
        return leave

    def list(self, actor: Actor, filters: LeaveFilter, page: PageRequest) -> Page[LeaveRequest]:
        require_action(actor.role, Action.LEAVE_VIEW_ALL)
        items, total = self._leaves.list(filters, page)
        return Page(items=items, total=total, request=page)

    def list_mine(self, actor: Actor, page: PageRequest) -> Page[LeaveRequest]:
        employee = self._employee_for(actor)
        items, total = self._leaves.list(LeaveFilter(employee_id=employee.employee_id), page)
        return Page(items=items, total=total, request=page)

    def stats_overview(self, actor: Actor, year: Optional[int] = None) -> LeaveStats:
        """Requests applied for during ``year``, grouped by status, type and month."""

        require_action(actor.role, Action.LEAVE_STATS)
        year = year or now_local().year
        leaves = self._leaves.list_applied_between(datetime(year, 1, 1), datetime(year + 1, 1, 1))

        by_type: Dict[str, dict] = {}
        for leave in leaves:
            entry = by_type.setdefault(leave.leave_type.value, {"count": 0, "total_days": 0.0})
            entry["count"] += 1
            entry["total_days"] += leave.total_days

        return LeaveStats(
            year=year,
            by_status=dict(Counter(leave.status.value for leave in leaves)),
            by_type=by_type,
            by_month=dict(sorted(Counter(leave.applied_date.month for leave in leaves).items())),
        )

    def _decide(
        self,
        actor: Actor,
        leave_id: int,
        status: LeaveStatus,
        rejection_reason: Optional[str],
        now: Optional[datetime],
    ) -> LeaveRequest:
        require_action(actor.role, Action.LEAVE_REVIEW)
        leave = self._get(leave_id)
        approver = self._employees.get_by_user_id(actor.user_id)
        approved_by = approver.employee_id if approver else None
        decided_at = now or now_local()

        if not self._leaves.transition(
            leave_id,
            expected=LeaveStatus.PENDING,
            status=status,
            approved_by=approved_by,
            approved_date=decided_at,
            rejection_reason=rejection_reason,
        ):
            logger.warning("Leave %s is no longer pending, %s refused", leave_id, status.value)
            raise ConflictError("Leave request is not pending")

        logger.info("Leave %s %s by user %s", leave_id, status.value, actor.user_id)
        return replace(
            leave,
            status=status,
            approved_by=approved_by,
            approved_date=decided_at,
            rejection_reason=rejection_reason,
        )

    def _get(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def _employee_for(self, actor: Actor) -> Employee:
        employee = self._employees.get_by_user_id(actor.user_id)
        if not employee:
            raise NotFoundError("Employee profile not found")
        return employee

    def _require_owner_or(self, actor: Actor, leave: LeaveRequest, action: Action, message: str) -> None:
        own = self._employees.get_by_user_id(actor.user_id)
        if own and own.employee_id == leave.employee_id:
            return
        if not can_perform(actor.role, action):
            raise AuthorizationError(message)
