from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageRequest
from ..core.enums import ReviewStatus
from .model import PerformanceReview, ReviewFilter


class ReviewRepository(Protocol):
    def get(self, review_id: int) -> Optional[PerformanceReview]:
        raise NotImplementedError

    def create(self, review: PerformanceReview) -> PerformanceReview:
        """Insert; a second review for the same employee and period raises ConflictError."""
        raise NotImplementedError

    def update(self, review: PerformanceReview) -> PerformanceReview:
        raise NotImplementedError

    def delete(self, review_id: int) -> bool:
        raise NotImplementedError

    def transition(
        self,
        review_id: int,
        *,
        expected: ReviewStatus,
        status: ReviewStatus,
        submitted_date: Optional[datetime] = None,
        acknowledged_date: Optional[datetime] = None,
        employee_comments: Optional[str] = None,
    ) -> bool:
        """Change status only if the current one is ``expected``."""
        raise NotImplementedError

    def list(self, filters: ReviewFilter, page: PageRequest) -> Tuple[List[PerformanceReview], int]:
        raise NotImplementedError

    def list_starting_between(self, start: date, end: date) -> List[PerformanceReview]:
        raise NotImplementedError
