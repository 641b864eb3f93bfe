from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from ..auth.authorizer import Action, Actor, can_perform, require_action
from ..common.datetime_utils import now_local, year_bounds
from ..common.pagination import Page, PageRequest
from ..core.constants import HIGH_PERFORMER_RATING, LOW_PERFORMER_RATING
from ..core.enums import ReviewStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import PerformanceReview, ReviewFilter, average_competency_rating, goal_achievement
from .payload import apply_review_changes, parse_review
from .repository import ReviewRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewStats:
    year: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    average_rating: float
    rated_reviews: int
    high_performers: int
    low_performers: int


class PerformanceService:
    """Performance reviews: draft -> in-review -> completed -> acknowledged."""

    def __init__(self, reviews: ReviewRepository, employees: EmployeeRepository):
        self._reviews = reviews
        self._employees = employees

    @staticmethod
    def recompute(review: PerformanceReview) -> PerformanceReview:
        return replace(
            review,
            goal_achievement=goal_achievement(review.goals),
            average_competency_rating=average_competency_rating(review.competencies),
        )

    def create(self, actor: Actor, data: Mapping[str, Any]) -> PerformanceReview:
        require_action(actor.role, Action.REVIEW_MANAGE)
        reviewer = self._employees.get_by_user_id(actor.user_id)
        if not reviewer:
            raise NotFoundError("Reviewer profile not found")

        review = parse_review(data, reviewer_id=reviewer.employee_id)
        if not self._employees.get(review.employee_id):
            raise NotFoundError("Employee not found")

        try:
            created = self._reviews.create(self.recompute(review))
        except ConflictError:
            logger.warning(
                "Duplicate review for employee %s, period %s..%s",
                review.employee_id,
                review.period.start_date,
                review.period.end_date,
            )
            raise ConflictError("A review already exists for this employee and period")

        logger.info("Review %s created for employee %s by user %s", created.review_id, created.employee_id, actor.user_id)
        return created

    def update(self, actor: Actor, review_id: int, data: Mapping[str, Any]) -> PerformanceReview:
        review = self._get(review_id)
        own = self._employees.get_by_user_id(actor.user_id)
        involved = own is not None and own.employee_id in (review.reviewer_id, review.employee_id)
        if not involved and not can_perform(actor.role, Action.REVIEW_EDIT_OTHERS):
            raise AuthorizationError("Not authorized to update this performance review")
        if review.status == ReviewStatus.ACKNOWLEDGED:
            raise ConflictError("Acknowledged reviews cannot be changed")
        return self._reviews.update(self.recompute(apply_review_changes(review, data)))

    def submit(self, actor: Actor, review_id: int, *, now: Optional[datetime] = None) -> PerformanceReview:
        require_action(actor.role, Action.REVIEW_MANAGE)
        review = self._get(review_id)
        submitted_at = now or now_local()
        if not self._reviews.transition(
            review_id,
            expected=ReviewStatus.DRAFT,
            status=ReviewStatus.IN_REVIEW,
            submitted_date=submitted_at,
        ):
            raise ConflictError("Review is not in draft status")
        logger.info("Review %s submitted by user %s", review_id, actor.user_id)
        return replace(review, status=ReviewStatus.IN_REVIEW, submitted_date=submitted_at)

    def complete(self, actor: Actor, review_id: int) -> PerformanceReview:
        require_action(actor.role, Action.REVIEW_MANAGE)
        review = self._get(review_id)
        if not self._reviews.transition(review_id, expected=ReviewStatus.IN_REVIEW, status=ReviewStatus.COMPLETED):
            raise ConflictError("Review must be in review before completion")
        logger.info("Review %s completed by user %s", review_id, actor.user_id)
        return replace(review, status=ReviewStatus.COMPLETED)

    def acknowledge(
        self,
        actor: Actor,
        review_id: int,
        employee_comments: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> PerformanceReview:
        """Reviewee only; optional comments are stored with the acknowledgement."""

        review = self._get(review_id)
        own = self._employees.get_by_user_id(actor.user_id)
        if not own or own.employee_id != review.employee_id:
            raise AuthorizationError("Not authorized to acknowledge this review")

        comments = (employee_comments or "").strip() or None
        acknowledged_at = now or now_local()
        if not self._reviews.transition(
            review_id,
            expected=ReviewStatus.COMPLETED,
            status=ReviewStatus.ACKNOWLEDGED,
            acknowledged_date=acknowledged_at,
            employee_comments=comments,
        ):
            raise ConflictError("Review must be completed before acknowledgment")

        logger.info("Review %s acknowledged by employee %s", review_id, own.employee_id)
        feedback = replace(review.feedback, employee_comments=comments) if comments else review.feedback
        return replace(review, status=ReviewStatus.ACKNOWLEDGED, acknowledged_date=acknowledged_at, feedback=feedback)

    def delete(self, actor: Actor, review_id: int) -> None:
        require_action(actor.role, Action.REVIEW_DELETE)
        if not self._reviews.delete(review_id):
            raise NotFoundError("Performance review not found")
        logger.info("Review %s deleted by user %s", review_id, actor.user_id)

    def get(self, actor: Actor, review_id: int) -> PerformanceReview:
        review = self._get(review_id)
        if can_perform(actor.role, Action.REVIEW_MANAGE):
            return review
        own = self._employees.get_by_user_id(actor.user_id)
        if not own or own.employee_id not in (review.employee_id, review.reviewer_id):
            raise AuthorizationError("Not authorized to view this performance review")
        return review

    def list(self, actor: Actor, filters: ReviewFilter, page: PageRequest) -> Page[PerformanceReview]:
        require_action(actor.role, Action.REVIEW_MANAGE)
        items, total = self._reviews.list(filters, page)
        return Page(items=items, total=total, request=page)

    def list_mine(self, actor: Actor, page: PageRequest) -> Page[PerformanceReview]:
        employee = self._employee_for(actor)
        items, total = self._reviews.list(ReviewFilter(employee_id=employee.employee_id), page)
        return Page(items=items, total=total, request=page)

    def stats_overview(self, actor: Actor, year: Optional[int] = None) -> ReviewStats:
        """Reviews whose period starts in ``year``; ratings from completed and acknowledged ones."""

        require_action(actor.role, Action.REVIEW_STATS)
        year = year or now_local().year
        start, end = year_bounds(year)
        reviews = self._reviews.list_starting_between(start, end)

        rated = [r for r in reviews if r.status in (ReviewStatus.COMPLETED, ReviewStatus.ACKNOWLEDGED)]
        ratings = [r.overall_rating for r in rated]
        return ReviewStats(
            year=year,
            by_status=dict(Counter(r.status.value for r in reviews)),
            by_type=dict(Counter(r.period.review_type.value for r in reviews)),
            average_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
            rated_reviews=len(rated),
            high_performers=sum(1 for x in ratings if x >= HIGH_PERFORMER_RATING),
            low_performers=sum(1 for x in ratings if x < LOW_PERFORMER_RATING),
        )

    def _get(self, review_id: int) -> PerformanceReview:
        review = self._reviews.get(review_id)
        if not review:
            raise NotFoundError("Performance review not found")
        return review

    def _employee_for(self, actor: Actor) -> Employee:
        employee = self._employees.get_by_user_id(actor.user_id)
        if not employee:
            raise NotFoundError("Employee profile not found")
        return employee
