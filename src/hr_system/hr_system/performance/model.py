from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence, Tuple

from ..core.enums import CompetencyCategory, DevelopmentStatus, GoalStatus, ReviewStatus, ReviewType


@dataclass(frozen=True)
class Goal:
    title: str
    description: Optional[str] = None
    target_date: Optional[date] = None
    status: GoalStatus = GoalStatus.NOT_STARTED
    weight: float = 20.0
    achievement: float = 0.0
    comments: Optional[str] = None


@dataclass(frozen=True)
class Competency:
    name: str
    category: CompetencyCategory
    rating: float
    comments: Optional[str] = None


@dataclass(frozen=True)
class DevelopmentAction:
    action: str
    timeline: Optional[str] = None
    resources: Optional[str] = None
    status: DevelopmentStatus = DevelopmentStatus.PLANNED


@dataclass(frozen=True)
class Feedback:
    self_assessment: Optional[str] = None
    manager_comments: Optional[str] = None
    employee_comments: Optional[str] = None


@dataclass(frozen=True)
class ReviewPeriod:
    start_date: date
    end_date: date
    review_type: ReviewType


def goal_achievement(goals: Sequence[Goal]) -> float:
    """Weighted mean of goal achievement, 0 when there is no weight."""

    total_weight = sum(g.weight for g in goals)
    if total_weight <= 0:
        return 0.0
    return round(sum(g.achievement * g.weight for g in goals) / total_weight, 2)


def average_competency_rating(competencies: Sequence[Competency]) -> float:
    if not competencies:
        return 0.0
    return round(sum(c.rating for c in competencies) / len(competencies), 2)


@dataclass(frozen=True)
class PerformanceReview:
    """One review per employee and period.

    ``goal_achievement`` and ``average_competency_rating`` are derived from
    goals and competencies and recomputed on every save.
    """

    review_id: int
    employee_id: int
    reviewer_id: int
    period: ReviewPeriod
    overall_rating: float
    goals: Tuple[Goal, ...] = ()
    competencies: Tuple[Competency, ...] = ()
    strengths: Tuple[str, ...] = ()
    areas_for_improvement: Tuple[str, ...] = ()
    development_plan: Tuple[DevelopmentAction, ...] = ()
    feedback: Feedback = field(default_factory=Feedback)
    status: ReviewStatus = ReviewStatus.DRAFT
    submitted_date: Optional[datetime] = None
    acknowledged_date: Optional[datetime] = None
    next_review_date: Optional[date] = None
    goal_achievement: float = 0.0
    average_competency_rating: float = 0.0


@dataclass(frozen=True)
class ReviewFilter:
    employee_id: Optional[int] = None
    reviewer_id: Optional[int] = None
    status: Optional[ReviewStatus] = None
    review_type: Optional[ReviewType] = None
