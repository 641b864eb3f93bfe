from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, TypeVar

from ..common.validators import (
    parse_date,
    parse_enum,
    parse_float,
    parse_int,
    parse_optional_date,
    require_field,
    require_non_empty,
)
from ..core.enums import CompetencyCategory, DevelopmentStatus, GoalStatus, ReviewType
from ..core.exceptions import ValidationError
from .model import Competency, DevelopmentAction, Feedback, Goal, PerformanceReview, ReviewPeriod

T = TypeVar("T")


def _optional_str(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _items(value: Any, field_name: str, parse: Callable[[Mapping[str, Any]], T]) -> Tuple[T, ...]:
    if not value:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise ValidationError(f"{field_name} must be a list")
    out = []
    for item in value:
        if not isinstance(item, Mapping):
            raise ValidationError(f"Each entry in {field_name} must be an object")
        out.append(parse(item))
    return tuple(out)


def _strings(value: Any, field_name: str) -> Tuple[str, ...]:
    if not value:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise ValidationError(f"{field_name} must be a list")
    return tuple(s for s in (_optional_str(v) for v in value) if s)


def parse_goal(d: Mapping[str, Any]) -> Goal:
    return Goal(
        title=require_non_empty(d.get("title"), "Goal title"),
        description=_optional_str(d.get("description")),
        target_date=parse_optional_date(d.get("target_date"), "target_date"),
        status=parse_enum(GoalStatus, d.get("status") or GoalStatus.NOT_STARTED, "goal status"),
        weight=parse_float(d.get("weight", 20), "goal weight", minimum=0, maximum=100),
        achievement=parse_float(d.get("achievement", 0), "goal achievement", minimum=0, maximum=100),
        comments=_optional_str(d.get("comments")),
    )


def parse_competency(d: Mapping[str, Any]) -> Competency:
    return Competency(
        name=require_non_empty(d.get("name"), "Competency name"),
        category=parse_enum(CompetencyCategory, require_field(d, "category", "Competency category"), "category"),
        rating=parse_float(require_field(d, "rating", "Competency rating"), "competency rating", minimum=1, maximum=5),
        comments=_optional_str(d.get("comments")),
    )


def parse_development_action(d: Mapping[str, Any]) -> DevelopmentAction:
    return DevelopmentAction(
        action=require_non_empty(d.get("action"), "Development action"),
        timeline=_optional_str(d.get("timeline")),
        resources=_optional_str(d.get("resources")),
        status=parse_enum(DevelopmentStatus, d.get("status") or DevelopmentStatus.PLANNED, "development status"),
    )


def parse_feedback(data: Any, base: Optional[Feedback] = None) -> Feedback:
    base = base or Feedback()
    if data is None:
        return base
    if not isinstance(data, Mapping):
        raise ValidationError("feedback must be an object")
    return Feedback(
        self_assessment=_optional_str(data["self_assessment"]) if "self_assessment" in data else base.self_assessment,
        manager_comments=_optional_str(data["manager_comments"])
        if "manager_comments" in data
        else base.manager_comments,
        employee_comments=_optional_str(data["employee_comments"])
        if "employee_comments" in data
        else base.employee_comments,
    )


def parse_review_period(data: Any) -> ReviewPeriod:
    if not isinstance(data, Mapping):
        raise ValidationError("review_period is required")
    period = ReviewPeriod(
        start_date=parse_date(require_field(data, "start_date", "Review start date"), "start_date"),
        end_date=parse_date(require_field(data, "end_date", "Review end date"), "end_date"),
        review_type=parse_enum(ReviewType, require_field(data, "type", "Review type"), "type"),
    )
    if period.end_date < period.start_date:
        raise ValidationError("Review period end date must be after start date")
    return period


def _rating(value: Any) -> float:
    return parse_float(value, "overall_rating", minimum=1, maximum=5)


def parse_review(data: Mapping[str, Any], *, reviewer_id: int) -> PerformanceReview:
    return PerformanceReview(
        review_id=0,
        employee_id=parse_int(require_field(data, "employee_id", "Employee ID"), "employee_id"),
        reviewer_id=reviewer_id,
        period=parse_review_period(data.get("review_period")),
        overall_rating=_rating(require_field(data, "overall_rating", "Overall rating")),
        goals=_items(data.get("goals"), "goals", parse_goal),
        competencies=_items(data.get("competencies"), "competencies", parse_competency),
        strengths=_strings(data.get("strengths"), "strengths"),
        areas_for_improvement=_strings(data.get("areas_for_improvement"), "areas_for_improvement"),
        development_plan=_items(data.get("development_plan"), "development_plan", parse_development_action),
        feedback=parse_feedback(data.get("feedback")),
        next_review_date=parse_optional_date(data.get("next_review_date"), "next_review_date"),
    )


def apply_review_changes(review: PerformanceReview, data: Mapping[str, Any]) -> PerformanceReview:
    """Content edits; employee, reviewer and workflow state are not editable here."""

    changes: dict = {"feedback": parse_feedback(data.get("feedback"), review.feedback)}
    if "review_period" in data:
        changes["period"] = parse_review_period(data["review_period"])
    if "overall_rating" in data:
        changes["overall_rating"] = _rating(data["overall_rating"])
    if "goals" in data:
        changes["goals"] = _items(data["goals"], "goals", parse_goal)
    if "competencies" in data:
        changes["competencies"] = _items(data["competencies"], "competencies", parse_competency)
    if "strengths" in data:
        changes["strengths"] = _strings(data["strengths"], "strengths")
    if "areas_for_improvement" in data:
        changes["areas_for_improvement"] = _strings(data["areas_for_improvement"], "areas_for_improvement")
    if "development_plan" in data:
        changes["development_plan"] = _items(data["development_plan"], "development_plan", parse_development_action)
    if "next_review_date" in data:
        changes["next_review_date"] = parse_optional_date(data["next_review_date"], "next_review_date")
    return replace(review, **changes)
