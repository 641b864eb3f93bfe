from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import List, Optional, Tuple

from ..common.pagination import PageRequest
from ..core.enums import CompetencyCategory, DevelopmentStatus, GoalStatus, ReviewStatus, ReviewType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_total, fetchall, fetchone, from_json, to_json, where_clause
from .model import (
    Competency,
    DevelopmentAction,
    Feedback,
    Goal,
    PerformanceReview,
    ReviewFilter,
    ReviewPeriod,
)
from .repository import ReviewRepository

REVIEW_FIELDS = [
    "employee_id",
    "reviewer_id",
    "period_start",
    "period_end",
    "review_type",
    "goals",
    "competencies",
    "overall_rating",
    "strengths",
    "areas_for_improvement",
    "development_plan",
    "self_assessment",
    "manager_comments",
    "employee_comments",
    "status",
    "submitted_date",
    "acknowledged_date",
    "next_review_date",
    "goal_achievement",
    "average_competency_rating",
]

REVIEW_COLUMNS = ", ".join(["review_id"] + REVIEW_FIELDS)


def _goal(d: dict) -> Goal:
    return Goal(
        title=d["title"],
        description=d.get("description"),
        target_date=date.fromisoformat(d["target_date"]) if d.get("target_date") else None,
        status=GoalStatus(d.get("status") or GoalStatus.NOT_STARTED.value),
        weight=float(d.get("weight", 20)),
        achievement=float(d.get("achievement", 0)),
        comments=d.get("comments"),
    )


def _competency(d: dict) -> Competency:
    return Competency(
        name=d["name"],
        category=CompetencyCategory(d["category"]),
        rating=float(d["rating"]),
        comments=d.get("comments"),
    )


def _development(d: dict) -> DevelopmentAction:
    return DevelopmentAction(
        action=d["action"],
        timeline=d.get("timeline"),
        resources=d.get("resources"),
        status=DevelopmentStatus(d.get("status") or DevelopmentStatus.PLANNED.value),
    )


def _enum_values(d: dict) -> dict:
    return {k: (v.value if hasattr(v, "value") else v) for k, v in d.items()}


def row_to_review(r: dict) -> PerformanceReview:
    return PerformanceReview(
        review_id=int(r["review_id"]),
        employee_id=int(r["employee_id"]),
        reviewer_id=int(r["reviewer_id"]),
        period=ReviewPeriod(
            start_date=r["period_start"],
            end_date=r["period_end"],
            review_type=ReviewType(r["review_type"]),
        ),
        overall_rating=float(r["overall_rating"]),
        goals=tuple(_goal(g) for g in from_json(r.get("goals"), [])),
        competencies=tuple(_competency(c) for c in from_json(r.get("competencies"), [])),
        strengths=tuple(from_json(r.get("strengths"), [])),
        areas_for_improvement=tuple(from_json(r.get("areas_for_improvement"), [])),
        development_plan=tuple(_development(a) for a in from_json(r.get("development_plan"), [])),
        feedback=Feedback(
            self_assessment=r.get("self_assessment"),
            manager_comments=r.get("manager_comments"),
            employee_comments=r.get("employee_comments"),
        ),
        status=ReviewStatus(r["status"]),
        submitted_date=r.get("submitted_date"),
        acknowledged_date=r.get("acknowledged_date"),
        next_review_date=r.get("next_review_date"),
        goal_achievement=float(r.get("goal_achievement") or 0),
        average_competency_rating=float(r.get("average_competency_rating") or 0),
    )


def _values(review: PerformanceReview) -> tuple:
    return (
        review.employee_id,
        review.reviewer_id,
        review.period.start_date,
        review.period.end_date,
        review.period.review_type.value,
        to_json([_enum_values(asdict(g)) for g in review.goals]),
        to_json([_enum_values(asdict(c)) for c in review.competencies]),
        review.overall_rating,
        to_json(list(review.strengths)),
        to_json(list(review.areas_for_improvement)),
        to_json([_enum_values(asdict(a)) for a in review.development_plan]),
        review.feedback.self_assessment,
        review.feedback.manager_comments,
        review.feedback.employee_comments,
        review.status.value,
        review.submitted_date,
        review.acknowledged_date,
        review.next_review_date,
        review.goal_achievement,
        review.average_competency_rating,
    )


class MySQLReviewRepository(ReviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, review_id: int) -> Optional[PerformanceReview]:
        cur.execute(f"SELECT {REVIEW_COLUMNS} FROM performance_reviews WHERE review_id=%s", (int(review_id),))
        r = fetchone(cur)
        return row_to_review(r) if r else None

    def get(self, review_id: int) -> Optional[PerformanceReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, review_id)

    def create(self, review: PerformanceReview) -> PerformanceReview:
        placeholders = ",".join(["%s"] * len(REVIEW_FIELDS))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO performance_reviews({', '.join(REVIEW_FIELDS)}) VALUES({placeholders})",
                _values(review),
            )
            return self._select_one(cur, int(cur.lastrowid))

    def update(self, review: PerformanceReview) -> PerformanceReview:
        assignments = ", ".join(f"{name}=%s" for name in REVIEW_FIELDS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE performance_reviews SET {assignments} WHERE review_id=%s",
                _values(review) + (review.review_id,),
            )
            updated = self._select_one(cur, review.review_id)
            if not updated:
                raise NotFoundError("Performance review not found")
            return updated

    def delete(self, review_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM performance_reviews WHERE review_id=%s", (int(review_id),))
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE performance_reviews
                SET status=%s,
                    submitted_date=COALESCE(%s, submitted_date),
                    acknowledged_date=COALESCE(%s, acknowledged_date),
                    employee_comments=COALESCE(%s, employee_comments)
                WHERE review_id=%s AND status=%s
                """,
                (
                    status.value,
                    submitted_date,
                    acknowledged_date,
                    employee_comments,
                    int(review_id),
                    expected.value,
                ),
            )
            return cur.rowcount > 0

    def list(self, filters: ReviewFilter, page: PageRequest) -> Tuple[List[PerformanceReview], int]:
        clauses: list[str] = []
        params: list = []
        if filters.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.reviewer_id is not None:
            clauses.append("reviewer_id=%s")
            params.append(int(filters.reviewer_id))
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if filters.review_type is not None:
            clauses.append("review_type=%s")
            params.append(filters.review_type.value)
        where = where_clause(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM performance_reviews {where}", tuple(params))
            total = fetch_total(cur)
            cur.execute(
                f"""
                SELECT {REVIEW_COLUMNS} FROM performance_reviews {where}
                ORDER BY created_at DESC, review_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            return [row_to_review(r) for r in fetchall(cur)], total

    def list_starting_between(self, start: date, end: date) -> List[PerformanceReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {REVIEW_COLUMNS} FROM performance_reviews
                WHERE period_start BETWEEN %s AND %s
                ORDER BY period_start
                """,
                (start, end),
            )
            return [row_to_review(r) for r in fetchall(cur)]
