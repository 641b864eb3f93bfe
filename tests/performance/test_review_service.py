from __future__ import annotations

from datetime import datetime

import pytest

from src.hr_system.hr_system.common.pagination import PageRequest
from src.hr_system.hr_system.core.enums import ReviewStatus
from src.hr_system.hr_system.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.hr_system.hr_system.performance.model import Goal, goal_achievement


def _review(employee_id: int, rating: float = 4.0, start: str = "2025-01-01", end: str = "2025-03-31") -> dict:
    return {
        "employee_id": employee_id,
        "review_period": {"start_date": start, "end_date": end, "type": "quarterly"},
        "overall_rating": rating,
        "goals": [
            {"title": "Ship billing", "weight": 60, "achievement": 100},
            {"title": "Mentor intern", "weight": 40, "achievement": 50},
        ],
        "competencies": [
            {"name": "Python", "category": "technical", "rating": 4},
            {"name": "Writing", "category": "communication", "rating": 5},
        ],
        "strengths": ["ownership", " "],
        "feedback": {"manager_comments": "Solid quarter"},
    }


def test_goal_achievement_without_weight_is_zero():
    assert goal_achievement([Goal(title="x", weight=0, achievement=90)]) == 0.0
    assert goal_achievement([]) == 0.0


def test_create_derives_scores(world):
    review = world.services.performance_service.create(world.actor(world.manager), _review(world.alice.employee_id))

    assert review.reviewer_id == world.manager.employee_id
    assert review.status == ReviewStatus.DRAFT
    assert review.goal_achievement == 80.0
    assert review.average_competency_rating == 4.5
    assert review.strengths == ("ownership",)
    assert review.feedback.manager_comments == "Solid quarter"


def test_derived_scores_supplied_by_caller_are_ignored(world):
    data = {**_review(world.alice.employee_id), "goal_achievement": 5, "average_competency_rating": 1}
    review = world.services.performance_service.create(world.actor(world.manager), data)
    assert review.goal_achievement == 80.0
    assert review.average_competency_rating == 4.5


@pytest.mark.parametrize("rating", [0, 5.5])
def test_rating_out_of_range(world, rating):
    with pytest.raises(ValidationError):
        world.services.performance_service.create(world.actor(world.manager), _review(world.alice.employee_id, rating))


def test_employee_cannot_create_review(world):
    with pytest.raises(AuthorizationError):
        world.services.performance_service.create(world.actor(world.bob), _review(world.alice.employee_id))


def test_review_for_unknown_employee(world):
    with pytest.raises(NotFoundError):
        world.services.performance_service.create(world.actor(world.manager), _review(999))


def test_duplicate_period_conflicts(world):
    svc = world.services.performance_service
    svc.create(world.actor(world.manager), _review(world.alice.employee_id))
    with pytest.raises(ConflictError, match="already exists"):
        svc.create(world.actor(world.hr), _review(world.alice.employee_id, rating=3))


def test_full_workflow(world):
    svc = world.services.performance_service
    review = svc.create(world.actor(world.manager), _review(world.alice.employee_id))

    with pytest.raises(ConflictError):
        svc.complete(world.actor(world.manager), review.review_id)

    submitted = svc.submit(world.actor(world.manager), review.review_id, now=datetime(2025, 4, 2, 10, 0))
    assert submitted.status == ReviewStatus.IN_REVIEW
    assert submitted.submitted_date == datetime(2025, 4, 2, 10, 0)
    with pytest.raises(ConflictError):
        svc.submit(world.actor(world.manager), review.review_id)

    with pytest.raises(ConflictError, match="completed before acknowledgment"):
        svc.acknowledge(world.actor(world.alice), review.review_id)

    svc.complete(world.actor(world.manager), review.review_id)

    with pytest.raises(AuthorizationError):
        svc.acknowledge(world.actor(world.manager), review.review_id)

    done = svc.acknowledge(world.actor(world.alice), review.review_id, "  Thanks, agreed  ")
    assert done.status == ReviewStatus.ACKNOWLEDGED
    assert done.feedback.employee_comments == "Thanks, agreed"
    stored = world.reviews.get(review.review_id)
    assert stored.status == ReviewStatus.ACKNOWLEDGED
    assert stored.feedback.employee_comments == "Thanks, agreed"
    assert stored.feedback.manager_comments == "Solid quarter"


def test_update_recomputes_and_stops_after_acknowledgement(world):
    svc = world.services.performance_service
    review = svc.create(world.actor(world.manager), _review(world.alice.employee_id))

    updated = svc.update(
        world.actor(world.alice),
        review.review_id,
        {"goals": [{"title": "Ship billing", "weight": 10, "achievement": 70}], "feedback": {"self_assessment": "Good"}},
    )
    assert updated.goal_achievement == 70.0
    assert updated.feedback.self_assessment == "Good"
    assert updated.feedback.manager_comments == "Solid quarter"

    with pytest.raises(AuthorizationError):
        svc.update(world.actor(world.bob), review.review_id, {"overall_rating": 5})

    svc.submit(world.actor(world.manager), review.review_id)
    svc.complete(world.actor(world.manager), review.review_id)
    svc.acknowledge(world.actor(world.alice), review.review_id)
    with pytest.raises(ConflictError):
        svc.update(world.actor(world.hr), review.review_id, {"overall_rating": 5})


def test_visibility(world):
    svc = world.services.performance_service
    review = svc.create(world.actor(world.manager), _review(world.alice.employee_id))

    assert svc.get(world.actor(world.alice), review.review_id) == review
    with pytest.raises(AuthorizationError):
        svc.get(world.actor(world.bob), review.review_id)
    assert svc.list_mine(world.actor(world.alice), PageRequest()).total == 1
    assert svc.list_mine(world.actor(world.bob), PageRequest()).total == 0


def test_only_hr_and_admin_delete(world):
    svc = world.services.performance_service
    review = svc.create(world.actor(world.manager), _review(world.alice.employee_id))
    with pytest.raises(AuthorizationError):
        svc.delete(world.actor(world.manager), review.review_id)
    svc.delete(world.actor(world.hr), review.review_id)
    with pytest.raises(NotFoundError):
        svc.delete(world.actor(world.hr), review.review_id)


def test_stats_overview(world):
    svc = world.services.performance_service
    manager = world.actor(world.manager)
    for employee, rating in ((world.alice, 4.8), (world.bob, 2.5)):
        review = svc.create(manager, _review(employee.employee_id, rating))
        svc.submit(manager, review.review_id)
        svc.complete(manager, review.review_id)
    svc.create(manager, _review(world.hr.employee_id, 3.5))
    svc.create(manager, _review(world.alice.employee_id, 5, start="2024-10-01", end="2024-12-31"))

    stats = svc.stats_overview(world.actor(world.hr), 2025)
    assert stats.by_status == {"completed": 2, "draft": 1}
    assert stats.by_type == {"quarterly": 3}
    assert stats.rated_reviews == 2
    assert stats.average_rating == 3.65
    assert stats.high_performers == 1
    assert stats.low_performers == 1

    with pytest.raises(AuthorizationError):
        svc.stats_overview(manager, 2025)
