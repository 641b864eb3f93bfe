from __future__ import annotations

from flask import Flask, request

from ..common.http import created, current_actor, json_body, login_required, ok, paginated, roles_required
from ..common.pagination import PageRequest
from ..common.validators import parse_enum, parse_int
from ..container import Container
from ..core.enums import ReviewStatus, ReviewType, Role
from .model import ReviewFilter


def register(app: Flask, container: Container) -> None:
    service = container.performance_service

    @app.get("/api/performance", endpoint="performance_list")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def performance_list():
        args = request.args
        filters = ReviewFilter(
            employee_id=parse_int(args["employee"], "employee") if args.get("employee") else None,
            reviewer_id=parse_int(args["reviewer"], "reviewer") if args.get("reviewer") else None,
            status=parse_enum(ReviewStatus, args["status"], "status") if args.get("status") else None,
            review_type=parse_enum(ReviewType, args["type"], "type") if args.get("type") else None,
        )
        return paginated(service.list(current_actor(), filters, PageRequest.from_args(args)))

    @app.post("/api/performance", endpoint="performance_create")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def performance_create():
        review = service.create(current_actor(), json_body())
        return created(review, message="Performance review created successfully")

    @app.get("/api/performance/<int:review_id>", endpoint="performance_get")
    @login_required
    def performance_get(review_id: int):
        return ok(service.get(current_actor(), review_id))

    @app.put("/api/performance/<int:review_id>", endpoint="performance_update")
    @login_required
    def performance_update(review_id: int):
        review = service.update(current_actor(), review_id, json_body())
        return ok(review, message="Performance review updated successfully")

    @app.delete("/api/performance/<int:review_id>", endpoint="performance_delete")
    @roles_required(Role.ADMIN, Role.HR)
    def performance_delete(review_id: int):
        service.delete(current_actor(), review_id)
        return ok(message="Performance review deleted successfully")

    @app.put("/api/performance/<int:review_id>/submit", endpoint="performance_submit")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def performance_submit(review_id: int):
        review = service.submit(current_actor(), review_id)
        return ok(review, message="Performance review submitted successfully")

    @app.put("/api/performance/<int:review_id>/complete", endpoint="performance_complete")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def performance_complete(review_id: int):
        review = service.complete(current_actor(), review_id)
        return ok(review, message="Performance review completed successfully")

    @app.put("/api/performance/<int:review_id>/acknowledge", endpoint="performance_acknowledge")
    @login_required
    def performance_acknowledge(review_id: int):
        review = service.acknowledge(current_actor(), review_id, json_body().get("employee_comments"))
        return ok(review, message="Performance review acknowledged successfully")

    @app.get("/api/performance/my-reviews", endpoint="performance_mine")
    @login_required
    def performance_mine():
        return paginated(service.list_mine(current_actor(), PageRequest.from_args(request.args)))

    @app.get("/api/performance/stats/overview", endpoint="performance_stats")
    @roles_required(Role.ADMIN, Role.HR)
    def performance_stats():
        year = parse_int(request.args["year"], "year") if request.args.get("year") else None
        return ok(service.stats_overview(current_actor(), year))
