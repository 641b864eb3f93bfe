from __future__ import annotations

from flask import Flask, request

from ..common.http import created, current_actor, json_body, login_required, ok, paginated, roles_required
from ..common.pagination import PageRequest
from ..common.validators import parse_enum, parse_int
from ..container import Container
from ..core.enums import LeaveStatus, LeaveType, Role
from .model import LeaveFilter


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.get("/api/leaves", endpoint="leaves_list")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def leaves_list():
        args = request.args
        filters = LeaveFilter(
            employee_id=parse_int(args["employee"], "employee") if args.get("employee") else None,
            status=parse_enum(LeaveStatus, args["status"], "status") if args.get("status") else None,
            leave_type=parse_enum(LeaveType, args["leave_type"], "leave_type") if args.get("leave_type") else None,
        )
        return paginated(service.list(current_actor(), filters, PageRequest.from_args(args)))

    @app.post("/api/leaves", endpoint="leaves_create")
    @login_required
    def leaves_create():
        leave = service.apply(current_actor(), json_body())
        return created(leave, message="Leave request submitted successfully")

    @app.get("/api/leaves/<int:leave_id>", endpoint="leaves_get")
    @login_required
    def leaves_get(leave_id: int):
        return ok(service.get(current_actor(), leave_id))

    @app.put("/api/leaves/<int:leave_id>", endpoint="leaves_update")
    @login_required
    def leaves_update(leave_id: int):
        leave = service.update(current_actor(), leave_id, json_body())
        return ok(leave, message="Leave request updated successfully")

    @app.delete("/api/leaves/<int:leave_id>", endpoint="leaves_delete")
    @login_required
    def leaves_delete(leave_id: int):
        service.delete(current_actor(), leave_id)
        return ok(message="Leave request deleted successfully")

    @app.put("/api/leaves/<int:leave_id>/cancel", endpoint="leaves_cancel")
    @login_required
    def leaves_cancel(leave_id: int):
        leave = service.cancel(current_actor(), leave_id)
        return ok(leave, message="Leave request cancelled successfully")

    @app.put("/api/leaves/<int:leave_id>/approve", endpoint="leaves_approve")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def leaves_approve(leave_id: int):
        leave = service.approve(current_actor(), leave_id)
        return ok(leave, message="Leave request approved successfully")

    @app.put("/api/leaves/<int:leave_id>/reject", endpoint="leaves_reject")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def leaves_reject(leave_id: int):
        leave = service.reject(current_actor(), leave_id, json_body().get("rejection_reason"))
        return ok(leave, message="Leave request rejected successfully")

    @app.get("/api/leaves/my-leaves", endpoint="leaves_mine")
    @login_required
    def leaves_mine():
        return paginated(service.list_mine(current_actor(), PageRequest.from_args(request.args)))

    @app.get("/api/leaves/my-balance", endpoint="leaves_balance")
    @login_required
    def leaves_balance():
        year = parse_int(request.args["year"], "year") if request.args.get("year") else None
        return ok(service.my_balance(current_actor(), year))

    @app.get("/api/leaves/stats/overview", endpoint="leaves_stats")
    @roles_required(Role.ADMIN, Role.HR)
    def leaves_stats():
        year = parse_int(request.args["year"], "year") if request.args.get("year") else None
        return ok(service.stats_overview(current_actor(), year))
