from __future__ import annotations

from flask import Flask, request

from ..common.http import created, current_actor, json_body, listed, login_required, ok, paginated, roles_required
from ..common.pagination import PageRequest
from ..common.validators import parse_enum, parse_int
from ..container import Container
from ..core.enums import EmployeeStatus, Role
from .model import EmployeeFilter
from .payload import parse_new_employee


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.get("/api/employees", endpoint="employees_list")
    @login_required
    def employees_list():
        args = request.args
        filters = EmployeeFilter(
            department_id=parse_int(args["department"], "department") if args.get("department") else None,
            status=parse_enum(EmployeeStatus, args["status"], "status") if args.get("status") else None,
            search=(args.get("search") or "").strip() or None,
        )
        return paginated(service.list(filters, PageRequest.from_args(args)))

    @app.post("/api/employees", endpoint="employees_create")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def employees_create():
        new, account = parse_new_employee(json_body())
        employee = service.hire(current_actor(), new, account)
        return created(employee, message="Employee created successfully")

    @app.get("/api/employees/<int:employee_id>", endpoint="employees_get")
    @login_required
    def employees_get(employee_id: int):
        return ok(service.get(employee_id))

    @app.put("/api/employees/<int:employee_id>", endpoint="employees_update")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def employees_update(employee_id: int):
        employee = service.update(current_actor(), employee_id, json_body())
        return ok(employee, message="Employee updated successfully")

    @app.delete("/api/employees/<int:employee_id>", endpoint="employees_delete")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def employees_delete(employee_id: int):
        service.terminate(current_actor(), employee_id)
        return ok(message="Employee terminated successfully")

    @app.get("/api/employees/department/<int:department_id>", endpoint="employees_by_department")
    @login_required
    def employees_by_department(department_id: int):
        return listed(service.list_by_department(department_id))
