from __future__ import annotations

from dataclasses import asdict

from flask import Flask

from ..common.http import created, current_actor, json_body, listed, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.department_service

    @app.get("/api/departments", endpoint="departments_list")
    @login_required
    def departments_list():
        return listed(service.list())

    @app.post("/api/departments", endpoint="departments_create")
    @roles_required(Role.ADMIN, Role.HR)
    def departments_create():
        department = service.create(current_actor(), json_body())
        return created(department, message="Department created successfully")

    @app.get("/api/departments/<int:department_id>", endpoint="departments_get")
    @login_required
    def departments_get(department_id: int):
        department = service.get(department_id)
        return ok({**asdict(department), "subdepartments": service.subdepartments(department_id)})

    @app.put("/api/departments/<int:department_id>", endpoint="departments_update")
    @roles_required(Role.ADMIN, Role.HR)
    def departments_update(department_id: int):
        department = service.update(current_actor(), department_id, json_body())
        return ok(department, message="Department updated successfully")

    @app.delete("/api/departments/<int:department_id>", endpoint="departments_delete")
    @roles_required(Role.ADMIN)
    def departments_delete(department_id: int):
        service.delete(current_actor(), department_id)
        return ok(message="Department deleted successfully")

    @app.get("/api/departments/<int:department_id>/stats", endpoint="departments_stats")
    @login_required
    def departments_stats(department_id: int):
        return ok(service.stats(department_id))
