from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.http import current_actor, json_body, login_required, ok
from ..common.validators import parse_bool
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.post("/api/auth/login", endpoint="auth_login")
    def auth_login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = parse_bool(data.get("remember_me", False))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["role"] = s_user.role.value

        return ok(
            {"user": s_user, "employee": container.employee_service.find_by_user(s_user.user_id)},
            message="Login successful",
        )

    @app.post("/api/auth/logout", endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return ok(message="Logged out successfully")

    @app.get("/api/auth/me", endpoint="auth_me")
    @login_required
    def auth_me():
        actor = current_actor()
        s_user = container.auth_service.session_user(actor.user_id)
        return ok({"user": s_user, "employee": container.employee_service.find_by_user(actor.user_id)})

    @app.put("/api/auth/profile", endpoint="auth_profile")
    @login_required
    def auth_profile():
        employee = container.employee_service.update_own_profile(current_actor(), json_body())
        return ok(employee, message="Profile updated successfully")

    @app.put("/api/auth/change-password", endpoint="auth_change_password")
    @login_required
    def auth_change_password():
        data = json_body()
        container.auth_service.change_password(
            current_actor().user_id,
            data.get("current_password") or "",
            data.get("new_password") or "",
        )
        return ok(message="Password changed successfully")
