import pytest

from src.hr_system.hr_system.main import create_app


@pytest.fixture
def client(world):
    app = create_app(settings_module="config.testing", container=world.services)
    return app.test_client()


def _login(client, email, password="secret1"):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"


def test_routes_require_a_session(client):
    resp = client.get("/api/employees")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Not authorized, please log in"}


def test_login_and_me(client, world):
    body = _login(client, "alice@example.com")
    assert body["success"] is True
    assert body["data"]["user"]["role"] == "employee"
    assert body["data"]["employee"]["employee_code"] == world.alice.employee_code

    me = client.get("/api/auth/me").get_json()
    assert me["data"]["user"]["email"] == "alice@example.com"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_wrong_password_is_401(client):
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_role_guard_is_403(client):
    _login(client, "alice@example.com")
    resp = client.get("/api/payroll")
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_paginated_envelope(client):
    _login(client, "hana@example.com")
    body = client.get("/api/employees?page=2&limit=2").get_json()
    assert body["success"] is True
    assert body["total"] == 5
    assert body["count"] == 2
    assert body["pagination"] == {"page": 2, "limit": 2, "pages": 3}
    assert isinstance(body["data"][0]["salary"]["base_salary"], float)


def test_validation_error_is_400(client):
    _login(client, "hana@example.com")
    resp = client.post("/api/departments", json={"name": "Finance", "code": "?"})
    assert resp.status_code == 400


def test_double_check_in_is_409(client):
    _login(client, "bob@example.com")
    first = client.post("/api/attendance/check-in", json={"location": "remote"})
    assert first.status_code == 200
    assert first.get_json()["data"]["check_in"]["location"] == "remote"

    second = client.post("/api/attendance/check-in", json={})
    assert second.status_code == 409
    assert second.get_json()["message"] == "Already checked in today"


def test_manager_hire_outside_department_is_403(client, world):
    _login(client, "mike@example.com")
    resp = client.post(
        "/api/employees",
        json={
            "personal_info": {"first_name": "Carol", "last_name": "Jones"},
            "job_info": {"department_id": world.sales.department_id, "position": "Rep", "join_date": "2025-01-06"},
            "salary": {"base_salary": 3000},
            "user_info": {"email": "carol@example.com", "password": "secret1"},
        },
    )
    assert resp.status_code == 403
    assert world.users.get_by_email("carol@example.com") is None


def test_profile_and_password_routes(client, world):
    _login(client, "bob@example.com")

    resp = client.put("/api/auth/profile", json={"personal_info": {"address": "1 Main St"}})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["personal"]["address"] == "1 Main St"

    resp = client.put("/api/auth/change-password", json={"current_password": "nope", "new_password": "abcdef"})
    assert resp.status_code == 400

    resp = client.put("/api/auth/change-password", json={"current_password": "secret1", "new_password": "abcdef"})
    assert resp.status_code == 200
    client.post("/api/auth/logout")
    _login(client, "bob@example.com", "abcdef")


def test_status_update_cannot_terminate_over_http(client, world):
    _login(client, "mike@example.com")
    resp = client.put(f"/api/employees/{world.alice.employee_id}", json={"status": "terminated"})
    assert resp.status_code == 400
    assert world.users.get_by_id(world.alice.user_id).is_active
