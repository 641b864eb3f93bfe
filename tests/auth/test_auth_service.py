from dataclasses import replace

import pytest

from src.hr_system.hr_system.core.enums import Role
from src.hr_system.hr_system.core.exceptions import AuthenticationError, ValidationError


def test_login_with_valid_credentials(world):
    s_user = world.services.auth_service.authenticate("Alice@Example.com ", "secret1")
    assert s_user.user_id == world.alice.user_id
    assert s_user.role == Role.EMPLOYEE


@pytest.mark.parametrize("email, password", [("alice@example.com", "wrong"), ("nobody@example.com", "secret1")])
def test_bad_credentials_are_rejected(world, email, password):
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        world.services.auth_service.authenticate(email, password)


def test_placeholder_hash_never_matches(world):
    user = world.users.get_by_id(world.bob.user_id)
    world.users.by_id[user.user_id] = replace(user, password_hash="CHANGE_ME")
    with pytest.raises(AuthenticationError):
        world.services.auth_service.authenticate("bob@example.com", "CHANGE_ME")


def test_deactivated_account_cannot_log_in(world):
    world.services.employee_service.terminate(world.actor(world.hr), world.bob.employee_id)
    with pytest.raises(AuthenticationError):
        world.services.auth_service.authenticate("bob@example.com", "secret1")
    with pytest.raises(AuthenticationError):
        world.services.auth_service.session_user(world.bob.user_id)


def test_change_password(world):
    auth = world.services.auth_service
    auth.change_password(world.alice.user_id, "secret1", "n3w-secret")

    assert auth.authenticate("alice@example.com", "n3w-secret").user_id == world.alice.user_id
    with pytest.raises(AuthenticationError):
        auth.authenticate("alice@example.com", "secret1")


@pytest.mark.parametrize(
    "current, new, message",
    [
        ("wrong", "n3w-secret", "Current password is incorrect"),
        ("secret1", "123", "at least 6 characters"),
        ("secret1", "secret1", "must differ"),
    ],
)
def test_change_password_rejections(world, current, new, message):
    with pytest.raises(ValidationError, match=message):
        world.services.auth_service.change_password(world.alice.user_id, current, new)
    assert world.services.auth_service.authenticate("alice@example.com", "secret1")


def test_deactivated_account_cannot_change_password(world):
    world.services.employee_service.terminate(world.actor(world.hr), world.bob.employee_id)
    with pytest.raises(AuthenticationError):
        world.services.auth_service.change_password(world.bob.user_id, "secret1", "n3w-secret")
