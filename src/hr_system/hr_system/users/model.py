from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Account identity linked to at most one employee profile.

    Note: plain data object (no DB access code).
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class NewAccount:
    """Account details supplied when hiring an employee."""

    email: str
    password: str
    role: Role = Role.EMPLOYEE
