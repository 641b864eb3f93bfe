from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    code: str
    description: Optional[str] = None
    manager_id: Optional[int] = None
    budget: Decimal = Decimal("0")
    location: Optional[str] = None
    parent_department_id: Optional[int] = None
    is_active: bool = True
    established_date: Optional[date] = None
    employee_count: int = 0
