from __future__ import annotations

from typing import List, Optional, Protocol

from .model import Department


class DepartmentRepository(Protocol):
    def get(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError

    def list_active(self) -> List[Department]:
        raise NotImplementedError

    def list_children(self, department_id: int) -> List[Department]:
        raise NotImplementedError

    def create(self, department: Department) -> Department:
        """Insert; ``department_id`` of the argument is ignored."""
        raise NotImplementedError

    def update(self, department: Department) -> Department:
        raise NotImplementedError

    def deactivate(self, department_id: int) -> bool:
        raise NotImplementedError
