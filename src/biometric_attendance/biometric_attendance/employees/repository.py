from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_employee_number(self, employee_number: int) -> Optional[Employee]:
        raise NotImplementedError
