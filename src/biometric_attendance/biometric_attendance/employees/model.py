from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    employee_id: int
    employee_number: int
    user_id: Optional[int] = None
    organization_id: Optional[int] = None
    email: Optional[str] = None
    is_active: bool = True
