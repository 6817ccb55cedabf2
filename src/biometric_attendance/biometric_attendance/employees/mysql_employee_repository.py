from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_employee_number(self, employee_number: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT e.employee_id, e.employee_number, e.user_id, e.organization_id, e.is_active, u.email
                FROM employees e
                LEFT JOIN users u ON u.user_id = e.user_id
                WHERE e.employee_number=%s
                """,
                (int(employee_number),),
            )
            r = cur.fetchone()
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                employee_number=int(r["employee_number"]),
                user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
                organization_id=int(r["organization_id"]) if r.get("organization_id") is not None else None,
                email=r.get("email"),
                is_active=bool(r.get("is_active", 1)),
            )
