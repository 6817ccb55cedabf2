from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import AttendanceConfiguration
from .repository import AttendanceConfigurationRepository

_POLICY_COLUMNS = [f.name for f in fields(AttendanceConfiguration) if f.name not in ("config_id", "organization_id")]
_SELECT = "SELECT config_id, organization_id, " + ", ".join(_POLICY_COLUMNS) + " FROM attendance_configurations"


def _to_config(r: Dict[str, Any]) -> AttendanceConfiguration:
    values = {}
    for f in fields(AttendanceConfiguration):
        value = r.get(f.name)
        if f.name == "organization_id":
            values[f.name] = int(value) if value is not None else None
        elif f.name == "config_id" or f.type == "int":
            values[f.name] = int(value)
        else:
            values[f.name] = bool(value)
    return AttendanceConfiguration(**values)


class MySQLAttendanceConfigurationRepository(AttendanceConfigurationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_global(self) -> Optional[AttendanceConfiguration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE organization_id IS NULL ORDER BY config_id LIMIT 1")
            r = cur.fetchone()
            return _to_config(r) if r else None

    def get_for_organization(self, organization_id: int) -> Optional[AttendanceConfiguration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE organization_id=%s", (int(organization_id),))
            r = cur.fetchone()
            return _to_config(r) if r else None

    def create(self, config: AttendanceConfiguration) -> int:
        values = asdict(config)
        columns = ["organization_id"] + _POLICY_COLUMNS
        placeholders = ",".join(["%s"] * len(columns))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO attendance_configurations({', '.join(columns)}) VALUES({placeholders})",
                tuple(values[c] for c in columns),
            )
            return int(cur.lastrowid)

    def update(self, config: AttendanceConfiguration) -> bool:
        values = asdict(config)
        assignments = ", ".join(f"{c}=%s" for c in _POLICY_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_configurations SET {assignments} WHERE config_id=%s",
                tuple(values[c] for c in _POLICY_COLUMNS) + (int(config.config_id),),
            )
            return cur.rowcount > 0
