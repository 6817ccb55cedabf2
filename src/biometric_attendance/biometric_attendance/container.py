from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_punch_repository import MySQLAttendancePunchRepository
from .attendance.service import AttendanceReconciliationService
from .core.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_DEVICE_PORT,
    DEFAULT_OVERTIME_CHECKOUT_MINUTES,
    DEFAULT_RECORD_MAX_ATTEMPTS,
    DEFAULT_RECORD_MAX_YEAR_DRIFT,
    MAX_DOWNLOAD_COUNT,
)
from .database.connection import DBConfig, DatabaseConnection
from .devices.acknowledgement import DeviceRecordAcknowledger
from .devices.mysql_device_repository import MySQLDeviceRepository
from .devices.polling import DevicePollingService
from .devices.registry import DeviceClientRegistry
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .policy.mysql_configuration_repository import MySQLAttendanceConfigurationRepository
from .policy.service import AttendanceConfigurationService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    devices_repo: MySQLDeviceRepository
    employees_repo: MySQLEmployeeRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository
    punches_repo: MySQLAttendancePunchRepository
    configurations_repo: MySQLAttendanceConfigurationRepository

    device_registry: DeviceClientRegistry
    configuration_service: AttendanceConfigurationService
    acknowledger: DeviceRecordAcknowledger
    reconciliation_service: AttendanceReconciliationService
    polling_service: DevicePollingService


def build_container(settings: ModuleType) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))

    devices_repo = MySQLDeviceRepository(conn, default_port=int(getattr(settings, "DEVICE_PORT", DEFAULT_DEVICE_PORT)))
    employees_repo = MySQLEmployeeRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    punches_repo = MySQLAttendancePunchRepository(conn)
    configurations_repo = MySQLAttendanceConfigurationRepository(conn)

    device_registry = DeviceClientRegistry(
        connect_timeout=float(getattr(settings, "DEVICE_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT)),
        command_timeout=float(getattr(settings, "DEVICE_COMMAND_TIMEOUT", DEFAULT_COMMAND_TIMEOUT)),
    )
    configuration_service = AttendanceConfigurationService(configurations_repo)
    acknowledger = DeviceRecordAcknowledger(device_registry)
    reconciliation_service = AttendanceReconciliationService(
        attendance_repo,
        punches_repo,
        employees_repo,
        schedules_repo,
        devices_repo,
        configuration_service,
        acknowledger,
        strategy_factory=AttendanceStrategyFactory(),
        overtime_checkout_minutes=int(
            getattr(settings, "OVERTIME_CHECKOUT_MINUTES", DEFAULT_OVERTIME_CHECKOUT_MINUTES)
        ),
    )
    polling_service = DevicePollingService(
        devices_repo,
        device_registry,
        reconciliation_service.process_batch,
        page_size=int(getattr(settings, "DEVICE_DOWNLOAD_BATCH", MAX_DOWNLOAD_COUNT)),
        max_year_drift=int(getattr(settings, "RECORD_MAX_YEAR_DRIFT", DEFAULT_RECORD_MAX_YEAR_DRIFT)),
        max_attempts=int(getattr(settings, "RECORD_MAX_ATTEMPTS", DEFAULT_RECORD_MAX_ATTEMPTS)),
    )

    return Container(
        conn=conn,
        devices_repo=devices_repo,
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        punches_repo=punches_repo,
        configurations_repo=configurations_repo,
        device_registry=device_registry,
        configuration_service=configuration_service,
        acknowledger=acknowledger,
        reconciliation_service=reconciliation_service,
        polling_service=polling_service,
    )
