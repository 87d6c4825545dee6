from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from zoneinfo import ZoneInfo

from .attendance.ledger import AttendanceLedger
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.report import AttendanceReportService
from .attendance.repository import AttendanceRepository
from .common.clock import Clock, SystemClock
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .delivery.mysql_delivery_repository import MySQLDeliveryRepository
from .delivery.repository import DeliveryRepository
from .delivery.service import DeliveryService
from .delivery.sinks import DeliverySink, HttpDeliverySink, LoggingDeliverySink, SmtpDeliverySink
from .incidents.mysql_incident_repository import MySQLIncidentRepository
from .incidents.recorder import IncidentRecorder
from .incidents.repository import IncidentRepository
from .permissions.mysql_permission_repository import MySQLPermissionRepository
from .permissions.repository import PermissionRepository
from .permissions.service import PermissionService
from .scanners.mysql_scanner_repository import MySQLScannerRepository
from .scanners.repository import ScannerRepository
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.resolver import ScheduleResolver
from .tokens.issuer import TokenIssuer
from .tokens.mysql_token_repository import MySQLTokenRepository
from .tokens.redeemer import TokenRedeemer
from .tokens.repository import TokenRepository
from .tokens.scheduler import ScheduledIssuer
from .tokens.window import WindowPolicy
from .workers.mysql_worker_repository import MySQLWorkerRepository
from .workers.repository import WorkerRepository


@dataclass(frozen=True)
class Container:
    clock: Clock

    workers_repo: WorkerRepository
    scanners_repo: ScannerRepository
    tokens_repo: TokenRepository
    attendance_repo: AttendanceRepository
    incidents_repo: IncidentRepository
    deliveries_repo: DeliveryRepository
    permissions_repo: PermissionRepository

    schedule_resolver: ScheduleResolver
    delivery_service: DeliveryService
    token_issuer: TokenIssuer
    token_redeemer: TokenRedeemer
    scheduled_issuer: ScheduledIssuer
    report_service: AttendanceReportService
    permission_service: PermissionService

    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    workers: WorkerRepository,
    scanners: ScannerRepository,
    schedules: ScheduleRepository,
    tokens: TokenRepository,
    attendance: AttendanceRepository,
    incidents: IncidentRepository,
    deliveries: DeliveryRepository,
    permissions: PermissionRepository,
    clock: Clock,
    sink: DeliverySink,
    app_url: str,
    policy: Optional[WindowPolicy] = None,
    very_late_minutes: int = constants.DEFAULT_VERY_LATE_DEPARTURE_MINUTES,
    max_retries: int = constants.DEFAULT_DELIVERY_MAX_RETRIES,
    tolerance_minutes: int = constants.DEFAULT_SCHEDULE_TOLERANCE_MINUTES,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Assemble services over any set of repositories (MySQL in the app, fakes in tests)."""

    resolver = ScheduleResolver(schedules)
    recorder = IncidentRecorder(incidents, clock)
    ledger = AttendanceLedger(attendance)

    delivery_service = DeliveryService(
        deliveries,
        sink,
        clock,
        tokens,
        workers,
        app_url=app_url,
        max_retries=max_retries,
    )
    token_issuer = TokenIssuer(tokens, resolver, clock, policy=policy, delivery=delivery_service)
    token_redeemer = TokenRedeemer(
        tokens,
        workers,
        scanners,
        attendance,
        ledger,
        recorder,
        resolver,
        clock,
        very_late_minutes=very_late_minutes,
    )
    scheduled_issuer = ScheduledIssuer(workers, resolver, token_issuer, clock, tolerance_minutes=tolerance_minutes)

    return Container(
        clock=clock,
        workers_repo=workers,
        scanners_repo=scanners,
        tokens_repo=tokens,
        attendance_repo=attendance,
        incidents_repo=incidents,
        deliveries_repo=deliveries,
        permissions_repo=permissions,
        schedule_resolver=resolver,
        delivery_service=delivery_service,
        token_issuer=token_issuer,
        token_redeemer=token_redeemer,
        scheduled_issuer=scheduled_issuer,
        report_service=AttendanceReportService(attendance, workers, permissions),
        permission_service=PermissionService(permissions, clock),
        conn=conn,
    )


def build_sink(settings: Any, tz: ZoneInfo) -> DeliverySink:
    backend = str(getattr(settings, "DELIVERY_BACKEND", "log")).lower()
    sender = str(getattr(settings, "EMAIL_SENDER", ""))

    if backend == "smtp":
        return SmtpDeliverySink(
            host=str(getattr(settings, "SMTP_HOST")),
            port=int(getattr(settings, "SMTP_PORT", 587)),
            username=str(getattr(settings, "SMTP_USERNAME", "")),
            password=str(getattr(settings, "SMTP_PASSWORD", "")),
            sender=sender,
            tz=tz,
        )
    if backend == "http":
        return HttpDeliverySink(
            api_url=str(getattr(settings, "EMAIL_API_URL")),
            api_key=str(getattr(settings, "EMAIL_API_KEY")),
            sender=sender,
            tz=tz,
        )
    if backend == "log":
        return LoggingDeliverySink()
    raise ValueError(f"Unknown DELIVERY_BACKEND: {backend!r}")


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)
    clock = SystemClock(str(getattr(settings, "ORG_TIMEZONE", constants.DEFAULT_TIMEZONE)))

    return wire_container(
        workers=MySQLWorkerRepository(conn),
        scanners=MySQLScannerRepository(conn),
        schedules=MySQLScheduleRepository(conn),
        tokens=MySQLTokenRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        incidents=MySQLIncidentRepository(conn),
        deliveries=MySQLDeliveryRepository(conn),
        permissions=MySQLPermissionRepository(conn),
        clock=clock,
        sink=build_sink(settings, clock.tz),
        app_url=str(getattr(settings, "APP_URL", "http://localhost:5000")),
        policy=WindowPolicy.from_mapping(getattr(settings, "WINDOW_POLICY", None)),
        very_late_minutes=int(getattr(settings, "VERY_LATE_DEPARTURE_MINUTES", constants.DEFAULT_VERY_LATE_DEPARTURE_MINUTES)),
        max_retries=int(getattr(settings, "DELIVERY_MAX_RETRIES", constants.DEFAULT_DELIVERY_MAX_RETRIES)),
        tolerance_minutes=int(getattr(settings, "SCHEDULE_TOLERANCE_MINUTES", constants.DEFAULT_SCHEDULE_TOLERANCE_MINUTES)),
        conn=conn,
    )
