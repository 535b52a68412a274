from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceReconciliationService
from .common.cache import TtlCache
from .core.constants import (
    DEFAULT_BALANCE_CACHE_TTL_SECONDS,
    DEFAULT_SCHOOL_NAME,
    DEFAULT_SMS_HTTP_TIMEOUT,
    DEFAULT_SMS_MAX_CONCURRENCY,
)
from .database.connection import DBConfig, DatabaseConnection
from .fees.balance_service import BalanceService
from .fees.collection_service import FeeCollectionService
from .fees.custom_fee_service import CustomFeeService
from .fees.generation_service import FeeGenerationService
from .fees.mysql_custom_fee_repository import MySQLClassFeeRepository, MySQLCustomFeeRepository, MySQLExamRepository
from .fees.mysql_fee_repository import MySQLFeeRecordRepository
from .reports.service import FeeReportService
from .sms.gateways.factory import SmsGatewayFactory
from .sms.mysql_sms_repository import MySQLSmsLogRepository, MySQLSmsSettingsRepository
from .sms.service import SmsDispatcher
from .students.mysql_student_repository import MySQLStudentRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    students_repo: MySQLStudentRepository
    fee_records_repo: MySQLFeeRecordRepository
    custom_fees_repo: MySQLCustomFeeRepository
    class_fees_repo: MySQLClassFeeRepository
    exams_repo: MySQLExamRepository
    attendance_repo: MySQLAttendanceRepository
    sms_settings_repo: MySQLSmsSettingsRepository
    sms_logs_repo: MySQLSmsLogRepository

    balance_service: BalanceService
    custom_fee_service: CustomFeeService
    collection_service: FeeCollectionService
    generation_service: FeeGenerationService
    report_service: FeeReportService
    attendance_service: AttendanceReconciliationService
    sms_dispatcher: SmsDispatcher


def build_container(
    *,
    db_config: dict,
    balance_cache_ttl: float = DEFAULT_BALANCE_CACHE_TTL_SECONDS,
    sms_max_concurrency: int = DEFAULT_SMS_MAX_CONCURRENCY,
    sms_http_timeout: float = DEFAULT_SMS_HTTP_TIMEOUT,
    school_name: str = DEFAULT_SCHOOL_NAME,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    fee_records_repo = MySQLFeeRecordRepository(conn)
    custom_fees_repo = MySQLCustomFeeRepository(conn)
    class_fees_repo = MySQLClassFeeRepository(conn)
    exams_repo = MySQLExamRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    sms_settings_repo = MySQLSmsSettingsRepository(conn)
    sms_logs_repo = MySQLSmsLogRepository(conn)

    balance_service = BalanceService(fee_records_repo, cache=TtlCache(balance_cache_ttl))
    custom_fee_service = CustomFeeService(custom_fees_repo, class_fees_repo)
    collection_service = FeeCollectionService(
        fee_records_repo,
        on_paid=lambda record: balance_service.invalidate_student(record.student_id),
    )
    generation_service = FeeGenerationService(
        fee_records_repo,
        students_repo,
        class_fees_repo,
        custom_fee_service,
        exams=exams_repo,
        on_created=balance_service.invalidate_year,
    )
    report_service = FeeReportService(fee_records_repo, students_repo)
    attendance_service = AttendanceReconciliationService(attendance_repo, students_repo)
    sms_dispatcher = SmsDispatcher(
        sms_settings_repo,
        sms_logs_repo,
        gateways=SmsGatewayFactory(timeout=sms_http_timeout),
        students=students_repo,
        attendance=attendance_service,
        max_concurrency=sms_max_concurrency,
        default_school_name=school_name,
    )

    return Container(
        conn=conn,
        students_repo=students_repo,
        fee_records_repo=fee_records_repo,
        custom_fees_repo=custom_fees_repo,
        class_fees_repo=class_fees_repo,
        exams_repo=exams_repo,
        attendance_repo=attendance_repo,
        sms_settings_repo=sms_settings_repo,
        sms_logs_repo=sms_logs_repo,
        balance_service=balance_service,
        custom_fee_service=custom_fee_service,
        collection_service=collection_service,
        generation_service=generation_service,
        report_service=report_service,
        attendance_service=attendance_service,
        sms_dispatcher=sms_dispatcher,
    )
