from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..attendance.service import AttendanceReconciliationService
from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.money import ZERO
from ..common.validators import int_arg, require_non_empty, required_year
from ..core.constants import (
    ABSENT_TEMPLATE,
    DEFAULT_SCHOOL_NAME,
    DEFAULT_SMS_MAX_CONCURRENCY,
    LATE_TEMPLATE,
    PUNCH_TEMPLATE,
)
from ..core.enums import SentBy, SmsProvider, SmsStatus, SmsType
from ..core.exceptions import GatewayError, MissingConfigurationError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .gateways.base import GatewayResponse, SmsGateway
from .gateways.factory import SmsGatewayFactory
from .model import BulkResult, FeeDueItem, SendResult, SmsLog, SmsSettings
from .repository import SmsLogRepository, SmsSettingsRepository
from .templates import format_bn_date, format_bn_time, render_fee_due, render_placeholders

logger = logging.getLogger(__name__)

# A job returns None when the recipient was skipped (no guardian mobile).
SendJob = Callable[[], Optional[SendResult]]


def parse_provider(value) -> SmsProvider:
    try:
        return SmsProvider(value or SmsProvider.MIM_SMS.value)
    except ValueError:
        raise ValidationError(f"অজানা SMS প্রদানকারী: {value}")


class SmsDispatcher:
    """Render and send guardian notifications, one SmsLog row per attempt.

    Single sends report gateway failures as a failed ``SendResult``. Bulk runs
    go through a bounded worker pool; one recipient's failure (or exception)
    is tallied and never aborts the batch.
    """

    def __init__(
        self,
        settings: SmsSettingsRepository,
        logs: SmsLogRepository,
        *,
        gateways: Optional[SmsGatewayFactory] = None,
        students: Optional[StudentRepository] = None,
        attendance: Optional[AttendanceReconciliationService] = None,
        max_concurrency: int = DEFAULT_SMS_MAX_CONCURRENCY,
        default_school_name: str = DEFAULT_SCHOOL_NAME,
        clock: Callable[[], datetime] = now_local,
    ):
        self._settings = settings
        self._logs = logs
        self._gateways = gateways or SmsGatewayFactory()
        self._students = students
        self._attendance = attendance
        self._max_concurrency = max(1, int(max_concurrency))
        self._default_school_name = default_school_name
        self._clock = clock

    # ----- single -----

    def send_single(
        self,
        *,
        mobile_number: str,
        message: str,
        student_id: Optional[int] = None,
        sms_type: SmsType = SmsType.CUSTOM,
        sent_by: SentBy = SentBy.SYSTEM,
    ) -> SendResult:
        settings = self._require_settings()
        return self._send_with(settings, mobile_number, message, student_id, sms_type, sent_by)

    def send_attendance_notice(
        self,
        *,
        student_id: int,
        sms_type: SmsType,
        punch_time: datetime,
        late_minutes: int = 0,
    ) -> SendResult:
        """Tell the guardian that the student punched in (or arrived late)."""

        if sms_type not in (SmsType.PUNCH, SmsType.LATE):
            raise ValidationError(f"অজানা SMS ধরন: {sms_type}")
        if self._students is None:
            raise MissingConfigurationError("Punch SMS needs the student store")

        settings = self._require_settings()
        if not settings.is_enabled:
            return SendResult(success=False, error="SMS system is disabled")
        if sms_type == SmsType.PUNCH and not settings.punch_sms_enabled:
            return SendResult(success=False, error="Punch SMS is disabled")
        if sms_type == SmsType.LATE and not settings.late_sms_enabled:
            return SendResult(success=False, error="Late SMS is disabled")

        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("শিক্ষার্থী পাওয়া যায়নি")
        if not student.guardian_mobile:
            logger.info("No guardian mobile for student %s", student_id)
            return SendResult(success=False, error="No guardian mobile")

        if sms_type == SmsType.PUNCH:
            template = settings.punch_template or PUNCH_TEMPLATE
        else:
            template = settings.late_template or LATE_TEMPLATE
        message = render_placeholders(
            template,
            {
                "StudentName": student.display_name,
                "Class": student.class_label,
                "Date": format_bn_date(punch_time.date()),
                "Time": format_bn_time(punch_time),
                "LateMinutes": str(int(late_minutes or 0)),
                "SchoolName": self._school_name(),
            },
        )
        return self._send_with(settings, student.guardian_mobile, message, student.student_id, sms_type, SentBy.SYSTEM)

    def send_test(self, *, mobile_number: str, message: str, provider: SmsProvider) -> SendResult:
        """Send through ``provider`` even when it is not active or SMS is switched off."""

        settings = self._require_settings()
        gateway = self._gateways.for_provider(settings, provider)
        return self._deliver(gateway, mobile_number, message, None, SmsType.CUSTOM, SentBy.ADMIN)

    def check_balance(self, provider: SmsProvider) -> Decimal:
        """Live BulkSMSBD balance (cached in settings), or the stored MiM SMS balance."""

        settings = self._require_settings()
        if provider != SmsProvider.BULKSMSBD:
            return settings.balance or ZERO

        if not settings.bulksmsbd_api_key:
            raise MissingConfigurationError("BulkSMSBD API key not configured")
        response = self._gateways.for_provider(settings, provider).check_balance()
        if not response.success:
            raise GatewayError(response.error or "Failed to get balance")

        balance = response.balance if response.balance is not None else ZERO
        self._settings.save_bulksmsbd_balance(balance, self._clock())
        logger.info("BulkSMSBD balance: %s", balance)
        return balance

    def _require_settings(self) -> SmsSettings:
        settings = self._settings.get_sms_settings()
        if not settings:
            raise MissingConfigurationError("SMS settings not configured")
        return settings

    def _school_name(self) -> str:
        return self._settings.get_school_name() or self._default_school_name

    def _send_with(
        self,
        settings: SmsSettings,
        mobile_number: str,
        message: str,
        student_id: Optional[int],
        sms_type: SmsType,
        sent_by: SentBy,
    ) -> SendResult:
        if not settings.is_enabled:
            return SendResult(success=False, error="SMS system is disabled")
        gateway = self._gateways.for_settings(settings)
        return self._deliver(gateway, mobile_number, message, student_id, sms_type, sent_by)

    def _deliver(
        self,
        gateway: SmsGateway,
        mobile_number: str,
        message: str,
        student_id: Optional[int],
        sms_type: SmsType,
        sent_by: SentBy,
    ) -> SendResult:
        if not (mobile_number or "").strip():
            response = GatewayResponse(success=False, error="Invalid mobile number")
        else:
            try:
                response = gateway.send(mobile_number.strip(), message)
            except Exception as exc:
                logger.exception("Gateway %s raised while sending to %s", gateway.name, mobile_number)
                response = GatewayResponse(success=False, error=str(exc))

        self._logs.append(
            SmsLog(
                mobile_number=mobile_number or "",
                message=message,
                student_id=student_id,
                sms_type=sms_type,
                status=SmsStatus.SENT if response.success else SmsStatus.FAILED,
                provider_name=gateway.name,
                response_code=response.response_code,
                error_message=None if response.success else response.error,
                sent_at=self._clock() if response.success else None,
                sent_by=sent_by,
            )
        )
        if not response.success:
            logger.warning("SMS to %s failed via %s: %s", mobile_number, gateway.name, response.error)
        return SendResult(success=response.success, error=response.error, response_code=response.response_code)

    # ----- bulk -----

    def send_bulk_fee_due(self, items: Sequence[FeeDueItem], *, sent_by: SentBy = SentBy.ADMIN) -> BulkResult:
        settings = self._require_settings()

        def job_for(item: FeeDueItem) -> SendJob:
            def job() -> SendResult:
                message = render_fee_due(
                    student_name=item.student_name,
                    class_name=item.class_name,
                    due_amount=item.due_amount,
                )
                return self._send_with(settings, item.guardian_mobile, message, item.student_id, SmsType.FEE_DUE, sent_by)

            return job

        result = self._run_bulk([job_for(i) for i in items])
        logger.info("Fee due SMS: %s", result.as_dict())
        return result

    def send_bulk_absent(self, *, attendance_date: date, academic_year_id: int) -> BulkResult:
        if self._students is None or self._attendance is None:
            raise MissingConfigurationError("Absent SMS needs student and attendance stores")

        settings = self._require_settings()
        if not settings.is_enabled or not settings.absent_sms_enabled:
            return BulkResult(success=False, error="Absent SMS is disabled")

        self._attendance.reconcile_day(attendance_date=attendance_date, academic_year_id=int(academic_year_id))
        absent = self._attendance.absent_students(attendance_date=attendance_date, academic_year_id=int(academic_year_id))
        logger.info("Found %d absent students for %s", len(absent), attendance_date.isoformat())

        template = settings.absent_template or ABSENT_TEMPLATE
        school_name = self._school_name()
        date_text = format_bn_date(attendance_date)

        def job_for(student) -> SendJob:
            def job() -> Optional[SendResult]:
                if not student.guardian_mobile:
                    return None
                message = render_placeholders(
                    template,
                    {
                        "StudentName": student.display_name,
                        "Class": student.class_label,
                        "Date": date_text,
                        "SchoolName": school_name,
                    },
                )
                return self._send_with(
                    settings, student.guardian_mobile, message, student.student_id, SmsType.ABSENT, SentBy.SYSTEM
                )

            return job

        result = self._run_bulk([job_for(s) for s in absent])
        logger.info("Absent SMS for %s: %s", attendance_date.isoformat(), result.as_dict())
        return result

    def send_custom_notice(
        self,
        *,
        message: str,
        academic_year_id: int,
        class_id: Optional[int] = None,
        section_id: Optional[int] = None,
    ) -> BulkResult:
        if self._students is None:
            raise MissingConfigurationError("Custom notice needs the student store")

        message = require_non_empty(message, "বার্তা")
        settings = self._require_settings()
        if not settings.is_enabled:
            return BulkResult(success=False, error="SMS system is disabled")

        students = self._students.list_active(
            academic_year_id=int(academic_year_id), class_id=class_id, section_id=section_id
        )

        def job_for(student) -> SendJob:
            def job() -> Optional[SendResult]:
                if not student.guardian_mobile:
                    return None
                return self._send_with(
                    settings, student.guardian_mobile, message, student.student_id, SmsType.CUSTOM_NOTICE, SentBy.ADMIN
                )

            return job

        return self._run_bulk([job_for(s) for s in students])

    def _run_bulk(self, jobs: Sequence[SendJob]) -> BulkResult:
        def guarded(job: SendJob) -> Optional[SendResult]:
            try:
                return job()
            except Exception as exc:
                logger.exception("Bulk SMS item failed")
                return SendResult(success=False, error=str(exc))

        if self._max_concurrency == 1 or len(jobs) <= 1:
            outcomes = [guarded(j) for j in jobs]
        else:
            with ThreadPoolExecutor(max_workers=min(self._max_concurrency, len(jobs))) as pool:
                outcomes = list(pool.map(guarded, jobs))

        sent = sum(1 for o in outcomes if o is not None and o.success)
        skipped = sum(1 for o in outcomes if o is None)
        return BulkResult(sent=sent, failed=len(outcomes) - sent - skipped, skipped=skipped)

    # ----- entry point -----

    def handle_request(self, payload: dict) -> dict:
        """Dispatch a raw request body.

        Checked in order: provider actions (balance, test send), custom notice,
        punch/late notice, bulk absence, and finally a single send.
        """

        action = payload.get("action")
        if action == "check_balance":
            balance = self.check_balance(parse_provider(payload.get("provider")))
            return {"success": True, "balance": str(balance)}
        if action == "test_sms":
            return self.send_test(
                mobile_number=require_non_empty(str(payload.get("mobile_number") or ""), "মোবাইল নম্বর"),
                message=require_non_empty(str(payload.get("message") or ""), "বার্তা"),
                provider=parse_provider(payload.get("provider")),
            ).as_dict()

        sms_type_raw = payload.get("sms_type") or SmsType.CUSTOM.value
        try:
            sms_type = SmsType(sms_type_raw)
        except ValueError:
            raise ValidationError(f"অজানা SMS ধরন: {sms_type_raw}")

        if sms_type == SmsType.CUSTOM_NOTICE:
            result = self.send_custom_notice(
                message=str(payload.get("message") or ""),
                academic_year_id=required_year(payload.get("academic_year_id")),
                class_id=int_arg(payload.get("class_id")),
                section_id=int_arg(payload.get("section_id")),
            )
            return result.as_dict()

        if sms_type == SmsType.PUNCH or (
            sms_type == SmsType.LATE and payload.get("student_id") and payload.get("punch_time")
        ):
            student_id = int_arg(payload.get("student_id"))
            if not student_id:
                raise ValidationError("শিক্ষার্থী নির্বাচন করুন")
            try:
                punch_time = parse_iso_datetime(str(payload.get("punch_time") or ""))
            except ValueError:
                raise ValidationError("সময় সঠিক নয়")
            return self.send_attendance_notice(
                student_id=student_id,
                sms_type=sms_type,
                punch_time=punch_time,
                late_minutes=int_arg(payload.get("late_minutes")) or 0,
            ).as_dict()

        if payload.get("date") and payload.get("academic_year_id") and not payload.get("mobile_number"):
            try:
                attendance_date = parse_iso_date(str(payload["date"]))
            except ValueError:
                raise ValidationError("তারিখ সঠিক নয় (YYYY-MM-DD)")
            result = self.send_bulk_absent(
                attendance_date=attendance_date,
                academic_year_id=required_year(payload.get("academic_year_id")),
            )
            return result.as_dict()

        mobile = require_non_empty(str(payload.get("mobile_number") or ""), "মোবাইল নম্বর")
        message = require_non_empty(str(payload.get("message") or ""), "বার্তা")
        try:
            sent_by = SentBy(payload.get("sent_by") or SentBy.SYSTEM.value)
        except ValueError:
            sent_by = SentBy.SYSTEM

        result = self.send_single(
            mobile_number=mobile,
            message=message,
            student_id=int_arg(payload.get("student_id")),
            sms_type=sms_type,
            sent_by=sent_by,
        )
        return result.as_dict()
