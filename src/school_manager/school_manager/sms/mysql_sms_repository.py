from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.money import to_money
from ..core.enums import SmsProvider
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SmsLog, SmsSettings
from .repository import SmsLogRepository, SmsSettingsRepository


class MySQLSmsSettingsRepository(SmsSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_sms_settings(self) -> Optional[SmsSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT is_enabled, absent_sms_enabled, active_sms_provider,
                       api_key, sender_id, bulksmsbd_api_key, bulksmsbd_sender_id, sms_template,
                       punch_sms_enabled, late_sms_enabled, punch_sms_template, late_sms_template, balance
                FROM sms_settings
                ORDER BY id
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            try:
                provider = SmsProvider(r.get("active_sms_provider") or SmsProvider.MIM_SMS.value)
            except ValueError:
                provider = SmsProvider.MIM_SMS
            return SmsSettings(
                is_enabled=bool(r.get("is_enabled")),
                absent_sms_enabled=bool(r.get("absent_sms_enabled")),
                active_provider=provider,
                api_key=r.get("api_key"),
                sender_id=r.get("sender_id"),
                bulksmsbd_api_key=r.get("bulksmsbd_api_key"),
                bulksmsbd_sender_id=r.get("bulksmsbd_sender_id"),
                absent_template=r.get("sms_template"),
                punch_sms_enabled=bool(r.get("punch_sms_enabled")),
                late_sms_enabled=bool(r.get("late_sms_enabled")),
                punch_template=r.get("punch_sms_template"),
                late_template=r.get("late_sms_template"),
                balance=to_money(r.get("balance")),
            )

    def save_bulksmsbd_balance(self, balance: Decimal, checked_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sms_settings
                SET bulksmsbd_balance=%s, bulksmsbd_balance_updated_at=%s
                ORDER BY id
                LIMIT 1
                """,
                (balance, checked_at),
            )

    def get_school_name(self) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT school_name, school_name_bn FROM system_settings ORDER BY id LIMIT 1")
            r = fetchone(cur)
            if not r:
                return None
            return r.get("school_name_bn") or r.get("school_name")


class MySQLSmsLogRepository(SmsLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, log: SmsLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sms_logs
                    (mobile_number, message, student_id, sms_type, status,
                     provider_name, response_code, error_message, sent_at, sent_by)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    log.mobile_number,
                    log.message,
                    log.student_id,
                    log.sms_type.value,
                    log.status.value,
                    log.provider_name,
                    log.response_code,
                    log.error_message,
                    log.sent_at,
                    log.sent_by.value,
                ),
            )
            return int(cur.lastrowid)
