from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import SentBy, SmsProvider, SmsStatus, SmsType


@dataclass(frozen=True)
class SmsSettings:
    """Single settings row for the SMS gateway."""

    is_enabled: bool
    active_provider: SmsProvider
    api_key: Optional[str] = None
    sender_id: Optional[str] = None
    bulksmsbd_api_key: Optional[str] = None
    bulksmsbd_sender_id: Optional[str] = None
    absent_sms_enabled: bool = False
    absent_template: Optional[str] = None
    punch_sms_enabled: bool = False
    late_sms_enabled: bool = False
    punch_template: Optional[str] = None
    late_template: Optional[str] = None
    # Last known MiM SMS balance; it has no balance API.
    balance: Optional[Decimal] = None


@dataclass(frozen=True)
class SmsLog:
    """Append-only record of one send attempt."""

    mobile_number: str
    message: str
    sms_type: SmsType
    status: SmsStatus
    student_id: Optional[int] = None
    provider_name: Optional[str] = None
    response_code: Optional[str] = None
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    sent_by: SentBy = SentBy.SYSTEM


@dataclass(frozen=True)
class SendResult:
    success: bool
    error: Optional[str] = None
    response_code: Optional[str] = None

    def as_dict(self) -> dict:
        out: dict = {"success": self.success}
        if self.error:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class BulkResult:
    """Tally of a bulk run: ``sent + failed + skipped == total`` always holds."""

    sent: int = 0
    failed: int = 0
    skipped: int = 0
    success: bool = True
    error: Optional[str] = None

    @property
    def total(self) -> int:
        return self.sent + self.failed + self.skipped

    def as_dict(self) -> dict:
        out: dict = {
            "success": self.success,
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "total": self.total,
        }
        if self.error:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class FeeDueItem:
    student_name: str
    class_name: str
    due_amount: Decimal
    guardian_mobile: str
    student_id: Optional[int] = None

