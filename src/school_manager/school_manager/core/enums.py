from __future__ import annotations

from enum import Enum


class FeeType(str, Enum):
    """Kind of fee assessed against a student."""

    MONTHLY = "monthly"
    ADMISSION = "admission"
    SESSION = "session"
    EXAM = "exam"


class FeeStatus(str, Enum):
    """Payment state of a fee record (or of a summed group of records)."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class AttendanceStatus(str, Enum):
    """Daily attendance status stored once per student per day."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class SmsType(str, Enum):
    ABSENT = "absent"
    LATE = "late"
    PRESENT = "present"
    CUSTOM = "custom"
    CUSTOM_NOTICE = "custom_notice"
    FEE_DUE = "fee_due"
    MONTHLY_SUMMARY = "monthly_summary"
    PUNCH = "punch"
    OTP = "otp"


class SmsStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    PENDING = "pending"


class SmsProvider(str, Enum):
    MIM_SMS = "mim_sms"
    BULKSMSBD = "bulksmsbd"


class SentBy(str, Enum):
    ADMIN = "admin"
    SYSTEM = "system"
