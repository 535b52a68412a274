from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol

from .model import SmsLog, SmsSettings


class SmsSettingsRepository(Protocol):
    def get_sms_settings(self) -> Optional[SmsSettings]:
        raise NotImplementedError

    def get_school_name(self) -> Optional[str]:
        """Bengali school name when set, else the English one."""

        raise NotImplementedError

    def save_bulksmsbd_balance(self, balance: Decimal, checked_at: datetime) -> None:
        raise NotImplementedError


class SmsLogRepository(Protocol):
    def append(self, log: SmsLog) -> int:
        raise NotImplementedError
