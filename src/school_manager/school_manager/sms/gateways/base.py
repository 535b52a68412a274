from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class GatewayResponse:
    success: bool
    error: Optional[str] = None
    response_code: Optional[str] = None
    response_message: Optional[str] = None


@dataclass(frozen=True)
class BalanceResponse:
    success: bool
    balance: Optional[Decimal] = None
    error: Optional[str] = None


class SmsGateway(ABC):
    """Strategy Pattern: one implementation per SMS provider.

    ``send`` never raises for provider or transport failures; it returns a
    failed ``GatewayResponse`` carrying the provider's error text.
    """

    name: str = ""

    @abstractmethod
    def send(self, mobile_number: str, message: str) -> GatewayResponse:
        raise NotImplementedError

    def check_balance(self) -> BalanceResponse:
        return BalanceResponse(success=False, error=f"{self.name} has no balance API")


def normalize_bd_mobile(mobile: str) -> str:
    """01712345678 -> 8801712345678; already-prefixed numbers are kept."""

    digits = re.sub(r"[^0-9]", "", mobile or "")
    if not digits:
        return ""
    if digits.startswith("88"):
        return digits
    return "88" + digits
