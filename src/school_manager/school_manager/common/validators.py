from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .money import to_money


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} সঠিক নয়")
    return value.strip()


def require_amount(value: Any, field_name: str) -> Decimal:
    """Parse a monetary input; negative amounts are rejected."""

    try:
        amount = to_money(value)
    except ValueError:
        raise ValidationError(f"{field_name} সঠিক নয়")
    if amount < 0:
        raise ValidationError(f"{field_name} ঋণাত্মক হতে পারে না")
    return amount


def parse_amount(value: Any, field_name: str) -> Decimal:
    """Parse a monetary input without a sign check."""

    try:
        return to_money(value)
    except ValueError:
        raise ValidationError(f"{field_name} সঠিক নয়")


def int_arg(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"সংখ্যা সঠিক নয়: {value}")


def required_year(value) -> int:
    year_id = int_arg(value)
    if not year_id:
        raise ValidationError("শিক্ষাবর্ষ নির্বাচন করুন")
    return year_id
