from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def to_money(value: Any) -> Decimal:
    """Coerce driver/form values (Decimal, int, float, str, None) into Decimal."""

    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        try:
            amount = Decimal(value)
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"Invalid money value: {value!r}") from exc
    # NaN and Infinity parse as Decimal but never compare or store sanely.
    if not amount.is_finite():
        raise ValueError(f"Invalid money value: {value!r}")
    return amount


def format_amount(value: Decimal | int | float) -> str:
    """Thousands-separated amount, without trailing zero decimals (1500 -> '1,500')."""

    amount = to_money(value)
    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount.normalize():,f}"
