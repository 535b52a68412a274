from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Mapping

from ..common.money import format_amount
from ..core.constants import FEE_DUE_TEMPLATE

_BN_DIGITS = str.maketrans("0123456789", "০১২৩৪৫৬৭৮৯")


def to_bengali_digits(text: str) -> str:
    return text.translate(_BN_DIGITS)


def format_bn_date(value: date) -> str:
    """Day/month/year in Bengali digits, e.g. 2024-06-01 -> ১/৬/২০২৪."""
    return to_bengali_digits(f"{value.day}/{value.month}/{value.year}")


def render_placeholders(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``{{Name}}`` placeholders; unknown placeholders are left untouched."""

    out = template
    for key, value in values.items():
        out = out.replace("{{" + key + "}}", value)
    return out


def render_fee_due(*, student_name: str, class_name: str, due_amount: Decimal) -> str:
    return FEE_DUE_TEMPLATE.format(
        student_name=student_name,
        class_name=class_name,
        due_amount=format_amount(due_amount),
    )


def format_bn_time(value: datetime) -> str:
    """12-hour clock in Bengali digits, e.g. 09:05 -> ০৯:০৫."""
    return to_bengali_digits(value.strftime("%I:%M"))
