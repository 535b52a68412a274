from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import FeeType


@dataclass(frozen=True)
class MonthlyCollectionSummary:
    class_id: int
    class_name: str
    class_name_bn: Optional[str]
    grade_order: int
    total_students: int
    total_due: Decimal
    total_paid: Decimal
    collection_rate: float


@dataclass(frozen=True)
class DefaulterRecord:
    """Derived row: one unpaid/partial fee record with its student and age."""

    record_id: int
    student_id: int
    student_name: str
    student_name_bn: Optional[str]
    student_id_number: Optional[str]
    guardian_mobile: Optional[str]
    class_name: str
    section_name: Optional[str]
    fee_type: FeeType
    fee_month: Optional[date]
    amount_due: Decimal
    amount_paid: Decimal
    late_fine: Decimal
    remaining: Decimal
    days_overdue: int


@dataclass(frozen=True)
class CollectionStats:
    total_due: Decimal
    total_paid: Decimal
    total_late_fine: Decimal
    total_remaining: Decimal
    paid_count: int
    partial_count: int
    unpaid_count: int
