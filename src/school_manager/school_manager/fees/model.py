from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import FeeStatus, FeeType
from ..students.model import Student


def derive_status(amount_paid: Decimal, amount_due: Decimal, late_fine: Decimal) -> FeeStatus:
    """Three-way payment rule shared by single records and summed groups."""

    if amount_paid >= amount_due + late_fine:
        return FeeStatus.PAID
    if amount_paid > 0:
        return FeeStatus.PARTIAL
    return FeeStatus.UNPAID


@dataclass(frozen=True)
class FeeRecord:
    """Domain entity: one billable assessment for one student in one academic year."""

    record_id: int
    student_id: int
    academic_year_id: int
    fee_type: FeeType
    amount_due: Decimal
    amount_paid: Decimal
    late_fine: Decimal
    status: FeeStatus
    fee_month: Optional[date] = None
    exam_id: Optional[int] = None
    receipt_number: Optional[str] = None
    payment_date: Optional[datetime] = None
    collected_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def total_due(self) -> Decimal:
        return self.amount_due + self.late_fine

    @property
    def remaining(self) -> Decimal:
        # Not clamped: over-payment shows up as a negative remaining (credit).
        return self.amount_due + self.late_fine - self.amount_paid


@dataclass(frozen=True)
class FeeRecordWithStudent:
    """Read-model: fee record joined to its owning student (and class/section)."""

    record: FeeRecord
    student: Student


@dataclass(frozen=True)
class NewFeeRecord:
    student_id: int
    academic_year_id: int
    fee_type: FeeType
    amount_due: Decimal
    fee_month: Optional[date] = None
    exam_id: Optional[int] = None


@dataclass(frozen=True)
class StudentCustomFee:
    student_id: int
    effective_from: date
    custom_monthly_fee: Optional[Decimal] = None
    custom_admission_fee: Optional[Decimal] = None


@dataclass(frozen=True)
class ClassMonthlyFee:
    class_id: int
    academic_year_id: int
    amount: Decimal
    admission_fee: Decimal = Decimal("0")
    session_charge: Decimal = Decimal("0")


@dataclass(frozen=True)
class Exam:
    exam_id: int
    academic_year_id: int
    name: str
    exam_fee_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class StudentBalance:
    """Per-student totals across every matching fee record."""

    student_id: int
    student_name: str
    student_name_bn: Optional[str]
    student_id_number: Optional[str]
    class_id: int
    total_due: Decimal
    total_paid: Decimal
    total_late_fine: Decimal
    remaining: Decimal
    status: FeeStatus
    record_count: int
