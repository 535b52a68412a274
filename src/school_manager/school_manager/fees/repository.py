from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import FeeStatus, FeeType
from .model import ClassMonthlyFee, Exam, FeeRecord, FeeRecordWithStudent, NewFeeRecord, StudentCustomFee


class FeeRecordRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[FeeRecord]:
        raise NotImplementedError

    def list_for_student(self, *, student_id: int, academic_year_id: int) -> Sequence[FeeRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_with_students(
        self,
        *,
        academic_year_id: int,
        class_id: Optional[int] = None,
        fee_month: Optional[date] = None,
        fee_type: Optional[FeeType] = None,
        exclude_status: Optional[FeeStatus] = None,
    ) -> Sequence[FeeRecordWithStudent]:
        """Records joined to their owning student, oldest first."""

        raise NotImplementedError

    def student_ids_with_fee(
        self,
        *,
        academic_year_id: int,
        fee_type: FeeType,
        fee_month: Optional[date],
        exam_id: Optional[int] = None,
    ) -> set[int]:
        """Students already billed for this fee; ``exam_id`` narrows exam fees to one exam."""

        raise NotImplementedError

    def create_many(self, records: Sequence[NewFeeRecord]) -> int:
        raise NotImplementedError

    def compare_and_set_payment(
        self,
        *,
        record_id: int,
        expected_amount_paid: Decimal,
        expected_late_fine: Decimal,
        amount_paid: Decimal,
        late_fine: Decimal,
        status: FeeStatus,
        payment_date: datetime,
        receipt_number: str,
        collected_by: Optional[int] = None,
    ) -> bool:
        """Write a payment only if the row still holds the expected paid/fine values.

        Returns False when the row changed (or vanished) since it was read.
        """

        raise NotImplementedError


class CustomFeeRepository(Protocol):
    def get_for_student(self, student_id: int) -> Optional[StudentCustomFee]:
        raise NotImplementedError

    def upsert(self, fee: StudentCustomFee) -> StudentCustomFee:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> bool:
        raise NotImplementedError


class ClassFeeRepository(Protocol):
    def get(self, *, class_id: int, academic_year_id: int) -> Optional[ClassMonthlyFee]:
        raise NotImplementedError

    def list_for_year(self, *, academic_year_id: int, class_id: Optional[int] = None) -> Sequence[ClassMonthlyFee]:
        raise NotImplementedError

    def upsert(self, fee: ClassMonthlyFee) -> ClassMonthlyFee:
        """Insert or replace the (class, academic year) row."""

        raise NotImplementedError


class ExamRepository(Protocol):
    def get_by_id(self, exam_id: int) -> Optional[Exam]:
        raise NotImplementedError
