from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import parse_fee_month
from ..common.money import ZERO
from ..common.validators import require_amount
from .model import ClassMonthlyFee, StudentCustomFee
from .repository import ClassFeeRepository, CustomFeeRepository

logger = logging.getLogger(__name__)


class CustomFeeService:
    """Custom-Fee Resolver plus the guardian fee override it reads from.

    Resolution is a pure read: missing custom or class fees resolve to 0 and
    never raise.
    """

    def __init__(self, custom_fees: CustomFeeRepository, class_fees: ClassFeeRepository):
        self._custom_fees = custom_fees
        self._class_fees = class_fees

    def get(self, student_id: int) -> Optional[StudentCustomFee]:
        return self._custom_fees.get_for_student(int(student_id))

    def effective_monthly_fee(
        self,
        *,
        student_id: int,
        class_id: int,
        academic_year_id: int,
        fee_month: Optional[date | str] = None,
    ) -> Decimal:
        month = parse_fee_month(fee_month)
        custom = self._custom_fees.get_for_student(int(student_id))

        if custom and custom.custom_monthly_fee:
            if month is None or month >= custom.effective_from:
                return custom.custom_monthly_fee

        class_fee = self._class_fees.get(class_id=int(class_id), academic_year_id=int(academic_year_id))
        return class_fee.amount if class_fee else ZERO

    def effective_admission_fee(self, *, student_id: int, class_id: int, academic_year_id: int) -> Decimal:
        custom = self._custom_fees.get_for_student(int(student_id))
        if custom and custom.custom_admission_fee:
            return custom.custom_admission_fee

        class_fee = self._class_fees.get(class_id=int(class_id), academic_year_id=int(academic_year_id))
        return class_fee.admission_fee if class_fee else ZERO

    def upsert(
        self,
        *,
        student_id: int,
        custom_monthly_fee: Any,
        custom_admission_fee: Any = None,
        effective_from: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Optional[StudentCustomFee]:
        """Store the override; when both fees are empty or zero the row is deleted instead."""

        monthly = require_amount(custom_monthly_fee, "কাস্টম মাসিক ফি") if custom_monthly_fee not in (None, "") else None
        admission = (
            require_amount(custom_admission_fee, "কাস্টম ভর্তি ফি") if custom_admission_fee not in (None, "") else None
        )

        if not monthly and not admission:
            removed = self._custom_fees.delete_for_student(int(student_id))
            logger.info("Custom fee cleared for student %s (existed=%s)", student_id, removed)
            return None

        fee = StudentCustomFee(
            student_id=int(student_id),
            custom_monthly_fee=monthly or None,
            custom_admission_fee=admission or None,
            effective_from=effective_from or today or date.today(),
        )
        saved = self._custom_fees.upsert(fee)
        logger.info("Custom fee saved for student %s effective %s", student_id, saved.effective_from)
        return saved

    def class_fees(self, *, academic_year_id: int, class_id: Optional[int] = None) -> list[ClassMonthlyFee]:
        return list(self._class_fees.list_for_year(academic_year_id=int(academic_year_id), class_id=class_id))

    def save_class_fee(
        self,
        *,
        class_id: int,
        academic_year_id: int,
        amount: Any,
        admission_fee: Any = 0,
        session_charge: Any = 0,
    ) -> ClassMonthlyFee:
        """Set the class-wide monthly, admission and session amounts used when no override applies."""

        fee = ClassMonthlyFee(
            class_id=int(class_id),
            academic_year_id=int(academic_year_id),
            amount=require_amount(amount, "মাসিক ফি"),
            admission_fee=require_amount(admission_fee, "ভর্তি ফি"),
            session_charge=require_amount(session_charge, "সেশন চার্জ"),
        )
        saved = self._class_fees.upsert(fee)
        logger.info("Class fee saved for class %s year %s: monthly=%s", class_id, academic_year_id, saved.amount)
        return saved
