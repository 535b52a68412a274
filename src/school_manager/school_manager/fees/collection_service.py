from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import parse_amount, require_amount
from ..core.constants import MAX_PAYMENT_ATTEMPTS
from ..core.exceptions import ConcurrentUpdateError, NotFoundError
from .model import FeeRecord, derive_status
from .receipt import ReceiptNumberGenerator
from .repository import FeeRecordRepository

logger = logging.getLogger(__name__)


class FeeCollectionService:
    """Collection Writer: apply a payment to one fee record and issue a receipt.

    The write is a compare-and-swap on the paid/fine columns; when another
    session got there first the record is re-read and the payment re-applied.

    Not idempotent: every call adds ``amount_paid`` again and issues a new
    receipt. Over-payment is kept as-is (remaining goes negative).
    """

    def __init__(
        self,
        records: FeeRecordRepository,
        *,
        receipts: Optional[ReceiptNumberGenerator] = None,
        on_paid: Optional[Callable[[FeeRecord], None]] = None,
        max_attempts: int = MAX_PAYMENT_ATTEMPTS,
    ):
        self._records = records
        self._receipts = receipts or ReceiptNumberGenerator()
        self._on_paid = on_paid
        self._max_attempts = max(1, int(max_attempts))

    def collect(
        self,
        *,
        record_id: int,
        amount_paid: Any,
        late_fine: Any = 0,
        collected_by: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> FeeRecord:
        amount = parse_amount(amount_paid, "আদায়ের পরিমাণ")
        fine = require_amount(late_fine, "বিলম্ব জরিমানা")

        for attempt in range(1, self._max_attempts + 1):
            current = self._records.get_by_id(int(record_id))
            if not current:
                raise NotFoundError("ফি রেকর্ড পাওয়া যায়নি")

            paid_at = now or now_local()
            total_paid = current.amount_paid + amount
            status = derive_status(total_paid, current.amount_due, fine)
            receipt_number = self._receipts.generate(paid_at)

            written = self._records.compare_and_set_payment(
                record_id=current.record_id,
                expected_amount_paid=current.amount_paid,
                expected_late_fine=current.late_fine,
                amount_paid=total_paid,
                late_fine=fine,
                status=status,
                payment_date=paid_at,
                receipt_number=receipt_number,
                collected_by=collected_by,
            )
            if not written:
                logger.warning("Fee record %s changed during payment (attempt %d)", record_id, attempt)
                continue

            updated = FeeRecord(
                record_id=current.record_id,
                student_id=current.student_id,
                academic_year_id=current.academic_year_id,
                fee_type=current.fee_type,
                fee_month=current.fee_month,
                exam_id=current.exam_id,
                amount_due=current.amount_due,
                amount_paid=total_paid,
                late_fine=fine,
                status=status,
                receipt_number=receipt_number,
                payment_date=paid_at,
                collected_by=collected_by,
                created_at=current.created_at,
            )
            logger.info(
                "Collected %s on fee record %s (student %s): status=%s receipt=%s",
                amount,
                updated.record_id,
                updated.student_id,
                updated.status.value,
                receipt_number,
            )
            if self._on_paid:
                self._on_paid(updated)
            return updated

        raise ConcurrentUpdateError("ফি রেকর্ড একই সময়ে পরিবর্তিত হয়েছে, আবার চেষ্টা করুন")
