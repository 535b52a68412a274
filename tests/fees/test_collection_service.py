from __future__ import annotations

import random
import re
from decimal import Decimal

import pytest

from src.school_manager.school_manager.core.enums import FeeStatus
from src.school_manager.school_manager.core.exceptions import ConcurrentUpdateError, NotFoundError, ValidationError
from src.school_manager.school_manager.fees.collection_service import FeeCollectionService
from src.school_manager.school_manager.fees.receipt import ReceiptNumberGenerator


class RacingRecords:
    """Lets another payment land between the read and the write, ``races`` times."""

    def __init__(self, inner, races: int):
        self._inner = inner
        self.races = races
        self.writes = 0

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def compare_and_set_payment(self, **kwargs):
        self.writes += 1
        if self.races > 0:
            self.races -= 1
            cur = self._inner.get_by_id(kwargs["record_id"])
            self._inner.compare_and_set_payment(
                record_id=cur.record_id,
                expected_amount_paid=cur.amount_paid,
                expected_late_fine=cur.late_fine,
                amount_paid=cur.amount_paid + Decimal("100"),
                late_fine=cur.late_fine,
                status=FeeStatus.PARTIAL,
                payment_date=kwargs["payment_date"],
                receipt_number="RCP000000RACE",
            )
        return self._inner.compare_and_set_payment(**kwargs)


def test_collect_twice_doubles_the_payment(fee_records, fixed_now):
    rec = fee_records.add(student_id=1, amount_due="1000")
    svc = FeeCollectionService(fee_records)

    first = svc.collect(record_id=rec.record_id, amount_paid="1000", now=fixed_now)
    assert first.status == FeeStatus.PAID
    assert first.remaining == Decimal("0")

    second = svc.collect(record_id=rec.record_id, amount_paid="1000", now=fixed_now)
    assert second.amount_paid == Decimal("2000")
    assert second.status == FeeStatus.PAID
    assert second.remaining == Decimal("-1000")
    assert first.receipt_number != second.receipt_number
    assert fee_records.get_by_id(rec.record_id).amount_paid == Decimal("2000")


def test_partial_payment_and_late_fine_replaces_stored_fine(fee_records, fixed_now):
    rec = fee_records.add(student_id=1, amount_due="1000", late_fine="100")
    svc = FeeCollectionService(fee_records)

    updated = svc.collect(record_id=rec.record_id, amount_paid="1000", late_fine="50", collected_by=7, now=fixed_now)
    assert updated.late_fine == Decimal("50")
    assert updated.status == FeeStatus.PARTIAL
    assert updated.remaining == Decimal("50")
    assert updated.collected_by == 7
    assert updated.payment_date == fixed_now


def test_unknown_record_raises_not_found(fee_records):
    with pytest.raises(NotFoundError):
        FeeCollectionService(fee_records).collect(record_id=999, amount_paid="10")


def test_invalid_amount_is_rejected(fee_records):
    rec = fee_records.add(student_id=1, amount_due="1000")
    svc = FeeCollectionService(fee_records)
    with pytest.raises(ValidationError):
        svc.collect(record_id=rec.record_id, amount_paid="abc")
    with pytest.raises(ValidationError):
        svc.collect(record_id=rec.record_id, amount_paid="10", late_fine="-5")
    for bad in ("NaN", "Infinity", "-Infinity"):
        with pytest.raises(ValidationError):
            svc.collect(record_id=rec.record_id, amount_paid=bad)
        with pytest.raises(ValidationError):
            svc.collect(record_id=rec.record_id, amount_paid="10", late_fine=bad)
    assert fee_records.get_by_id(rec.record_id).amount_paid == Decimal("0")


def test_lost_race_is_retried_on_fresh_values(fee_records, fixed_now):
    rec = fee_records.add(student_id=1, amount_due="1000")
    racing = RacingRecords(fee_records, races=1)

    updated = FeeCollectionService(racing).collect(record_id=rec.record_id, amount_paid="900", now=fixed_now)

    assert racing.writes == 2
    assert updated.amount_paid == Decimal("1000")
    assert updated.status == FeeStatus.PAID
    assert fee_records.get_by_id(rec.record_id).amount_paid == Decimal("1000")


def test_gives_up_after_max_attempts(fee_records, fixed_now):
    rec = fee_records.add(student_id=1, amount_due="1000")
    racing = RacingRecords(fee_records, races=5)

    with pytest.raises(ConcurrentUpdateError):
        FeeCollectionService(racing, max_attempts=3).collect(record_id=rec.record_id, amount_paid="10", now=fixed_now)
    assert racing.writes == 3


def test_on_paid_hook_receives_updated_record(fee_records, fixed_now):
    rec = fee_records.add(student_id=2, amount_due="500")
    seen = []

    FeeCollectionService(fee_records, on_paid=seen.append).collect(record_id=rec.record_id, amount_paid="500", now=fixed_now)

    assert [(r.student_id, r.status) for r in seen] == [(2, FeeStatus.PAID)]


def test_receipt_number_format(fixed_now):
    gen = ReceiptNumberGenerator(random.Random(42))
    receipt = gen.generate(fixed_now)
    assert re.fullmatch(r"RCP240315[0-9A-Z]{4}", receipt)
