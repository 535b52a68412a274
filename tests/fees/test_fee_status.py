from decimal import Decimal

import pytest

from src.school_manager.school_manager.core.enums import FeeStatus, FeeType
from src.school_manager.school_manager.fees.model import FeeRecord, derive_status


@pytest.mark.parametrize(
    "paid, due, fine, expected",
    [
        ("0", "1000", "0", FeeStatus.UNPAID),
        ("400", "1000", "0", FeeStatus.PARTIAL),
        ("1000", "1000", "0", FeeStatus.PAID),
        ("1000", "1000", "50", FeeStatus.PARTIAL),
        ("1050", "1000", "50", FeeStatus.PAID),
        ("2000", "1000", "0", FeeStatus.PAID),
        ("0", "0", "0", FeeStatus.PAID),
    ],
)
def test_derive_status(paid, due, fine, expected):
    assert derive_status(Decimal(paid), Decimal(due), Decimal(fine)) == expected


def test_remaining_includes_fine_and_is_not_clamped():
    rec = FeeRecord(
        record_id=1,
        student_id=1,
        academic_year_id=1,
        fee_type=FeeType.MONTHLY,
        amount_due=Decimal("1000"),
        amount_paid=Decimal("300"),
        late_fine=Decimal("50"),
        status=FeeStatus.PARTIAL,
    )
    assert rec.total_due == Decimal("1050")
    assert rec.remaining == Decimal("750")

    over = FeeRecord(
        record_id=2,
        student_id=1,
        academic_year_id=1,
        fee_type=FeeType.MONTHLY,
        amount_due=Decimal("1000"),
        amount_paid=Decimal("2000"),
        late_fine=Decimal("0"),
        status=FeeStatus.PAID,
    )
    assert over.remaining == Decimal("-1000")
