from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from src.school_manager.school_manager.core.enums import FeeStatus, FeeType
from src.school_manager.school_manager.reports.service import FeeReportService, collection_rate


def test_collection_rate_is_zero_when_nothing_is_due():
    assert collection_rate(Decimal("0"), Decimal("0")) == 0.0
    assert collection_rate(Decimal("500"), Decimal("0")) == 0.0
    assert collection_rate(Decimal("250"), Decimal("1000")) == 25.0


def test_paid_records_never_show_up_as_defaulters(fee_records, students, fixed_now):
    fee_records.add(student_id=1, amount_due="1000", amount_paid="1000")
    fee_records.add(student_id=2, amount_due="1000", amount_paid="1500")
    # Stale status: says partial but nothing is left.
    fee_records.add(student_id=2, amount_due="500", amount_paid="500", status=FeeStatus.PARTIAL)
    unpaid = fee_records.add(student_id=3, amount_due="800", created_at=datetime(2024, 3, 1, 12, 0))

    defaulters = FeeReportService(fee_records, students).defaulter_list(academic_year_id=1, now=fixed_now)

    assert [d.record_id for d in defaulters] == [unpaid.record_id]
    assert defaulters[0].remaining == Decimal("800")
    assert defaulters[0].days_overdue == 13


def test_defaulters_sorted_by_days_overdue_desc(fee_records, students, fixed_now):
    fee_records.add(student_id=1, amount_due="100", created_at=datetime(2024, 3, 10, 9, 0))
    fee_records.add(student_id=2, amount_due="100", amount_paid="40", created_at=datetime(2024, 1, 15, 9, 0))
    fee_records.add(student_id=3, amount_due="100", created_at=datetime(2024, 2, 20, 9, 0))

    defaulters = FeeReportService(fee_records, students).defaulter_list(academic_year_id=1, now=fixed_now)

    assert [d.student_id for d in defaulters] == [2, 3, 1]
    assert [d.days_overdue for d in defaulters] == [60, 24, 5]
    assert defaulters[0].remaining == Decimal("60")


def test_defaulters_filter_by_class_and_type(fee_records, students, fixed_now):
    fee_records.add(student_id=1, amount_due="100", fee_type=FeeType.EXAM)
    fee_records.add(student_id=1, amount_due="100")
    fee_records.add(student_id=3, amount_due="100", fee_type=FeeType.EXAM)

    svc = FeeReportService(fee_records, students)
    rows = svc.defaulter_list(academic_year_id=1, class_id=1, fee_type=FeeType.EXAM, now=fixed_now)
    assert [(d.student_id, d.fee_type) for d in rows] == [(1, FeeType.EXAM)]


def test_monthly_summary_per_class_ordered_by_grade(fee_records, students):
    march = date(2024, 3, 1)
    fee_records.add(student_id=1, amount_due="1000", amount_paid="1000", fee_month=march)
    fee_records.add(student_id=2, amount_due="1000", amount_paid="500", fee_month=march)
    fee_records.add(student_id=1, amount_due="400", amount_paid="400", fee_month=march, fee_type=FeeType.EXAM)
    fee_records.add(student_id=1, amount_due="1000", fee_month=date(2024, 2, 1))

    summary = FeeReportService(fee_records, students).monthly_collection_summary(academic_year_id=1, fee_month=march)

    assert [s.class_id for s in summary] == [1, 2]
    one, two = summary
    assert (one.total_students, one.total_due, one.total_paid) == (2, Decimal("2000"), Decimal("1500"))
    assert one.collection_rate == 75.0
    assert (two.total_students, two.total_due, two.collection_rate) == (1, Decimal("0"), 0.0)


def test_class_collection_report_only_covers_the_class(fee_records, students):
    fee_records.add(student_id=1, amount_due="1000", amount_paid="300")
    fee_records.add(student_id=3, amount_due="1000")

    rows = FeeReportService(fee_records, students).class_collection_report(academic_year_id=1, class_id=1)
    assert [(r.student_id, r.remaining, r.status) for r in rows] == [(1, Decimal("700"), FeeStatus.PARTIAL)]


def test_collection_stats(fee_records, students):
    fee_records.add(student_id=1, amount_due="1000", amount_paid="1000")
    fee_records.add(student_id=2, amount_due="1000", amount_paid="200", late_fine="20")
    fee_records.add(student_id=3, amount_due="500")

    stats = FeeReportService(fee_records, students).collection_stats(academic_year_id=1)
    assert stats.total_due == Decimal("2500")
    assert stats.total_paid == Decimal("1200")
    assert stats.total_remaining == Decimal("1320")
    assert (stats.paid_count, stats.partial_count, stats.unpaid_count) == (1, 1, 1)
