from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local, whole_days_between
from ..common.money import ZERO
from ..core.enums import FeeStatus, FeeType
from ..fees.balance_service import aggregate_by_student
from ..fees.model import StudentBalance
from ..fees.repository import FeeRecordRepository
from ..students.repository import StudentRepository
from .model import CollectionStats, DefaulterRecord, MonthlyCollectionSummary


def collection_rate(paid: Decimal, due: Decimal) -> float:
    """paid / due as a percentage; 0 when nothing is due."""

    if due <= 0:
        return 0.0
    return float(paid / due * 100)


class FeeReportService:
    """Read-only reports over fee records. Nothing here writes."""

    def __init__(self, records: FeeRecordRepository, students: StudentRepository):
        self._records = records
        self._students = students

    def class_collection_report(
        self,
        *,
        academic_year_id: int,
        class_id: int,
        fee_month: Optional[date] = None,
    ) -> list[StudentBalance]:
        rows = self._records.list_with_students(
            academic_year_id=int(academic_year_id),
            class_id=int(class_id),
            fee_month=fee_month,
        )
        return aggregate_by_student(rows)

    def monthly_collection_summary(self, *, academic_year_id: int, fee_month: date) -> list[MonthlyCollectionSummary]:
        classes = self._students.list_active_classes()
        if not classes:
            return []

        rows = self._records.list_with_students(
            academic_year_id=int(academic_year_id),
            fee_month=fee_month,
            fee_type=FeeType.MONTHLY,
        )
        due_by_class: dict[int, Decimal] = {}
        paid_by_class: dict[int, Decimal] = {}
        for row in rows:
            cid = row.student.class_id
            due_by_class[cid] = due_by_class.get(cid, ZERO) + row.record.amount_due
            paid_by_class[cid] = paid_by_class.get(cid, ZERO) + row.record.amount_paid

        students_by_class: dict[int, int] = {}
        for s in self._students.list_active(academic_year_id=int(academic_year_id)):
            students_by_class[s.class_id] = students_by_class.get(s.class_id, 0) + 1

        summary = []
        for c in classes:
            due = due_by_class.get(c.class_id, ZERO)
            paid = paid_by_class.get(c.class_id, ZERO)
            summary.append(
                MonthlyCollectionSummary(
                    class_id=c.class_id,
                    class_name=c.name,
                    class_name_bn=c.name_bn,
                    grade_order=c.grade_order,
                    total_students=students_by_class.get(c.class_id, 0),
                    total_due=due,
                    total_paid=paid,
                    collection_rate=collection_rate(paid, due),
                )
            )

        summary.sort(key=lambda s: s.grade_order)
        return summary

    def defaulter_list(
        self,
        *,
        academic_year_id: int,
        class_id: Optional[int] = None,
        fee_type: Optional[FeeType] = None,
        now: Optional[datetime] = None,
    ) -> list[DefaulterRecord]:
        now = now or now_local()
        rows = self._records.list_with_students(
            academic_year_id=int(academic_year_id),
            class_id=class_id,
            fee_type=fee_type,
            exclude_status=FeeStatus.PAID,
        )

        defaulters = []
        for row in rows:
            r, s = row.record, row.student
            # Stale rows can carry a non-paid status with nothing left to pay.
            if r.status == FeeStatus.PAID or r.remaining <= 0:
                continue
            defaulters.append(
                DefaulterRecord(
                    record_id=r.record_id,
                    student_id=s.student_id,
                    student_name=s.name,
                    student_name_bn=s.name_bn,
                    student_id_number=s.student_id_number,
                    guardian_mobile=s.guardian_mobile,
                    class_name=s.class_name or "",
                    section_name=s.section_name,
                    fee_type=r.fee_type,
                    fee_month=r.fee_month,
                    amount_due=r.amount_due,
                    amount_paid=r.amount_paid,
                    late_fine=r.late_fine,
                    remaining=r.remaining,
                    days_overdue=whole_days_between(r.created_at, now) if r.created_at else 0,
                )
            )

        defaulters.sort(key=lambda d: d.days_overdue, reverse=True)
        return defaulters

    def collection_stats(self, *, academic_year_id: int) -> CollectionStats:
        total_due = total_paid = total_fine = ZERO
        counts = {FeeStatus.PAID: 0, FeeStatus.PARTIAL: 0, FeeStatus.UNPAID: 0}

        for row in self._records.list_with_students(academic_year_id=int(academic_year_id)):
            r = row.record
            total_due += r.amount_due
            total_paid += r.amount_paid
            total_fine += r.late_fine
            counts[r.status] += 1

        return CollectionStats(
            total_due=total_due,
            total_paid=total_paid,
            total_late_fine=total_fine,
            total_remaining=total_due + total_fine - total_paid,
            paid_count=counts[FeeStatus.PAID],
            partial_count=counts[FeeStatus.PARTIAL],
            unpaid_count=counts[FeeStatus.UNPAID],
        )
