from __future__ import annotations

import locale
import unicodedata
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.cache import TtlCache
from ..common.money import ZERO
from ..core.enums import FeeStatus
from .model import FeeRecord, FeeRecordWithStudent, StudentBalance, derive_status
from .repository import FeeRecordRepository


def student_tag(student_id: int) -> tuple:
    return ("student", int(student_id))


def year_tag(academic_year_id: int) -> tuple:
    return ("year", int(academic_year_id))


def _fold_latin_marks(text: str) -> str:
    # Drops combining diacritics (U+0300..U+036F) only; Bengali vowel signs survive.
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not "\u0300" <= ch <= "\u036f")


def name_sort_key(name: str) -> tuple[str, str]:
    """Collation key for display names.

    Accents and case are ignored at the first level so ``Émile`` sorts with the
    e's even when the process collates in the C locale; ``locale.strxfrm``
    applies whatever ``LC_COLLATE`` was configured at startup.
    """

    folded = (name or "").casefold()
    return locale.strxfrm(_fold_latin_marks(folded)), locale.strxfrm(folded)


@dataclass
class FeeTotals:
    due: Decimal = ZERO
    paid: Decimal = ZERO
    fine: Decimal = ZERO
    count: int = 0

    def add(self, record: FeeRecord) -> None:
        self.due += record.amount_due
        self.paid += record.amount_paid
        self.fine += record.late_fine
        self.count += 1

    @property
    def remaining(self) -> Decimal:
        return self.due + self.fine - self.paid

    @property
    def status(self) -> FeeStatus:
        return derive_status(self.paid, self.due, self.fine)


@dataclass(frozen=True)
class StudentLedger:
    records: list[FeeRecord]
    total_due: Decimal
    total_paid: Decimal
    total_late_fine: Decimal
    remaining: Decimal
    status: Optional[FeeStatus]


def aggregate_by_student(rows: Sequence[FeeRecordWithStudent]) -> list[StudentBalance]:
    """Group joined fee rows per student and sort by display name.

    Students without rows never appear: nothing is synthesised with zero balances.
    """

    totals: dict[int, FeeTotals] = {}
    students = {}
    for row in rows:
        sid = row.record.student_id
        totals.setdefault(sid, FeeTotals()).add(row.record)
        students.setdefault(sid, row.student)

    out = []
    for sid, t in totals.items():
        s = students[sid]
        out.append(
            StudentBalance(
                student_id=sid,
                student_name=s.name,
                student_name_bn=s.name_bn,
                student_id_number=s.student_id_number,
                class_id=s.class_id,
                total_due=t.due,
                total_paid=t.paid,
                total_late_fine=t.fine,
                remaining=t.remaining,
                status=t.status,
                record_count=t.count,
            )
        )

    out.sort(key=lambda b: name_sort_key(b.student_name))
    return out


class BalanceService:
    """Balance Aggregator: per-student due/paid/fine totals for an academic year."""

    def __init__(self, records: FeeRecordRepository, *, cache: Optional[TtlCache] = None):
        self._records = records
        self._cache = cache if cache is not None else TtlCache(0)

    def student_balances(
        self,
        *,
        academic_year_id: int,
        class_id: Optional[int] = None,
        fee_month: Optional[date] = None,
    ) -> list[StudentBalance]:
        year_id = int(academic_year_id)

        def load() -> list[StudentBalance]:
            rows = self._records.list_with_students(academic_year_id=year_id, class_id=class_id, fee_month=fee_month)
            return aggregate_by_student(rows)

        def tags(balances: list[StudentBalance]):
            return {year_tag(year_id), *(student_tag(b.student_id) for b in balances)}

        balances = self._cache.get_or_load(("balances", year_id, class_id, fee_month), load, tags=tags)
        return list(balances)

    def student_ledger(self, *, student_id: int, academic_year_id: int) -> StudentLedger:
        records = list(self._records.list_for_student(student_id=int(student_id), academic_year_id=int(academic_year_id)))
        t = FeeTotals()
        for r in records:
            t.add(r)
        return StudentLedger(
            records=records,
            total_due=t.due,
            total_paid=t.paid,
            total_late_fine=t.fine,
            remaining=t.remaining,
            status=t.status if records else None,
        )

    def invalidate_student(self, student_id: int) -> None:
        self._cache.invalidate(student_tag(student_id))

    def invalidate_year(self, academic_year_id: int) -> None:
        self._cache.invalidate(year_tag(academic_year_id))
