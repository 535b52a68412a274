from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.money import ZERO, to_money
from ..core.enums import FeeStatus, FeeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from ..students.model import Student
from .model import FeeRecord, FeeRecordWithStudent, NewFeeRecord, derive_status
from .repository import FeeRecordRepository

_RECORD_COLUMNS = """
    r.id, r.student_id, r.academic_year_id, r.fee_type, r.fee_month, r.exam_id,
    r.amount_due, r.amount_paid, r.late_fine, r.status,
    r.receipt_number, r.payment_date, r.collected_by, r.created_at
"""


def _to_record(r: dict) -> FeeRecord:
    return FeeRecord(
        record_id=int(r["id"]),
        student_id=int(r["student_id"]),
        academic_year_id=int(r["academic_year_id"]),
        fee_type=FeeType(r["fee_type"]),
        fee_month=r.get("fee_month"),
        exam_id=int(r["exam_id"]) if r.get("exam_id") is not None else None,
        amount_due=to_money(r["amount_due"]),
        amount_paid=to_money(r["amount_paid"]),
        late_fine=to_money(r["late_fine"]),
        status=FeeStatus(r["status"]),
        receipt_number=r.get("receipt_number"),
        payment_date=r.get("payment_date"),
        collected_by=int(r["collected_by"]) if r.get("collected_by") is not None else None,
        created_at=r.get("created_at"),
    )


class MySQLFeeRecordRepository(FeeRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[FeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM student_fee_records r WHERE r.id=%s",
                (int(record_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_student(self, *, student_id: int, academic_year_id: int) -> Sequence[FeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM student_fee_records r
                WHERE r.student_id=%s AND r.academic_year_id=%s
                ORDER BY r.created_at DESC, r.id DESC
                """,
                (int(student_id), int(academic_year_id)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_with_students(
        self,
        *,
        academic_year_id: int,
        class_id: Optional[int] = None,
        fee_month: Optional[date] = None,
        fee_type: Optional[FeeType] = None,
        exclude_status: Optional[FeeStatus] = None,
    ) -> Sequence[FeeRecordWithStudent]:
        clauses = ["r.academic_year_id=%s"]
        params: list[object] = [int(academic_year_id)]

        if class_id is not None:
            clauses.append("s.class_id=%s")
            params.append(int(class_id))
        if fee_month is not None:
            clauses.append("r.fee_month=%s")
            params.append(fee_month)
        if fee_type is not None:
            clauses.append("r.fee_type=%s")
            params.append(fee_type.value)
        if exclude_status is not None:
            clauses.append("r.status<>%s")
            params.append(exclude_status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    {_RECORD_COLUMNS},
                    s.name, s.name_bn, s.student_id_number, s.guardian_mobile,
                    s.class_id, s.section_id, s.is_active,
                    c.name AS class_name, c.name_bn AS class_name_bn,
                    sec.name AS section_name, sec.name_bn AS section_name_bn
                FROM student_fee_records r
                JOIN students s ON s.id = r.student_id
                LEFT JOIN classes c ON c.id = s.class_id
                LEFT JOIN sections sec ON sec.id = s.section_id
                WHERE {build_where(clauses)}
                ORDER BY r.created_at ASC, r.id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            FeeRecordWithStudent(
                record=_to_record(r),
                student=Student(
                    student_id=int(r["student_id"]),
                    name=r["name"],
                    name_bn=r.get("name_bn"),
                    student_id_number=r.get("student_id_number"),
                    guardian_mobile=r.get("guardian_mobile"),
                    class_id=int(r["class_id"]),
                    class_name=r.get("class_name"),
                    class_name_bn=r.get("class_name_bn"),
                    section_id=int(r["section_id"]) if r.get("section_id") is not None else None,
                    section_name=r.get("section_name"),
                    section_name_bn=r.get("section_name_bn"),
                    academic_year_id=int(r["academic_year_id"]),
                    is_active=bool(r.get("is_active", 1)),
                ),
            )
            for r in rows
        ]

    def student_ids_with_fee(
        self,
        *,
        academic_year_id: int,
        fee_type: FeeType,
        fee_month: Optional[date],
        exam_id: Optional[int] = None,
    ) -> set[int]:
        clauses = ["academic_year_id=%s", "fee_type=%s"]
        params: list[object] = [int(academic_year_id), fee_type.value]
        if fee_month is None:
            clauses.append("fee_month IS NULL")
        else:
            clauses.append("fee_month=%s")
            params.append(fee_month)
        if exam_id is not None:
            clauses.append("exam_id=%s")
            params.append(int(exam_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT DISTINCT student_id FROM student_fee_records WHERE {build_where(clauses)}",
                tuple(params),
            )
            return {int(r["student_id"]) for r in fetchall(cur)}

    def create_many(self, records: Sequence[NewFeeRecord]) -> int:
        if not records:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO student_fee_records
                    (student_id, academic_year_id, fee_type, fee_month, exam_id,
                     amount_due, amount_paid, late_fine, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                [
                    (
                        int(n.student_id),
                        int(n.academic_year_id),
                        n.fee_type.value,
                        n.fee_month,
                        n.exam_id,
                        n.amount_due,
                        ZERO,
                        ZERO,
                        derive_status(ZERO, n.amount_due, ZERO).value,
                    )
                    for n in records
                ],
            )
            return len(records)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE student_fee_records
                SET amount_paid=%s, late_fine=%s, status=%s,
                    payment_date=%s, receipt_number=%s, collected_by=%s
                WHERE id=%s AND amount_paid=%s AND late_fine=%s
                """,
                (
                    amount_paid,
                    late_fine,
                    status.value,
                    payment_date,
                    receipt_number,
                    collected_by,
                    int(record_id),
                    expected_amount_paid,
                    expected_late_fine,
                ),
            )
            return cur.rowcount > 0
