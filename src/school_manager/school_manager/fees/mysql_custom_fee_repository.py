from __future__ import annotations

from typing import Optional, Sequence

from ..common.money import to_money
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassMonthlyFee, Exam, StudentCustomFee
from .repository import ClassFeeRepository, CustomFeeRepository, ExamRepository


def _optional_money(value):
    return to_money(value) if value is not None else None


class MySQLCustomFeeRepository(CustomFeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student(self, student_id: int) -> Optional[StudentCustomFee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, custom_monthly_fee, custom_admission_fee, effective_from
                FROM student_custom_fees
                WHERE student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return StudentCustomFee(
                student_id=int(r["student_id"]),
                custom_monthly_fee=_optional_money(r.get("custom_monthly_fee")),
                custom_admission_fee=_optional_money(r.get("custom_admission_fee")),
                effective_from=r["effective_from"],
            )

    def upsert(self, fee: StudentCustomFee) -> StudentCustomFee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_custom_fees
                    (student_id, custom_monthly_fee, custom_admission_fee, effective_from)
                VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    custom_monthly_fee=VALUES(custom_monthly_fee),
                    custom_admission_fee=VALUES(custom_admission_fee),
                    effective_from=VALUES(effective_from)
                """,
                (int(fee.student_id), fee.custom_monthly_fee, fee.custom_admission_fee, fee.effective_from),
            )
        return fee

    def delete_for_student(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM student_custom_fees WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0


class MySQLClassFeeRepository(ClassFeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_fee(r: dict) -> ClassMonthlyFee:
        return ClassMonthlyFee(
            class_id=int(r["class_id"]),
            academic_year_id=int(r["academic_year_id"]),
            amount=to_money(r.get("amount")),
            admission_fee=to_money(r.get("admission_fee")),
            session_charge=to_money(r.get("session_charge")),
        )

    def get(self, *, class_id: int, academic_year_id: int) -> Optional[ClassMonthlyFee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, academic_year_id, amount, admission_fee, session_charge
                FROM class_monthly_fees
                WHERE class_id=%s AND academic_year_id=%s
                """,
                (int(class_id), int(academic_year_id)),
            )
            r = fetchone(cur)
            return self._to_fee(r) if r else None

    def list_for_year(self, *, academic_year_id: int, class_id: Optional[int] = None) -> Sequence[ClassMonthlyFee]:
        sql = """
            SELECT class_id, academic_year_id, amount, admission_fee, session_charge
            FROM class_monthly_fees
            WHERE academic_year_id=%s
        """
        params: list[object] = [int(academic_year_id)]
        if class_id is not None:
            sql += " AND class_id=%s"
            params.append(int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._to_fee(r) for r in fetchall(cur)]

    def upsert(self, fee: ClassMonthlyFee) -> ClassMonthlyFee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_monthly_fees
                    (class_id, academic_year_id, amount, admission_fee, session_charge)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    amount=VALUES(amount),
                    admission_fee=VALUES(admission_fee),
                    session_charge=VALUES(session_charge)
                """,
                (
                    int(fee.class_id),
                    int(fee.academic_year_id),
                    fee.amount,
                    fee.admission_fee,
                    fee.session_charge,
                ),
            )
        return fee


class MySQLExamRepository(ExamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, exam_id: int) -> Optional[Exam]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, academic_year_id, name, exam_fee_amount FROM exams WHERE id=%s",
                (int(exam_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Exam(
                exam_id=int(r["id"]),
                academic_year_id=int(r["academic_year_id"]),
                name=r["name"],
                exam_fee_amount=to_money(r.get("exam_fee_amount")),
            )
