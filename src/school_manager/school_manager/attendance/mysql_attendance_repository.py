from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import DailyAttendance
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_date(
        self,
        *,
        attendance_date: date,
        academic_year_id: int,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[DailyAttendance]:
        sql = """
            SELECT student_id, academic_year_id, attendance_date, status
            FROM student_attendance
            WHERE attendance_date=%s AND academic_year_id=%s
        """
        params: list[object] = [attendance_date, int(academic_year_id)]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                DailyAttendance(
                    student_id=int(r["student_id"]),
                    academic_year_id=int(r["academic_year_id"]),
                    attendance_date=r["attendance_date"],
                    status=AttendanceStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def insert_missing(
        self,
        *,
        student_ids: Sequence[int],
        attendance_date: date,
        academic_year_id: int,
        status: AttendanceStatus,
    ) -> int:
        if not student_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_student_day makes concurrent reconciliations harmless.
            cur.executemany(
                """
                INSERT IGNORE INTO student_attendance (student_id, academic_year_id, attendance_date, status)
                VALUES (%s, %s, %s, %s)
                """,
                [(int(sid), int(academic_year_id), attendance_date, status.value) for sid in student_ids],
            )
            return int(cur.rowcount or 0)
