from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import DailyAttendance


class AttendanceRepository(Protocol):
    def list_for_date(
        self,
        *,
        attendance_date: date,
        academic_year_id: int,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[DailyAttendance]:
        raise NotImplementedError

    def insert_missing(
        self,
        *,
        student_ids: Sequence[int],
        attendance_date: date,
        academic_year_id: int,
        status: AttendanceStatus,
    ) -> int:
        """Insert ``status`` rows for students without a row that day; existing rows are left alone."""

        raise NotImplementedError
