from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class DailyAttendance:
    """One explicit status per student per day."""

    student_id: int
    academic_year_id: int
    attendance_date: date
    status: AttendanceStatus
