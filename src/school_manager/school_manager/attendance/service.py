from __future__ import annotations

import logging
from datetime import date

from ..core.enums import AttendanceStatus
from ..students.model import Student
from ..students.repository import StudentRepository
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceReconciliationService:
    """End-of-day step that turns "no punch" into an explicit ``absent`` row.

    After reconciliation every active student has exactly one status for the
    day, so absence is read back rather than inferred at each call site.
    """

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository):
        self._attendance = attendance
        self._students = students

    def reconcile_day(self, *, attendance_date: date, academic_year_id: int) -> int:
        students = self._students.list_active(academic_year_id=int(academic_year_id))
        recorded = {
            a.student_id
            for a in self._attendance.list_for_date(attendance_date=attendance_date, academic_year_id=int(academic_year_id))
        }
        missing = [s.student_id for s in students if s.student_id not in recorded]

        written = self._attendance.insert_missing(
            student_ids=missing,
            attendance_date=attendance_date,
            academic_year_id=int(academic_year_id),
            status=AttendanceStatus.ABSENT,
        )
        logger.info(
            "Attendance reconciled for %s: %d active, %d recorded, %d marked absent",
            attendance_date.isoformat(),
            len(students),
            len(recorded),
            written,
        )
        return written

    def absent_students(self, *, attendance_date: date, academic_year_id: int) -> list[Student]:
        absent_ids = {
            a.student_id
            for a in self._attendance.list_for_date(
                attendance_date=attendance_date,
                academic_year_id=int(academic_year_id),
                status=AttendanceStatus.ABSENT,
            )
        }
        return [s for s in self._students.list_active(academic_year_id=int(academic_year_id)) if s.student_id in absent_ids]
