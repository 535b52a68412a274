from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import SchoolClass, Student
from .repository import StudentRepository

_STUDENT_SELECT = """
    SELECT
        s.id, s.name, s.name_bn, s.student_id_number, s.guardian_mobile,
        s.class_id, s.section_id, s.academic_year_id, s.is_active,
        c.name AS class_name, c.name_bn AS class_name_bn,
        sec.name AS section_name, sec.name_bn AS section_name_bn
    FROM students s
    LEFT JOIN classes c ON c.id = s.class_id
    LEFT JOIN sections sec ON sec.id = s.section_id
"""


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["id"]),
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
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_STUDENT_SELECT + " WHERE s.id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_active(
        self,
        *,
        academic_year_id: int,
        class_id: Optional[int] = None,
        section_id: Optional[int] = None,
    ) -> Sequence[Student]:
        clauses = ["s.academic_year_id=%s", "s.is_active=1"]
        params: list[object] = [int(academic_year_id)]
        if class_id is not None:
            clauses.append("s.class_id=%s")
            params.append(int(class_id))
        if section_id is not None:
            clauses.append("s.section_id=%s")
            params.append(int(section_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _STUDENT_SELECT + f" WHERE {build_where(clauses)} ORDER BY s.id",
                tuple(params),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_active_classes(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, name_bn, grade_order
                FROM classes
                WHERE is_active=1
                ORDER BY grade_order ASC
                """
            )
            return [
                SchoolClass(
                    class_id=int(r["id"]),
                    name=r["name"],
                    name_bn=r.get("name_bn"),
                    grade_order=int(r.get("grade_order") or 0),
                )
                for r in fetchall(cur)
            ]
