from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Student identity as needed by fee and notification flows."""

    student_id: int
    name: str
    class_id: int
    academic_year_id: int
    name_bn: Optional[str] = None
    student_id_number: Optional[str] = None
    guardian_mobile: Optional[str] = None
    class_name: Optional[str] = None
    class_name_bn: Optional[str] = None
    section_id: Optional[int] = None
    section_name: Optional[str] = None
    section_name_bn: Optional[str] = None
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.name_bn or self.name

    @property
    def class_label(self) -> str:
        """``<class>-<section>`` preferring Bengali names, as printed in SMS."""
        klass = self.class_name_bn or self.class_name or ""
        section = self.section_name_bn or self.section_name or ""
        return f"{klass}-{section}"


@dataclass(frozen=True)
class SchoolClass:
    class_id: int
    name: str
    grade_order: int
    name_bn: Optional[str] = None
