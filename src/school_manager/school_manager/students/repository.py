from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_active(
        self,
        *,
        academic_year_id: int,
        class_id: Optional[int] = None,
        section_id: Optional[int] = None,
    ) -> Sequence[Student]:
        raise NotImplementedError

    def list_active_classes(self) -> Sequence[SchoolClass]:
        """Active classes ordered by grade order."""

        raise NotImplementedError
