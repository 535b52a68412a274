from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from src.school_manager.school_manager.core.enums import FeeStatus, FeeType
from src.school_manager.school_manager.fees.model import (
    ClassMonthlyFee,
    Exam,
    FeeRecord,
    FeeRecordWithStudent,
    StudentCustomFee,
    derive_status,
)
from src.school_manager.school_manager.students.model import SchoolClass, Student


class InMemoryStudents:
    def __init__(self, students=(), classes=()):
        self.students: dict[int, Student] = {s.student_id: s for s in students}
        self.classes: list[SchoolClass] = list(classes)

    def add(self, student: Student) -> Student:
        self.students[student.student_id] = student
        return student

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def list_active(self, *, academic_year_id: int, class_id=None, section_id=None):
        out = [
            s
            for s in self.students.values()
            if s.is_active
            and s.academic_year_id == academic_year_id
            and (class_id is None or s.class_id == class_id)
            and (section_id is None or s.section_id == section_id)
        ]
        return sorted(out, key=lambda s: s.student_id)

    def list_active_classes(self):
        return list(self.classes)


class InMemoryFeeRecords:
    def __init__(self, students: InMemoryStudents):
        self._students = students
        self.records: dict[int, FeeRecord] = {}
        self._next_id = 1

    def add(
        self,
        *,
        student_id: int,
        amount_due,
        amount_paid="0",
        late_fine="0",
        academic_year_id: int = 1,
        fee_type: FeeType = FeeType.MONTHLY,
        fee_month: Optional[date] = None,
        exam_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        status: Optional[FeeStatus] = None,
    ) -> FeeRecord:
        due, paid, fine = Decimal(str(amount_due)), Decimal(str(amount_paid)), Decimal(str(late_fine))
        rec = FeeRecord(
            record_id=self._next_id,
            student_id=student_id,
            academic_year_id=academic_year_id,
            fee_type=fee_type,
            amount_due=due,
            amount_paid=paid,
            late_fine=fine,
            status=status or derive_status(paid, due, fine),
            fee_month=fee_month,
            exam_id=exam_id,
            created_at=created_at or datetime(2024, 1, 1, 9, 0, 0),
        )
        self.records[rec.record_id] = rec
        self._next_id += 1
        return rec

    def get_by_id(self, record_id: int) -> Optional[FeeRecord]:
        return self.records.get(record_id)

    def list_for_student(self, *, student_id: int, academic_year_id: int):
        out = [r for r in self.records.values() if r.student_id == student_id and r.academic_year_id == academic_year_id]
        return sorted(out, key=lambda r: r.record_id, reverse=True)

    def list_with_students(
        self,
        *,
        academic_year_id: int,
        class_id=None,
        fee_month=None,
        fee_type=None,
        exclude_status=None,
    ):
        out = []
        for r in sorted(self.records.values(), key=lambda r: r.record_id):
            s = self._students.get_by_id(r.student_id)
            if s is None or r.academic_year_id != academic_year_id:
                continue
            if class_id is not None and s.class_id != class_id:
                continue
            if fee_month is not None and r.fee_month != fee_month:
                continue
            if fee_type is not None and r.fee_type != fee_type:
                continue
            if exclude_status is not None and r.status == exclude_status:
                continue
            out.append(FeeRecordWithStudent(record=r, student=s))
        return out

    def student_ids_with_fee(self, *, academic_year_id: int, fee_type: FeeType, fee_month, exam_id=None):
        return {
            r.student_id
            for r in self.records.values()
            if r.academic_year_id == academic_year_id
            and r.fee_type == fee_type
            and r.fee_month == fee_month
            and (exam_id is None or r.exam_id == exam_id)
        }

    def create_many(self, records) -> int:
        for n in records:
            self.add(
                student_id=n.student_id,
                academic_year_id=n.academic_year_id,
                fee_type=n.fee_type,
                amount_due=n.amount_due,
                fee_month=n.fee_month,
                exam_id=n.exam_id,
            )
        return len(records)

    def compare_and_set_payment(
        self,
        *,
        record_id,
        expected_amount_paid,
        expected_late_fine,
        amount_paid,
        late_fine,
        status,
        payment_date,
        receipt_number,
        collected_by=None,
    ) -> bool:
        cur = self.records.get(record_id)
        if cur is None or cur.amount_paid != expected_amount_paid or cur.late_fine != expected_late_fine:
            return False
        self.records[record_id] = replace(
            cur,
            amount_paid=amount_paid,
            late_fine=late_fine,
            status=status,
            payment_date=payment_date,
            receipt_number=receipt_number,
            collected_by=collected_by,
        )
        return True


class InMemoryCustomFees:
    def __init__(self):
        self.fees: dict[int, StudentCustomFee] = {}

    def get_for_student(self, student_id: int):
        return self.fees.get(student_id)

    def upsert(self, fee: StudentCustomFee) -> StudentCustomFee:
        self.fees[fee.student_id] = fee
        return fee

    def delete_for_student(self, student_id: int) -> bool:
        return self.fees.pop(student_id, None) is not None


class InMemoryClassFees:
    def __init__(self, fees=()):
        self.fees: dict[tuple[int, int], ClassMonthlyFee] = {(f.class_id, f.academic_year_id): f for f in fees}

    def get(self, *, class_id: int, academic_year_id: int):
        return self.fees.get((class_id, academic_year_id))

    def list_for_year(self, *, academic_year_id: int, class_id=None):
        return [
            f
            for (cid, yid), f in self.fees.items()
            if yid == academic_year_id and (class_id is None or cid == class_id)
        ]

    def upsert(self, fee: ClassMonthlyFee) -> ClassMonthlyFee:
        self.fees[(fee.class_id, fee.academic_year_id)] = fee
        return fee


class InMemoryExams:
    def __init__(self, exams=()):
        self.exams: dict[int, Exam] = {e.exam_id: e for e in exams}

    def get_by_id(self, exam_id: int):
        return self.exams.get(exam_id)


def make_student(student_id: int, name: str, *, class_id: int = 1, **kw) -> Student:
    kw.setdefault("academic_year_id", 1)
    kw.setdefault("guardian_mobile", f"0171000000{student_id % 10}")
    return Student(student_id=student_id, name=name, class_id=class_id, **kw)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 15, 10, 30, 0)


@pytest.fixture
def students() -> InMemoryStudents:
    return InMemoryStudents(
        [
            make_student(1, "Rahim", class_name="Class One", section_name="A"),
            make_student(2, "Karim", class_name="Class One", section_name="A"),
            make_student(3, "anika", class_id=2, class_name="Class Two", section_name="B"),
        ],
        classes=[
            SchoolClass(class_id=2, name="Class Two", grade_order=2),
            SchoolClass(class_id=1, name="Class One", grade_order=1),
        ],
    )


@pytest.fixture
def fee_records(students) -> InMemoryFeeRecords:
    return InMemoryFeeRecords(students)


@pytest.fixture
def custom_fees() -> InMemoryCustomFees:
    return InMemoryCustomFees()


@pytest.fixture
def class_fees() -> InMemoryClassFees:
    return InMemoryClassFees([ClassMonthlyFee(class_id=1, academic_year_id=1, amount=Decimal("1000"))])


@pytest.fixture
def new_student():
    return make_student


@pytest.fixture
def exams() -> InMemoryExams:
    return InMemoryExams([Exam(exam_id=7, academic_year_id=1, name="Half Yearly", exam_fee_amount=Decimal("300"))])
