from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from ..common.datetime_utils import parse_fee_month
from ..common.validators import require_amount
from ..core.enums import FeeType
from ..core.exceptions import MissingConfigurationError, NotFoundError, ValidationError
from ..students.repository import StudentRepository
from .custom_fee_service import CustomFeeService
from .model import NewFeeRecord
from .repository import ClassFeeRepository, ExamRepository, FeeRecordRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    created: int
    skipped_existing: int
    skipped_without_fee: int


class FeeGenerationService:
    """Assess fees: monthly billing runs, admission/session charges, one-off records."""

    def __init__(
        self,
        records: FeeRecordRepository,
        students: StudentRepository,
        class_fees: ClassFeeRepository,
        custom_fees: CustomFeeService,
        *,
        exams: Optional[ExamRepository] = None,
        on_created: Optional[Callable[[int], None]] = None,
    ):
        self._records = records
        self._students = students
        self._class_fees = class_fees
        self._custom_fees = custom_fees
        self._exams = exams
        self._on_created = on_created

    def generate_monthly(
        self,
        *,
        academic_year_id: int,
        fee_month: date | str,
        class_id: Optional[int] = None,
    ) -> GenerationResult:
        month = parse_fee_month(fee_month)
        if month is None:
            raise ValidationError("মাস নির্বাচন করুন")

        class_fees = self._class_fees.list_for_year(academic_year_id=int(academic_year_id), class_id=class_id)
        if not class_fees:
            raise MissingConfigurationError("শ্রেণী ফি সেটআপ করা হয়নি")
        configured_classes = {f.class_id for f in class_fees}

        students = self._students.list_active(academic_year_id=int(academic_year_id), class_id=class_id)
        if not students:
            raise ValidationError("কোনো শিক্ষার্থী পাওয়া যায়নি")

        existing = self._records.student_ids_with_fee(
            academic_year_id=int(academic_year_id), fee_type=FeeType.MONTHLY, fee_month=month
        )
        pending = [s for s in students if s.student_id not in existing]
        if not pending:
            raise ValidationError("এই মাসের জন্য সব শিক্ষার্থীর ফি ইতিমধ্যে তৈরি আছে")

        new_records = []
        without_fee = 0
        for s in pending:
            if s.class_id not in configured_classes:
                without_fee += 1
                continue
            amount = self._custom_fees.effective_monthly_fee(
                student_id=s.student_id,
                class_id=s.class_id,
                academic_year_id=int(academic_year_id),
                fee_month=month,
            )
            # A zero fee (free studentship) is not billed at all.
            if amount <= 0:
                without_fee += 1
                continue
            new_records.append(
                NewFeeRecord(
                    student_id=s.student_id,
                    academic_year_id=int(academic_year_id),
                    fee_type=FeeType.MONTHLY,
                    fee_month=month,
                    amount_due=amount,
                )
            )

        if not new_records:
            raise MissingConfigurationError("শ্রেণী ফি সেট করা হয়নি")

        created = self._records.create_many(new_records)
        logger.info(
            "Monthly fees for %s: created=%d existing=%d without_class_fee=%d",
            month.strftime("%Y-%m"),
            created,
            len(students) - len(pending),
            without_fee,
        )
        self._notify(academic_year_id)
        return GenerationResult(
            created=created,
            skipped_existing=len(students) - len(pending),
            skipped_without_fee=without_fee,
        )

    def generate_admission(self, *, student_id: int, class_id: int, academic_year_id: int) -> int:
        """Admission + session charge for a newly admitted student; silently 0 when not configured."""

        class_fee = self._class_fees.get(class_id=int(class_id), academic_year_id=int(academic_year_id))
        if not class_fee:
            logger.info("No class fee settings for class %s, skipping admission fees", class_id)
            return 0

        admission = self._custom_fees.effective_admission_fee(
            student_id=int(student_id), class_id=int(class_id), academic_year_id=int(academic_year_id)
        )
        new_records = []
        for fee_type, amount in ((FeeType.ADMISSION, admission), (FeeType.SESSION, class_fee.session_charge)):
            if amount > 0:
                new_records.append(
                    NewFeeRecord(
                        student_id=int(student_id),
                        academic_year_id=int(academic_year_id),
                        fee_type=fee_type,
                        amount_due=amount,
                    )
                )

        created = self._records.create_many(new_records)
        if created:
            self._notify(academic_year_id)
        return created

    def generate_exam(self, *, exam_id: int, academic_year_id: int, class_id: Optional[int] = None) -> GenerationResult:
        """Bill the exam's fee to every active student (of one class, if given) not yet billed for it."""

        if self._exams is None:
            raise MissingConfigurationError("Exam fee generation needs the exam store")

        exam = self._exams.get_by_id(int(exam_id))
        if not exam:
            raise NotFoundError("পরীক্ষা পাওয়া যায়নি")
        if exam.exam_fee_amount <= 0:
            raise MissingConfigurationError("পরীক্ষার ফি নির্ধারণ করা হয়নি")

        students = self._students.list_active(academic_year_id=int(academic_year_id), class_id=class_id)
        if not students:
            raise ValidationError("কোনো শিক্ষার্থী পাওয়া যায়নি")

        existing = self._records.student_ids_with_fee(
            academic_year_id=int(academic_year_id), fee_type=FeeType.EXAM, fee_month=None, exam_id=exam.exam_id
        )
        pending = [s for s in students if s.student_id not in existing]
        if not pending:
            raise ValidationError("এই পরীক্ষার জন্য সব শিক্ষার্থীর ফি ইতিমধ্যে তৈরি আছে")

        created = self._records.create_many(
            [
                NewFeeRecord(
                    student_id=s.student_id,
                    academic_year_id=int(academic_year_id),
                    fee_type=FeeType.EXAM,
                    exam_id=exam.exam_id,
                    amount_due=exam.exam_fee_amount,
                )
                for s in pending
            ]
        )
        logger.info("Exam fees for exam %s: created=%d existing=%d", exam.exam_id, created, len(students) - len(pending))
        self._notify(academic_year_id)
        return GenerationResult(created=created, skipped_existing=len(students) - len(pending), skipped_without_fee=0)

    def create_record(
        self,
        *,
        student_id: int,
        academic_year_id: int,
        fee_type: FeeType | str,
        amount_due: Any,
        fee_month: Optional[date | str] = None,
        exam_id: Optional[int] = None,
    ) -> int:
        try:
            kind = FeeType(fee_type)
        except ValueError:
            raise ValidationError("ফি-এর ধরন সঠিক নয়")

        amount: Decimal = require_amount(amount_due, "ফি-এর পরিমাণ")
        if amount == 0:
            raise ValidationError("ফি-এর পরিমাণ শূন্যের বেশি হতে হবে")
        record = NewFeeRecord(
            student_id=int(student_id),
            academic_year_id=int(academic_year_id),
            fee_type=kind,
            amount_due=amount,
            fee_month=parse_fee_month(fee_month),
            exam_id=int(exam_id) if exam_id else None,
        )
        created = self._records.create_many([record])
        self._notify(academic_year_id)
        return created

    def _notify(self, academic_year_id: int) -> None:
        if self._on_created:
            self._on_created(int(academic_year_id))
