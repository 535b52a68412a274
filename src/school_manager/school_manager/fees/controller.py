from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import login_required, month_arg, to_jsonable
from ..common.validators import int_arg, required_year
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/fees/balances", methods=["GET"], endpoint="fee_balances")
    @login_required
    def fee_balances():
        balances = container.balance_service.student_balances(
            academic_year_id=required_year(request.args.get("academic_year_id")),
            class_id=int_arg(request.args.get("class_id")),
            fee_month=month_arg(request.args.get("fee_month")),
        )
        return jsonify({"success": True, "balances": to_jsonable(balances)})

    @app.route("/api/fees/students/<int:student_id>/ledger", methods=["GET"], endpoint="fee_ledger")
    @login_required
    def fee_ledger(student_id: int):
        ledger = container.balance_service.student_ledger(
            student_id=student_id,
            academic_year_id=required_year(request.args.get("academic_year_id")),
        )
        return jsonify({"success": True, "ledger": to_jsonable(ledger)})

    @app.route("/api/fees/records/<int:record_id>/collect", methods=["POST"], endpoint="fee_collect")
    @login_required
    def fee_collect(record_id: int):
        data = request.get_json(silent=True) or {}
        if data.get("amount_paid") in (None, ""):
            raise ValidationError("আদায়ের পরিমাণ দিন")

        record = container.collection_service.collect(
            record_id=record_id,
            amount_paid=data.get("amount_paid"),
            late_fine=data.get("late_fine") or 0,
            collected_by=int_arg(session.get("user_id")),
        )
        return jsonify(
            {
                "success": True,
                "message": "ফি সফলভাবে আদায় হয়েছে",
                "receipt_number": record.receipt_number,
                "record": to_jsonable(record),
            }
        )

    @app.route("/api/fees/records", methods=["POST"], endpoint="fee_create_record")
    @login_required
    def fee_create_record():
        data = request.get_json(silent=True) or {}
        student_id = int_arg(data.get("student_id"))
        if not student_id:
            raise ValidationError("শিক্ষার্থী নির্বাচন করুন")

        created = container.generation_service.create_record(
            student_id=student_id,
            academic_year_id=required_year(data.get("academic_year_id")),
            fee_type=str(data.get("fee_type") or ""),
            amount_due=data.get("amount_due"),
            fee_month=month_arg(data.get("fee_month")),
            exam_id=int_arg(data.get("exam_id")),
        )
        return jsonify({"success": True, "created": created}), 201

    @app.route("/api/fees/generate", methods=["POST"], endpoint="fee_generate_monthly")
    @login_required
    def fee_generate_monthly():
        data = request.get_json(silent=True) or {}
        result = container.generation_service.generate_monthly(
            academic_year_id=required_year(data.get("academic_year_id")),
            fee_month=month_arg(data.get("fee_month")),
            class_id=int_arg(data.get("class_id")),
        )
        return jsonify(
            {
                "success": True,
                "message": f"{result.created} জন শিক্ষার্থীর মাসিক ফি তৈরি হয়েছে",
                "created": result.created,
                "skipped_existing": result.skipped_existing,
                "skipped_without_fee": result.skipped_without_fee,
            }
        )

    @app.route("/api/fees/generate-exam", methods=["POST"], endpoint="fee_generate_exam")
    @login_required
    def fee_generate_exam():
        data = request.get_json(silent=True) or {}
        exam_id = int_arg(data.get("exam_id"))
        if not exam_id:
            raise ValidationError("পরীক্ষা নির্বাচন করুন")

        result = container.generation_service.generate_exam(
            exam_id=exam_id,
            academic_year_id=required_year(data.get("academic_year_id")),
            class_id=int_arg(data.get("class_id")),
        )
        return jsonify(
            {
                "success": True,
                "message": f"{result.created} জন শিক্ষার্থীর পরীক্ষা ফি তৈরি হয়েছে",
                "created": result.created,
                "skipped_existing": result.skipped_existing,
            }
        )

    @app.route("/api/fees/class-fees", methods=["GET"], endpoint="class_fees_list")
    @login_required
    def class_fees_list():
        fees = container.custom_fee_service.class_fees(
            academic_year_id=required_year(request.args.get("academic_year_id")),
            class_id=int_arg(request.args.get("class_id")),
        )
        return jsonify({"success": True, "class_fees": to_jsonable(fees)})

    @app.route("/api/fees/class-fees/<int:class_id>", methods=["PUT", "POST"], endpoint="class_fee_save")
    @login_required
    def class_fee_save(class_id: int):
        data = request.get_json(silent=True) or {}
        saved = container.custom_fee_service.save_class_fee(
            class_id=class_id,
            academic_year_id=required_year(data.get("academic_year_id")),
            amount=data.get("amount"),
            admission_fee=data.get("admission_fee"),
            session_charge=data.get("session_charge"),
        )
        return jsonify({"success": True, "message": "শ্রেণী ফি সংরক্ষিত হয়েছে", "class_fee": to_jsonable(saved)})

    @app.route("/api/fees/students/<int:student_id>/custom-fee", methods=["GET"], endpoint="custom_fee_get")
    @login_required
    def custom_fee_get(student_id: int):
        fee = container.custom_fee_service.get(student_id)
        return jsonify({"success": True, "custom_fee": to_jsonable(fee) if fee else None})

    @app.route("/api/fees/students/<int:student_id>/custom-fee", methods=["PUT", "POST"], endpoint="custom_fee_save")
    @login_required
    def custom_fee_save(student_id: int):
        data = request.get_json(silent=True) or {}
        effective_from = None
        if data.get("effective_from"):
            try:
                effective_from = parse_iso_date(str(data["effective_from"]))
            except ValueError:
                raise ValidationError("কার্যকর তারিখ সঠিক নয় (YYYY-MM-DD)")

        saved = container.custom_fee_service.upsert(
            student_id=student_id,
            custom_monthly_fee=data.get("custom_monthly_fee"),
            custom_admission_fee=data.get("custom_admission_fee"),
            effective_from=effective_from,
        )
        if saved is None:
            return jsonify({"success": True, "message": "কাস্টম ফি মুছে ফেলা হয়েছে", "custom_fee": None})
        return jsonify({"success": True, "message": "কাস্টম ফি সংরক্ষিত হয়েছে", "custom_fee": to_jsonable(saved)})

    @app.route("/api/fees/students/<int:student_id>/effective-fee", methods=["GET"], endpoint="effective_fee")
    @login_required
    def effective_fee(student_id: int):
        class_id = int_arg(request.args.get("class_id"))
        if not class_id:
            raise ValidationError("শ্রেণী নির্বাচন করুন")

        amount = container.custom_fee_service.effective_monthly_fee(
            student_id=student_id,
            class_id=class_id,
            academic_year_id=required_year(request.args.get("academic_year_id")),
            fee_month=month_arg(request.args.get("fee_month")),
        )
        return jsonify({"success": True, "monthly_fee": str(amount)})
