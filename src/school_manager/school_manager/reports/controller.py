from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_fee_month
from ..common.http import csv_response, login_required, month_arg, to_jsonable
from ..common.validators import int_arg, required_year
from ..core.enums import FeeType
from ..core.exceptions import ValidationError
from ..container import Container

BALANCE_FIELDS = [
    "student_id",
    "student_id_number",
    "student_name",
    "student_name_bn",
    "total_due",
    "total_late_fine",
    "total_paid",
    "remaining",
    "status",
]

SUMMARY_FIELDS = [
    "class_name",
    "class_name_bn",
    "total_students",
    "total_due",
    "total_paid",
    "collection_rate",
]

DEFAULTER_FIELDS = [
    "student_id_number",
    "student_name",
    "student_name_bn",
    "class_name",
    "section_name",
    "guardian_mobile",
    "fee_type",
    "fee_month",
    "amount_due",
    "late_fine",
    "amount_paid",
    "remaining",
    "days_overdue",
]


def _fee_type_arg(value):
    if not value:
        return None
    try:
        return FeeType(value)
    except ValueError:
        raise ValidationError("ফি-এর ধরন সঠিক নয়")


def register(app: Flask, container: Container) -> None:
    def _wants_csv() -> bool:
        return request.args.get("format") == "csv"

    @app.route("/api/reports/class-collection", methods=["GET"], endpoint="report_class_collection")
    @login_required
    def report_class_collection():
        year_id = required_year(request.args.get("academic_year_id"))
        class_id = int_arg(request.args.get("class_id"))
        if not class_id:
            raise ValidationError("শ্রেণী নির্বাচন করুন")
        month = month_arg(request.args.get("fee_month"))

        rows = container.report_service.class_collection_report(
            academic_year_id=year_id, class_id=class_id, fee_month=month
        )
        if _wants_csv():
            suffix = format_fee_month(month) or "all"
            return csv_response(
                app,
                rows=rows,
                fieldnames=BALANCE_FIELDS,
                filename=f"class_{class_id}_collection_{suffix}.csv",
            )
        return jsonify({"success": True, "rows": to_jsonable(rows)})

    @app.route("/api/reports/monthly-summary", methods=["GET"], endpoint="report_monthly_summary")
    @login_required
    def report_monthly_summary():
        year_id = required_year(request.args.get("academic_year_id"))
        month = month_arg(request.args.get("fee_month"))
        if month is None:
            raise ValidationError("মাস নির্বাচন করুন")

        summary = container.report_service.monthly_collection_summary(academic_year_id=year_id, fee_month=month)
        if _wants_csv():
            return csv_response(
                app,
                rows=summary,
                fieldnames=SUMMARY_FIELDS,
                filename=f"monthly_summary_{format_fee_month(month)}.csv",
            )
        return jsonify({"success": True, "summary": to_jsonable(summary)})

    @app.route("/api/reports/defaulters", methods=["GET"], endpoint="report_defaulters")
    @login_required
    def report_defaulters():
        defaulters = container.report_service.defaulter_list(
            academic_year_id=required_year(request.args.get("academic_year_id")),
            class_id=int_arg(request.args.get("class_id")),
            fee_type=_fee_type_arg(request.args.get("fee_type")),
        )
        if _wants_csv():
            return csv_response(app, rows=defaulters, fieldnames=DEFAULTER_FIELDS, filename="defaulters.csv")
        return jsonify({"success": True, "defaulters": to_jsonable(defaulters), "count": len(defaulters)})

    @app.route("/api/reports/collection-stats", methods=["GET"], endpoint="report_collection_stats")
    @login_required
    def report_collection_stats():
        stats = container.report_service.collection_stats(
            academic_year_id=required_year(request.args.get("academic_year_id"))
        )
        return jsonify({"success": True, "stats": to_jsonable(stats)})
