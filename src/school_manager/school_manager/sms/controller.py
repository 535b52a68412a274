from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import login_required
from ..common.money import to_money
from ..common.validators import int_arg, required_year
from ..core.exceptions import ValidationError
from ..container import Container
from .model import FeeDueItem
from .service import parse_provider


def _fee_due_items(raw_items) -> list[FeeDueItem]:
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("কোনো শিক্ষার্থী নির্বাচন করা হয়নি")

    items = []
    for raw in raw_items:
        try:
            due = to_money(raw.get("due_amount"))
        except (AttributeError, ValueError):
            raise ValidationError("বকেয়ার পরিমাণ সঠিক নয়")
        items.append(
            FeeDueItem(
                student_name=str(raw.get("student_name") or ""),
                class_name=str(raw.get("class_name") or ""),
                due_amount=due,
                guardian_mobile=str(raw.get("guardian_mobile") or ""),
                student_id=int_arg(raw.get("student_id")),
            )
        )
    return items


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sms/send", methods=["POST"], endpoint="sms_send")
    @login_required
    def sms_send():
        payload = request.get_json(silent=True) or {}
        result = container.sms_dispatcher.handle_request(payload)
        return jsonify(result)

    @app.route("/api/sms/fee-due", methods=["POST"], endpoint="sms_fee_due")
    @login_required
    def sms_fee_due():
        data = request.get_json(silent=True) or {}
        items = _fee_due_items(data.get("items"))
        result = container.sms_dispatcher.send_bulk_fee_due(items)
        return jsonify(result.as_dict())

    @app.route("/api/sms/fee-due/defaulters", methods=["POST"], endpoint="sms_fee_due_defaulters")
    @login_required
    def sms_fee_due_defaulters():
        """One reminder per defaulting student, summing what is left across their records."""

        data = request.get_json(silent=True) or {}
        defaulters = container.report_service.defaulter_list(
            academic_year_id=required_year(data.get("academic_year_id")),
            class_id=int_arg(data.get("class_id")),
        )

        by_student: dict[int, FeeDueItem] = {}
        for d in defaulters:
            seen = by_student.get(d.student_id)
            by_student[d.student_id] = FeeDueItem(
                student_name=d.student_name_bn or d.student_name,
                class_name=d.class_name,
                due_amount=d.remaining + (seen.due_amount if seen else 0),
                guardian_mobile=d.guardian_mobile or "",
                student_id=d.student_id,
            )

        result = container.sms_dispatcher.send_bulk_fee_due(list(by_student.values()))
        return jsonify(result.as_dict())

    @app.route("/api/sms/test", methods=["POST"], endpoint="sms_test")
    @login_required
    def sms_test():
        data = request.get_json(silent=True) or {}
        result = container.sms_dispatcher.handle_request({**data, "action": "test_sms"})
        return jsonify(result)

    @app.route("/api/sms/balance", methods=["GET"], endpoint="sms_balance")
    @login_required
    def sms_balance():
        balance = container.sms_dispatcher.check_balance(parse_provider(request.args.get("provider")))
        return jsonify({"success": True, "balance": str(balance)})
