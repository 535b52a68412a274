from __future__ import annotations

import csv
import io
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Iterable, Mapping, Optional, Sequence

from flask import Flask, jsonify, session

from ..core.exceptions import (
    ConcurrentUpdateError,
    DomainError,
    GatewayError,
    MissingConfigurationError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .datetime_utils import parse_fee_month

logger = logging.getLogger(__name__)

# Most specific first: ConcurrentUpdateError is a StoreError.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConcurrentUpdateError, 409),
    (MissingConfigurationError, 422),
    (GatewayError, 502),
    (StoreError, 503),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "অনুগ্রহ করে লগইন করুন"}), 401
        return view(*args, **kwargs)

    return wrapper


def to_jsonable(value: Any) -> Any:
    """Dataclasses, Decimal, dates and enums into plain JSON values."""

    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    return value


def error_response(exc: DomainError):
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(exc, kind):
            break
    else:
        status = 400

    if isinstance(exc, StoreError) and not isinstance(exc, ConcurrentUpdateError):
        message = "ডাটাবেস ত্রুটি, পরে আবার চেষ্টা করুন"
    else:
        message = str(exc)
    return jsonify({"success": False, "message": message}), status


def csv_response(app: Flask, *, rows: Iterable[Mapping[str, Any]], fieldnames: Sequence[str], filename: str):
    """CSV download with a UTF-8 BOM so spreadsheet apps pick up Bengali text."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(to_jsonable(row))

    return app.response_class(
        out.getvalue().encode("utf-8-sig"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if isinstance(exc, StoreError):
            logger.error("Store error: %s", exc)
        return error_response(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        # Flask routes HTTPException through here too; keep its own status.
        code = getattr(exc, "code", None)
        if isinstance(code, int):
            return jsonify({"success": False, "message": getattr(exc, "description", str(exc))}), code
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "সিস্টেম ত্রুটি"}), 500


def month_arg(value) -> Optional[date]:
    try:
        return parse_fee_month(value)
    except ValueError:
        raise ValidationError("মাস সঠিক নয় (YYYY-MM)")
