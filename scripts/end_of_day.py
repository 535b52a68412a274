"""End-of-day job: mark students without attendance as absent, then notify guardians.

Run once per school day after the last punch, e.g. from cron:

    python scripts/end_of_day.py --academic-year 3 [--date 2024-03-14] [--no-sms]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from datetime import date
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_manager.school_manager.common.datetime_utils import parse_iso_date
from src.school_manager.school_manager.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--academic-year", type=int, required=True)
    parser.add_argument("--date", type=parse_iso_date, default=date.today())
    parser.add_argument("--no-sms", action="store_true", help="only write absent rows")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        sms_max_concurrency=int(getattr(settings, "SMS_MAX_CONCURRENCY", 5)),
        sms_http_timeout=float(getattr(settings, "SMS_HTTP_TIMEOUT", 15)),
        school_name=str(getattr(settings, "SCHOOL_NAME", "স্কুল")),
    )

    if args.no_sms:
        written = container.attendance_service.reconcile_day(
            attendance_date=args.date, academic_year_id=args.academic_year
        )
        print(f"OK: {written} students marked absent on {args.date.isoformat()}")
        return

    # send_bulk_absent reconciles the day itself before reading absences.
    result = container.sms_dispatcher.send_bulk_absent(attendance_date=args.date, academic_year_id=args.academic_year)
    print(f"Absent SMS {args.date.isoformat()}: {result.as_dict()}")


if __name__ == "__main__":
    main()
