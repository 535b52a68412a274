from datetime import date
from decimal import Decimal

from src.school_manager.school_manager.core.constants import ABSENT_TEMPLATE
from src.school_manager.school_manager.sms.templates import (
    format_bn_date,
    render_fee_due,
    render_placeholders,
    to_bengali_digits,
)


def test_fee_due_message_uses_thousands_separator():
    msg = render_fee_due(student_name="রহিম", class_name="প্রথম-ক", due_amount=Decimal("1500"))
    assert msg == "প্রিয় অভিভাবক, আপনার সন্তান রহিম (প্রথম-ক) এর ৳1,500 টাকা ফি বকেয়া আছে। দ্রুত পরিশোধ করুন।"


def test_absent_placeholders_are_substituted():
    msg = render_placeholders(
        ABSENT_TEMPLATE,
        {"StudentName": "রহিম", "Class": "প্রথম-ক", "Date": format_bn_date(date(2024, 6, 1)), "SchoolName": "আদর্শ স্কুল"},
    )
    assert "{{" not in msg
    assert "রহিম (প্রথম-ক)" in msg
    assert "১/৬/২০২৪" in msg
    assert msg.endswith("আদর্শ স্কুল")


def test_unknown_placeholder_is_left_alone():
    assert render_placeholders("{{Name}} {{Other}}", {"Name": "A"}) == "A {{Other}}"


def test_bengali_digits():
    assert to_bengali_digits("2024-03") == "২০২৪-০৩"
