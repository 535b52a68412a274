"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

RECEIPT_PREFIX = "RCP"
RECEIPT_SUFFIX_LENGTH = 4
MAX_PAYMENT_ATTEMPTS = 3

DEFAULT_BALANCE_CACHE_TTL_SECONDS = 60
DEFAULT_SMS_MAX_CONCURRENCY = 5
DEFAULT_SMS_HTTP_TIMEOUT = 15

DEFAULT_SCHOOL_NAME = "স্কুল"

FEE_DUE_TEMPLATE = (
    "প্রিয় অভিভাবক, আপনার সন্তান {student_name} ({class_name}) এর "
    "৳{due_amount} টাকা ফি বকেয়া আছে। দ্রুত পরিশোধ করুন।"
)
ABSENT_TEMPLATE = (
    "প্রিয় অভিভাবক, আপনার সন্তান {{StudentName}} ({{Class}}) আজ {{Date}} "
    "স্কুলে অনুপস্থিত। - {{SchoolName}}"
)
PUNCH_TEMPLATE = (
    "প্রিয় অভিভাবক, আপনার সন্তান {{StudentName}} ({{Class}}) আজ {{Date}} "
    "সকাল {{Time}} এ স্কুলে এসেছে। - {{SchoolName}}"
)
LATE_TEMPLATE = (
    "প্রিয় অভিভাবক, আপনার সন্তান {{StudentName}} ({{Class}}) আজ {{Date}} "
    "স্কুলে {{LateMinutes}} মিনিট দেরিতে এসেছে। - {{SchoolName}}"
)
