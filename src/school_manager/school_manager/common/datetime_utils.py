from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_fee_month(value: str | date | None) -> date | None:
    """Normalise a billing month to the first day of that month.

    Accepts ``YYYY-MM``, ``YYYY-MM-DD`` or a ``date``. Empty values give ``None``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.replace(day=1)

    v = value.strip()
    if not v:
        return None
    fmt = "%Y-%m" if len(v) == 7 else "%Y-%m-%d"
    return datetime.strptime(v, fmt).date().replace(day=1)


def format_fee_month(value: date | None) -> str | None:
    return value.strftime("%Y-%m") if value else None


def whole_days_between(start: datetime, end: datetime) -> int:
    """Floor of (end - start) in days; negative spans round towards -inf."""
    return int((end - start).total_seconds() // 86400)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_iso_datetime(value: str | datetime) -> datetime:
    """ISO timestamp (``Z`` suffix allowed) as naive local time."""

    if isinstance(value, datetime):
        parsed = value
    else:
        v = value.strip()
        if v.endswith("Z"):
            v = v[:-1] + "+00:00"
        parsed = datetime.fromisoformat(v)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
