from datetime import date, datetime
from decimal import Decimal

import pytest

from src.school_manager.school_manager.common.cache import TtlCache
from src.school_manager.school_manager.common.datetime_utils import parse_fee_month, whole_days_between
from src.school_manager.school_manager.common.money import format_amount, to_money
from src.school_manager.school_manager.common.validators import int_arg, require_amount, required_year
from src.school_manager.school_manager.core.exceptions import ValidationError


def test_parse_fee_month_normalises_to_first_day():
    assert parse_fee_month("2024-03") == date(2024, 3, 1)
    assert parse_fee_month("2024-03-17") == date(2024, 3, 1)
    assert parse_fee_month(date(2024, 3, 17)) == date(2024, 3, 1)
    assert parse_fee_month("") is None
    assert parse_fee_month(None) is None
    with pytest.raises(ValueError):
        parse_fee_month("March")


def test_whole_days_between_floors():
    assert whole_days_between(datetime(2024, 3, 1, 12), datetime(2024, 3, 3, 11)) == 1
    assert whole_days_between(datetime(2024, 3, 1, 12), datetime(2024, 3, 3, 12)) == 2


def test_money_helpers():
    assert to_money("12.50") == Decimal("12.50")
    assert to_money(None) == Decimal("0")
    assert to_money(0.1) == Decimal("0.1")
    with pytest.raises(ValueError):
        to_money("12,5x")
    assert format_amount(Decimal("1500.00")) == "1,500"
    assert format_amount(Decimal("1234567.5")) == "1,234,567.5"


def test_ttl_cache_expires_and_invalidates_by_tag():
    now = [0.0]
    cache = TtlCache(10, clock=lambda: now[0])
    loads = []

    def loader():
        loads.append(1)
        return len(loads)

    assert cache.get_or_load("k", loader, tags=lambda v: {"a"}) == 1
    assert cache.get_or_load("k", loader) == 1

    now[0] = 11.0
    assert cache.get_or_load("k", loader, tags=lambda v: {"a"}) == 2

    assert cache.invalidate("b") == 0
    assert cache.invalidate("a") == 1
    assert len(cache) == 0


def test_ttl_zero_never_caches():
    cache = TtlCache(0)
    calls = []
    cache.get_or_load("k", lambda: calls.append(1))
    cache.get_or_load("k", lambda: calls.append(1))
    assert len(calls) == 2


@pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", "sNaN", float("nan"), float("inf"), Decimal("NaN")])
def test_to_money_rejects_non_finite_values(value):
    with pytest.raises(ValueError):
        to_money(value)
    with pytest.raises(ValidationError):
        require_amount(value, "Amount")


def test_expired_entries_are_dropped_on_next_store():
    now = [0.0]
    cache = TtlCache(10, clock=lambda: now[0])
    for i in range(5):
        cache.get_or_load(("year", i), lambda: i)
    assert len(cache) == 5

    now[0] = 30.0
    cache.get_or_load(("year", 99), lambda: 99)
    assert len(cache) == 1


def test_empty_cache_instance_is_still_used():
    cache = TtlCache(60)
    assert len(cache) == 0 and not cache
    calls = []
    cache.get_or_load("k", lambda: calls.append(1))
    cache.get_or_load("k", lambda: calls.append(1))
    assert calls == [1]


def test_numeric_query_helpers_reject_garbage():
    assert int_arg("7") == 7
    assert int_arg("") is None
    with pytest.raises(ValidationError):
        int_arg("abc")
    with pytest.raises(ValidationError):
        required_year(None)
    with pytest.raises(ValidationError):
        required_year("2024x")
