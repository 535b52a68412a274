from __future__ import annotations

from decimal import Decimal

import requests

from src.school_manager.school_manager.core.enums import SmsProvider
from src.school_manager.school_manager.sms.gateways.base import normalize_bd_mobile
from src.school_manager.school_manager.sms.gateways.bulksmsbd import BULKSMSBD_BALANCE_URL, BULKSMSBD_URL, BulkSmsBdGateway
from src.school_manager.school_manager.sms.gateways.factory import SmsGatewayFactory
from src.school_manager.school_manager.sms.gateways.mim_sms import MIM_SMS_URL, MimSmsGateway
from src.school_manager.school_manager.sms.model import SmsSettings


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeHttp:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return FakeResponse(self.payload)

    get = post


def test_normalize_bd_mobile():
    assert normalize_bd_mobile("01712345678") == "8801712345678"
    assert normalize_bd_mobile("+880 1712-345678") == "8801712345678"
    assert normalize_bd_mobile("") == ""


def test_mim_sms_posts_unicode_json_and_reads_status():
    http = FakeHttp({"Status": "Success"})
    res = MimSmsGateway("key", "SENDER", timeout=3, http=http).send("01712345678", "হ্যালো")

    assert res.success
    url, kwargs = http.calls[0]
    assert url == MIM_SMS_URL
    assert kwargs["json"]["MsgType"] == "UNI"
    assert kwargs["json"]["MobileNo"] == "01712345678"
    assert kwargs["timeout"] == 3


def test_mim_sms_failure_carries_provider_message():
    http = FakeHttp({"Status": "Failed", "Message": "Invalid API key"})
    res = MimSmsGateway("key", "SENDER", http=http).send("01712345678", "x")
    assert not res.success
    assert res.error == "Invalid API key"


def test_gateway_without_credentials_does_not_call_out():
    http = FakeHttp({"Status": "Success"})
    assert not MimSmsGateway(None, "S", http=http).send("017", "x").success
    assert not BulkSmsBdGateway("k", "", http=http).send("017", "x").success
    assert http.calls == []


def test_transport_error_becomes_failure():
    http = FakeHttp(error=requests.ConnectionError("boom"))
    res = BulkSmsBdGateway("k", "S", http=http).send("01712345678", "x")
    assert not res.success
    assert "boom" in res.error


def test_bulksmsbd_success_is_code_202_and_number_is_prefixed():
    http = FakeHttp({"response_code": 202})
    res = BulkSmsBdGateway("k", "S", http=http).send("01712345678", "x")

    assert res.success
    assert res.response_code == "202"
    url, kwargs = http.calls[0]
    assert url == BULKSMSBD_URL
    assert kwargs["data"]["number"] == "8801712345678"


def test_bulksmsbd_error_code_maps_to_text():
    http = FakeHttp({"response_code": 1007})
    res = BulkSmsBdGateway("k", "S", http=http).send("01712345678", "x")
    assert not res.success
    assert res.error == "Insufficient balance"
    assert res.response_code == "1007"


def test_factory_picks_active_provider():
    factory = SmsGatewayFactory(timeout=5, http=FakeHttp())
    mim = SmsSettings(is_enabled=True, active_provider=SmsProvider.MIM_SMS, api_key="k", sender_id="s")
    bulk = SmsSettings(is_enabled=True, active_provider=SmsProvider.BULKSMSBD, bulksmsbd_api_key="k")

    assert isinstance(factory.for_settings(mim), MimSmsGateway)
    assert isinstance(factory.for_settings(bulk), BulkSmsBdGateway)


def test_factory_builds_requested_provider_regardless_of_active_one():
    factory = SmsGatewayFactory(http=FakeHttp())
    settings = SmsSettings(is_enabled=False, active_provider=SmsProvider.MIM_SMS, bulksmsbd_api_key="k")

    assert isinstance(factory.for_provider(settings, SmsProvider.BULKSMSBD), BulkSmsBdGateway)
    assert isinstance(factory.for_provider(settings, SmsProvider.MIM_SMS), MimSmsGateway)


def test_bulksmsbd_balance_reads_amount():
    http = FakeHttp({"balance": "842.75"})
    res = BulkSmsBdGateway("k", None, timeout=4, http=http).check_balance()

    assert res.success
    assert res.balance == Decimal("842.75")
    url, kwargs = http.calls[0]
    assert url == BULKSMSBD_BALANCE_URL
    assert kwargs == {"params": {"api_key": "k"}, "timeout": 4}


def test_bulksmsbd_balance_errors():
    res = BulkSmsBdGateway("k", "S", http=FakeHttp({"error_message": "Invalid API key"})).check_balance()
    assert (res.success, res.error) == (False, "Invalid API key")

    res = BulkSmsBdGateway("k", "S", http=FakeHttp(error=requests.Timeout("slow"))).check_balance()
    assert not res.success and "slow" in res.error

    http = FakeHttp({"balance": "1"})
    assert not BulkSmsBdGateway(None, "S", http=http).check_balance().success
    assert http.calls == []


def test_mim_sms_has_no_balance_api():
    res = MimSmsGateway("k", "S", http=FakeHttp()).check_balance()
    assert not res.success
    assert "no balance API" in res.error
