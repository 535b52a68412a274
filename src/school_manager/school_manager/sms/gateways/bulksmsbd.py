from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ...common.money import ZERO, to_money
from .base import BalanceResponse, GatewayResponse, SmsGateway, normalize_bd_mobile

logger = logging.getLogger(__name__)

BULKSMSBD_URL = "http://bulksmsbd.net/api/smsapi"
BULKSMSBD_BALANCE_URL = "http://bulksmsbd.net/api/getBalanceApi"

RESPONSE_CODES = {
    "202": "SMS Sent Successfully",
    "1001": "Invalid Number",
    "1002": "Sender ID invalid or disabled",
    "1003": "Missing required fields",
    "1007": "Insufficient balance",
    "1031": "Account not verified",
    "1032": "IP not whitelisted",
}


class BulkSmsBdGateway(SmsGateway):
    """BulkSMSBD form-encoded API; success is response code 202."""

    name = "bulksmsbd"

    def __init__(self, api_key: Optional[str], sender_id: Optional[str], *, timeout: float = 15, http: Any = None):
        self._api_key = api_key
        self._sender_id = sender_id
        self._timeout = timeout
        self._http = http or requests

    def send(self, mobile_number: str, message: str) -> GatewayResponse:
        if not self._api_key or not self._sender_id:
            return GatewayResponse(success=False, error="BulkSMSBD API key or sender ID not configured")

        number = normalize_bd_mobile(mobile_number)
        try:
            resp = self._http.post(
                BULKSMSBD_URL,
                data={
                    "api_key": self._api_key,
                    "senderid": self._sender_id,
                    "number": number,
                    "message": message,
                },
                timeout=self._timeout,
            )
            result = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("BulkSMSBD API error: %s", exc)
            return GatewayResponse(success=False, error=str(exc))

        logger.debug("BulkSMSBD response for %s: %s", number, result)
        code = str(result.get("response_code") or result.get("code") or "")
        text = RESPONSE_CODES.get(code) or result.get("error_message") or result.get("message") or "Unknown response"
        if code == "202":
            return GatewayResponse(success=True, response_code=code, response_message=text)
        return GatewayResponse(success=False, error=text, response_code=code or None, response_message=text)

    def check_balance(self) -> BalanceResponse:
        if not self._api_key:
            return BalanceResponse(success=False, error="BulkSMSBD API key not configured")

        try:
            resp = self._http.get(BULKSMSBD_BALANCE_URL, params={"api_key": self._api_key}, timeout=self._timeout)
            result = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("BulkSMSBD balance check error: %s", exc)
            return BalanceResponse(success=False, error=str(exc))

        logger.debug("BulkSMSBD balance response: %s", result)
        if result.get("balance") is None:
            return BalanceResponse(success=False, error=result.get("error_message") or "Failed to get balance")
        try:
            balance = to_money(result["balance"])
        except ValueError:
            balance = ZERO
        return BalanceResponse(success=True, balance=balance)
