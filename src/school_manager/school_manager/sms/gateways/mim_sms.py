from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .base import GatewayResponse, SmsGateway

logger = logging.getLogger(__name__)

MIM_SMS_URL = "https://api.mimsms.com/api/SmsSending/MimSingleSms"


class MimSmsGateway(SmsGateway):
    """MiM SMS single-send API (JSON body, unicode message type)."""

    name = "mim_sms"

    def __init__(self, api_key: Optional[str], sender_id: Optional[str], *, timeout: float = 15, http: Any = None):
        self._api_key = api_key
        self._sender_id = sender_id
        self._timeout = timeout
        self._http = http or requests

    def send(self, mobile_number: str, message: str) -> GatewayResponse:
        if not self._api_key or not self._sender_id:
            return GatewayResponse(success=False, error="SMS API key or sender ID not configured")

        try:
            resp = self._http.post(
                MIM_SMS_URL,
                json={
                    "ApiKey": self._api_key,
                    "SenderId": self._sender_id,
                    "MobileNo": mobile_number,
                    "Message": message,
                    "MsgType": "UNI",
                },
                timeout=self._timeout,
            )
            result = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("mimSMS API error: %s", exc)
            return GatewayResponse(success=False, error=str(exc))

        logger.debug("mimSMS response: %s", result)
        if result.get("Status") == "Success" or result.get("status") == "success":
            return GatewayResponse(success=True, response_code="200", response_message="Success")

        text = result.get("Message") or result.get("message") or "Unknown error"
        return GatewayResponse(success=False, error=text, response_message=text)
