from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...core.enums import SmsProvider
from ..model import SmsSettings
from .base import SmsGateway
from .bulksmsbd import BulkSmsBdGateway
from .mim_sms import MimSmsGateway


@dataclass
class SmsGatewayFactory:
    """Factory Pattern: pick the gateway for the provider active in settings."""

    timeout: float = 15
    http: Any = None

    def for_settings(self, settings: SmsSettings) -> SmsGateway:
        return self.for_provider(settings, settings.active_provider)

    def for_provider(self, settings: SmsSettings, provider: SmsProvider) -> SmsGateway:
        """Gateway for ``provider`` with its credentials from settings, active or not."""

        if provider == SmsProvider.BULKSMSBD:
            return BulkSmsBdGateway(
                settings.bulksmsbd_api_key,
                settings.bulksmsbd_sender_id,
                timeout=self.timeout,
                http=self.http,
            )
        return MimSmsGateway(settings.api_key, settings.sender_id, timeout=self.timeout, http=self.http)
