"""
SMS Service for the Student Portal
==================================
Sends one-time login codes through the HTTP SMS gateway.

Delivery is best effort: every failure is logged and reported as ``False``,
never raised, so a gateway outage cannot change an HTTP response.
"""

from typing import Optional
import httpx

from portal.core.config import settings
from portal.core.logging_config import logger


class SMSService:
    """Async client for the sender.ge style GET gateway"""

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_url = api_url or settings.SMS_API_URL
        self.api_key = api_key if api_key is not None else settings.SMS_API_KEY
        self.timeout = timeout or settings.SMS_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    async def send_sms(self, destination: str, content: str) -> bool:
        if not self.is_configured:
            logger.warning("[SMS] SMS gateway not configured, skipping send")
            return False

        params = {
            "apikey": self.api_key,
            "smsno": 1,
            "destination": destination,
            "content": content,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.api_url, params=params)
        except httpx.HTTPError as e:
            logger.error(
                f"[SMS] Failed to reach gateway for {destination}: {e}",
                extra={"event_type": "sms", "destination": destination},
            )
            return False

        if response.is_success:
            logger.info(f"[SMS] Sent message to {destination}", extra={"event_type": "sms", "destination": destination})
            return True

        logger.error(
            f"[SMS] Gateway answered {response.status_code} for {destination}",
            extra={"event_type": "sms", "destination": destination, "http_status": response.status_code},
        )
        return False

    async def send_otp(self, phone: str, code: str) -> bool:
        return await self.send_sms(phone, f"Your verification code is: {code}")


sms_service = SMSService()
