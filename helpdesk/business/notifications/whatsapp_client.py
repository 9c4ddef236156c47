"""
Fonnte WhatsApp API client

Sends plain-text messages through POST {base_url}/send. Failures are
reported in the returned SendResult and never raised, so a notification
can not break the operation that triggered it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from helpdesk.business.notifications.phone import DEFAULT_COUNTRY_CODE
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.notifications.whatsapp")

# HTTP status codes below this are considered successful
HTTP_SUCCESS_THRESHOLD = 400


@dataclass(frozen=True)
class SendResult:
    status: bool
    detail: Optional[str] = None
    id: Optional[str] = None


class WhatsAppClient:
    """HTTP client for the Fonnte send-message endpoint"""

    def __init__(self, api_key: Optional[str], base_url: str = 'https://api.fonnte.com',
                 country_code: str = DEFAULT_COUNTRY_CODE, timeout: int = 15):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.country_code = country_code
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
        }

    def send_message(self, target: str, message: str, country_code: Optional[str] = None) -> SendResult:
        """
        Send a WhatsApp message.

        Args:
            target: Phone number with country code (e.g. 628123456789)
            message: Message text (WhatsApp markdown)
            country_code: Overrides the client default

        Returns:
            SendResult: status True when Fonnte accepted the message
        """
        if not self.api_key:
            logger.error("FONNTE_API_KEY not configured, message not sent")
            return SendResult(status=False, detail="API key not configured")

        payload = {
            "target": target,
            "message": message,
            "countryCode": country_code or self.country_code,
        }

        try:
            response = requests.post(
                f"{self.base_url}/send",
                json=payload,
                headers=self._build_headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Fonnte send error for {target}: {e}")
            return SendResult(status=False, detail=str(e))

        try:
            data: Dict[str, Any] = response.json()
        except ValueError:
            data = {"detail": response.text[:200]}

        if response.status_code >= HTTP_SUCCESS_THRESHOLD:
            logger.warning(f"Fonnte HTTP {response.status_code} for {target}: {data}")
            return SendResult(status=False, detail=str(data.get("detail") or f"HTTP {response.status_code}"))

        result = SendResult(
            status=data.get("status") is True,
            detail=data.get("detail") or data.get("reason"),
            id=str(data["id"]) if data.get("id") is not None else None,
        )
        if result.status:
            logger.info(f"WhatsApp message sent to {target}")
        else:
            logger.warning(f"Fonnte rejected message to {target}: {result.detail}")
        return result
