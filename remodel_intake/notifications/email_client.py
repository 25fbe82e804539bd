"""
Email delivery — remodel_intake/notifications/email_client.py
Outbound transactional email through the SendGrid v3 HTTP API.
"""
from __future__ import annotations

import logging
import os

import httpx

logger = logging.getLogger(__name__)

SENDGRID_API_URL = os.getenv("SENDGRID_API_URL", "https://api.sendgrid.com/v3/mail/send")


class SendGridClient:
    def __init__(
        self,
        api_key: str | None = None,
        from_email: str | None = None,
        from_name: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.getenv("SENDGRID_API_KEY", "")
        self.from_email = from_email or os.getenv("EMAIL_FROM", "noreply@rhinoremodeler.com")
        self.from_name = from_name or os.getenv("EMAIL_FROM_NAME", "Rhino Remodeler")
        self._http = http_client
        self._timeout = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to_email: str, subject: str, html: str, text: str) -> dict:
        """
        Send one message with text and HTML parts.

        Returns {"delivery_status": "sent" | "failed", "message_id": str | None}.
        Never raises: provider and transport errors are logged and reported as failed.
        """
        if not self.configured:
            logger.warning("SENDGRID_API_KEY not set — email to %s not sent", to_email)
            return {"delivery_status": "failed", "message_id": None}

        body = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {"email": self.from_email, "name": self.from_name},
            "subject": subject,
            # SendGrid requires text/plain before text/html
            "content": [
                {"type": "text/plain", "value": text},
                {"type": "text/html", "value": html},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            if self._http is not None:
                response = await self._http.post(SENDGRID_API_URL, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(SENDGRID_API_URL, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Email send to %s failed: %s", to_email, exc)
            return {"delivery_status": "failed", "message_id": None}

        if response.is_error:
            logger.error(
                "SendGrid rejected email to %s (%s): %s",
                to_email, response.status_code, response.text[:500],
            )
            return {"delivery_status": "failed", "message_id": None}

        message_id = response.headers.get("X-Message-Id")
        logger.info("Email sent to %s | subject=%s | id=%s", to_email, subject[:60], message_id)
        return {"delivery_status": "sent", "message_id": message_id}
