"""
quote_wizard/api_client.py
HTTP client for the intake API used by the quote wizard and the contact form.
"""
from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from remodel_intake.validation import validate_contact_submission

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"


class QuoteApiError(Exception):
    """The API refused or failed a request. `errors` holds its messages."""

    def __init__(self, status_code: int, errors: list[str]) -> None:
        self.status_code = status_code
        self.errors = errors
        super().__init__("; ".join(errors) or f"HTTP {status_code}")

    @property
    def is_validation_error(self) -> bool:
        return self.status_code == 400


class ContactValidationError(ValueError):
    """Raised before any network call when the contact form fails validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))


class QuoteApiClient:
    def __init__(self, base_url: str | None = None, http_client: httpx.AsyncClient | None = None,
                 timeout: float = 15.0) -> None:
        self.base_url = (base_url or os.getenv("QUOTE_API_URL", DEFAULT_API_URL)).rstrip("/")
        self._http = http_client
        self._timeout = timeout

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._http is not None:
                return await self._http.request(method, url, **kwargs)
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise QuoteApiError(0, ["Could not reach the server. Please try again."]) from exc

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def submit_quote(self, payload: dict[str, Any]) -> str:
        """POST the quote request and return the new record's id."""
        response = await self._request("POST", "/functions/submit-quote", json=payload)
        body = self._json(response)
        if response.status_code != 200 or not body.get("success") or not body.get("id"):
            errors = body.get("errors") or ["Failed to submit quote request"]
            raise QuoteApiError(response.status_code, list(errors))
        return body["id"]

    async def get_confirmation(self, quote_id: str) -> dict[str, Any]:
        response = await self._request("GET", f"/quote-requests/{quote_id}")
        if response.status_code == 404:
            raise QuoteApiError(404, ["Quote request not found"])
        if response.status_code != 200:
            raise QuoteApiError(response.status_code, ["Could not load quote request"])
        return self._json(response)

    async def submit_contact(self, form: dict[str, Any]) -> str:
        """
        Send the contact form and return its tracking id.

        The form is checked with the same rules the server applies; a form
        that fails them never leaves the client.
        """
        errors = validate_contact_submission(form)
        if errors:
            raise ContactValidationError(errors)

        response = await self._request("POST", "/functions/submit-contact", json=form)
        body = self._json(response)
        if response.status_code != 200:
            message = body.get("error") or "Failed to send message"
            raise QuoteApiError(response.status_code, [message])
        return body["trackingId"]
