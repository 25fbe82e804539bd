"""
tests/test_wizard_api_client.py
Client used by the wizard and the contact form, against a mocked API.
Run: pytest tests/test_wizard_api_client.py -v
"""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest


def _client(handler):
    from quote_wizard.api_client import QuoteApiClient

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QuoteApiClient(base_url="https://api.example.com/", http_client=http), http


def _contact(**overrides):
    base = {
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(206) 555-0100",
        "message": "Can you look at my leaking shower?",
    }
    base.update(overrides)
    return base


class TestSubmitQuote:
    def test_returns_new_id(self):
        def handler(request):
            assert request.url == "https://api.example.com/functions/submit-quote"
            assert json.loads(request.content)["customer_name"] == "Jane Doe"
            return httpx.Response(200, json={"success": True, "id": "q-1"})

        async def run():
            client, http = _client(handler)
            async with http:
                return await client.submit_quote({"customer_name": "Jane Doe"})

        assert asyncio.run(run()) == "q-1"

    def test_validation_errors_are_itemized(self):
        from quote_wizard.api_client import QuoteApiError

        def handler(request):
            return httpx.Response(400, json={"success": False, "errors": ["Invalid email address"]})

        async def run():
            client, http = _client(handler)
            async with http:
                await client.submit_quote({})

        with pytest.raises(QuoteApiError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.is_validation_error
        assert exc_info.value.errors == ["Invalid email address"]

    def test_transport_failure(self):
        from quote_wizard.api_client import QuoteApiError

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async def run():
            client, http = _client(handler)
            async with http:
                await client.submit_quote({})

        with pytest.raises(QuoteApiError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.status_code == 0
        assert not exc_info.value.is_validation_error


class TestConfirmation:
    def test_fetches_by_id(self):
        def handler(request):
            assert request.url.path == "/quote-requests/q-1"
            return httpx.Response(200, json={"id": "q-1", "trackingId": "RQT-2025-0001"})

        async def run():
            client, http = _client(handler)
            async with http:
                return await client.get_confirmation("q-1")

        assert asyncio.run(run())["trackingId"] == "RQT-2025-0001"

    def test_missing_record(self):
        from quote_wizard.api_client import QuoteApiError

        async def run():
            client, http = _client(lambda request: httpx.Response(404, json={"detail": "x"}))
            async with http:
                await client.get_confirmation("nope")

        with pytest.raises(QuoteApiError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.status_code == 404


class TestSubmitContact:
    def test_short_message_never_reaches_network(self):
        from quote_wizard.api_client import ContactValidationError

        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        async def run():
            client, http = _client(handler)
            async with http:
                await client.submit_contact(_contact(message="Hello"))

        with pytest.raises(ContactValidationError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.errors == ["Message must be at least 10 characters"]
        assert calls == []

    def test_returns_tracking_id(self):
        def handler(request):
            return httpx.Response(200, json={
                "success": True, "trackingId": "MSG-2025-ABCD", "message": "ok",
            })

        async def run():
            client, http = _client(handler)
            async with http:
                return await client.submit_contact(_contact())

        assert asyncio.run(run()) == "MSG-2025-ABCD"

    def test_server_error_message_is_surfaced(self):
        from quote_wizard.api_client import QuoteApiError

        async def run():
            client, http = _client(
                lambda request: httpx.Response(500, json={"error": "Failed to save contact message"})
            )
            async with http:
                await client.submit_contact(_contact())

        with pytest.raises(QuoteApiError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.errors == ["Failed to save contact message"]
