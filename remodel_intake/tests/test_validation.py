"""
remodel_intake/tests/test_validation.py
Unit tests for the shared field rules, sanitization and tracking ids.
Run: pytest remodel_intake/tests/test_validation.py -v
"""
from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest


def _quote(**overrides) -> dict:
    base = {
        "customer_name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(206) 555-0100",
        "service_requested": "Kitchen Remodeling",
        "property_city": "Kent",
        "property_state": "WA",
        "message": "Full kitchen remodel",
    }
    base.update(overrides)
    return base


def _contact(**overrides) -> dict:
    base = {
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(206) 555-0100",
        "message": "I would like a quote for my deck.",
    }
    base.update(overrides)
    return base


# ---------------------------------------------------------------------------
# Field predicates
# ---------------------------------------------------------------------------


class TestFieldPredicates:
    @pytest.mark.parametrize("value", ["a@b.co", "jane.doe+x@example.com"])
    def test_valid_emails(self, value):
        from remodel_intake.validation import validate_email

        assert validate_email(value)

    @pytest.mark.parametrize("value", ["", "bad", "a@b", "a b@c.com", None])
    def test_invalid_emails(self, value):
        from remodel_intake.validation import validate_email

        assert not validate_email(value)

    def test_phone_is_optional(self):
        from remodel_intake.validation import validate_phone

        assert validate_phone(None)
        assert validate_phone("")

    def test_phone_accepts_any_separator_style(self):
        from remodel_intake.validation import validate_phone

        assert validate_phone("206-555-0100")
        assert validate_phone("(206) 555 0100")
        assert validate_phone("2065550100")

    def test_phone_rejects_wrong_digit_count(self):
        from remodel_intake.validation import validate_phone

        assert not validate_phone("555-0100")
        assert not validate_phone("+1 206 555 0100")

    def test_format_phone_progressive(self):
        from remodel_intake.validation import format_phone

        assert format_phone("") == ""
        assert format_phone("20") == "(20"
        assert format_phone("20655") == "(206) 55"
        assert format_phone("2065550100") == "(206) 555-0100"
        assert format_phone("206555010099") == "(206) 555-0100"

    def test_format_then_normalize_round_trips(self):
        from remodel_intake.validation import format_phone, is_formatted_phone, normalize_phone

        for digits in ("2065550100", "4255551234", "0000000000"):
            formatted = format_phone(digits)
            assert is_formatted_phone(formatted)
            assert normalize_phone(formatted) == digits


# ---------------------------------------------------------------------------
# Quote submissions
# ---------------------------------------------------------------------------


class TestQuoteValidation:
    def test_valid_payload_has_no_errors(self):
        from remodel_intake.validation import validate_quote_submission

        assert validate_quote_submission(_quote()) == []

    def test_missing_fields_all_reported(self):
        from remodel_intake.validation import validate_quote_submission

        errors = validate_quote_submission({})
        assert "Customer name is required" in errors
        assert "Email is required" in errors
        assert "Service requested is required" in errors

    def test_whitespace_name_is_missing(self):
        from remodel_intake.validation import validate_quote_submission

        assert validate_quote_submission(_quote(customer_name="   ")) == ["Customer name is required"]

    def test_invalid_email_and_phone(self):
        from remodel_intake.validation import validate_quote_submission

        errors = validate_quote_submission(_quote(email="nope", phone="123"))
        assert errors == ["Invalid email address", "Invalid phone number format"]

    def test_length_limits(self):
        from remodel_intake.validation import validate_quote_submission

        errors = validate_quote_submission(_quote(customer_name="x" * 101, message="m" * 2001))
        assert "Customer name must be less than 100 characters" in errors
        assert "Message must be less than 2000 characters" in errors

    def test_non_string_field_is_a_type_error(self):
        from remodel_intake.validation import validate_quote_submission

        errors = validate_quote_submission(_quote(customer_name=42))
        assert errors == ["Customer name must be a string"]

    def test_image_limit(self):
        from remodel_intake.validation import validate_quote_submission

        urls = [f"quotes/p{i}.jpg" for i in range(11)]
        assert validate_quote_submission(_quote(image_urls=urls)) == ["Maximum 10 images allowed"]
        assert validate_quote_submission(_quote(image_urls="one.jpg")) == ["Image URLs must be a list of strings"]

    def test_null_counts_as_missing(self):
        from remodel_intake.validation import validate_quote_submission

        assert validate_quote_submission(_quote(email=None)) == ["Email is required"]

    def test_every_bad_image_item_reported_once(self):
        from remodel_intake.validation import validate_quote_submission

        errors = validate_quote_submission(_quote(image_urls=["a.jpg", 1, 2]))
        assert errors == ["Image URLs must be a list of strings"]

    def test_parsed_submission_is_trimmed(self):
        from remodel_intake.validation import parse_quote_submission

        submission, errors = parse_quote_submission(_quote(customer_name="  Jane Doe ", property_state=" "))
        assert errors == []
        assert submission.customer_name == "Jane Doe"
        assert submission.property_state == ""
        assert submission.image_urls is None

    def test_validation_is_pure_and_idempotent(self):
        from remodel_intake.validation import validate_quote_submission

        payload = _quote(email="bad", phone="12")
        snapshot = copy.deepcopy(payload)
        first = validate_quote_submission(payload)
        second = validate_quote_submission(payload)
        assert first == second
        assert payload == snapshot


# ---------------------------------------------------------------------------
# Contact submissions
# ---------------------------------------------------------------------------


class TestContactValidation:
    def test_valid_contact(self):
        from remodel_intake.validation import validate_contact_submission

        assert validate_contact_submission(_contact()) == []

    def test_unformatted_phone_rejected(self):
        from remodel_intake.validation import validate_contact_submission

        assert validate_contact_submission(_contact(phone="2065550100")) == [
            "Phone must be in format (XXX) XXX-XXXX"
        ]

    def test_message_bounds(self):
        from remodel_intake.validation import validate_contact_submission

        assert validate_contact_submission(_contact(message="short")) == [
            "Message must be at least 10 characters"
        ]
        assert validate_contact_submission(_contact(message="m" * 501)) == [
            "Message must be less than 500 characters"
        ]

    def test_required_fields(self):
        from remodel_intake.validation import validate_contact_submission

        errors = validate_contact_submission({})
        assert errors == [
            "Full name is required",
            "Email is required",
            "Phone is required",
            "Message is required",
        ]

    def test_camel_case_fields_are_parsed(self):
        from remodel_intake.validation import parse_contact_submission

        submission, errors = parse_contact_submission(_contact(fullName=" Jane Doe ", heardFrom="google"))
        assert errors == []
        assert submission.full_name == "Jane Doe"
        assert submission.heard_from == "google"
        assert submission.service is None

    def test_category_and_type_errors_use_field_labels(self):
        from remodel_intake.validation import validate_contact_submission

        errors = validate_contact_submission(_contact(heardFrom="x" * 51, fullName=7))
        assert errors == [
            "Full name must be a string",
            "Referral source must be less than 50 characters",
        ]

    def test_bad_email(self):
        from remodel_intake.validation import validate_contact_submission

        assert validate_contact_submission(_contact(email="x@y")) == ["Please enter a valid email address"]


# ---------------------------------------------------------------------------
# Sanitization
# ---------------------------------------------------------------------------


class TestSanitize:
    def test_escapes_all_markup_characters(self):
        from remodel_intake.sanitize import escape_html

        assert escape_html("<a href=\"x\">'&'</a>") == (
            "&lt;a href=&quot;x&quot;&gt;&#039;&amp;&#039;&lt;/a&gt;"
        )

    @pytest.mark.parametrize("payload", [
        "<script>alert(1)</script>",
        "\"><img src=x onerror=alert(1)>",
        "'; DROP TABLE quote_requests; --",
    ])
    def test_output_never_contains_raw_markup(self, payload):
        from remodel_intake.sanitize import sanitize_for_email, sanitize_message

        for out in (sanitize_for_email(payload), sanitize_message(payload)):
            assert "<script" not in out
            assert "<img" not in out
            assert '"' not in out
            assert "'" not in out

    def test_message_keeps_line_breaks(self):
        from remodel_intake.sanitize import sanitize_message

        assert sanitize_message("  line 1\r\nline <2>\n") == "line 1<br>line &lt;2&gt;"

    def test_empty_input(self):
        from remodel_intake.sanitize import sanitize_for_email, sanitize_message, sanitize_url

        assert sanitize_for_email(None) == ""
        assert sanitize_message("") == ""
        assert sanitize_url(None) == ""

    @pytest.mark.parametrize("url", [
        "https://cdn.example.com/a.jpg",
        "http://example.com",
        "mailto:jane@example.com",
        "tel:2065550100",
    ])
    def test_allowed_schemes_pass(self, url):
        from remodel_intake.sanitize import sanitize_url

        assert sanitize_url(url) == url

    @pytest.mark.parametrize("url", [
        "javascript:alert(1)",
        "data:text/html;base64,AAAA",
        "ftp://example.com/file",
        "//evil.example.com",
    ])
    def test_disallowed_schemes_dropped(self, url):
        from remodel_intake.sanitize import sanitize_url

        assert sanitize_url(url) == ""

    def test_url_is_escaped(self):
        from remodel_intake.sanitize import sanitize_url

        assert sanitize_url('https://x.com/?a=1&b="2"') == "https://x.com/?a=1&amp;b=&quot;2&quot;"


# ---------------------------------------------------------------------------
# Tracking ids
# ---------------------------------------------------------------------------


class TestTrackingIds:
    def test_contact_tracking_id(self):
        from remodel_intake.tracking import contact_tracking_id

        created = datetime(2025, 3, 1, tzinfo=timezone.utc)
        assert contact_tracking_id("abcd1234-0000-0000-0000-000000000000", created) == "MSG-2025-ABCD"

    def test_quote_tracking_id(self):
        from remodel_intake.tracking import quote_tracking_id

        created = datetime(2025, 3, 1, tzinfo=timezone.utc)
        # 0x0001e240 == 123456
        assert quote_tracking_id("0001e240-0000-4000-8000-000000000000", created) == "RQT-2025-3456"

    def test_quote_tracking_id_is_zero_padded(self):
        from remodel_intake.tracking import quote_tracking_id

        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert quote_tracking_id("00000007-0000-4000-8000-000000000000", created) == "RQT-2026-0007"
