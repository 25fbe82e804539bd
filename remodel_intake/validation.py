"""
Validation rules — remodel_intake/validation.py
pydantic models for quote and contact submissions.

Every rule carries the message the submitter sees. `error_messages` flattens
a ValidationError into those messages in field order, which is the shape
both endpoints and the quote wizard report.
"""
from __future__ import annotations

import re
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = r"^\(\d{3}\) \d{3}-\d{4}$"
ZIP_CODE_PATTERN = r"^\d{5}(-\d{4})?$"
_PHONE_SEPARATORS_RE = re.compile(r"[\s()-]")

# Quote request limits (quote_requests columns)
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 255
MAX_SERVICE_LENGTH = 100
MAX_MESSAGE_LENGTH = 2000
MAX_CITY_LENGTH = 100
MAX_STATE_LENGTH = 50
MAX_PHONE_LENGTH = 20
MAX_IMAGES = 10

# Contact form limits
MIN_CONTACT_MESSAGE_LENGTH = 10
MAX_CONTACT_MESSAGE_LENGTH = 500
MAX_CATEGORY_LENGTH = 50

_TEMPLATES = {
    "missing": "{label} is required",
    "string_type": "{label} must be a string",
    "string_too_short": "{label} must be at least {min_length} characters",
    "string_too_long": "{label} must be less than {max_length} characters",
}


def validate_email(value: Optional[str]) -> bool:
    return bool(value) and isinstance(value, str) and bool(EMAIL_RE.match(value))


def validate_phone(value: Optional[str]) -> bool:
    """Phone is optional; when given it must reduce to exactly 10 digits."""
    if not value:
        return True
    return normalize_phone(value) is not None


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Strip whitespace, parentheses and dashes; return the 10 digits or None."""
    if not value or not isinstance(value, str):
        return None
    cleaned = _PHONE_SEPARATORS_RE.sub("", value)
    if len(cleaned) == 10 and cleaned.isdigit():
        return cleaned
    return None


def format_phone(value: str) -> str:
    """Format raw input as (XXX) XXX-XXXX, progressively for partial input."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) <= 3:
        return f"({digits}" if digits else ""
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:10]}"


def is_formatted_phone(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(re.match(PHONE_PATTERN, value))


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def reject_blank(value: Any) -> Any:
    """Before-validator: a null or whitespace-only value counts as missing."""
    if is_blank(value):
        raise PydanticCustomError("missing", "Field required")
    return value


def error_messages(
    exc: ValidationError,
    labels: Optional[dict[str, str]] = None,
    messages: Optional[dict] = None,
) -> list[str]:
    """
    Turn a ValidationError into user-facing messages, in field order.

    Fields are addressed by their dotted path ("address.zip"); list indexes
    are dropped so every item of a list reports against the list itself.
    `messages` maps a (path, error type) pair or a bare path to a fixed
    message. Otherwise a ValueError raised by a validator supplies its own
    text, and the common constraint errors are phrased with `labels`.
    Duplicates are reported once.
    """
    labels = labels or {}
    messages = messages or {}
    found: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"] if not isinstance(part, int))
        kind = error["type"]
        if (path, kind) in messages:
            text = messages[(path, kind)]
        elif path in messages:
            text = messages[path]
        elif kind == "value_error":
            text = str(error["ctx"]["error"])
        elif kind in _TEMPLATES:
            text = _TEMPLATES[kind].format(label=labels.get(path, path), **error.get("ctx", {}))
        else:
            text = error["msg"]
        if text not in found:
            found.append(text)
    return found


# ---------------------------------------------------------------------------
# Quote submissions
# ---------------------------------------------------------------------------

class QuoteSubmission(BaseModel):
    """Body of POST /functions/submit-quote. String fields arrive trimmed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    LABELS: ClassVar[dict[str, str]] = {
        "customer_name": "Customer name",
        "email": "Email",
        "phone": "Phone",
        "service_requested": "Service requested",
        "message": "Message",
        "property_city": "City",
        "property_state": "State",
    }
    MESSAGES: ClassVar[dict] = {
        ("image_urls", "too_long"): f"Maximum {MAX_IMAGES} images allowed",
        "image_urls": "Image URLs must be a list of strings",
    }

    customer_name: StrictStr = Field(max_length=MAX_NAME_LENGTH)
    email: StrictStr = Field(max_length=MAX_EMAIL_LENGTH)
    phone: Optional[StrictStr] = None
    service_requested: StrictStr = Field(max_length=MAX_SERVICE_LENGTH)
    message: Optional[StrictStr] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    property_city: Optional[StrictStr] = Field(None, max_length=MAX_CITY_LENGTH)
    property_state: Optional[StrictStr] = Field(None, max_length=MAX_STATE_LENGTH)
    image_urls: Optional[list[StrictStr]] = Field(None, max_length=MAX_IMAGES)

    blank_is_missing = field_validator("customer_name", "email", "service_requested", mode="before")(reject_blank)

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("phone")
    @classmethod
    def phone_must_have_ten_digits(cls, v: Optional[str]) -> Optional[str]:
        if not validate_phone(v):
            raise ValueError("Invalid phone number format")
        return v


# ---------------------------------------------------------------------------
# Contact submissions
# ---------------------------------------------------------------------------

class ContactSubmission(BaseModel):
    """Body of POST /functions/submit-contact (camelCase on the wire)."""

    model_config = ConfigDict(str_strip_whitespace=True, alias_generator=to_camel, populate_by_name=True)

    LABELS: ClassVar[dict[str, str]] = {
        "fullName": "Full name",
        "email": "Email",
        "phone": "Phone",
        "message": "Message",
        "service": "Service",
        "heardFrom": "Referral source",
    }
    MESSAGES: ClassVar[dict] = {
        ("phone", "string_pattern_mismatch"): "Phone must be in format (XXX) XXX-XXXX",
    }

    full_name: StrictStr = Field(max_length=MAX_NAME_LENGTH)
    email: StrictStr = Field(max_length=MAX_EMAIL_LENGTH)
    phone: StrictStr = Field(pattern=PHONE_PATTERN)
    message: StrictStr = Field(
        min_length=MIN_CONTACT_MESSAGE_LENGTH, max_length=MAX_CONTACT_MESSAGE_LENGTH,
    )
    service: Optional[StrictStr] = Field(None, max_length=MAX_CATEGORY_LENGTH)
    heard_from: Optional[StrictStr] = Field(None, max_length=MAX_CATEGORY_LENGTH)

    blank_is_missing = field_validator("full_name", "email", "phone", "message", mode="before")(reject_blank)

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email address")
        return v


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def parse_quote_submission(data: Any) -> tuple[Optional[QuoteSubmission], list[str]]:
    """Return (submission, []) for a valid payload, else (None, every error)."""
    try:
        return QuoteSubmission.model_validate(data), []
    except ValidationError as exc:
        return None, error_messages(exc, QuoteSubmission.LABELS, QuoteSubmission.MESSAGES)


def parse_contact_submission(data: Any) -> tuple[Optional[ContactSubmission], list[str]]:
    try:
        return ContactSubmission.model_validate(data), []
    except ValidationError as exc:
        return None, error_messages(exc, ContactSubmission.LABELS, ContactSubmission.MESSAGES)


def validate_quote_submission(data: dict) -> list[str]:
    """Every failing quote rule; empty when valid. Nothing is mutated."""
    return parse_quote_submission(data)[1]


def validate_contact_submission(data: dict) -> list[str]:
    return parse_contact_submission(data)[1]
