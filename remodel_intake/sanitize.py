"""
HTML sanitization — remodel_intake/sanitize.py
Every piece of user text is passed through here before it is spliced into an
email template. Output is safe to interpolate without further escaping.
"""
from __future__ import annotations

from typing import Optional

_ALLOWED_URL_PREFIXES = ("http://", "https://", "mailto:", "tel:")

_HTML_ENTITIES = (
    ("&", "&amp;"),  # must run first
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def escape_html(unsafe: str) -> str:
    for char, entity in _HTML_ENTITIES:
        unsafe = unsafe.replace(char, entity)
    return unsafe


def sanitize_for_email(text: Optional[str]) -> str:
    if not text:
        return ""
    return escape_html(text.strip())


def sanitize_message(text: Optional[str]) -> str:
    """Like sanitize_for_email, keeping line breaks as <br>."""
    if not text:
        return ""
    return escape_html(text.strip()).replace("\r\n", "\n").replace("\n", "<br>")


def sanitize_url(url: Optional[str]) -> str:
    """Return the escaped URL for an href/src attribute, or "" if the scheme is not allowed."""
    if not url:
        return ""
    trimmed = url.strip()
    if trimmed.startswith(_ALLOWED_URL_PREFIXES):
        return escape_html(trimmed)
    return ""


def truncate(text: str, max_length: int) -> str:
    return text.strip()[:max_length]
