"""
Cross-origin policy — remodel_intake/api/cors.py
Allow-listed origins get their own origin reflected plus Vary: Origin.
Any other origin is answered with the first allow-listed origin and no Vary,
which browsers then refuse.
"""
from __future__ import annotations

import os

DEFAULT_ORIGINS = "https://rhinoremodeler.com,https://www.rhinoremodeler.com"

ALLOWED_HEADERS = (
    "authorization, x-client-info, apikey, content-type"
)
ALLOWED_METHODS = "GET, POST, OPTIONS"


def allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def cors_headers(origin: str | None, allowed: list[str] | None = None) -> dict[str, str]:
    allowed = allowed if allowed is not None else allowed_origins()
    headers = {
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
    }
    if origin and origin in allowed:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    else:
        # TODO: deny outright once every embedding site is on the allow-list
        headers["Access-Control-Allow-Origin"] = allowed[0] if allowed else ""
    return headers
