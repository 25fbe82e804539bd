"""
Internal notification endpoint — remodel_intake/channels/notification_handler.py
Lets another service (or an operator) trigger the quote emails for a stored
quote directly, bypassing the work queue.
"""
from __future__ import annotations

import hmac
import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from remodel_intake.models import NotificationResponse, QuoteNotification
from remodel_intake.notifications.queue import get_dispatcher
from remodel_intake.tracking import quote_tracking_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["notifications"])


def _authorized(request: Request) -> bool:
    expected = os.getenv("NOTIFICATION_API_KEY", "")
    if not expected:
        return True
    header = request.headers.get("Authorization", "")
    token = header[7:] if header.startswith("Bearer ") else ""
    return hmac.compare_digest(token, expected)


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


@router.post("/send-notification", response_model=NotificationResponse)
async def send_notification(request: Request):
    if not _authorized(request):
        logger.warning("Rejected unauthorized send-notification call")
        return _failure(401, "Unauthorized")

    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("notification payload must be an object")
        if not payload.get("trackingId") and payload.get("quoteId"):
            payload["trackingId"] = quote_tracking_id(payload["quoteId"], datetime.now(timezone.utc))
        notification = QuoteNotification.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        logger.error("Invalid notification payload: %s", exc)
        return _failure(500, "Failed to send notifications")

    try:
        result = await get_dispatcher().dispatch_quote(notification)
    except Exception as exc:
        logger.exception("Notification error for quote %s: %s", notification.quote_id, exc)
        return _failure(500, "Failed to send notifications")

    response = NotificationResponse(
        success=True,
        sms=False,
        business_email=result.business_email,
        customer_email=result.customer_email,
    )
    return JSONResponse(status_code=200, content=response.model_dump(by_alias=True))
