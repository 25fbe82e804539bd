"""
Quote request channel — remodel_intake/channels/quote_handler.py
FastAPI router for the quote wizard's submission and the confirmation lookup.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from fastapi.responses import JSONResponse

from remodel_intake.database import queries
from remodel_intake.models import QuoteConfirmation, QuoteNotification, QuoteSubmitResponse
from remodel_intake.notifications.queue import enqueue_quote_notification
from remodel_intake.sanitize import truncate
from remodel_intake.tracking import quote_tracking_id
from remodel_intake.validation import (
    MAX_CITY_LENGTH,
    MAX_MESSAGE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_SERVICE_LENGTH,
    MAX_STATE_LENGTH,
    QuoteSubmission,
    parse_quote_submission,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quote-requests"])

_PHONE_DISALLOWED_RE = re.compile(r"[^\d()\-\s]")


def _failure(status_code: int, errors: list[str]) -> JSONResponse:
    body = QuoteSubmitResponse(success=False, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _optional(value: str | None, max_length: int) -> str | None:
    if not value:
        return None
    return truncate(value, max_length) or None


def normalize_quote_submission(submission: QuoteSubmission) -> dict:
    """Lowercase the email and cut a validated submission down to its column limits."""
    phone = submission.phone
    phone = _PHONE_DISALLOWED_RE.sub("", phone)[:MAX_PHONE_LENGTH].strip() if phone else ""
    return {
        "customer_name": truncate(submission.customer_name, MAX_NAME_LENGTH),
        "email": submission.email.lower(),
        "phone": phone or None,
        "service_requested": truncate(submission.service_requested, MAX_SERVICE_LENGTH),
        "property_city": _optional(submission.property_city, MAX_CITY_LENGTH),
        "property_state": _optional(submission.property_state, MAX_STATE_LENGTH),
        "message": _optional(submission.message, MAX_MESSAGE_LENGTH),
        "image_urls": [u for u in (submission.image_urls or []) if u],
    }


@router.post("/functions/submit-quote", response_model=QuoteSubmitResponse)
async def submit_quote(request: Request, background_tasks: BackgroundTasks):
    """
    Validate, store and acknowledge a quote request.

    Notifications are scheduled after the response; their outcome never
    changes what the submitter sees.
    """
    try:
        try:
            data = await request.json()
        except ValueError as exc:
            logger.warning("Malformed quote request body: %s", exc)
            return _failure(500, ["An unexpected error occurred"])
        if not isinstance(data, dict):
            logger.warning("Quote request body is not an object: %s", type(data).__name__)
            return _failure(500, ["An unexpected error occurred"])

        submission, errors = parse_quote_submission(data)
        if errors:
            logger.info("Quote request rejected with %d validation error(s)", len(errors))
            return _failure(400, errors)

        record = normalize_quote_submission(submission)

        try:
            inserted = await queries.insert_quote_request(record)
        except Exception as exc:
            logger.error("Database error saving quote request: %s", exc)
            return _failure(500, ["Failed to save quote request"])

        quote_id = inserted["id"]
        created_at = inserted.get("created_at") or datetime.now(timezone.utc)
        notification = QuoteNotification(
            customer_name=record["customer_name"],
            email=record["email"],
            phone=record["phone"],
            service_requested=record["service_requested"],
            property_city=record["property_city"],
            property_state=record["property_state"],
            message=record["message"],
            quote_id=quote_id,
            tracking_id=quote_tracking_id(quote_id, created_at),
            image_urls=record["image_urls"],
        )
        background_tasks.add_task(enqueue_quote_notification, notification)

        logger.info("Quote request %s stored (%s)", quote_id, record["service_requested"])
        return JSONResponse(
            status_code=200,
            content=QuoteSubmitResponse(success=True, id=quote_id).model_dump(exclude_none=True),
        )
    except Exception as exc:
        logger.exception("Error processing quote request: %s", exc)
        return _failure(500, ["An unexpected error occurred"])


@router.get("/quote-requests/{quote_id}", response_model=QuoteConfirmation)
async def get_quote_confirmation(quote_id: str):
    """Authoritative data for the confirmation view, looked up by the id in its route."""
    quote = await queries.get_quote_request(quote_id)
    if not quote:
        raise HTTPException(status_code=404, detail="Quote request not found")

    created_at = quote["created_at"]
    confirmation = QuoteConfirmation(
        id=quote["id"],
        tracking_id=quote_tracking_id(quote["id"], created_at),
        service_requested=quote["service_requested"],
        property_city=quote.get("property_city"),
        property_state=quote.get("property_state"),
        image_count=len(quote.get("image_urls") or []),
        created_at=created_at.isoformat(),
    )
    return confirmation
