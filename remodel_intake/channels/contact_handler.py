"""
Contact form channel — remodel_intake/channels/contact_handler.py
FastAPI router for general inquiries. Unlike quotes, both emails are attempted
before the response is sent; each may fail without failing the request.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from remodel_intake.database import queries
from remodel_intake.models import ContactNotification, ContactSubmitResponse
from remodel_intake.notifications.queue import get_dispatcher
from remodel_intake.tracking import contact_tracking_id
from remodel_intake.validation import parse_contact_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["contact-form"])

SERVICE_LABELS: dict[str, str] = {
    "general": "General Inquiry",
    "kitchen": "Kitchen Remodeling",
    "bathroom": "Bathroom Renovation",
    "roofing": "Roofing Services",
    "electrical": "Electrical Work",
    "plumbing": "Plumbing Services",
    "other": "Other",
}

HEARD_FROM_LABELS: dict[str, str] = {
    "google": "Google Search",
    "social": "Social Media",
    "referral": "Friend/Family Referral",
    "previous": "Previous Customer",
    "advertisement": "Advertisement",
    "other": "Other",
}


def label_for(key: str | None, labels: dict[str, str]) -> str:
    if not key:
        return "Not specified"
    return labels.get(key, key)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/submit-contact", response_model=ContactSubmitResponse)
async def submit_contact(request: Request):
    try:
        try:
            body = await request.json()
        except ValueError as exc:
            logger.warning("Malformed contact request body: %s", exc)
            return _error(500, "Internal server error")
        if not isinstance(body, dict):
            return _error(500, "Internal server error")

        submission, errors = parse_contact_submission(body)
        if errors:
            logger.info("Contact message rejected: %s", "; ".join(errors))
            return _error(400, "; ".join(errors))

        record = {
            "full_name": submission.full_name,
            "email": submission.email.lower(),
            "phone": submission.phone,
            "service": submission.service or None,
            "heard_from": submission.heard_from or None,
            "message": submission.message,
        }

        try:
            inserted = await queries.insert_contact_message(record)
        except Exception as exc:
            logger.error("Database insert error for contact message: %s", exc)
            return _error(500, "Failed to save contact message")

        created_at = inserted.get("created_at") or datetime.now(timezone.utc)
        tracking_id = contact_tracking_id(inserted["id"], created_at)

        # The message is stored; email delivery is best effort from here on
        notification = ContactNotification(
            full_name=record["full_name"],
            email=record["email"],
            phone=record["phone"],
            service_label=label_for(record["service"], SERVICE_LABELS),
            heard_from_label=label_for(record["heard_from"], HEARD_FROM_LABELS),
            message=record["message"],
            tracking_id=tracking_id,
        )
        try:
            await get_dispatcher().dispatch_contact(notification)
        except Exception as exc:
            logger.error("Contact notification failed for %s: %s", tracking_id, exc)

        logger.info("Contact message %s stored", tracking_id)
        response = ContactSubmitResponse(
            tracking_id=tracking_id,
            message="Contact message submitted successfully",
        )
        return JSONResponse(status_code=200, content=response.model_dump(by_alias=True))
    except Exception as exc:
        logger.exception("Error in submit-contact: %s", exc)
        return _error(500, "Internal server error")
