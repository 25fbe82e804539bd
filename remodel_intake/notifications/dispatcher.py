"""
Notification dispatcher — remodel_intake/notifications/dispatcher.py
Turns a persisted quote or contact record into the customer confirmation and
the business alert, and sends both.
"""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from remodel_intake.models import ContactNotification, QuoteNotification
from remodel_intake.notifications.email_client import SendGridClient
from remodel_intake.notifications.storage_links import StorageLinkResolver
from remodel_intake.notifications.templates import (
    RenderedEmail,
    render_contact_business_email,
    render_contact_customer_email,
    render_quote_business_email,
    render_quote_customer_email,
)
from remodel_intake.sanitize import sanitize_for_email, sanitize_message, sanitize_url

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    business_email: bool
    customer_email: bool

    @property
    def any_sent(self) -> bool:
        return self.business_email or self.customer_email


class NotificationDispatcher:
    """
    Pipeline per record:
      1. Resolve image references to signed links (quotes only)
      2. Sanitize every field that reaches an HTML body
      3. Render the customer and business templates
      4. Send both concurrently

    dispatch_* never raise; the outcome of each email is reported instead.
    """

    def __init__(
        self,
        email_client: SendGridClient | None = None,
        link_resolver: StorageLinkResolver | None = None,
        business_email: str | None = None,
    ) -> None:
        self.email_client = email_client or SendGridClient()
        self.link_resolver = link_resolver or StorageLinkResolver()
        self.business_email = business_email or os.getenv("BUSINESS_EMAIL", "francisco@rhinoremodeler.com")

    async def dispatch_quote(self, notification: QuoteNotification) -> DispatchResult:
        logger.info("Sending notifications for quote %s", notification.quote_id)
        try:
            try:
                resolved = await self.link_resolver.resolve_all(notification.image_urls)
            except Exception as exc:
                logger.warning("Image link resolution failed for quote %s: %s", notification.quote_id, exc)
                resolved = [self.link_resolver.fallback_url(u) for u in notification.image_urls]
            image_urls = [url for url in (sanitize_url(u) for u in resolved) if url]

            name = sanitize_for_email(notification.customer_name)
            email = sanitize_for_email(notification.email)
            phone = sanitize_for_email(notification.phone)
            service = sanitize_for_email(notification.service_requested)
            city = sanitize_for_email(notification.property_city)
            state = sanitize_for_email(notification.property_state)

            business = render_quote_business_email(
                customer_name=name,
                email=email,
                phone=phone,
                service=service,
                city=city,
                state=state,
                quote_id=sanitize_for_email(notification.quote_id),
                message=sanitize_message(notification.message),
                image_urls=image_urls,
            )
            customer = render_quote_customer_email(
                customer_name=name,
                tracking_id=sanitize_for_email(notification.tracking_id),
                service=service,
                city=city,
                state=state,
                email=email,
                phone=phone or None,
                image_count=len(notification.image_urls),
            )
        except Exception as exc:
            logger.exception("Rendering failed for quote %s: %s", notification.quote_id, exc)
            return DispatchResult(business_email=False, customer_email=False)

        result = await self._send_pair(business, customer, notification.email)
        logger.info(
            "Quote %s notifications | business=%s customer=%s",
            notification.quote_id,
            "sent" if result.business_email else "failed",
            "sent" if result.customer_email else "failed",
        )
        return result

    async def dispatch_contact(self, notification: ContactNotification) -> DispatchResult:
        try:
            full_name = sanitize_for_email(notification.full_name)
            first_name = full_name.split(" ")[0] if full_name else "there"
            message = sanitize_message(notification.message)
            tracking_id = sanitize_for_email(notification.tracking_id)

            business = render_contact_business_email(
                full_name=full_name,
                email=sanitize_for_email(notification.email),
                phone=sanitize_for_email(notification.phone),
                service_label=sanitize_for_email(notification.service_label),
                heard_from_label=sanitize_for_email(notification.heard_from_label),
                message=message,
                tracking_id=tracking_id,
            )
            customer = render_contact_customer_email(
                first_name=first_name,
                tracking_id=tracking_id,
                message=message,
            )
        except Exception as exc:
            logger.exception("Rendering failed for contact %s: %s", notification.tracking_id, exc)
            return DispatchResult(business_email=False, customer_email=False)

        result = await self._send_pair(business, customer, notification.email)
        if not result.business_email:
            logger.error("Business email failed for contact %s", notification.tracking_id)
        if not result.customer_email:
            logger.error("Customer email failed for contact %s", notification.tracking_id)
        return result

    async def _send_pair(
        self, business: RenderedEmail, customer: RenderedEmail, customer_address: str
    ) -> DispatchResult:
        outcomes = await asyncio.gather(
            self.email_client.send(self.business_email, business.subject, business.html, business.text),
            self.email_client.send(customer_address, customer.subject, customer.html, customer.text),
            return_exceptions=True,
        )
        sent = []
        for label, outcome in zip(("business", "customer"), outcomes):
            if isinstance(outcome, BaseException):
                logger.error("%s email raised: %s", label.capitalize(), outcome)
                sent.append(False)
            else:
                sent.append(outcome.get("delivery_status") == "sent")
        return DispatchResult(business_email=sent[0], customer_email=sent[1])
