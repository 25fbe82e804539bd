"""
Notification work queue — remodel_intake/notifications/queue.py
Hands a persisted quote to the notification worker through Kafka, or runs the
dispatcher in-process when the queue is unavailable.
"""
from __future__ import annotations

import logging
from typing import Optional

from remodel_intake.kafka_client import IntakeKafkaProducer, TOPICS
from remodel_intake.models import QuoteNotification
from remodel_intake.notifications.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

# These are set by api/main.py after startup
_kafka_producer: Optional[IntakeKafkaProducer] = None
_dispatcher: Optional[NotificationDispatcher] = None


def set_dependencies(kafka_producer: Optional[IntakeKafkaProducer],
                     dispatcher: Optional[NotificationDispatcher] = None) -> None:
    global _kafka_producer, _dispatcher
    _kafka_producer = kafka_producer
    _dispatcher = dispatcher


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher


def queue_available() -> bool:
    return _kafka_producer is not None and _kafka_producer.available


async def enqueue_quote_notification(notification: QuoteNotification) -> None:
    """
    Background task scheduled by submit-quote after the insert commits.

    Never raises: the quote is already stored, so every failure here is
    logged and the submitter's response is unaffected. Any failure to queue
    falls through to an in-process dispatch.
    """
    if await _publish(notification):
        logger.info("Quote %s queued for notification", notification.quote_id)
        return

    try:
        result = await get_dispatcher().dispatch_quote(notification)
    except Exception as exc:
        logger.exception("Notification dispatch failed for quote %s: %s", notification.quote_id, exc)
        return
    if not result.any_sent:
        logger.error("No notification delivered for quote %s", notification.quote_id)


async def _publish(notification: QuoteNotification) -> bool:
    if not queue_available():
        return False
    try:
        queued = await _kafka_producer.publish(
            TOPICS["quote_notifications"],
            {
                "event_type": "quote_submitted",
                "notification": notification.model_dump(by_alias=True),
            },
            key=notification.quote_id,
        )
    except Exception as exc:
        logger.error("Queue publish raised for quote %s: %s", notification.quote_id, exc)
        queued = False
    if not queued:
        logger.warning("Queue publish failed for quote %s — dispatching directly", notification.quote_id)
    return queued
