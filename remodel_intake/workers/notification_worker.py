"""
remodel_intake/workers/notification_worker.py
NotificationWorker — Kafka consumer that sends the quote emails queued by
submit-quote.

Entry point for the notification worker deployment:
    python -m remodel_intake.workers.notification_worker
"""
from __future__ import annotations

import asyncio
import logging
import os
import signal

from dotenv import load_dotenv
from pydantic import ValidationError

from remodel_intake.kafka_client import IntakeKafkaConsumer, IntakeKafkaProducer, TOPICS
from remodel_intake.models import QuoteNotification
from remodel_intake.notifications.dispatcher import DispatchResult, NotificationDispatcher

logger = logging.getLogger(__name__)


class NotificationWorker:
    """
    Consumes `remodel.notifications.quote` and runs the dispatcher per item.

    Items that cannot be parsed, or whose two emails both failed, are
    published to the dead-letter topic so they can be replayed.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher | None = None,
        producer: IntakeKafkaProducer | None = None,
        consumer: IntakeKafkaConsumer | None = None,
    ) -> None:
        self._dispatcher = dispatcher or NotificationDispatcher()
        self._producer = producer or IntakeKafkaProducer()
        self._consumer = consumer
        self._running = False

    async def start(self) -> None:
        if self._consumer is None:
            self._consumer = IntakeKafkaConsumer(
                topics=[TOPICS["quote_notifications"]],
                group_id="remodel-notification-worker",
            )
        await self._consumer.start()
        await self._producer.start()
        self._running = True
        logger.info("NotificationWorker started — consuming %s", TOPICS["quote_notifications"])
        try:
            await self._consumer.consume(self.handle)
        finally:
            await self.stop()

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        await self._consumer.stop()
        await self._producer.stop()
        logger.info("NotificationWorker stopped")

    async def handle(self, topic: str, event: dict) -> DispatchResult | None:
        if not isinstance(event, dict):
            logger.error("Non-object notification event on %s", topic)
            await self._dead_letter({"raw": event}, "malformed event: not an object")
            return None
        try:
            notification = QuoteNotification.model_validate(event.get("notification") or {})
        except ValidationError as exc:
            logger.error("Malformed notification event on %s: %s", topic, exc)
            await self._dead_letter(event, f"malformed event: {exc.error_count()} error(s)")
            return None

        result = await self._dispatcher.dispatch_quote(notification)
        if not result.any_sent:
            await self._dead_letter(event, "no email delivered")
        return result

    async def _dead_letter(self, event: dict, reason: str) -> None:
        published = await self._producer.publish(
            TOPICS["dlq"],
            {"event_type": "notification_failed", "original_event": event, "error": reason},
        )
        if not published:
            logger.critical("DLQ publish failed for notification event: %s", reason)


async def _main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    worker = NotificationWorker()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(worker.stop()))

    await worker.start()


if __name__ == "__main__":
    asyncio.run(_main())
