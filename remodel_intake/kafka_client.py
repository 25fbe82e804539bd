"""
Kafka client — remodel_intake/kafka_client.py
Work-queue producer and consumer for quote notifications.

Items are keyed by quote id so redeliveries of one quote stay on one
partition. The consumer commits an offset only after its handler returns,
so an item is redelivered if the worker dies mid-dispatch.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer

logger = logging.getLogger(__name__)

KAFKA_BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
PUBLISH_TIMEOUT_SECONDS = 5.0

TOPICS = {
    "quote_notifications": "remodel.notifications.quote",
    "dlq": "remodel.dlq",
}


def _encode(value: dict) -> bytes:
    return json.dumps(value, default=str).encode("utf-8")


def _decode(raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        # Handed to the worker as-is so it can be dead-lettered
        return {"raw": raw.decode("utf-8", errors="replace")}


class IntakeKafkaProducer:
    def __init__(self, bootstrap_servers: str | None = None) -> None:
        self._bootstrap_servers = bootstrap_servers or KAFKA_BOOTSTRAP_SERVERS
        self._producer: AIOKafkaProducer | None = None

    @property
    def available(self) -> bool:
        return self._producer is not None

    async def start(self) -> None:
        producer = AIOKafkaProducer(
            bootstrap_servers=self._bootstrap_servers,
            value_serializer=_encode,
            key_serializer=lambda k: k.encode("utf-8"),
            acks="all",
        )
        await producer.start()
        self._producer = producer
        logger.info("Kafka producer started (%s)", self._bootstrap_servers)

    async def stop(self) -> None:
        if self._producer:
            await self._producer.stop()
            self._producer = None
            logger.info("Kafka producer stopped")

    async def publish(self, topic: str, event: dict, key: Optional[str] = None) -> bool:
        """Publish one item and wait for the broker's ack. Returns False instead of raising."""
        if not self._producer:
            logger.warning("Kafka unavailable — not publishing to %s: %s", topic, event.get("event_type", "unknown"))
            return False
        event = {**event, "queued_at": datetime.now(timezone.utc).isoformat()}
        try:
            await asyncio.wait_for(
                self._producer.send_and_wait(topic, event, key=key),
                timeout=PUBLISH_TIMEOUT_SECONDS,
            )
        except Exception as exc:
            logger.warning("Kafka publish failed for %s: %s", topic, exc)
            return False
        logger.debug("Queued %s on %s (key=%s)", event.get("event_type", "unknown"), topic, key)
        return True


class IntakeKafkaConsumer:
    def __init__(self, topics: list[str], group_id: str, bootstrap_servers: str | None = None) -> None:
        self._group_id = group_id
        self._consumer = AIOKafkaConsumer(
            *topics,
            bootstrap_servers=bootstrap_servers or KAFKA_BOOTSTRAP_SERVERS,
            group_id=group_id,
            value_deserializer=_decode,
            auto_offset_reset="earliest",
            enable_auto_commit=False,
        )

    async def start(self) -> None:
        await self._consumer.start()
        logger.info("Kafka consumer started (group=%s)", self._group_id)

    async def stop(self) -> None:
        await self._consumer.stop()
        logger.info("Kafka consumer stopped")

    async def consume(self, handler: Callable[[str, dict], Awaitable[Any]]) -> None:
        async for msg in self._consumer:
            try:
                await handler(msg.topic, msg.value)
            except Exception as exc:
                # Handlers dead-letter their own failures; this only guards the loop
                logger.error(
                    "Handler failed on %s partition=%d offset=%d: %s",
                    msg.topic, msg.partition, msg.offset, exc,
                )
            await self._consumer.commit()
