"""
remodel_intake/tests/test_worker.py
Tests for the notification worker's per-event handling and dead-lettering.
Run: pytest remodel_intake/tests/test_worker.py -v
"""
from __future__ import annotations

import asyncio


class FakeProducer:
    def __init__(self):
        self.published = []

    async def publish(self, topic, event, key=None):
        self.published.append((topic, event))
        return True

    async def start(self):
        pass

    async def stop(self):
        pass


class FakeDispatcher:
    def __init__(self, business=True, customer=True):
        self.business = business
        self.customer = customer
        self.seen = []

    async def dispatch_quote(self, notification):
        from remodel_intake.notifications.dispatcher import DispatchResult

        self.seen.append(notification)
        return DispatchResult(business_email=self.business, customer_email=self.customer)


def _event():
    return {
        "event_type": "quote_submitted",
        "notification": {
            "customerName": "Jane Doe",
            "email": "jane@example.com",
            "serviceRequested": "Painting",
            "quoteId": "0001e240-0000-4000-8000-000000000000",
            "trackingId": "RQT-2025-3456",
            "imageUrls": [],
        },
    }


class TestNotificationWorker:
    def test_dispatches_queued_quote(self):
        from remodel_intake.workers.notification_worker import NotificationWorker

        dispatcher, producer = FakeDispatcher(), FakeProducer()
        worker = NotificationWorker(dispatcher=dispatcher, producer=producer)
        result = asyncio.run(worker.handle("remodel.notifications.quote", _event()))

        assert result.business_email and result.customer_email
        assert dispatcher.seen[0].tracking_id == "RQT-2025-3456"
        assert producer.published == []

    def test_partial_delivery_is_not_dead_lettered(self):
        from remodel_intake.workers.notification_worker import NotificationWorker

        producer = FakeProducer()
        worker = NotificationWorker(dispatcher=FakeDispatcher(business=False), producer=producer)
        asyncio.run(worker.handle("remodel.notifications.quote", _event()))
        assert producer.published == []

    def test_total_failure_goes_to_dlq(self):
        from remodel_intake.workers.notification_worker import NotificationWorker

        producer = FakeProducer()
        worker = NotificationWorker(
            dispatcher=FakeDispatcher(business=False, customer=False), producer=producer,
        )
        asyncio.run(worker.handle("remodel.notifications.quote", _event()))

        topic, event = producer.published[0]
        assert topic == "remodel.dlq"
        assert event["error"] == "no email delivered"
        assert event["original_event"]["notification"]["quoteId"].startswith("0001e240")

    def test_malformed_event_goes_to_dlq(self):
        from remodel_intake.workers.notification_worker import NotificationWorker

        dispatcher, producer = FakeDispatcher(), FakeProducer()
        worker = NotificationWorker(dispatcher=dispatcher, producer=producer)
        result = asyncio.run(worker.handle("remodel.notifications.quote", {"notification": {"email": 1}}))

        assert result is None
        assert dispatcher.seen == []
        assert producer.published[0][0] == "remodel.dlq"
        assert producer.published[0][1]["error"].startswith("malformed event")

    def test_non_object_event_goes_to_dlq(self):
        from remodel_intake.workers.notification_worker import NotificationWorker

        producer = FakeProducer()
        worker = NotificationWorker(dispatcher=FakeDispatcher(), producer=producer)
        assert asyncio.run(worker.handle("remodel.notifications.quote", ["not", "a", "dict"])) is None
        assert producer.published[0][1]["original_event"] == {"raw": ["not", "a", "dict"]}
