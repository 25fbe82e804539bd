"""
FastAPI application — remodel_intake/api/main.py
Quote and contact intake endpoints, the internal notification trigger,
the confirmation lookup, and health.
"""
from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent.parent / ".env")

from fastapi import FastAPI, Request, Response

from remodel_intake.api.cors import cors_headers
from remodel_intake.channels.contact_handler import router as contact_router
from remodel_intake.channels.notification_handler import router as notification_router
from remodel_intake.channels.quote_handler import router as quote_router
from remodel_intake.database import queries
from remodel_intake.kafka_client import IntakeKafkaProducer
from remodel_intake.notifications.dispatcher import NotificationDispatcher
from remodel_intake.notifications.queue import queue_available, set_dependencies

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Remodel Intake API",
    description="Quote requests and contact messages for the remodeling site",
    version="1.0.0",
)

app.include_router(quote_router)
app.include_router(contact_router)
app.include_router(notification_router)

kafka_producer = IntakeKafkaProducer()


@app.middleware("http")
async def apply_cors(request: Request, call_next):
    headers = cors_headers(request.headers.get("Origin"))
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=headers)
    response = await call_next(request)
    response.headers.update(headers)
    return response


@app.on_event("startup")
async def startup() -> None:
    try:
        await asyncio.wait_for(kafka_producer.start(), timeout=5.0)
        logger.info("Kafka producer connected")
    except Exception as exc:
        logger.warning("Kafka unavailable — notifications will be dispatched in-process: %s", exc)
    set_dependencies(kafka_producer, NotificationDispatcher())
    logger.info("Remodel intake API started")


@app.on_event("shutdown")
async def shutdown() -> None:
    try:
        await kafka_producer.stop()
    except Exception as exc:
        logger.warning("Kafka producer shutdown failed: %s", exc)
    try:
        await queries.close_db_pool()
    except Exception as exc:
        logger.warning("Database pool shutdown failed: %s", exc)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
async def health_check():
    db_status = "active"
    try:
        await queries.ping()
    except Exception:
        db_status = "degraded"

    return {
        "status": "healthy" if db_status == "active" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": db_status,
        "notification_queue": "active" if queue_available() else "in-process",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
