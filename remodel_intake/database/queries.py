"""
Typed async database query functions — remodel_intake/database/queries.py
All queries use asyncpg directly (no ORM). Each intake request performs
exactly one insert; nothing here updates existing rows.
"""
from __future__ import annotations

import asyncpg
import os
import logging
from typing import Optional
from uuid import UUID

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.Pool] = None


async def get_db_pool() -> asyncpg.Pool:
    global _pool
    if _pool is None:
        settings = pool_settings()
        _pool = await asyncpg.create_pool(**settings)
        logger.info(
            "Postgres pool opened (ssl=%s, size=%d..%d)",
            settings["ssl"] or "disable", settings["min_size"], settings["max_size"],
        )
    return _pool


def pool_settings() -> dict:
    """
    Connection arguments for asyncpg.create_pool.

    DATABASE_URL wins over the POSTGRES_* parts. DATABASE_SSL sets the SSL
    mode for either form; it defaults to "require" for a URL, which is
    always a hosted database here, and to "disable" for a local host.
    """
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        target = {"dsn": database_url}
        default_ssl = "require"
    else:
        target = {
            "host": os.getenv("POSTGRES_HOST", "localhost"),
            "port": int(os.getenv("POSTGRES_PORT", "5432")),
            "database": os.getenv("POSTGRES_DB", "remodel_db"),
            "user": os.getenv("POSTGRES_USER", "remodel_user"),
            "password": os.getenv("POSTGRES_PASSWORD", "changeme"),
        }
        default_ssl = os.getenv("POSTGRES_SSL", "disable")
    ssl_mode = os.getenv("DATABASE_SSL", default_ssl).strip().lower()
    return {
        **target,
        "ssl": None if ssl_mode in ("", "disable", "false", "off") else ssl_mode,
        # Each intake request holds a connection for a single insert
        "min_size": int(os.getenv("DATABASE_POOL_MIN", "1")),
        "max_size": int(os.getenv("DATABASE_POOL_MAX", "5")),
        "timeout": 10.0,
        "command_timeout": 15.0,
    }


async def close_db_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Postgres pool closed")


# ---------------------------------------------------------------------------
# Quote requests
# ---------------------------------------------------------------------------

async def insert_quote_request(record: dict) -> dict:
    """Insert a normalized quote request; return {"id", "created_at"}."""
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """INSERT INTO quote_requests
               (customer_name, email, phone, service_requested,
                property_city, property_state, message, image_urls)
               VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
               RETURNING id, created_at""",
            record["customer_name"],
            record["email"],
            record.get("phone"),
            record["service_requested"],
            record.get("property_city"),
            record.get("property_state"),
            record.get("message"),
            record.get("image_urls") or [],
        )
        return {"id": str(row["id"]), "created_at": row["created_at"]}


async def get_quote_request(quote_id: str) -> Optional[dict]:
    try:
        key = UUID(quote_id)
    except ValueError:
        return None
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """SELECT id, customer_name, email, phone, service_requested,
                      property_city, property_state, message, image_urls, created_at
               FROM quote_requests WHERE id = $1""",
            key,
        )
        if not row:
            return None
        result = dict(row)
        result["id"] = str(result["id"])
        result["image_urls"] = list(result.get("image_urls") or [])
        return result


# ---------------------------------------------------------------------------
# Contact messages
# ---------------------------------------------------------------------------

async def insert_contact_message(record: dict) -> dict:
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """INSERT INTO contact_messages
               (full_name, email, phone, service, heard_from, message)
               VALUES ($1, $2, $3, $4, $5, $6)
               RETURNING id, created_at""",
            record["full_name"],
            record["email"],
            record["phone"],
            record.get("service"),
            record.get("heard_from"),
            record["message"],
        )
        return {"id": str(row["id"]), "created_at": row["created_at"]}


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

async def ping() -> bool:
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        return await conn.fetchval("SELECT 1") == 1
