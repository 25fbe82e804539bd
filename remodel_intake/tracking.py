"""
Tracking ids — remodel_intake/tracking.py
Human-shareable references derived from a record's id and creation year.
They are computed on demand and never stored.
"""
from __future__ import annotations

from datetime import datetime
from typing import Union
from uuid import UUID


def contact_tracking_id(record_id: Union[str, UUID], created_at: datetime) -> str:
    """MSG-<year>-<first four id characters, upper-cased>."""
    return f"MSG-{created_at.year}-{str(record_id)[:4].upper()}"


def quote_tracking_id(record_id: Union[str, UUID], created_at: datetime) -> str:
    """RQT-<year>-<NNNN>, NNNN being the id's leading 32 bits modulo 10000."""
    hex_part = str(record_id).replace("-", "")[:8]
    numeric = int(hex_part, 16) % 10000
    return f"RQT-{created_at.year}-{numeric:04d}"
