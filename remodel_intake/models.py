"""
Shared pydantic models — remodel_intake/models.py
Notification work items and response bodies for the intake endpoints.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteNotification(_CamelModel):
    """A persisted quote request as handed to the notification dispatcher."""

    customer_name: str
    email: str
    phone: Optional[str] = None
    service_requested: str
    property_city: Optional[str] = None
    property_state: Optional[str] = None
    message: Optional[str] = None
    quote_id: str
    tracking_id: str
    image_urls: list[str] = Field(default_factory=list)


class ContactNotification(_CamelModel):
    full_name: str
    email: str
    phone: str
    service_label: str = "Not specified"
    heard_from_label: str = "Not specified"
    message: str
    tracking_id: str


class QuoteSubmitResponse(BaseModel):
    success: bool
    id: Optional[str] = None
    errors: Optional[list[str]] = None


class ContactSubmitResponse(_CamelModel):
    success: bool = True
    tracking_id: str
    message: str


class NotificationResponse(_CamelModel):
    success: bool
    sms: bool = False
    business_email: bool = False
    customer_email: bool = False


class QuoteConfirmation(_CamelModel):
    id: str
    tracking_id: str
    service_requested: str
    property_city: Optional[str] = None
    property_state: Optional[str] = None
    image_count: int = 0
    created_at: str
