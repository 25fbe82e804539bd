"""
quote_wizard/steps.py
The five wizard steps and the gate each must pass before the wizard moves on.

While the user types, a step's values are a plain dict (see `blank_form`).
Each gate is a pydantic model of the values as they must be to continue;
validating the dict against it yields every message at once, in field order.
Field rules are shared with the server through remodel_intake.validation.
"""
from __future__ import annotations

import copy
from datetime import date
from enum import IntEnum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from quote_wizard.catalog import (
    CONTACT_METHODS,
    PROJECT_SIZES,
    SERVICES,
    TIMELINES,
    URGENCY_OPTIONS,
)
from remodel_intake.validation import EMAIL_RE, PHONE_PATTERN, ZIP_CODE_PATTERN, error_messages

MIN_DESCRIPTION_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 2000
MAX_SPECIAL_REQUIREMENTS_LENGTH = 1000


class WizardStep(IntEnum):
    SERVICE_SELECTION = 1
    PROJECT_DETAILS = 2
    IMAGES_AND_DESCRIPTION = 3
    CONTACT_AND_SCHEDULE = 4
    REVIEW_AND_SUBMIT = 5

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    WizardStep.SERVICE_SELECTION: "Service Type",
    WizardStep.PROJECT_DETAILS: "Project Details",
    WizardStep.IMAGES_AND_DESCRIPTION: "Images & Description",
    WizardStep.CONTACT_AND_SCHEDULE: "Contact & Schedule",
    WizardStep.REVIEW_AND_SUBMIT: "Review & Submit",
}

# What a fresh wizard shows on each editable step
STEP_DEFAULTS: dict[WizardStep, dict[str, Any]] = {
    WizardStep.SERVICE_SELECTION: {"service": None, "urgency": "normal"},
    WizardStep.PROJECT_DETAILS: {
        "scopes": [],
        "project_size": None,
        "property_type": "",
        "address": {"street": "", "city": "", "state": "WA", "zip": ""},
        "timeline": None,
    },
    WizardStep.IMAGES_AND_DESCRIPTION: {"project_description": "", "special_requirements": ""},
    WizardStep.CONTACT_AND_SCHEDULE: {
        "contact_info": {"first_name": "", "last_name": "", "email": "", "phone": ""},
        "preferred_contact_method": "any",
        "contact_times": [],
        "preferred_date": None,
        "marketing_opt_in": False,
    },
}


def blank_form(step: WizardStep) -> dict[str, Any]:
    return copy.deepcopy(STEP_DEFAULTS[step])


class StepGate(BaseModel):
    """Base for the gate models. Strings are compared trimmed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    # dotted field path, or (path, error type), to the message shown
    MESSAGES: ClassVar[dict] = {}

    @classmethod
    def check(cls, values: dict[str, Any]) -> tuple[Optional[StepGate], list[str]]:
        try:
            return cls.model_validate(values), []
        except ValidationError as exc:
            return None, error_messages(exc, messages=cls.MESSAGES)


# ---------------------------------------------------------------------------
# Step 1
# ---------------------------------------------------------------------------

class ServiceSelection(StepGate):
    MESSAGES: ClassVar[dict] = {
        "service": "Please select a service",
        "urgency": "Please select urgency level",
    }

    service: StrictStr
    urgency: StrictStr = "normal"

    @field_validator("service")
    @classmethod
    def service_must_be_offered(cls, v: str) -> str:
        if v not in SERVICES:
            raise ValueError("Please select a service")
        return v

    @field_validator("urgency")
    @classmethod
    def urgency_must_be_known(cls, v: str) -> str:
        if v not in URGENCY_OPTIONS:
            raise ValueError("Please select urgency level")
        return v


# ---------------------------------------------------------------------------
# Step 2
# ---------------------------------------------------------------------------

class Address(StepGate):
    street: StrictStr = Field(min_length=5)
    city: StrictStr = Field(min_length=2)
    state: StrictStr = Field(min_length=2, max_length=2)
    zip: StrictStr = Field(pattern=ZIP_CODE_PATTERN)


class ProjectDetails(StepGate):
    MESSAGES: ClassVar[dict] = {
        "scopes": "Please select at least one scope item",
        "project_size": "Please select a project size",
        "property_type": "Please select a property type",
        "address.street": "Street address is required",
        "address.city": "City is required",
        "address.state": "State must be 2 characters",
        "address.zip": "Please enter a valid ZIP code",
        "timeline": "Please select a timeline",
    }

    scopes: list[StrictStr] = Field(min_length=1)
    project_size: StrictStr
    property_type: StrictStr = Field(min_length=1)
    address: Address
    timeline: StrictStr

    @field_validator("project_size")
    @classmethod
    def size_must_be_known(cls, v: str) -> str:
        if v not in PROJECT_SIZES:
            raise ValueError("Please select a project size")
        return v

    @field_validator("timeline")
    @classmethod
    def timeline_must_be_known(cls, v: str) -> str:
        if v not in TIMELINES:
            raise ValueError("Please select a timeline")
        return v


# ---------------------------------------------------------------------------
# Step 3 (photo rules live with the wizard, which owns the images)
# ---------------------------------------------------------------------------

class ProjectDescription(StepGate):
    MESSAGES: ClassVar[dict] = {
        ("project_description", "string_too_long"):
            f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters",
        "project_description":
            f"Please provide a more detailed description (at least {MIN_DESCRIPTION_LENGTH} characters)",
        "special_requirements":
            f"Special requirements must be less than {MAX_SPECIAL_REQUIREMENTS_LENGTH} characters",
    }

    project_description: StrictStr = Field(
        min_length=MIN_DESCRIPTION_LENGTH, max_length=MAX_DESCRIPTION_LENGTH,
    )
    special_requirements: StrictStr = Field("", max_length=MAX_SPECIAL_REQUIREMENTS_LENGTH)


# ---------------------------------------------------------------------------
# Step 4
# ---------------------------------------------------------------------------

class ContactInfo(StepGate):
    first_name: StrictStr = Field(min_length=2)
    last_name: StrictStr = Field(min_length=2)
    email: StrictStr
    phone: StrictStr = Field(pattern=PHONE_PATTERN)

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email address")
        return v


class ContactPreferences(StepGate):
    MESSAGES: ClassVar[dict] = {
        "contact_info.first_name": "First name must be at least 2 characters",
        "contact_info.last_name": "Last name must be at least 2 characters",
        "contact_info.email": "Please enter a valid email address",
        "contact_info.phone": "Phone must be in format (XXX) XXX-XXXX",
        "preferred_contact_method": "Please select a preferred contact method",
        "contact_times": "Please select at least one contact time",
    }

    contact_info: ContactInfo
    preferred_contact_method: StrictStr = "any"
    contact_times: list[StrictStr] = Field(min_length=1)
    preferred_date: Optional[date] = None
    marketing_opt_in: bool = False

    @field_validator("preferred_contact_method")
    @classmethod
    def method_must_be_known(cls, v: str) -> str:
        if v not in CONTACT_METHODS:
            raise ValueError("Please select a preferred contact method")
        return v


# ---------------------------------------------------------------------------
# Step 5
# ---------------------------------------------------------------------------

class TermsAcceptance(StepGate):
    terms_accepted: bool

    @field_validator("terms_accepted")
    @classmethod
    def terms_must_be_accepted(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must accept the terms")
        return v


STEP_GATES: dict[WizardStep, type[StepGate]] = {
    WizardStep.SERVICE_SELECTION: ServiceSelection,
    WizardStep.PROJECT_DETAILS: ProjectDetails,
    WizardStep.IMAGES_AND_DESCRIPTION: ProjectDescription,
    WizardStep.CONTACT_AND_SCHEDULE: ContactPreferences,
    WizardStep.REVIEW_AND_SUBMIT: TermsAcceptance,
}
