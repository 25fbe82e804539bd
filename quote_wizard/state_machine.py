"""
quote_wizard/state_machine.py
Five-step quote request wizard.

The wizard only moves forward through a step whose gate passes; it moves
back freely and keeps everything entered. Steps 1-4 are saved as a draft on
every move so a reload resumes in place. Photos are never part of the draft.
Submitting re-checks every gate, since earlier steps stay editable.

Usage:
    wizard = QuoteWizard()
    wizard.update(service="kitchen", urgency="urgent")
    wizard.advance()
    assert wizard.current_step == WizardStep.PROJECT_DETAILS
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from quote_wizard.api_client import QuoteApiClient, QuoteApiError
from quote_wizard.catalog import (
    CONTACT_METHODS,
    MAX_FILES,
    PROJECT_SIZES,
    SERVICES,
    TIMELINES,
    URGENCY_OPTIONS,
)
from quote_wizard.draft_store import DraftStore, WizardDraft
from quote_wizard.images import ImageFile, ImageIntake, ImageRejection, ImageStatus, UploadedImage
from quote_wizard.steps import (
    STEP_DEFAULTS,
    STEP_GATES,
    ContactPreferences,
    ProjectDescription,
    ProjectDetails,
    ServiceSelection,
    StepGate,
    WizardStep,
    blank_form,
)
from remodel_intake.sanitize import truncate
from remodel_intake.validation import MAX_MESSAGE_LENGTH

logger = logging.getLogger(__name__)

CONFIRMATION_ROUTE = "/request-quote/confirmation"
GENERIC_SUBMIT_ERROR = "Something went wrong submitting your request. Please try again."


class StepValidationError(Exception):
    def __init__(self, step: WizardStep, errors: list[str]) -> None:
        self.step = step
        self.errors = errors
        super().__init__(f"{step.title}: " + "; ".join(errors))


class SubmissionInProgressError(Exception):
    """A submission is already in flight."""


@dataclass
class SubmissionResult:
    success: bool
    quote_id: Optional[str] = None
    confirmation_path: Optional[str] = None
    errors: list[str] = field(default_factory=list)


def _merge(current: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
    merged = dict(current)
    for key, value in fields.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class QuoteWizard:
    def __init__(
        self,
        store: DraftStore | None = None,
        api: QuoteApiClient | None = None,
        image_intake: ImageIntake | None = None,
    ) -> None:
        self.store = store or DraftStore()
        self.api = api or QuoteApiClient()
        self.image_intake = image_intake or ImageIntake()
        self._reset()
        self._restore()

    def _reset(self) -> None:
        self.current_step = WizardStep.SERVICE_SELECTION
        self.completed_steps = 0
        self.data: dict[WizardStep, dict[str, Any]] = {step: blank_form(step) for step in STEP_DEFAULTS}
        self.images: list[UploadedImage] = []
        self.terms_accepted = False
        self.is_submitting = False
        self.submit_error: Optional[str] = None

    def _restore(self) -> None:
        draft = self.store.load()
        if draft is None:
            return
        try:
            step = WizardStep(draft.current_step)
        except ValueError as exc:
            logger.warning("Discarding unreadable quote draft: %s", exc)
            self.store.clear()
            return
        for editable in STEP_DEFAULTS:
            saved = draft.steps.get(str(int(editable)))
            if saved:
                self.data[editable] = _merge(blank_form(editable), saved)
        self.current_step = step
        self.completed_steps = draft.completed_steps
        logger.info("Resumed quote draft at step %d", step)

    # ------------------------------------------------------------------
    # Step data
    # ------------------------------------------------------------------

    def values(self, step: WizardStep | None = None) -> dict[str, Any]:
        """A copy of what has been entered on a step (the current one by default)."""
        step = WizardStep(step or self.current_step)
        if step not in STEP_DEFAULTS:
            raise ValueError(f"{step.title} has no editable fields")
        return copy.deepcopy(self.data[step])

    def update(self, step: WizardStep | None = None, **fields: Any) -> dict[str, Any]:
        """
        Merge fields into a step's values (the current step by default).

        Nested objects such as `address` or `contact_info` may be given
        partially; their other fields are kept. Nothing is validated here;
        the step's gate runs on advance.
        """
        step = WizardStep(step or self.current_step)
        if step not in STEP_DEFAULTS:
            raise ValueError(f"{step.title} has no editable fields")
        self.data[step] = _merge(self.data[step], fields)
        return self.values(step)

    def is_completed(self, step: WizardStep) -> bool:
        return bool(self.completed_steps & (1 << (int(step) - 1)))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _gate_input(self, step: WizardStep) -> dict[str, Any]:
        if step == WizardStep.REVIEW_AND_SUBMIT:
            return {"terms_accepted": self.terms_accepted}
        return self.data[step]

    def errors_for(self, step: WizardStep | None = None) -> list[str]:
        step = WizardStep(step or self.current_step)
        _, errors = STEP_GATES[step].check(self._gate_input(step))
        if step == WizardStep.IMAGES_AND_DESCRIPTION:
            if len(self.images) > MAX_FILES:
                errors.append(f"Maximum {MAX_FILES} images allowed")
            if any(img.in_flight for img in self.images):
                errors.append("Please wait for your images to finish uploading")
        return errors

    def validated(self, step: WizardStep) -> StepGate:
        """The step's values as its gate model; StepValidationError if the gate fails."""
        gate, errors = STEP_GATES[step].check(self._gate_input(step))
        if errors:
            raise StepValidationError(step, errors)
        return gate

    def can_continue(self) -> bool:
        return not self.errors_for()

    def advance(self) -> WizardStep:
        errors = self.errors_for()
        if errors:
            raise StepValidationError(self.current_step, errors)
        self.completed_steps |= 1 << (int(self.current_step) - 1)
        if self.current_step < WizardStep.REVIEW_AND_SUBMIT:
            self.current_step = WizardStep(self.current_step + 1)
        self.save_draft()
        return self.current_step

    def back(self) -> WizardStep:
        if self.current_step > WizardStep.SERVICE_SELECTION:
            self.current_step = WizardStep(self.current_step - 1)
            self.save_draft()
        return self.current_step

    def save_draft(self) -> None:
        draft = WizardDraft(
            current_step=int(self.current_step),
            completed_steps=self.completed_steps,
            steps={str(int(step)): values for step, values in self.data.items()},
        )
        try:
            self.store.save(draft)
        except (OSError, ValueError) as exc:
            logger.warning("Could not save quote draft: %s", exc)

    def start_over(self, confirm: bool = False) -> bool:
        if not confirm:
            return False
        self.store.clear()
        self._reset()
        return True

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    async def add_images(self, files: list[ImageFile]) -> list[ImageRejection]:
        accepted, rejected = await self.image_intake.process(files, existing=len(self.images))
        self.images.extend(accepted)
        return rejected

    def remove_image(self, image_id: str) -> bool:
        before = len(self.images)
        self.images = [img for img in self.images if img.id != image_id]
        return len(self.images) != before

    def image_references(self) -> list[str]:
        return [
            img.reference for img in self.images
            if img.status == ImageStatus.COMPLETE and img.reference
        ]

    # ------------------------------------------------------------------
    # Review and submit
    # ------------------------------------------------------------------

    def review_summary(self) -> dict[str, Any]:
        """Display values for the review step. Raises StepValidationError for an incomplete step."""
        service: ServiceSelection = self.validated(WizardStep.SERVICE_SELECTION)
        details: ProjectDetails = self.validated(WizardStep.PROJECT_DETAILS)
        description: ProjectDescription = self.validated(WizardStep.IMAGES_AND_DESCRIPTION)
        contact: ContactPreferences = self.validated(WizardStep.CONTACT_AND_SCHEDULE)
        info = contact.contact_info
        address = details.address
        return {
            "service": SERVICES[service.service],
            "urgency": URGENCY_OPTIONS[service.urgency],
            "scopes": list(details.scopes),
            "project_size": PROJECT_SIZES[details.project_size],
            "property_type": details.property_type,
            "address": f"{address.street}, {address.city}, {address.state} {address.zip}",
            "city": address.city,
            "state": address.state,
            "timeline": TIMELINES[details.timeline],
            "project_description": description.project_description,
            "special_requirements": description.special_requirements,
            "image_count": len(self.image_references()),
            "name": f"{info.first_name} {info.last_name}",
            "email": info.email,
            "phone": info.phone,
            "preferred_contact_method": CONTACT_METHODS[contact.preferred_contact_method],
            "contact_times": list(contact.contact_times),
            "preferred_date": contact.preferred_date.isoformat() if contact.preferred_date else None,
            "marketing_opt_in": contact.marketing_opt_in,
        }

    def accept_terms(self, accepted: bool = True) -> None:
        self.terms_accepted = accepted

    def _compose_message(self, summary: dict[str, Any]) -> str:
        lines = [
            summary["project_description"],
            "",
            f"Urgency: {summary['urgency']}",
            f"Project size: {summary['project_size']}",
            f"Scope: {', '.join(summary['scopes'])}",
            f"Property type: {summary['property_type']}",
            f"Address: {summary['address']}",
            f"Timeline: {summary['timeline']}",
        ]
        if summary["special_requirements"]:
            lines.append(f"Special requirements: {summary['special_requirements']}")
        lines.append(f"Preferred contact: {summary['preferred_contact_method']}")
        lines.append(f"Best times: {', '.join(summary['contact_times'])}")
        if summary["preferred_date"]:
            lines.append(f"Preferred date: {summary['preferred_date']}")
        return "\n".join(lines)

    def build_payload(self) -> dict[str, Any]:
        summary = self.review_summary()
        return {
            "customer_name": summary["name"],
            "email": summary["email"],
            "phone": summary["phone"] or None,
            "service_requested": summary["service"],
            "property_city": summary["city"] or None,
            "property_state": summary["state"] or None,
            "message": truncate(self._compose_message(summary), MAX_MESSAGE_LENGTH),
            "image_urls": self.image_references(),
        }

    async def submit(self) -> SubmissionResult:
        if self.is_submitting:
            raise SubmissionInProgressError("Quote request is already being submitted")

        # Steps 1-4 stay editable from the review step, so every gate runs again
        for step in WizardStep:
            errors = self.errors_for(step)
            if errors:
                raise StepValidationError(step, errors)

        self.is_submitting = True
        self.submit_error = None
        try:
            quote_id = await self.api.submit_quote(self.build_payload())
        except QuoteApiError as exc:
            logger.warning("Quote submission failed (%s): %s", exc.status_code, exc.errors)
            self.submit_error = "; ".join(exc.errors) if exc.is_validation_error else GENERIC_SUBMIT_ERROR
            return SubmissionResult(success=False, errors=exc.errors)
        finally:
            self.is_submitting = False

        self.store.clear()
        logger.info("Quote request %s submitted", quote_id)
        return SubmissionResult(
            success=True,
            quote_id=quote_id,
            confirmation_path=f"{CONFIRMATION_ROUTE}?id={quote_id}",
        )
