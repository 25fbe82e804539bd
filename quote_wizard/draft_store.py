"""
quote_wizard/draft_store.py
Persists the in-progress quote wizard as one versioned JSON document so a
reload resumes where the visitor left off. Image data is never stored.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DRAFT_VERSION = 1
DEFAULT_DRAFT_PATH = "~/.remodel/quote-draft.json"


class WizardDraft(BaseModel):
    version: int = DRAFT_VERSION
    current_step: int = 1
    completed_steps: int = 0  # bit n-1 set when step n has passed its gate
    steps: dict[str, dict] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DraftStore:
    """File-backed draft storage; last write wins."""

    def __init__(self, path: str | Path | None = None) -> None:
        raw = path or os.getenv("QUOTE_DRAFT_PATH", DEFAULT_DRAFT_PATH)
        self.path = Path(raw).expanduser()

    def load(self) -> Optional[WizardDraft]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read quote draft %s: %s", self.path, exc)
            return None

        try:
            draft = WizardDraft.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding corrupt quote draft %s: %s", self.path, exc)
            self.clear()
            return None

        if draft.version != DRAFT_VERSION:
            logger.warning("Discarding quote draft with unknown version %s", draft.version)
            self.clear()
            return None
        return draft

    def save(self, draft: WizardDraft) -> None:
        draft.updated_at = datetime.now(timezone.utc)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(draft.model_dump_json(), encoding="utf-8")
        os.replace(tmp, self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
