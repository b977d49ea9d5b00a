"""
Movement composer: lifecycle of one "register movement" dialog.

    CLOSED -> OPEN (empty basket) -> OPEN (composing) -> SUBMITTING
        SUBMITTING -> CLOSED       on success
        SUBMITTING -> OPEN         on failure, basket intact

Closing from any OPEN state discards the basket; drafts are never kept.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Mapping, Optional

from pharmacy_inventory.business.movements.basket import DraftLine, MovementBasket
from pharmacy_inventory.business.movements.direction import MovementDirection
from pharmacy_inventory.business.movements.draft_line import DraftLineBuilder
from pharmacy_inventory.business.movements.errors import ValidationError
from pharmacy_inventory.business.movements.submitter import (
    MovementHeader,
    SubmissionResult,
    submission_problems,
)
from pharmacy_inventory.data.catalog import Sector
from pharmacy_inventory.logger import get_logger

logger = get_logger("pharmacy_inventory.business.movements.composer")


class ComposerState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    SUBMITTING = "SUBMITTING"


class MovementComposer:

    def __init__(self, direction: MovementDirection):
        self.direction = direction
        self.state = ComposerState.CLOSED
        self.dialog_id: Optional[str] = None
        self.basket = MovementBasket()
        self.note = ""
        self.destination_sector: Optional[Sector] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state is not ComposerState.CLOSED

    def open(self) -> None:
        self.state = ComposerState.OPEN
        self.dialog_id = uuid.uuid4().hex
        self.basket = MovementBasket()
        self.note = ""
        self.destination_sector = None
        logger.debug(f"Composer {self.direction.value} opened ({self.dialog_id})")

    def close(self) -> None:
        if self.is_open:
            logger.debug(f"Composer {self.direction.value} closed ({self.dialog_id}), "
                         f"{len(self.basket)} draft line(s) discarded")
        self.state = ComposerState.CLOSED
        self.dialog_id = None
        self.basket = MovementBasket()
        self.note = ""
        self.destination_sector = None

    def _require_editable(self) -> None:
        if self.state is ComposerState.CLOSED:
            raise ValidationError("The movement dialog is not open")
        if self.state is ComposerState.SUBMITTING:
            raise ValidationError("A submission is already in progress")

    # ------------------------------------------------------------------
    # Composing
    # ------------------------------------------------------------------

    def add_line(self, builder: DraftLineBuilder) -> Optional[DraftLine]:
        self._require_editable()
        if builder.direction is not self.direction:
            raise ValueError("Draft line direction does not match the dialog")
        return builder.commit(self.basket)

    def remove_line(self, key: str) -> bool:
        self._require_editable()
        return self.basket.remove_line(key)

    def set_header(self, note: Optional[str] = None, destination_sector: Optional[Sector] = None) -> None:
        self._require_editable()
        if note is not None:
            self.note = note.strip()
        if self.direction.requires_sector:
            self.destination_sector = destination_sector

    @property
    def header(self) -> MovementHeader:
        return MovementHeader(self.direction, self.note, self.destination_sector)

    def submit_problems(self) -> list[str]:
        if self.state is ComposerState.SUBMITTING:
            return ["A submission is already in progress"]
        if self.state is ComposerState.CLOSED:
            return ["The movement dialog is not open"]
        return submission_problems(self.header, self.basket)

    @property
    def can_submit(self) -> bool:
        """Drives the disabled state of the submit button."""
        return not self.submit_problems()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def begin_submit(self) -> str:
        """Enter SUBMITTING; returns the dialog id the result must match."""
        problems = self.submit_problems()
        if problems:
            raise ValidationError(problems)
        self.state = ComposerState.SUBMITTING
        return self.dialog_id

    def finish_submit(self, result: SubmissionResult, dialog_id: str) -> bool:
        """
        Apply a submission result. Results for a dialog that was closed or
        reopened in the meantime are dropped; returns whether it was applied.
        """
        if self.state is not ComposerState.SUBMITTING or dialog_id != self.dialog_id:
            logger.info(f"Ignoring late submission result for dialog {dialog_id}")
            return False
        if result.ok:
            self.close()
        else:
            self.state = ComposerState.OPEN
        return True

    # ------------------------------------------------------------------
    # Persistence (see store.py)
    # ------------------------------------------------------------------

    def to_state(self) -> dict:
        return {
            "direction": self.direction.value,
            "state": self.state.value,
            "dialog_id": self.dialog_id,
            "note": self.note,
            "sector": (
                {"id": self.destination_sector.id, "nome": self.destination_sector.display_name}
                if self.destination_sector else None
            ),
            "basket": self.basket.to_state(),
        }

    @classmethod
    def from_state(cls, direction: MovementDirection, state: Optional[Mapping[str, Any]]) -> "MovementComposer":
        composer = cls(direction)
        if not state or state.get("direction") != direction.value:
            return composer
        composer.state = ComposerState(state.get("state", ComposerState.CLOSED.value))
        composer.dialog_id = state.get("dialog_id")
        composer.note = state.get("note") or ""
        sector = state.get("sector")
        composer.destination_sector = Sector.from_json(sector) if sector else None
        composer.basket = MovementBasket.from_state(state.get("basket"))
        return composer
