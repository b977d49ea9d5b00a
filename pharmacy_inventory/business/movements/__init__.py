"""
Stock movement composition: draft lines, the basket, submission and the
dialog lifecycle.
"""

from pharmacy_inventory.business.movements.basket import DraftLine, MovementBasket
from pharmacy_inventory.business.movements.composer import ComposerState, MovementComposer
from pharmacy_inventory.business.movements.direction import MovementDirection
from pharmacy_inventory.business.movements.draft_line import DraftLineBuilder
from pharmacy_inventory.business.movements.errors import ValidationError
from pharmacy_inventory.business.movements.store import ComposerStore
from pharmacy_inventory.business.movements.submitter import (
    MovementHeader,
    MovementRequest,
    MovementSubmitter,
    SubmissionResult,
)

__all__ = [
    "ComposerState",
    "ComposerStore",
    "DraftLine",
    "DraftLineBuilder",
    "MovementBasket",
    "MovementComposer",
    "MovementDirection",
    "MovementHeader",
    "MovementRequest",
    "MovementSubmitter",
    "SubmissionResult",
    "ValidationError",
]
