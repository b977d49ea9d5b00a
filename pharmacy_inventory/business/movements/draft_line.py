"""
Draft line builder: holds the line being configured before "Add" commits it
into the basket.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from pharmacy_inventory.business.movements.basket import DraftLine, MovementBasket
from pharmacy_inventory.business.movements.direction import MovementDirection
from pharmacy_inventory.data.catalog import CatalogItem
from pharmacy_inventory.data.wire import parse_date
from pharmacy_inventory.logger import get_logger

logger = get_logger("pharmacy_inventory.business.movements.draft_line")


class DraftLineBuilder:

    def __init__(self, direction: MovementDirection, today: Optional[date] = None):
        self.direction = direction
        # None means "ask the clock at validation time"
        self.today = today
        self.item: Optional[CatalogItem] = None
        self.quantity: Optional[int] = None
        self.lot_number: str = ""
        self.expiry_date: Optional[date] = None
        self.warnings: list[str] = []

    @classmethod
    def from_form(cls, direction: MovementDirection, form: Mapping[str, Any],
                  catalog: Mapping[str, CatalogItem], today: Optional[date] = None) -> "DraftLineBuilder":
        """
        Fill a builder from submitted form fields.

        The item id must resolve to an entry of `catalog`; anything else leaves
        the item unselected.
        """
        builder = cls(direction, today=today)
        builder.item = catalog.get((form.get("item_id") or "").strip())
        builder.quantity = _parse_quantity(form.get("quantity"))
        if direction.requires_lot:
            builder.lot_number = form.get("lot_number") or ""
            builder.expiry_date = parse_date((form.get("expiry_date") or "").strip())
        return builder

    def _today(self) -> date:
        return self.today or date.today()

    def problems(self) -> list[str]:
        problems = []
        if self.item is None:
            problems.append("Select an item")
        if self.quantity is None or self.quantity <= 0:
            problems.append("Quantity must be a whole number greater than zero")
        if self.direction.requires_lot:
            if not self.lot_number.strip():
                problems.append("Lot number is required")
            if self.expiry_date is None:
                problems.append("Expiry date is required")
            elif self.expiry_date <= self._today():
                problems.append("Expiry date must be after today")
        return problems

    def can_commit(self) -> bool:
        return not self.problems()

    def commit(self, basket: MovementBasket) -> Optional[DraftLine]:
        """
        Append the configured line to the basket and reset every field.

        Returns None without touching the basket when the line is incomplete;
        the reasons are left in `warnings` for the UI.
        """
        problems = self.problems()
        if problems:
            self.warnings = problems
            logger.debug(f"Draft line not committed: {problems}")
            return None

        line = DraftLine(
            key=basket.next_key(self.item.id),
            item=self.item,
            quantity=self.quantity,
            lot_number=self.lot_number.strip() if self.direction.requires_lot else None,
            expiry_date=self.expiry_date if self.direction.requires_lot else None,
        )
        basket.add_line(line)
        self.reset()
        return line

    def reset(self) -> None:
        self.item = None
        self.quantity = None
        self.lot_number = ""
        self.expiry_date = None
        self.warnings = []


def _parse_quantity(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        return None
