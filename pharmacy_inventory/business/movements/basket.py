"""
Movement basket: the ordered, client-local list of lines composing one
movement before it is submitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterator, Mapping, Optional

from pharmacy_inventory.data.catalog import CatalogItem, ItemKind
from pharmacy_inventory.data.wire import format_date, parse_date


@dataclass(frozen=True)
class DraftLine:
    key: str
    item: CatalogItem
    quantity: int
    lot_number: Optional[str] = None
    expiry_date: Optional[date] = None

    def to_state(self) -> dict:
        return {
            "key": self.key,
            "item_id": self.item.id,
            "item_name": self.item.display_name,
            "item_kind": self.item.kind.value,
            "quantity": self.quantity,
            "lot_number": self.lot_number,
            "expiry_date": format_date(self.expiry_date),
        }

    @classmethod
    def from_state(cls, state: Mapping[str, Any]) -> "DraftLine":
        item = CatalogItem(
            id=state["item_id"],
            display_name=state.get("item_name", ""),
            kind=ItemKind.parse(state.get("item_kind"), default=ItemKind.MEDICAMENTO),
        )
        return cls(
            key=state["key"],
            item=item,
            quantity=int(state["quantity"]),
            lot_number=state.get("lot_number"),
            expiry_date=parse_date(state.get("expiry_date")),
        )


class MovementBasket:
    """
    Insertion-ordered lines. Keys are `<item_id>-<nonce>` with a per-basket
    counter that only grows, so a key is never handed out twice even after
    removals or clear().
    """

    def __init__(self):
        self._lines: list[DraftLine] = []
        self._nonce = 0

    def next_key(self, item_id: str) -> str:
        self._nonce += 1
        return f"{item_id}-{self._nonce}"

    def add_line(self, line: DraftLine) -> None:
        if any(existing.key == line.key for existing in self._lines):
            raise ValueError(f"Duplicate basket key: {line.key}")
        self._lines.append(line)

    def remove_line(self, key: str) -> bool:
        """Remove the line with this key. Unknown keys are ignored (double clicks)."""
        for index, line in enumerate(self._lines):
            if line.key == key:
                del self._lines[index]
                return True
        return False

    def lines(self) -> tuple[DraftLine, ...]:
        return tuple(self._lines)

    def clear(self) -> None:
        self._lines.clear()

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[DraftLine]:
        return iter(self.lines())

    def to_state(self) -> dict:
        return {"nonce": self._nonce, "lines": [line.to_state() for line in self._lines]}

    @classmethod
    def from_state(cls, state: Optional[Mapping[str, Any]]) -> "MovementBasket":
        basket = cls()
        if not state:
            return basket
        basket._nonce = int(state.get("nonce", 0))
        for raw in state.get("lines", []):
            basket.add_line(DraftLine.from_state(raw))
        return basket
