from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from pharmacy_inventory.data.catalog import ItemKind
from pharmacy_inventory.data.wire import as_int, as_str, parse_date


@dataclass(frozen=True)
class StockBalance:
    """Total quantity on hand for one item, summed over its lots."""

    item_id: str
    item_name: str
    kind: Optional[ItemKind]
    total_quantity: int

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "StockBalance":
        return cls(
            item_id=as_str(record.get("itemId")),
            item_name=as_str(record.get("nomeItem")),
            kind=ItemKind.parse(record.get("dtype")),
            total_quantity=as_int(record.get("quantidadeTotal")),
        )


@dataclass(frozen=True)
class Lot:
    id: str
    lot_number: str
    expiry_date: Optional[date]
    quantity: int
    item_id: str
    item_name: str
    item_kind: Optional[ItemKind]

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "Lot":
        return cls(
            id=as_str(record.get("id")),
            lot_number=as_str(record.get("numeroLote")),
            expiry_date=parse_date(record.get("dataValidade")),
            quantity=as_int(record.get("quantidade")),
            item_id=as_str(record.get("itemId")),
            item_name=as_str(record.get("nomeItem")),
            item_kind=ItemKind.parse(record.get("tipoItem")),
        )

    def days_to_expiry(self, today: Optional[date] = None) -> Optional[int]:
        if self.expiry_date is None:
            return None
        return (self.expiry_date - (today or date.today())).days
