"""
Stock Service
Stock balances per item, lots per item and lot adjustments.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Mapping, Any, Optional

from pharmacy_inventory.data.pagination import Page
from pharmacy_inventory.data.stock import Lot, StockBalance
from pharmacy_inventory.data.wire import format_date, parse_date
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import events
from pharmacy_inventory.services.api_client import ApiClient

logger = get_logger("pharmacy_inventory.services.stock")


@dataclass(frozen=True)
class LotAdjustment:
    new_quantity: int
    new_expiry_date: date
    note: str

    @classmethod
    def parse(cls, form: Mapping[str, Any]) -> tuple[Optional["LotAdjustment"], list[str]]:
        """All three fields are required; quantity may be zero (lot emptied)."""
        errors: list[str] = []
        raw_quantity = (form.get("quantity") or "").strip()
        expiry = parse_date((form.get("expiry_date") or "").strip())
        note = (form.get("note") or "").strip()

        quantity = 0
        if raw_quantity == "":
            errors.append("Quantity is required")
        else:
            try:
                quantity = int(raw_quantity)
                if quantity < 0:
                    errors.append("Quantity cannot be negative")
            except ValueError:
                errors.append("Quantity must be a whole number")
        if expiry is None:
            errors.append("Expiry date is required")
        if not note:
            errors.append("A note explaining the adjustment is required")

        if errors:
            return None, errors
        return cls(quantity, expiry, note), []

    def to_payload(self) -> dict:
        return {
            "novaQuantidade": self.new_quantity,
            "novaDataValidade": format_date(self.new_expiry_date),
            "observacao": self.note,
        }


class StockService:

    def __init__(self, api: ApiClient):
        self.api = api

    def list_balances(self, page: int = 0, size: int = 10, search: Optional[str] = None) -> Page[StockBalance]:
        params = {"page": page, "size": size, "sort": "item.nome,asc"}
        if search:
            params["busca"] = search
        body = self.api.get("/estoque", params=params)
        return Page.from_json(body, StockBalance.from_json, page=page, size=size)

    def list_lots(self, item_id: str) -> List[Lot]:
        body = self.api.get(f"/estoque/item/{item_id}") or []
        lots = [Lot.from_json(r) for r in body]
        # Earliest expiry first, undated lots last
        return sorted(lots, key=lambda lot: (lot.expiry_date is None, lot.expiry_date or date.max))

    def adjust_lot(self, lot_id: str, adjustment: LotAdjustment) -> None:
        self.api.put(f"/estoque/ajustar/{lot_id}", adjustment.to_payload())
        logger.info(f"Adjusted lot {lot_id} to {adjustment.new_quantity}")
        events.publish(events.STOCK, events.MOVEMENTS)
