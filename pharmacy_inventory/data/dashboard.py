from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pharmacy_inventory.data.wire import as_int, as_str


@dataclass(frozen=True)
class DashboardStats:
    total_medicines: int = 0
    total_supplies: int = 0
    lots_near_expiry: int = 0
    items_low_stock: int = 0
    medicines_in_stock: int = 0
    supplies_in_stock: int = 0

    @classmethod
    def from_json(cls, record: Optional[Mapping[str, Any]]) -> "DashboardStats":
        record = record or {}
        return cls(
            total_medicines=as_int(record.get("totalMedicamentos")),
            total_supplies=as_int(record.get("totalInsumos")),
            lots_near_expiry=as_int(record.get("lotesProximosVencimento")),
            items_low_stock=as_int(record.get("itensEstoqueBaixo")),
            medicines_in_stock=as_int(record.get("medicamentosComEstoque")),
            supplies_in_stock=as_int(record.get("insumosComEstoque")),
        )


@dataclass(frozen=True)
class StockAlert:
    """One entry of the expiring-lots or low-stock lists."""

    item_id: str
    item_name: str
    # "Lote: <n> (Qtd: <q>)" for expiring lots, the total quantity for low stock
    extra_info: str
    days_to_expiry: Optional[int] = None

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "StockAlert":
        days = record.get("diasParaVencer")
        return cls(
            item_id=as_str(record.get("itemId")),
            item_name=as_str(record.get("nomeItem")),
            extra_info=as_str(record.get("extraInfo")),
            days_to_expiry=as_int(days) if days is not None else None,
        )


@dataclass(frozen=True)
class ChartPoint:
    label: str
    value: int

    def to_json(self) -> dict:
        return {"label": self.label, "value": self.value}
