"""
Catalog Service
Lookups and maintenance for items (medicines/supplies) and sectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from pharmacy_inventory.data.catalog import CatalogItem, ItemKind, MedicineType, Sector
from pharmacy_inventory.data.pagination import Page
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import events
from pharmacy_inventory.services.api_client import ApiClient

logger = get_logger("pharmacy_inventory.services.catalog")


def _records(body: Any) -> List[Mapping[str, Any]]:
    """Accept either a bare list or a page envelope."""
    if isinstance(body, list):
        return body
    if isinstance(body, Mapping):
        return body.get("content") or []
    return []


@dataclass(frozen=True)
class ItemForm:
    """Validated create/edit form for an item."""

    name: str
    description: str
    unit: str
    minimum_stock: int
    medicine_type: Optional[MedicineType] = None

    @classmethod
    def parse(cls, kind: ItemKind, form: Mapping[str, Any]) -> tuple[Optional["ItemForm"], list[str]]:
        errors: list[str] = []
        name = (form.get("name") or "").strip()
        description = (form.get("description") or "").strip()
        unit = (form.get("unit") or "").strip()
        raw_minimum = (form.get("minimum_stock") or "0").strip()

        if not name:
            errors.append("Name is required")
        if not unit:
            errors.append("Unit of measure is required")
        try:
            minimum_stock = int(raw_minimum)
            if minimum_stock < 0:
                errors.append("Minimum stock cannot be negative")
        except ValueError:
            minimum_stock = 0
            errors.append("Minimum stock must be a whole number")

        medicine_type = None
        if kind is ItemKind.MEDICAMENTO:
            medicine_type = MedicineType.parse(form.get("medicine_type"))
            if medicine_type is None:
                errors.append("Medicine type is required")

        if errors:
            return None, errors
        return cls(name, description, unit, minimum_stock, medicine_type), []

    def to_payload(self, kind: ItemKind) -> dict:
        payload = {
            "nome": self.name,
            "descricaoDetalhada": self.description,
            "unidadeMedida": self.unit,
            "estoqueMinimo": self.minimum_stock,
        }
        if kind is ItemKind.MEDICAMENTO:
            payload["tipo"] = self.medicine_type.value
        elif kind is not ItemKind.INSUMO:
            raise ValueError(f"Unknown item kind: {kind!r}")
        return payload


class CatalogService:
    """Reads and writes catalog reference data through the backend."""

    def __init__(self, api: ApiClient):
        self.api = api

    # ------------------------------------------------------------------
    # Lookups used by the movement composer
    # ------------------------------------------------------------------

    def list_items(self, only_with_stock: bool = False) -> List[CatalogItem]:
        path = "/itens/com-estoque" if only_with_stock else "/itens"
        return [CatalogItem.from_json(r) for r in _records(self.api.get(path))]

    def list_sectors(self) -> List[Sector]:
        return [Sector.from_json(r) for r in _records(self.api.get("/setores"))]

    # ------------------------------------------------------------------
    # Item management
    # ------------------------------------------------------------------

    def search_items(self, kind: ItemKind, page: int = 0, size: int = 10,
                     search: Optional[str] = None) -> Page[CatalogItem]:
        params = {
            "page": page,
            "size": size,
            "sort": "nome,asc",
            "dtype": kind.value,
        }
        if search:
            params["busca"] = search
        body = self.api.get("/itens", params=params)
        return Page.from_json(body, CatalogItem.from_json, page=page, size=size)

    def get_item(self, kind: ItemKind, item_id: str) -> CatalogItem:
        return CatalogItem.from_json(self.api.get(f"{kind.endpoint}/{item_id}") or {})

    def create_item(self, kind: ItemKind, item_form: ItemForm) -> None:
        self.api.post(kind.endpoint, item_form.to_payload(kind))
        logger.info(f"Created {kind.value} '{item_form.name}'")
        events.publish(events.ITEMS)

    def update_item(self, kind: ItemKind, item_id: str, item_form: ItemForm) -> None:
        self.api.put(f"{kind.endpoint}/{item_id}", item_form.to_payload(kind))
        logger.info(f"Updated {kind.value} {item_id}")
        events.publish(events.ITEMS)

    def delete_item(self, kind: ItemKind, item_id: str) -> None:
        self.api.delete(f"{kind.endpoint}/{item_id}")
        logger.info(f"Deleted {kind.value} {item_id}")
        events.publish(events.ITEMS, events.STOCK)

    # ------------------------------------------------------------------
    # Sector management
    # ------------------------------------------------------------------

    def create_sector(self, name: str) -> None:
        self.api.post("/setores", {"nome": name})
        logger.info(f"Created sector '{name}'")
        events.publish(events.SECTORS)

    def update_sector(self, sector_id: str, name: str) -> None:
        self.api.put(f"/setores/{sector_id}", {"nome": name})
        logger.info(f"Updated sector {sector_id}")
        events.publish(events.SECTORS)

    def delete_sector(self, sector_id: str) -> None:
        self.api.delete(f"/setores/{sector_id}")
        logger.info(f"Deleted sector {sector_id}")
        events.publish(events.SECTORS)
