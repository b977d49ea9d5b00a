"""
Catalog reference data: items (medicines and supplies) and sectors.

Both are owned by the backend; the front-end only reads them and sends
create/update payloads back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from pharmacy_inventory.data.wire import as_int, as_str


class ItemKind(str, Enum):
    """Item category, the backend's `dtype` discriminator."""

    MEDICAMENTO = "MEDICAMENTO"
    INSUMO = "INSUMO"

    @property
    def label(self) -> str:
        if self is ItemKind.MEDICAMENTO:
            return "Medicine"
        elif self is ItemKind.INSUMO:
            return "Supply"
        raise ValueError(f"Unknown item kind: {self!r}")

    @property
    def endpoint(self) -> str:
        """Backend resource used to create, update and delete items of this kind."""
        if self is ItemKind.MEDICAMENTO:
            return "/medicamentos"
        elif self is ItemKind.INSUMO:
            return "/insumos"
        raise ValueError(f"Unknown item kind: {self!r}")

    @property
    def slug(self) -> str:
        return self.value.lower()

    @classmethod
    def parse(cls, raw: Any, default: Optional["ItemKind"] = None) -> Optional["ItemKind"]:
        """Accepts 'MEDICAMENTO', 'medicamento', 'INSUMO', 'insumo'."""
        if isinstance(raw, ItemKind):
            return raw
        text = as_str(raw).strip().upper()
        for kind in cls:
            if kind.value == text:
                return kind
        return default


class MedicineType(str, Enum):
    ORAL = "ORAL"
    INJETAVEL = "INJETAVEL"
    CONTROLADO = "CONTROLADO"

    @property
    def label(self) -> str:
        return {
            MedicineType.ORAL: "Oral",
            MedicineType.INJETAVEL: "Injectable",
            MedicineType.CONTROLADO: "Controlled",
        }[self]

    @classmethod
    def parse(cls, raw: Any) -> Optional["MedicineType"]:
        text = as_str(raw).strip().upper()
        for medicine_type in cls:
            if medicine_type.value == text:
                return medicine_type
        return None


@dataclass(frozen=True)
class CatalogItem:
    id: str
    display_name: str
    kind: ItemKind = ItemKind.MEDICAMENTO
    description: str = ""
    unit: str = ""
    minimum_stock: int = 0
    active: bool = True
    has_stock: bool = False
    # Only set for medicines
    medicine_type: Optional[MedicineType] = None

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "CatalogItem":
        kind = ItemKind.parse(record.get("dtype"), default=ItemKind.MEDICAMENTO)
        medicine_type = MedicineType.parse(record.get("tipo")) if kind is ItemKind.MEDICAMENTO else None
        return cls(
            id=as_str(record.get("id")),
            display_name=as_str(record.get("nome")),
            kind=kind,
            description=as_str(record.get("descricaoDetalhada")),
            unit=as_str(record.get("unidadeMedida")),
            minimum_stock=as_int(record.get("estoqueMinimo")),
            active=bool(record.get("ativo", True)),
            has_stock=bool(record.get("possuiEstoque", False)),
            medicine_type=medicine_type,
        )


@dataclass(frozen=True)
class Sector:
    id: str
    display_name: str

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "Sector":
        return cls(id=as_str(record.get("id")), display_name=as_str(record.get("nome")))
