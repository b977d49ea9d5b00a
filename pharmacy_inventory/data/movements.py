"""Movement history records as returned by `/movimentacoes`."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional

from pharmacy_inventory.data.wire import as_int, as_str, parse_datetime


class MovementKind(str, Enum):
    ENTRADA = "ENTRADA"
    SAIDA = "SAIDA"
    AJUSTE_ENTRADA = "AJUSTE_ENTRADA"
    AJUSTE_SAIDA = "AJUSTE_SAIDA"

    @property
    def is_inbound(self) -> bool:
        return self in (MovementKind.ENTRADA, MovementKind.AJUSTE_ENTRADA)

    @property
    def is_outbound(self) -> bool:
        return self in (MovementKind.SAIDA, MovementKind.AJUSTE_SAIDA)

    @property
    def label(self) -> str:
        if self is MovementKind.ENTRADA:
            return "Inbound"
        elif self is MovementKind.SAIDA:
            return "Outbound"
        elif self is MovementKind.AJUSTE_ENTRADA:
            return "Adjustment (in)"
        elif self is MovementKind.AJUSTE_SAIDA:
            return "Adjustment (out)"
        raise ValueError(f"Unknown movement kind: {self!r}")

    @property
    def badge(self) -> str:
        """CSS badge colour used by the history table."""
        if self.is_inbound:
            return "success"
        if self.is_outbound:
            return "warning"
        return "secondary"

    @classmethod
    def parse(cls, raw: Any) -> Optional["MovementKind"]:
        text = as_str(raw).strip().upper()
        for kind in cls:
            if kind.value == text:
                return kind
        return None


@dataclass(frozen=True)
class MovementSummary:
    id: str
    kind: Optional[MovementKind]
    total_items: int
    total_quantity: int
    sector_name: Optional[str]
    note: str
    moved_at: Optional[datetime]
    employee_name: str

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "MovementSummary":
        return cls(
            id=as_str(record.get("id")),
            kind=MovementKind.parse(record.get("tipoMovimentacao")),
            total_items=as_int(record.get("totalItens")),
            total_quantity=as_int(record.get("quantidadeTotal")),
            sector_name=record.get("nomeSetor") or None,
            note=as_str(record.get("observacao")),
            moved_at=parse_datetime(record.get("dataMovimentacao")),
            employee_name=as_str(record.get("nomeFuncionario")),
        )


@dataclass(frozen=True)
class MovedItem:
    item_name: str
    item_kind: str
    quantity: int

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "MovedItem":
        return cls(
            item_name=as_str(record.get("nomeItem")),
            item_kind=as_str(record.get("tipoItem")),
            quantity=as_int(record.get("quantidade")),
        )


@dataclass(frozen=True)
class MovementDetails:
    id: str
    kind: Optional[MovementKind]
    moved_at: Optional[datetime]
    note: str
    employee_name: str
    sector_name: Optional[str]
    lines: List[MovedItem] = field(default_factory=list)

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "MovementDetails":
        return cls(
            id=as_str(record.get("id")),
            kind=MovementKind.parse(record.get("tipoMovimentacao")),
            moved_at=parse_datetime(record.get("dataMovimentacao")),
            note=as_str(record.get("observacao")),
            employee_name=as_str(record.get("nomeFuncionario")),
            sector_name=record.get("nomeSetor") or None,
            lines=[MovedItem.from_json(r) for r in (record.get("itens") or [])],
        )
