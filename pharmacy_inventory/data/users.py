from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pharmacy_inventory.data.wire import as_int, as_str

DEFAULT_EXPIRY_ALERT_DAYS = 30
DEFAULT_LOW_STOCK_LIMIT = 10


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    login: str
    active: bool = True

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "Employee":
        return cls(
            id=as_str(record.get("id")),
            name=as_str(record.get("nome")),
            login=as_str(record.get("login")),
            active=bool(record.get("ativo", True)),
        )


@dataclass(frozen=True)
class UserProfile:
    id: str
    name: str
    login: str

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "UserProfile":
        return cls(
            id=as_str(record.get("id")),
            name=as_str(record.get("nome")),
            login=as_str(record.get("login")),
        )


@dataclass(frozen=True)
class AlertSettings:
    expiry_alert_days: int = DEFAULT_EXPIRY_ALERT_DAYS
    low_stock_limit: int = DEFAULT_LOW_STOCK_LIMIT

    @classmethod
    def from_json(cls, record: Optional[Mapping[str, Any]]) -> "AlertSettings":
        record = record or {}
        return cls(
            expiry_alert_days=as_int(record.get("DIAS_ALERTA_VENCIMENTO"), DEFAULT_EXPIRY_ALERT_DAYS),
            low_stock_limit=as_int(record.get("LIMITE_ESTOQUE_BAIXO"), DEFAULT_LOW_STOCK_LIMIT),
        )

    def to_json(self) -> dict:
        return {
            "DIAS_ALERTA_VENCIMENTO": self.expiry_alert_days,
            "LIMITE_ESTOQUE_BAIXO": self.low_stock_limit,
        }
