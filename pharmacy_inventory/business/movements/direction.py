from __future__ import annotations

from enum import Enum


class MovementDirection(str, Enum):
    """Which way stock flows in a composed movement."""

    INBOUND = "entrada"
    OUTBOUND = "saida"

    @property
    def endpoint(self) -> str:
        if self is MovementDirection.INBOUND:
            return "/movimentacoes/entrada"
        elif self is MovementDirection.OUTBOUND:
            return "/movimentacoes/saida"
        raise ValueError(f"Unknown direction: {self!r}")

    @property
    def heading(self) -> str:
        if self is MovementDirection.INBOUND:
            return "Register stock entry"
        elif self is MovementDirection.OUTBOUND:
            return "Register issue to sector"
        raise ValueError(f"Unknown direction: {self!r}")

    @property
    def requires_lot(self) -> bool:
        """Inbound lines carry lot number and expiry date."""
        return self is MovementDirection.INBOUND

    @property
    def requires_sector(self) -> bool:
        return self is MovementDirection.OUTBOUND

    @classmethod
    def from_slug(cls, slug: str) -> "MovementDirection":
        for direction in cls:
            if direction.value == (slug or "").lower():
                return direction
        raise ValueError(f"Unknown movement direction: {slug!r}")
