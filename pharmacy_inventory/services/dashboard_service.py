"""
Dashboard Service
Counters, alert lists and chart series for the dashboard page.
"""

from __future__ import annotations

from typing import Any, List, Mapping

from pharmacy_inventory.data.dashboard import ChartPoint, DashboardStats, StockAlert
from pharmacy_inventory.data.wire import as_int, as_str
from pharmacy_inventory.services.api_client import ApiClient

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

CONSUMPTION_PERIODS = ("DIA", "MES", "ANO")


class DashboardService:

    def __init__(self, api: ApiClient):
        self.api = api

    def get_stats(self) -> DashboardStats:
        return DashboardStats.from_json(self.api.get("/dashboard/stats"))

    def expiring_lots(self) -> List[StockAlert]:
        return [StockAlert.from_json(r) for r in (self.api.get("/dashboard/vencimento") or [])]

    def low_stock(self) -> List[StockAlert]:
        return [StockAlert.from_json(r) for r in (self.api.get("/dashboard/estoque-baixo") or [])]

    def movements_per_month(self) -> dict:
        """
        Inbound/outbound totals per month.

        Records look like {mes: 1..12, entradas: n, saidas: n}; `mes` may also
        arrive as an already formatted label.
        """
        labels: List[str] = []
        inbound: List[int] = []
        outbound: List[int] = []
        for record in self.api.get("/dashboard/movimentacoes-por-mes") or []:
            labels.append(_month_label(record.get("mes")))
            inbound.append(as_int(record.get("entradas")))
            outbound.append(as_int(record.get("saidas")))
        return {"labels": labels, "inbound": inbound, "outbound": outbound}

    def stock_by_item(self) -> List[ChartPoint]:
        return [
            ChartPoint(as_str(r.get("nomeItem")), as_int(r.get("quantidadeTotal")))
            for r in (self.api.get("/dashboard/grafico-estoque") or [])
        ]

    def consumption_by_sector(self, period: str = "MES") -> List[ChartPoint]:
        if period not in CONSUMPTION_PERIODS:
            raise ValueError(f"Unknown period: {period}")
        body = self.api.get("/dashboard/consumo-setor", params={"periodo": period}) or []
        return [_consumption_point(r) for r in body]


def _month_label(raw: Any) -> str:
    number = as_int(raw, default=0)
    if 1 <= number <= 12:
        return MONTH_LABELS[number - 1]
    return as_str(raw)


def _consumption_point(record: Mapping[str, Any]) -> ChartPoint:
    label = record.get("nomeSetor") or record.get("setor") or ""
    value = record.get("quantidadeTotal", record.get("quantidade"))
    return ChartPoint(as_str(label), as_int(value))
