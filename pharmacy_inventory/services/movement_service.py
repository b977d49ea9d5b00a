"""
Movement Service
Read side of stock movements: history, details and the daily outbound report.
Submission lives in business.movements.submitter.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pharmacy_inventory.data.movements import MovementDetails, MovementSummary
from pharmacy_inventory.data.wire import format_date
from pharmacy_inventory.services.api_client import ApiClient


class MovementService:

    def __init__(self, api: ApiClient):
        self.api = api

    def list_history(self) -> List[MovementSummary]:
        """Most recent movement first."""
        body = self.api.get("/movimentacoes") or []
        if isinstance(body, dict):
            body = body.get("content") or []
        movements = [MovementSummary.from_json(r) for r in body]
        # Undated records go last
        return sorted(movements, key=lambda m: m.moved_at.timestamp() if m.moved_at else float("-inf"), reverse=True)

    def get_details(self, movement_id: str) -> MovementDetails:
        return MovementDetails.from_json(self.api.get(f"/movimentacoes/{movement_id}") or {})

    def daily_outbound_report(self, day: date) -> bytes:
        """PDF bytes rendered by the backend."""
        return self.api.get_bytes("/relatorios/saidas-diarias", params={"data": format_date(day)})

    @staticmethod
    def report_filename(day: date) -> str:
        return f"relatorio_saidas_{format_date(day)}.pdf"


def paginate(rows: list, page: int, per_page: int) -> tuple[list, int]:
    """Slice an in-memory list the way the history table pages it."""
    total_pages = max(1, (len(rows) + per_page - 1) // per_page)
    page = min(max(page, 0), total_pages - 1)
    start = page * per_page
    return rows[start:start + per_page], total_pages


def parse_report_day(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        return None
