"""
Movement submitter

Validates the basket and header, turns them into the backend's batch payload
and posts it as one request. The backend is the source of truth: on success the
basket is emptied and callers re-fetch; on failure nothing local changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from pharmacy_inventory.business.movements.basket import MovementBasket
from pharmacy_inventory.business.movements.direction import MovementDirection
from pharmacy_inventory.business.movements.errors import ValidationError
from pharmacy_inventory.data.catalog import Sector
from pharmacy_inventory.data.wire import format_date
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import events
from pharmacy_inventory.services.api_client import ApiClient, ApiError

logger = get_logger("pharmacy_inventory.business.movements.submitter")

GENERIC_FAILURE_MESSAGE = "Failed to register the movement."
SUCCESS_MESSAGE = "Movement registered successfully."


@dataclass(frozen=True)
class MovementHeader:
    direction: MovementDirection
    note: str = ""
    destination_sector: Optional[Sector] = None


@dataclass(frozen=True)
class RequestLine:
    item_id: str
    quantity: int
    lot_number: Optional[str] = None
    expiry_date: Optional[date] = None


@dataclass(frozen=True)
class MovementRequest:
    direction: MovementDirection
    note: str
    destination_sector_id: Optional[str]
    lines: tuple[RequestLine, ...]

    @property
    def endpoint(self) -> str:
        return self.direction.endpoint

    def to_payload(self) -> dict:
        if self.direction is MovementDirection.INBOUND:
            return {
                "observacao": self.note,
                "itens": [
                    {
                        "itemId": line.item_id,
                        "quantidade": line.quantity,
                        "numeroLote": line.lot_number,
                        "dataValidade": format_date(line.expiry_date),
                    }
                    for line in self.lines
                ],
            }
        elif self.direction is MovementDirection.OUTBOUND:
            return {
                "observacao": self.note,
                "setorId": self.destination_sector_id,
                "itens": [{"itemId": line.item_id, "quantidade": line.quantity} for line in self.lines],
            }
        raise ValueError(f"Unknown direction: {self.direction!r}")


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    message: str


def submission_problems(header: MovementHeader, basket: MovementBasket) -> list[str]:
    problems = []
    if basket.is_empty:
        problems.append("Add at least one item before submitting")
    if header.direction.requires_sector and header.destination_sector is None:
        problems.append("Select the destination sector")
    return problems


def validate(header: MovementHeader, basket: MovementBasket) -> None:
    problems = submission_problems(header, basket)
    if problems:
        raise ValidationError(problems)


def build_request(header: MovementHeader, basket: MovementBasket) -> MovementRequest:
    validate(header, basket)
    sector_id = None
    if header.direction.requires_sector:
        sector_id = header.destination_sector.id
    return MovementRequest(
        direction=header.direction,
        note=header.note or "",
        destination_sector_id=sector_id,
        lines=tuple(
            RequestLine(
                item_id=line.item.id,
                quantity=line.quantity,
                lot_number=line.lot_number,
                expiry_date=line.expiry_date,
            )
            for line in basket.lines()
        ),
    )


class MovementSubmitter:

    def __init__(self, api: ApiClient):
        self.api = api

    def submit(self, header: MovementHeader, basket: MovementBasket,
               on_success: Optional[Callable[[], None]] = None) -> SubmissionResult:
        """
        Post the whole basket as one movement.

        Raises:
            ValidationError: empty basket, or outbound without a sector. No
                request is sent in that case.

        Returns:
            SubmissionResult; on failure it carries the backend's message (or a
            generic one) and the basket is left as it was.
        """
        request = build_request(header, basket)

        try:
            self.api.post(request.endpoint, request.to_payload())
        except ApiError as e:
            logger.warning(f"Movement submission ({header.direction.value}) failed: {e}")
            return SubmissionResult(ok=False, message=e.user_message(GENERIC_FAILURE_MESSAGE))

        logger.info(
            f"Movement submitted ({header.direction.value}): "
            f"{len(request.lines)} line(s), sector={request.destination_sector_id}"
        )
        basket.clear()
        events.publish(events.MOVEMENTS, events.STOCK, direction=header.direction.value)
        if on_success is not None:
            on_success()
        return SubmissionResult(ok=True, message=SUCCESS_MESSAGE)
