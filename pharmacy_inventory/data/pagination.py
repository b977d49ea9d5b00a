"""Backend page envelope: `{content: [...], totalElements: n}`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Mapping, TypeVar

from pharmacy_inventory.data.wire import as_int

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    content: List[T] = field(default_factory=list)
    total_elements: int = 0
    page: int = 0  # zero-based, as the backend counts
    size: int = 10

    @classmethod
    def from_json(cls, body: Any, parse: Callable[[Mapping[str, Any]], T], page: int, size: int) -> "Page[T]":
        # Some endpoints answer with a bare list instead of a page envelope
        if isinstance(body, list):
            records = body
            total = len(body)
        elif isinstance(body, Mapping):
            records = body.get("content") or []
            total = as_int(body.get("totalElements"), default=len(records))
        else:
            records = []
            total = 0
        return cls(content=[parse(r) for r in records], total_elements=total, page=page, size=size)

    @property
    def page_count(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total_elements + self.size - 1) // self.size

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.page_count
