"""pharmacy_inventory.services.grid_state

Pagination/search state of the server-paged tables (items, stock balances).

The state round-trips through the query string so that a reload, a bookmark or
the back button shows the same page. Changing the search term or the tab
always goes back to the first page.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from pharmacy_inventory.data.catalog import ItemKind

DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (10, 25, 50)


@dataclass(frozen=True)
class GridState:
    page: int = 0  # zero-based, as the backend expects
    size: int = DEFAULT_PAGE_SIZE
    search: Optional[str] = None
    kind: Optional[ItemKind] = None

    @staticmethod
    def parse(args: Any, default_size: int = DEFAULT_PAGE_SIZE,
              default_kind: Optional[ItemKind] = None) -> "GridState":
        """
        Parse a Flask `request.args`-like mapping.

        Back-compat: accepts `q` as well as `search` for the search box.
        """
        def _get_int(key: str) -> Optional[int]:
            raw = args.get(key)
            if raw in (None, ""):
                return None
            try:
                return int(raw)
            except (TypeError, ValueError):
                return None

        page = _get_int("page")
        size = _get_int("size")
        search = (args.get("search") or args.get("q") or "").strip() or None
        return GridState(
            page=page if page is not None and page >= 0 else 0,
            size=size if size in PAGE_SIZE_OPTIONS else default_size,
            search=search,
            kind=ItemKind.parse(args.get("kind"), default=default_kind),
        )

    def with_kind(self, kind: ItemKind) -> "GridState":
        return replace(self, kind=kind, page=0)

    def with_page(self, page: int) -> "GridState":
        return replace(self, page=max(page, 0))

    def to_query(self) -> dict[str, Any]:
        """Non-empty values only, ready for url_for(**state.to_query())."""
        query: dict[str, Any] = {"page": self.page, "size": self.size}
        if self.search:
            query["search"] = self.search
        if self.kind is not None:
            query["kind"] = self.kind.slug
        return query
