"""
Data-changed events

Producers publish `data_changed` after a successful backend mutation, with the
resource name as sender. Pages always re-fetch from the backend, so nothing
here updates or caches local copies of backend data; the default subscriber
writes the change to the application log.
"""

from __future__ import annotations

from blinker import Namespace

from pharmacy_inventory.logger import get_logger

logger = get_logger("pharmacy_inventory.services.events")

_signals = Namespace()
data_changed = _signals.signal("data-changed")

MOVEMENTS = "movements"
STOCK = "stock"
ITEMS = "items"
SECTORS = "sectors"
USERS = "users"
SETTINGS = "settings"

RESOURCES = (MOVEMENTS, STOCK, ITEMS, SECTORS, USERS, SETTINGS)


def publish(*resources: str, **details) -> None:
    for resource in resources:
        if resource not in RESOURCES:
            raise ValueError(f"Unknown resource: {resource}")
        data_changed.send(resource, **details)


def _log_change(sender: str, **details) -> None:
    logger.info(f"Data changed: {sender} {details or ''}".rstrip())


def register_default_subscribers() -> None:
    # blinker keeps weak references by default; this is a module-level function
    data_changed.connect(_log_change)
