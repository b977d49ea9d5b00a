"""
Data package: immutable records parsed from the backend's JSON.
"""

from pharmacy_inventory.data.catalog import CatalogItem, ItemKind, MedicineType, Sector
from pharmacy_inventory.data.dashboard import ChartPoint, DashboardStats, StockAlert
from pharmacy_inventory.data.movements import MovedItem, MovementDetails, MovementKind, MovementSummary
from pharmacy_inventory.data.pagination import Page
from pharmacy_inventory.data.stock import Lot, StockBalance
from pharmacy_inventory.data.users import AlertSettings, Employee, UserProfile

__all__ = [
    "AlertSettings",
    "CatalogItem",
    "ChartPoint",
    "DashboardStats",
    "Employee",
    "ItemKind",
    "Lot",
    "MedicineType",
    "MovedItem",
    "MovementDetails",
    "MovementKind",
    "MovementSummary",
    "Page",
    "Sector",
    "StockAlert",
    "StockBalance",
    "UserProfile",
]
