"""Business logic services."""
from circulation.services.fine_service import FineEngine
from circulation.services.inventory_service import InventoryStore
from circulation.services.ledger_service import IssueBatch, LendingLedger
from circulation.services.projection_service import LibraryProjections
from circulation.services.request_service import RequestProcessor
from circulation.services.settings_service import SettingsProvider

__all__ = [
    "FineEngine",
    "InventoryStore",
    "IssueBatch",
    "LendingLedger",
    "LibraryProjections",
    "RequestProcessor",
    "SettingsProvider",
]
