"""SQLite-backed order store."""

from tradeingest.store.database import Database
from tradeingest.store.order_store import OrderStore

__all__ = [
    "Database",
    "OrderStore",
]
