"""Profit/loss persistence."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from datetime import datetime

from tradeingest.exceptions import StoreError
from tradeingest.profit_loss.models import ProfitLossEntry
from tradeingest.store.database import Database
from tradeingest.time.days import from_db_time, to_db_time

logger = logging.getLogger(__name__)


class ProfitLossRepository:
    """Stores profit/loss points in the shared database."""

    def __init__(self, database: Database | None):
        if database is None:
            raise StoreError("database handle is required")
        self.database = database

    async def save_entries(self, entries: Sequence[ProfitLossEntry]) -> int:
        """Bulk insert. Empty input is a no-op."""
        if not entries:
            return 0
        return await self.database.run(self._save_entries_sync, list(entries))

    def _save_entries_sync(self, entries: list[ProfitLossEntry]) -> int:
        try:
            with self.database.connect() as conn:
                conn.executemany(
                    "INSERT INTO profit_loss (timestamp, value) VALUES (?, ?)",
                    [(to_db_time(e.timestamp), e.value) for e in entries],
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to insert entries: {e}") from e
        return len(entries)

    async def get_by_date_range(self, start: datetime, end: datetime) -> list[ProfitLossEntry]:
        """Entries with ``start <= timestamp <= end``, oldest first."""
        return await self.database.run(self._get_by_date_range_sync, start, end)

    def _get_by_date_range_sync(self, start: datetime, end: datetime) -> list[ProfitLossEntry]:
        try:
            with self.database.connect() as conn:
                rows = conn.execute(
                    """
                    SELECT timestamp, value FROM profit_loss
                    WHERE timestamp >= ? AND timestamp <= ?
                    ORDER BY timestamp, id
                    """,
                    (to_db_time(start), to_db_time(end)),
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to query profit loss: {e}") from e

        return [ProfitLossEntry(timestamp=from_db_time(ts), value=value) for ts, value in rows]
