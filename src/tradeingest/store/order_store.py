"""Order store: bulk writes, day aggregation and daily summaries."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from datetime import date, datetime, timezone, tzinfo

from tradeingest.constants import TransactionSide
from tradeingest.exceptions import StoreError, SummaryNotFoundError
from tradeingest.orders.models import DailySummary, DayAggregate, Order
from tradeingest.store.database import Database
from tradeingest.time.days import from_db_time, start_of_day, to_db_time

logger = logging.getLogger(__name__)


class OrderStore:
    """
    Time-indexed order storage plus one summary row per calendar day.

    Days are computed in ``tz``; timestamps are stored as UTC text.
    """

    def __init__(self, database: Database, tz: tzinfo = timezone.utc):
        self.database = database
        self.tz = tz

    async def insert_orders(self, orders: Sequence[Order]) -> int:
        """Persist a batch in one transaction. Empty input is a no-op."""
        if not orders:
            return 0
        count = await self.database.run(self._insert_orders_sync, list(orders))
        logger.debug(f"Inserted {count} orders")
        return count

    def _insert_orders_sync(self, orders: list[Order]) -> int:
        rows = [
            (
                to_db_time(o.timestamp),
                o.transaction_type,
                o.symbol,
                o.product,
                o.quantity,
                o.average_price,
                o.order_status,
                o.metadata.strike_price,
                o.metadata.option_type.value,
            )
            for o in orders
        ]
        try:
            with self.database.connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO orders (
                        timestamp, transaction_type, symbol, product, quantity,
                        average_price, order_status, strike_price, option_type
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to insert orders: {e}") from e
        return len(rows)

    async def aggregate_day(self, start: datetime, end: datetime) -> DayAggregate | None:
        """Group orders with ``start <= timestamp < end``. None when nothing matches."""
        return await self.database.run(self._aggregate_day_sync, start, end)

    def _aggregate_day_sync(self, start: datetime, end: datetime) -> DayAggregate | None:
        try:
            with self.database.connect() as conn:
                row = conn.execute(
                    """
                    SELECT
                        COUNT(*),
                        COALESCE(SUM(CASE WHEN transaction_type = ? THEN quantity ELSE 0 END), 0),
                        COALESCE(SUM(CASE WHEN transaction_type = ? THEN quantity ELSE 0 END), 0),
                        COUNT(DISTINCT symbol)
                    FROM orders
                    WHERE timestamp >= ? AND timestamp < ?
                    """,
                    (
                        TransactionSide.BUY.value,
                        TransactionSide.SELL.value,
                        to_db_time(start),
                        to_db_time(end),
                    ),
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to aggregate daily summary: {e}") from e

        total_trades, buy_qty, sell_qty, unique_symbols = row
        if total_trades == 0:
            return None

        return DayAggregate(
            day_start=start,
            day_end=end,
            total_trades=total_trades,
            total_buy_quantity=buy_qty,
            total_sell_quantity=sell_qty,
            unique_symbols=unique_symbols,
        )

    async def upsert_summary(self, summary: DailySummary) -> None:
        """Insert or fully replace the summary for ``summary.date``."""
        await self.database.run(self._upsert_summary_sync, summary)

    def _upsert_summary_sync(self, summary: DailySummary) -> None:
        try:
            with self.database.connect() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO daily_summaries (
                        date, total_trades, total_buy_quantity, total_sell_quantity,
                        unique_symbols, last_updated
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        to_db_time(summary.date),
                        summary.total_trades,
                        summary.total_buy_quantity,
                        summary.total_sell_quantity,
                        summary.unique_symbols,
                        to_db_time(summary.last_updated),
                    ),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to update daily summary document: {e}") from e

    async def get_daily_summary(self, day: date | datetime) -> DailySummary:
        """
        Point lookup of the stored summary; never recomputes.

        Raises:
            SummaryNotFoundError: If no summary was written for that day.
        """
        key = start_of_day(day, self.tz)
        summary = await self.database.run(self._get_summary_sync, key)
        if summary is None:
            raise SummaryNotFoundError(f"No daily summary for {key.date().isoformat()}")
        return summary

    def _get_summary_sync(self, key: datetime) -> DailySummary | None:
        try:
            with self.database.connect() as conn:
                row = conn.execute(
                    """
                    SELECT date, total_trades, total_buy_quantity, total_sell_quantity,
                           unique_symbols, last_updated
                    FROM daily_summaries WHERE date = ?
                    """,
                    (to_db_time(key),),
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to get daily summary: {e}") from e

        if row is None:
            return None

        return DailySummary(
            date=from_db_time(row[0], self.tz),
            total_trades=row[1],
            total_buy_quantity=row[2],
            total_sell_quantity=row[3],
            unique_symbols=row[4],
            last_updated=from_db_time(row[5], self.tz),
        )

    async def count_orders(self, start: datetime | None = None, end: datetime | None = None) -> int:
        """Count stored orders, optionally within ``[start, end)``."""
        return await self.database.run(self._count_orders_sync, start, end)

    def _count_orders_sync(self, start: datetime | None, end: datetime | None) -> int:
        clauses = []
        params: list[str] = []
        if start is not None:
            clauses.append("timestamp >= ?")
            params.append(to_db_time(start))
        if end is not None:
            clauses.append("timestamp < ?")
            params.append(to_db_time(end))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        try:
            with self.database.connect() as conn:
                (count,) = conn.execute(f"SELECT COUNT(*) FROM orders{where}", params).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to count orders: {e}") from e
        return count
