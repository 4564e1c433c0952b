"""Day Aggregator - recomputes the daily summary from persisted orders."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import date, datetime

from tradeingest.orders.models import DailySummary
from tradeingest.store.order_store import OrderStore
from tradeingest.time.days import day_bounds

logger = logging.getLogger(__name__)


class DayAggregator:
    """
    Rebuilds one day's summary from the full persisted order set.

    Each update recomputes from scratch rather than incrementing, and the
    read-aggregate-upsert sequence for a given day runs under that day's lock,
    so concurrent files for the same day leave the summary consistent with
    the store.
    """

    def __init__(self, store: OrderStore):
        self.store = store
        self._locks: defaultdict[date, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def update(self, reference: datetime) -> DailySummary | None:
        """
        Recompute and upsert the summary for the day containing ``reference``.

        Returns:
            The written summary, or None if the day has no orders (nothing is written).
        """
        start, end = day_bounds(reference, self.store.tz)

        async with self._locks[start.date()]:
            aggregate = await self.store.aggregate_day(start, end)
            if aggregate is None:
                logger.info(f"No orders for {start.date()}, summary not written")
                return None

            summary = DailySummary.from_aggregate(aggregate, last_updated=datetime.now(self.store.tz))
            await self.store.upsert_summary(summary)

        logger.info(
            f"Summary {start.date()}: trades={summary.total_trades} "
            f"buy={summary.total_buy_quantity} sell={summary.total_sell_quantity} "
            f"symbols={summary.unique_symbols}"
        )
        return summary
