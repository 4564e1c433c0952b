"""Tests for the SQLite order store."""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_order
from tradeingest.exceptions import StoreError, SummaryNotFoundError
from tradeingest.orders.models import DailySummary
from tradeingest.store.database import Database
from tradeingest.store.order_store import OrderStore

DAY_START = datetime(2025, 1, 15, tzinfo=timezone.utc)
DAY_END = DAY_START + timedelta(hours=24)


@pytest.mark.asyncio
async def test_insert_orders_bulk(order_store: OrderStore) -> None:
    orders = [make_order(DAY_START + timedelta(minutes=i)) for i in range(5)]
    assert await order_store.insert_orders(orders) == 5
    assert await order_store.count_orders() == 5


@pytest.mark.asyncio
async def test_insert_empty_is_noop(order_store: OrderStore) -> None:
    assert await order_store.insert_orders([]) == 0
    assert await order_store.count_orders() == 0


@pytest.mark.asyncio
async def test_aggregate_day_totals(order_store: OrderStore) -> None:
    await order_store.insert_orders(
        [
            make_order(DAY_START + timedelta(hours=9), "B", 10),
            make_order(DAY_START + timedelta(hours=10), "B", 5, symbol="NIFTY25JAN18100CE"),
            make_order(DAY_START + timedelta(hours=11), "S", 7),
        ]
    )

    aggregate = await order_store.aggregate_day(DAY_START, DAY_END)

    assert aggregate is not None
    assert aggregate.total_trades == 3
    assert aggregate.total_buy_quantity == 15
    assert aggregate.total_sell_quantity == 7
    assert aggregate.unique_symbols == 2
    assert aggregate.day_start == DAY_START


@pytest.mark.asyncio
async def test_aggregate_window_is_half_open(order_store: OrderStore) -> None:
    await order_store.insert_orders(
        [
            make_order(DAY_START, "B", 1),
            make_order(DAY_END - timedelta(seconds=1), "B", 2),
            make_order(DAY_END, "B", 4),
            make_order(DAY_START - timedelta(seconds=1), "B", 8),
        ]
    )

    aggregate = await order_store.aggregate_day(DAY_START, DAY_END)

    assert aggregate.total_trades == 2
    assert aggregate.total_buy_quantity == 3


@pytest.mark.asyncio
async def test_other_sides_count_as_trades_only(order_store: OrderStore) -> None:
    await order_store.insert_orders([make_order(DAY_START, "X", 9), make_order(DAY_START, "S", 3)])

    aggregate = await order_store.aggregate_day(DAY_START, DAY_END)

    assert aggregate.total_trades == 2
    assert aggregate.total_buy_quantity == 0
    assert aggregate.total_sell_quantity == 3


@pytest.mark.asyncio
async def test_aggregate_empty_day_returns_none(order_store: OrderStore) -> None:
    assert await order_store.aggregate_day(DAY_START, DAY_END) is None


@pytest.mark.asyncio
async def test_upsert_replaces_summary(order_store: OrderStore) -> None:
    first = DailySummary(DAY_START, 1, 1, 0, 1, datetime(2025, 1, 15, 10, tzinfo=timezone.utc))
    second = DailySummary(DAY_START, 4, 3, 1, 2, datetime(2025, 1, 15, 11, tzinfo=timezone.utc))

    await order_store.upsert_summary(first)
    await order_store.upsert_summary(second)

    stored = await order_store.get_daily_summary(DAY_START.date())
    assert stored.total_trades == 4
    assert stored.total_buy_quantity == 3
    assert stored.total_sell_quantity == 1
    assert stored.unique_symbols == 2
    assert stored.date == DAY_START
    assert stored.last_updated == second.last_updated


@pytest.mark.asyncio
async def test_summary_lookup_truncates_to_midnight(order_store: OrderStore) -> None:
    await order_store.upsert_summary(
        DailySummary(DAY_START, 2, 2, 0, 1, datetime(2025, 1, 15, 10, tzinfo=timezone.utc))
    )
    stored = await order_store.get_daily_summary(DAY_START + timedelta(hours=15, minutes=3))
    assert stored.total_trades == 2


@pytest.mark.asyncio
async def test_missing_summary_raises_not_found(order_store: OrderStore) -> None:
    with pytest.raises(SummaryNotFoundError, match="2025-01-15"):
        await order_store.get_daily_summary(DAY_START.date())


@pytest.mark.asyncio
async def test_initialize_failure_is_store_error(tmp_path) -> None:
    # A directory cannot be opened as a database file
    db = Database(tmp_path)
    with pytest.raises(StoreError, match="Failed to initialize"):
        await db.initialize()
    await db.close()


@pytest.mark.asyncio
async def test_closed_database_rejects_calls(tmp_path) -> None:
    db = Database(tmp_path / "store.db")
    await db.initialize()
    await db.close()

    with pytest.raises(StoreError, match="closed"):
        await OrderStore(db).count_orders()
