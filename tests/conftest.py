"""Shared fixtures for tradeingest tests."""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

import pytest
import pytest_asyncio

from tradeingest.constants import OptionType
from tradeingest.orders.models import Order, OrderMetadata
from tradeingest.store.database import Database
from tradeingest.store.order_store import OrderStore

ORDER_HEADER = [
    "timestamp",
    "transaction_type",
    "symbol",
    "product",
    "quantity",
    "average_price",
    "status",
]


def order_row(
    timestamp: str = "2025-01-15T09:15:00Z",
    side: str = "B",
    symbol: str = "NIFTY25JAN18000CE",
    quantity: str = "10",
    price: str = "101.50",
    status: str = "COMPLETE",
    product: str = "NRML",
) -> list[str]:
    return [timestamp, side, symbol, product, quantity, price, status]


def make_order(
    timestamp: datetime,
    side: str = "B",
    quantity: int = 10,
    symbol: str = "NIFTY25JAN18000CE",
) -> Order:
    return Order(
        timestamp=timestamp,
        transaction_type=side,
        symbol=symbol,
        product="NRML",
        quantity=quantity,
        average_price=100.0,
        order_status="COMPLETE",
        metadata=OrderMetadata(strike_price=18000, option_type=OptionType.CALL),
    )


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write rows (header first) to a CSV under tmp_path and return its path."""

    def _write(name: str, rows: list[list[str]], header: list[str] | None = ORDER_HEADER) -> Path:
        path = tmp_path / name
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if header is not None:
                writer.writerow(header)
            writer.writerows(rows)
        return path

    return _write


@pytest_asyncio.fixture
async def database(tmp_path: Path):
    db = Database(tmp_path / "data" / "store.db")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def order_store(database: Database) -> OrderStore:
    return OrderStore(database)
