"""Order and summary models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from tradeingest.constants import OptionType, TransactionSide


@dataclass(frozen=True)
class OrderMetadata:
    """Contract attributes derived from the symbol."""

    strike_price: int
    option_type: OptionType


@dataclass(frozen=True)
class Order:
    """One decoded order-book line."""

    timestamp: datetime
    transaction_type: str
    symbol: str
    product: str
    quantity: int
    average_price: float
    order_status: str
    metadata: OrderMetadata

    @property
    def side(self) -> TransactionSide | None:
        """Parsed side, or None for values other than B/S."""
        try:
            return TransactionSide(self.transaction_type)
        except ValueError:
            return None


@dataclass
class DecodedFile:
    """Result of decoding one order-book CSV."""

    source: str
    orders: list[Order] = field(default_factory=list)
    last_timestamp: datetime | None = None

    def __len__(self) -> int:
        return len(self.orders)


@dataclass(frozen=True)
class DayAggregate:
    """Result of the per-day grouping query."""

    day_start: datetime
    day_end: datetime
    total_trades: int
    total_buy_quantity: int
    total_sell_quantity: int
    unique_symbols: int


@dataclass
class DailySummary:
    """Stored aggregate statistics for one calendar day."""

    date: datetime
    total_trades: int
    total_buy_quantity: int
    total_sell_quantity: int
    unique_symbols: int
    last_updated: datetime

    @classmethod
    def from_aggregate(cls, aggregate: DayAggregate, last_updated: datetime) -> DailySummary:
        return cls(
            date=aggregate.day_start,
            total_trades=aggregate.total_trades,
            total_buy_quantity=aggregate.total_buy_quantity,
            total_sell_quantity=aggregate.total_sell_quantity,
            unique_symbols=aggregate.unique_symbols,
            last_updated=last_updated,
        )

    def summary(self) -> str:
        """Generate a text summary."""
        lines = [
            "Daily Summary Report",
            "===================",
            f"Date: {self.date.strftime('%d-%b-%Y')}",
            f"Total Trades: {self.total_trades}",
            f"Total Buy Quantity: {self.total_buy_quantity}",
            f"Total Sell Quantity: {self.total_sell_quantity}",
            f"Unique Symbols: {self.unique_symbols}",
            f"Last Updated: {self.last_updated.strftime('%H:%M:%S')}",
        ]
        return "\n".join(lines)
