"""Profit/Loss Models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProfitLossEntry:
    """A single point on the intraday profit/loss curve."""

    timestamp: datetime
    value: float
