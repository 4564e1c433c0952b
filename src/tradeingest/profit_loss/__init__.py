"""Profit/loss curve ingestion."""

from tradeingest.profit_loss.models import ProfitLossEntry
from tradeingest.profit_loss.repository import ProfitLossRepository
from tradeingest.profit_loss.service import ProfitLossService

__all__ = [
    "ProfitLossEntry",
    "ProfitLossRepository",
    "ProfitLossService",
]
