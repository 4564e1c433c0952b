"""Order decoding and models."""

from tradeingest.orders.decoder import OrderDecoder
from tradeingest.orders.metadata import extract_metadata, parse_symbol
from tradeingest.orders.models import DailySummary, DayAggregate, DecodedFile, Order, OrderMetadata

__all__ = [
    "OrderDecoder",
    "extract_metadata",
    "parse_symbol",
    "DailySummary",
    "DayAggregate",
    "DecodedFile",
    "Order",
    "OrderMetadata",
]
