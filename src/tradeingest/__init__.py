"""tradeingest - daily order-book ingestion with per-day summaries."""

__version__ = "0.1.0"
