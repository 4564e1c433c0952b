"""Ingestion Module - per-day aggregation and multi-file orchestration."""

from tradeingest.ingest.aggregator import DayAggregator
from tradeingest.ingest.orchestrator import FileOrchestrator, FileOutcome, IngestReport

__all__ = [
    "DayAggregator",
    "FileOrchestrator",
    "FileOutcome",
    "IngestReport",
]
