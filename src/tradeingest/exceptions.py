"""Exception hierarchy for tradeingest."""

from __future__ import annotations

from pathlib import Path


class TradeIngestError(Exception):
    """Base class for all tradeingest errors."""


class ConfigError(TradeIngestError):
    """Invalid or unreadable configuration."""


class StoreError(TradeIngestError):
    """Store initialization, write or query failure."""


class SymbolFormatError(TradeIngestError):
    """Symbol does not follow the expected contract-symbol convention."""

    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Invalid symbol {symbol!r}: {reason}")


class DecodeError(TradeIngestError):
    """A CSV file could not be decoded; nothing from it is persisted."""

    def __init__(self, message: str, source: str = "<stream>", row: int | None = None):
        self.source = source
        self.row = row
        location = f"{source}:{row}" if row is not None else source
        super().__init__(f"{location}: {message}")


class NoFilesFoundError(TradeIngestError):
    """No input files matched the discovery pattern."""


class IngestCancelled(TradeIngestError):
    """Ingestion stopped at a cancellation checkpoint."""


class FileIngestError(TradeIngestError):
    """Ingestion of a single file failed."""

    def __init__(self, path: str | Path, cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to process {self.path}: {cause}")


class SummaryNotFoundError(TradeIngestError):
    """No daily summary exists for the requested date."""
