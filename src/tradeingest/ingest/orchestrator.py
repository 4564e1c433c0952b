"""File Orchestrator - discovers a day's order-book dumps and ingests them concurrently.

Each file runs Decoder -> Bulk Writer -> Day Aggregator in sequence. Files
are spread over a fixed number of workers fed by a bounded queue, so
dispatch waits when every worker is busy. A failed file does not stop the
others; failures are collected and reported once everything has settled.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from tradeingest.cancellation import CancellationToken
from tradeingest.config_loader import IngestConfig
from tradeingest.constants import PROFIT_LOSS_FILE_PREFIX
from tradeingest.exceptions import (
    FileIngestError,
    IngestCancelled,
    NoFilesFoundError,
    TradeIngestError,
)
from tradeingest.ingest.aggregator import DayAggregator
from tradeingest.orders.decoder import OrderDecoder
from tradeingest.orders.models import DailySummary
from tradeingest.store.order_store import OrderStore

logger = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """Result of ingesting one file."""

    path: Path
    inserted: int = 0
    summary: DailySummary | None = None
    error: FileIngestError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cancelled(self) -> bool:
        return self.error is not None and isinstance(self.error.cause, IngestCancelled)


@dataclass
class IngestReport:
    """Outcomes for every discovered file, in completion order."""

    target_date: date
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def total_inserted(self) -> int:
        return sum(o.inserted for o in self.outcomes)

    def raise_for_failures(self) -> None:
        """Raise the first collected failure, if any."""
        for outcome in self.outcomes:
            if outcome.error is not None:
                raise outcome.error

    def summary(self) -> str:
        """Generate a text summary."""
        return (
            f"{self.target_date.isoformat()}: {len(self.outcomes)} files, "
            f"{len(self.succeeded)} ok, {len(self.failed)} failed, "
            f"{self.total_inserted} orders inserted"
        )


class FileOrchestrator:
    """Drives per-file ingestion for one target date."""

    def __init__(
        self,
        config: IngestConfig,
        store: OrderStore,
        decoder: OrderDecoder | None = None,
        aggregator: DayAggregator | None = None,
        cancel_token: CancellationToken | None = None,
        excluded_prefix: str = PROFIT_LOSS_FILE_PREFIX,
    ):
        self.config = config
        self.store = store
        self.decoder = decoder or OrderDecoder.from_config(config)
        self.aggregator = aggregator or DayAggregator(store)
        self.cancel_token = cancel_token or CancellationToken()
        self.excluded_prefix = excluded_prefix

    def file_pattern(self, target_date: date) -> str:
        """Glob pattern embedding the target date, e.g. ``orderbook_*15-01-2025*.csv``."""
        return f"{self.config.file_prefix}*{target_date.strftime(self.config.date_format)}*.csv"

    def discover(self, target_date: date) -> list[Path]:
        """
        List the target date's order-book files.

        Raises:
            NoFilesFoundError: If nothing matches.
        """
        csv_dir = Path(self.config.csv_dir)
        pattern = self.file_pattern(target_date)
        matches = sorted(
            p
            for p in csv_dir.glob(pattern)
            if p.is_file() and not p.name.startswith(self.excluded_prefix)
        )
        if not matches:
            raise NoFilesFoundError(
                f"No CSV files found for date {target_date.isoformat()} ({csv_dir / pattern})"
            )
        logger.info(f"Found {len(matches)} order-book files for {target_date.isoformat()}")
        return matches

    async def run(self, target_date: date) -> IngestReport:
        """Ingest every file for ``target_date`` and wait for all of them to settle."""
        files = self.discover(target_date)
        report = IngestReport(target_date=target_date)

        worker_count = min(self.config.max_concurrency, len(files))
        queue: asyncio.Queue[Path | None] = asyncio.Queue(maxsize=worker_count)

        async def worker() -> None:
            while True:
                path = await queue.get()
                try:
                    if path is None:
                        return
                    report.outcomes.append(await self.ingest_file(path))
                finally:
                    queue.task_done()

        workers = [asyncio.create_task(worker()) for _ in range(worker_count)]

        for path in files:
            if self.cancel_token.cancelled:
                error = IngestCancelled(f"not started: {self.cancel_token.reason}")
                report.outcomes.append(FileOutcome(path=path, error=FileIngestError(path, error)))
                continue
            await queue.put(path)

        for _ in workers:
            await queue.put(None)
        await asyncio.gather(*workers)

        logger.info(report.summary())
        return report

    async def ingest_file(self, path: Path) -> FileOutcome:
        """Decode, persist and aggregate a single file. Never raises."""
        logger.info(f"Processing orderbook file: {path}")
        outcome = FileOutcome(path=path)

        try:
            self.cancel_token.raise_if_cancelled(f"{path.name} before decode")
            loop = asyncio.get_running_loop()
            decoded = await loop.run_in_executor(
                None, self.decoder.decode_file, path, self.cancel_token
            )

            if not decoded.orders:
                logger.info(f"No orders in {path}")
                return outcome

            self.cancel_token.raise_if_cancelled(f"{path.name} before write")
            outcome.inserted = await self.store.insert_orders(decoded.orders)

            # Committed orders must be reflected in the summary, so no checkpoint here
            outcome.summary = await self.aggregator.update(decoded.last_timestamp)
        except IngestCancelled as e:
            logger.warning(f"Skipped {path}: {e}")
            outcome.error = FileIngestError(path, e)
        except TradeIngestError as e:
            logger.error(f"Failed to process {path}: {e}")
            outcome.error = FileIngestError(path, e)
        except Exception as e:
            logger.error(f"Unexpected error processing {path}: {e}", exc_info=True)
            outcome.error = FileIngestError(path, e)
        else:
            logger.info(f"Completed processing: {path} ({outcome.inserted} orders)")

        return outcome


@contextmanager
def cancel_on_signals(token: CancellationToken) -> Iterator[None]:
    """Cancel ``token`` on SIGINT/SIGTERM while the block runs."""

    def shutdown(signum, _frame):
        token.cancel(f"signal {signal.Signals(signum).name}")

    signums = [signal.SIGINT]
    if sys.platform != "win32":
        signums.append(signal.SIGTERM)

    previous = {signum: signal.signal(signum, shutdown) for signum in signums}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
