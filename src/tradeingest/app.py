"""tradeingest application wiring."""

from __future__ import annotations

import logging
from datetime import date, datetime

from tradeingest.cancellation import CancellationToken
from tradeingest.config_loader import AppConfig
from tradeingest.ingest.aggregator import DayAggregator
from tradeingest.ingest.orchestrator import FileOrchestrator, IngestReport
from tradeingest.orders.decoder import OrderDecoder
from tradeingest.orders.models import DailySummary
from tradeingest.profit_loss.models import ProfitLossEntry
from tradeingest.profit_loss.repository import ProfitLossRepository
from tradeingest.profit_loss.service import ProfitLossService
from tradeingest.store.database import Database
from tradeingest.store.order_store import OrderStore

logger = logging.getLogger(__name__)


class IngestApp:
    """Builds the store and ingestion components from an AppConfig."""

    def __init__(self, config: AppConfig, cancel_token: CancellationToken | None = None):
        self.config = config
        self.cancel_token = cancel_token or CancellationToken()

        self.database = Database(config.store.database_path)
        self.order_store = OrderStore(self.database, tz=config.environment.tzinfo)
        self.aggregator = DayAggregator(self.order_store)
        self.orchestrator = FileOrchestrator(
            config.ingest,
            self.order_store,
            decoder=OrderDecoder.from_config(config.ingest),
            aggregator=self.aggregator,
            cancel_token=self.cancel_token,
            excluded_prefix=config.profit_loss.file_prefix,
        )
        self.profit_loss_repo = ProfitLossRepository(self.database)
        self.profit_loss = ProfitLossService(
            self.profit_loss_repo,
            csv_dir=config.profit_loss_dir,
            file_prefix=config.profit_loss.file_prefix,
        )

    async def initialize(self) -> None:
        """Open the store. Failures here are fatal."""
        logger.info("Initializing tradeingest...")
        await self.database.initialize()

    async def ingest(self, day: date) -> IngestReport:
        """Ingest the day's order-book files."""
        return await self.orchestrator.run(day)

    async def ingest_profit_loss(self, day: date) -> int:
        return await self.profit_loss.process_daily(day)

    async def daily_summary(self, day: date) -> DailySummary:
        return await self.order_store.get_daily_summary(day)

    async def profit_loss_range(self, start: datetime, end: datetime) -> list[ProfitLossEntry]:
        return await self.profit_loss_repo.get_by_date_range(start, end)

    async def close(self) -> None:
        await self.database.close()
