"""Daily profit/loss ingestion."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path

from tradeingest.constants import PROFIT_LOSS_FILE_PREFIX
from tradeingest.exceptions import DecodeError
from tradeingest.profit_loss.reader import profit_loss_filename, read_profit_loss_file
from tradeingest.profit_loss.repository import ProfitLossRepository

logger = logging.getLogger(__name__)


class ProfitLossService:
    """Reads a day's profit/loss file and stores its entries."""

    def __init__(
        self,
        repo: ProfitLossRepository,
        csv_dir: str | Path = ".",
        file_prefix: str = PROFIT_LOSS_FILE_PREFIX,
    ):
        self.repo = repo
        self.csv_dir = Path(csv_dir)
        self.file_prefix = file_prefix

    def path_for(self, day: date) -> Path:
        return self.csv_dir / profit_loss_filename(day, self.file_prefix)

    async def process_daily(self, day: date) -> int:
        """
        Ingest the profit/loss file for ``day``.

        Returns:
            Number of entries saved.

        Raises:
            OSError: If the day's file is missing (FileNotFoundError) or unreadable.
            DecodeError: If the file is malformed or has no entries.
            StoreError: If the insert fails.
        """
        path = self.path_for(day)
        loop = asyncio.get_running_loop()
        entries = await loop.run_in_executor(None, read_profit_loss_file, path)

        if not entries:
            raise DecodeError("no entries found", source=str(path))

        saved = await self.repo.save_entries(entries)
        logger.info(f"Saved {saved} profit/loss entries from {path}")
        return saved
