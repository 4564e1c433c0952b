"""SQLite database handle shared by the order and profit/loss stores."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from tradeingest.exceptions import StoreError
from tradeingest.store.schema import SCHEMA_STATEMENTS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Database:
    """
    Owns the SQLite file and the single worker thread that touches it.

    All blocking I/O is offloaded to a one-thread executor, so store calls
    from concurrent tasks are applied in submission order.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tradeingest-db")
        self._closed = False

    async def initialize(self) -> None:
        """Create the database file and schema."""
        await self.run(self._init_db_sync)
        logger.info(f"Store ready: {self.db_path}")

    def _init_db_sync(self) -> None:
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            with self.connect() as conn:
                for stmt in SCHEMA_STATEMENTS:
                    conn.execute(stmt)
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Failed to initialize store at {self.db_path}: {e}") from e

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection; commits on success, rolls back on error, always closes."""
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run a synchronous store function on the database thread."""
        if self._closed:
            raise StoreError("Store is closed")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def close(self) -> None:
        """Shutdown the database thread."""
        if self._closed:
            return
        self._closed = True
        # Drain queued work before returning
        await asyncio.get_running_loop().run_in_executor(None, self._executor.shutdown, True)
