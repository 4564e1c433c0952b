"""Cooperative cancellation shared between the event loop and worker threads."""

from __future__ import annotations

import logging
import threading

from tradeingest.exceptions import IngestCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Work never stops on its own; it calls ``raise_if_cancelled`` at checkpoints
    (before dispatch, between file stages, every N parsed rows).
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()
            logger.info(f"Cancellation requested: {reason}")

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, checkpoint: str = "") -> None:
        if self._event.is_set():
            where = f" at {checkpoint}" if checkpoint else ""
            raise IngestCancelled(f"Ingestion cancelled{where}: {self.reason}")
