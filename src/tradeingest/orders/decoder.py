"""Order-book CSV decoder.

Input columns are positional; the header row is discarded without checks:

    timestamp, side, symbol, product, quantity, avg_price, status

The whole file is decoded before anything is returned, so a bad timestamp
anywhere means nothing from that file reaches the store.
"""

from __future__ import annotations

import csv
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

from tradeingest.cancellation import CancellationToken
from tradeingest.config_loader import IngestConfig
from tradeingest.constants import (
    ORDER_MIN_COLUMNS,
    ORDER_TIMESTAMP_FORMAT,
    NumericPolicy,
    SymbolFormat,
)
from tradeingest.exceptions import DecodeError, SymbolFormatError
from tradeingest.orders.metadata import extract_metadata
from tradeingest.orders.models import DecodedFile, Order

logger = logging.getLogger(__name__)


# strptime alone accepts unpadded fields such as 2025-1-5T9:5:0Z
TIMESTAMP_LAYOUT = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}Z")
INTEGER_LAYOUT = re.compile(r"[+-]?[0-9]+")


def parse_order_timestamp(value: str) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM:SSZ`` into an aware UTC datetime."""
    if TIMESTAMP_LAYOUT.fullmatch(value) is None:
        raise ValueError(f"{value!r} does not match YYYY-MM-DDTHH:MM:SSZ")
    return datetime.strptime(value, ORDER_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def parse_quantity(value: str) -> int:
    """Plain optionally-signed decimal digits; no padding or separators."""
    if INTEGER_LAYOUT.fullmatch(value) is None:
        raise ValueError(f"invalid integer {value!r}")
    return int(value)


def parse_price(value: str) -> float:
    if value != value.strip() or "_" in value:
        raise ValueError(f"invalid number {value!r}")
    return float(value)


class OrderDecoder:
    """Turns order-book CSV rows into Order records."""

    def __init__(
        self,
        numeric_policy: NumericPolicy = NumericPolicy.ZERO,
        symbol_format: SymbolFormat = SymbolFormat.FIXED_OFFSET,
        cancel_check_rows: int = 500,
    ):
        self.numeric_policy = numeric_policy
        self.symbol_format = symbol_format
        self.cancel_check_rows = cancel_check_rows

    @classmethod
    def from_config(cls, config: IngestConfig) -> OrderDecoder:
        return cls(
            numeric_policy=config.numeric_policy,
            symbol_format=config.symbol_format,
            cancel_check_rows=config.cancel_check_rows,
        )

    def decode_file(
        self, path: str | Path, cancel_token: CancellationToken | None = None
    ) -> DecodedFile:
        """Open and decode an order-book file."""
        file_path = Path(path)
        with open(file_path, newline="", encoding="utf-8") as f:
            return self.decode(f, source=str(file_path), cancel_token=cancel_token)

    def decode(
        self,
        stream: TextIO,
        source: str = "<stream>",
        cancel_token: CancellationToken | None = None,
    ) -> DecodedFile:
        """
        Decode every data row of an open CSV stream.

        Raises:
            DecodeError: Missing header, short row, bad timestamp, bad symbol,
                or a bad number under the ``fail`` policy.
            IngestCancelled: If the token is cancelled mid-file.
        """
        reader = csv.reader(stream)
        result = DecodedFile(source=source)

        try:
            next(reader)
        except StopIteration:
            raise DecodeError("missing header row", source=source) from None
        except (csv.Error, UnicodeDecodeError) as e:
            raise DecodeError(f"unreadable header: {e}", source=source) from e

        try:
            for record in reader:
                if not record:
                    continue

                if cancel_token is not None and len(result.orders) % self.cancel_check_rows == 0:
                    cancel_token.raise_if_cancelled(f"{source}:{reader.line_num}")

                order = self._decode_row(record, source, reader.line_num)
                result.orders.append(order)
                result.last_timestamp = order.timestamp
        except (csv.Error, UnicodeDecodeError) as e:
            raise DecodeError(f"malformed CSV: {e}", source=source, row=reader.line_num) from e

        logger.debug(f"Decoded {len(result.orders)} orders from {source}")
        return result

    def _decode_row(self, record: list[str], source: str, row: int) -> Order:
        if len(record) < ORDER_MIN_COLUMNS:
            raise DecodeError(
                f"expected at least {ORDER_MIN_COLUMNS} columns, got {len(record)}",
                source=source,
                row=row,
            )

        try:
            timestamp = parse_order_timestamp(record[0])
        except ValueError as e:
            raise DecodeError(f"failed to parse timestamp: {e}", source=source, row=row) from e

        quantity = self._parse_number(parse_quantity, record[4], "quantity", source, row)
        price = self._parse_number(parse_price, record[5], "average price", source, row)

        try:
            metadata = extract_metadata(record[2], self.symbol_format)
        except SymbolFormatError as e:
            raise DecodeError(str(e), source=source, row=row) from e

        return Order(
            timestamp=timestamp,
            transaction_type=record[1],
            symbol=record[2],
            product=record[3],
            quantity=quantity,
            average_price=price,
            order_status=record[6],
            metadata=metadata,
        )

    def _parse_number(
        self,
        parse: Callable[[str], int | float],
        value: str,
        field_name: str,
        source: str,
        row: int,
    ) -> int | float:
        try:
            return parse(value)
        except ValueError as e:
            if self.numeric_policy == NumericPolicy.FAIL:
                raise DecodeError(
                    f"failed to parse {field_name} {value!r}", source=source, row=row
                ) from e
            return parse("0")
