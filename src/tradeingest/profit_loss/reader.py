"""Profit/loss CSV reader.

Files are named ``profitLoss_DD-MM-YYYY.csv`` and hold a header row followed
by ``timestamp,value`` rows. Unlike order-book dumps, any bad cell fails the
whole file.
"""

from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path

from tradeingest.constants import PROFIT_LOSS_FILE_PREFIX
from tradeingest.exceptions import DecodeError
from tradeingest.profit_loss.models import ProfitLossEntry


def profit_loss_filename(day: date, prefix: str = PROFIT_LOSS_FILE_PREFIX) -> str:
    return f"{prefix}_{day.day:02d}-{day.month:02d}-{day.year}.csv"


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; an offset (or ``Z``) is required."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return parsed


def read_profit_loss_file(path: str | Path) -> list[ProfitLossEntry]:
    """
    Read all entries from a profit/loss file.

    Raises:
        OSError: If the file cannot be opened (FileNotFoundError when missing).
        DecodeError: On bad encoding, a missing header, a short row, or an
            unparsable cell.
    """
    file_path = Path(path)
    source = str(file_path)
    entries: list[ProfitLossEntry] = []

    try:
        with open(file_path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            if next(reader, None) is None:
                raise DecodeError("missing header row", source=source)

            for record in reader:
                if not record:
                    continue
                if len(record) < 2:
                    raise DecodeError(
                        f"expected 2 columns, got {len(record)}",
                        source=source,
                        row=reader.line_num,
                    )
                try:
                    entries.append(
                        ProfitLossEntry(
                            timestamp=parse_rfc3339(record[0]), value=float(record[1])
                        )
                    )
                except ValueError as e:
                    raise DecodeError(str(e), source=source, row=reader.line_num) from e
    except UnicodeDecodeError as e:
        raise DecodeError(f"file is not valid UTF-8: {e.reason}", source=source) from e
    except csv.Error as e:
        raise DecodeError(f"malformed CSV: {e}", source=source) from e

    return entries
