"""Tests for the order-book CSV decoder."""

import io
from datetime import datetime, timezone

import pytest

from conftest import ORDER_HEADER, order_row
from tradeingest.cancellation import CancellationToken
from tradeingest.config_loader import IngestConfig
from tradeingest.constants import NumericPolicy, OptionType, SymbolFormat, TransactionSide
from tradeingest.exceptions import DecodeError, IngestCancelled
from tradeingest.orders.decoder import OrderDecoder, parse_order_timestamp


def to_stream(rows: list[list[str]], header: list[str] | None = ORDER_HEADER) -> io.StringIO:
    lines = []
    if header is not None:
        lines.append(",".join(header))
    lines.extend(",".join(r) for r in rows)
    return io.StringIO("\n".join(lines) + "\n")


@pytest.fixture
def decoder() -> OrderDecoder:
    return OrderDecoder()


@pytest.fixture
def grammar_decoder() -> OrderDecoder:
    return OrderDecoder(symbol_format=SymbolFormat.GRAMMAR)


def test_parse_order_timestamp_is_utc() -> None:
    ts = parse_order_timestamp("2025-01-15T09:15:00Z")
    assert ts == datetime(2025, 1, 15, 9, 15, tzinfo=timezone.utc)


def test_decodes_every_data_row(grammar_decoder: OrderDecoder) -> None:
    rows = [
        order_row("2025-01-15T09:15:00Z", "B", "NIFTY25JAN18000CE", "10", "101.5"),
        order_row("2025-01-15T09:20:00Z", "S", "NIFTY25JAN18000PE", "25", "88.25"),
        order_row("2025-01-15T09:25:00Z", "B", "BANKNIFTY25JAN48000PE", "15", "240"),
    ]
    result = grammar_decoder.decode(to_stream(rows), source="orders.csv")

    assert len(result) == 3
    first, second, third = result.orders
    assert first.symbol == "NIFTY25JAN18000CE"
    assert first.side == TransactionSide.BUY
    assert first.quantity == 10
    assert first.average_price == 101.5
    assert first.product == "NRML"
    assert first.order_status == "COMPLETE"
    assert first.metadata.strike_price == 18000
    assert first.metadata.option_type == OptionType.CALL
    assert second.side == TransactionSide.SELL
    assert second.metadata.option_type == OptionType.PUT
    assert third.metadata.strike_price == 48000
    assert result.last_timestamp == datetime(2025, 1, 15, 9, 25, tzinfo=timezone.utc)


def test_first_row_is_always_discarded(decoder: OrderDecoder) -> None:
    # A data-looking first row is still treated as the header
    stream = to_stream([order_row("2025-01-15T09:20:00Z")], header=order_row())
    result = decoder.decode(stream)
    assert len(result) == 1
    assert result.orders[0].timestamp.minute == 20


def test_header_only_file_has_no_orders(decoder: OrderDecoder) -> None:
    result = decoder.decode(to_stream([]))
    assert result.orders == []
    assert result.last_timestamp is None


def test_missing_header_raises(decoder: OrderDecoder) -> None:
    with pytest.raises(DecodeError, match="missing header"):
        decoder.decode(io.StringIO(""), source="empty.csv")


def test_blank_lines_are_skipped(decoder: OrderDecoder) -> None:
    text = ",".join(ORDER_HEADER) + "\n\n" + ",".join(order_row()) + "\n\n"
    assert len(decoder.decode(io.StringIO(text))) == 1


def test_bad_timestamp_aborts_file(decoder: OrderDecoder) -> None:
    rows = [order_row(), order_row(timestamp="15/01/2025 09:15"), order_row()]
    with pytest.raises(DecodeError, match="timestamp") as exc_info:
        decoder.decode(to_stream(rows), source="bad.csv")
    assert exc_info.value.source == "bad.csv"
    assert exc_info.value.row == 3


def test_short_row_raises(decoder: OrderDecoder) -> None:
    with pytest.raises(DecodeError, match="at least 7 columns"):
        decoder.decode(to_stream([order_row()[:5]]))


def test_non_numeric_quantity_defaults_to_zero(decoder: OrderDecoder) -> None:
    result = decoder.decode(to_stream([order_row(quantity="ten", price="n/a")]))
    order = result.orders[0]
    assert order.quantity == 0
    assert order.average_price == 0.0


@pytest.mark.parametrize("timestamp", ["2025-1-5T9:5:0Z", "2025-01-15T09:15:00", "2025-01-15 09:15:00Z"])
def test_timestamp_layout_is_fixed(decoder: OrderDecoder, timestamp: str) -> None:
    with pytest.raises(DecodeError, match="failed to parse timestamp"):
        decoder.decode(to_stream([order_row(timestamp=timestamp)]))


@pytest.mark.parametrize("quantity", [" 10 ", "1_000", "10.0", "+"])
def test_loose_integers_default_to_zero(decoder: OrderDecoder, quantity: str) -> None:
    order = decoder.decode(to_stream([order_row(quantity=quantity)])).orders[0]
    assert order.quantity == 0


def test_signed_quantity_is_accepted(decoder: OrderDecoder) -> None:
    order = decoder.decode(to_stream([order_row(quantity="-5")])).orders[0]
    assert order.quantity == -5


def test_loose_price_defaults_to_zero(decoder: OrderDecoder) -> None:
    order = decoder.decode(to_stream([order_row(price="1_000.5")])).orders[0]
    assert order.average_price == 0.0


def test_fail_policy_rejects_padded_quantity() -> None:
    decoder = OrderDecoder(numeric_policy=NumericPolicy.FAIL)
    with pytest.raises(DecodeError, match="quantity ' 10 '"):
        decoder.decode(to_stream([order_row(quantity=" 10 ")]))


def test_fail_policy_rejects_bad_quantity() -> None:
    decoder = OrderDecoder(numeric_policy=NumericPolicy.FAIL)
    with pytest.raises(DecodeError, match="quantity"):
        decoder.decode(to_stream([order_row(quantity="ten")]))


def test_fail_policy_rejects_bad_price() -> None:
    decoder = OrderDecoder(numeric_policy=NumericPolicy.FAIL)
    with pytest.raises(DecodeError, match="average price"):
        decoder.decode(to_stream([order_row(price="abc")]))


def test_grammar_mode_rejects_non_option_symbol(grammar_decoder: OrderDecoder) -> None:
    with pytest.raises(DecodeError, match="RELIANCE"):
        grammar_decoder.decode(to_stream([order_row(symbol="RELIANCE")]))


def test_default_mode_accepts_futures_and_equities(decoder: OrderDecoder) -> None:
    rows = [
        order_row(symbol="NIFTY25JAN18000CE"),
        order_row(symbol="NIFTY25JANFUT"),
        order_row(symbol="RELIANCE"),
    ]
    result = decoder.decode(to_stream(rows))

    assert [o.symbol for o in result.orders] == ["NIFTY25JAN18000CE", "NIFTY25JANFUT", "RELIANCE"]
    assert all(o.metadata.strike_price == 0 for o in result.orders)


def test_default_mode_rejects_symbol_shorter_than_offset(decoder: OrderDecoder) -> None:
    with pytest.raises(DecodeError, match="ABCD"):
        decoder.decode(to_stream([order_row(symbol="ABCD")]))


def test_unknown_side_is_kept_verbatim(decoder: OrderDecoder) -> None:
    order = decoder.decode(to_stream([order_row(side="X")])).orders[0]
    assert order.transaction_type == "X"
    assert order.side is None


def test_cancelled_token_stops_decoding(decoder: OrderDecoder) -> None:
    token = CancellationToken()
    token.cancel("test")
    with pytest.raises(IngestCancelled):
        decoder.decode(to_stream([order_row()]), cancel_token=token)


def test_decode_file(tmp_path, write_csv) -> None:
    path = write_csv("orderbook_a.csv", [order_row(), order_row(side="S")])
    decoder = OrderDecoder.from_config(IngestConfig())
    result = decoder.decode_file(path)
    assert result.source == str(path)
    assert len(result) == 2


def test_decode_file_invalid_utf8(tmp_path) -> None:
    path = tmp_path / "orderbook_15-01-2025.csv"
    path.write_bytes(b"\xff\xfe")
    with pytest.raises(DecodeError, match="unreadable header"):
        OrderDecoder().decode_file(path)
