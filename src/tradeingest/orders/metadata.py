"""Option contract metadata derived from order-book symbols.

Symbols follow the exchange convention ``<UNDERLYING><EXPIRY><STRIKE><CE|PE>``:

    NIFTY25JAN18000CE     monthly expiry (YY + month name)
    NIFTY2511318000PE     weekly expiry (YY + month code + DD)

Two parsers are available. ``extract_fixed_offset`` is the default: the
trailing digit run is the strike and the character at ``len - 5`` decides Put
vs Call. It accepts any symbol of five or more characters (futures and
equities included) and is tied to one symbol layout, so it is not a general
parser. ``parse_symbol`` implements the convention as an explicit grammar and
rejects anything else; it is opt-in via ``symbol_format: grammar``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tradeingest.constants import OptionType, SymbolFormat
from tradeingest.exceptions import SymbolFormatError
from tradeingest.orders.models import OrderMetadata

MIN_SYMBOL_LENGTH = 6
MAX_SYMBOL_LENGTH = 40
FIXED_OFFSET_FROM_END = 5

_MONTHS = "JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC"

SYMBOL_PATTERN = re.compile(
    r"^(?P<underlying>[A-Z][A-Z&-]*?)"
    rf"(?P<expiry>\d{{2}}(?:{_MONTHS}|[1-9OND]\d{{2}}))"
    r"(?P<strike>\d+)"
    r"(?P<kind>CE|PE)$"
)

_OPTION_SUFFIX = {"CE": OptionType.CALL, "PE": OptionType.PUT}


@dataclass(frozen=True)
class ContractSymbol:
    """Components of a parsed option symbol."""

    underlying: str
    expiry: str
    strike_price: int
    option_type: OptionType

    @property
    def metadata(self) -> OrderMetadata:
        return OrderMetadata(strike_price=self.strike_price, option_type=self.option_type)


def parse_symbol(symbol: str) -> ContractSymbol:
    """
    Parse a symbol against the declared contract grammar.

    Raises:
        SymbolFormatError: If the symbol is out of length bounds or does not match.
    """
    if not MIN_SYMBOL_LENGTH <= len(symbol) <= MAX_SYMBOL_LENGTH:
        raise SymbolFormatError(
            symbol,
            f"length {len(symbol)} outside {MIN_SYMBOL_LENGTH}..{MAX_SYMBOL_LENGTH}",
        )

    match = SYMBOL_PATTERN.match(symbol)
    if match is None:
        raise SymbolFormatError(symbol, "expected <UNDERLYING><EXPIRY><STRIKE><CE|PE>")

    return ContractSymbol(
        underlying=match.group("underlying"),
        expiry=match.group("expiry"),
        strike_price=int(match.group("strike")),
        option_type=_OPTION_SUFFIX[match.group("kind")],
    )


def extract_fixed_offset(symbol: str) -> OrderMetadata:
    """
    Legacy fixed-offset heuristic.

    strike_price is the trailing digit run (0 when there is none); option_type
    is Put when the character at ``len - 5`` is ``'P'``, Call otherwise.

    Raises:
        SymbolFormatError: If the symbol is shorter than the offset.
    """
    if len(symbol) < FIXED_OFFSET_FROM_END:
        raise SymbolFormatError(
            symbol, f"shorter than {FIXED_OFFSET_FROM_END} characters"
        )

    end = len(symbol)
    start = end
    while start > 0 and "0" <= symbol[start - 1] <= "9":
        start -= 1
    strike_price = int(symbol[start:end]) if start < end else 0

    if symbol[-FIXED_OFFSET_FROM_END] == "P":
        option_type = OptionType.PUT
    else:
        option_type = OptionType.CALL

    return OrderMetadata(strike_price=strike_price, option_type=option_type)


def extract_metadata(
    symbol: str, mode: SymbolFormat = SymbolFormat.FIXED_OFFSET
) -> OrderMetadata:
    """Derive strike price and option type from a symbol."""
    if mode == SymbolFormat.FIXED_OFFSET:
        return extract_fixed_offset(symbol)
    return parse_symbol(symbol).metadata
