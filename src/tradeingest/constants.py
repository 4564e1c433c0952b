"""Core constants for tradeingest."""

from enum import Enum


class TransactionSide(str, Enum):
    """Order side as written in the order-book dump."""

    BUY = "B"
    SELL = "S"


class OptionType(str, Enum):
    """Option contract type."""

    CALL = "C"
    PUT = "P"


class NumericPolicy(str, Enum):
    """How unparsable quantity/price cells are handled."""

    ZERO = "zero"  # substitute 0, no error
    FAIL = "fail"  # abort the file


class SymbolFormat(str, Enum):
    """Symbol parsing mode for metadata extraction."""

    FIXED_OFFSET = "fixed_offset"  # trailing digits + len-5 marker, any symbol
    GRAMMAR = "grammar"  # strict <UNDERLYING><EXPIRY><STRIKE><CE|PE>


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ============================================
# File formats
# ============================================

ORDER_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
ORDER_MIN_COLUMNS = 7

ORDERBOOK_FILE_PREFIX = "orderbook_"
PROFIT_LOSS_FILE_PREFIX = "profitLoss"

# DD-MM-YYYY; "%d-%m-%y" selects the short DD-MM-YY variant
DEFAULT_FILE_DATE_FORMAT = "%d-%m-%Y"
CLI_DATE_FORMAT = "%Y-%m-%d"
