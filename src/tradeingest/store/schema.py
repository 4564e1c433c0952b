"""Store Database Schema."""

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        transaction_type TEXT NOT NULL,
        symbol TEXT NOT NULL,
        product TEXT NOT NULL,
        quantity INTEGER NOT NULL,
        average_price REAL NOT NULL,
        order_status TEXT NOT NULL,
        strike_price INTEGER NOT NULL,
        option_type TEXT NOT NULL
    );
    """,
    # Time-series access path
    """
    CREATE INDEX IF NOT EXISTS idx_orders_timestamp ON orders (timestamp);
    """,
    # Metadata partition (strike/type), ordered by time within each series
    """
    CREATE INDEX IF NOT EXISTS idx_orders_metadata
        ON orders (option_type, strike_price, timestamp);
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_summaries (
        date TEXT PRIMARY KEY,
        total_trades INTEGER NOT NULL,
        total_buy_quantity INTEGER NOT NULL,
        total_sell_quantity INTEGER NOT NULL,
        unique_symbols INTEGER NOT NULL,
        last_updated TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS profit_loss (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        value REAL NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_profit_loss_timestamp ON profit_loss (timestamp);
    """,
]
