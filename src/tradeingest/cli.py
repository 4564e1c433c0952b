"""tradeingest CLI."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from tradeingest.app import IngestApp
from tradeingest.cancellation import CancellationToken
from tradeingest.config_loader import AppConfig, load_config_with_overrides
from tradeingest.constants import CLI_DATE_FORMAT
from tradeingest.exceptions import SummaryNotFoundError, TradeIngestError
from tradeingest.ingest.orchestrator import cancel_on_signals

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    )


def _load_config(config_path: str | None, **overrides) -> AppConfig:
    """Load config (defaults when no file is given or found) and configure logging."""
    if config_path is None and DEFAULT_CONFIG_PATH.exists():
        config_path = str(DEFAULT_CONFIG_PATH)
    try:
        cfg = load_config_with_overrides(config_path, **overrides)
    except (OSError, yaml.YAMLError, ValidationError, ValueError) as e:
        click.echo(f"Fatal error: invalid configuration: {e}", err=True)
        sys.exit(1)
    setup_logging(cfg.environment.log_level.value)
    return cfg


config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="TRADEINGEST_CONFIG",
    default=None,
    help="Path to configuration file (default: config/config.yaml if present)",
)
db_option = click.option("--db", "database_path", help="Override the SQLite store path")
date_option = click.option(
    "--date",
    "process_date",
    type=click.DateTime(formats=[CLI_DATE_FORMAT]),
    default=lambda: date.today().strftime(CLI_DATE_FORMAT),
    show_default="today",
    help="Date to process (YYYY-MM-DD)",
)


@click.group()
def cli():
    """Order-book ingestion and daily summaries."""
    pass


@cli.command()
@config_option
@db_option
@date_option
@click.option("--csv-dir", help="Directory containing CSV files")
@click.option("--max-concurrency", type=int, help="Files ingested at once")
@click.option("--skip-profit-loss", is_flag=True, help="Do not ingest the profit/loss file")
def ingest(config_path, database_path, process_date, csv_dir, max_concurrency, skip_profit_loss):
    """Ingest the order-book files (and profit/loss file) for a date."""
    cfg = _load_config(
        config_path,
        csv_dir=csv_dir,
        database_path=database_path,
        max_concurrency=max_concurrency,
    )
    code = asyncio.run(_ingest(cfg, process_date.date(), skip_profit_loss))
    sys.exit(code)


async def _ingest(cfg: AppConfig, day: date, skip_profit_loss: bool) -> int:
    token = CancellationToken()
    app = IngestApp(cfg, cancel_token=token)
    try:
        with cancel_on_signals(token):
            await app.initialize()
            report = await app.ingest(day)

            if cfg.profit_loss.enabled and not skip_profit_loss:
                try:
                    await app.ingest_profit_loss(day)
                except (TradeIngestError, OSError) as e:
                    logger.error(f"Failed to process profit/loss file: {e}")

        click.echo(report.summary())
        report.raise_for_failures()
    except TradeIngestError as e:
        logger.error(f"Ingestion failed: {e}")
        click.echo(f"Fatal error: {e}", err=True)
        return 1
    finally:
        await app.close()
    return 0


@cli.command()
@config_option
@db_option
@date_option
def summary(config_path, database_path, process_date):
    """Print the stored daily summary for a date."""
    cfg = _load_config(config_path, database_path=database_path)
    sys.exit(asyncio.run(_summary(cfg, process_date.date())))


async def _summary(cfg: AppConfig, day: date) -> int:
    app = IngestApp(cfg)
    try:
        await app.initialize()
        result = await app.daily_summary(day)
    except SummaryNotFoundError as e:
        click.echo(str(e), err=True)
        return 1
    except TradeIngestError as e:
        click.echo(f"Fatal error: failed to get daily summary: {e}", err=True)
        return 1
    finally:
        await app.close()

    click.echo("")
    click.echo(result.summary())
    return 0


@cli.command("profit-loss")
@config_option
@db_option
@click.option("--days", default=1, show_default=True, help="Look back this many days from now")
def profit_loss(config_path, database_path, days):
    """Print stored profit/loss entries for the recent window."""
    cfg = _load_config(config_path, database_path=database_path)
    sys.exit(asyncio.run(_profit_loss(cfg, days)))


async def _profit_loss(cfg: AppConfig, days: int) -> int:
    end = datetime.now(timezone.utc)
    start = end - timedelta(days=days)

    app = IngestApp(cfg)
    try:
        await app.initialize()
        entries = await app.profit_loss_range(start, end)
    except TradeIngestError as e:
        click.echo(f"Fatal error: failed to get profit loss: {e}", err=True)
        return 1
    finally:
        await app.close()

    tz = cfg.environment.tzinfo
    for entry in entries:
        click.echo(f"{entry.timestamp.astimezone(tz).isoformat()}  {entry.value:>12.2f}")
    click.echo(f"{len(entries)} entries")
    return 0


if __name__ == "__main__":
    cli()

# Alias for __main__.py
main = cli
