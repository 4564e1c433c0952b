"""Configuration loader with Pydantic validation and environment variable interpolation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables at module level
load_dotenv(find_dotenv(usecwd=True))

from tradeingest.constants import (
    DEFAULT_FILE_DATE_FORMAT,
    ORDERBOOK_FILE_PREFIX,
    PROFIT_LOSS_FILE_PREFIX,
    LogLevel,
    NumericPolicy,
    SymbolFormat,
)


def interpolate_env_vars(value: Any) -> Any:
    """
    Interpolate environment variables in string values.

    Supports formats:
    - ${VAR_NAME} - replaced by the variable, or an empty string if unset
    - ${VAR_NAME:default} - optional with default value
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            return ""

    return re.sub(pattern, replacer, value)


def process_config_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively process config dict to interpolate env vars."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                process_config_dict(item) if isinstance(item, dict) else interpolate_env_vars(item)
                for item in value
            ]
        else:
            result[key] = interpolate_env_vars(value)
    return result


# ============================================
# Pydantic Configuration Models
# ============================================


class EnvironmentConfig(BaseModel):
    """Environment and runtime settings."""

    log_level: LogLevel = LogLevel.INFO
    # Calendar days (summary boundaries) are computed in this zone
    timezone: str = "UTC"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class StoreConfig(BaseModel):
    """Order store settings."""

    database_path: str = "./data/tradeingest.db"


class IngestConfig(BaseModel):
    """Order-book ingestion settings."""

    csv_dir: str = "."
    file_prefix: str = ORDERBOOK_FILE_PREFIX
    date_format: str = DEFAULT_FILE_DATE_FORMAT
    max_concurrency: int = 4
    numeric_policy: NumericPolicy = NumericPolicy.ZERO
    symbol_format: SymbolFormat = SymbolFormat.FIXED_OFFSET
    cancel_check_rows: int = 500

    @field_validator("date_format")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        """Validate the file date format names day, month and year."""
        for directive in ("%d", "%m"):
            if directive not in v:
                raise ValueError(f"Date format must contain {directive}, got: {v}")
        if "%Y" not in v and "%y" not in v:
            raise ValueError(f"Date format must contain %Y or %y, got: {v}")
        return v

    @field_validator("max_concurrency", "cancel_check_rows")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate positive integers."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got: {v}")
        return v


class ProfitLossConfig(BaseModel):
    """Profit/loss ingestion settings."""

    enabled: bool = True
    file_prefix: str = PROFIT_LOSS_FILE_PREFIX
    # Defaults to the order-book directory when empty
    csv_dir: str = ""


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    profit_loss: ProfitLossConfig = Field(default_factory=ProfitLossConfig)

    @property
    def profit_loss_dir(self) -> Path:
        """Directory holding the profit/loss files."""
        return Path(self.profit_loss.csv_dir or self.ingest.csv_dir)


# ============================================
# Configuration Loader
# ============================================


class ConfigLoader:
    """Load and validate configuration from YAML files with env var interpolation."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize config loader.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            Validated AppConfig instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If config validation fails.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        # Interpolate environment variables
        processed_config = process_config_dict(raw_config)

        # Validate with Pydantic
        self._config = AppConfig.model_validate(processed_config)

        return self._config

    @property
    def config(self) -> AppConfig:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()


def load_config(config_path: str | Path) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated AppConfig instance.
    """
    loader = ConfigLoader(config_path)
    return loader.load()


def load_config_with_overrides(
    config_path: str | Path | None,
    *,
    csv_dir: str | None = None,
    database_path: str | None = None,
    max_concurrency: int | None = None,
) -> AppConfig:
    """
    Load configuration with CLI overrides.

    A missing ``config_path`` (None) yields the built-in defaults.

    Args:
        config_path: Path to the YAML configuration file, or None.
        csv_dir: Override the order-book directory.
        database_path: Override the store location.
        max_concurrency: Override the worker pool size.

    Returns:
        Validated AppConfig instance with overrides applied.
    """
    config = load_config(config_path) if config_path is not None else AppConfig()

    updates: dict[str, Any] = {}

    ingest_updates: dict[str, Any] = {}
    if csv_dir is not None:
        ingest_updates["csv_dir"] = csv_dir
    if max_concurrency is not None:
        ingest_updates["max_concurrency"] = max_concurrency
    if ingest_updates:
        # Re-validate so overrides get the same checks as file values
        updates["ingest"] = IngestConfig.model_validate(
            {**config.ingest.model_dump(), **ingest_updates}
        )

    if database_path is not None:
        updates["store"] = config.store.model_copy(update={"database_path": database_path})

    if updates:
        return config.model_copy(update=updates)

    return config
