"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

Besides the environment flag and log level, the settings carry the paging
defaults used by the timeline/search endpoints and the market benchmark that
the analytics engine reports next to a property's own metrics.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
MarketActivityName = Literal["high", "medium", "low"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `PROPTRAIL_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    default_page_limit : int
        Page size used when a timeline/search request does not give one.
    max_page_limit : int
        Upper bound accepted by the HTTP layer for `limit`.
    benchmark_days_on_market, benchmark_price_changes, benchmark_market_activity
        Reference market figures surfaced as `marketComparison` in analytics.
    """

    environment: EnvName = Field(default="dev", alias="PROPTRAIL_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    default_page_limit: int = Field(default=20, ge=1, alias="PROPTRAIL_DEFAULT_PAGE_LIMIT")
    max_page_limit: int = Field(default=100, ge=1, alias="PROPTRAIL_MAX_PAGE_LIMIT")

    benchmark_days_on_market: int = Field(
        default=45, ge=0, alias="PROPTRAIL_BENCHMARK_DAYS_ON_MARKET"
    )
    benchmark_price_changes: float = Field(
        default=2.3, ge=0.0, alias="PROPTRAIL_BENCHMARK_PRICE_CHANGES"
    )
    benchmark_market_activity: MarketActivityName = Field(
        default="medium", alias="PROPTRAIL_BENCHMARK_MARKET_ACTIVITY"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests can force a rebuild via `load_settings.cache_clear()` after
    mutating `os.environ`.
    """
    os.environ.setdefault("PROPTRAIL_ENV", "dev")
    return Settings()


# Import-time read of env / .env files.
settings: Settings = load_settings()


def get_logger(name: str = "proptrail") -> logging.Logger:
    """Return a process-global logger configured to the current log level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
