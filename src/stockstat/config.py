"""Snapshot configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from stockstat.errors import StatError, StatErrorCode


class ProviderType(Enum):
    """Supported history/quote provider backends."""

    BAOSTOCK = "baostock"
    SINA = "sina"
    MOCK = "mock"


@dataclass
class StatConfig:
    """Configuration for SnapshotBuilder.

    Attributes:
        history_provider: Backend used for daily OHLC history.
        quote_provider: Backend used for live quotes.
        store_backend: Record store type, "parquet" or "memory".
        store_dir: Directory for parquet record files.
        lookback_years: Length of the history window kept and read back.
        login_timeout_seconds: Upper bound for the history provider login.
        request_timeout_seconds: HTTP timeout for live quote requests.
        log_level: Level passed to ``setup_logging``.
    """

    history_provider: ProviderType = ProviderType.BAOSTOCK
    quote_provider: ProviderType = ProviderType.SINA
    store_backend: str = "parquet"
    store_dir: str = "data/records"
    lookback_years: int = 1
    login_timeout_seconds: float = 10.0
    request_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.store_backend not in ("parquet", "memory"):
            raise StatError(
                f"Invalid store backend: {self.store_backend}. Valid: parquet, memory",
                code=StatErrorCode.CONFIG_INVALID,
            )
        if self.lookback_years < 1:
            raise StatError(
                "lookback_years must be at least 1",
                code=StatErrorCode.CONFIG_INVALID,
            )

    @classmethod
    def from_env(cls) -> "StatConfig":
        """Build a config from ``STOCKSTAT_*`` environment variables."""
        try:
            return cls(
                history_provider=ProviderType(
                    os.getenv("STOCKSTAT_HISTORY_PROVIDER", "baostock").strip()
                ),
                quote_provider=ProviderType(
                    os.getenv("STOCKSTAT_QUOTE_PROVIDER", "sina").strip()
                ),
                store_backend=os.getenv("STOCKSTAT_STORE", "parquet"),
                store_dir=os.getenv("STOCKSTAT_STORE_DIR", "data/records"),
                lookback_years=int(os.getenv("STOCKSTAT_LOOKBACK_YEARS", "1")),
                login_timeout_seconds=float(os.getenv("STOCKSTAT_LOGIN_TIMEOUT", "10")),
                request_timeout_seconds=float(os.getenv("STOCKSTAT_REQUEST_TIMEOUT", "5")),
                log_level=os.getenv("STOCKSTAT_LOG_LEVEL", "INFO"),
            )
        except ValueError as exc:
            raise StatError(
                f"Invalid environment configuration: {exc}",
                code=StatErrorCode.CONFIG_INVALID,
            ) from exc
