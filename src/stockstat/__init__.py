"""stockstat — daily statistics snapshots for stock codes.

Incrementally syncs daily history into a local record store, then
computes price changes and moving averages over the cached series.

Quick start::

    from stockstat import create_builder_from_env
    builder = create_builder_from_env()
    stat = builder.build_snapshot("sh.600000")
"""

from __future__ import annotations

from stockstat.builder import SnapshotBuilder
from stockstat.config import ProviderType, StatConfig
from stockstat.errors import (
    AuthError,
    EmptySeries,
    FetchError,
    IndexOutOfRange,
    QuoteError,
    StatError,
    StatErrorCode,
    StoreReadError,
    StoreWriteError,
)
from stockstat.log import setup_logging
from stockstat.models.quote import LiveQuote
from stockstat.models.record import DAILY_FIELDS, DailyRecord
from stockstat.models.stat import FIELD_LABELS, DailyStat
from stockstat.planner import SyncRange, plan_range
from stockstat.providers import create_history_provider, create_quote_provider
from stockstat.series import PriceSeries
from stockstat.store import MemoryStore, ParquetStore, RecordStore

__version__ = "0.1.0"

__all__ = [
    # Builder
    "SnapshotBuilder",
    "create_builder",
    "create_builder_from_env",
    # Config
    "StatConfig",
    "ProviderType",
    "setup_logging",
    # Errors
    "StatError",
    "StatErrorCode",
    "AuthError",
    "FetchError",
    "StoreReadError",
    "StoreWriteError",
    "EmptySeries",
    "QuoteError",
    "IndexOutOfRange",
    # Models
    "DailyRecord",
    "DAILY_FIELDS",
    "DailyStat",
    "FIELD_LABELS",
    "LiveQuote",
    "PriceSeries",
    # Sync
    "SyncRange",
    "plan_range",
    # Stores
    "RecordStore",
    "MemoryStore",
    "ParquetStore",
]


def create_builder(config: StatConfig) -> SnapshotBuilder:
    """Wire store and providers for ``config``."""
    store: RecordStore
    if config.store_backend == "parquet":
        store = ParquetStore(config.store_dir)
    else:
        store = MemoryStore()

    history_kwargs = {}
    if config.history_provider == ProviderType.BAOSTOCK:
        history_kwargs["login_timeout"] = config.login_timeout_seconds
    quote_kwargs = {}
    if config.quote_provider == ProviderType.SINA:
        quote_kwargs["timeout"] = config.request_timeout_seconds

    return SnapshotBuilder(
        store=store,
        history=create_history_provider(config.history_provider, **history_kwargs),
        quotes=create_quote_provider(config.quote_provider, **quote_kwargs),
        config=config,
    )


def create_builder_from_env() -> SnapshotBuilder:
    """Zero-config factory — reads settings from env vars.

    Environment variables:
        STOCKSTAT_HISTORY_PROVIDER: "baostock" or "mock" (default: "baostock").
        STOCKSTAT_QUOTE_PROVIDER: "sina" or "mock" (default: "sina").
        STOCKSTAT_STORE: Record store — "parquet" or "memory" (default: "parquet").
        STOCKSTAT_STORE_DIR: Parquet directory (default: "data/records").
        STOCKSTAT_LOOKBACK_YEARS: History window in years (default: 1).
        STOCKSTAT_LOGIN_TIMEOUT: History login timeout in seconds (default: 10).
        STOCKSTAT_REQUEST_TIMEOUT: Quote HTTP timeout in seconds (default: 5).
        STOCKSTAT_LOG_LEVEL: Logging level (default: "INFO").
    """
    config = StatConfig.from_env()
    setup_logging(config.log_level)
    return create_builder(config)
