"""SnapshotBuilder — sync -> read -> reduce -> quote -> DailyStat."""

from __future__ import annotations

import time
from datetime import date, datetime

import structlog

from stockstat.config import StatConfig
from stockstat.errors import (
    AuthError,
    EmptySeries,
    FetchError,
    QuoteError,
    StatError,
    StoreReadError,
)
from stockstat.models.quote import LiveQuote
from stockstat.models.record import DailyRecord
from stockstat.models.stat import DailyStat
from stockstat.planner import lookback_start, plan_range
from stockstat.providers.base import HistoryProvider, QuoteProvider
from stockstat.series import PriceSeries
from stockstat.store import RecordStore
from stockstat.windows import (
    average_over_last_n_days,
    change_over_filtered,
    change_over_last_n_days,
    month_filter,
    prior_month_filter,
    year_filter,
)

log = structlog.get_logger()


class SnapshotBuilder:
    """Central orchestrator: plan -> fetch -> store -> read -> compute.

    Usage::

        from stockstat import create_builder_from_env
        builder = create_builder_from_env()
        stat = builder.build_snapshot("sh.600000")

    Each ``build_snapshot`` call is synchronous and independent. Calls for
    different codes may run in parallel; the store and a provider's own
    session (see ``BaoStockProvider``) are the only shared state.
    """

    def __init__(
        self,
        store: RecordStore,
        history: HistoryProvider,
        quotes: QuoteProvider,
        config: StatConfig | None = None,
    ) -> None:
        self.store = store
        self.history = history
        self.quotes = quotes
        self.config = config or StatConfig(store_backend="memory")

    def build_snapshot(self, code: str, now: date | datetime | None = None) -> DailyStat:
        """Compute the DailyStat for ``code`` as of ``now``.

        Raises a ``StatError`` subclass naming the failed stage; no
        partial snapshot is ever returned.
        """
        now = now or datetime.now()
        today = now.date() if isinstance(now, datetime) else now

        # 1-2. Sync whatever is missing locally
        fetched, persisted = self._sync(code, today)

        # 3. Read back the lookback window
        window_start = lookback_start(today, self.config.lookback_years)
        series = self._read_series(code, window_start, today)
        if fetched and not persisted:
            series = series.merged(
                r for r in fetched if window_start <= r.date <= today
            )
        if len(series) == 0:
            raise EmptySeries(
                "No history available", stage="read", symbol=code,
            )

        # 4. Display name (best-effort)
        name = self._resolve_name(code)

        # 5. Live quote
        quote = self._live_quote(code)

        # 6-7. Reductions
        stat = self._compute(code, name, quote, series, now)
        log.info("snapshot_built", symbol=code, rows=len(series), now=stat.now)
        return stat

    def build_snapshots(
        self, codes: list[str], now: date | datetime | None = None,
    ) -> dict[str, DailyStat | StatError]:
        """Build snapshots one code at a time, collecting per-code errors."""
        results: dict[str, DailyStat | StatError] = {}
        for code in codes:
            try:
                results[code] = self.build_snapshot(code, now)
            except StatError as e:
                log.warning("snapshot_failed", symbol=code, error=str(e), error_code=e.code.value)
                results[code] = e
        return results

    # ------------------------------------------------------------ pipeline

    def _sync(self, code: str, today: date) -> tuple[list[DailyRecord], bool]:
        """Fetch and persist the missing range.

        Returns the fetched records and whether they reached the store.
        """
        try:
            last = self.store.last_cached_date(code)
        except StatError as e:
            raise StoreReadError(e.message, stage="sync", symbol=code) from e
        except Exception as exc:
            raise StoreReadError(
                f"Cannot determine last cached date: {exc}", stage="sync", symbol=code,
            ) from exc

        sync = plan_range(code, last, today, self.config.lookback_years)
        if not sync.needs_fetch:
            return [], True

        try:
            self.history.login()
        except AuthError:
            raise
        except Exception as exc:
            raise AuthError(f"Login failed: {exc}", stage="login", symbol=code) from exc

        t0 = time.monotonic()
        log.info("history_fetch_start", symbol=code, start=str(sync.start), end=str(sync.end))
        try:
            rows = self.history.fetch_daily(code, sync.start, sync.end)
            records = [DailyRecord.from_row(code, row) for row in rows]
        except StatError as e:
            if e.symbol is None:
                e.symbol = code
            raise
        except Exception as exc:
            raise FetchError(
                f"History fetch failed: {exc}", stage="fetch", symbol=code,
            ) from exc
        finally:
            self.history.logout()

        log.debug(
            "history_fetched",
            symbol=code,
            rows=len(records),
            elapsed_ms=round((time.monotonic() - t0) * 1000, 1),
        )

        if not records:
            return [], True
        try:
            self.store.write_records(records)
        except Exception as exc:
            log.warning("store_write_failed", symbol=code, rows=len(records), error=str(exc))
            return records, False
        return records, True

    def _read_series(self, code: str, start: date, today: date) -> PriceSeries:
        try:
            return self.store.read_series(code, start, today)
        except StoreReadError as e:
            if e.symbol is None:
                e.symbol = code
            raise
        except Exception as exc:
            raise StoreReadError(
                f"Failed to read records: {exc}", stage="read", symbol=code,
            ) from exc

    def _resolve_name(self, code: str) -> str:
        lookup = self.history.get_name if "names" in self.history.capabilities() else None
        try:
            return self.store.resolve_name(code, prefer_cache=True, lookup=lookup)
        except Exception as exc:
            log.warning("name_resolve_failed", symbol=code, error=str(exc))
            return code

    def _live_quote(self, code: str) -> LiveQuote:
        try:
            return self.quotes.live_quote(code)
        except QuoteError as e:
            if e.symbol is None:
                e.symbol = code
            raise
        except Exception as exc:
            raise QuoteError(
                f"Live quote failed: {exc}", stage="quote", symbol=code,
            ) from exc

    @staticmethod
    def _compute(
        code: str,
        name: str,
        quote: LiveQuote,
        series: PriceSeries,
        now: date | datetime,
    ) -> DailyStat:
        return DailyStat(
            name=name,
            now=quote.now,
            chg_today=quote.chg_today,
            last=quote.last,
            chg_last=series.row(0).pct_chg,
            chg_month=change_over_filtered(series, month_filter(now)),
            chg_last_month=change_over_filtered(series, prior_month_filter(now)),
            chg_year=change_over_filtered(series, year_filter(now)),
            avg20=average_over_last_n_days(series, 20),
            avg60=average_over_last_n_days(series, 60),
            avg200=average_over_last_n_days(series, 200),
            chg20=change_over_last_n_days(series, 20),
            chg60=change_over_last_n_days(series, 60),
            chg90=change_over_last_n_days(series, 90),
            code=code,
        )
