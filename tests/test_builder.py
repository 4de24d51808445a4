"""Tests for SnapshotBuilder — sync, read-back, reductions, error stages."""

from datetime import date, datetime

import pytest

from stockstat.builder import SnapshotBuilder
from stockstat.errors import (
    AuthError,
    EmptySeries,
    FetchError,
    QuoteError,
    StatErrorCode,
    StoreReadError,
    StoreWriteError,
)
from stockstat.models.stat import DailyStat
from stockstat.store import MemoryStore

from conftest import CODE, TODAY, make_records


class _FailingWriteStore(MemoryStore):
    def write_records(self, records):
        raise StoreWriteError("disk full", stage="write")


class _StaleFailingWriteStore(_FailingWriteStore):
    """Claims a sync long before the lookback window, and cannot persist."""

    def last_cached_date(self, code):
        return date(2022, 1, 3)


def _assert_fixture_stats(stat: DailyStat) -> None:
    assert stat.avg20 == 97.9
    assert stat.avg60 == 93.9
    assert stat.avg200 == 79.9
    assert stat.chg20 == 0.04
    assert stat.chg60 == 0.14
    assert stat.chg90 == 0.22
    assert stat.chg_month == 0.01
    assert stat.chg_last_month == 0.05
    assert stat.chg_year == 0.30


class TestBuildFromCache:
    def test_fixture_series(self, builder, store, history, records_250):
        store.write_records(records_250)
        stat = builder.build_snapshot(CODE, now=datetime(2024, 6, 10, 10, 30))

        assert history.fetch_calls == []
        assert history.login_calls == 0
        _assert_fixture_stats(stat)
        assert stat.now == 100.5
        assert stat.last == 99.8
        assert stat.chg_today == 0.7
        assert stat.chg_last == records_250[-1].pct_chg
        assert stat.code == CODE

    def test_accepts_plain_date(self, builder, store, records_250):
        store.write_records(records_250)
        _assert_fixture_stats(builder.build_snapshot(CODE, now=TODAY))


class TestBuildWithSync:
    def test_backfill_from_remote(self, builder, store, history, records_250):
        history.set_history(CODE, records_250)
        stat = builder.build_snapshot(CODE, now=TODAY)

        assert history.fetch_calls == [(CODE, date(2023, 6, 10), TODAY)]
        assert history.login_calls == 1
        assert not history.logged_in
        assert store.last_cached_date(CODE) == date(2024, 6, 7)
        _assert_fixture_stats(stat)

    def test_incremental_fetch(self, builder, store, history, records_250):
        store.write_records(records_250[:-5])
        history.set_history(CODE, records_250)
        stat = builder.build_snapshot(CODE, now=TODAY)

        # cached through Friday 2024-05-31, so the fetch starts Monday
        assert history.fetch_calls == [(CODE, date(2024, 6, 3), TODAY)]
        assert len(store.read_series(CODE, date(2023, 6, 10), TODAY)) == 250
        _assert_fixture_stats(stat)

    def test_write_failure_uses_fetched_rows(self, history, quotes, records_250):
        builder = SnapshotBuilder(_FailingWriteStore(), history, quotes)
        history.set_history(CODE, records_250)
        _assert_fixture_stats(builder.build_snapshot(CODE, now=TODAY))

    def test_rows_outside_lookback_ignored(self, builder, history):
        history.set_history(CODE, make_records(400, first_close=20.0))
        stat = builder.build_snapshot(CODE, now=TODAY)
        assert stat.avg20 == 97.9

    def test_unpersisted_rows_clipped_to_lookback(self, history, quotes):
        old = make_records(300, last_day=date(2023, 3, 31), first_close=10.0)
        recent = make_records(10, first_close=100.0, step=1.0)
        history.set_history(CODE, old + recent)
        builder = SnapshotBuilder(_StaleFailingWriteStore(), history, quotes)

        stat = builder.build_snapshot(CODE, now=TODAY)
        assert history.fetch_calls == [(CODE, date(2022, 1, 4), TODAY)]
        assert stat.avg200 == 104.5
        assert stat.chg90 == 0.1


class TestNameResolution:
    def test_name_from_provider_cached(self, builder, store, history, records_250):
        store.write_records(records_250)
        history.set_name(CODE, "浦发银行")
        assert builder.build_snapshot(CODE, now=TODAY).name == "浦发银行"
        assert store.cached_name(CODE) == "浦发银行"

    def test_name_falls_back_to_code(self, builder, store, records_250):
        store.write_records(records_250)
        assert builder.build_snapshot(CODE, now=TODAY).name == CODE


class TestFailureStages:
    def test_zero_rows_is_empty_series(self, builder, history):
        history.set_history(CODE, [])
        with pytest.raises(EmptySeries) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value.code == StatErrorCode.EMPTY_SERIES
        assert exc_info.value.symbol == CODE

    def test_login_failure(self, builder, history, quotes):
        def failing_login():
            raise RuntimeError("connection refused")
        history.login = failing_login  # type: ignore[method-assign]

        with pytest.raises(AuthError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value.stage == "login"
        assert history.fetch_calls == []

    def test_auth_error_propagates_unchanged(self, builder, history):
        err = AuthError("bad credentials", stage="login")
        def failing_login():
            raise err
        history.login = failing_login  # type: ignore[method-assign]

        with pytest.raises(AuthError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value is err

    def test_fetch_failure(self, builder, history):
        def failing_fetch(*args, **kwargs):
            raise ConnectionError("reset by peer")
        history.fetch_daily = failing_fetch  # type: ignore[method-assign]

        with pytest.raises(FetchError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value.stage == "fetch"
        assert not history.logged_in

    def test_malformed_row_is_fetch_error(self, builder, history):
        history.fetch_daily = lambda *a, **kw: [["not-a-date", CODE]]  # type: ignore[method-assign]
        with pytest.raises(FetchError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value.symbol == CODE

    def test_store_read_failure(self, builder, store, records_250):
        store.write_records(records_250)

        def failing_read(*args, **kwargs):
            raise OSError("permission denied")
        store.read_series = failing_read  # type: ignore[method-assign]

        with pytest.raises(StoreReadError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value.stage == "read"

    def test_quote_failure(self, builder, store, quotes, records_250):
        store.write_records(records_250)
        quotes.set_missing(CODE)
        with pytest.raises(QuoteError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert exc_info.value.symbol == CODE

    def test_quote_exception_wrapped(self, builder, store, quotes, records_250):
        store.write_records(records_250)

        def broken_quote(code):
            raise ValueError("bad payload")
        quotes.live_quote = broken_quote  # type: ignore[method-assign]

        with pytest.raises(QuoteError) as exc_info:
            builder.build_snapshot(CODE, now=TODAY)
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestBuildSnapshots:
    def test_collects_per_code_results(self, builder, store, history, records_250):
        store.write_records(records_250)
        history.set_history("sz.000001", [])
        results = builder.build_snapshots([CODE, "sz.000001"], now=TODAY)

        assert isinstance(results[CODE], DailyStat)
        assert isinstance(results["sz.000001"], EmptySeries)
