"""Shared fixtures for stockstat tests."""

from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from stockstat.builder import SnapshotBuilder
from stockstat.models.quote import LiveQuote
from stockstat.models.record import DailyRecord
from stockstat.providers.mock import MockHistoryProvider, MockQuoteProvider
from stockstat.series import PriceSeries
from stockstat.store import MemoryStore

CODE = "sh.600000"

# Monday; the fixture history ends on the Friday before.
TODAY = date(2024, 6, 10)


def make_records(
    n: int,
    last_day: date = date(2024, 6, 7),
    code: str = CODE,
    first_close: float = 50.0,
    step: float = 0.2,
) -> list[DailyRecord]:
    """``n`` weekday sessions ending on ``last_day``, oldest first.

    Closes rise by ``step`` per session starting at ``first_close``; each
    preclose is the previous session's close.
    """
    days: list[date] = []
    d = last_day
    while len(days) < n:
        if d.weekday() < 5:
            days.append(d)
        d -= timedelta(days=1)
    days.reverse()

    records: list[DailyRecord] = []
    preclose = round(first_close - step, 2)
    for k, day in enumerate(days):
        close = round(first_close + step * k, 2)
        records.append(DailyRecord(
            code=code,
            date=day,
            open=preclose,
            high=close,
            low=preclose,
            close=close,
            preclose=preclose,
            volume=1000.0,
            amount=close * 1000.0,
            pct_chg=round((close - preclose) / preclose * 100, 2),
        ))
        preclose = close
    return records


@pytest.fixture
def records_250() -> list[DailyRecord]:
    return make_records(250)


@pytest.fixture
def series_250(records_250) -> PriceSeries:
    return PriceSeries(records_250)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def history() -> MockHistoryProvider:
    return MockHistoryProvider()


@pytest.fixture
def quotes() -> MockQuoteProvider:
    provider = MockQuoteProvider()
    provider.set_quote(CODE, LiveQuote(code=CODE, now=100.5, last=99.8, chg_today=0.7))
    return provider


@pytest.fixture
def builder(store, history, quotes) -> SnapshotBuilder:
    return SnapshotBuilder(store=store, history=history, quotes=quotes)
