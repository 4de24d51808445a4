"""Mock providers for testing and CI — no network access required."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from stockstat.errors import QuoteError
from stockstat.models.quote import LiveQuote
from stockstat.models.record import DailyRecord
from stockstat.providers.base import HistoryProvider, QuoteProvider


class MockHistoryProvider(HistoryProvider):
    """In-memory history source returning pre-loaded records.

    Use ``set_history`` to pre-load records, or leave it empty to get
    synthetic weekday sessions. ``set_history(code, [])`` makes a code
    return nothing at all. Calls are recorded for assertions.
    """

    def __init__(self) -> None:
        self._history: dict[str, list[DailyRecord]] = {}
        self._names: dict[str, str] = {}
        self.logged_in = False
        self.login_calls = 0
        self.fetch_calls: list[tuple[str, date, date]] = []

    # --- Pre-load helpers ---

    def set_history(self, code: str, records: list[DailyRecord]) -> None:
        self._history[code] = list(records)

    def set_name(self, code: str, name: str) -> None:
        self._names[code] = name

    # --- Provider implementation ---

    def capabilities(self) -> set[str]:
        return {"history", "names"}

    def login(self) -> None:
        self.login_calls += 1
        self.logged_in = True

    def logout(self) -> None:
        self.logged_in = False

    def fetch_daily(self, code: str, start: date, end: date) -> list[list[str]]:
        self.fetch_calls.append((code, start, end))
        if code in self._history:
            records = [r for r in self._history[code] if start <= r.date < end]
        else:
            records = self._generate(code, start, end)
        return [r.to_row() for r in sorted(records, key=lambda r: r.date)]

    def get_name(self, code: str) -> str | None:
        return self._names.get(code)

    @staticmethod
    def _generate(code: str, start: date, end: date) -> list[DailyRecord]:
        """Weekday sessions with a slow upward drift."""
        records: list[DailyRecord] = []
        close = 10.0
        current = start
        while current < end:
            if current.weekday() < 5:
                preclose = close
                close = round(close + 0.01, 2)
                records.append(DailyRecord(
                    code=code,
                    date=current,
                    open=preclose,
                    high=close + 0.05,
                    low=preclose - 0.05,
                    close=close,
                    preclose=preclose,
                    volume=100000.0,
                    amount=close * 100000.0,
                    pct_chg=round((close - preclose) / preclose * 100, 6),
                ))
            current += timedelta(days=1)
        return records


class MockQuoteProvider(QuoteProvider):
    """In-memory quote source with configurable static quotes."""

    def __init__(self) -> None:
        self._quotes: dict[str, LiveQuote] = {}
        self._missing: set[str] = set()

    def set_quote(self, code: str, quote: LiveQuote) -> None:
        self._quotes[code] = quote

    def set_missing(self, code: str) -> None:
        """Make ``live_quote`` fail for ``code``."""
        self._missing.add(code)

    def live_quote(self, code: str) -> LiveQuote:
        if code in self._missing:
            raise QuoteError("No quote available", stage="quote", symbol=code)
        if code in self._quotes:
            return self._quotes[code]
        return LiveQuote(
            code=code,
            now=10.10,
            last=10.00,
            chg_today=1.0,
            timestamp=datetime.now(),
        )
