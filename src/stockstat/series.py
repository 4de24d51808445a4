"""PriceSeries — read-only newest-first view over daily records."""

from __future__ import annotations

from typing import Callable, Iterable, Iterator

from stockstat.errors import IndexOutOfRange
from stockstat.models.record import DailyRecord


class PriceSeries:
    """Daily records for one instrument, strictly descending by date.

    The constructor sorts newest-first and drops duplicate dates, keeping
    the record that appears last in the input (last writer wins). Index 0
    is the most recent session. Weekends and holidays are simply absent.
    """

    def __init__(self, records: Iterable[DailyRecord] = ()) -> None:
        by_date: dict = {}
        for r in records:
            by_date[r.date] = r
        self._rows: tuple[DailyRecord, ...] = tuple(
            by_date[d] for d in sorted(by_date, reverse=True)
        )

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[DailyRecord]:
        return iter(self._rows)

    def __repr__(self) -> str:
        if not self._rows:
            return "PriceSeries([])"
        return f"PriceSeries({len(self._rows)} rows, {self._rows[-1].date}..{self._rows[0].date})"

    def row(self, offset: int) -> DailyRecord:
        """Row at ``offset`` (0 = most recent)."""
        if offset < 0 or offset >= len(self._rows):
            raise IndexOutOfRange(
                f"Row offset {offset} outside series of {len(self._rows)} rows",
                stage="compute",
            )
        return self._rows[offset]

    @property
    def latest(self) -> DailyRecord:
        return self.row(0)

    def filter(self, predicate: Callable[[DailyRecord], bool]) -> PriceSeries:
        """New series holding the matching rows, relative order kept."""
        sub = PriceSeries()
        sub._rows = tuple(r for r in self._rows if predicate(r))
        return sub

    def closes(self, n: int | None = None) -> list[float]:
        """Close prices of the ``n`` most recent rows (all rows if None)."""
        rows = self._rows if n is None else self._rows[:max(n, 0)]
        return [r.close for r in rows]

    def merged(self, records: Iterable[DailyRecord]) -> PriceSeries:
        """New series with ``records`` merged in; they win on equal dates."""
        return PriceSeries([*reversed(self._rows), *records])
