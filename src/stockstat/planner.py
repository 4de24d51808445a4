"""Incremental sync planning — which history range is missing locally."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

import structlog
from dateutil.relativedelta import relativedelta

log = structlog.get_logger()


@dataclass(frozen=True)
class SyncRange:
    """Half-open date range ``[start, end)`` to fetch from the remote source."""

    start: date
    end: date

    @property
    def needs_fetch(self) -> bool:
        return self.end > self.start


def skip_weekend(d: date) -> date:
    """Advance Saturday/Sunday to the following Monday."""
    if d.weekday() == 5:
        return d + timedelta(days=2)
    if d.weekday() == 6:
        return d + timedelta(days=1)
    return d


def lookback_start(today: date, years: int = 1) -> date:
    """``today`` minus ``years`` calendar years (Feb 29 maps to Feb 28)."""
    return today - relativedelta(years=years)


def plan_range(
    code: str,
    last_cached_date: date | None,
    today: date,
    lookback_years: int = 1,
) -> SyncRange:
    """Plan the fetch range for ``code``.

    Never-synced codes get the full lookback window. Otherwise the range
    starts the day after the last cached session, pushed past a weekend.
    Holidays are not skipped; a fetch over a holiday just returns nothing.
    ``end`` is the start of ``today``, so today's open session is excluded.
    """
    if last_cached_date is None:
        start = lookback_start(today, lookback_years)
        log.info("history_backfill_planned", symbol=code, start=str(start))
    else:
        start = skip_weekend(last_cached_date + timedelta(days=1))

    sync = SyncRange(start=start, end=today)
    log.debug(
        "sync_planned",
        symbol=code,
        start=str(sync.start),
        end=str(sync.end),
        needs_fetch=sync.needs_fetch,
    )
    return sync
