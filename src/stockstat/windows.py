"""Windowed reductions over a newest-first daily price series.

All change rates follow the same rule: the most recent close in the
window against the earliest previous-close in the window, rounded to
two decimals (half away from zero). Moving averages are the mean close
of the most recent rows, using every row available when the series is
shorter than the window.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from dateutil.relativedelta import relativedelta

from stockstat.errors import EmptySeries
from stockstat.models.record import DailyRecord
from stockstat.series import PriceSeries

RecordPredicate = Callable[[DailyRecord], bool]

_CENT = Decimal("0.01")


# ---- Rounding ----

def round2(x: float) -> float:
    """Round to 2 decimals, half away from zero (0.005 -> 0.01)."""
    if math.isnan(x) or math.isinf(x):
        return x
    # repr() gives the shortest decimal that round-trips, so 0.125 stays 0.125
    return float(Decimal(repr(x)).quantize(_CENT, rounding=ROUND_HALF_UP))


def round_change_rate(x: float) -> float:
    """Round a fractional change rate to 2 decimals."""
    return round2(x)


def change_rate(later: DailyRecord, earlier: DailyRecord) -> float:
    """Change from ``earlier.preclose`` to ``later.close``."""
    if earlier.preclose == 0:
        return 0.0
    return round_change_rate((later.close - earlier.preclose) / earlier.preclose)


# ---- Calendar predicates ----

def in_current_month(d: date, now: date | datetime) -> bool:
    return d.year == now.year and d.month == now.month


def in_prior_month(d: date, now: date | datetime) -> bool:
    """True if ``d`` falls in the calendar month before ``now``'s month."""
    prior = date(now.year, now.month, 1) - relativedelta(months=1)
    return d.year == prior.year and d.month == prior.month


def in_current_year(d: date, now: date | datetime) -> bool:
    return d.year == now.year


def month_filter(now: date | datetime) -> RecordPredicate:
    return lambda r: in_current_month(r.date, now)


def prior_month_filter(now: date | datetime) -> RecordPredicate:
    return lambda r: in_prior_month(r.date, now)


def year_filter(now: date | datetime) -> RecordPredicate:
    return lambda r: in_current_year(r.date, now)


# ---- Window reductions ----

def change_over_filtered(series: PriceSeries, predicate: RecordPredicate) -> float:
    """Net change across the rows matching ``predicate``.

    Compares the first match in series order (most recent) with the last
    match (oldest). The series must already be newest-first. Returns 0.0
    when nothing matches.
    """
    matched = series.filter(predicate)
    if len(matched) == 0:
        return 0.0
    return change_rate(matched.row(0), matched.row(len(matched) - 1))


def change_over_last_n_days(series: PriceSeries, n: int) -> float:
    """Change between row 0 and the n-th most recent row.

    Falls back to the oldest row when fewer than ``n`` rows exist. A
    single-row series has no window to measure and yields 0.0.
    """
    if len(series) == 0:
        raise EmptySeries("Cannot compute change over an empty series", stage="compute")
    if len(series) == 1:
        return 0.0
    offset = min(n - 1, len(series) - 1)
    return change_rate(series.row(0), series.row(max(offset, 0)))


def average_over_last_n_days(series: PriceSeries, n: int) -> float:
    """Mean close over the ``min(n, len)`` most recent rows, rounded."""
    closes = series.closes(n)
    if not closes:
        raise EmptySeries("Cannot average an empty series", stage="compute")
    return round2(math.fsum(closes) / len(closes))
