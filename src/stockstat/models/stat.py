"""DailyStat data model — the computed per-instrument snapshot."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DailyStat:
    """Statistics snapshot for one instrument at one point in time.

    Window changes (``chg_month`` .. ``chg90``) are fractional rates,
    ``chg_today`` and ``chg_last`` are percentages as reported by the
    quote and history sources.
    """

    name: str
    now: float
    chg_today: float
    last: float
    chg_last: float
    chg_month: float
    chg_last_month: float
    chg_year: float
    avg20: float
    avg60: float
    avg200: float
    chg20: float
    chg60: float
    chg90: float
    code: str


# Display label per field, in declaration order.
FIELD_LABELS: dict[str, str] = {
    "name": "name",
    "now": "now",
    "chg_today": "chg_today",
    "last": "last",
    "chg_last": "chg_last",
    "chg_month": "chg_m",
    "chg_last_month": "chg_lm",
    "chg_year": "chg_y",
    "avg20": "avg20",
    "avg60": "avg60",
    "avg200": "avg200",
    "chg20": "chg20",
    "chg60": "chg60",
    "chg90": "chg90",
    "code": "code",
}
