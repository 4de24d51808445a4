"""Live quote data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LiveQuote:
    """Real-time price for one instrument.

    Attributes:
        code: Instrument code.
        now: Current price.
        last: Close of the previous session.
        chg_today: Change from ``last`` to ``now``, in percent.
        name: Display name reported by the quote source.
        timestamp: When the quote was taken.
    """

    code: str
    now: float
    last: float
    chg_today: float
    name: str | None = None
    timestamp: datetime | None = None
