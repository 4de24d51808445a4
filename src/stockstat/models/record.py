"""Daily OHLC record data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from stockstat.errors import FetchError

# Column order requested from the history provider.
DAILY_FIELDS: tuple[str, ...] = (
    "date", "code", "open", "high", "low", "close", "preclose",
    "volume", "amount", "adjustflag", "turn", "tradestatus", "pctChg", "isST",
)


def _to_float(value: str) -> float:
    # suspended sessions come back with blank numeric columns
    return float(value) if value.strip() else 0.0


@dataclass(frozen=True)
class DailyRecord:
    """One trading session for one instrument.

    Attributes:
        code: Instrument code (e.g. ``sh.600000``).
        date: Trading date.
        open: Opening price.
        high: High price.
        low: Low price.
        close: Closing price.
        preclose: Close of the previous session.
        volume: Traded volume.
        amount: Traded amount.
        pct_chg: Change from the previous session, in percent.
        raw: Comma-joined provider payload the record was parsed from.
    """

    code: str
    date: date
    open: float
    high: float
    low: float
    close: float
    preclose: float
    volume: float = 0.0
    amount: float = 0.0
    pct_chg: float = 0.0
    raw: str = ""

    def to_row(self) -> list[str]:
        """Provider-shaped row in ``DAILY_FIELDS`` order."""
        values = {
            "date": self.date.isoformat(),
            "code": self.code,
            "open": f"{self.open:.4f}",
            "high": f"{self.high:.4f}",
            "low": f"{self.low:.4f}",
            "close": f"{self.close:.4f}",
            "preclose": f"{self.preclose:.4f}",
            "volume": f"{self.volume:.0f}",
            "amount": f"{self.amount:.4f}",
            "adjustflag": "3",
            "turn": "",
            "tradestatus": "1",
            "pctChg": f"{self.pct_chg:.6f}",
            "isST": "0",
        }
        return [values[f] for f in DAILY_FIELDS]

    @classmethod
    def from_row(
        cls,
        code: str,
        row: list[str],
        fields: tuple[str, ...] = DAILY_FIELDS,
    ) -> DailyRecord:
        """Parse a provider row (list of strings in ``fields`` order)."""
        values = dict(zip(fields, row))
        try:
            day = date.fromisoformat(values["date"].strip())
            close = float(values["close"])
            preclose = float(values["preclose"])
        except (KeyError, ValueError) as exc:
            raise FetchError(
                f"Unparseable history row {row!r}: {exc}",
                stage="parse",
                symbol=code,
            ) from exc

        try:
            return cls(
                code=code,
                date=day,
                open=_to_float(values.get("open", "")),
                high=_to_float(values.get("high", "")),
                low=_to_float(values.get("low", "")),
                close=close,
                preclose=preclose,
                volume=_to_float(values.get("volume", "")),
                amount=_to_float(values.get("amount", "")),
                pct_chg=_to_float(values.get("pctChg", "")),
                raw=",".join(row),
            )
        except ValueError as exc:
            raise FetchError(
                f"Unparseable history row {row!r}: {exc}",
                stage="parse",
                symbol=code,
            ) from exc
