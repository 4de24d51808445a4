"""Sina Finance live quote provider.

The endpoint answers with one JavaScript assignment per code, GBK encoded::

    var hq_str_sh600000="浦发银行,10.000,9.980,10.050,...,2024-06-10,15:00:00,00";

Field 0 is the name, 1 open, 2 previous close, 3 current price; the date
and time sit at positions 30 and 31.
"""

from __future__ import annotations

import re
from datetime import datetime

import requests

from stockstat.errors import QuoteError
from stockstat.models.quote import LiveQuote
from stockstat.providers.base import QuoteProvider
from stockstat.windows import round2

_PAYLOAD = re.compile(r'hq_str_\w+="([^"]*)"')


def sina_symbol(code: str) -> str:
    """``sh.600000`` -> ``sh600000``."""
    return code.replace(".", "").lower()


class SinaQuoteProvider(QuoteProvider):
    """Fetch real-time A-share quotes from hq.sinajs.cn."""

    base_url = "https://hq.sinajs.cn/list="

    def __init__(self, timeout: float = 5.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Referer": "https://finance.sina.com.cn"})

    def live_quote(self, code: str) -> LiveQuote:
        try:
            resp = self.session.get(self.base_url + sina_symbol(code), timeout=self.timeout)
            resp.raise_for_status()
            resp.encoding = "gbk"
            text = resp.text
        except requests.RequestException as exc:
            raise QuoteError(
                f"Sina quote request failed: {exc}", stage="quote", symbol=code,
            ) from exc
        return self.parse(code, text)

    @staticmethod
    def parse(code: str, text: str) -> LiveQuote:
        """Parse a Sina ``hq_str`` payload into a LiveQuote."""
        m = _PAYLOAD.search(text)
        fields = m.group(1).split(",") if m else []
        if len(fields) < 4:
            raise QuoteError(
                f"Unknown code or empty quote payload: {text.strip()[:80]!r}",
                stage="quote",
                symbol=code,
            )
        try:
            last = float(fields[2])
            now = float(fields[3])
        except ValueError as exc:
            raise QuoteError(
                f"Malformed quote payload: {exc}", stage="quote", symbol=code,
            ) from exc

        # before the open auction the current price is reported as 0
        if now == 0:
            now = last
        chg_today = round2((now - last) / last * 100) if last else 0.0

        return LiveQuote(
            code=code,
            now=now,
            last=last,
            chg_today=chg_today,
            name=fields[0] or None,
            timestamp=_parse_timestamp(fields),
        )


def _parse_timestamp(fields: list[str]) -> datetime | None:
    if len(fields) < 32:
        return None
    try:
        return datetime.strptime(f"{fields[30]} {fields[31]}", "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return None
