"""Abstract interfaces for history and live quote providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from stockstat.models.quote import LiveQuote


class HistoryProvider(ABC):
    """Abstract base for daily history sources.

    Subclasses must implement ``login`` and ``fetch_daily``. Name lookup
    is optional and advertised via ``capabilities()``.
    """

    @abstractmethod
    def login(self) -> None:
        """Open a session. Raises ``AuthError`` on failure."""
        ...

    def logout(self) -> None:
        """Close the session, if the source keeps one."""

    @abstractmethod
    def fetch_daily(self, code: str, start: date, end: date) -> list[list[str]]:
        """Fetch daily OHLC rows for ``[start, end)``.

        Args:
            code: Instrument code.
            start: First date (inclusive).
            end: Last date (exclusive).

        Returns:
            Rows of string fields in ``DAILY_FIELDS`` order, oldest first.
            Raises ``FetchError`` on transport or payload failure.
        """
        ...

    def get_name(self, code: str) -> str | None:
        """Display name for ``code``."""
        raise NotImplementedError

    def capabilities(self) -> set[str]:
        """Return the set of supported features: ``history``, ``names``."""
        return {"history"}


class QuoteProvider(ABC):
    """Abstract base for live quote sources."""

    @abstractmethod
    def live_quote(self, code: str) -> LiveQuote:
        """Current quote for ``code``. Raises ``QuoteError`` on failure."""
        ...
