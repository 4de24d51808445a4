"""Snapshot pipeline error types."""

from __future__ import annotations

from enum import Enum


class StatErrorCode(Enum):
    """Error classification codes."""

    AUTH_FAILED = "auth_failed"
    FETCH_FAILED = "fetch_failed"
    STORE_READ_FAILED = "store_read_failed"
    STORE_WRITE_FAILED = "store_write_failed"
    EMPTY_SERIES = "empty_series"
    QUOTE_FAILED = "quote_failed"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    CONFIG_INVALID = "config_invalid"


class StatError(Exception):
    """Snapshot exception with error code and pipeline context.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        stage: Pipeline stage that failed ("login", "fetch", "read", ...).
        symbol: Instrument code the failing call was working on.
    """

    default_code = StatErrorCode.FETCH_FAILED

    def __init__(
        self,
        message: str,
        code: StatErrorCode | None = None,
        stage: str | None = None,
        symbol: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.stage = stage
        self.symbol = symbol

    def __str__(self) -> str:
        context = ", ".join(
            f"{k}={v}" for k, v in (("stage", self.stage), ("symbol", self.symbol)) if v
        )
        return f"{self.message} [{context}]" if context else self.message


class AuthError(StatError):
    """Remote provider login failed."""

    default_code = StatErrorCode.AUTH_FAILED


class FetchError(StatError):
    """Remote history fetch failed (transport or payload)."""

    default_code = StatErrorCode.FETCH_FAILED


class StoreReadError(StatError):
    """Local record store could not be read."""

    default_code = StatErrorCode.STORE_READ_FAILED


class StoreWriteError(StatError):
    """Local record store could not be written. Non-fatal during sync."""

    default_code = StatErrorCode.STORE_WRITE_FAILED


class EmptySeries(StatError):
    """No historical rows are available for the code."""

    default_code = StatErrorCode.EMPTY_SERIES


class QuoteError(StatError):
    """Live quote unavailable."""

    default_code = StatErrorCode.QUOTE_FAILED


class IndexOutOfRange(StatError, IndexError):
    """Series row offset outside the available rows."""

    default_code = StatErrorCode.INDEX_OUT_OF_RANGE
