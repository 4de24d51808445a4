"""BaoStock daily history provider (A-share codes such as ``sh.600000``).

Install the optional dependency:
    pip install stockstat[baostock]
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import date, timedelta
from typing import Any

import structlog

from stockstat.errors import AuthError, FetchError, StatError, StatErrorCode
from stockstat.models.record import DAILY_FIELDS
from stockstat.providers.base import HistoryProvider

try:
    import baostock as bs
    _BAOSTOCK_AVAILABLE = True
except ImportError:
    _BAOSTOCK_AVAILABLE = False

log = structlog.get_logger()


class BaoStockProvider(HistoryProvider):
    """Fetch unadjusted daily K-line data from BaoStock.

    Capabilities: history, names.

    The baostock module keeps a single socket and user id per process, so
    all instances share one reference-counted session: the first
    ``login`` opens it, the last matching ``logout`` closes it, and every
    query runs under the same class-level lock.
    """

    _lock = threading.RLock()
    _sessions = 0
    _pending_login: Future | None = None

    def __init__(self, login_timeout: float = 10.0, adjustflag: str = "3") -> None:
        if not _BAOSTOCK_AVAILABLE:
            raise StatError(
                "baostock is not installed. Run: pip install stockstat[baostock]",
                code=StatErrorCode.CONFIG_INVALID,
            )
        self.login_timeout = login_timeout
        self.adjustflag = adjustflag

    def capabilities(self) -> set[str]:
        return {"history", "names"}

    def login(self) -> None:
        """Join the shared session, opening it if nobody holds it.

        Every successful call must be paired with one ``logout``.

        The SDK call runs in a worker thread bounded by ``login_timeout``.
        A timed-out login cannot be cancelled and keeps running against the
        shared socket; until it finishes, further logins fail fast with
        ``AuthError`` instead of racing it.
        """
        cls = BaoStockProvider
        with cls._lock:
            if cls._sessions == 0:
                self._open_session()
            cls._sessions += 1

    def logout(self) -> None:
        cls = BaoStockProvider
        with cls._lock:
            if cls._sessions == 0:
                return
            cls._sessions -= 1
            if cls._sessions > 0:
                return
            try:
                bs.logout()
            except Exception as exc:
                log.warning("baostock_logout_failed", error=str(exc))

    def fetch_daily(self, code: str, start: date, end: date) -> list[list[str]]:
        if end <= start:
            return []
        # BaoStock's end_date is inclusive
        last_day = end - timedelta(days=1)
        try:
            with BaoStockProvider._lock:
                rs = bs.query_history_k_data_plus(
                    code,
                    ",".join(DAILY_FIELDS),
                    start_date=start.isoformat(),
                    end_date=last_day.isoformat(),
                    frequency="d",
                    adjustflag=self.adjustflag,
                )
                self._check(rs, FetchError, "fetch", code)
                rows: list[list[str]] = []
                # next() may page more data over the socket
                while rs.error_code == "0" and rs.next():
                    rows.append(rs.get_row_data())
        except StatError:
            raise
        except Exception as exc:
            raise FetchError(
                f"BaoStock history query failed: {exc}", stage="fetch", symbol=code,
            ) from exc
        return rows

    def get_name(self, code: str) -> str | None:
        """Stock name from BaoStock's basic info, in a session of its own."""
        self.login()
        try:
            with BaoStockProvider._lock:
                try:
                    rs = bs.query_stock_basic(code=code)
                except Exception as exc:
                    raise FetchError(
                        f"BaoStock basic query failed: {exc}", stage="name", symbol=code,
                    ) from exc
                self._check(rs, FetchError, "name", code)
                if not rs.next():
                    return None
                row = dict(zip(rs.fields, rs.get_row_data()))
        finally:
            self.logout()
        return row.get("code_name") or None

    # ---- helpers ----

    def _open_session(self) -> None:
        cls = BaoStockProvider
        if cls._pending_login is not None:
            if not cls._pending_login.done():
                raise AuthError(
                    "A previous BaoStock login is still pending", stage="login",
                )
            cls._pending_login = None

        pool = ThreadPoolExecutor(max_workers=1)
        future = pool.submit(bs.login)
        try:
            result = future.result(timeout=self.login_timeout)
        except FutureTimeout as exc:
            cls._pending_login = future
            raise AuthError(
                f"BaoStock login timed out after {self.login_timeout}s", stage="login",
            ) from exc
        except Exception as exc:
            raise AuthError(f"BaoStock login failed: {exc}", stage="login") from exc
        finally:
            pool.shutdown(wait=False)

        self._check(result, AuthError, "login")

    @staticmethod
    def _check(result: Any, error: type[StatError], stage: str, code: str | None = None) -> None:
        if getattr(result, "error_code", None) != "0":
            raise error(
                f"BaoStock {stage} failed: {getattr(result, 'error_msg', 'unknown error')}",
                stage=stage,
                symbol=code,
            )
