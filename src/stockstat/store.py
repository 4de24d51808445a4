"""Record stores for daily history — Parquet (disk) and Memory."""

from __future__ import annotations

import json
import shutil
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Callable, Iterable

import pandas as pd
import structlog

from stockstat.errors import StoreReadError, StoreWriteError
from stockstat.models.record import DailyRecord
from stockstat.series import PriceSeries

log = structlog.get_logger()

NameLookup = Callable[[str], "str | None"]


class RecordStore(ABC):
    """Abstract record store interface.

    Records are keyed by (code, date); writing an existing key replaces it.
    """

    @abstractmethod
    def last_cached_date(self, code: str) -> date | None:
        """Most recent stored session date, or None if never synced."""
        ...

    @abstractmethod
    def write_records(self, records: list[DailyRecord]) -> None:
        """Persist records. Raises ``StoreWriteError`` on failure."""
        ...

    @abstractmethod
    def read_series(self, code: str, start: date, end: date) -> PriceSeries:
        """Stored records with ``start <= date <= end``, newest first."""
        ...

    @abstractmethod
    def cached_name(self, code: str) -> str | None:
        ...

    @abstractmethod
    def save_name(self, code: str, name: str) -> None:
        ...

    @abstractmethod
    def clear(self, code: str) -> None:
        ...

    def resolve_name(
        self,
        code: str,
        prefer_cache: bool = True,
        lookup: NameLookup | None = None,
    ) -> str:
        """Display name for ``code``; never fails, falls back to the code.

        With ``prefer_cache`` a stored name wins. Otherwise, or on a miss,
        ``lookup`` is consulted and a hit is saved for next time.
        """
        cached = self.cached_name(code)
        if prefer_cache and cached:
            return cached

        if lookup is not None:
            try:
                name = lookup(code)
            except Exception as exc:
                log.warning("name_lookup_failed", symbol=code, error=str(exc))
                name = None
            if name:
                try:
                    self.save_name(code, name)
                except Exception as exc:
                    log.warning("name_save_failed", symbol=code, error=str(exc))
                return name

        return cached or code


class MemoryStore(RecordStore):
    """In-process store; contents vanish with the object."""

    def __init__(self) -> None:
        self._records: dict[str, dict[date, DailyRecord]] = defaultdict(dict)
        self._names: dict[str, str] = {}
        self._lock = threading.Lock()

    def last_cached_date(self, code: str) -> date | None:
        rows = self._records.get(code)
        return max(rows) if rows else None

    def write_records(self, records: list[DailyRecord]) -> None:
        with self._lock:
            for r in records:
                self._records[r.code][r.date] = r

    def read_series(self, code: str, start: date, end: date) -> PriceSeries:
        rows = self._records.get(code, {})
        return PriceSeries(r for d, r in rows.items() if start <= d <= end)

    def cached_name(self, code: str) -> str | None:
        return self._names.get(code)

    def save_name(self, code: str, name: str) -> None:
        self._names[code] = name

    def clear(self, code: str) -> None:
        with self._lock:
            self._records.pop(code, None)
            self._names.pop(code, None)

    def clear_all(self) -> None:
        with self._lock:
            self._records.clear()
            self._names.clear()


class ParquetStore(RecordStore):
    """Disk store using one Parquet file per code with Snappy compression.

    Storage layout: ``{base_path}/{CODE}/daily.parquet`` plus a shared
    ``{base_path}/names.json`` for display names.
    """

    _COLUMNS = [
        "code", "date", "open", "high", "low", "close", "preclose",
        "volume", "amount", "pct_chg", "raw",
    ]

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._names_lock = threading.Lock()

    def _file_path(self, code: str) -> Path:
        return self.base_path / code.upper() / "daily.parquet"

    @property
    def _names_path(self) -> Path:
        return self.base_path / "names.json"

    def _load(self, code: str) -> pd.DataFrame | None:
        fp = self._file_path(code)
        if not fp.exists():
            return None
        try:
            df = pd.read_parquet(fp)
        except Exception as exc:
            raise StoreReadError(
                f"Failed to read {fp}: {exc}", stage="read", symbol=code,
            ) from exc
        df["date"] = pd.to_datetime(df["date"]).dt.date
        return df

    def last_cached_date(self, code: str) -> date | None:
        df = self._load(code)
        if df is None or df.empty:
            return None
        return df["date"].max()

    def write_records(self, records: list[DailyRecord]) -> None:
        if not records:
            return
        by_code: dict[str, list[DailyRecord]] = defaultdict(list)
        for r in records:
            by_code[r.code].append(r)

        for code, rows in by_code.items():
            with self._locks[code]:
                try:
                    fresh = self._records_to_df(rows)
                    existing = self._load(code)
                    if existing is not None:
                        fresh = pd.concat([existing, fresh], ignore_index=True)
                    fresh = (
                        fresh.drop_duplicates(subset="date", keep="last")
                        .sort_values("date")
                        .reset_index(drop=True)
                    )
                    fp = self._file_path(code)
                    fp.parent.mkdir(parents=True, exist_ok=True)
                    fresh.to_parquet(fp, compression="snappy", index=False)
                except StoreReadError as exc:
                    raise StoreWriteError(
                        f"Cannot merge into unreadable store file: {exc.message}",
                        stage="write",
                        symbol=code,
                    ) from exc
                except Exception as exc:
                    raise StoreWriteError(
                        f"Failed to write records: {exc}", stage="write", symbol=code,
                    ) from exc

    def read_series(self, code: str, start: date, end: date) -> PriceSeries:
        df = self._load(code)
        if df is None:
            return PriceSeries()
        df = df[(df["date"] >= start) & (df["date"] <= end)]
        return PriceSeries(self._df_to_records(df))

    def cached_name(self, code: str) -> str | None:
        return self._read_names().get(code)

    def save_name(self, code: str, name: str) -> None:
        with self._names_lock:
            names = self._read_names()
            names[code] = name
            self._names_path.write_text(
                json.dumps(names, ensure_ascii=False, indent=2), encoding="utf-8",
            )

    def clear(self, code: str) -> None:
        code_dir = self.base_path / code.upper()
        if code_dir.exists():
            shutil.rmtree(code_dir)

    def clear_all(self) -> None:
        for d in self.base_path.iterdir():
            if d.is_dir():
                shutil.rmtree(d)

    # ---- helpers ----

    def _read_names(self) -> dict[str, str]:
        if not self._names_path.exists():
            return {}
        try:
            return json.loads(self._names_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("names_file_unreadable", path=str(self._names_path))
            return {}

    @classmethod
    def _records_to_df(cls, records: Iterable[DailyRecord]) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "code": r.code,
                    "date": r.date,
                    "open": r.open,
                    "high": r.high,
                    "low": r.low,
                    "close": r.close,
                    "preclose": r.preclose,
                    "volume": r.volume,
                    "amount": r.amount,
                    "pct_chg": r.pct_chg,
                    "raw": r.raw,
                }
                for r in records
            ],
            columns=cls._COLUMNS,
        )

    @staticmethod
    def _df_to_records(df: pd.DataFrame) -> list[DailyRecord]:
        records: list[DailyRecord] = []
        for _, row in df.iterrows():
            records.append(DailyRecord(
                code=str(row["code"]),
                date=row["date"],
                open=float(row["open"]),
                high=float(row["high"]),
                low=float(row["low"]),
                close=float(row["close"]),
                preclose=float(row["preclose"]),
                volume=float(row["volume"]),
                amount=float(row["amount"]),
                pct_chg=float(row["pct_chg"]),
                raw=str(row["raw"]) if pd.notna(row.get("raw")) else "",
            ))
        return records
