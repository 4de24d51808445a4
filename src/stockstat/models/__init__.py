"""Snapshot data models."""

from stockstat.models.quote import LiveQuote
from stockstat.models.record import DAILY_FIELDS, DailyRecord
from stockstat.models.stat import FIELD_LABELS, DailyStat

__all__ = [
    "DAILY_FIELDS",
    "DailyRecord",
    "LiveQuote",
    "DailyStat",
    "FIELD_LABELS",
]
