"""Tests for the PriceSeries accessor."""

from dataclasses import replace
from datetime import date

import pytest

from stockstat.errors import IndexOutOfRange
from stockstat.series import PriceSeries

from conftest import make_records


class TestOrdering:
    def test_newest_first(self, records_250):
        series = PriceSeries(records_250)
        assert series.row(0).date == date(2024, 6, 7)
        assert series.row(249).date == records_250[0].date
        dates = [r.date for r in series]
        assert dates == sorted(dates, reverse=True)

    def test_duplicates_last_writer_wins(self):
        recs = make_records(3)
        dup = replace(recs[-1], close=99.0)
        series = PriceSeries([*recs, dup])
        assert len(series) == 3
        assert series.row(0).close == 99.0

    def test_latest(self, series_250):
        assert series_250.latest is series_250.row(0)


class TestRowAccess:
    def test_out_of_range(self, series_250):
        with pytest.raises(IndexOutOfRange):
            series_250.row(250)

    def test_negative_offset(self, series_250):
        with pytest.raises(IndexOutOfRange):
            series_250.row(-1)

    def test_empty(self):
        series = PriceSeries()
        assert len(series) == 0
        with pytest.raises(IndexError):
            series.row(0)


class TestFilter:
    def test_preserves_order(self, series_250):
        june = series_250.filter(lambda r: r.date.month == 6 and r.date.year == 2024)
        assert [r.date.day for r in june] == [7, 6, 5, 4, 3]

    def test_no_match(self, series_250):
        assert len(series_250.filter(lambda r: False)) == 0

    def test_does_not_mutate_source(self, series_250):
        series_250.filter(lambda r: False)
        assert len(series_250) == 250


class TestHelpers:
    def test_closes_prefix(self, series_250):
        assert series_250.closes(2) == [99.8, 99.6]
        assert len(series_250.closes(1000)) == 250
        assert len(series_250.closes()) == 250

    def test_merged(self):
        older = make_records(5, last_day=date(2024, 6, 3))
        newer = make_records(2, last_day=date(2024, 6, 5))
        merged = PriceSeries(older).merged(newer)
        assert merged.row(0).date == date(2024, 6, 5)
        assert merged.row(0) == newer[-1]
