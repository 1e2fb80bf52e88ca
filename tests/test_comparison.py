"""Tests for row join & diff."""

from datetime import date

import pytest

from app.analyzer.comparison import join_rows, row_key
from app.connectors.gsc.client import SearchConsoleAPIError
from app.models.gsc_models import ComparisonPolicy, DateRange, QueryRow

RANGE_A = DateRange(start_date=date(2024, 3, 1), end_date=date(2024, 3, 10))
RANGE_B = DateRange(start_date=date(2024, 2, 20), end_date=date(2024, 2, 29))


def _row(*keys, clicks=0, impressions=0, ctr=0.0, position=1.0):
    return QueryRow(keys=keys, clicks=clicks, impressions=impressions, ctr=ctr, position=position)


def _join(rows_a, rows_b, dimensions=("page",)):
    return join_rows(
        rows_a, rows_b, dimensions, RANGE_A, RANGE_B, ComparisonPolicy.PREVIOUS_PERIOD
    )


class TestJoinRows:
    def test_disjoint_rows_pair_with_zero(self):
        records = _join(
            [_row("/a", clicks=10, impressions=100, ctr=0.1, position=2.0)],
            [_row("/b", clicks=5, impressions=50, ctr=0.1, position=3.0)],
        )

        assert len(records) == 2
        by_page = {r.keys[0]: r for r in records}
        a, b = by_page["/a"], by_page["/b"]
        assert (a.clicks_a, a.clicks_b, a.clicks_diff) == (10, 0, 10)
        assert (b.clicks_a, b.clicks_b, b.clicks_diff) == (0, 5, -5)
        assert b.position_a == 0.0
        assert b.position_diff == -3.0

    def test_matching_rows_diff_is_a_minus_b(self):
        records = _join(
            [_row("/a", clicks=7, impressions=70, ctr=0.1, position=4.0)],
            [_row("/a", clicks=9, impressions=60, ctr=0.15, position=2.5)],
        )

        (record,) = records
        assert record.clicks_diff == -2
        assert record.impressions_diff == 10
        assert record.ctr_diff == pytest.approx(-0.05)
        assert record.position_diff == 1.5

    def test_multi_dimension_keys_and_output_row(self):
        records = _join(
            [_row("/a", "shoes", clicks=3)],
            [_row("/a", "shoes", clicks=1), _row("/a", "boots", clicks=2)],
            dimensions=("page", "query"),
        )

        assert [r.keys for r in records] == [("/a", "boots"), ("/a", "shoes")]
        row = records[1].to_row()
        assert row["page"] == "/a"
        assert row["query"] == "shoes"
        assert row["keys"] == ["/a", "shoes"]
        assert row["clicks_diff"] == 2
        assert row["rangeA"] == {"startDate": "2024-03-01", "endDate": "2024-03-10"}
        assert row["rangeB"] == {"startDate": "2024-02-20", "endDate": "2024-02-29"}
        assert row["comparisonPolicy"] == "previousPeriod"

    def test_key_separator_keeps_distinct_tuples_apart(self):
        assert row_key(_row("a b", "c")) != row_key(_row("a", "b c"))

    def test_output_sorted_by_row_key(self):
        records = _join([_row("/z"), _row("/m")], [_row("/a")])
        assert [r.keys[0] for r in records] == ["/a", "/m", "/z"]

    def test_empty_sides(self):
        assert _join([], []) == []

    def test_dimension_count_mismatch_is_rejected(self):
        with pytest.raises(SearchConsoleAPIError, match="has 2 keys, expected 1"):
            _join([_row("/a", "q")], [], dimensions=("page",))
