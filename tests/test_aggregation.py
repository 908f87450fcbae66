from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from store_ratings.services.aggregation import (
    compute_monthly_trend,
    compute_summary,
    round_half_up,
    subtract_months,
)

UTC = timezone.utc


def _rating(value, created_at=None):
    return SimpleNamespace(value=value, created_at=created_at or datetime(2025, 1, 1, tzinfo=UTC))


def test_summary_average_and_distribution():
    summary = compute_summary([_rating(v) for v in (5, 5, 4, 3, 3)])

    assert summary.count == 5
    assert summary.average == 4.0
    assert summary.distribution == {1: 0, 2: 0, 3: 2, 4: 1, 5: 2}


def test_summary_of_no_ratings():
    summary = compute_summary([])

    assert summary.count == 0
    assert summary.average == 0.0
    assert summary.distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}


def test_summary_rounds_half_up():
    assert compute_summary([_rating(v) for v in (4, 4, 4, 5)]).average == 4.3
    assert round_half_up(9, 2) == 4.5
    assert round_half_up(1, 4) == 0.3
    assert round_half_up(0, 0) == 0.0


@pytest.mark.parametrize("values", [(1,), (2, 2, 5), (1, 2, 3, 4, 5, 5, 5)])
def test_distribution_sums_to_count(values):
    summary = compute_summary([_rating(v) for v in values])

    assert sum(summary.distribution.values()) == summary.count == len(values)
    assert set(summary.distribution) == {1, 2, 3, 4, 5}


def test_summary_rejects_out_of_range_value():
    with pytest.raises(ValueError):
        compute_summary([_rating(3), _rating(6)])


def test_subtract_months_clamps_day():
    assert subtract_months(datetime(2025, 3, 31, tzinfo=UTC), 1) == datetime(2025, 2, 28, tzinfo=UTC)
    assert subtract_months(datetime(2025, 2, 15, tzinfo=UTC), 6) == datetime(2024, 8, 15, tzinfo=UTC)


def test_monthly_trend_orders_across_year_boundary():
    now = datetime(2025, 2, 15, 12, 0, tzinfo=UTC)
    ratings = [
        _rating(2, datetime(2025, 2, 1, tzinfo=UTC)),
        _rating(4, datetime(2024, 12, 10, tzinfo=UTC)),
        _rating(3, datetime(2025, 1, 5, tzinfo=UTC)),
        _rating(5, datetime(2024, 12, 20, tzinfo=UTC)),
    ]

    trend = compute_monthly_trend(ratings, 6, now=now)

    assert [(p.year, p.month_index, p.month) for p in trend] == [
        (2024, 12, "December"),
        (2025, 1, "January"),
        (2025, 2, "February"),
    ]
    assert [(p.average, p.count) for p in trend] == [(4.5, 2), (3.0, 1), (2.0, 1)]


def test_monthly_trend_excludes_ratings_outside_window():
    now = datetime(2025, 2, 15, tzinfo=UTC)
    ratings = [
        _rating(1, datetime(2024, 8, 14, tzinfo=UTC)),
        _rating(5, datetime(2024, 8, 15, tzinfo=UTC)),
        _rating(3, datetime(2025, 3, 1, tzinfo=UTC)),
    ]

    trend = compute_monthly_trend(ratings, 6, now=now)

    assert len(trend) == 1
    assert (trend[0].month, trend[0].year, trend[0].average) == ("August", 2024, 5.0)


def test_monthly_trend_treats_naive_datetimes_as_utc():
    now = datetime(2025, 2, 15)
    trend = compute_monthly_trend([_rating(4, datetime(2025, 2, 1))], 1, now=now)

    assert [(p.month_index, p.count) for p in trend] == [(2, 1)]


def test_monthly_trend_of_no_ratings_is_empty():
    assert compute_monthly_trend([], 6) == []
