"""
Tests for the shared numeric and calendar helpers.

Covers:
- safe_ratio / mean / standard_deviation on empty and zero inputs
- Pearson correlation, including the no-variance case
- Calendar arithmetic (month clamping, day differences)
- Local-zone conversion
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfoNotFoundError

import pytest
from hypothesis import given
from hypothesis import strategies as st

from health_journal.services.numeric import (
    difference_in_days,
    local_date,
    mean,
    pearson_correlation,
    resolve_now,
    resolve_timezone,
    round_half_up,
    safe_ratio,
    standard_deviation,
    sub_months,
    sub_weeks,
)


def test_safe_ratio_returns_default_on_zero_denominator() -> None:
    assert safe_ratio(5, 0) == 0.0
    assert safe_ratio(5, 0, default=-1.0) == -1.0
    assert safe_ratio(6, 3) == 2.0


def test_mean_and_standard_deviation_of_empty_batch_are_zero() -> None:
    assert mean([]) == 0.0
    assert standard_deviation([]) == 0.0


def test_standard_deviation_is_population_based() -> None:
    assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


def test_pearson_correlation_perfect_and_inverse() -> None:
    assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert pearson_correlation([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0)


def test_pearson_correlation_without_variance_is_zero() -> None:
    assert pearson_correlation([5, 5, 5], [1, 2, 3]) == 0.0
    assert pearson_correlation([1], [2]) == 0.0


@given(
    xs=st.lists(st.integers(min_value=0, max_value=300), min_size=0, max_size=30),
    ys=st.lists(st.integers(min_value=0, max_value=300), min_size=0, max_size=30),
)
def test_pearson_correlation_is_bounded(xs: list[int], ys: list[int]) -> None:
    assert -1.0 <= pearson_correlation(xs, ys) <= 1.0


def test_sub_months_clamps_to_month_end() -> None:
    moment = datetime(2026, 3, 31, 9, 30, tzinfo=UTC)
    assert sub_months(moment, 1) == datetime(2026, 2, 28, 9, 30, tzinfo=UTC)


def test_sub_months_crosses_year_boundary() -> None:
    moment = datetime(2026, 1, 15, tzinfo=UTC)
    assert sub_months(moment, 1) == datetime(2025, 12, 15, tzinfo=UTC)


def test_sub_weeks() -> None:
    moment = datetime(2026, 3, 15, tzinfo=UTC)
    assert sub_weeks(moment, 1) == datetime(2026, 3, 8, tzinfo=UTC)


def test_difference_in_days_rounds_partial_days_up() -> None:
    start = datetime(2026, 3, 1, tzinfo=UTC)
    assert difference_in_days(start + timedelta(days=1, hours=12), start) == 2
    assert difference_in_days(start, start + timedelta(days=3)) == 3
    assert difference_in_days(start, start) == 0


def test_round_half_up() -> None:
    assert round_half_up(120.5) == 121
    assert round_half_up(127.5) == 128
    assert round_half_up(127.49) == 127


def test_resolve_now_reads_naive_moments_as_utc() -> None:
    moment = datetime(2026, 3, 15, 12, 0)

    assert resolve_now(moment) == datetime(2026, 3, 15, 12, 0, tzinfo=UTC)
    aware = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)
    assert resolve_now(aware) is aware
    assert resolve_now().tzinfo is UTC

def test_local_date_uses_configured_zone() -> None:
    try:
        resolve_timezone("America/New_York")
    except ZoneInfoNotFoundError:
        pytest.skip("tz database not available")

    moment = datetime(2026, 3, 15, 2, 0, tzinfo=UTC)
    assert local_date(moment, "UTC").day == 15
    assert local_date(moment, "America/New_York").day == 14
