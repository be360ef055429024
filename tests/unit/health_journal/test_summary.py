"""Tests for period statistics, hour-of-day range filtering and the quick trend summary."""

from __future__ import annotations

from datetime import datetime

from journal_factories import cigar, daily_readings, make_reading

from health_journal.domain.models import (
    PressureCategory,
    Reading,
    RiskLevel,
    TimeRangeFilter,
    TrendDirection,
)
from health_journal.services.summary import (
    CONTINUE_MONITORING,
    calculate_stats,
    filter_readings_by_time_range,
    preset_time_ranges,
    summarize_trends,
    time_range_stats,
)


def test_empty_period_is_all_zeros(now: datetime) -> None:
    stats = calculate_stats([], "week", now)

    assert stats.total_readings == 0
    assert stats.average_systolic == 0
    assert stats.max_diastolic == 0
    assert stats.period == "week"


def test_averages_round_half_up(now: datetime) -> None:
    readings = [
        make_reading(120, 80, heart_rate=70),
        make_reading(121, 81, heart_rate=71, days_ago=1),
    ]

    stats = calculate_stats(readings, now=now)

    assert stats.average_systolic == 121
    assert stats.average_diastolic == 81
    assert stats.average_heart_rate == 71
    assert (stats.min_systolic, stats.max_systolic) == (120, 121)
    assert stats.total_readings == 2


def test_period_filters(now: datetime) -> None:
    readings = [make_reading(120, 80, days_ago=d) for d in (0, 7, 8, 28, 29, 100)]

    assert calculate_stats(readings, "week", now).total_readings == 2
    # One calendar month back from March 15 is February 15, 28 days earlier
    assert calculate_stats(readings, "month", now).total_readings == 4
    assert calculate_stats(readings, "all", now).total_readings == 6


def test_naive_now_is_read_as_utc(now: datetime) -> None:
    readings = [make_reading(120, 80, days_ago=d) for d in (0, 7, 8)]

    assert calculate_stats(readings, "week", now.replace(tzinfo=None)).total_readings == 2


def _by_hour() -> dict[int, Reading]:
    return {hour: make_reading(110 + hour, 80, days_ago=1, hour=hour) for hour in (2, 7, 10, 23)}


def test_range_is_inclusive_at_both_ends() -> None:
    readings = _by_hour()
    morning = TimeRangeFilter(start_hour=6, end_hour=10)

    assert filter_readings_by_time_range(list(readings.values()), morning) == [
        readings[7],
        readings[10],
    ]


def test_range_wraps_midnight() -> None:
    readings = _by_hour()
    night = TimeRangeFilter(start_hour=22, end_hour=6)

    assert filter_readings_by_time_range(list(readings.values()), night) == [
        readings[2],
        readings[23],
    ]


def test_disabled_range_keeps_everything() -> None:
    readings = list(_by_hour().values())
    disabled = TimeRangeFilter(enabled=False, start_hour=6, end_hour=10)

    assert filter_readings_by_time_range(readings, disabled) == readings


def test_presets_are_disabled() -> None:
    presets = preset_time_ranges()

    assert len(presets) == 9
    assert not any(p.enabled for p in presets)
    assert presets[4].label == "Night (10 PM - 6 AM)"
    assert (presets[4].start_hour, presets[4].end_hour) == (22, 6)


def test_time_range_stats(now: datetime) -> None:
    readings = list(_by_hour().values())
    morning = TimeRangeFilter(start_hour=6, end_hour=10, label="Morning")

    stats = time_range_stats(readings, morning, now=now)

    # systolic 117 and 120
    assert stats.average_systolic == 119
    assert stats.reading_count == 2
    assert stats.total_in_period == 4
    assert stats.time_range == morning


def test_time_range_stats_without_matches(now: datetime) -> None:
    readings = list(_by_hour().values())
    afternoon = TimeRangeFilter(start_hour=13, end_hour=17)

    stats = time_range_stats(readings, afternoon, now=now)

    assert stats.reading_count == 0
    assert stats.average_systolic == 0
    assert stats.total_in_period == 4


class TestTrendSummary:
    def test_needs_two_readings(self) -> None:
        summary = summarize_trends([make_reading(150, 95)])

        assert summary.risk_level == RiskLevel.LOW
        assert summary.category is None
        assert summary.recommendations == [CONTINUE_MONITORING]
        assert summary.insights == ["Not enough data for trend analysis. Keep logging readings!"]

    def test_stable_normal_pressure(self) -> None:
        summary = summarize_trends(daily_readings([115] * 5, [75] * 5))

        assert summary.systolic_trend == TrendDirection.STABLE
        assert summary.heart_rate_trend == TrendDirection.STABLE
        assert summary.category == PressureCategory.NORMAL
        assert summary.recommendations == ["Great job maintaining stable blood pressure!"]
        assert summary.insights == ["Your blood pressure is in the normal range - excellent!"]

    def test_rising_pressure_and_heart_rate(self) -> None:
        readings = [
            make_reading(130 + 3 * i, 85 + 2 * i, heart_rate=70 + 2 * i, days_ago=7 - i)
            for i in range(8)
        ]

        summary = summarize_trends(readings)

        # last 7 readings average 142/93
        assert summary.risk_level == RiskLevel.HIGH
        assert summary.category == PressureCategory.STAGE_2
        assert summary.recommendations == [
            "Consider consulting with a healthcare provider about your blood pressure",
            "Monitor your blood pressure more frequently",
            "Consider lifestyle changes like reducing sodium intake and increasing exercise",
            "Consider stress management techniques and regular cardiovascular exercise",
        ]
        assert summary.insights == [
            "Your blood pressure is in Stage 2 hypertension range",
            "Both pressures are trending upward - consider lifestyle modifications",
            "Your heart rate is trending upward - consider stress management and regular exercise",
        ]

    def test_falling_pressure_and_heart_rate(self) -> None:
        readings = [
            make_reading(135 - 2 * i, 82 - i, heart_rate=80 - i, days_ago=7 - i)
            for i in range(8)
        ]

        summary = summarize_trends(readings)

        # last 7 readings average 127/78
        assert summary.risk_level == RiskLevel.LOW
        assert summary.category == PressureCategory.ELEVATED
        assert summary.recommendations == [CONTINUE_MONITORING]
        assert summary.insights == [
            "Your blood pressure is elevated but not in the high range",
            "Both systolic and diastolic pressures are trending downward - positive progress!",
            "Your heart rate is trending downward, which may indicate improved "
            "cardiovascular fitness",
        ]

    def test_lifestyle_patterns_become_recommendations(self) -> None:
        readings = daily_readings([150] * 3, [95] * 3)
        cigars = [cigar(d, 3) for d in range(3)]

        summary = summarize_trends(readings, cigar_entries=cigars)

        assert summary.recommendations[:2] == [
            "Consider consulting with a healthcare provider about your blood pressure",
            "Monitor your blood pressure more frequently",
        ]
        assert "Great job maintaining stable blood pressure!" in summary.recommendations
        assert any(
            r.startswith("High cigar consumption (3.0 cigars/day)")
            for r in summary.recommendations
        )

    def test_time_of_day_patterns_become_insights(self) -> None:
        readings = [make_reading(110, 70, days_ago=d, hour=8) for d in (1, 2)]
        readings += [make_reading(135, 85, days_ago=d, hour=20) for d in (1, 2)]

        summary = summarize_trends(readings)

        assert any(
            i.startswith("Your systolic pressure varies significantly by time of day")
            for i in summary.insights
        )
