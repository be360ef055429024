"""
Descriptive statistics over a journal period, hour-of-day range filtering and
the quick trend summary.

Averages here are display values, rounded to whole mmHg / BPM.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from health_journal.config import AnalysisConfig
from health_journal.domain.models import (
    BloodPressureStats,
    CigarEntry,
    DrinkEntry,
    PressureCategory,
    Reading,
    RiskLevel,
    TimeRangeFilter,
    TimeRangeStats,
    TrendDirection,
    TrendSummary,
)
from health_journal.services.circadian import time_pattern_insights
from health_journal.services.lifestyle import lifestyle_pattern_insights
from health_journal.services.numeric import (
    local_time,
    mean,
    resolve_now,
    round_half_up,
    sub_months,
    sub_weeks,
)
from health_journal.services.risk import classify_readings, pressure_category
from health_journal.services.trend import fit_trend, sort_chronologically

Period = Literal["week", "month", "all"]


def readings_in_period(
    readings: Sequence[Reading], period: Period, now: datetime | None = None
) -> list[Reading]:
    now = resolve_now(now)
    if period == "week":
        cutoff = sub_weeks(now, 1)
    elif period == "month":
        cutoff = sub_months(now, 1)
    else:
        return list(readings)
    return [r for r in readings if r.timestamp >= cutoff]


def calculate_stats(
    readings: Sequence[Reading], period: Period = "all", now: datetime | None = None
) -> BloodPressureStats:
    """Rounded averages, extremes and count for the period; zeros when it is empty."""
    selected = readings_in_period(readings, period, now)
    if not selected:
        return BloodPressureStats(
            average_systolic=0,
            average_diastolic=0,
            average_heart_rate=0,
            min_systolic=0,
            max_systolic=0,
            min_diastolic=0,
            max_diastolic=0,
            total_readings=0,
            period=period,
        )

    systolic = [r.systolic for r in selected]
    diastolic = [r.diastolic for r in selected]

    return BloodPressureStats(
        average_systolic=round_half_up(mean(systolic)),
        average_diastolic=round_half_up(mean(diastolic)),
        average_heart_rate=round_half_up(mean(r.heart_rate for r in selected)),
        min_systolic=min(systolic),
        max_systolic=max(systolic),
        min_diastolic=min(diastolic),
        max_diastolic=max(diastolic),
        total_readings=len(selected),
        period=period,
    )


def in_time_range(reading: Reading, time_range: TimeRangeFilter, timezone: str = "UTC") -> bool:
    """Inclusive on both ends; a start after the end wraps around midnight."""
    moment = local_time(reading.timestamp, timezone)
    hour = moment.hour + moment.minute / 60
    start, end = time_range.start_hour, time_range.end_hour
    if start > end:
        return hour >= start or hour <= end
    return start <= hour <= end


def filter_readings_by_time_range(
    readings: Sequence[Reading], time_range: TimeRangeFilter, timezone: str = "UTC"
) -> list[Reading]:
    if not time_range.enabled:
        return list(readings)
    return [r for r in readings if in_time_range(r, time_range, timezone)]


def preset_time_ranges() -> list[TimeRangeFilter]:
    """Common hour ranges, disabled until selected."""
    presets = [
        (6, 10, "Morning (6 AM - 10 AM)"),
        (10, 14, "Late Morning (10 AM - 2 PM)"),
        (14, 18, "Afternoon (2 PM - 6 PM)"),
        (18, 22, "Evening (6 PM - 10 PM)"),
        (22, 6, "Night (10 PM - 6 AM)"),
        (0, 6, "Early Morning (12 AM - 6 AM)"),
        (6, 12, "Morning Hours (6 AM - 12 PM)"),
        (12, 18, "Afternoon Hours (12 PM - 6 PM)"),
        (18, 24, "Evening Hours (6 PM - 12 AM)"),
    ]
    return [
        TimeRangeFilter(enabled=False, start_hour=start, end_hour=end, label=label)
        for start, end, label in presets
    ]


def time_range_stats(
    readings: Sequence[Reading],
    time_range: TimeRangeFilter,
    period: Period = "all",
    timezone: str = "UTC",
    now: datetime | None = None,
) -> TimeRangeStats:
    """Averages of the readings inside the hour range, against the whole period."""
    in_period = readings_in_period(readings, period, now)
    selected = filter_readings_by_time_range(in_period, time_range, timezone)

    if not selected:
        return TimeRangeStats(time_range=time_range, total_in_period=len(in_period))

    return TimeRangeStats(
        time_range=time_range,
        average_systolic=round_half_up(mean(r.systolic for r in selected)),
        average_diastolic=round_half_up(mean(r.diastolic for r in selected)),
        average_heart_rate=round_half_up(mean(r.heart_rate for r in selected)),
        reading_count=len(selected),
        total_in_period=len(in_period),
    )


SUMMARY_WINDOW = 7
CONTINUE_MONITORING = "Continue monitoring your blood pressure regularly"

CATEGORY_INSIGHTS = {
    PressureCategory.NORMAL: "Your blood pressure is in the normal range - excellent!",
    PressureCategory.ELEVATED: "Your blood pressure is elevated but not in the high range",
    PressureCategory.STAGE_1: "Your blood pressure is in Stage 1 hypertension range",
    PressureCategory.STAGE_2: "Your blood pressure is in Stage 2 hypertension range",
}


def trend_summary_recommendations(
    summary: TrendSummary,
    readings: Sequence[Reading],
    cigar_entries: Sequence[CigarEntry],
    drink_entries: Sequence[DrinkEntry],
    config: AnalysisConfig,
) -> list[str]:
    recommendations = []

    if summary.risk_level == RiskLevel.HIGH:
        recommendations.append(
            "Consider consulting with a healthcare provider about your blood pressure"
        )
        recommendations.append("Monitor your blood pressure more frequently")

    if TrendDirection.INCREASING in (summary.systolic_trend, summary.diastolic_trend):
        recommendations.append(
            "Consider lifestyle changes like reducing sodium intake and increasing exercise"
        )

    if summary.heart_rate_trend == TrendDirection.INCREASING:
        recommendations.append(
            "Consider stress management techniques and regular cardiovascular exercise"
        )

    if summary.systolic_trend == summary.diastolic_trend == TrendDirection.STABLE:
        recommendations.append("Great job maintaining stable blood pressure!")

    recommendations.extend(
        lifestyle_pattern_insights(readings, cigar_entries, drink_entries, config)
    )

    return recommendations or [CONTINUE_MONITORING]


def trend_summary_insights(
    summary: TrendSummary, readings: Sequence[Reading], config: AnalysisConfig
) -> list[str]:
    insights = []

    if summary.category is not None:
        insights.append(CATEGORY_INSIGHTS[summary.category])

    if summary.systolic_trend == summary.diastolic_trend == TrendDirection.DECREASING:
        insights.append(
            "Both systolic and diastolic pressures are trending downward - positive progress!"
        )
    elif summary.systolic_trend == summary.diastolic_trend == TrendDirection.INCREASING:
        insights.append("Both pressures are trending upward - consider lifestyle modifications")

    if summary.heart_rate_trend == TrendDirection.DECREASING:
        insights.append(
            "Your heart rate is trending downward, which may indicate improved "
            "cardiovascular fitness"
        )
    elif summary.heart_rate_trend == TrendDirection.INCREASING:
        insights.append(
            "Your heart rate is trending upward - consider stress management and regular exercise"
        )

    insights.extend(time_pattern_insights(readings, config))
    return insights


def summarize_trends(
    readings: Sequence[Reading],
    cigar_entries: Sequence[CigarEntry] = (),
    drink_entries: Sequence[DrinkEntry] = (),
    config: AnalysisConfig | None = None,
) -> TrendSummary:
    """
    Whole-history trend directions plus a risk level and category over the last 7 readings.

    Lighter than the full analysis: no lifestyle statistics beyond the pattern
    insights, and fewer than two readings give a fixed encouragement instead.
    """
    config = config or AnalysisConfig()
    if len(readings) < 2:
        return TrendSummary(
            recommendations=[CONTINUE_MONITORING],
            insights=["Not enough data for trend analysis. Keep logging readings!"],
        )

    ordered = sort_chronologically(readings)
    threshold = config.stable_slope_threshold
    recent = ordered[-SUMMARY_WINDOW:]
    bands = config.risk_bands

    summary = TrendSummary(
        systolic_trend=fit_trend([r.systolic for r in ordered], threshold).direction,
        diastolic_trend=fit_trend([r.diastolic for r in ordered], threshold).direction,
        heart_rate_trend=fit_trend([r.heart_rate for r in ordered], threshold).direction,
        risk_level=classify_readings(recent, bands),
        category=pressure_category(
            mean(r.systolic for r in recent), mean(r.diastolic for r in recent), bands
        ),
        recommendations=[],
        insights=[],
    )
    return summary.model_copy(
        update={
            "recommendations": trend_summary_recommendations(
                summary, ordered, cigar_entries, drink_entries, config
            ),
            "insights": trend_summary_insights(summary, ordered, config),
        }
    )
