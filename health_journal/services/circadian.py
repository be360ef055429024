"""
Time-of-day pattern analysis.

Readings are bucketed into four fixed windows by their hour in the journal's
local zone. Only windows with at least two readings may be named optimal or
concerning, and the concern window is only reported when it is actually
elevated.
"""

from collections.abc import Sequence

import structlog

from health_journal.config import AnalysisConfig
from health_journal.domain.models import (
    CIRCADIAN_HOURS,
    CircadianAnalysis,
    CircadianWindow,
    CircadianWindowStats,
    Reading,
)
from health_journal.services.numeric import local_time, mean, round_half_up
from health_journal.services.risk import classify_readings

logger = structlog.get_logger(__name__)


def window_for_hour(hour: int) -> CircadianWindow:
    for window, (start, end) in CIRCADIAN_HOURS.items():
        if start <= hour < end:
            return window
    raise ValueError(f"Hour out of range: {hour}")


def group_by_window(
    readings: Sequence[Reading], timezone: str
) -> dict[CircadianWindow, list[Reading]]:
    groups: dict[CircadianWindow, list[Reading]] = {window: [] for window in CircadianWindow}
    for reading in readings:
        groups[window_for_hour(local_time(reading.timestamp, timezone).hour)].append(reading)
    return groups


def _pressure_sum(stats: CircadianWindowStats) -> float:
    return stats.average_systolic + stats.average_diastolic


def find_optimal_time(
    windows: dict[CircadianWindow, CircadianWindowStats],
) -> CircadianWindow | None:
    candidates = [w for w, stats in windows.items() if stats.reading_count >= 2]
    if not candidates:
        return None
    return min(candidates, key=lambda w: _pressure_sum(windows[w]))


def find_concern_time(
    windows: dict[CircadianWindow, CircadianWindowStats], config: AnalysisConfig
) -> CircadianWindow | None:
    candidates = [w for w, stats in windows.items() if stats.reading_count >= 2]
    if not candidates:
        return None

    worst = max(candidates, key=lambda w: _pressure_sum(windows[w]))
    stats = windows[worst]
    bands = config.risk_bands
    if (
        stats.average_systolic >= bands.moderate_systolic
        or stats.average_diastolic >= bands.moderate_diastolic
    ):
        return worst
    return None


def circadian_recommendations(
    windows: dict[CircadianWindow, CircadianWindowStats], config: AnalysisConfig
) -> list[str]:
    bands = config.risk_bands
    return [
        f"{window.value} readings are consistently high - consider monitoring more closely "
        "during this time"
        for window, stats in windows.items()
        if stats.reading_count >= 2
        and (
            stats.average_systolic >= bands.high_systolic
            or stats.average_diastolic >= bands.high_diastolic
        )
    ]


def time_pattern_insights(
    readings: Sequence[Reading], config: AnalysisConfig
) -> list[str]:
    """Describe spreads between windows and windows that are consistently high or optimal."""
    insights: list[str] = []
    if len(readings) < 4:
        return insights

    averages = [
        (
            window.value,
            round_half_up(mean(r.systolic for r in group)),
            round_half_up(mean(r.diastolic for r in group)),
        )
        for window, group in group_by_window(readings, config.timezone).items()
        if group
    ]
    if len(averages) < 2:
        return insights

    highest_sys = max(averages, key=lambda a: a[1])
    lowest_sys = min(averages, key=lambda a: a[1])
    highest_dia = max(averages, key=lambda a: a[2])
    lowest_dia = min(averages, key=lambda a: a[2])

    systolic_spread = highest_sys[1] - lowest_sys[1]
    if systolic_spread >= 10:
        insights.append(
            f"Your systolic pressure varies significantly by time of day: highest in "
            f"{highest_sys[0]} ({highest_sys[1]} mmHg) and lowest in {lowest_sys[0]} "
            f"({lowest_sys[1]} mmHg). This {systolic_spread}-point difference suggests "
            "circadian patterns."
        )

    if highest_dia[2] - lowest_dia[2] >= 8:
        insights.append(
            f"Your diastolic pressure shows notable time-based variation: highest in "
            f"{highest_dia[0]} ({highest_dia[2]} mmHg) and lowest in {lowest_dia[0]} "
            f"({lowest_dia[2]} mmHg)."
        )

    bands = config.risk_bands
    high = [
        name
        for name, systolic, diastolic in averages
        if systolic >= bands.high_systolic or diastolic >= bands.high_diastolic
    ]
    if high:
        insights.append(
            f"Your blood pressure readings are consistently high during {', '.join(high)}. "
            "Consider monitoring these times more closely and discussing with your "
            "healthcare provider."
        )

    optimal = [name for name, systolic, diastolic in averages if systolic < 120 and diastolic < 80]
    if optimal:
        insights.append(
            f"Your blood pressure is consistently optimal during {', '.join(optimal)}. This "
            "suggests these may be your best times for important activities or medications."
        )

    return insights


def analyze_circadian(readings: Sequence[Reading], config: AnalysisConfig) -> CircadianAnalysis:
    """Per-window averages plus the optimal and concern windows."""
    windows = {
        window: CircadianWindowStats(
            average_systolic=round(mean(r.systolic for r in group), 2),
            average_diastolic=round(mean(r.diastolic for r in group), 2),
            average_heart_rate=round(mean(r.heart_rate for r in group), 2),
            reading_count=len(group),
            risk_level=classify_readings(group, config.risk_bands),
        )
        for window, group in group_by_window(readings, config.timezone).items()
        if group
    }

    optimal = find_optimal_time(windows)
    concern = find_concern_time(windows, config)
    logger.debug(
        "circadian_windows_grouped",
        populated=len(windows),
        optimal=optimal.value if optimal else None,
        concern=concern.value if concern else None,
    )

    return CircadianAnalysis(
        windows=windows,
        optimal_time=optimal,
        concern_time=concern,
        recommendations=circadian_recommendations(windows, config),
        insights=time_pattern_insights(readings, config),
    )
