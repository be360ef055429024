"""
Ordinary least squares trend estimation over journal readings.

The estimator treats the position in the sequence as X, so it answers
"how does the value move from one reading to the next", not per calendar day.
"""

from collections.abc import Sequence

import structlog

from health_journal.config import AnalysisConfig
from health_journal.domain.models import (
    AnalysisStatus,
    ConfidenceLevel,
    Reading,
    TrendAnalysis,
    TrendDirection,
    TrendResult,
    TrendStrength,
    Volatility,
)
from health_journal.services.numeric import mean, standard_deviation

logger = structlog.get_logger(__name__)


def regression_confidence(r_squared: float, n: int) -> ConfidenceLevel:
    """Heuristic confidence: R² scaled by how close n is to 20 points."""
    confidence = min(r_squared * (n / 20), 1.0)
    if confidence > 0.8:
        return ConfidenceLevel.HIGH
    if confidence > 0.6:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def fit_trend(values: Sequence[float], stable_slope: float = 0.5) -> TrendResult:
    """
    Fit y = slope * i + intercept over the index of each value.

    Requires at least two values; callers enforce their own minimum counts.
    R² is reported as 0 when the values have no variance at all.
    """
    n = len(values)
    xs = range(n)

    sum_x = float(sum(xs))
    sum_y = float(sum(values))
    sum_xy = float(sum(x * y for x, y in zip(xs, values)))
    sum_xx = float(sum(x * x for x in xs))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in zip(xs, values))
    ss_tot = sum((y - y_mean) ** 2 for y in values)
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0
    # Float noise can push a perfect or flat fit a hair outside [0, 1]
    r_squared = min(max(r_squared, 0.0), 1.0)

    direction = TrendDirection.STABLE
    if abs(slope) > stable_slope:
        direction = TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING

    return TrendResult(
        direction=direction,
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        confidence=regression_confidence(r_squared, n),
        predicted_value=slope * (n - 1) + intercept,
        change_rate=slope * 30,
    )


def calculate_volatility(readings: Sequence[Reading]) -> Volatility:
    """Average of the systolic and diastolic population standard deviations."""
    if len(readings) < 3:
        return Volatility(level="unknown", score=0.0)

    systolic_sd = standard_deviation([r.systolic for r in readings])
    diastolic_sd = standard_deviation([r.diastolic for r in readings])
    score = (systolic_sd + diastolic_sd) / 2

    level = "low"
    if score > 15:
        level = "high"
    elif score > 10:
        level = "moderate"

    return Volatility(
        level=level,
        score=round(score, 2),
        systolic_std_dev=round(systolic_sd, 2),
        diastolic_std_dev=round(diastolic_sd, 2),
    )


def trend_strength(systolic: TrendResult, diastolic: TrendResult) -> TrendStrength:
    average_r_squared = mean([systolic.r_squared, diastolic.r_squared])
    if average_r_squared > 0.7:
        return "strong"
    if average_r_squared > 0.4:
        return "moderate"
    return "weak"


def trend_significance(reading_count: int) -> ConfidenceLevel:
    if reading_count < 5:
        return ConfidenceLevel.LOW
    if reading_count < 15:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def sort_chronologically(readings: Sequence[Reading]) -> list[Reading]:
    return sorted(readings, key=lambda r: r.timestamp)


def analyze_trends(readings: Sequence[Reading], config: AnalysisConfig) -> TrendAnalysis:
    """Fit systolic, diastolic and heart-rate trends over the chronological history."""
    if len(readings) < config.min_trend_readings:
        return TrendAnalysis(
            status=AnalysisStatus.INSUFFICIENT_DATA,
            message=(
                f"Need at least {config.min_trend_readings} readings for trend analysis"
            ),
        )

    ordered = sort_chronologically(readings)
    threshold = config.stable_slope_threshold

    systolic = fit_trend([r.systolic for r in ordered], threshold)
    diastolic = fit_trend([r.diastolic for r in ordered], threshold)
    heart_rate = fit_trend([r.heart_rate for r in ordered], threshold)

    logger.debug(
        "trends_fitted",
        readings=len(ordered),
        systolic_slope=round(systolic.slope, 4),
        diastolic_slope=round(diastolic.slope, 4),
    )

    return TrendAnalysis(
        status=AnalysisStatus.COMPLETE,
        systolic=systolic,
        diastolic=diastolic,
        heart_rate=heart_rate,
        volatility=calculate_volatility(ordered),
        trend_strength=trend_strength(systolic, diastolic),
        significance=trend_significance(len(readings)),
    )
