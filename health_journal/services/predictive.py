"""
Short-term prediction and 30-step linear projection.

Both are extrapolations of the OLS trend in `trend.py`; the confidence values
are fixed heuristics, not probabilities.
"""

from collections.abc import Sequence
from datetime import datetime

import structlog

from health_journal.config import AnalysisConfig
from health_journal.domain.models import (
    AnalysisStatus,
    BloodPressureAverages,
    ConfidenceLevel,
    LongTermProjection,
    PredictiveInsights,
    Reading,
    ShortTermPrediction,
    TrendDirection,
)
from health_journal.services.numeric import difference_in_days, mean
from health_journal.services.risk import classify_readings, recent_readings
from health_journal.services.trend import calculate_volatility, fit_trend, sort_chronologically

logger = structlog.get_logger(__name__)

SHORT_TERM_WINDOW = 7
SHORT_TERM_MIN_READINGS = 3
PROJECTION_STEPS = 30


def predict_short_term(readings: Sequence[Reading], config: AnalysisConfig) -> ShortTermPrediction:
    """Fitted values over the most recent readings of a chronological history."""
    recent = list(readings)[-SHORT_TERM_WINDOW:]
    if len(recent) < SHORT_TERM_MIN_READINGS:
        return ShortTermPrediction(status=AnalysisStatus.INSUFFICIENT_DATA)

    threshold = config.stable_slope_threshold
    systolic = fit_trend([r.systolic for r in recent], threshold)
    diastolic = fit_trend([r.diastolic for r in recent], threshold)

    return ShortTermPrediction(
        status=AnalysisStatus.PREDICTED,
        systolic=systolic.predicted_value,
        diastolic=diastolic.predicted_value,
        systolic_trend=systolic.direction,
        diastolic_trend=diastolic.direction,
        confidence=min(0.8 if systolic.confidence == ConfidenceLevel.HIGH else 0.6, 1.0),
    )


def project_long_term(readings: Sequence[Reading], config: AnalysisConfig) -> LongTermProjection:
    """Extrapolate the full-history fit 30 steps past the last reading."""
    if len(readings) < config.min_long_term_readings:
        return LongTermProjection(status=AnalysisStatus.INSUFFICIENT_DATA)

    threshold = config.stable_slope_threshold
    systolic = fit_trend([r.systolic for r in readings], threshold)
    diastolic = fit_trend([r.diastolic for r in readings], threshold)

    return LongTermProjection(
        status=AnalysisStatus.PROJECTED,
        projected_30_day=BloodPressureAverages(
            systolic=round(systolic.slope * PROJECTION_STEPS + systolic.predicted_value, 2),
            diastolic=round(diastolic.slope * PROJECTION_STEPS + diastolic.predicted_value, 2),
        ),
        systolic_trend=systolic.direction,
        diastolic_trend=diastolic.direction,
        confidence=min(mean([systolic.r_squared, diastolic.r_squared]), 1.0),
    )


def prediction_confidence(readings: Sequence[Reading]) -> float:
    """Mean of data volume, time span and consistency factors, each within [0, 1]."""
    ordered = sort_chronologically(readings)
    span = 0
    if len(ordered) > 1:
        span = difference_in_days(ordered[-1].timestamp, ordered[0].timestamp)

    volume = min(len(readings) / 50, 1.0)
    time_span = min(span / 180, 1.0)
    consistency = max(1 - calculate_volatility(readings).score / 20, 0.0)

    return round((volume + time_span + consistency) / 3, 2)


def identify_risk_factors(
    readings: Sequence[Reading], config: AnalysisConfig, now: datetime
) -> list[str]:
    risk_factors = []

    recent = recent_readings(readings, config.recent_window_days, now)
    bands = config.risk_bands
    if recent and (
        mean(r.systolic for r in recent) >= bands.high_systolic
        or mean(r.diastolic for r in recent) >= bands.high_diastolic
    ):
        risk_factors.append("Current high blood pressure readings")

    if calculate_volatility(readings).level == "high":
        risk_factors.append("High blood pressure variability")

    return risk_factors


def suggest_interventions(
    short_term: ShortTermPrediction, long_term: LongTermProjection, config: AnalysisConfig
) -> list[str]:
    interventions = []

    if TrendDirection.INCREASING in (short_term.systolic_trend, short_term.diastolic_trend):
        interventions.append("Immediate lifestyle modifications recommended")

    projected = long_term.projected_30_day
    bands = config.risk_bands
    if projected is not None and (
        projected.systolic >= bands.high_systolic or projected.diastolic >= bands.high_diastolic
    ):
        interventions.append("Medical consultation may be needed within 30 days")

    return interventions


def generate_predictive_insights(
    readings: Sequence[Reading], config: AnalysisConfig, now: datetime
) -> PredictiveInsights:
    if len(readings) < config.min_predictive_readings:
        return PredictiveInsights(
            status=AnalysisStatus.INSUFFICIENT_DATA,
            message=(
                f"Need at least {config.min_predictive_readings} readings for predictive analysis"
            ),
        )

    ordered = sort_chronologically(readings)
    short_term = predict_short_term(ordered, config)
    long_term = project_long_term(ordered, config)

    logger.debug(
        "predictions_generated",
        short_term=short_term.status.value,
        long_term=long_term.status.value,
        current_risk=classify_readings(ordered[-SHORT_TERM_WINDOW:], config.risk_bands).value,
    )

    return PredictiveInsights(
        status=AnalysisStatus.COMPLETE,
        short_term=short_term,
        long_term=long_term,
        confidence=prediction_confidence(ordered),
        risk_factors=identify_risk_factors(ordered, config, now),
        interventions=suggest_interventions(short_term, long_term, config),
    )
