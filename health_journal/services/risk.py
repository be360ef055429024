"""
Categorical blood pressure risk classification.

Sub-scores (current, historical, progression, lifestyle) are mapped through the
explicit ordinal table in the domain models and combined with configurable
weights into one overall label.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

import structlog

from health_journal.config import AnalysisConfig, RiskBands, RiskWeights
from health_journal.domain.models import (
    NextAssessment,
    PressureCategory,
    Reading,
    RiskAssessment,
    RiskLevel,
    TrendDirection,
)
from health_journal.services.numeric import mean, resolve_now, sub_days

logger = structlog.get_logger(__name__)

NORMAL_SYSTOLIC = 120


def classify_pressure(systolic: float, diastolic: float, bands: RiskBands) -> RiskLevel:
    """Band a (mean) systolic/diastolic pair."""
    if systolic >= bands.high_systolic or diastolic >= bands.high_diastolic:
        return RiskLevel.HIGH
    if systolic >= bands.moderate_systolic or diastolic >= bands.moderate_diastolic:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def pressure_category(systolic: float, diastolic: float, bands: RiskBands) -> PressureCategory:
    """Clinical category; stage 1 and stage 2 line up with the moderate and high bands."""
    level = classify_pressure(systolic, diastolic, bands)
    if level == RiskLevel.HIGH:
        return PressureCategory.STAGE_2
    if level == RiskLevel.MODERATE:
        return PressureCategory.STAGE_1
    if systolic < NORMAL_SYSTOLIC:
        return PressureCategory.NORMAL
    return PressureCategory.ELEVATED


def classify_readings(readings: Sequence[Reading], bands: RiskBands) -> RiskLevel:
    """Band the mean pressure of a batch; an empty batch is unknown."""
    if not readings:
        return RiskLevel.UNKNOWN
    return classify_pressure(
        mean(r.systolic for r in readings),
        mean(r.diastolic for r in readings),
        bands,
    )


def recent_readings(readings: Sequence[Reading], days: float, now: datetime) -> list[Reading]:
    """Readings taken within the last `days` days of `now`."""
    cutoff = sub_days(resolve_now(now), days)
    return [r for r in readings if r.timestamp >= cutoff]


def assess_progression(readings: Sequence[Reading], config: AnalysisConfig) -> TrendDirection:
    """Compare the mean systolic of the older half of the history with the newer half."""
    if len(readings) < config.min_progression_readings:
        return TrendDirection.INSUFFICIENT_DATA

    ordered = sorted(readings, key=lambda r: r.timestamp)
    split = len(ordered) // 2
    change = mean(r.systolic for r in ordered[split:]) - mean(r.systolic for r in ordered[:split])

    if abs(change) < 2:
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if change > 0 else TrendDirection.DECREASING


def lifestyle_risk(impact_score: int) -> RiskLevel:
    """Map the 0-8 lifestyle impact score onto a risk label."""
    if impact_score >= 6:
        return RiskLevel.HIGH
    if impact_score >= 3:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def _ordinal(label: RiskLevel | TrendDirection) -> int:
    # Progression directions are not risk labels and weigh like "low"
    if isinstance(label, RiskLevel):
        return label.ordinal
    return 1


def weighted_risk_score(
    current: RiskLevel,
    historical: RiskLevel,
    progression: TrendDirection,
    lifestyle: RiskLevel,
    weights: RiskWeights,
) -> float:
    return (
        _ordinal(current) * weights.current
        + _ordinal(historical) * weights.historical
        + _ordinal(progression) * weights.progression
        + _ordinal(lifestyle) * weights.lifestyle
    )


def overall_risk(score: float) -> RiskLevel:
    if score >= 3:
        return RiskLevel.HIGH
    if score >= 2.5:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def recommend_next_assessment(
    level: RiskLevel, config: AnalysisConfig, now: datetime
) -> NextAssessment:
    days = config.assessment_intervals.days_for(level.value)
    return NextAssessment(
        days=days,
        date=now + timedelta(days=days),
        reason=f"Based on {level.value} risk level",
    )


def assess_risk(
    readings: Sequence[Reading],
    config: AnalysisConfig,
    now: datetime,
    lifestyle_impact_score: int = 0,
) -> RiskAssessment:
    """Combine current, historical, progression and lifestyle risk into one assessment."""
    bands = config.risk_bands

    current = classify_readings(recent_readings(readings, config.recent_window_days, now), bands)
    historical = classify_readings(readings, bands)
    progression = assess_progression(readings, config)
    lifestyle = lifestyle_risk(lifestyle_impact_score)

    score = weighted_risk_score(current, historical, progression, lifestyle, config.risk_weights)
    overall = overall_risk(score)

    logger.debug(
        "risk_assessed",
        current=current.value,
        historical=historical.value,
        progression=progression.value,
        lifestyle=lifestyle.value,
        score=round(score, 2),
    )

    return RiskAssessment(
        current=current,
        historical=historical,
        progression=progression,
        lifestyle=lifestyle,
        overall=overall,
        risk_score=round(score, 2),
        next_assessment=recommend_next_assessment(overall, config, now),
    )
