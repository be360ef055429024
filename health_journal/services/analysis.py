"""
Advanced journal analysis: composes every analyzer into one report.

Key architectural decisions:
- Pure computation: the report depends only on the entry batches, the config and `now`
- Sentinels over exceptions: sub-analyses that lack data report it in their own field
- Rule-based recommendations run last, over the assembled report
- No network access: text generation lives in a separate enhancement layer
"""

from collections.abc import Sequence
from datetime import UTC, datetime

import structlog

from health_journal.config import AnalysisConfig
from health_journal.domain.models import (
    AnalysisReport,
    CardioEntry,
    CigarEntry,
    DataQuality,
    DataQualityLevel,
    DrinkEntry,
    EventEntry,
    InsufficientDataReport,
    LifestyleImpact,
    Reading,
    Recommendation,
    RiskLevel,
    TrendAnalysis,
    TrendDirection,
    WeightEntry,
)
from health_journal.services.alerts import check_medical_alerts
from health_journal.services.circadian import analyze_circadian
from health_journal.services.lifestyle import analyze_lifestyle
from health_journal.services.numeric import difference_in_days, resolve_now, safe_ratio
from health_journal.services.predictive import generate_predictive_insights
from health_journal.services.risk import assess_risk
from health_journal.services.trend import analyze_trends, sort_chronologically

logger = structlog.get_logger(__name__)

INSUFFICIENT_DATA_MESSAGE = "Need at least 2 blood pressure readings to generate AI analysis"
INSUFFICIENT_DATA_RECOMMENDATIONS = [
    "Continue logging daily blood pressure readings",
    "Aim for consistent timing of measurements",
    "Include lifestyle factors like smoking and alcohol consumption",
]


def time_span_days(readings: Sequence[Reading]) -> int:
    """Whole days between the first and last reading; 0 below two readings."""
    if len(readings) < 2:
        return 0
    ordered = sort_chronologically(readings)
    return difference_in_days(ordered[-1].timestamp, ordered[0].timestamp)


def data_quality_recommendations(frequency: float, total_readings: int) -> list[str]:
    recommendations = []
    if frequency < 0.5:
        recommendations.append("Increase monitoring frequency to at least every other day")
    if total_readings < 10:
        recommendations.append("Continue logging readings to improve analysis accuracy")
    return recommendations


def assess_data_quality(readings: Sequence[Reading]) -> DataQuality:
    total = len(readings)
    span = time_span_days(readings)
    frequency = total / max(span, 1)

    quality: DataQualityLevel = "needs_improvement"
    if frequency >= 1:
        quality = "excellent"
    elif frequency >= 0.5:
        quality = "good"

    return DataQuality(
        total_readings=total,
        time_span_days=span,
        average_frequency=round(frequency, 3),
        quality=quality,
        recommendations=data_quality_recommendations(frequency, total),
    )


def confidence_score(readings: Sequence[Reading]) -> float:
    """
    Mean of three capped factors: reading volume, time span and days per reading.

    The third factor is span / count (average days between readings), kept as
    historically computed even though it reads like an inverted frequency.
    """
    span = time_span_days(readings)
    volume = min(len(readings) / 30, 1.0)
    time_span = min(span / 90, 1.0)
    spacing = min(safe_ratio(span, len(readings)), 1.0)
    return round((volume + time_span + spacing) / 3, 2)


def _trending_upward(trend: TrendAnalysis) -> bool:
    return any(
        result is not None and result.direction == TrendDirection.INCREASING
        for result in (trend.systolic, trend.diastolic)
    )


def personalized_recommendations(
    risk_overall: RiskLevel,
    trend: TrendAnalysis,
    smoking_impact: LifestyleImpact,
    data_quality: DataQuality,
) -> list[Recommendation]:
    """Rules checked in priority order; the generic one only applies when none fired."""
    recommendations = []

    if risk_overall == RiskLevel.HIGH:
        recommendations.append(
            Recommendation(
                category="urgent",
                priority="high",
                message=(
                    "Your blood pressure readings indicate high cardiovascular risk. Please "
                    "consult with a healthcare provider immediately for proper evaluation "
                    "and treatment."
                ),
                action="schedule_appointment",
            )
        )

    if _trending_upward(trend):
        recommendations.append(
            Recommendation(
                category="lifestyle",
                priority="high",
                message=(
                    "Your blood pressure is trending upward. Consider immediate lifestyle "
                    "modifications including diet, exercise, and stress management."
                ),
                action="lifestyle_changes",
            )
        )

    if smoking_impact == LifestyleImpact.SIGNIFICANT:
        recommendations.append(
            Recommendation(
                category="smoking",
                priority="critical",
                message=(
                    "Smoking is significantly impacting your blood pressure. Quitting smoking "
                    "is the most important step for your cardiovascular health."
                ),
                action="quit_smoking",
            )
        )

    if data_quality.quality == "needs_improvement":
        recommendations.append(
            Recommendation(
                category="monitoring",
                priority="medium",
                message=(
                    "More frequent monitoring would improve the accuracy of your analysis. "
                    "Aim for daily readings."
                ),
                action="increase_frequency",
            )
        )

    if not recommendations:
        recommendations.append(
            Recommendation(
                category="general",
                priority="low",
                message=(
                    "Continue monitoring your blood pressure regularly and maintain a "
                    "healthy lifestyle."
                ),
                action="continue_monitoring",
            )
        )

    return recommendations


def insufficient_data_report(now: datetime) -> InsufficientDataReport:
    return InsufficientDataReport(
        generated_at=now,
        message=INSUFFICIENT_DATA_MESSAGE,
        recommendations=list(INSUFFICIENT_DATA_RECOMMENDATIONS),
    )


class AnalysisService:
    """
    Runs the full analysis over one snapshot of a journal.

    Holds only configuration; every call is independent, so one instance can
    serve any number of journals.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self.config = config or AnalysisConfig()
        self.logger = logger.bind(component="analysis_service")

    def analyze(
        self,
        readings: Sequence[Reading],
        cigar_entries: Sequence[CigarEntry] = (),
        drink_entries: Sequence[DrinkEntry] = (),
        weight_entries: Sequence[WeightEntry] = (),
        cardio_entries: Sequence[CardioEntry] = (),
        events: Sequence[EventEntry] = (),
        now: datetime | None = None,
    ) -> AnalysisReport | InsufficientDataReport:
        """
        Produce the complete report, or the fixed insufficient-data response.

        `events` are accepted for completeness of the journal snapshot; no
        analyzer reads them yet.
        """
        now = resolve_now(now)
        started = datetime.now(UTC)

        if not readings:
            self.logger.info("advanced_analysis_skipped", reason="no_readings")
            return insufficient_data_report(now)

        self.logger.info(
            "advanced_analysis_started",
            readings=len(readings),
            cigar_entries=len(cigar_entries),
            drink_entries=len(drink_entries),
            weight_entries=len(weight_entries),
            cardio_entries=len(cardio_entries),
            events=len(events),
        )

        config = self.config
        data_quality = assess_data_quality(readings)
        lifestyle = analyze_lifestyle(
            readings,
            config,
            cigar_entries=cigar_entries,
            drink_entries=drink_entries,
            cardio_entries=cardio_entries,
            weight_entries=weight_entries,
        )
        risk = assess_risk(readings, config, now, lifestyle_impact_score=lifestyle.overall_impact)
        trend = analyze_trends(readings, config)

        report = AnalysisReport(
            generated_at=now,
            data_quality=data_quality,
            risk_assessment=risk,
            trend_analysis=trend,
            lifestyle_correlation=lifestyle,
            circadian_analysis=analyze_circadian(readings, config),
            predictive_insights=generate_predictive_insights(readings, config, now),
            medical_alerts=check_medical_alerts(readings, config.alert_thresholds, now),
            personalized_recommendations=personalized_recommendations(
                risk.overall, trend, lifestyle.smoking.impact, data_quality
            ),
            confidence_score=confidence_score(readings),
        )

        duration = (datetime.now(UTC) - started).total_seconds()
        self.logger.info(
            "advanced_analysis_completed",
            duration_seconds=round(duration, 4),
            overall_risk=risk.overall.value,
            alerts=len(report.medical_alerts),
            recommendations=len(report.personalized_recommendations),
            confidence_score=report.confidence_score,
        )
        return report


def generate_advanced_analysis(
    readings: Sequence[Reading],
    cigar_entries: Sequence[CigarEntry] = (),
    drink_entries: Sequence[DrinkEntry] = (),
    weight_entries: Sequence[WeightEntry] = (),
    cardio_entries: Sequence[CardioEntry] = (),
    events: Sequence[EventEntry] = (),
    config: AnalysisConfig | None = None,
    now: datetime | None = None,
) -> AnalysisReport | InsufficientDataReport:
    """Convenience wrapper around `AnalysisService.analyze`."""
    return AnalysisService(config).analyze(
        readings,
        cigar_entries=cigar_entries,
        drink_entries=drink_entries,
        weight_entries=weight_entries,
        cardio_entries=cardio_entries,
        events=events,
        now=now,
    )
