"""
Free-text generation for journal insights using Pydantic AI.

Key architectural decisions:
- Explicit outcomes: every call returns a Result instead of raising
- Bounded waits: each call is wrapped in asyncio.wait_for
- Circuit breaker: repeated failures stop consultation until a recovery timeout
- Deterministic fallbacks: every prompt has a templated answer built from the report

Nothing in this module can change the statistical report; it only produces
text that is shown alongside it.
"""

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Generic, Protocol, TypeVar

import structlog
from pydantic_ai import Agent

from health_journal.config import TextGenerationConfig
from health_journal.domain.models import (
    AnalysisReport,
    CigarEntry,
    DrinkEntry,
    LifestyleCorrelation,
    LifestyleImpact,
    Reading,
    RiskAssessment,
    RiskLevel,
    TrendDirection,
    TrendResult,
)
from health_journal.services.numeric import mean

logger = structlog.get_logger(__name__)

# Generic Result type for explicit error handling
ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    Why: An unreachable or slow provider is normal operation here, not an
    exceptional condition, so callers must decide what to show instead.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class TextGenerationError(Exception):
    """The provider returned no usable text."""


class TextGenerationUnavailable(TextGenerationError):
    """Generation was not attempted (circuit open)."""


class TextGenerator(Protocol):
    """
    Protocol for anything that turns a prompt into free text.

    Why Protocol over ABC: tests and alternative providers only need a
    matching `generate` coroutine.
    """

    name: str

    async def generate(self, prompt: str) -> Result[str, Exception]:
        """Generate text for the prompt, or an error describing why not."""
        ...


class CircuitBreaker:
    """Simple circuit breaker for text generation calls."""

    def __init__(self, failure_threshold: int = 3, recovery_timeout: int = 60) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.last_failure_time: datetime | None = None
        self.state = "closed"  # closed, open, half-open

    def can_execute(self) -> bool:
        """Check if a call can go out based on circuit breaker state."""

        if self.state == "closed":
            return True

        if self.state == "open":
            if self.last_failure_time:
                time_since_failure = datetime.now(UTC) - self.last_failure_time
                if time_since_failure.total_seconds() >= self.recovery_timeout:
                    self.state = "half-open"
                    return True
            return False

        return self.state == "half-open"

    def record_success(self) -> None:
        self.failure_count = 0
        self.state = "closed"

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = datetime.now(UTC)

        if self.failure_count >= self.failure_threshold or self.state == "half-open":
            self.state = "open"


SYSTEM_PROMPT = """You are a careful health-journal assistant helping a person understand
their home blood pressure log.

Key principles:
1. Base every statement on the numbers you are given; never invent readings
2. Explain patterns in plain language, without jargon
3. Be specific and actionable, but never diagnose or prescribe medication
4. Recommend seeing a healthcare provider whenever readings are at or above 140/90
5. Keep answers short: a few paragraphs or a short list at most"""


class AgentTextGenerator:
    """
    Text generator backed by a pydantic-ai Agent with free-text output.

    The provider reads its own credentials from the environment; the model is
    resolved on first use so constructing one never needs network access.
    """

    name = "pydantic_ai"

    def __init__(
        self, config: TextGenerationConfig, breaker: CircuitBreaker | None = None
    ) -> None:
        self.config = config
        self.logger = logger.bind(component="agent_text_generator", model=config.model_name)
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=config.failure_threshold,
            recovery_timeout=config.recovery_timeout_seconds,
        )

        self.agent = Agent(
            model=config.model_name,
            output_type=str,
            system_prompt=SYSTEM_PROMPT,
            model_settings={"temperature": config.temperature},
            defer_model_check=True,
        )

    async def generate(self, prompt: str) -> Result[str, Exception]:
        if not self.breaker.can_execute():
            self.logger.warning("text_generation_skipped", reason="circuit_open")
            return Result.err(TextGenerationUnavailable("text generation circuit is open"))

        start_time = datetime.now(UTC)
        try:
            result = await asyncio.wait_for(
                self.agent.run(prompt), timeout=self.config.timeout_seconds
            )
            text = str(result.output).strip()
            if not text:
                raise TextGenerationError("provider returned empty text")

        except TimeoutError as e:
            self.breaker.record_failure()
            self.logger.error(
                "text_generation_timeout", timeout_seconds=self.config.timeout_seconds
            )
            return Result.err(e)
        except Exception as e:
            self.breaker.record_failure()
            self.logger.error("text_generation_failed", error=str(e), error_type=type(e).__name__)
            return Result.err(e)

        self.breaker.record_success()
        self.logger.info(
            "text_generated",
            prompt_chars=len(prompt),
            output_chars=len(text),
            duration_seconds=round((datetime.now(UTC) - start_time).total_seconds(), 3),
        )
        return Result.ok(text)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def _direction(value: TrendDirection | None) -> str:
    return value.value if value is not None else "stable"


def _trend_line(label: str, result: TrendResult | None) -> str:
    if result is None:
        return f"- {label} Trend: stable (Confidence: unknown)"
    return f"- {label} Trend: {result.direction.value} (Confidence: {result.confidence.value})"


def _alcohol_impact(lifestyle: LifestyleCorrelation) -> LifestyleImpact:
    # Moderate tier first, light tier when there is no moderate drinking at all
    alcohol = lifestyle.alcohol
    if alcohol.moderate_drinking.impact != LifestyleImpact.NO_DATA:
        return alcohol.moderate_drinking.impact
    return alcohol.light_drinking.impact


def build_insights_prompt(report: AnalysisReport) -> str:
    """Comprehensive prompt covering every section of the report."""
    quality = report.data_quality
    risk = report.risk_assessment
    trend = report.trend_analysis
    lifestyle = report.lifestyle_correlation
    circadian = report.circadian_analysis
    predictive = report.predictive_insights

    window_lines = []
    for window, stats in circadian.windows.items():
        window_lines.append(
            f"- {window.value.title()} Average: "
            f"{stats.average_systolic:.0f}/{stats.average_diastolic:.0f}"
        )
    optimal = circadian.optimal_time.value if circadian.optimal_time else "unknown"

    short_term = predictive.short_term
    long_term = predictive.long_term
    short_line = (
        f"{short_term.systolic:.0f}/{short_term.diastolic:.0f}"
        if short_term is not None and short_term.systolic is not None
        and short_term.diastolic is not None
        else "not available"
    )
    long_line = (
        f"{long_term.projected_30_day.systolic:.0f}/{long_term.projected_30_day.diastolic:.0f}"
        if long_term is not None and long_term.projected_30_day is not None
        else "not available"
    )

    return "\n".join(
        [
            "Analyze this blood pressure journal and provide detailed insights.",
            "",
            "DATA OVERVIEW:",
            f"- Total Readings: {quality.total_readings}",
            f"- Time Span: {quality.time_span_days} days",
            f"- Data Quality: {quality.quality}",
            f"- Monitoring Frequency: {quality.average_frequency:.1f} readings/day",
            "",
            "RISK ASSESSMENT:",
            f"- Current Risk: {risk.current.value}",
            f"- Historical Risk: {risk.historical.value}",
            f"- Lifestyle Impact: {risk.lifestyle.value}",
            f"- Overall Risk: {risk.overall.value}",
            f"- Risk Score: {risk.risk_score}",
            "",
            "TREND ANALYSIS:",
            _trend_line("Systolic", trend.systolic),
            _trend_line("Diastolic", trend.diastolic),
            _trend_line("Heart Rate", trend.heart_rate),
            f"- Volatility Level: {trend.volatility.level if trend.volatility else 'unknown'}",
            "",
            "LIFESTYLE CORRELATIONS:",
            f"- Smoking Impact: {lifestyle.smoking.impact.value} "
            f"(Difference: {lifestyle.smoking.correlation} mmHg)",
            f"- Alcohol Impact: {_alcohol_impact(lifestyle).value}",
            f"- Cardio Impact: {lifestyle.cardio.impact.value}",
            f"- Combined Lifestyle Impact: {lifestyle.overall_impact}",
            "",
            "CIRCADIAN PATTERNS:",
            *window_lines,
            f"- Optimal Time: {optimal}",
            "",
            "PREDICTIVE INSIGHTS:",
            f"- Short-term Prediction: {short_line}",
            f"- Long-term Projection: {long_line}",
            f"- Confidence Level: {predictive.confidence}",
            "",
            "Provide insights about the blood pressure patterns, lifestyle impacts, "
            "circadian rhythms and personalized recommendations based on all available data.",
        ]
    )


def build_recommendation_prompt(risk: RiskAssessment, lifestyle: LifestyleCorrelation) -> str:
    return "\n".join(
        [
            "Based on this blood pressure assessment, provide personalized health "
            "recommendations.",
            "",
            "RISK ASSESSMENT:",
            f"- Overall Risk: {risk.overall.value}",
            f"- Risk Score: {risk.risk_score}",
            "",
            "LIFESTYLE ANALYSIS:",
            f"- Smoking Impact: {lifestyle.smoking.impact.value} "
            f"(Difference: {lifestyle.smoking.correlation} mmHg)",
            f"- Alcohol Impact: {_alcohol_impact(lifestyle).value}",
            f"- Combined Lifestyle Impact: {lifestyle.overall_impact}",
            "",
            "TREND DATA:",
            f"- Systolic Progression: {risk.progression.value}",
            f"- Lifestyle Risk: {risk.lifestyle.value}",
            "",
            "Provide 3-5 specific, actionable recommendations, one per line.",
        ]
    )


def most_recent(readings: Sequence[Reading], count: int = 5) -> list[Reading]:
    return sorted(readings, key=lambda r: r.timestamp, reverse=True)[:count]


def recent_average(readings: Sequence[Reading], count: int = 5) -> tuple[float, float]:
    recent = most_recent(readings, count)
    return mean(r.systolic for r in recent), mean(r.diastolic for r in recent)


def build_question_prompt(
    question: str,
    readings: Sequence[Reading],
    cigar_entries: Sequence[CigarEntry] = (),
    drink_entries: Sequence[DrinkEntry] = (),
) -> str:
    systolic, diastolic = recent_average(readings)

    def latest(entries: Sequence[CigarEntry] | Sequence[DrinkEntry]) -> str:
        ordered = sorted(entries, key=lambda e: e.timestamp, reverse=True)[:3]
        return ", ".join(e.timestamp.isoformat() for e in ordered) or "No recent entries"

    return "\n".join(
        [
            f'User question: "{question}"',
            "",
            "CONTEXT:",
            f"- Recent BP Average: {systolic:.0f}/{diastolic:.0f} mmHg",
            f"- Total Readings: {len(readings)}",
            f"- Smoking Entries: {len(cigar_entries)}",
            f"- Drinking Entries: {len(drink_entries)}",
            "",
            "LIFESTYLE DATA:",
            f"- Recent Smoking: {latest(cigar_entries)}",
            f"- Recent Drinking: {latest(drink_entries)}",
            "",
            "Answer helpfully and accurately, considering the blood pressure patterns and "
            "lifestyle factors above.",
        ]
    )


def build_health_report_prompt(report: AnalysisReport) -> str:
    systolic = report.trend_analysis.systolic
    return "\n".join(
        [
            "Generate a health report based on this blood pressure analysis:",
            "",
            f"Risk Assessment: {report.risk_assessment.overall.value}",
            f"Trend Analysis: {_direction(systolic.direction if systolic else None)}",
            f"Data Quality: {report.data_quality.quality}",
            f"Confidence Score: {report.confidence_score}",
            "",
            "Create a detailed, professional report summarizing the findings and "
            "recommendations.",
        ]
    )


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------

FALLBACK_RECOMMENDATIONS: dict[RiskLevel, list[str]] = {
    RiskLevel.LOW: [
        "Continue regular blood pressure monitoring",
        "Maintain a balanced diet and regular exercise",
        "Keep stress levels manageable",
    ],
    RiskLevel.MODERATE: [
        "Increase monitoring frequency to daily",
        "Focus on diet modifications (reduce sodium)",
        "Consider stress management techniques",
    ],
    RiskLevel.HIGH: [
        "Consult with a healthcare provider immediately",
        "Implement aggressive lifestyle changes",
        "Monitor blood pressure multiple times daily",
    ],
}

FALLBACK_HEALTH_REPORT = "Unable to generate comprehensive health report at this time."


def fallback_insights(report: AnalysisReport) -> str:
    risk = report.risk_assessment.overall
    systolic = report.trend_analysis.systolic
    trend = systolic.direction if systolic is not None else TrendDirection.STABLE

    if risk == RiskLevel.HIGH:
        insight = (
            "Your blood pressure readings indicate elevated cardiovascular risk. Consistent "
            "monitoring and lifestyle modifications are recommended."
        )
    elif risk == RiskLevel.MODERATE:
        insight = (
            "Your blood pressure shows moderate risk levels. Continue monitoring and consider "
            "preventive measures."
        )
    else:
        insight = (
            "Your blood pressure readings are within normal ranges. Maintain your current "
            "healthy lifestyle."
        )

    if trend == TrendDirection.INCREASING:
        insight += " However, there is an upward trend that warrants attention."
    elif trend == TrendDirection.DECREASING:
        insight += " The downward trend is positive and encouraging."

    return insight


def fallback_recommendations(risk: RiskLevel) -> list[str]:
    return list(FALLBACK_RECOMMENDATIONS.get(risk, FALLBACK_RECOMMENDATIONS[RiskLevel.LOW]))


def fallback_answer(question: str, readings: Sequence[Reading]) -> str:
    """Keyword-matched answer using the average of the five most recent readings."""
    systolic, diastolic = recent_average(readings)
    average = f"{systolic:.0f}/{diastolic:.0f} mmHg"
    lowered = question.lower()

    if "normal" in lowered or "good" in lowered:
        verdict = (
            "is within normal range"
            if systolic < 120 and diastolic < 80
            else "may indicate elevated levels"
        )
        return (
            f"Normal blood pressure is typically below 120/80 mmHg. Your recent average of "
            f"{average} {verdict}."
        )

    if "high" in lowered or "elevated" in lowered:
        verdict = (
            "These levels suggest elevated blood pressure that should be discussed with a "
            "healthcare provider."
            if systolic >= 140 or diastolic >= 90
            else "Your levels appear to be within acceptable ranges."
        )
        return (
            "High blood pressure (hypertension) is generally considered 140/90 mmHg or higher. "
            f"Your recent readings average {average}. {verdict}"
        )

    return (
        f"Based on your recent blood pressure readings averaging {average}, I recommend "
        "continuing regular monitoring and maintaining a healthy lifestyle. For specific "
        "medical advice, please consult with a healthcare provider."
    )


def split_recommendations(text: str) -> list[str]:
    """One recommendation per non-empty line, without list markers."""
    lines = []
    for line in text.splitlines():
        cleaned = line.strip().lstrip("-*•").strip()
        head, _, rest = cleaned.partition(". ")
        if head.isdigit() and rest:
            cleaned = rest.strip()
        if cleaned:
            lines.append(cleaned)
    return lines
