"""
Enhancement layer: free-text insights shown alongside the statistical report.

The report itself is never modified. Generated text is attached next to it,
and every output has a deterministic fallback, so a missing API key, a
timeout or a provider outage only changes the `source` of the text.
"""

import asyncio
from collections.abc import Sequence
from datetime import datetime
from typing import Literal

import structlog
from pydantic import BaseModel, Field

from health_journal.config import TextGenerationConfig
from health_journal.domain.models import (
    AnalysisReport,
    BloodPressureAverages,
    CardioEntry,
    CigarEntry,
    DrinkEntry,
    EventEntry,
    InsufficientDataReport,
    Reading,
    WeightEntry,
)
from health_journal.services.analysis import AnalysisService
from health_journal.services.numeric import resolve_now
from health_journal.services.text_generation import (
    FALLBACK_HEALTH_REPORT,
    AgentTextGenerator,
    Result,
    TextGenerator,
    build_health_report_prompt,
    build_insights_prompt,
    build_question_prompt,
    build_recommendation_prompt,
    fallback_answer,
    fallback_insights,
    fallback_recommendations,
    most_recent,
    recent_average,
    split_recommendations,
)

logger = structlog.get_logger(__name__)

TextSource = Literal["text_generation", "fallback"]


class GeneratedText(BaseModel):
    text: str
    source: TextSource
    generated_at: datetime


class GeneratedRecommendations(BaseModel):
    recommendations: list[str]
    source: TextSource
    generated_at: datetime


class EnhancedAnalysis(BaseModel):
    """The untouched report plus generated text alongside it."""

    report: AnalysisReport | InsufficientDataReport
    llm_insights: GeneratedText | None = None
    llm_recommendations: GeneratedRecommendations | None = None
    enhanced: bool = False
    enhancement_error: str | None = None
    enhanced_at: datetime


class QuestionContext(BaseModel):
    total_readings: int
    recent_average: BloodPressureAverages | None = None


class QuestionAnswer(BaseModel):
    question: str
    answer: GeneratedText
    context: QuestionContext
    answered_at: datetime


class ReportPeriod(BaseModel):
    start: datetime | None = None
    end: datetime | None = None
    total_readings: int = Field(default=0, ge=0)


class HealthReportDocument(BaseModel):
    report: str
    source: TextSource
    analysis: EnhancedAnalysis
    period: ReportPeriod
    generated_at: datetime


class EnhancementService:
    """
    Combines the analysis engine with an optional text generator.

    With no generator (no API key configured) every method still returns a
    complete response built from the fallback templates.
    """

    def __init__(
        self,
        analysis_service: AnalysisService | None = None,
        generator: TextGenerator | None = None,
        config: TextGenerationConfig | None = None,
    ) -> None:
        self.analysis_service = analysis_service or AnalysisService()
        self.config = config or TextGenerationConfig()
        self.logger = logger.bind(component="enhancement_service")

        if generator is None and self.config.enabled:
            generator = AgentTextGenerator(self.config)
        self.generator = generator

    async def _generate(self, prompt: str, purpose: str) -> Result[str, Exception] | None:
        if self.generator is None:
            self.logger.debug("text_generation_disabled", purpose=purpose)
            return None

        result = await self.generator.generate(prompt)
        if result.is_err():
            self.logger.warning(
                "text_generation_fallback", purpose=purpose, error=str(result.unwrap_err())
            )
        return result

    async def _insights(
        self, report: AnalysisReport, now: datetime
    ) -> tuple[GeneratedText, str | None]:
        result = await self._generate(build_insights_prompt(report), "insights")
        if result is not None and result.is_ok():
            text = GeneratedText(text=result.unwrap(), source="text_generation", generated_at=now)
            return text, None

        error = str(result.unwrap_err()) if result is not None else None
        text = GeneratedText(text=fallback_insights(report), source="fallback", generated_at=now)
        return text, error

    async def _recommendations(
        self, report: AnalysisReport, now: datetime
    ) -> tuple[GeneratedRecommendations, str | None]:
        prompt = build_recommendation_prompt(report.risk_assessment, report.lifestyle_correlation)
        result = await self._generate(prompt, "recommendations")
        if result is not None and result.is_ok():
            lines = split_recommendations(result.unwrap())
            if lines:
                return (
                    GeneratedRecommendations(
                        recommendations=lines, source="text_generation", generated_at=now
                    ),
                    None,
                )

        error = str(result.unwrap_err()) if result is not None and result.is_err() else None
        return (
            GeneratedRecommendations(
                recommendations=fallback_recommendations(report.risk_assessment.overall),
                source="fallback",
                generated_at=now,
            ),
            error,
        )

    async def enhance(
        self, report: AnalysisReport | InsufficientDataReport, now: datetime | None = None
    ) -> EnhancedAnalysis:
        """Attach generated insights and recommendations next to the report."""
        now = resolve_now(now)
        if isinstance(report, InsufficientDataReport):
            return EnhancedAnalysis(report=report, enhanced=False, enhanced_at=now)

        (insights, insights_error), (recommendations, recommendations_error) = (
            await asyncio.gather(self._insights(report, now), self._recommendations(report, now))
        )
        enhanced = "text_generation" in (insights.source, recommendations.source)

        self.logger.info(
            "analysis_enhanced",
            enhanced=enhanced,
            insights_source=insights.source,
            recommendations_source=recommendations.source,
        )
        return EnhancedAnalysis(
            report=report,
            llm_insights=insights,
            llm_recommendations=recommendations,
            enhanced=enhanced,
            enhancement_error=insights_error or recommendations_error,
            enhanced_at=now,
        )

    async def answer_question(
        self,
        question: str,
        readings: Sequence[Reading],
        cigar_entries: Sequence[CigarEntry] = (),
        drink_entries: Sequence[DrinkEntry] = (),
        now: datetime | None = None,
    ) -> QuestionAnswer:
        """Answer a free-form question with the recent average as context."""
        now = resolve_now(now)

        average = None
        if readings:
            systolic, diastolic = recent_average(readings)
            average = BloodPressureAverages(
                systolic=round(systolic, 2), diastolic=round(diastolic, 2)
            )
        context = QuestionContext(total_readings=len(readings), recent_average=average)

        prompt = build_question_prompt(question, readings, cigar_entries, drink_entries)
        result = await self._generate(prompt, "question")
        if result is not None and result.is_ok():
            answer = GeneratedText(
                text=result.unwrap(), source="text_generation", generated_at=now
            )
        else:
            answer = GeneratedText(
                text=fallback_answer(question, most_recent(readings)),
                source="fallback",
                generated_at=now,
            )

        self.logger.info("question_answered", source=answer.source, readings=len(readings))
        return QuestionAnswer(question=question, answer=answer, context=context, answered_at=now)

    async def generate_health_report(
        self,
        readings: Sequence[Reading],
        cigar_entries: Sequence[CigarEntry] = (),
        drink_entries: Sequence[DrinkEntry] = (),
        weight_entries: Sequence[WeightEntry] = (),
        cardio_entries: Sequence[CardioEntry] = (),
        events: Sequence[EventEntry] = (),
        now: datetime | None = None,
    ) -> HealthReportDocument:
        """Run the analysis, enhance it and ask for a narrative report over the period."""
        now = resolve_now(now)
        report = self.analysis_service.analyze(
            readings,
            cigar_entries=cigar_entries,
            drink_entries=drink_entries,
            weight_entries=weight_entries,
            cardio_entries=cardio_entries,
            events=events,
            now=now,
        )
        enhanced = await self.enhance(report, now=now)

        text = FALLBACK_HEALTH_REPORT
        source: TextSource = "fallback"
        if isinstance(report, AnalysisReport):
            result = await self._generate(build_health_report_prompt(report), "health_report")
            if result is not None and result.is_ok():
                text, source = result.unwrap(), "text_generation"

        timestamps = [r.timestamp for r in readings]
        period = ReportPeriod(
            start=min(timestamps) if timestamps else None,
            end=max(timestamps) if timestamps else None,
            total_readings=len(readings),
        )

        self.logger.info("health_report_generated", source=source, readings=len(readings))
        return HealthReportDocument(
            report=text,
            source=source,
            analysis=enhanced,
            period=period,
            generated_at=now,
        )
