"""
Tests for the text generation layer.

Covers:
- Result and CircuitBreaker behaviour
- AgentTextGenerator: success, empty output, timeout, provider errors, open circuit
- Prompt builders and the deterministic fallbacks

These tests avoid real API calls by patching the underlying Agent.run to return
pre-constructed results with an `.output` attribute.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from journal_factories import NOW, cigar, daily_readings, make_reading

from health_journal.config import TextGenerationConfig
from health_journal.domain.models import AnalysisReport, RiskLevel
from health_journal.services.analysis import generate_advanced_analysis
from health_journal.services.text_generation import (
    FALLBACK_RECOMMENDATIONS,
    AgentTextGenerator,
    CircuitBreaker,
    Result,
    TextGenerationError,
    TextGenerationUnavailable,
    build_health_report_prompt,
    build_insights_prompt,
    build_question_prompt,
    build_recommendation_prompt,
    fallback_answer,
    fallback_insights,
    fallback_recommendations,
    split_recommendations,
)


class _FakeAgentResult:
    """Minimal stand-in for pydantic-ai AgentRunResult with .output"""

    def __init__(self, output: Any) -> None:
        self.output = output


@pytest.fixture
def report() -> AnalysisReport:
    result = generate_advanced_analysis(daily_readings([120 + 2 * i for i in range(10)]), now=NOW)
    assert isinstance(result, AnalysisReport)
    return result


@pytest.fixture
def generator() -> AgentTextGenerator:
    return AgentTextGenerator(
        TextGenerationConfig(api_key="test-key", timeout_seconds=0.05, failure_threshold=2)
    )


class TestResult:
    def test_ok(self) -> None:
        result: Result[str, Exception] = Result.ok("text")

        assert result.is_ok()
        assert result.unwrap() == "text"
        assert result.unwrap_or("other") == "text"

    def test_err(self) -> None:
        error = TextGenerationError("boom")
        result: Result[str, Exception] = Result.err(error)

        assert result.is_err()
        assert result.unwrap_err() is error
        assert result.unwrap_or("fallback") == "fallback"
        with pytest.raises(TextGenerationError):
            result.unwrap()

    def test_requires_exactly_one_side(self) -> None:
        with pytest.raises(ValueError):
            Result()
        with pytest.raises(ValueError):
            Result(value="x", error=ValueError("y"))


class TestCircuitBreaker:
    def test_opens_after_threshold(self) -> None:
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60)

        breaker.record_failure()
        assert breaker.can_execute()
        breaker.record_failure()

        assert breaker.state == "open"
        assert not breaker.can_execute()

    def test_half_open_after_recovery_timeout(self) -> None:
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
        breaker.record_failure()
        breaker.last_failure_time = datetime.now(UTC) - timedelta(seconds=61)

        assert breaker.can_execute()
        assert breaker.state == "half-open"

        breaker.record_success()
        assert breaker.state == "closed"
        assert breaker.failure_count == 0

    def test_failure_while_half_open_reopens(self) -> None:
        breaker = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        breaker.state = "half-open"

        breaker.record_failure()

        assert breaker.state == "open"


class TestAgentTextGenerator:
    @pytest.mark.asyncio
    async def test_returns_stripped_output(self, generator: AgentTextGenerator) -> None:
        async def fake_run(prompt: str, *args, **kwargs):
            assert "blood pressure" in prompt
            return _FakeAgentResult("  Your readings look steady.  ")

        generator.agent.run = fake_run  # type: ignore[assignment]

        result = await generator.generate("Summarize my blood pressure")

        assert result.is_ok()
        assert result.unwrap() == "Your readings look steady."

    @pytest.mark.asyncio
    async def test_empty_output_is_an_error(self, generator: AgentTextGenerator) -> None:
        async def fake_run(*args, **kwargs):
            return _FakeAgentResult("   ")

        generator.agent.run = fake_run  # type: ignore[assignment]

        result = await generator.generate("prompt")

        assert isinstance(result.unwrap_err(), TextGenerationError)
        assert generator.breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_timeout_is_an_error(self, generator: AgentTextGenerator) -> None:
        async def slow_run(*args, **kwargs):
            await asyncio.sleep(1)
            return _FakeAgentResult("too late")

        generator.agent.run = slow_run  # type: ignore[assignment]

        result = await generator.generate("prompt")

        assert isinstance(result.unwrap_err(), TimeoutError)

    @pytest.mark.asyncio
    async def test_repeated_failures_open_the_circuit(
        self, generator: AgentTextGenerator
    ) -> None:
        calls = 0

        async def failing_run(*args, **kwargs):
            nonlocal calls
            calls += 1
            raise RuntimeError("provider unavailable")

        generator.agent.run = failing_run  # type: ignore[assignment]

        first = await generator.generate("prompt")
        second = await generator.generate("prompt")
        third = await generator.generate("prompt")

        assert isinstance(first.unwrap_err(), RuntimeError)
        assert isinstance(second.unwrap_err(), RuntimeError)
        assert isinstance(third.unwrap_err(), TextGenerationUnavailable)
        assert calls == 2


class TestPrompts:
    def test_insights_prompt_covers_report(self, report: AnalysisReport) -> None:
        prompt = build_insights_prompt(report)

        assert "- Total Readings: 10" in prompt
        assert "- Systolic Trend: increasing" in prompt
        assert "- Short-term Prediction: 138/80" in prompt
        assert "- Long-term Projection: not available" in prompt
        assert "- Smoking Impact: none" in prompt

    def test_recommendation_prompt(self, report: AnalysisReport) -> None:
        prompt = build_recommendation_prompt(
            report.risk_assessment, report.lifestyle_correlation
        )

        assert "- Overall Risk: low" in prompt
        assert "- Alcohol Impact: no_data" in prompt

    def test_question_prompt_uses_recent_average(self) -> None:
        readings = [make_reading(130, 85, days_ago=d) for d in range(5)]
        readings.append(make_reading(200, 120, days_ago=10))

        prompt = build_question_prompt("Is this normal?", readings, [cigar(1)])

        assert 'User question: "Is this normal?"' in prompt
        assert "- Recent BP Average: 130/85 mmHg" in prompt
        assert "- Total Readings: 6" in prompt
        assert "- Smoking Entries: 1" in prompt
        assert "- Recent Drinking: No recent entries" in prompt

    def test_health_report_prompt(self, report: AnalysisReport) -> None:
        prompt = build_health_report_prompt(report)

        assert "Trend Analysis: increasing" in prompt
        assert f"Confidence Score: {report.confidence_score}" in prompt


class TestFallbacks:
    def test_insights_mention_upward_trend(self, report: AnalysisReport) -> None:
        text = fallback_insights(report)

        assert text.startswith("Your blood pressure readings are within normal ranges.")
        assert text.endswith("However, there is an upward trend that warrants attention.")

    def test_insights_for_high_risk(self, report: AnalysisReport) -> None:
        risk = report.risk_assessment.model_copy(update={"overall": RiskLevel.HIGH})
        high = report.model_copy(update={"risk_assessment": risk})

        assert "elevated cardiovascular risk" in fallback_insights(high)

    def test_recommendations_by_risk(self) -> None:
        assert fallback_recommendations(RiskLevel.HIGH) == FALLBACK_RECOMMENDATIONS[RiskLevel.HIGH]
        assert fallback_recommendations(RiskLevel.UNKNOWN) == (
            FALLBACK_RECOMMENDATIONS[RiskLevel.LOW]
        )

    def test_recommendations_are_copies(self) -> None:
        fallback_recommendations(RiskLevel.LOW).append("mutated")

        assert "mutated" not in FALLBACK_RECOMMENDATIONS[RiskLevel.LOW]

    def test_normal_question(self) -> None:
        readings = [make_reading(115, 75, days_ago=d) for d in range(5)]

        answer = fallback_answer("Is my pressure normal?", readings)

        assert answer == (
            "Normal blood pressure is typically below 120/80 mmHg. Your recent average of "
            "115/75 mmHg is within normal range."
        )

    def test_high_question_uses_five_most_recent(self) -> None:
        readings = [make_reading(150, 95, days_ago=d) for d in range(5)]
        readings.append(make_reading(90, 60, days_ago=20))

        answer = fallback_answer("Is it too HIGH?", readings)

        assert "average 150/95 mmHg" in answer
        assert "should be discussed with a healthcare provider" in answer

    def test_other_question(self) -> None:
        answer = fallback_answer("What should I do?", [make_reading(125, 82)])

        assert answer.startswith("Based on your recent blood pressure readings averaging 125/82")


def test_split_recommendations_strips_markers() -> None:
    text = "1. Walk daily\n- Cut salt\n\n* Sleep well\n• Drink water\nPlain line"

    assert split_recommendations(text) == [
        "Walk daily",
        "Cut salt",
        "Sleep well",
        "Drink water",
        "Plain line",
    ]
