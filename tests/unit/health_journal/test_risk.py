"""
Tests for categorical risk classification.

Covers:
- Band boundaries and the empty-batch label
- Half-over-half progression
- Weighted overall score and next-assessment intervals
- Monotonic overall risk as pressure increases (property-based)
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st
from journal_factories import NOW, daily_readings, make_reading

from health_journal.config import AnalysisConfig, RiskBands, RiskWeights
from health_journal.domain.models import PressureCategory, RiskLevel, TrendDirection
from health_journal.services.risk import (
    assess_progression,
    assess_risk,
    classify_pressure,
    classify_readings,
    lifestyle_risk,
    overall_risk,
    pressure_category,
    recommend_next_assessment,
    weighted_risk_score,
)


@pytest.mark.parametrize(
    "systolic,diastolic,expected",
    [
        (119, 79, RiskLevel.LOW),
        (129, 79, RiskLevel.LOW),
        (130, 70, RiskLevel.MODERATE),
        (125, 80, RiskLevel.MODERATE),
        (139, 89, RiskLevel.MODERATE),
        (140, 70, RiskLevel.HIGH),
        (120, 90, RiskLevel.HIGH),
    ],
)
def test_classify_pressure_bands(systolic: int, diastolic: int, expected: RiskLevel) -> None:
    assert classify_pressure(systolic, diastolic, RiskBands()) == expected


@pytest.mark.parametrize(
    "systolic,diastolic,expected",
    [
        (119, 79, PressureCategory.NORMAL),
        (120, 79, PressureCategory.ELEVATED),
        (129, 79, PressureCategory.ELEVATED),
        (119, 80, PressureCategory.STAGE_1),
        (139, 89, PressureCategory.STAGE_1),
        (140, 70, PressureCategory.STAGE_2),
        (118, 90, PressureCategory.STAGE_2),
    ],
)
def test_pressure_category(systolic: int, diastolic: int, expected: PressureCategory) -> None:
    assert pressure_category(systolic, diastolic, RiskBands()) == expected


def test_empty_batch_is_unknown() -> None:
    assert classify_readings([], RiskBands()) == RiskLevel.UNKNOWN


def test_classify_readings_uses_batch_mean() -> None:
    readings = daily_readings([150, 110], [70, 70])

    # mean systolic 130 -> moderate, although one reading is high
    assert classify_readings(readings, RiskBands()) == RiskLevel.MODERATE


class TestProgression:
    def test_needs_ten_readings(self, config: AnalysisConfig) -> None:
        readings = daily_readings([120] * 9)
        assert assess_progression(readings, config) == TrendDirection.INSUFFICIENT_DATA

    def test_second_half_higher_is_increasing(self, config: AnalysisConfig) -> None:
        readings = daily_readings([120] * 5 + [130] * 5)
        assert assess_progression(readings, config) == TrendDirection.INCREASING

    def test_small_change_is_stable(self, config: AnalysisConfig) -> None:
        readings = daily_readings([120] * 5 + [121] * 5)
        assert assess_progression(readings, config) == TrendDirection.STABLE

    def test_split_is_chronological(self, config: AnalysisConfig) -> None:
        readings = list(reversed(daily_readings([140] * 5 + [120] * 5)))
        assert assess_progression(readings, config) == TrendDirection.DECREASING


def test_weighted_score_treats_directions_and_unknown_as_low() -> None:
    score = weighted_risk_score(
        RiskLevel.UNKNOWN,
        RiskLevel.INSUFFICIENT_DATA,
        TrendDirection.INCREASING,
        RiskLevel.LOW,
        RiskWeights(),
    )
    assert score == pytest.approx(1.0)


@pytest.mark.parametrize(
    "score,expected",
    [(3.0, RiskLevel.HIGH), (2.5, RiskLevel.MODERATE), (2.49, RiskLevel.LOW), (1.0, RiskLevel.LOW)],
)
def test_overall_risk_thresholds(score: float, expected: RiskLevel) -> None:
    assert overall_risk(score) == expected


def test_lifestyle_risk_from_impact_score() -> None:
    assert lifestyle_risk(0) == RiskLevel.LOW
    assert lifestyle_risk(3) == RiskLevel.MODERATE
    assert lifestyle_risk(6) == RiskLevel.HIGH


@pytest.mark.parametrize(
    "level,days",
    [
        (RiskLevel.LOW, 30),
        (RiskLevel.MODERATE, 14),
        (RiskLevel.HIGH, 7),
        (RiskLevel.CRITICAL, 1),
    ],
)
def test_next_assessment_interval(
    level: RiskLevel, days: int, config: AnalysisConfig, now: datetime
) -> None:
    assessment = recommend_next_assessment(level, config, now)

    assert assessment.days == days
    assert assessment.date == now + timedelta(days=days)
    assert assessment.reason == f"Based on {level.value} risk level"


class TestAssessRisk:
    def test_recent_high_readings(self, config: AnalysisConfig, now: datetime) -> None:
        readings = [make_reading(150, 95, days_ago=d) for d in range(5)]

        risk = assess_risk(readings, config, now)

        assert risk.current == RiskLevel.HIGH
        assert risk.historical == RiskLevel.HIGH
        assert risk.progression == TrendDirection.INSUFFICIENT_DATA
        assert risk.lifestyle == RiskLevel.LOW
        # 3*0.4 + 3*0.2 + 1*0.2 + 1*0.2
        assert risk.risk_score == pytest.approx(2.2)
        assert risk.overall == RiskLevel.LOW

    def test_lifestyle_impact_raises_overall(self, config: AnalysisConfig, now: datetime) -> None:
        readings = [make_reading(150, 95, days_ago=d) for d in range(5)]

        risk = assess_risk(readings, config, now, lifestyle_impact_score=6)

        assert risk.lifestyle == RiskLevel.HIGH
        assert risk.risk_score == pytest.approx(2.6)
        assert risk.overall == RiskLevel.MODERATE
        assert risk.next_assessment.days == 14

    def test_current_is_unknown_without_recent_readings(
        self, config: AnalysisConfig, now: datetime
    ) -> None:
        readings = [make_reading(150, 95, days_ago=30 + d) for d in range(3)]

        risk = assess_risk(readings, config, now)

        assert risk.current == RiskLevel.UNKNOWN
        assert risk.historical == RiskLevel.HIGH


_LEVELS = [(90, 60), (120, 80), (130, 80), (140, 90), (180, 120)]


@given(
    low=st.integers(min_value=0, max_value=len(_LEVELS) - 1),
    step=st.integers(min_value=0, max_value=len(_LEVELS) - 1),
    count=st.integers(min_value=1, max_value=14),
)
def test_overall_risk_is_monotonic_in_pressure(low: int, step: int, count: int) -> None:
    config = AnalysisConfig()
    high = min(low + step, len(_LEVELS) - 1)

    def overall(level: int) -> int:
        systolic, diastolic = _LEVELS[level]
        readings = [make_reading(systolic, diastolic, days_ago=d * 0.5) for d in range(count)]
        return assess_risk(readings, config, NOW).overall.ordinal

    assert overall(low) <= overall(high)
