"""
Domain models for the blood pressure journal.

Journal entries are the immutable inputs of an analysis; everything else here
is a derived, request-scoped result. They use Pydantic for validation and are
frozen so an analysis can never mutate the batch it was given.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskLevel(str, Enum):
    """Categorical risk labels shared by every risk sub-score."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"
    UNKNOWN = "unknown"
    INSUFFICIENT_DATA = "insufficient_data"

    @property
    def ordinal(self) -> int:
        return RISK_ORDINALS[self]


# Unknown and insufficient data weigh as "low" in the overall score
RISK_ORDINALS: dict[RiskLevel, int] = {
    RiskLevel.LOW: 1,
    RiskLevel.MODERATE: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.CRITICAL: 4,
    RiskLevel.UNKNOWN: 1,
    RiskLevel.INSUFFICIENT_DATA: 1,
}


class TrendDirection(str, Enum):
    """Direction of a fitted trend or of a half-over-half comparison."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisStatus(str, Enum):
    """Outcome marker of a (sub-)analysis."""

    COMPLETE = "complete"
    PREDICTED = "predicted"
    PROJECTED = "projected"
    NO_DATA = "no_data"
    INSUFFICIENT_DATA = "insufficient_data"


class LifestyleImpact(str, Enum):
    """Impact labels produced by the lifestyle correlation analyzers."""

    SIGNIFICANT = "significant"
    MODERATE = "moderate"
    MINIMAL = "minimal"
    ELEVATED = "elevated"
    BENEFICIAL = "beneficial"
    NEUTRAL = "neutral"
    POTENTIALLY_NEGATIVE = "potentially_negative"
    NONE = "none"
    NO_DATA = "no_data"
    INSUFFICIENT_DATA = "insufficient_data"


class CircadianWindow(str, Enum):
    """Fixed local-time-of-day windows, [start, end) hours."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


CIRCADIAN_HOURS: dict[CircadianWindow, tuple[int, int]] = {
    CircadianWindow.MORNING: (6, 12),
    CircadianWindow.AFTERNOON: (12, 18),
    CircadianWindow.EVENING: (18, 24),
    CircadianWindow.NIGHT: (0, 6),
}


class BMICategory(str, Enum):
    SEVERELY_UNDERWEIGHT = "severely_underweight"
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE_CLASS_I = "obese_class_i"
    OBESE_CLASS_II = "obese_class_ii"
    OBESE_CLASS_III = "obese_class_iii"


class PressureCategory(str, Enum):
    """Clinical blood pressure category of an average reading."""

    NORMAL = "normal"
    ELEVATED = "elevated"
    STAGE_1 = "stage_1"
    STAGE_2 = "stage_2"


class AlertType(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class AlertKind(str, Enum):
    BLOOD_PRESSURE = "blood_pressure"
    HEART_RATE = "heart_rate"


DataQualityLevel = Literal["excellent", "good", "needs_improvement"]
VolatilityLevel = Literal["low", "moderate", "high", "unknown"]
TrendStrength = Literal["strong", "moderate", "weak"]
Priority = Literal["low", "medium", "high", "critical"]


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Journal entries
# ---------------------------------------------------------------------------


class JournalEntry(FrozenModel):
    """Common shape of every timestamped journal entry."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime
    notes: str | None = None

    @field_validator("timestamp")
    @classmethod
    def assume_utc_when_naive(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Reading(JournalEntry):
    """One blood pressure measurement."""

    systolic: int = Field(gt=0, le=300, description="mmHg")
    diastolic: int = Field(gt=0, le=250, description="mmHg")
    heart_rate: int = Field(gt=0, le=300, description="beats per minute")


class CigarEntry(JournalEntry):
    count: int = Field(ge=0)
    brand: str | None = None


class DrinkEntry(JournalEntry):
    count: int = Field(ge=0)
    drink_type: str | None = None
    alcohol_content: float | None = Field(default=None, ge=0.0, le=100.0, description="% ABV")


class CardioEntry(JournalEntry):
    activity: str
    minutes: float = Field(ge=0.0)


class WeightEntry(JournalEntry):
    weight: float = Field(gt=0.0, description="pounds")


class EventEntry(JournalEntry):
    title: str
    description: str | None = None


# ---------------------------------------------------------------------------
# Trend and risk results
# ---------------------------------------------------------------------------


class TrendResult(FrozenModel):
    """Ordinary least squares fit over an index-ordered sequence."""

    direction: TrendDirection
    slope: float
    intercept: float
    r_squared: float
    confidence: ConfidenceLevel
    predicted_value: float
    change_rate: float = Field(description="slope over 30 index steps")


class Volatility(FrozenModel):
    level: VolatilityLevel
    score: float
    systolic_std_dev: float = 0.0
    diastolic_std_dev: float = 0.0


class TrendAnalysis(FrozenModel):
    status: AnalysisStatus
    message: str | None = None
    systolic: TrendResult | None = None
    diastolic: TrendResult | None = None
    heart_rate: TrendResult | None = None
    volatility: Volatility | None = None
    trend_strength: TrendStrength | None = None
    significance: ConfidenceLevel | None = None


class NextAssessment(FrozenModel):
    days: int
    date: datetime
    reason: str


class RiskAssessment(FrozenModel):
    current: RiskLevel
    historical: RiskLevel
    progression: TrendDirection
    lifestyle: RiskLevel
    overall: RiskLevel
    risk_score: float
    next_assessment: NextAssessment


# ---------------------------------------------------------------------------
# Lifestyle correlation results
# ---------------------------------------------------------------------------


class BloodPressureAverages(FrozenModel):
    systolic: float
    diastolic: float


class SmokingCorrelation(FrozenModel):
    correlation: float = 0.0
    impact: LifestyleImpact
    confidence: ConfidenceLevel
    smoking_days_readings: int = 0
    non_smoking_days_readings: int = 0
    average_difference: BloodPressureAverages | None = None


class DrinkingImpact(FrozenModel):
    category: Literal["heavy", "moderate", "light", "none"]
    impact: LifestyleImpact
    confidence: ConfidenceLevel
    reading_count: int = 0
    average_readings: BloodPressureAverages | None = None
    average_difference: BloodPressureAverages | None = None


class AlcoholCorrelation(FrozenModel):
    heavy_drinking: DrinkingImpact
    moderate_drinking: DrinkingImpact
    light_drinking: DrinkingImpact
    no_drinking: DrinkingImpact


class CardioCorrelation(FrozenModel):
    impact: LifestyleImpact
    confidence: ConfidenceLevel
    cardio_days_readings: int = 0
    non_cardio_days_readings: int = 0
    average_difference: BloodPressureAverages | None = Field(
        default=None, description="non-cardio days minus cardio days, positive is beneficial"
    )
    combined_difference: float = 0.0
    total_minutes: float = 0.0
    sessions: int = 0


class CombinedLifestyle(FrozenModel):
    impact: LifestyleImpact
    confidence: ConfidenceLevel
    reading_count: int = 0
    average_readings: BloodPressureAverages | None = None


class WeightTrend(FrozenModel):
    direction: TrendDirection
    change_rate: float = Field(default=0.0, description="pounds per day")
    total_change: float = 0.0
    days: float = 0.0


class BMIAssessment(FrozenModel):
    bmi: float
    category: BMICategory
    weight_kg: float
    health_risk: RiskLevel


class WeightSensitivity(FrozenModel):
    systolic_per_kg: float = 0.0
    diastolic_per_kg: float = 0.0
    weight_buckets: int = 0


class WeightCorrelation(FrozenModel):
    status: AnalysisStatus
    correlation: float = 0.0
    systolic_correlation: float = 0.0
    diastolic_correlation: float = 0.0
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    matched_readings: int = 0
    weight_trend: WeightTrend
    bmi: BMIAssessment | None = None
    sensitivity: WeightSensitivity = Field(default_factory=WeightSensitivity)
    recommendations: list[str] = Field(default_factory=list)


class LifestyleCorrelation(FrozenModel):
    smoking: SmokingCorrelation
    alcohol: AlcoholCorrelation
    cardio: CardioCorrelation
    weight: WeightCorrelation
    combined: CombinedLifestyle
    overall_impact: int = Field(ge=0, le=8)
    recommendations: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Circadian, predictive, alerts and the aggregate report
# ---------------------------------------------------------------------------


class CircadianWindowStats(FrozenModel):
    average_systolic: float
    average_diastolic: float
    average_heart_rate: float
    reading_count: int
    risk_level: RiskLevel


class CircadianAnalysis(FrozenModel):
    windows: dict[CircadianWindow, CircadianWindowStats] = Field(default_factory=dict)
    optimal_time: CircadianWindow | None = None
    concern_time: CircadianWindow | None = None
    recommendations: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


class ShortTermPrediction(FrozenModel):
    status: AnalysisStatus
    systolic: float | None = None
    diastolic: float | None = None
    systolic_trend: TrendDirection | None = None
    diastolic_trend: TrendDirection | None = None
    confidence: float = 0.0


class LongTermProjection(FrozenModel):
    status: AnalysisStatus
    projected_30_day: BloodPressureAverages | None = None
    systolic_trend: TrendDirection | None = None
    diastolic_trend: TrendDirection | None = None
    confidence: float = 0.0


class PredictiveInsights(FrozenModel):
    status: AnalysisStatus
    message: str | None = None
    short_term: ShortTermPrediction | None = None
    long_term: LongTermProjection | None = None
    confidence: float = 0.0
    risk_factors: list[str] = Field(default_factory=list)
    interventions: list[str] = Field(default_factory=list)


class MedicalAlert(FrozenModel):
    type: AlertType
    kind: AlertKind
    message: str
    reading: Reading
    timestamp: datetime


class Recommendation(FrozenModel):
    category: str
    priority: Priority
    message: str
    action: str


class DataQuality(FrozenModel):
    total_readings: int
    time_span_days: int
    average_frequency: float
    quality: DataQualityLevel
    recommendations: list[str] = Field(default_factory=list)


class AnalysisReport(FrozenModel):
    """Aggregate analysis of one journal snapshot."""

    status: Literal[AnalysisStatus.COMPLETE] = AnalysisStatus.COMPLETE
    generated_at: datetime
    data_quality: DataQuality
    risk_assessment: RiskAssessment
    trend_analysis: TrendAnalysis
    lifestyle_correlation: LifestyleCorrelation
    circadian_analysis: CircadianAnalysis
    predictive_insights: PredictiveInsights
    medical_alerts: list[MedicalAlert] = Field(default_factory=list)
    personalized_recommendations: list[Recommendation] = Field(default_factory=list)
    confidence_score: float = Field(ge=0.0, le=1.0)


class InsufficientDataReport(FrozenModel):
    """Fixed response for an empty journal."""

    status: Literal[AnalysisStatus.INSUFFICIENT_DATA] = AnalysisStatus.INSUFFICIENT_DATA
    generated_at: datetime
    message: str
    recommendations: list[str]


# ---------------------------------------------------------------------------
# Descriptive summaries
# ---------------------------------------------------------------------------


class BloodPressureStats(FrozenModel):
    average_systolic: int
    average_diastolic: int
    average_heart_rate: int
    min_systolic: int
    max_systolic: int
    min_diastolic: int
    max_diastolic: int
    total_readings: int
    period: Literal["week", "month", "all"]


class TimeRangeFilter(FrozenModel):
    """Hour-of-day range; a start after the end wraps around midnight."""

    enabled: bool = True
    start_hour: float = Field(ge=0.0, le=24.0)
    end_hour: float = Field(ge=0.0, le=24.0)
    label: str = ""


class TimeRangeStats(FrozenModel):
    time_range: TimeRangeFilter
    average_systolic: int = 0
    average_diastolic: int = 0
    average_heart_rate: int = 0
    reading_count: int = 0
    total_in_period: int = 0


class TrendSummary(FrozenModel):
    """Quick overview of the whole history, as shown next to the period statistics."""

    systolic_trend: TrendDirection = TrendDirection.STABLE
    diastolic_trend: TrendDirection = TrendDirection.STABLE
    heart_rate_trend: TrendDirection = TrendDirection.STABLE
    risk_level: RiskLevel = RiskLevel.LOW
    category: PressureCategory | None = None
    recommendations: list[str]
    insights: list[str]
