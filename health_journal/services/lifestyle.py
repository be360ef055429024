"""
Lifestyle correlation analysis.

Smoking, alcohol and cardio are compared on calendar-day buckets: the readings
taken on "exposed" days (a qualifying entry that local day) against the rest.
Weight is matched per reading to the nearest weigh-in instead, since weight
changes slowly and is rarely logged on the same day as a reading.

Every analyzer returns a sentinel impact (no_data / insufficient_data) when one
side of its comparison is empty; none of them divide on an empty bucket.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Literal

import structlog

from health_journal.config import AnalysisConfig
from health_journal.domain.models import (
    AlcoholCorrelation,
    AnalysisStatus,
    BloodPressureAverages,
    BMIAssessment,
    BMICategory,
    CardioCorrelation,
    CardioEntry,
    CigarEntry,
    CombinedLifestyle,
    ConfidenceLevel,
    DrinkEntry,
    DrinkingImpact,
    LifestyleCorrelation,
    LifestyleImpact,
    Reading,
    RiskLevel,
    SmokingCorrelation,
    TrendDirection,
    WeightCorrelation,
    WeightEntry,
    WeightSensitivity,
    WeightTrend,
)
from health_journal.services.numeric import (
    local_date,
    mean,
    pearson_correlation,
    round_half_up,
    safe_ratio,
)
from health_journal.services.risk import classify_pressure

logger = structlog.get_logger(__name__)

POUNDS_TO_KG = 0.45359237

DRINKING_TIERS: dict[Literal["heavy", "moderate", "light"], int] = {
    "heavy": 4,
    "moderate": 2,
    "light": 1,
}

BMI_CUTOFFS: list[tuple[float, BMICategory]] = [
    (16.5, BMICategory.SEVERELY_UNDERWEIGHT),
    (18.5, BMICategory.UNDERWEIGHT),
    (25.0, BMICategory.NORMAL),
    (30.0, BMICategory.OVERWEIGHT),
    (35.0, BMICategory.OBESE_CLASS_I),
    (40.0, BMICategory.OBESE_CLASS_II),
]

BMI_BASE_RISK: dict[BMICategory, RiskLevel] = {
    BMICategory.SEVERELY_UNDERWEIGHT: RiskLevel.HIGH,
    BMICategory.UNDERWEIGHT: RiskLevel.MODERATE,
    BMICategory.NORMAL: RiskLevel.LOW,
    BMICategory.OVERWEIGHT: RiskLevel.MODERATE,
    BMICategory.OBESE_CLASS_I: RiskLevel.HIGH,
    BMICategory.OBESE_CLASS_II: RiskLevel.HIGH,
    BMICategory.OBESE_CLASS_III: RiskLevel.CRITICAL,
}

_RISK_STEPS = [RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.HIGH, RiskLevel.CRITICAL]
_UNDERWEIGHT = {BMICategory.SEVERELY_UNDERWEIGHT, BMICategory.UNDERWEIGHT}
_OVERWEIGHT = {
    BMICategory.OVERWEIGHT,
    BMICategory.OBESE_CLASS_I,
    BMICategory.OBESE_CLASS_II,
    BMICategory.OBESE_CLASS_III,
}


# ---------------------------------------------------------------------------
# Day-bucket helpers
# ---------------------------------------------------------------------------


def _partition_by_day(
    readings: Sequence[Reading], exposed_days: set[date], timezone: str
) -> tuple[list[Reading], list[Reading]]:
    exposed: list[Reading] = []
    unexposed: list[Reading] = []
    for reading in readings:
        if local_date(reading.timestamp, timezone) in exposed_days:
            exposed.append(reading)
        else:
            unexposed.append(reading)
    return exposed, unexposed


def _averages(readings: Iterable[Reading]) -> BloodPressureAverages:
    readings = list(readings)
    return BloodPressureAverages(
        systolic=round(mean(r.systolic for r in readings), 2),
        diastolic=round(mean(r.diastolic for r in readings), 2),
    )


def _difference(
    first: Sequence[Reading], second: Sequence[Reading]
) -> tuple[float, float]:
    systolic = mean(r.systolic for r in first) - mean(r.systolic for r in second)
    diastolic = mean(r.diastolic for r in first) - mean(r.diastolic for r in second)
    return systolic, diastolic


def _band_impact(averages: BloodPressureAverages, config: AnalysisConfig) -> LifestyleImpact:
    level = classify_pressure(averages.systolic, averages.diastolic, config.risk_bands)
    if level == RiskLevel.HIGH:
        return LifestyleImpact.SIGNIFICANT
    if level == RiskLevel.MODERATE:
        return LifestyleImpact.MODERATE
    return LifestyleImpact.MINIMAL


# ---------------------------------------------------------------------------
# Smoking, alcohol, cardio
# ---------------------------------------------------------------------------


def analyze_smoking(
    readings: Sequence[Reading], cigar_entries: Sequence[CigarEntry], config: AnalysisConfig
) -> SmokingCorrelation:
    """Mean pressure on days with any cigar entry minus days without."""
    if not cigar_entries:
        return SmokingCorrelation(impact=LifestyleImpact.NONE, confidence=ConfidenceLevel.LOW)

    smoking_days = {local_date(e.timestamp, config.timezone) for e in cigar_entries}
    exposed, unexposed = _partition_by_day(readings, smoking_days, config.timezone)

    if not exposed or not unexposed:
        return SmokingCorrelation(
            impact=LifestyleImpact.INSUFFICIENT_DATA,
            confidence=ConfidenceLevel.LOW,
            smoking_days_readings=len(exposed),
            non_smoking_days_readings=len(unexposed),
        )

    systolic_diff, diastolic_diff = _difference(exposed, unexposed)
    impact = (
        LifestyleImpact.SIGNIFICANT
        if abs(systolic_diff) >= config.smoking_significance_mmhg
        else LifestyleImpact.MODERATE
    )

    return SmokingCorrelation(
        correlation=round((systolic_diff + diastolic_diff) / 2, 2),
        impact=impact,
        confidence=ConfidenceLevel.HIGH if len(exposed) > 3 else ConfidenceLevel.MEDIUM,
        smoking_days_readings=len(exposed),
        non_smoking_days_readings=len(unexposed),
        average_difference=BloodPressureAverages(
            systolic=round(systolic_diff, 2), diastolic=round(diastolic_diff, 2)
        ),
    )


def _drinking_days(
    drink_entries: Sequence[DrinkEntry], threshold: int, timezone: str
) -> set[date]:
    """Local days with at least one entry reaching the threshold on its own."""
    return {
        local_date(entry.timestamp, timezone)
        for entry in drink_entries
        if entry.count >= threshold
    }


def _drinking_tier_impact(
    readings: Sequence[Reading],
    drink_entries: Sequence[DrinkEntry],
    threshold: int,
    category: Literal["heavy", "moderate", "light"],
    config: AnalysisConfig,
) -> DrinkingImpact:
    drinking_days = _drinking_days(drink_entries, threshold, config.timezone)
    if not drinking_days:
        return DrinkingImpact(
            category=category, impact=LifestyleImpact.NO_DATA, confidence=ConfidenceLevel.LOW
        )

    exposed, unexposed = _partition_by_day(readings, drinking_days, config.timezone)
    if not exposed:
        return DrinkingImpact(
            category=category, impact=LifestyleImpact.NO_DATA, confidence=ConfidenceLevel.LOW
        )
    if not unexposed:
        return DrinkingImpact(
            category=category,
            impact=LifestyleImpact.INSUFFICIENT_DATA,
            confidence=ConfidenceLevel.LOW,
            reading_count=len(exposed),
        )

    averages = _averages(exposed)
    systolic_diff, diastolic_diff = _difference(exposed, unexposed)

    return DrinkingImpact(
        category=category,
        impact=_band_impact(averages, config),
        confidence=ConfidenceLevel.HIGH if len(exposed) > 2 else ConfidenceLevel.MEDIUM,
        reading_count=len(exposed),
        average_readings=averages,
        average_difference=BloodPressureAverages(
            systolic=round(systolic_diff, 2), diastolic=round(diastolic_diff, 2)
        ),
    )


def analyze_alcohol(
    readings: Sequence[Reading], drink_entries: Sequence[DrinkEntry], config: AnalysisConfig
) -> AlcoholCorrelation:
    """Per-tier comparison of days with a heavy (4+), moderate (2+) or light (1+) drink entry."""
    if not drink_entries:
        return AlcoholCorrelation(
            **{
                f"{category}_drinking": DrinkingImpact(
                    category=category,
                    impact=LifestyleImpact.NO_DATA,
                    confidence=ConfidenceLevel.LOW,
                )
                for category in ("heavy", "moderate", "light")
            },
            no_drinking=DrinkingImpact(
                category="none", impact=LifestyleImpact.NO_DATA, confidence=ConfidenceLevel.LOW
            ),
        )

    tiers = {
        f"{category}_drinking": _drinking_tier_impact(
            readings, drink_entries, threshold, category, config
        )
        for category, threshold in DRINKING_TIERS.items()
    }

    any_drinks = {local_date(e.timestamp, config.timezone) for e in drink_entries}
    _, sober = _partition_by_day(readings, any_drinks, config.timezone)
    if sober:
        averages = _averages(sober)
        no_drinking = DrinkingImpact(
            category="none",
            impact=_band_impact(averages, config),
            confidence=ConfidenceLevel.HIGH if len(sober) > 2 else ConfidenceLevel.MEDIUM,
            reading_count=len(sober),
            average_readings=averages,
        )
    else:
        no_drinking = DrinkingImpact(
            category="none", impact=LifestyleImpact.NO_DATA, confidence=ConfidenceLevel.LOW
        )

    return AlcoholCorrelation(**tiers, no_drinking=no_drinking)


def analyze_cardio(
    readings: Sequence[Reading], cardio_entries: Sequence[CardioEntry], config: AnalysisConfig
) -> CardioCorrelation:
    """Mean pressure on non-cardio days minus cardio days; positive means cardio helps."""
    if not cardio_entries:
        return CardioCorrelation(impact=LifestyleImpact.NO_DATA, confidence=ConfidenceLevel.LOW)

    total_minutes = round(sum(e.minutes for e in cardio_entries), 2)
    cardio_days = {local_date(e.timestamp, config.timezone) for e in cardio_entries}
    exposed, unexposed = _partition_by_day(readings, cardio_days, config.timezone)

    if not exposed or not unexposed:
        return CardioCorrelation(
            impact=LifestyleImpact.INSUFFICIENT_DATA,
            confidence=ConfidenceLevel.LOW,
            cardio_days_readings=len(exposed),
            non_cardio_days_readings=len(unexposed),
            total_minutes=total_minutes,
            sessions=len(cardio_entries),
        )

    systolic_diff, diastolic_diff = _difference(unexposed, exposed)
    combined = (systolic_diff + diastolic_diff) / 2

    impact = LifestyleImpact.NEUTRAL
    if combined > config.cardio_effect_mmhg:
        impact = LifestyleImpact.BENEFICIAL
    elif combined < -config.cardio_effect_mmhg:
        impact = LifestyleImpact.POTENTIALLY_NEGATIVE

    return CardioCorrelation(
        impact=impact,
        confidence=(
            ConfidenceLevel.MEDIUM if len(exposed) + len(unexposed) > 6 else ConfidenceLevel.LOW
        ),
        cardio_days_readings=len(exposed),
        non_cardio_days_readings=len(unexposed),
        average_difference=BloodPressureAverages(
            systolic=round(systolic_diff, 2), diastolic=round(diastolic_diff, 2)
        ),
        combined_difference=round(combined, 2),
        total_minutes=total_minutes,
        sessions=len(cardio_entries),
    )


def analyze_combined(
    readings: Sequence[Reading],
    cigar_entries: Sequence[CigarEntry],
    drink_entries: Sequence[DrinkEntry],
    config: AnalysisConfig,
) -> CombinedLifestyle:
    """Readings on any smoking or drinking day, banded against the moderate threshold."""
    if not cigar_entries and not drink_entries:
        return CombinedLifestyle(impact=LifestyleImpact.NO_DATA, confidence=ConfidenceLevel.LOW)

    days = {
        local_date(e.timestamp, config.timezone) for e in [*cigar_entries, *drink_entries]
    }
    exposed, _ = _partition_by_day(readings, days, config.timezone)
    if not exposed:
        return CombinedLifestyle(
            impact=LifestyleImpact.INSUFFICIENT_DATA, confidence=ConfidenceLevel.LOW
        )

    averages = _averages(exposed)
    elevated = classify_pressure(
        averages.systolic, averages.diastolic, config.risk_bands
    ) in {RiskLevel.MODERATE, RiskLevel.HIGH}

    return CombinedLifestyle(
        impact=LifestyleImpact.ELEVATED if elevated else LifestyleImpact.NONE,
        confidence=ConfidenceLevel.HIGH if len(exposed) > 3 else ConfidenceLevel.MEDIUM,
        reading_count=len(exposed),
        average_readings=averages,
    )


# ---------------------------------------------------------------------------
# Weight
# ---------------------------------------------------------------------------


def nearest_weight(
    reading: Reading, weight_entries: Sequence[WeightEntry], window_days: float
) -> WeightEntry | None:
    """The weigh-in closest in time to a reading, if within the match window."""
    if not weight_entries:
        return None
    closest = min(
        weight_entries, key=lambda w: abs((w.timestamp - reading.timestamp).total_seconds())
    )
    gap_days = abs((closest.timestamp - reading.timestamp).total_seconds()) / 86400
    return closest if gap_days <= window_days else None


def weight_trend(weight_entries: Sequence[WeightEntry], config: AnalysisConfig) -> WeightTrend:
    """Average daily change between the first and last weigh-in."""
    if len(weight_entries) < config.min_weight_entries:
        return WeightTrend(direction=TrendDirection.INSUFFICIENT_DATA)

    ordered = sorted(weight_entries, key=lambda w: w.timestamp)
    total_change = ordered[-1].weight - ordered[0].weight
    days = (ordered[-1].timestamp - ordered[0].timestamp).total_seconds() / 86400
    rate = safe_ratio(total_change, days)

    direction = TrendDirection.STABLE
    if abs(rate) > config.weight_stable_rate_per_day:
        direction = TrendDirection.INCREASING if rate > 0 else TrendDirection.DECREASING

    return WeightTrend(
        direction=direction,
        change_rate=round(rate, 3),
        total_change=round(total_change, 2),
        days=round(days, 2),
    )


def bmi_category(bmi: float) -> BMICategory:
    for cutoff, category in BMI_CUTOFFS:
        if bmi < cutoff:
            return category
    return BMICategory.OBESE_CLASS_III


def _step_risk(level: RiskLevel, steps: int) -> RiskLevel:
    index = _RISK_STEPS.index(level) + steps
    return _RISK_STEPS[max(0, min(index, len(_RISK_STEPS) - 1))]


def bmi_health_risk(category: BMICategory, direction: TrendDirection) -> RiskLevel:
    """Base risk of the BMI category, moved one step by a trend toward or away from normal."""
    base = BMI_BASE_RISK[category]
    if category in _OVERWEIGHT:
        if direction == TrendDirection.INCREASING:
            return _step_risk(base, 1)
        if direction == TrendDirection.DECREASING:
            return _step_risk(base, -1)
    if category in _UNDERWEIGHT:
        if direction == TrendDirection.DECREASING:
            return _step_risk(base, 1)
        if direction == TrendDirection.INCREASING:
            return _step_risk(base, -1)
    return base


def assess_bmi(
    weight_lb: float, direction: TrendDirection, config: AnalysisConfig
) -> BMIAssessment:
    weight_kg = weight_lb * POUNDS_TO_KG
    bmi = weight_kg / config.assumed_height_m**2
    category = bmi_category(bmi)
    return BMIAssessment(
        bmi=round(bmi, 1),
        category=category,
        weight_kg=round(weight_kg, 2),
        health_risk=bmi_health_risk(category, direction),
    )


def weight_sensitivity(matches: Sequence[tuple[Reading, WeightEntry]]) -> WeightSensitivity:
    """Average mmHg change per kg across adjacent whole-kilogram weight buckets."""
    buckets: dict[int, list[Reading]] = defaultdict(list)
    for reading, weight in matches:
        buckets[round_half_up(weight.weight * POUNDS_TO_KG)].append(reading)

    if len(buckets) < 2:
        return WeightSensitivity(weight_buckets=len(buckets))

    keys = sorted(buckets)
    systolic_slopes = []
    diastolic_slopes = []
    for lower, upper in zip(keys, keys[1:]):
        delta_kg = upper - lower
        systolic_diff, diastolic_diff = _difference(buckets[upper], buckets[lower])
        systolic_slopes.append(safe_ratio(systolic_diff, delta_kg))
        diastolic_slopes.append(safe_ratio(diastolic_diff, delta_kg))

    return WeightSensitivity(
        systolic_per_kg=round(mean(systolic_slopes), 2),
        diastolic_per_kg=round(mean(diastolic_slopes), 2),
        weight_buckets=len(keys),
    )


def weight_recommendations(
    correlation: float,
    trend: WeightTrend,
    bmi: BMIAssessment | None,
    sensitivity: WeightSensitivity,
) -> list[str]:
    recommendations = []

    if correlation > 0.5:
        recommendations.append(
            f"Your blood pressure rises with your weight (correlation {correlation:.2f}). "
            "Weight management is likely to help lower your readings."
        )
    elif correlation < -0.5:
        recommendations.append(
            f"Your blood pressure moves opposite to your weight (correlation {correlation:.2f}). "
            "Discuss this unusual pattern with your healthcare provider."
        )

    if bmi is not None:
        if bmi.bmi >= 30:
            recommendations.append(
                f"Your estimated BMI of {bmi.bmi:.1f} is in the obese range. Even a 5-10% "
                "weight reduction can meaningfully lower blood pressure."
            )
        elif bmi.bmi >= 25:
            recommendations.append(
                f"Your estimated BMI of {bmi.bmi:.1f} is in the overweight range. Gradual weight "
                "loss through diet and activity can lower blood pressure."
            )
        elif bmi.bmi < 18.5:
            recommendations.append(
                f"Your estimated BMI of {bmi.bmi:.1f} is in the underweight range. Consider "
                "discussing nutrition with your healthcare provider."
            )

        if bmi.bmi >= 25 and trend.direction == TrendDirection.INCREASING:
            recommendations.append(
                f"Your weight is trending upward at {trend.change_rate * 7:.1f} lb/week. "
                "Reversing this trend may help your blood pressure."
            )
        elif bmi.bmi >= 25 and trend.direction == TrendDirection.DECREASING:
            recommendations.append("Your weight is trending downward - keep up the progress.")

    if sensitivity.systolic_per_kg > 1:
        recommendations.append(
            f"Each kilogram of weight change corresponds to roughly "
            f"{sensitivity.systolic_per_kg:.1f} mmHg systolic in your readings."
        )

    return recommendations


def _weight_confidence(matched: int) -> ConfidenceLevel:
    if matched >= 10:
        return ConfidenceLevel.HIGH
    if matched >= 5:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def analyze_weight(
    readings: Sequence[Reading], weight_entries: Sequence[WeightEntry], config: AnalysisConfig
) -> WeightCorrelation:
    """Correlate readings with their nearest weigh-in, plus BMI and weight trend."""
    if not weight_entries:
        return WeightCorrelation(
            status=AnalysisStatus.NO_DATA,
            weight_trend=WeightTrend(direction=TrendDirection.INSUFFICIENT_DATA),
        )

    trend = weight_trend(weight_entries, config)
    latest = max(weight_entries, key=lambda w: w.timestamp)
    bmi = assess_bmi(latest.weight, trend.direction, config)

    matches: list[tuple[Reading, WeightEntry]] = []
    for reading in readings:
        weight = nearest_weight(reading, weight_entries, config.weight_match_window_days)
        if weight is not None:
            matches.append((reading, weight))

    if len(weight_entries) < config.min_weight_entries or len(matches) < config.min_weight_matches:
        return WeightCorrelation(
            status=AnalysisStatus.INSUFFICIENT_DATA,
            matched_readings=len(matches),
            weight_trend=trend,
            bmi=bmi,
            recommendations=weight_recommendations(0.0, trend, bmi, WeightSensitivity()),
        )

    weights = [w.weight for _, w in matches]
    systolic_r = pearson_correlation([r.systolic for r, _ in matches], weights)
    diastolic_r = pearson_correlation([r.diastolic for r, _ in matches], weights)
    correlation = (systolic_r + diastolic_r) / 2
    sensitivity = weight_sensitivity(matches)

    logger.debug(
        "weight_correlated",
        matched=len(matches),
        correlation=round(correlation, 3),
        buckets=sensitivity.weight_buckets,
    )

    return WeightCorrelation(
        status=AnalysisStatus.COMPLETE,
        correlation=round(correlation, 3),
        systolic_correlation=round(systolic_r, 3),
        diastolic_correlation=round(diastolic_r, 3),
        confidence=_weight_confidence(len(matches)),
        matched_readings=len(matches),
        weight_trend=trend,
        bmi=bmi,
        sensitivity=sensitivity,
        recommendations=weight_recommendations(correlation, trend, bmi, sensitivity),
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def lifestyle_impact_score(smoking: SmokingCorrelation, alcohol: AlcoholCorrelation) -> int:
    score = 0
    if smoking.impact == LifestyleImpact.SIGNIFICANT:
        score += 3
    elif smoking.impact == LifestyleImpact.MODERATE:
        score += 2

    if alcohol.heavy_drinking.impact == LifestyleImpact.SIGNIFICANT:
        score += 3
    elif alcohol.moderate_drinking.impact == LifestyleImpact.MODERATE:
        score += 2

    return min(score, 8)


def lifestyle_recommendations(
    smoking: SmokingCorrelation,
    alcohol: AlcoholCorrelation,
    cardio: CardioCorrelation,
    weight: WeightCorrelation,
) -> list[str]:
    recommendations = []
    if smoking.impact == LifestyleImpact.SIGNIFICANT:
        recommendations.append(
            "Smoking cessation should be your top priority for blood pressure management"
        )
    if alcohol.heavy_drinking.impact == LifestyleImpact.SIGNIFICANT:
        recommendations.append("Reduce alcohol consumption to moderate levels (1-2 drinks per day)")
    if cardio.impact == LifestyleImpact.BENEFICIAL:
        recommendations.append(
            "Your blood pressure is lower on cardio days - keep exercise a regular habit"
        )
    elif cardio.impact == LifestyleImpact.POTENTIALLY_NEGATIVE:
        recommendations.append(
            "Your blood pressure is higher on cardio days. Measure at rest, well after "
            "exercise, and review workout intensity with your healthcare provider"
        )
    recommendations.extend(weight.recommendations)
    return recommendations


def lifestyle_pattern_insights(
    readings: Sequence[Reading],
    cigar_entries: Sequence[CigarEntry],
    drink_entries: Sequence[DrinkEntry],
    config: AnalysisConfig,
) -> list[str]:
    """Plain-language observations about consumption levels on reading days."""
    insights: list[str] = []
    if not readings or (not cigar_entries and not drink_entries):
        return insights

    bands = config.risk_bands
    tz = config.timezone

    if cigar_entries:
        # Mean count per logged entry, worded as a daily amount in the text
        per_entry = mean(e.count for e in cigar_entries)
        days = {local_date(e.timestamp, tz) for e in cigar_entries}
        on_days, _ = _partition_by_day(readings, days, tz)
        if on_days:
            avg = _averages(on_days)
            level = classify_pressure(avg.systolic, avg.diastolic, bands)
            if per_entry >= 3 and level in {RiskLevel.MODERATE, RiskLevel.HIGH}:
                insights.append(
                    f"High cigar consumption ({per_entry:.1f} cigars/day) may be contributing "
                    f"to elevated blood pressure readings ({avg.systolic:.0f}/"
                    f"{avg.diastolic:.0f} mmHg). Consider reducing frequency."
                )
            elif 1 <= per_entry < 3 and level == RiskLevel.HIGH:
                insights.append(
                    f"Regular cigar smoking ({per_entry:.1f} cigars/day) combined with high "
                    "blood pressure readings suggests monitoring the relationship between "
                    "smoking and your cardiovascular health."
                )

    if drink_entries:
        # Per entry as well, not summed per day
        per_entry = mean(e.count for e in drink_entries)
        abv_values = [e.alcohol_content for e in drink_entries if e.alcohol_content]
        average_abv = mean(abv_values)
        days = {local_date(e.timestamp, tz) for e in drink_entries}
        on_days, _ = _partition_by_day(readings, days, tz)
        if on_days:
            avg = _averages(on_days)
            level = classify_pressure(avg.systolic, avg.diastolic, bands)
            elevated = level in {RiskLevel.MODERATE, RiskLevel.HIGH}
            if per_entry >= 4 and elevated:
                insights.append(
                    f"High alcohol consumption ({per_entry:.1f} drinks/day) may be contributing "
                    f"to elevated blood pressure readings ({avg.systolic:.0f}/"
                    f"{avg.diastolic:.0f} mmHg). Consider reducing intake."
                )
            elif 2 <= per_entry < 4 and level == RiskLevel.HIGH:
                insights.append(
                    f"Regular alcohol consumption ({per_entry:.1f} drinks/day) with high blood "
                    "pressure readings suggests monitoring the relationship between drinking "
                    "and your cardiovascular health."
                )
            if average_abv >= 15 and elevated:
                insights.append(
                    f"High-alcohol content drinks ({average_abv:.1f}% ABV average) may be "
                    "contributing to elevated blood pressure. Consider switching to "
                    "lower-alcohol alternatives."
                )

    combined = analyze_combined(readings, cigar_entries, drink_entries, config)
    if combined.impact == LifestyleImpact.ELEVATED:
        insights.append(
            "Days with lifestyle activities (smoking/drinking) show elevated blood pressure "
            "readings. Consider the cumulative effects of these activities on your "
            "cardiovascular health."
        )

    return insights


def analyze_lifestyle(
    readings: Sequence[Reading],
    config: AnalysisConfig,
    cigar_entries: Sequence[CigarEntry] = (),
    drink_entries: Sequence[DrinkEntry] = (),
    cardio_entries: Sequence[CardioEntry] = (),
    weight_entries: Sequence[WeightEntry] = (),
) -> LifestyleCorrelation:
    """Run every lifestyle analyzer over the same reading history."""
    smoking = analyze_smoking(readings, cigar_entries, config)
    alcohol = analyze_alcohol(readings, drink_entries, config)
    cardio = analyze_cardio(readings, cardio_entries, config)
    weight = analyze_weight(readings, weight_entries, config)
    combined = analyze_combined(readings, cigar_entries, drink_entries, config)

    return LifestyleCorrelation(
        smoking=smoking,
        alcohol=alcohol,
        cardio=cardio,
        weight=weight,
        combined=combined,
        overall_impact=lifestyle_impact_score(smoking, alcohol),
        recommendations=lifestyle_recommendations(smoking, alcohol, cardio, weight),
        insights=lifestyle_pattern_insights(readings, cigar_entries, drink_entries, config),
    )
