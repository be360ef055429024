"""
End-to-end demonstration of the journal analysis pipeline.

This script runs:
1. Configuration loading and validation
2. Descriptive statistics, time-range filtering and the quick trend summary
3. The full statistical analysis over synthetic journals
4. Text enhancement (generated text with an API key, fallback text without)
5. Question answering and the narrative health report

Run with: uv run python demo_analysis.py
"""

import asyncio
import random
from datetime import UTC, datetime, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from health_journal.config import (
    configure_logging,
    get_config,
    print_config_summary,
    validate_config,
)
from health_journal.domain.models import (
    AnalysisReport,
    CardioEntry,
    CigarEntry,
    DrinkEntry,
    Reading,
    WeightEntry,
)
from health_journal.services import (
    AnalysisService,
    EnhancementService,
    calculate_stats,
    preset_time_ranges,
    summarize_trends,
)
from health_journal.services.summary import time_range_stats

console = Console()


class SampleJournal:
    """Synthetic journal that reproduces a specific scenario."""

    def __init__(self, scenario: str = "healthy", days: int = 30, seed: int = 7) -> None:
        self.scenario = scenario
        self.days = days
        self.random = random.Random(seed)
        self.now = datetime.now(UTC).replace(minute=0, second=0, microsecond=0)

    def _moment(self, days_ago: int, hour: int) -> datetime:
        return (self.now - timedelta(days=days_ago)).replace(hour=hour)

    def readings(self) -> list[Reading]:
        readings = []
        for days_ago in range(self.days - 1, -1, -1):
            for hour in (7, 19):
                if self.scenario == "healthy":
                    # Stable and optimal, slightly higher in the evening
                    systolic = 114 + (3 if hour == 19 else 0)
                    diastolic = 74
                elif self.scenario == "rising":
                    # Climbs about half a point per day towards stage 2
                    systolic = 122 + (self.days - days_ago) // 2
                    diastolic = 80 + (self.days - days_ago) // 4
                else:
                    # Smoking evenings push readings up
                    smoked = days_ago % 3 == 0
                    systolic = 128 + (14 if smoked and hour == 19 else 0)
                    diastolic = 82 + (8 if smoked and hour == 19 else 0)

                readings.append(
                    Reading(
                        timestamp=self._moment(days_ago, hour),
                        systolic=systolic + self.random.randint(-3, 3),
                        diastolic=diastolic + self.random.randint(-2, 2),
                        heart_rate=68 + self.random.randint(-4, 6),
                    )
                )
        return readings

    def cigars(self) -> list[CigarEntry]:
        if self.scenario != "smoker":
            return []
        return [
            CigarEntry(timestamp=self._moment(d, 18), count=2, brand="Robusto")
            for d in range(0, self.days, 3)
        ]

    def drinks(self) -> list[DrinkEntry]:
        if self.scenario == "healthy":
            return []
        return [
            DrinkEntry(
                timestamp=self._moment(d, 20), count=3, drink_type="wine", alcohol_content=13.5
            )
            for d in range(1, self.days, 4)
        ]

    def cardio(self) -> list[CardioEntry]:
        if self.scenario != "healthy":
            return []
        return [
            CardioEntry(timestamp=self._moment(d, 6), activity="running", minutes=35)
            for d in range(0, self.days, 2)
        ]

    def weights(self) -> list[WeightEntry]:
        start = 172.0 if self.scenario == "healthy" else 205.0
        step = -0.05 if self.scenario == "healthy" else 0.15
        return [
            WeightEntry(
                timestamp=self._moment(d, 7), weight=round(start + step * (self.days - d), 1)
            )
            for d in range(self.days - 1, -1, -7)
        ]


async def demo_configuration() -> bool:
    """Configuration loading and validation."""

    console.print(Panel("🔧 Configuration", style="blue"))

    try:
        validate_config()
        config = get_config()
        configure_logging(config.logging)

        if not config.text_generation.enabled:
            console.print(
                "ℹ️  TEXT_GENERATION_API_KEY not set, generated text will use the fallbacks",
                style="yellow",
            )

        console.print("✅ Configuration loaded successfully", style="green")
        print_config_summary()
        return True

    except Exception as e:
        console.print(f"❌ Configuration failed: {e}", style="red")
        return False


async def demo_statistics() -> bool:
    """Period statistics and hour-of-day ranges."""

    console.print(Panel("📊 Descriptive Statistics", style="blue"))

    try:
        journal = SampleJournal("healthy")
        readings = journal.readings()

        table = Table(title="Period Statistics")
        table.add_column("Period", style="cyan")
        table.add_column("Average", style="green")
        table.add_column("Range (systolic)", style="magenta")
        table.add_column("Readings", style="yellow")

        for period in ("week", "month", "all"):
            stats = calculate_stats(readings, period, journal.now)
            table.add_row(
                period,
                f"{stats.average_systolic}/{stats.average_diastolic}",
                f"{stats.min_systolic}-{stats.max_systolic}",
                str(stats.total_readings),
            )
        console.print(table)

        ranges = Table(title="Time Ranges")
        ranges.add_column("Range", style="cyan")
        ranges.add_column("Average", style="green")
        ranges.add_column("Readings", style="yellow")

        timezone = get_config().analysis.timezone
        for preset in preset_time_ranges()[:5]:
            selected = preset.model_copy(update={"enabled": True})
            stats = time_range_stats(readings, selected, timezone=timezone, now=journal.now)
            ranges.add_row(
                preset.label,
                f"{stats.average_systolic}/{stats.average_diastolic}",
                f"{stats.reading_count}/{stats.total_in_period}",
            )
        console.print(ranges)

        summary = summarize_trends(readings, config=get_config().analysis)
        console.print(
            f"\n📈 Trend summary: systolic {summary.systolic_trend.value}, "
            f"risk {summary.risk_level.value}"
        )
        for insight in summary.insights:
            console.print(f"  • {insight}")
        return True

    except Exception as e:
        console.print(f"❌ Statistics failed: {e}", style="red")
        return False


def _print_report(scenario: str, report: AnalysisReport) -> None:
    risk = report.risk_assessment
    lifestyle = report.lifestyle_correlation
    systolic = report.trend_analysis.systolic

    table = Table(title=f"Analysis: {scenario}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Overall Risk", risk.overall.value.upper())
    table.add_row("Risk Score", f"{risk.risk_score:.2f}")
    table.add_row("Current / Historical", f"{risk.current.value} / {risk.historical.value}")
    table.add_row("Systolic Trend", systolic.direction.value if systolic else "n/a")
    table.add_row("Smoking Impact", lifestyle.smoking.impact.value)
    table.add_row("Cardio Impact", lifestyle.cardio.impact.value)
    table.add_row("Weight Trend", lifestyle.weight.weight_trend.direction.value)
    table.add_row("Lifestyle Score", str(lifestyle.overall_impact))
    optimal = report.circadian_analysis.optimal_time
    table.add_row("Optimal Time", optimal.value if optimal else "n/a")
    table.add_row("Data Quality", report.data_quality.quality)
    table.add_row("Alerts", str(len(report.medical_alerts)))
    table.add_row("Confidence", f"{report.confidence_score:.0%}")
    table.add_row("Next Assessment", f"in {risk.next_assessment.days} days")
    console.print(table)

    for recommendation in report.personalized_recommendations:
        console.print(f"  • [{recommendation.priority}] {recommendation.message}")


async def demo_analysis() -> bool:
    """Full analysis over each synthetic scenario."""

    console.print(Panel("🩺 Journal Analysis", style="blue"))

    try:
        service = AnalysisService(get_config().analysis)

        for scenario in ("healthy", "rising", "smoker"):
            journal = SampleJournal(scenario)
            report = service.analyze(
                journal.readings(),
                cigar_entries=journal.cigars(),
                drink_entries=journal.drinks(),
                weight_entries=journal.weights(),
                cardio_entries=journal.cardio(),
                now=journal.now,
            )
            if not isinstance(report, AnalysisReport):
                console.print(f"❌ {scenario}: {report.message}", style="red")
                return False
            _print_report(scenario, report)

        empty = service.analyze([])
        console.print(f"\nEmpty journal: {empty.status.value}", style="yellow")
        return True

    except Exception as e:
        console.print(f"❌ Analysis failed: {e}", style="red")
        return False


async def demo_enhancement() -> bool:
    """Generated insights, a question and the narrative report."""

    console.print(Panel("🤖 Text Enhancement", style="blue"))

    try:
        config = get_config()
        service = EnhancementService(
            AnalysisService(config.analysis), config=config.text_generation
        )
        journal = SampleJournal("smoker")
        readings = journal.readings()

        console.print("🔍 Generating health report...", style="yellow")
        document = await service.generate_health_report(
            readings,
            cigar_entries=journal.cigars(),
            drink_entries=journal.drinks(),
            weight_entries=journal.weights(),
            now=journal.now,
        )

        enhanced = document.analysis
        if enhanced.llm_insights is not None:
            console.print(f"\n💡 Insights ({enhanced.llm_insights.source}):")
            console.print(enhanced.llm_insights.text)
        if enhanced.llm_recommendations is not None:
            console.print(f"\n📝 Recommendations ({enhanced.llm_recommendations.source}):")
            for line in enhanced.llm_recommendations.recommendations:
                console.print(f"  • {line}")
        if enhanced.enhancement_error:
            console.print(f"⚠️  Enhancement error: {enhanced.enhancement_error}", style="yellow")

        console.print(f"\n📄 Report ({document.source}):")
        console.print(document.report)

        answer = await service.answer_question(
            "Is my blood pressure too high?", readings, cigar_entries=journal.cigars()
        )
        console.print(f"\n❓ {answer.question}")
        console.print(f"{answer.answer.text} ({answer.answer.source})")
        return True

    except Exception as e:
        console.print(f"❌ Enhancement failed: {e}", style="red")
        return False


async def run_all_demos() -> None:
    """Run every demo step and summarize."""

    console.print(Panel("🧪 Health Journal Insights - Demo", style="bold blue"))

    steps = [
        ("Configuration", demo_configuration),
        ("Statistics", demo_statistics),
        ("Analysis", demo_analysis),
        ("Enhancement", demo_enhancement),
    ]

    results = []

    for step_name, step_func in steps:
        console.print(f"\n{'=' * 60}")
        try:
            result = await step_func()
            results.append((step_name, result))
        except KeyboardInterrupt:
            console.print("\n⏹️  Demo interrupted by user", style="yellow")
            break

    console.print(f"\n{'=' * 60}")
    console.print(Panel("📋 Demo Summary", style="bold"))

    summary_table = Table()
    summary_table.add_column("Step", style="cyan")
    summary_table.add_column("Result", style="white")

    passed = 0
    for step_name, result in results:
        if result:
            summary_table.add_row(step_name, "✅ OK")
            passed += 1
        else:
            summary_table.add_row(step_name, "❌ FAILED")

    console.print(summary_table)
    console.print(f"\n🎯 Results: {passed}/{len(results)} steps completed")


if __name__ == "__main__":
    try:
        asyncio.run(run_all_demos())
    except KeyboardInterrupt:
        console.print("\n👋 Demo stopped by user", style="yellow")
