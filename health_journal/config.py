"""
Configuration management with environment variable support and validation.

Design principles:
- Every analysis constant lives on an explicit config object with documented defaults
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no API keys in code, text generation off unless a key is set)
"""

import logging
import os
from functools import lru_cache
from typing import Any, Literal, cast

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()


class RiskBands(BaseModel):
    """Blood pressure bands used by every categorical risk label (mmHg)."""

    high_systolic: float = Field(default=140.0, gt=0.0)
    high_diastolic: float = Field(default=90.0, gt=0.0)
    moderate_systolic: float = Field(default=130.0, gt=0.0)
    moderate_diastolic: float = Field(default=80.0, gt=0.0)

    @model_validator(mode="after")
    def moderate_below_high(self) -> "RiskBands":
        if self.moderate_systolic > self.high_systolic:
            raise ValueError("moderate_systolic must not exceed high_systolic")
        if self.moderate_diastolic > self.high_diastolic:
            raise ValueError("moderate_diastolic must not exceed high_diastolic")
        return self


class AlertThresholds(BaseModel):
    """Medical alert thresholds and the look-back window they apply to."""

    crisis_systolic: float = Field(default=180.0, gt=0.0)
    crisis_diastolic: float = Field(default=120.0, gt=0.0)
    stage2_systolic: float = Field(default=140.0, gt=0.0)
    stage2_diastolic: float = Field(default=90.0, gt=0.0)
    heart_rate_high: float = Field(default=100.0, gt=0.0)
    heart_rate_low: float = Field(default=50.0, gt=0.0)
    window_days: int = Field(default=3, gt=0, description="Readings from the last N days")

    @model_validator(mode="after")
    def stage2_below_crisis(self) -> "AlertThresholds":
        if self.stage2_systolic > self.crisis_systolic:
            raise ValueError("stage2_systolic must not exceed crisis_systolic")
        if self.stage2_diastolic > self.crisis_diastolic:
            raise ValueError("stage2_diastolic must not exceed crisis_diastolic")
        if self.heart_rate_low >= self.heart_rate_high:
            raise ValueError("heart_rate_low must be below heart_rate_high")
        return self


class RiskWeights(BaseModel):
    """Weights of the sub-scores combined into the overall risk."""

    current: float = Field(default=0.4, ge=0.0, le=1.0)
    historical: float = Field(default=0.2, ge=0.0, le=1.0)
    progression: float = Field(default=0.2, ge=0.0, le=1.0)
    lifestyle: float = Field(default=0.2, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "RiskWeights":
        total = self.current + self.historical + self.progression + self.lifestyle
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"risk weights must sum to 1.0, got {total:.3f}")
        return self


class AssessmentIntervals(BaseModel):
    """Days until the next recommended assessment, per overall risk level."""

    low: int = Field(default=30, gt=0)
    moderate: int = Field(default=14, gt=0)
    high: int = Field(default=7, gt=0)
    critical: int = Field(default=1, gt=0)

    def days_for(self, level: str) -> int:
        return cast(int, getattr(self, level, self.low))


class AnalysisConfig(BaseModel):
    """Configuration for the journal analysis engine with the documented defaults."""

    risk_bands: RiskBands = Field(default_factory=RiskBands)
    alert_thresholds: AlertThresholds = Field(default_factory=AlertThresholds)
    risk_weights: RiskWeights = Field(default_factory=RiskWeights)
    assessment_intervals: AssessmentIntervals = Field(default_factory=AssessmentIntervals)

    # No user height is collected anywhere, so BMI uses a fixed assumption
    assumed_height_m: float = Field(default=1.83, gt=0.5, lt=3.0)
    weight_match_window_days: float = Field(default=7.0, gt=0.0)
    weight_stable_rate_per_day: float = Field(default=0.1, ge=0.0)

    recent_window_days: int = Field(default=7, gt=0)
    stable_slope_threshold: float = Field(default=0.5, ge=0.0)
    smoking_significance_mmhg: float = Field(default=5.0, ge=0.0)
    cardio_effect_mmhg: float = Field(default=3.0, ge=0.0)
    timezone: str = Field(default="UTC", description="Zone used for calendar days and hours")

    min_trend_readings: int = Field(default=3, ge=2)
    min_progression_readings: int = Field(default=10, ge=2)
    min_predictive_readings: int = Field(default=10, ge=3)
    min_long_term_readings: int = Field(default=15, ge=2)
    min_weight_entries: int = Field(default=2, ge=2)
    min_weight_matches: int = Field(default=3, ge=2)


class TextGenerationConfig(BaseModel):
    """External text generation settings; the oracle is only consulted with an API key."""

    api_key: str | None = Field(default=None, description="Provider API key (optional)")
    model_name: str = Field(default="openai:gpt-4o-mini", description="pydantic-ai model name")
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    temperature: float = Field(default=0.2, ge=0.0, le=1.0)
    failure_threshold: int = Field(default=3, gt=0)
    recovery_timeout_seconds: int = Field(default=60, gt=0)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    text_generation: TextGenerationConfig = Field(default_factory=TextGenerationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog on top of the standard library level filter."""
    config = config or LoggingConfig()
    logging.basicConfig(format="%(message)s", level=getattr(logging, config.level))
    logging.getLogger().setLevel(getattr(logging, config.level))

    renderer: Any = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    analysis_config = AnalysisConfig(
        timezone=os.getenv("ANALYSIS_TIMEZONE", "UTC"),
        assumed_height_m=float(os.getenv("ASSUMED_HEIGHT_M", "1.83")),
    )

    text_generation_config = TextGenerationConfig(
        api_key=os.getenv("TEXT_GENERATION_API_KEY") or None,
        model_name=os.getenv("TEXT_GENERATION_MODEL", "openai:gpt-4o-mini"),
        timeout_seconds=float(os.getenv("TEXT_GENERATION_TIMEOUT_SECONDS", "10.0")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        analysis=analysis_config,
        text_generation=text_generation_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")

        if config.text_generation.enabled:
            print("✅ Text generation API key configured")
        else:
            print("ℹ️  No text generation API key, insights will use fallback text")

    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n🩺 ANALYSIS CONFIGURATION")
    print(f"Timezone: {config.analysis.timezone}")
    print(f"Assumed Height: {config.analysis.assumed_height_m} m")
    bands = config.analysis.risk_bands
    print(f"High Band: {bands.high_systolic:.0f}/{bands.high_diastolic:.0f} mmHg")
    print(f"Moderate Band: {bands.moderate_systolic:.0f}/{bands.moderate_diastolic:.0f} mmHg")

    print("\n🤖 TEXT GENERATION")
    print(f"Enabled: {config.text_generation.enabled}")
    print(f"Model: {config.text_generation.model_name}")
    print(f"Timeout: {config.text_generation.timeout_seconds}s")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
