"""
Tests for configuration management in `health_journal/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- Text generation settings and the API key switch
- Validation of bands, thresholds and weights
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from pydantic import ValidationError

from health_journal.config import (
    AlertThresholds,
    AnalysisConfig,
    AppConfig,
    AssessmentIntervals,
    RiskBands,
    RiskWeights,
    TextGenerationConfig,
    get_config,
    load_config_from_env,
)


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def clear_text_generation_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TEXT_GENERATION_API_KEY",
        "TEXT_GENERATION_MODEL",
        "TEXT_GENERATION_TIMEOUT_SECONDS",
        "ANALYSIS_TIMEZONE",
        "ASSUMED_HEIGHT_M",
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.logging.level == "INFO"
    assert config.analysis.timezone == "UTC"
    assert config.analysis.assumed_height_m == pytest.approx(1.83)
    assert config.text_generation.enabled is False


def test_production_uses_json_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    config = load_config_from_env()
    assert config.logging.level == "INFO"

    # Known level should pass through
    monkeypatch.setenv("LOG_LEVEL", "error")
    config = load_config_from_env()
    assert config.logging.level == "ERROR"


def test_text_generation_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEXT_GENERATION_API_KEY", "sk-test")
    monkeypatch.setenv("TEXT_GENERATION_MODEL", "anthropic:claude-3-5-haiku-latest")
    monkeypatch.setenv("TEXT_GENERATION_TIMEOUT_SECONDS", "4.5")

    config = load_config_from_env()

    assert config.text_generation.enabled is True
    assert config.text_generation.model_name == "anthropic:claude-3-5-haiku-latest"
    assert config.text_generation.timeout_seconds == pytest.approx(4.5)


def test_empty_api_key_disables_text_generation() -> None:
    assert TextGenerationConfig(api_key="").enabled is False


def test_analysis_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANALYSIS_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("ASSUMED_HEIGHT_M", "1.70")

    config = load_config_from_env()

    assert config.analysis.timezone == "Europe/Berlin"
    assert config.analysis.assumed_height_m == pytest.approx(1.70)


def test_documented_analysis_defaults() -> None:
    config = AnalysisConfig()

    assert (config.risk_bands.high_systolic, config.risk_bands.high_diastolic) == (140, 90)
    assert (config.risk_bands.moderate_systolic, config.risk_bands.moderate_diastolic) == (130, 80)
    assert config.alert_thresholds.crisis_systolic == 180
    assert config.alert_thresholds.window_days == 3
    assert config.risk_weights.current == pytest.approx(0.4)
    assert config.recent_window_days == 7
    assert config.stable_slope_threshold == pytest.approx(0.5)


def test_risk_bands_must_be_ordered() -> None:
    with pytest.raises(ValidationError, match="moderate_systolic must not exceed"):
        RiskBands(moderate_systolic=150)


def test_alert_thresholds_must_be_ordered() -> None:
    with pytest.raises(ValidationError, match="heart_rate_low must be below"):
        AlertThresholds(heart_rate_low=110)


def test_risk_weights_must_sum_to_one() -> None:
    with pytest.raises(ValidationError, match="must sum to 1.0"):
        RiskWeights(current=0.5)


def test_assessment_interval_lookup() -> None:
    intervals = AssessmentIntervals()

    assert intervals.days_for("moderate") == 14
    # Labels without an interval fall back to the low-risk interval
    assert intervals.days_for("unknown") == 30


def test_get_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    # First call populates cache
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(environment="production", debug=True)
