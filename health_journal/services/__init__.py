"""
Services for the journal analysis engine.

This package contains the individual analyzers, the composition service that
assembles them into one report, and the text-generation enhancement layer.
"""

from .analysis import AnalysisService, generate_advanced_analysis
from .enhancement import EnhancementService
from .summary import (
    calculate_stats,
    filter_readings_by_time_range,
    preset_time_ranges,
    summarize_trends,
)
from .text_generation import AgentTextGenerator, Result, TextGenerator

__all__ = [
    "AnalysisService",
    "generate_advanced_analysis",
    "EnhancementService",
    "AgentTextGenerator",
    "TextGenerator",
    "Result",
    "calculate_stats",
    "filter_readings_by_time_range",
    "preset_time_ranges",
    "summarize_trends",
]
