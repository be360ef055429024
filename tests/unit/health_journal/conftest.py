"""Shared fixtures for the journal analysis tests."""

from __future__ import annotations

from datetime import datetime

import pytest
from journal_factories import NOW

from health_journal.config import AnalysisConfig


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> AnalysisConfig:
    return AnalysisConfig()
