"""
Pytest Configuration and Fixtures for the Energy AI Engine

Provides shared fixtures for:
- Seeded corpus synthesis with a fixed reference time
- Hand-built feature frames with known relationships
- Test settings and orchestrators over in-memory storage
"""

import os
import sys
from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest

# Add repository root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def synthesizer():
    """Seeded synthesizer with a fixed reference time."""
    from energy_ai.data.dataset_generator import DatasetSynthesizer

    return DatasetSynthesizer(seed=42, now=FIXED_NOW)


@pytest.fixture
def sample_corpus(synthesizer):
    """300 seeded synthetic observations."""
    return synthesizer.generate(300)


@pytest.fixture
def linear_frame() -> pd.DataFrame:
    """
    Frame whose target is an exact linear function of the features.

    energy = 2 + 1.5·temperature + 0.5·hour + 3·household
    """
    rng = np.random.default_rng(0)
    n = 60
    temperature = rng.uniform(-5, 35, n)
    hour = rng.integers(0, 24, n)
    household = rng.integers(1, 7, n)

    return pd.DataFrame({
        "temperature": temperature,
        "hour_of_day": hour,
        "household_size": household,
        "energy_consumption_kwh": 2 + 1.5 * temperature + 0.5 * hour + 3 * household,
    })


@pytest.fixture
def quadratic_frame() -> pd.DataFrame:
    """
    Frame with a quadratic temperature effect and no household effect.

    energy = 10 + 0.1·temperature² + hour
    """
    rng = np.random.default_rng(1)
    n = 80
    temperature = rng.uniform(-10, 35, n)
    hour = rng.integers(0, 24, n)
    household = rng.integers(1, 7, n)

    return pd.DataFrame({
        "temperature": temperature,
        "hour_of_day": hour,
        "household_size": household,
        "energy_consumption_kwh": 10 + 0.1 * temperature ** 2 + hour,
    })


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    from energy_ai.config.settings import Settings

    return Settings(
        environment="test",
        default_dataset_size=300,
        pattern_sample_limit=200,
        dashboard_recent_predictions=5,
    )


@pytest.fixture
def memory_repository():
    from energy_ai.repositories.memory_repository import InMemoryDatasetRepository

    return InMemoryDatasetRepository()


@pytest.fixture
def orchestrator(memory_repository, test_settings):
    """Orchestrator over in-memory storage with seeded synthesis."""
    from energy_ai.data.dataset_generator import DatasetSynthesizer
    from energy_ai.training.orchestrator import TrainingOrchestrator

    return TrainingOrchestrator(
        memory_repository,
        synthesizer=DatasetSynthesizer(seed=7, now=FIXED_NOW),
        config=test_settings,
    )
