"""
Energy Consumption Forecasting and Plan Recommendation Engine

Components:

Data:
- Synthetic corpus generation from customer pools and plan catalogs
- Calendar helpers (peak hours, seasons, weekdays)

Models:
- Linear and degree-2 polynomial consumption regressors
- Ensemble selection by R², with polynomial-to-linear fallback
- Fixed-formula heuristic baseline for comparison

Evaluation:
- MSE, MAE, R² and accuracy percent

Serving:
- Single-point consumption prediction
- Billing plan recommendation
- Hourly, daily and seasonal pattern summaries

Training:
- Stateful orchestrator with a single-flight guard
- Pluggable in-memory and SQL storage for the corpus snapshot
"""

__version__ = "1.0.0"

from .exceptions import (
    EnergyAIError,
    ModelNotTrained,
    InsufficientHistory,
    FitFailure,
    StorageFailure,
    TrainingInProgress,
)
from .training.orchestrator import (
    TrainingOrchestrator,
    TrainingState,
    TrainingStatus,
    TrainingReport,
)
from .repositories import (
    DatasetRepository,
    InMemoryDatasetRepository,
    SqlDatasetRepository,
)

__all__ = [
    'EnergyAIError',
    'ModelNotTrained',
    'InsufficientHistory',
    'FitFailure',
    'StorageFailure',
    'TrainingInProgress',
    'TrainingOrchestrator',
    'TrainingState',
    'TrainingStatus',
    'TrainingReport',
    'DatasetRepository',
    'InMemoryDatasetRepository',
    'SqlDatasetRepository',
]
