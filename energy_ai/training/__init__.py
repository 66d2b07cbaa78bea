"""
Training pipeline for energy consumption models.
"""

from .orchestrator import (
    TrainingOrchestrator,
    TrainingState,
    TrainingStatus,
    TrainingReport,
)

__all__ = [
    'TrainingOrchestrator',
    'TrainingState',
    'TrainingStatus',
    'TrainingReport',
]
