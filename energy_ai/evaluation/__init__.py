"""
Model evaluation metrics.
"""

from energy_ai.evaluation.metrics import (
    ModelMetrics,
    ModelEvaluator,
    mean_squared_error,
    mean_absolute_error,
    r2_score,
    confidence_from_r2,
    calculate_metrics,
)

__all__ = [
    "ModelMetrics",
    "ModelEvaluator",
    "mean_squared_error",
    "mean_absolute_error",
    "r2_score",
    "confidence_from_r2",
    "calculate_metrics",
]
