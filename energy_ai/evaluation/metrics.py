"""
Performance Metrics for Consumption Regression Models

Point-error metrics used to score ensemble candidates and the heuristic
baseline:
- MSE, MAE
- R² (coefficient of determination, may be negative)
- Accuracy percent (R² × 100, informational only)
"""

import numpy as np
from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict
import logging

from energy_ai.data.frames import CorpusLike, as_frame

logger = logging.getLogger(__name__)

TARGET_COLUMN = "energy_consumption_kwh"

MAX_CONFIDENCE = 0.95
CONFIDENCE_OFFSET = 0.3


@dataclass
class ModelMetrics:
    """Container for regression evaluation metrics"""

    mse: float  # Mean Squared Error
    mae: float  # Mean Absolute Error
    r_squared: float  # R² Score, unclamped
    accuracy_percent: float  # R² × 100
    n_samples: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"MSE: {self.mse:.4f}  MAE: {self.mae:.4f}  "
            f"R²: {self.r_squared:.4f}  Accuracy: {self.accuracy_percent:.2f}%"
        )


def mean_squared_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Calculate Mean Squared Error.

    MSE = (1/n) * Σ(y_true - y_pred)²
    """
    return float(np.mean((y_true - y_pred) ** 2))


def mean_absolute_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Calculate Mean Absolute Error.

    MAE = (1/n) * Σ|y_true - y_pred|
    """
    return float(np.mean(np.abs(y_true - y_pred)))


def r2_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Calculate R² (coefficient of determination).

    R² = 1 - SS_res / SS_tot

    SS_tot = 0 (constant target) yields 0.0. Negative values are returned
    as-is: they mean the model is worse than predicting the mean.
    """
    ss_res = float(np.sum((y_true - y_pred) ** 2))
    ss_tot = float(np.sum((y_true - np.mean(y_true)) ** 2))

    if ss_tot == 0:
        return 0.0

    return 1 - ss_res / ss_tot


def confidence_from_r2(r_squared: float) -> float:
    """Prediction confidence: min(0.95, R² + 0.3). Not floored at zero."""
    return min(MAX_CONFIDENCE, r_squared + CONFIDENCE_OFFSET)


def calculate_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> ModelMetrics:
    """
    Score predictions against actual consumption.

    Non-finite predictions are dropped before scoring. Results are rounded
    to 4 dp (accuracy 2 dp).
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if len(y_true) != len(y_pred):
        raise ValueError(
            f"Length mismatch: y_true has {len(y_true)}, y_pred has {len(y_pred)}"
        )

    mask = np.isfinite(y_true) & np.isfinite(y_pred)
    if not mask.all():
        logger.warning("Dropping %d non-finite predictions", int((~mask).sum()))
    y_true = y_true[mask]
    y_pred = y_pred[mask]

    if len(y_true) == 0:
        raise ValueError("No finite samples to evaluate")

    r_squared = r2_score(y_true, y_pred)

    return ModelMetrics(
        mse=round(mean_squared_error(y_true, y_pred), 4),
        mae=round(mean_absolute_error(y_true, y_pred), 4),
        r_squared=round(r_squared, 4),
        accuracy_percent=round(r_squared * 100, 2),
        n_samples=int(len(y_true)),
    )


class ModelEvaluator:
    """
    Evaluates any model exposing `predict_frame(df) -> array` on a corpus.

    Example:
        evaluator = ModelEvaluator()
        metrics = evaluator.evaluate(trained_model, corpus)
        print(metrics)
    """

    def __init__(self, target_column: str = TARGET_COLUMN):
        self.target_column = target_column

    def evaluate(self, model: Any, corpus: CorpusLike) -> ModelMetrics:
        """
        Evaluate a model on a corpus.

        Args:
            model: TrainedModel or HeuristicBaseline
            corpus: Observations, dicts or a DataFrame

        Returns:
            ModelMetrics
        """
        df = as_frame(corpus)
        if df.empty:
            raise ValueError("Cannot evaluate on an empty corpus")

        y_true = df[self.target_column].to_numpy(dtype=float)
        y_pred = np.asarray(model.predict_frame(df), dtype=float)

        metrics = calculate_metrics(y_true, y_pred)
        logger.debug("Evaluated %s: %s", getattr(model, "kind", model), metrics)
        return metrics

    @staticmethod
    def confidence(metrics: Optional[ModelMetrics]) -> float:
        """Confidence for a single prediction from the model's R²."""
        if metrics is None:
            return 0.0
        return confidence_from_r2(metrics.r_squared)
