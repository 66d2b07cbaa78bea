"""
Regression Models for Energy Consumption Forecasting

Two learned candidates compete in the ensemble:
- Linear: consumption ~ temperature + hour_of_day + household_size
- Polynomial: degree-2 expansion of temperature and hour_of_day

A fixed-formula HeuristicBaseline is provided for comparison. It is
never fitted and is labelled `is_learned = False`.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import PolynomialFeatures

from energy_ai.data.frames import CorpusLike, as_frame
from energy_ai.evaluation.metrics import ModelMetrics
from energy_ai.exceptions import FitFailure

logger = logging.getLogger(__name__)

TARGET_COLUMN = "energy_consumption_kwh"
LINEAR_FEATURES = ["temperature", "hour_of_day", "household_size"]
POLYNOMIAL_FEATURES = ["temperature", "hour_of_day"]
POLYNOMIAL_DEGREE = 2

# Degree-2 expansion of two features has 5 terms plus the intercept
MIN_POLYNOMIAL_SAMPLES = 6


class ModelKind(str, Enum):
    """Model families served by the predictor."""
    LINEAR = "linear"
    POLYNOMIAL = "polynomial"
    HEURISTIC_BASELINE = "heuristic_baseline"


@dataclass
class TrainedModel:
    """
    Result of one regression fit.

    `is_trained` stays False until the fit completes. `metrics` is filled
    in by the ensemble trainer after evaluation.
    """

    kind: ModelKind
    feature_names: List[str]
    estimator: Any = None
    feature_importance: Dict[str, float] = field(default_factory=dict)
    metrics: Optional[ModelMetrics] = None
    is_trained: bool = False
    is_learned: bool = True
    trained_at: Optional[datetime] = None
    n_samples: int = 0

    def predict_frame(self, X: pd.DataFrame) -> np.ndarray:
        """Predict consumption for every row of a feature frame."""
        if not self.is_trained or self.estimator is None:
            raise ValueError(f"{self.kind.value} model is not fitted")
        return self.estimator.predict(X[self.feature_names].to_numpy(dtype=float))

    def summary(self) -> Dict[str, Any]:
        """Serializable summary without the fitted estimator."""
        return {
            "kind": self.kind.value,
            "feature_names": list(self.feature_names),
            "feature_importance": dict(self.feature_importance),
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "is_trained": self.is_trained,
            "is_learned": self.is_learned,
            "trained_at": self.trained_at.isoformat() if self.trained_at else None,
            "n_samples": self.n_samples,
        }


def _design(frame: pd.DataFrame, features: List[str]) -> tuple:
    missing = [c for c in features + [TARGET_COLUMN] if c not in frame.columns]
    if missing:
        raise ValueError(f"Corpus is missing columns: {missing}")
    X = frame[features].to_numpy(dtype=float)
    y = frame[TARGET_COLUMN].to_numpy(dtype=float)
    return X, y


def fit_linear_model(corpus: CorpusLike) -> TrainedModel:
    """
    Fit the multivariate linear candidate.

    Feature importance is the absolute value of each coefficient.
    """
    frame = as_frame(corpus)
    if frame.empty:
        raise ValueError("Cannot fit on an empty corpus")

    X, y = _design(frame, LINEAR_FEATURES)
    estimator = LinearRegression()
    estimator.fit(X, y)

    importance = {
        name: float(abs(coef))
        for name, coef in zip(LINEAR_FEATURES, estimator.coef_)
    }

    logger.info(
        "Fitted linear model on %d samples (intercept=%.4f)",
        len(y), estimator.intercept_,
    )

    return TrainedModel(
        kind=ModelKind.LINEAR,
        feature_names=list(LINEAR_FEATURES),
        estimator=estimator,
        feature_importance=importance,
        is_trained=True,
        trained_at=datetime.now(timezone.utc),
        n_samples=len(y),
    )


def fit_polynomial_model(corpus: CorpusLike, degree: int = POLYNOMIAL_DEGREE) -> TrainedModel:
    """
    Fit the polynomial candidate.

    Raises:
        FitFailure: Too few samples, a singular design matrix, or
            non-finite coefficients.
    """
    frame = as_frame(corpus)
    if len(frame) < MIN_POLYNOMIAL_SAMPLES:
        raise FitFailure(
            f"Polynomial fit needs at least {MIN_POLYNOMIAL_SAMPLES} samples, got {len(frame)}"
        )

    try:
        X, y = _design(frame, POLYNOMIAL_FEATURES)
        estimator: Pipeline = make_pipeline(
            PolynomialFeatures(degree=degree, include_bias=False),
            LinearRegression(),
        )
        expanded = estimator.named_steps["polynomialfeatures"].fit_transform(X)

        # Intercept column plus expanded terms must be full rank
        design = np.column_stack([np.ones(len(expanded)), expanded])
        rank = np.linalg.matrix_rank(design)
        if rank < design.shape[1]:
            raise FitFailure(
                f"Singular design matrix (rank {rank} < {design.shape[1]})"
            )

        estimator.fit(X, y)
        regressor = estimator.named_steps["linearregression"]
        if not (np.all(np.isfinite(regressor.coef_)) and np.isfinite(regressor.intercept_)):
            raise FitFailure("Polynomial fit produced non-finite coefficients")

    except FitFailure:
        raise
    except Exception as e:
        raise FitFailure(f"Polynomial fit failed: {str(e)}", e)

    logger.info("Fitted degree-%d polynomial model on %d samples", degree, len(y))

    return TrainedModel(
        kind=ModelKind.POLYNOMIAL,
        feature_names=list(POLYNOMIAL_FEATURES),
        estimator=estimator,
        is_trained=True,
        trained_at=datetime.now(timezone.utc),
        n_samples=len(y),
    )


class HeuristicBaseline:
    """
    Closed-form consumption estimate used as a comparison baseline.

    prediction = 20 + 0.5·temperature + 0.8·hour + 2·household_size
                 + uniform noise in [-noise_amplitude, +noise_amplitude]

    floored at 5 kWh. Noise is only added when an rng is supplied, so the
    default baseline is deterministic.
    """

    kind = ModelKind.HEURISTIC_BASELINE
    is_learned = False
    is_trained = True

    INTERCEPT = 20.0
    TEMPERATURE_WEIGHT = 0.5
    HOUR_WEIGHT = 0.8
    HOUSEHOLD_WEIGHT = 2.0
    FLOOR_KWH = 5.0
    DEFAULT_CONFIDENCE = 0.82

    def __init__(self, rng: Optional[np.random.Generator] = None, noise_amplitude: float = 5.0):
        self._rng = rng
        self.noise_amplitude = noise_amplitude
        self.feature_names = list(LINEAR_FEATURES)
        self.metrics: Optional[ModelMetrics] = None

    def predict_frame(self, X: pd.DataFrame) -> np.ndarray:
        base = (
            self.INTERCEPT
            + self.TEMPERATURE_WEIGHT * X["temperature"].to_numpy(dtype=float)
            + self.HOUR_WEIGHT * X["hour_of_day"].to_numpy(dtype=float)
            + self.HOUSEHOLD_WEIGHT * X["household_size"].to_numpy(dtype=float)
        )
        if self._rng is not None and self.noise_amplitude > 0:
            base = base + self._rng.uniform(
                -self.noise_amplitude, self.noise_amplitude, size=len(base)
            )
        return np.maximum(self.FLOOR_KWH, base)

    def summary(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "feature_names": list(self.feature_names),
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "is_trained": self.is_trained,
            "is_learned": self.is_learned,
        }
