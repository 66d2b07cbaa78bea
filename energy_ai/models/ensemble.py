"""
Regression Ensemble Trainer

Fits the linear and polynomial candidates on the same corpus, scores each
with the ModelEvaluator and retains the one with the higher R².

The polynomial candidate is optional: if it cannot be fitted the trainer
logs a warning, sets `fallback_used` and keeps the linear result.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from energy_ai.data.frames import CorpusLike, as_frame
from energy_ai.evaluation.metrics import ModelEvaluator, ModelMetrics
from energy_ai.exceptions import FitFailure
from energy_ai.models.regression import (
    TrainedModel,
    fit_linear_model,
    fit_polynomial_model,
)

logger = logging.getLogger(__name__)


@dataclass
class EnsembleResult:
    """Outcome of one ensemble training pass."""

    best_model: TrainedModel
    metrics: ModelMetrics
    candidates: List[TrainedModel] = field(default_factory=list)
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_model": self.best_model.summary(),
            "metrics": self.metrics.to_dict(),
            "candidates": [c.summary() for c in self.candidates],
            "fallback_used": self.fallback_used,
        }


def select_best_model(candidates: List[TrainedModel]) -> TrainedModel:
    """
    Pick the candidate with the highest R².

    Candidates are ordered simplest first; a later candidate replaces the
    current best only on a strictly greater score, so ties keep linear.
    """
    if not candidates:
        raise ValueError("No candidates to select from")

    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.metrics is None:
            continue
        if best.metrics is None or candidate.metrics.r_squared > best.metrics.r_squared:
            best = candidate
    return best


class RegressionEnsembleTrainer:
    """
    Trains and selects among regression candidates.

    Example:
        trainer = RegressionEnsembleTrainer()
        result = trainer.train_ensemble(corpus)
        print(result.best_model.kind, result.metrics)
    """

    def __init__(self, evaluator: Optional[ModelEvaluator] = None):
        self.evaluator = evaluator or ModelEvaluator()

    def train_ensemble(self, corpus: CorpusLike) -> EnsembleResult:
        """
        Fit, score and select.

        Raises:
            ValueError: Empty corpus
        """
        frame = as_frame(corpus)
        if frame.empty:
            raise ValueError("Cannot train on an empty corpus")

        linear = fit_linear_model(frame)
        linear.metrics = self.evaluator.evaluate(linear, frame)
        candidates = [linear]

        fallback_used = False
        try:
            polynomial = fit_polynomial_model(frame)
            polynomial.metrics = self.evaluator.evaluate(polynomial, frame)
            candidates.append(polynomial)
        except (FitFailure, ValueError) as e:
            fallback_used = True
            logger.warning("Polynomial fit failed, falling back to linear model: %s", e)

        best = select_best_model(candidates)

        logger.info(
            "Ensemble selected %s model (R²=%.4f) from %d candidates",
            best.kind.value, best.metrics.r_squared, len(candidates),
        )

        return EnsembleResult(
            best_model=best,
            metrics=best.metrics,
            candidates=candidates,
            fallback_used=fallback_used,
        )


__all__ = [
    "EnsembleResult",
    "RegressionEnsembleTrainer",
    "select_best_model",
]
