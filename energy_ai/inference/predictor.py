"""
Consumption Predictor Module

Serves single-point consumption predictions from the active model.
The model reference is swapped atomically, so callers see either the
previous model or the new one, never a partial fit.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from energy_ai.evaluation.metrics import confidence_from_r2
from energy_ai.exceptions import ModelNotTrained
from energy_ai.models.regression import HeuristicBaseline

logger = logging.getLogger(__name__)


class PredictionFeatures(BaseModel):
    """Inputs for one prediction. camelCase keys are accepted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    temperature: float
    hour_of_day: int = Field(..., ge=0, le=23)
    household_size: int = Field(..., ge=1)


@dataclass
class Prediction:
    """Predicted consumption for one set of features."""

    predicted_energy_kwh: float
    confidence: float
    model_kind: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


FeaturesLike = Union[PredictionFeatures, Mapping[str, Any]]


class Predictor:
    """
    Single-point consumption predictor.

    Args:
        model: Initial model (TrainedModel or HeuristicBaseline); None means
            predictions fail with ModelNotTrained until one is installed

    Example:
        predictor = Predictor()
        predictor.swap_model(result.best_model)
        prediction = predictor.predict({"temperature": 25, "hourOfDay": 19, "householdSize": 4})
    """

    def __init__(self, model: Optional[Any] = None):
        self._model = model

    @property
    def model(self) -> Optional[Any]:
        return self._model

    @property
    def is_ready(self) -> bool:
        return self._model is not None and getattr(self._model, "is_trained", False)

    def swap_model(self, model: Any) -> None:
        """Replace the active model."""
        self._model = model
        logger.info("Active model set to %s", getattr(model.kind, "value", model.kind))

    @staticmethod
    def _parse(features: FeaturesLike) -> PredictionFeatures:
        if isinstance(features, PredictionFeatures):
            return features
        return PredictionFeatures.model_validate(dict(features))

    def predict(self, features: FeaturesLike, model: Optional[Any] = None) -> Prediction:
        """
        Predict consumption.

        Args:
            features: temperature, hour_of_day and household_size
            model: Override the active model for this call

        Raises:
            ModelNotTrained: No trained model available
        """
        active = model if model is not None else self._model
        if active is None or not getattr(active, "is_trained", False):
            raise ModelNotTrained()

        parsed = self._parse(features)
        frame = pd.DataFrame([parsed.model_dump()])
        value = float(active.predict_frame(frame)[0])

        if isinstance(active, HeuristicBaseline):
            confidence = HeuristicBaseline.DEFAULT_CONFIDENCE
        elif active.metrics is not None:
            confidence = confidence_from_r2(active.metrics.r_squared)
        else:
            confidence = 0.0

        return Prediction(
            predicted_energy_kwh=round(value, 2),
            confidence=round(confidence, 4),
            model_kind=active.kind.value,
        )
