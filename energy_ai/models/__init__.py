"""
Energy observation model and consumption regressors.
"""

from energy_ai.models.observation import (
    EnergyObservation,
    Season,
    HomeSize,
    IncomeBand,
    is_peak_hour,
    get_season,
    day_of_week,
    CARBON_KG_PER_KWH,
)
from energy_ai.models.regression import (
    ModelKind,
    TrainedModel,
    HeuristicBaseline,
    fit_linear_model,
    fit_polynomial_model,
    LINEAR_FEATURES,
    POLYNOMIAL_FEATURES,
)
from energy_ai.models.ensemble import (
    EnsembleResult,
    RegressionEnsembleTrainer,
    select_best_model,
)

__all__ = [
    "EnergyObservation",
    "Season",
    "HomeSize",
    "IncomeBand",
    "is_peak_hour",
    "get_season",
    "day_of_week",
    "CARBON_KG_PER_KWH",
    "ModelKind",
    "TrainedModel",
    "HeuristicBaseline",
    "fit_linear_model",
    "fit_polynomial_model",
    "LINEAR_FEATURES",
    "POLYNOMIAL_FEATURES",
    "EnsembleResult",
    "RegressionEnsembleTrainer",
    "select_best_model",
]
