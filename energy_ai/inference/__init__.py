"""
Inference for energy consumption models.

Usage:
    from energy_ai.inference import Predictor

    predictor = Predictor(trained_model)
    prediction = predictor.predict({"temperature": 25, "hourOfDay": 19, "householdSize": 4})
"""

from energy_ai.inference.predictor import Predictor, Prediction, PredictionFeatures

__all__ = [
    "Predictor",
    "Prediction",
    "PredictionFeatures",
]
