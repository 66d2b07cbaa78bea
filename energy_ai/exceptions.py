"""
Error Taxonomy

Exceptions raised by the forecasting and recommendation engine.
Callers can catch EnergyAIError to handle every engine failure at once.
"""

from typing import Optional


class EnergyAIError(Exception):
    """Base exception for engine errors"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class ModelNotTrained(EnergyAIError):
    """Raised when a prediction is requested before any successful fit"""

    def __init__(self, message: str = "Model not trained. Run a training cycle first."):
        super().__init__(message)


class InsufficientHistory(EnergyAIError):
    """Raised when a recommendation is requested with empty usage history"""

    def __init__(self, message: str = "Usage history must contain at least one record."):
        super().__init__(message)


class FitFailure(EnergyAIError):
    """Raised when a regression candidate cannot be fitted"""
    pass


class StorageFailure(EnergyAIError):
    """Raised when the corpus snapshot or run metadata cannot be persisted"""
    pass


class TrainingInProgress(EnergyAIError):
    """Raised when a training run is requested while another is in flight"""

    def __init__(self, message: str = "A training run is already in progress."):
        super().__init__(message)
