"""
Corpus synthesis and conversion utilities.
"""

from energy_ai.data.dataset_generator import (
    DatasetSynthesizer,
    CustomerRecord,
    PlanPricing,
    DEFAULT_PLAN_PRICING,
    MONTHLY_BASE_TEMPERATURES,
)
from energy_ai.data.frames import as_frame

__all__ = [
    "DatasetSynthesizer",
    "CustomerRecord",
    "PlanPricing",
    "DEFAULT_PLAN_PRICING",
    "MONTHLY_BASE_TEMPERATURES",
    "as_frame",
]
