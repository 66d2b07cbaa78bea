"""
Billing plan recommendation.
"""

from energy_ai.optimization.plan_recommender import (
    PlanRecommender,
    PlanCatalogEntry,
    PlanEvaluation,
    CustomerProfile,
    Recommendation,
    DEFAULT_PLAN_CATALOG,
)

__all__ = [
    "PlanRecommender",
    "PlanCatalogEntry",
    "PlanEvaluation",
    "CustomerProfile",
    "Recommendation",
    "DEFAULT_PLAN_CATALOG",
]
