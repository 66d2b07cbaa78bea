"""
Repositories

Data access for the corpus snapshot and training-run metadata.
"""

from energy_ai.repositories.base import DatasetRepository
from energy_ai.repositories.memory_repository import InMemoryDatasetRepository
from energy_ai.repositories.sql_repository import SqlDatasetRepository

__all__ = [
    "DatasetRepository",
    "InMemoryDatasetRepository",
    "SqlDatasetRepository",
]
