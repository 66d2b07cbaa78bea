"""
Base Dataset Repository

Abstract data access for the corpus snapshot and training-run metadata.
Each training run replaces the snapshot as a whole.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from energy_ai.models.observation import EnergyObservation


class DatasetRepository(ABC):
    """
    Abstract repository for the corpus snapshot and run metadata.

    Implementations raise StorageFailure when the backing store fails.
    """

    @abstractmethod
    async def replace_dataset(self, records: Sequence[EnergyObservation]) -> int:
        """
        Replace the stored snapshot with `records`.

        Args:
            records: The new corpus

        Returns:
            Number of records stored
        """
        pass

    @abstractmethod
    async def load_dataset(self, limit: Optional[int] = None) -> List[EnergyObservation]:
        """
        Load the stored snapshot in insertion order.

        Args:
            limit: Maximum number of records, None for all
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of records in the stored snapshot."""
        pass

    @abstractmethod
    async def save_metadata(self, metadata: Dict[str, Any]) -> None:
        """
        Record one training run.

        Args:
            metadata: trained_at, dataset_size, best_model and metrics
        """
        pass

    @abstractmethod
    async def latest_metadata(self) -> Optional[Dict[str, Any]]:
        """Most recently saved run metadata, None if no run was recorded."""
        pass
