"""
In-Memory Dataset Repository

Process-local storage for tests, the CLI and single-process deployments.
Snapshot replacement swaps a list reference, so readers never observe a
partially written corpus.
"""

import copy
from typing import Any, Dict, List, Optional, Sequence

from energy_ai.models.observation import EnergyObservation
from energy_ai.repositories.base import DatasetRepository


class InMemoryDatasetRepository(DatasetRepository):
    """Dataset repository backed by Python lists."""

    def __init__(self):
        self._records: List[EnergyObservation] = []
        self._runs: List[Dict[str, Any]] = []

    async def replace_dataset(self, records: Sequence[EnergyObservation]) -> int:
        self._records = list(records)
        return len(self._records)

    async def load_dataset(self, limit: Optional[int] = None) -> List[EnergyObservation]:
        records = self._records
        if limit is not None:
            return list(records[:limit])
        return list(records)

    async def count(self) -> int:
        return len(self._records)

    async def save_metadata(self, metadata: Dict[str, Any]) -> None:
        self._runs.append(copy.deepcopy(metadata))

    async def latest_metadata(self) -> Optional[Dict[str, Any]]:
        if not self._runs:
            return None
        return copy.deepcopy(self._runs[-1])

    @property
    def runs(self) -> List[Dict[str, Any]]:
        """All recorded runs, oldest first."""
        return list(self._runs)
