"""
SQL Dataset Repository

Raw SQL data access for the energy_observations snapshot and the
training_runs metadata table over an SQLAlchemy AsyncSession.

Snapshot replacement runs DELETE then INSERT inside one transaction, so
readers see either the old snapshot or the new one.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from energy_ai.exceptions import StorageFailure
from energy_ai.models.observation import EnergyObservation
from energy_ai.repositories.base import DatasetRepository

logger = structlog.get_logger()

OBSERVATION_COLUMNS = [
    "customer_id", "timestamp", "temperature", "humidity", "hour_of_day",
    "day_of_week", "month", "season", "is_holiday", "is_weekend",
    "household_size", "home_size", "has_solar", "has_electric_vehicle",
    "plan_type", "plan_cost", "energy_consumption_kwh", "cost",
    "carbon_footprint_kg", "customer_age", "customer_income", "location",
]

CREATE_TABLE_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS energy_observations (
        position INTEGER PRIMARY KEY,
        customer_id VARCHAR(64) NOT NULL,
        timestamp TIMESTAMP NOT NULL,
        temperature FLOAT NOT NULL,
        humidity FLOAT NOT NULL,
        hour_of_day INTEGER NOT NULL,
        day_of_week INTEGER NOT NULL,
        month INTEGER NOT NULL,
        season VARCHAR(16) NOT NULL,
        is_holiday BOOLEAN NOT NULL,
        is_weekend BOOLEAN NOT NULL,
        household_size INTEGER NOT NULL,
        home_size VARCHAR(16) NOT NULL,
        has_solar BOOLEAN NOT NULL,
        has_electric_vehicle BOOLEAN NOT NULL,
        plan_type VARCHAR(64) NOT NULL,
        plan_cost FLOAT NOT NULL,
        energy_consumption_kwh FLOAT NOT NULL,
        cost FLOAT NOT NULL,
        carbon_footprint_kg FLOAT NOT NULL,
        customer_age INTEGER,
        customer_income VARCHAR(16),
        location VARCHAR(32)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS training_runs (
        id VARCHAR(36) PRIMARY KEY,
        trained_at TIMESTAMP NOT NULL,
        dataset_size INTEGER NOT NULL,
        best_model VARCHAR(32),
        metrics TEXT,
        payload TEXT NOT NULL
    )
    """,
]


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _observation_row(position: int, record: EnergyObservation) -> Dict[str, Any]:
    data = record.model_dump()
    row = {column: _enum_value(data.get(column)) for column in OBSERVATION_COLUMNS}
    row["position"] = position
    return row


class SqlDatasetRepository(DatasetRepository):
    """Dataset repository over an SQLAlchemy AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def create_tables(self) -> None:
        """Create the snapshot and metadata tables if missing."""
        try:
            for statement in CREATE_TABLE_STATEMENTS:
                await self._db.execute(text(statement))
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StorageFailure(f"Failed to create tables: {str(e)}", e)

    async def replace_dataset(self, records: Sequence[EnergyObservation]) -> int:
        rows = [_observation_row(i, r) for i, r in enumerate(records)]

        columns = ["position"] + OBSERVATION_COLUMNS
        insert = text(
            f"INSERT INTO energy_observations ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})"
        )

        try:
            await self._db.execute(text("DELETE FROM energy_observations"))
            if rows:
                await self._db.execute(insert, rows)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("dataset_replace_failed", error=str(e), records=len(rows))
            raise StorageFailure(f"Failed to replace dataset: {str(e)}", e)

        logger.info("dataset_replaced", records=len(rows))
        return len(rows)

    async def load_dataset(self, limit: Optional[int] = None) -> List[EnergyObservation]:
        sql = f"SELECT {', '.join(OBSERVATION_COLUMNS)} FROM energy_observations ORDER BY position"
        params: Dict[str, Any] = {}
        if limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = limit

        try:
            result = await self._db.execute(text(sql), params)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Failed to load dataset: {str(e)}", e)

        return [EnergyObservation.model_validate(dict(row)) for row in rows]

    async def count(self) -> int:
        try:
            result = await self._db.execute(text("SELECT COUNT(*) FROM energy_observations"))
            return int(result.scalar() or 0)
        except SQLAlchemyError as e:
            raise StorageFailure(f"Failed to count dataset: {str(e)}", e)

    async def save_metadata(self, metadata: Dict[str, Any]) -> None:
        trained_at = metadata.get("trained_at") or datetime.now(timezone.utc)
        if isinstance(trained_at, str):
            trained_at = datetime.fromisoformat(trained_at)

        query = text("""
            INSERT INTO training_runs
                (id, trained_at, dataset_size, best_model, metrics, payload)
            VALUES
                (:id, :trained_at, :dataset_size, :best_model, :metrics, :payload)
        """)

        try:
            await self._db.execute(query, {
                "id": str(uuid4()),
                "trained_at": trained_at,
                "dataset_size": int(metadata.get("dataset_size", 0)),
                "best_model": metadata.get("best_model"),
                "metrics": json.dumps(metadata.get("metrics"), default=str),
                "payload": json.dumps(metadata, default=str),
            })
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("training_metadata_save_failed", error=str(e))
            raise StorageFailure(f"Failed to save training metadata: {str(e)}", e)

    async def latest_metadata(self) -> Optional[Dict[str, Any]]:
        query = text("""
            SELECT payload FROM training_runs
            ORDER BY trained_at DESC
            LIMIT 1
        """)

        try:
            result = await self._db.execute(query)
            row = result.fetchone()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Failed to load training metadata: {str(e)}", e)

        if row is None:
            return None
        return json.loads(row.payload)
