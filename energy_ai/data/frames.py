"""
Corpus to DataFrame conversion.

Trainers, evaluators and analyzers all work on a pandas DataFrame with
snake_case columns. Corpora arrive as EnergyObservation models, plain
dicts from collaborators (camelCase or snake_case), or ready DataFrames.
"""

from typing import Any, Iterable, Union

import numpy as np
import pandas as pd

from energy_ai.models.observation import day_of_week, get_season

CorpusLike = Union[pd.DataFrame, Iterable[Any]]

# camelCase keys used by collaborators -> internal column names
COLUMN_ALIASES = {
    "customerId": "customer_id",
    "hourOfDay": "hour_of_day",
    "dayOfWeek": "day_of_week",
    "isHoliday": "is_holiday",
    "isWeekend": "is_weekend",
    "householdSize": "household_size",
    "homeSize": "home_size",
    "hasSolar": "has_solar",
    "hasElectricVehicle": "has_electric_vehicle",
    "planType": "plan_type",
    "planCost": "plan_cost",
    "energyConsumptionKwh": "energy_consumption_kwh",
    "carbonFootprintKg": "carbon_footprint_kg",
    "customerAge": "customer_age",
    "customerIncome": "customer_income",
}


def _record_to_dict(record: Any) -> dict:
    if hasattr(record, "model_dump"):
        return record.model_dump()
    if isinstance(record, dict):
        return dict(record)
    raise TypeError(f"Unsupported corpus record type: {type(record).__name__}")


def as_frame(corpus: CorpusLike) -> pd.DataFrame:
    """
    Build a DataFrame from a corpus.

    Missing calendar columns are derived from `timestamp` (hour, weekday,
    month) and from `month` (season) when possible.
    """
    if isinstance(corpus, pd.DataFrame):
        df = corpus.copy()
    else:
        df = pd.DataFrame([_record_to_dict(r) for r in corpus])

    df = df.rename(columns=COLUMN_ALIASES)

    if df.empty:
        return df

    if "timestamp" in df.columns:
        ts = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
        if "hour_of_day" not in df.columns:
            df["hour_of_day"] = ts.dt.hour
        if "day_of_week" not in df.columns:
            df["day_of_week"] = [
                day_of_week(t) if not pd.isna(t) else np.nan for t in ts
            ]
        if "month" not in df.columns:
            df["month"] = ts.dt.month - 1

    if "season" not in df.columns and "month" in df.columns:
        df["season"] = [
            get_season(int(m)) if not pd.isna(m) else None for m in df["month"]
        ]
    elif "season" in df.columns:
        # Enum members and raw strings both normalize to the plain value
        df["season"] = [getattr(s, "value", s) for s in df["season"]]

    return df
