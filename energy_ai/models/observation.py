"""
Energy Observation Models

Pydantic models for synthetic and historical energy usage samples,
plus the calendar helpers shared by synthesis and pattern analysis.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

# kg CO2 emitted per kWh consumed
CARBON_KG_PER_KWH = 0.5

# Inclusive peak windows (hour of day)
PEAK_HOUR_WINDOWS = ((7, 9), (17, 21))


class Season(str, Enum):
    """Meteorological seasons (northern hemisphere)."""
    SPRING = "Spring"
    SUMMER = "Summer"
    AUTUMN = "Autumn"
    WINTER = "Winter"


class HomeSize(str, Enum):
    """Dwelling size bands."""
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


class IncomeBand(str, Enum):
    """Customer income bands used for plan preferences."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def is_peak_hour(hour: int) -> bool:
    """Return True for hours inside 07:00-09:00 or 17:00-21:00."""
    return any(start <= hour <= end for start, end in PEAK_HOUR_WINDOWS)


def get_season(month: int) -> str:
    """
    Map a zero-based month (0 = January) to its season name.

    Spring is Mar-May, Summer Jun-Aug, Autumn Sep-Nov, Winter otherwise.
    """
    if 2 <= month <= 4:
        return Season.SPRING.value
    if 5 <= month <= 7:
        return Season.SUMMER.value
    if 8 <= month <= 10:
        return Season.AUTUMN.value
    return Season.WINTER.value


def day_of_week(timestamp: datetime) -> int:
    """Day index with Sunday = 0 through Saturday = 6."""
    return (timestamp.weekday() + 1) % 7


class EnergyObservation(BaseModel):
    """
    One energy usage sample.

    `cost` and `carbon_footprint_kg` are derived from consumption and are
    never accepted as input. Instances are immutable.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    customer_id: str
    timestamp: datetime
    temperature: float
    humidity: float = Field(50.0, ge=0, le=100)
    hour_of_day: int = Field(..., ge=0, le=23)
    day_of_week: int = Field(..., ge=0, le=6)
    month: int = Field(..., ge=0, le=11)
    season: Season
    is_holiday: bool = False
    is_weekend: bool = False
    household_size: int = Field(..., ge=1)
    home_size: HomeSize = HomeSize.MEDIUM
    has_solar: bool = False
    has_electric_vehicle: bool = False
    plan_type: str
    plan_cost: float = Field(..., gt=0)
    energy_consumption_kwh: float = Field(..., ge=0)

    # Customer attributes carried for recommendation and reporting
    customer_age: Optional[int] = Field(None, ge=0)
    customer_income: Optional[IncomeBand] = None
    location: Optional[str] = None

    @computed_field
    @property
    def cost(self) -> float:
        return self.energy_consumption_kwh * self.plan_cost

    @computed_field
    @property
    def carbon_footprint_kg(self) -> float:
        return self.energy_consumption_kwh * CARBON_KG_PER_KWH

    @computed_field
    @property
    def is_peak(self) -> bool:
        return is_peak_hour(self.hour_of_day)
