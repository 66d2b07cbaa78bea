"""
Synthetic Energy Dataset Generator

Builds a labeled corpus of energy observations from a customer pool and a
plan catalog. Consumption follows time-of-day bands adjusted by household
characteristics; temperature follows a monthly baseline with noise.

Empty or unusable inputs never raise: a placeholder customer pool and the
default plan pricing are substituted so a seed corpus is always available.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence

import numpy as np

from energy_ai.models.observation import (
    EnergyObservation,
    HomeSize,
    IncomeBand,
    day_of_week,
    get_season,
    is_peak_hour,
)

logger = logging.getLogger(__name__)

DEFAULT_PLAN_PRICING = [
    {"planType": "Basic", "costPerKwh": 0.12},
    {"planType": "Standard", "costPerKwh": 0.15},
    {"planType": "Premium", "costPerKwh": 0.18},
    {"planType": "Green", "costPerKwh": 0.20},
]

# Monthly average temperatures (°C), January first
MONTHLY_BASE_TEMPERATURES = [5, 8, 12, 18, 23, 28, 30, 29, 25, 18, 12, 7]

TEMPERATURE_NOISE_C = 5.0
MIN_PLACEHOLDER_CUSTOMERS = 10

# Uniform consumption bands (kWh) by time of day
PEAK_USAGE_RANGE = (25.0, 55.0)
OVERNIGHT_USAGE_RANGE = (5.0, 15.0)
OFF_PEAK_USAGE_RANGE = (15.0, 35.0)

SOLAR_FACTOR = 0.6
EV_FACTOR = 1.4
HOME_SIZE_FACTORS = {
    HomeSize.SMALL: 0.8,
    HomeSize.MEDIUM: 1.0,
    HomeSize.LARGE: 1.3,
}

CUSTOMER_AGES = [25, 30, 35, 40, 45, 50, 55, 60, 65]
LOCATIONS = ["Urban", "Suburban", "Rural"]


@dataclass
class CustomerRecord:
    """Customer attributes that drive synthetic consumption."""
    id: str
    has_solar: bool
    has_electric_vehicle: bool
    home_size: HomeSize
    household_size: int
    income: IncomeBand
    age: int
    location: str


@dataclass
class PlanPricing:
    """Per-kWh pricing used to cost synthetic records."""
    plan_type: str
    cost_per_kwh: float


def _lookup(entry: Any, *keys: str) -> Any:
    """First non-None value among keys, from a dict or an object."""
    for key in keys:
        if isinstance(entry, dict):
            value = entry.get(key)
        else:
            value = getattr(entry, key, None)
        if value is not None:
            return value
    return None


def _coerce(enum_cls, value: Any):
    """Enum member for value, or None when absent or unrecognized."""
    if value is None:
        return None
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        logger.debug("Ignoring unrecognized %s value %r", enum_cls.__name__, value)
        return None


class DatasetSynthesizer:
    """
    Generates synthetic energy observations.

    Args:
        rng: numpy Generator to draw from (takes precedence over seed)
        seed: Seed for a fresh Generator; None gives unseeded output
        now: Reference time; timestamps fall in the window before it
        history_years: Length of the timestamp window in years

    Example:
        synthesizer = DatasetSynthesizer(seed=42)
        corpus = synthesizer.generate(1000)
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        now: Optional[datetime] = None,
        history_years: int = 2,
    ):
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._now = now
        self.history_years = history_years

    # ------------------------------------------------------------------
    # Input resolution
    # ------------------------------------------------------------------

    def _random_home_size(self) -> HomeSize:
        return list(HomeSize)[int(self._rng.integers(0, len(HomeSize)))]

    def _random_income(self) -> IncomeBand:
        return list(IncomeBand)[int(self._rng.integers(0, len(IncomeBand)))]

    def _random_location(self) -> str:
        return LOCATIONS[int(self._rng.integers(0, len(LOCATIONS)))]

    def _build_customer(self, customer_id: str, source: Any = None) -> CustomerRecord:
        """Fill attributes from source where given, randomize the rest."""
        source = source if source is not None else {}

        has_solar = _lookup(source, "hasSolar", "has_solar")
        has_ev = _lookup(source, "hasElectricVehicle", "has_electric_vehicle")
        home_size = _lookup(source, "homeSize", "home_size")
        household_size = _lookup(source, "householdSize", "household_size")
        income = _lookup(source, "income", "customerIncome", "customer_income")
        age = _lookup(source, "age", "customerAge", "customer_age")
        location = _lookup(source, "location")

        return CustomerRecord(
            id=customer_id,
            has_solar=bool(has_solar) if has_solar is not None else bool(self._rng.random() > 0.8),
            has_electric_vehicle=(
                bool(has_ev) if has_ev is not None else bool(self._rng.random() > 0.7)
            ),
            home_size=_coerce(HomeSize, home_size) or self._random_home_size(),
            household_size=(
                max(1, int(household_size)) if household_size is not None
                else int(self._rng.integers(1, 7))
            ),
            income=_coerce(IncomeBand, income) or self._random_income(),
            age=(
                int(age) if age is not None
                else CUSTOMER_AGES[int(self._rng.integers(0, len(CUSTOMER_AGES)))]
            ),
            location=str(location) if location is not None else self._random_location(),
        )

    def resolve_customers(self, customer_pool: Optional[Sequence[Any]]) -> List[CustomerRecord]:
        """Normalize the customer pool, substituting placeholders when empty."""
        customers = []
        for index, entry in enumerate(customer_pool or []):
            if entry is None:
                continue
            customer_id = _lookup(entry, "id", "_id", "customer_id", "customerId")
            if customer_id is None:
                customer_id = f"customer-{index + 1:03d}"
            customers.append(self._build_customer(str(customer_id), entry))

        if not customers:
            logger.info(
                "No customers supplied, using %d placeholder customers",
                MIN_PLACEHOLDER_CUSTOMERS,
            )
            customers = [
                self._build_customer(f"synthetic-{i + 1:03d}")
                for i in range(MIN_PLACEHOLDER_CUSTOMERS)
            ]

        return customers

    def resolve_plans(self, plan_catalog: Optional[Sequence[Any]]) -> List[PlanPricing]:
        """Keep catalog entries with a plan type and a positive rate, else defaults."""
        plans = []
        for entry in plan_catalog or []:
            if entry is None:
                continue
            plan_type = _lookup(entry, "planType", "plan_type", "name")
            cost = _lookup(entry, "costPerKwh", "cost_per_kwh", "ratePerKwh", "rate_per_kwh")
            try:
                cost = float(cost) if cost is not None else None
            except (TypeError, ValueError):
                cost = None
            if plan_type and cost is not None and cost > 0:
                plans.append(PlanPricing(plan_type=str(plan_type), cost_per_kwh=cost))

        if not plans:
            logger.info("No valid energy plans supplied, using default plans")
            plans = [
                PlanPricing(plan_type=p["planType"], cost_per_kwh=p["costPerKwh"])
                for p in DEFAULT_PLAN_PRICING
            ]

        return plans

    # ------------------------------------------------------------------
    # Random draws
    # ------------------------------------------------------------------

    def _window(self) -> tuple:
        end = self._now or datetime.now(timezone.utc)
        try:
            start = end.replace(year=end.year - self.history_years)
        except ValueError:
            # 29 February has no counterpart in the start year
            start = end.replace(year=end.year - self.history_years, day=28)
        return start, end

    def random_timestamp(self, start: datetime, end: datetime) -> datetime:
        """Uniform timestamp between start and end."""
        span = (end - start).total_seconds()
        return start + timedelta(seconds=float(self._rng.random()) * span)

    def random_temperature(self, month: int) -> float:
        """Monthly baseline plus uniform noise in [-5, +5] °C."""
        variation = float(self._rng.uniform(-TEMPERATURE_NOISE_C, TEMPERATURE_NOISE_C))
        return round(MONTHLY_BASE_TEMPERATURES[month] + variation, 1)

    def calculate_energy_usage(self, hour: int, customer: CustomerRecord) -> float:
        """
        Draw consumption for one hour.

        Base band by time of day, then multiplicative household factors.
        """
        if is_peak_hour(hour):
            low, high = PEAK_USAGE_RANGE
        elif 0 <= hour <= 6:
            low, high = OVERNIGHT_USAGE_RANGE
        else:
            low, high = OFF_PEAK_USAGE_RANGE

        usage = float(self._rng.uniform(low, high))

        if customer.has_solar:
            usage *= SOLAR_FACTOR
        if customer.has_electric_vehicle:
            usage *= EV_FACTOR
        usage *= HOME_SIZE_FACTORS[customer.home_size]

        return round(max(0.0, usage), 2)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self,
        count: int,
        customer_pool: Optional[Sequence[Any]] = None,
        plan_catalog: Optional[Sequence[Any]] = None,
    ) -> List[EnergyObservation]:
        """
        Generate `count` observations.

        Args:
            count: Number of records (>= 1)
            customer_pool: Customer dicts; empty means placeholders
            plan_catalog: {planType, costPerKwh} dicts; empty means defaults

        Returns:
            List of EnergyObservation
        """
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")

        customers = self.resolve_customers(customer_pool)
        plans = self.resolve_plans(plan_catalog)
        start, end = self._window()

        logger.info(
            "Generating %d records from %d customers and %d plans",
            count, len(customers), len(plans),
        )

        dataset = []
        for _ in range(count):
            customer = customers[int(self._rng.integers(0, len(customers)))]
            plan = plans[int(self._rng.integers(0, len(plans)))]
            timestamp = self.random_timestamp(start, end)
            hour = timestamp.hour
            month = timestamp.month - 1
            weekday = day_of_week(timestamp)

            dataset.append(EnergyObservation(
                customer_id=customer.id,
                timestamp=timestamp,
                temperature=self.random_temperature(month),
                humidity=round(30 + float(self._rng.random()) * 70, 1),
                hour_of_day=hour,
                day_of_week=weekday,
                month=month,
                season=get_season(month),
                is_holiday=bool(self._rng.random() > 0.95),
                is_weekend=weekday in (0, 6),
                household_size=customer.household_size,
                home_size=customer.home_size,
                has_solar=customer.has_solar,
                has_electric_vehicle=customer.has_electric_vehicle,
                plan_type=plan.plan_type,
                plan_cost=plan.cost_per_kwh,
                energy_consumption_kwh=self.calculate_energy_usage(hour, customer),
                customer_age=customer.age,
                customer_income=customer.income,
                location=customer.location,
            ))

        return dataset
