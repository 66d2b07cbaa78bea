"""
Billing Plan Recommendation Engine

Scores a catalog of billing plans against a customer's usage history and
preferences and returns a ranked recommendation.

Suitability (0-100) is the sum of:
- Usage compatibility (40 pts): full credit within the plan's usage cap,
  reduced by one point per kWh over it
- Cost efficiency (30 pts): 30 - monthly_cost / 10, floored at 0
- Preferences (30 pts): solar customers on Green, High income on Premium,
  Low income on Basic
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging

from energy_ai.exceptions import InsufficientHistory

logger = logging.getLogger(__name__)

COMPATIBLE = "Compatible"
OVER_USAGE = "Over Usage"

USAGE_POINTS = 40.0
COST_POINTS = 30.0
SOLAR_GREEN_BONUS = 30.0
INCOME_BONUS = 20.0
MAX_SUITABILITY = 100.0

LOW_USAGE_KWH = 30.0
MEDIUM_USAGE_KWH = 50.0


@dataclass(frozen=True)
class PlanCatalogEntry:
    """
    A billing plan definition.

    Attributes:
        name: Plan name
        rate_per_kwh: Energy rate per kWh
        fixed_fee: Fixed monthly fee
        usage_cap: Average usage (kWh) the plan is sized for
    """
    name: str
    rate_per_kwh: float
    fixed_fee: float
    usage_cap: float

    def monthly_cost(self, avg_usage: float) -> float:
        return avg_usage * self.rate_per_kwh + self.fixed_fee

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'rate_per_kwh': self.rate_per_kwh,
            'fixed_fee': self.fixed_fee,
            'usage_cap': self.usage_cap,
        }


DEFAULT_PLAN_CATALOG = (
    PlanCatalogEntry("Basic", 0.12, 10.0, 30.0),
    PlanCatalogEntry("Standard", 0.15, 5.0, 50.0),
    PlanCatalogEntry("Premium", 0.18, 0.0, 100.0),
    PlanCatalogEntry("Green", 0.20, 8.0, 40.0),
)


def _field(record: Any, *keys: str) -> Any:
    """First non-None value among keys, from a dict or an object."""
    for key in keys:
        if isinstance(record, dict):
            value = record.get(key)
        else:
            value = getattr(record, key, None)
        if value is not None:
            return value
    return None


@dataclass
class CustomerProfile:
    """Customer attributes that influence plan preference."""
    has_solar: bool = False
    income: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "CustomerProfile":
        """
        Build from a collaborator record (camelCase or snake_case).

        Accepts a dict or any object exposing the attributes, such as an
        EnergyObservation.
        """
        if data is None:
            return cls()
        has_solar = _field(data, 'hasSolar', 'has_solar')
        income = _field(data, 'income', 'customer_income', 'customerIncome')
        return cls(
            has_solar=bool(has_solar),
            income=getattr(income, 'value', income),
        )


@dataclass
class PlanEvaluation:
    """One catalog plan scored for a customer."""
    plan: str
    monthly_cost: float
    suitability: float
    savings_potential: float
    compatibility: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'plan': self.plan,
            'monthly_cost': self.monthly_cost,
            'suitability': self.suitability,
            'savings_potential': self.savings_potential,
            'compatibility': self.compatibility,
        }


@dataclass
class Recommendation:
    """
    Ranked plan recommendation.

    Attributes:
        current_usage: Average consumption over the history (kWh)
        recommended_plan: Top-ranked evaluation
        all_options: Every catalog plan, best first
        reasoning: Sentences explaining the choice, joined with ". "
    """
    current_usage: float
    recommended_plan: PlanEvaluation
    all_options: List[PlanEvaluation] = field(default_factory=list)
    reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_usage': self.current_usage,
            'recommended_plan': self.recommended_plan.to_dict(),
            'all_options': [o.to_dict() for o in self.all_options],
            'reasoning': self.reasoning,
        }


def _history_value(record: Any, *keys: str) -> Optional[float]:
    value = _field(record, *keys)
    return float(value) if value is not None else None


class PlanRecommender:
    """
    Recommends the most suitable billing plan.

    Args:
        catalog: Plans to score; defaults to DEFAULT_PLAN_CATALOG

    Example:
        recommender = PlanRecommender()
        rec = recommender.recommend({"hasSolar": True}, history)
        print(rec.recommended_plan.plan, rec.reasoning)
    """

    def __init__(self, catalog: Optional[Sequence[PlanCatalogEntry]] = None):
        self.catalog = list(catalog) if catalog else list(DEFAULT_PLAN_CATALOG)

    def calculate_suitability(
        self,
        plan: PlanCatalogEntry,
        avg_usage: float,
        profile: CustomerProfile,
    ) -> float:
        """Score a plan from 0 to 100."""
        if avg_usage <= plan.usage_cap:
            score = USAGE_POINTS
        else:
            score = max(0.0, USAGE_POINTS - (avg_usage - plan.usage_cap))

        score += max(0.0, COST_POINTS - plan.monthly_cost(avg_usage) / 10)

        if profile.has_solar and plan.name == "Green":
            score += SOLAR_GREEN_BONUS
        if profile.income == "High" and plan.name == "Premium":
            score += INCOME_BONUS
        if profile.income == "Low" and plan.name == "Basic":
            score += INCOME_BONUS

        return min(MAX_SUITABILITY, score)

    def _usage_stats(self, history: Sequence[Any]) -> tuple:
        usages = []
        costs = []
        for record in history:
            kwh = _history_value(record, 'energy_consumption_kwh', 'energyConsumptionKwh')
            if kwh is None:
                raise ValueError("Usage history record is missing energy consumption")
            cost = _history_value(record, 'cost')
            if cost is None:
                plan_cost = _history_value(record, 'plan_cost', 'planCost')
                cost = kwh * plan_cost if plan_cost is not None else 0.0
            usages.append(kwh)
            costs.append(cost)

        avg_usage = sum(usages) / len(usages)
        avg_cost = sum(costs) / len(costs)
        return avg_usage, max(usages), avg_cost

    def _generate_reasoning(self, best: PlanEvaluation, avg_usage: float) -> str:
        reasons = []

        if best.savings_potential > 0:
            reasons.append(f"Potential savings of ${best.savings_potential} per month")

        if avg_usage <= LOW_USAGE_KWH:
            reasons.append("Low consumption pattern matches basic plans")
        elif avg_usage <= MEDIUM_USAGE_KWH:
            reasons.append("Medium consumption suitable for standard plans")
        else:
            reasons.append("High consumption requires premium unlimited plan")

        if best.plan == "Green":
            reasons.append("Environmentally friendly option")

        return ". ".join(reasons)

    def recommend(
        self,
        customer_profile: Any,
        usage_history: Sequence[Any],
    ) -> Recommendation:
        """
        Rank the catalog for a customer.

        Args:
            customer_profile: CustomerProfile, customer dict or record object
            usage_history: Records with energy consumption and cost

        Returns:
            Recommendation

        Raises:
            InsufficientHistory: Empty usage history
        """
        if not usage_history:
            raise InsufficientHistory()

        if isinstance(customer_profile, CustomerProfile):
            profile = customer_profile
        else:
            profile = CustomerProfile.from_dict(customer_profile)

        avg_usage, peak_usage, avg_cost = self._usage_stats(usage_history)

        options = []
        for plan in self.catalog:
            monthly_cost = plan.monthly_cost(avg_usage)
            options.append(PlanEvaluation(
                plan=plan.name,
                monthly_cost=round(monthly_cost, 2),
                suitability=round(self.calculate_suitability(plan, avg_usage, profile), 2),
                savings_potential=round(avg_cost - monthly_cost, 2),
                compatibility=COMPATIBLE if avg_usage <= plan.usage_cap else OVER_USAGE,
            ))

        options.sort(key=lambda o: (-o.suitability, o.monthly_cost))
        best = options[0]

        logger.debug(
            "Recommended %s (suitability %.2f) for avg usage %.2f kWh, peak %.2f kWh",
            best.plan, best.suitability, avg_usage, peak_usage,
        )

        return Recommendation(
            current_usage=round(avg_usage, 2),
            recommended_plan=best,
            all_options=options,
            reasoning=self._generate_reasoning(best, avg_usage),
        )
