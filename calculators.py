"""
Closed-form economic calculators used by the tick pipeline.
Production (Cobb-Douglas), infrastructure upkeep, wealth-driven consumption and
supply/demand pricing. All calculators are pure apart from the explicit
region helpers, which write their results back into region components.
"""

from __future__ import annotations
from typing import Dict, Mapping, Optional, Tuple, TYPE_CHECKING
import math
import numpy as np

from config import PRICE_ELASTICITY, INCOME_ELASTICITY, DEFAULT_ELASTICITY

if TYPE_CHECKING:
    from region import RegionEntity


class ProductionCalculator:
    """Cobb-Douglas production: output = A * L^alpha * K^beta."""

    def __init__(self, productivity: float = 1.0, labor_elasticity: float = 0.5,
                 capital_elasticity: float = 0.5):
        self.productivity = productivity
        self.labor_elasticity = labor_elasticity
        self.capital_elasticity = capital_elasticity

    def calculate_output(self, labor: float, capital: float) -> float:
        """Return output for the given inputs. Inputs below 1 are floored to 1."""
        labor = max(1.0, labor)
        capital = max(1.0, capital)
        return self.productivity * math.pow(labor, self.labor_elasticity) * \
            math.pow(capital, self.capital_elasticity)

    def calculate_region_output(self, region: RegionEntity) -> float:
        """Output of a region using its available labor and its infrastructure as capital."""
        labor = region.population.labor_available
        capital = region.infrastructure.level
        return self.calculate_output(labor, capital)


class InfrastructureCalculator:
    """Infrastructure efficiency, maintenance, decay and diminishing-returns growth."""

    def __init__(self, efficiency_modifier: float = 0.1, decay_rate: float = 0.02,
                 maintenance_cost_factor: float = 0.05):
        self.efficiency_modifier = efficiency_modifier
        self.decay_rate = decay_rate
        self.maintenance_cost_factor = maintenance_cost_factor

    def calculate_efficiency_boost(self, level: float) -> float:
        return 1.0 + level * self.efficiency_modifier

    def calculate_maintenance_cost(self, level: float) -> float:
        return level * level * self.maintenance_cost_factor

    def calculate_decay(self, level: float, maintenance_investment: float) -> float:
        """
        New level after one turn of decay.
        Full funding of the maintenance cost prevents any decay.
        """
        required = self.calculate_maintenance_cost(level)
        if required <= 0:
            ratio = 1.0
        else:
            ratio = min(1.0, max(0.0, maintenance_investment) / required)
        effective_decay = self.decay_rate * (1.0 - ratio)
        return max(0.0, level * (1.0 - effective_decay))

    def calculate_growth(self, investment: float, current_level: float) -> float:
        """Level gained from an investment; higher levels grow more slowly."""
        if investment <= 0:
            return 0.0
        diminishing = 1.0 / (1.0 + current_level * 0.1)
        return investment * diminishing * 0.05

    def update_region_infrastructure(self, region: RegionEntity, maintenance_investment: float,
                                     development_investment: float) -> float:
        """Apply decay then growth to a region's infrastructure and return the new level."""
        infrastructure = region.infrastructure
        decayed = self.calculate_decay(infrastructure.level, maintenance_investment)
        grown = decayed + self.calculate_growth(development_investment, decayed)
        infrastructure.set_level(grown)
        return infrastructure.level


class ConsumptionCalculator:
    """
    Wealth-driven consumption.
    Expected consumption grows sub-linearly with wealth; shortages are turned
    into unrest through a convex penalty so that small gaps barely register.
    """

    def __init__(self, base_consumption_rate: float = 0.2, consumption_exponent: float = 0.8,
                 unrest_factor: float = 0.05):
        self.base_consumption_rate = base_consumption_rate
        self.consumption_exponent = consumption_exponent
        self.unrest_factor = unrest_factor

    def calculate_expected_consumption(self, wealth: float) -> float:
        if wealth <= 0:
            return 0.0
        return self.base_consumption_rate * math.pow(wealth, self.consumption_exponent)

    def calculate_resource_consumption(self, total_consumption: float,
                                       allocation: Mapping[str, float]) -> Dict[str, float]:
        """Split a consumption total across resources by (normalized) allocation."""
        if total_consumption <= 0:
            return {}
        total_share = sum(v for v in allocation.values() if v > 0)
        if total_share <= 0:
            return {}
        return {
            resource: total_consumption * share / total_share
            for resource, share in allocation.items()
            if share > 0
        }

    def calculate_unmet_demand(self, expected: float, actual: float) -> float:
        if expected <= 0:
            return 0.0
        return float(np.clip((expected - actual) / expected, 0.0, 1.0))

    def calculate_unrest_from_unmet_demand(self, unmet_demand_ratio: float) -> float:
        return unmet_demand_ratio * unmet_demand_ratio * self.unrest_factor * 100.0

    def process_region_consumption(self, region: RegionEntity, available: Dict[str, float],
                                   allocation: Mapping[str, float]) -> Tuple[float, float, float]:
        """
        Consume from `available` on behalf of a region.

        The available pool is reduced in place by what was consumed.
        Returns (actual_consumption, unmet_demand_ratio, unrest).
        """
        expected = self.calculate_expected_consumption(region.wealth)
        demands = self.calculate_resource_consumption(expected, allocation)

        actual = 0.0
        for resource, demand in demands.items():
            on_hand = max(0.0, available.get(resource, 0.0))
            consumed = min(demand, on_hand)
            available[resource] = on_hand - consumed
            actual += consumed

        unmet = self.calculate_unmet_demand(expected, actual)
        unrest = self.calculate_unrest_from_unmet_demand(unmet)
        return actual, unmet, unrest


class PriceCalculator:
    """Supply/demand pricing with per-resource price and income elasticities."""

    MIN_PRICE_MULTIPLIER = 0.1
    MAX_PRICE_MULTIPLIER = 10.0
    MIN_SHOCK_MULTIPLIER = 0.75
    MAX_SHOCK_MULTIPLIER = 1.5

    def __init__(self, elasticities: Optional[Mapping[str, float]] = None,
                 income_elasticities: Optional[Mapping[str, float]] = None):
        self.elasticities: Dict[str, float] = dict(PRICE_ELASTICITY if elasticities is None else elasticities)
        self.income_elasticities: Dict[str, float] = dict(
            INCOME_ELASTICITY if income_elasticities is None else income_elasticities
        )

    def get_elasticity(self, resource_type: str) -> float:
        return self.elasticities.get(resource_type, DEFAULT_ELASTICITY)

    def set_resource_elasticity(self, resource_type: str, elasticity: float):
        self.elasticities[resource_type] = elasticity

    def calculate_price(self, base_price: float, supply: float, demand: float,
                        resource_type: Optional[str] = None,
                        elasticity: Optional[float] = None) -> float:
        """
        Price from the supply/demand imbalance.
        The multiplier on base_price is clamped to [0.1, 10].
        """
        if elasticity is None:
            elasticity = self.get_elasticity(resource_type) if resource_type else DEFAULT_ELASTICITY
        safe_supply = max(supply, 0.1)
        safe_elasticity = max(elasticity, 0.1)
        multiplier = 1.0 + (demand - supply) / (safe_supply * safe_elasticity)
        multiplier = float(np.clip(multiplier, self.MIN_PRICE_MULTIPLIER, self.MAX_PRICE_MULTIPLIER))
        return base_price * multiplier

    def adjust_demand_by_income(self, base_demand: float, wealth: float, resource_type: str) -> float:
        """Scale demand by wealth; luxuries respond far more than necessities."""
        income_factor = self.income_elasticities.get(resource_type, DEFAULT_ELASTICITY)
        income_effect = math.log10(max(10.0, wealth)) * 0.5 * income_factor
        return base_demand * (1.0 + income_effect)

    def calculate_substitution_effect(self, base_demand: float, substitute_price: float,
                                      normal_base_price: float, cross_elasticity: float) -> float:
        """Demand shift caused by a substitute's price relative to its normal price."""
        if normal_base_price <= 0:
            return base_demand
        price_ratio = substitute_price / normal_base_price
        effect = float(np.clip(1.0 + (price_ratio - 1.0) * cross_elasticity, 0.5, 2.0))
        return base_demand * effect

    def apply_price_shock(self, current_price: float, supply_shock: float, demand_trend: float,
                          volatility: float = 0.2) -> float:
        """Random-walk nudge bounded to [0.75x, 1.5x] of the pre-shock price."""
        volatility = float(np.clip(volatility, 0.0, 1.0))
        supply_shock = float(np.clip(supply_shock, -1.0, 1.0))
        demand_trend = float(np.clip(demand_trend, -1.0, 1.0))
        shocked = current_price * (1.0 + volatility * (supply_shock - demand_trend))
        return float(np.clip(shocked,
                             current_price * self.MIN_SHOCK_MULTIPLIER,
                             current_price * self.MAX_SHOCK_MULTIPLIER))
