"""
Nation entity and its fiscal component.
A nation aggregates a set of member regions (by id only) and owns its
economy, policy, diplomacy and stability components.
"""

from collections import deque
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np

from diplomacy import DiplomaticActionType, DiplomaticRelation, DiplomaticStatus, NationDiplomacyComponent
from politics import NationPolicyComponent, NationStabilityComponent, Policy, PolicyType
from region import RegionEntity

logger = logging.getLogger(__name__)


class NationEconomyComponent:
    """Treasury, taxation and GDP aggregated from member regions."""

    HISTORY_LENGTH = 10

    def __init__(self, tax_rate: float = 0.1, infrastructure_investment: float = 0.3,
                 inflation: float = 0.02):
        self.total_wealth = 0.0
        self.total_production = 0.0
        self.treasury = 0.0
        self.tax_rate = tax_rate
        self.infrastructure_investment = infrastructure_investment  # Share of treasury per turn
        self.gdp = 0.0
        self.gdp_growth_rate = 0.0
        self.previous_gdp = 0.0
        self.inflation = inflation
        self.gdp_history = deque(maxlen=self.HISTORY_LENGTH)

    def set_treasury_balance(self, value: float):
        self.treasury = max(0.0, value)

    def update_from_regions(self, regions: List[RegionEntity]):
        """Recompute totals and GDP (wealth + 2 x production) from member regions."""
        if not regions:
            self.total_wealth = 0.0
            self.total_production = 0.0
            self.gdp = 0.0
            self.gdp_growth_rate = 0.0
            return

        self.previous_gdp = self.gdp
        self.total_wealth = float(sum(r.wealth for r in regions))
        self.total_production = float(sum(r.production for r in regions))
        self.gdp = self.total_wealth + self.total_production * 2
        self.gdp_history.append(self.gdp)

        if self.previous_gdp > 0:
            self.gdp_growth_rate = (self.gdp - self.previous_gdp) / self.previous_gdp
        else:
            self.gdp_growth_rate = 0.0

    def collect_taxes(self, regions: List[RegionEntity]) -> float:
        revenue = 0.0
        for region in regions:
            tax = min(region.wealth, round(region.wealth * self.tax_rate))
            region.wealth = region.wealth - tax
            revenue += tax
        self.treasury += revenue
        return revenue

    def distribute_subsidies(self, regions: List[RegionEntity], amount: float) -> float:
        """
        Split up to `amount` of the treasury equally across regions in whole units.
        Only what the regions actually receive leaves the treasury; that sum is returned.
        """
        amount = min(amount, self.treasury)
        if amount <= 0 or not regions:
            return 0.0
        per_region = round(amount / len(regions))
        if per_region * len(regions) > self.treasury:
            per_region = int(self.treasury // len(regions))
        paid = 0
        for region in regions:
            region.wealth = region.wealth + per_region
            paid += per_region
        self.treasury -= paid
        return float(paid)

    def invest_in_infrastructure(self, regions: List[RegionEntity], efficiency: float = 1.0) -> float:
        """
        Spend the configured share of the treasury on member infrastructure.

        Each region gains per_region / (level * 10 + 1) levels, scaled by
        efficiency. Returns the amount withdrawn from the treasury.
        """
        investment = self.treasury * self.infrastructure_investment
        if investment <= 0 or not regions:
            return 0.0
        per_region = investment / len(regions)
        for region in regions:
            gain = per_region / (region.infrastructure.level * 10 + 1) * efficiency
            region.infrastructure.set_level(region.infrastructure.level + gain)
        self.treasury -= investment
        return investment

    def apply_inflation(self, regions: List[RegionEntity]):
        for region in regions:
            region.wealth = region.wealth - round(region.wealth * self.inflation)

    def get_average_gdp(self) -> float:
        if not self.gdp_history:
            return 0.0
        return float(np.mean(self.gdp_history))

    def process_turn(self, regions: List[RegionEntity], investment_efficiency: float = 1.0):
        self.update_from_regions(regions)
        self.collect_taxes(regions)
        self.invest_in_infrastructure(regions, investment_efficiency)
        self.apply_inflation(regions)

    def growth_description(self) -> str:
        g = self.gdp_growth_rate
        if g > 0.05:
            return "Strong Growth"
        if g > 0.02:
            return "Moderate Growth"
        if g > 0.0:
            return "Slow Growth"
        if g > -0.02:
            return "Stagnation"
        if g > -0.05:
            return "Recession"
        return "Depression"

    def get_summary(self) -> str:
        t = self.treasury
        treasury_label = ("Well-Funded" if t > 1000 else "Adequate" if t > 500 else
                          "Limited" if t > 200 else "Strained" if t > 50 else "Empty")
        lines = [
            f"GDP: {self.gdp:.0f} ({self.growth_description()}, {self.gdp_growth_rate:.1%})",
            f"Treasury: {t:.0f} ({treasury_label})",
            f"Tax Rate: {self.tax_rate:.0%}",
            f"Inflation: {self.inflation:.1%}",
            f"Infrastructure Investment: {self.infrastructure_investment:.0%} of Treasury",
            f"Total Wealth: {self.total_wealth:.0f}",
            f"Total Production: {self.total_production:.0f}",
        ]
        if len(self.gdp_history) > 1:
            lines.append("")
            lines.append("GDP Trend:")
            history = list(self.gdp_history)[-5:]
            for offset, gdp in enumerate(history):
                lines.append(f"  Year {offset - len(history)}: {gdp:.0f}")
        return "\n".join(lines)


class NationEntity:
    """Model of a nation: membership of regions plus its four components."""

    def __init__(self, id: str, name: str, color: Tuple[float, float, float] = (0.5, 0.5, 0.5),
                 tax_rate: float = 0.1, infrastructure_investment: float = 0.3, inflation: float = 0.02):
        self._id = id
        self._name = name
        self._color = tuple(color)
        self.region_ids: List[str] = []

        self.economy = NationEconomyComponent(tax_rate, infrastructure_investment, inflation)
        self.policy = NationPolicyComponent()
        self.diplomacy = NationDiplomacyComponent()
        self.stability = NationStabilityComponent()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def color(self) -> Tuple[float, float, float]:
        return self._color

    @property
    def total_wealth(self) -> float:
        return self.economy.total_wealth

    @property
    def total_production(self) -> float:
        return self.economy.total_production

    # Region membership
    def add_region(self, region_id: str):
        if region_id not in self.region_ids:
            self.region_ids.append(region_id)

    def remove_region(self, region_id: str):
        if region_id in self.region_ids:
            self.region_ids.remove(region_id)

    def get_region_ids(self) -> List[str]:
        return list(self.region_ids)

    def has_region(self, region_id: str) -> bool:
        return region_id in self.region_ids

    # Policy
    def set_policy(self, policy_type: PolicyType, value: float):
        self.policy.set_policy(policy_type, value)

    def get_policy(self, policy_type: PolicyType) -> float:
        return self.policy.get_policy(policy_type)

    def implement_policy(self, policy: Policy) -> bool:
        """Enact a reform, paying its cost from the treasury."""
        if not self.policy.implement_policy(policy, self.economy.treasury):
            return False
        self.economy.set_treasury_balance(self.economy.treasury - policy.cost)
        if policy.stability_effect:
            self.stability.apply_stability_event(policy.stability_effect, "policy", policy.name)
        return True

    # Diplomacy
    def set_diplomatic_status(self, other_id: str, status: DiplomaticStatus):
        self.diplomacy.set_status(other_id, status)

    def get_diplomatic_status(self, other_id: str) -> DiplomaticStatus:
        return self.diplomacy.get_status(other_id)

    def get_diplomatic_relation(self, other_id: str) -> Optional[DiplomaticRelation]:
        return self.diplomacy.get_relation(other_id)

    def apply_diplomatic_event(self, other_id: str, change: float, description: str = ""):
        self.diplomacy.apply_event(other_id, change, description)

    def can_perform_diplomatic_action(self, other_id: str, action: DiplomaticActionType) -> bool:
        return self.diplomacy.can_perform_action(other_id, action)

    # Stability
    def apply_stability_event(self, impact: float, source: str, description: str = ""):
        self.stability.apply_stability_event(impact, source, description)

    def set_unrest_factor(self, factor_id: str, description: str, severity: float):
        self.stability.set_unrest_factor(factor_id, description, severity)

    def remove_unrest_factor(self, factor_id: str):
        self.stability.remove_unrest_factor(factor_id)

    def is_revolt_occurring(self) -> bool:
        return self.stability.is_revolt_occurring()

    def process_turn(self, regions: List[RegionEntity], investment_efficiency: float = 1.0):
        """
        Run one nation turn over its member regions.
        Order: economy, policy, diplomacy, stability. Each stage reads the
        figures the previous one just produced.
        """
        # 1. Economy: aggregate, tax, invest, inflate
        self.economy.process_turn(regions, investment_efficiency)

        # 2. Policy
        self.policy.process_turn()
        self.policy.apply_policy_effects(regions)

        # 3. Diplomacy
        self.diplomacy.process_turn()

        # 4. Stability
        self.stability.process_turn()
        self.stability.apply_policy_effects(self.policy.get_all_policies())
        if regions:
            self.stability.apply_regional_unrest(float(np.mean([r.economy.unrest for r in regions])))

        population = len(regions) * 10  # Nominal headcount per region
        wealth_per_capita = self.economy.total_wealth / population if population > 0 else 0.0
        self.stability.apply_economic_effects(self.economy.gdp_growth_rate, wealth_per_capita)

    def get_summary(self) -> str:
        e, s = self.economy, self.stability
        summary = (
            f"Nation: {self.name}\n"
            f"Regions: {len(self.region_ids)}\n"
            f"Wealth: {e.total_wealth:.0f}\n"
            f"Production: {e.total_production:.0f}\n"
            f"GDP: {e.gdp:.0f}\n"
            f"Growth: {e.gdp_growth_rate:.1%}\n"
            f"Treasury: {e.treasury:.0f}\n"
            f"Stability: {s.stability:.0%}\n"
            f"Unrest: {s.unrest_level:.0%}\n"
            f"Diplomatic Relations: {self.diplomacy.relation_count()}\n\n"
        )
        summary += "=== POLICY ===\n" + self.policy.get_summary() + "\n\n"
        summary += "=== ECONOMY ===\n" + e.get_summary() + "\n\n"
        summary += "=== STABILITY ===\n" + s.get_summary() + "\n\n"
        summary += "=== DIPLOMACY ===\n" + self.diplomacy.get_summary()
        return summary

    def to_dict(self) -> Dict[str, object]:
        """Flat snapshot used for history and reports."""
        return {
            "id": self.id,
            "name": self.name,
            "regions": len(self.region_ids),
            "wealth": self.economy.total_wealth,
            "production": self.economy.total_production,
            "gdp": self.economy.gdp,
            "growth": self.economy.gdp_growth_rate,
            "treasury": self.economy.treasury,
            "stability": self.stability.stability,
            "unrest": self.stability.unrest_level,
        }

    def __repr__(self):
        return f"NationEntity(id={self.id!r}, regions={len(self.region_ids)})"
