from enum import Enum, auto
from typing import List, Dict, Optional
from dataclasses import dataclass
import logging

import numpy as np

logger = logging.getLogger(__name__)


class PolicyType(Enum):
    ECONOMIC = auto()    # 0 = centralized, 1 = free market
    DIPLOMATIC = auto()
    MILITARY = auto()    # 0 = pacifist, 1 = militarist
    SOCIAL = auto()      # 0 = conservative, 1 = progressive


@dataclass
class Policy:
    """A one-shot reform with an upfront cost that stays active for a number of turns."""
    name: str
    description: str
    cost: int
    duration: int
    wealth_effect: float = 0.0      # Fraction of region wealth added per turn
    production_effect: float = 0.0  # Fraction of region production added per turn
    stability_effect: float = 0.0   # Applied once when enacted
    turns_remaining: Optional[int] = None

    def __post_init__(self):
        if self.turns_remaining is None:
            self.turns_remaining = self.duration

    def update_turn(self) -> bool:
        """Tick down one turn. Returns whether the policy is still active."""
        if self.turns_remaining <= 0:
            return False
        self.turns_remaining -= 1
        return self.turns_remaining > 0


class NationPolicyComponent:
    """
    Policy sliders and active reforms of a nation.
    Every slider is kept in [0, 1]; 0.5 is balanced.
    """
    def __init__(self):
        self.policies: Dict[PolicyType, float] = {p: 0.5 for p in PolicyType}
        self.active_policies: List[Policy] = []

    def set_policy(self, policy_type: PolicyType, value: float):
        self.policies[policy_type] = float(np.clip(value, 0.0, 1.0))

    def get_policy(self, policy_type: PolicyType) -> float:
        return self.policies.get(policy_type, 0.5)

    def get_all_policies(self) -> Dict[PolicyType, float]:
        return dict(self.policies)

    def get_active_policies(self) -> List[Policy]:
        return list(self.active_policies)

    def implement_policy(self, policy: Policy, treasury_balance: float) -> bool:
        if policy.cost > treasury_balance:
            logger.warning(f"Cannot implement policy {policy.name}: Insufficient funds")
            return False
        self.active_policies.append(policy)
        return True

    def apply_policy_effects(self, regions: list):
        """Apply active reforms and slider effects to every member region."""
        for region in regions:
            for policy in self.active_policies:
                if policy.wealth_effect:
                    region.wealth = region.wealth + round(region.wealth * policy.wealth_effect)
                if policy.production_effect:
                    region.production = region.production + round(region.production * policy.production_effect)
            self._apply_slider_effects(region)

    def _apply_slider_effects(self, region):
        economic = self.get_policy(PolicyType.ECONOMIC)
        if economic > 0.7:
            # Free market: more output
            region.production = region.production + round(region.production * 0.05)
        elif economic < 0.3:
            region.wealth = max(region.wealth - 2, 0)

        if self.get_policy(PolicyType.MILITARY) > 0.7:
            region.wealth = max(region.wealth - 5, 0)

    def process_turn(self):
        """Expire finished reforms."""
        still_active = []
        for policy in self.active_policies:
            if policy.update_turn():
                still_active.append(policy)
            else:
                logger.info(f"Policy {policy.name} has expired")
        self.active_policies = still_active

    def get_summary(self) -> str:
        lines = ["Policy Settings:"]
        for policy_type, value in self.policies.items():
            label = "Low" if value < 0.3 else "High" if value > 0.7 else "Balanced"
            lines.append(f"- {policy_type.name.title()}: {label} ({value:.2f})")
        lines.append("")
        lines.append("Active Policies:")
        if not self.active_policies:
            lines.append("- None")
        for policy in self.active_policies:
            lines.append(f"- {policy.name} ({policy.turns_remaining} turns remaining)")
        return "\n".join(lines)


def create_standard_policy(name: str, description: str, cost: int, duration: int,
                           wealth_effect: float, production_effect: float,
                           stability_effect: float) -> Policy:
    return Policy(name, description, cost, duration, wealth_effect, production_effect, stability_effect)


@dataclass
class UnrestFactor:
    id: str
    description: str
    severity: float = 0.0  # 0-1

    def __post_init__(self):
        self.severity = float(np.clip(self.severity, 0.0, 1.0))


@dataclass
class StabilityEvent:
    impact: float
    source: str
    description: str = ""


class NationStabilityComponent:
    """
    Nation stability and unrest.

    Unrest is derived from named factors: 70% of the worst factor plus 30% of
    the average, dampened by current stability.
    """
    REVOLT_THRESHOLD = 0.8
    NATURAL_RECOVERY = 0.01
    MAX_RECENT_EVENTS = 10

    def __init__(self, initial_stability: float = 0.5):
        self.stability = float(np.clip(initial_stability, 0.0, 1.0))
        self.unrest_level = 0.0
        self.unrest_factors: Dict[str, UnrestFactor] = {}
        self.recent_events: List[StabilityEvent] = []

    def modify_stability(self, change: float):
        self.stability = float(np.clip(self.stability + change, 0.0, 1.0))

    def apply_stability_event(self, impact: float, source: str, description: str = ""):
        self.modify_stability(impact)
        self.recent_events.append(StabilityEvent(impact, source, description))
        self.recent_events = self.recent_events[-self.MAX_RECENT_EVENTS:]
        logger.debug(f"Stability event: {description} from {source} ({impact:+.2f})")

    def set_unrest_factor(self, factor_id: str, description: str, severity: float):
        if not factor_id:
            return
        factor = self.unrest_factors.get(factor_id)
        if factor is None:
            self.unrest_factors[factor_id] = UnrestFactor(factor_id, description, severity)
        else:
            factor.description = description
            factor.severity = float(np.clip(severity, 0.0, 1.0))
        self._recalculate_unrest()

    def remove_unrest_factor(self, factor_id: str):
        if self.unrest_factors.pop(factor_id, None) is not None:
            self._recalculate_unrest()

    def is_revolt_occurring(self) -> bool:
        return self.unrest_level >= self.REVOLT_THRESHOLD

    def _recalculate_unrest(self):
        if not self.unrest_factors:
            self.unrest_level = 0.0
            return
        severities = [f.severity for f in self.unrest_factors.values()]
        unrest = max(severities) * 0.7 + float(np.mean(severities)) * 0.3
        unrest *= 1.0 - self.stability * 0.5
        self.unrest_level = float(np.clip(unrest, 0.0, 1.0))

    def process_turn(self):
        if self.unrest_level < 0.3:
            self.modify_stability(self.NATURAL_RECOVERY)

        # Factors fade unless refreshed
        for factor_id in list(self.unrest_factors):
            factor = self.unrest_factors[factor_id]
            factor.severity = max(0.0, factor.severity - 0.02)
            if factor.severity < 0.01:
                del self.unrest_factors[factor_id]
        self._recalculate_unrest()

    def apply_policy_effects(self, policies: Dict[PolicyType, float]):
        if policies.get(PolicyType.SOCIAL, 0.5) > 0.7:
            self.modify_stability(0.01)

    def apply_economic_effects(self, gdp_growth: float, wealth_per_capita: float):
        if gdp_growth > 0.05:
            self.modify_stability(0.02)
        elif gdp_growth < -0.05:
            self.modify_stability(-0.03)

        if wealth_per_capita < 10:
            self.set_unrest_factor("poverty", "Widespread Poverty", 0.5)
        elif wealth_per_capita > 50:
            self.remove_unrest_factor("poverty")

    def apply_regional_unrest(self, average_unrest: float):
        """Feed the regions' shortage unrest (0-100 scale) into a nation-level factor."""
        severity = float(np.clip(average_unrest / 100.0, 0.0, 1.0))
        if severity >= 0.01:
            self.set_unrest_factor("shortages", "Resource Shortages", severity)
        else:
            self.remove_unrest_factor("shortages")

    def get_summary(self) -> str:
        s, u = self.stability, self.unrest_level
        stability_label = ("Excellent" if s > 0.8 else "Good" if s > 0.6 else
                           "Average" if s > 0.4 else "Poor" if s > 0.2 else "Critical")
        unrest_label = ("Minimal" if u < 0.2 else "Minor" if u < 0.4 else
                        "Significant" if u < 0.6 else "Severe" if u < 0.8 else "Revolutionary")
        lines = [f"Stability: {stability_label} ({s:.0%})", f"Unrest: {unrest_label} ({u:.0%})"]
        if self.unrest_factors:
            lines.append("")
            lines.append("Unrest Factors:")
            for factor in self.unrest_factors.values():
                label = "Critical" if factor.severity > 0.7 else "Serious" if factor.severity > 0.4 else "Minor"
                lines.append(f"- {factor.description}: {label} ({factor.severity:.0%})")
        if self.recent_events:
            lines.append("")
            lines.append("Recent Events:")
            for event in reversed(self.recent_events):
                lines.append(f"- {event.description} ({event.impact:+.2f})")
        return "\n".join(lines)
