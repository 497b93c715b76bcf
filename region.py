"""
Region entity and its components.
A region is the atomic economic unit: it owns its resources, production,
economy, population and infrastructure components outright and refers to its
nation only by id.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return float(np.clip(value, 0.0, 1.0))


class ResourceComponent:
    """Stockpiles and per-turn production rates of physical resources."""

    def __init__(self, initial_amounts: Optional[Dict[str, float]] = None,
                 production_rates: Optional[Dict[str, float]] = None):
        self.amounts: Dict[str, float] = {"Food": 100.0, "Materials": 100.0, "Fuel": 50.0}
        self.production_rates: Dict[str, float] = {"Food": 10.0, "Materials": 8.0, "Fuel": 5.0}
        if initial_amounts is not None:
            self.amounts = {k: max(0.0, float(v)) for k, v in initial_amounts.items()}
        if production_rates is not None:
            self.production_rates = {k: float(v) for k, v in production_rates.items()}

    def process_production(self):
        """Add one turn of production to every stockpile."""
        for resource, rate in self.production_rates.items():
            self.set_resource_amount(resource, self.amounts.get(resource, 0.0) + rate)

    def get_resource_amount(self, resource: str) -> float:
        return self.amounts.get(resource, 0.0)

    def set_resource_amount(self, resource: str, amount: float):
        self.amounts[resource] = max(0.0, amount)

    def get_production_rate(self, resource: str) -> float:
        return self.production_rates.get(resource, 0.0)

    def set_production_rate(self, resource: str, rate: float):
        self.production_rates[resource] = rate

    def get_total_production_rate(self) -> float:
        return sum(self.production_rates.values())

    def get_summary(self) -> str:
        lines = ["Resources:"]
        for resource, amount in self.amounts.items():
            lines.append(f"  {resource}: {amount:.1f} (+{self.get_production_rate(resource):.1f}/turn)")
        return "\n".join(lines) + "\n"


class ProductionComponent:
    """
    Base production scaled by multiplicative modifiers.

    Sector allocation is renormalized to sum to 1.0 after every edit.
    """

    def __init__(self, initial_production: float = 50.0,
                 modifiers: Optional[Dict[str, float]] = None,
                 sectors: Optional[Dict[str, float]] = None):
        self.base_production = max(0.0, float(initial_production))
        self.production = int(round(self.base_production))
        self.modifiers: Dict[str, float] = {"Infrastructure": 1.0, "Technology": 1.0, "Workforce": 1.0}
        self.sector_allocation: Dict[str, float] = {"Agriculture": 0.4, "Industry": 0.4, "Commerce": 0.2}
        if modifiers:
            self.modifiers.update(modifiers)
        if sectors:
            self.sector_allocation = {k: _clamp01(v) for k, v in sectors.items()}
        self._normalize_sectors()

    def _normalize_sectors(self):
        if not self.sector_allocation:
            return
        total = sum(self.sector_allocation.values())
        if total <= 0:
            # Every share zeroed: split evenly
            share = 1.0 / len(self.sector_allocation)
            for sector in self.sector_allocation:
                self.sector_allocation[sector] = share
            return
        for sector in self.sector_allocation:
            self.sector_allocation[sector] /= total

    def set_production(self, value: int):
        """Overwrite the current production; the base follows it."""
        self.production = max(0, int(value))
        self.base_production = float(self.production)

    def calculate_total_production(self) -> float:
        total_modifier = 1.0
        for modifier in self.modifiers.values():
            total_modifier *= modifier
        return self.base_production * total_modifier

    def recalculate(self):
        self.production = max(0, int(round(self.calculate_total_production())))

    def update_production(self, delta: int):
        """Shift the base production by delta (never below zero) and recompute."""
        self.base_production = max(0.0, self.base_production + delta)
        self.recalculate()

    def set_base_production(self, value: float):
        self.base_production = max(0.0, value)
        self.recalculate()

    def get_sector_production(self, sector: str) -> float:
        if sector not in self.sector_allocation:
            return 0.0
        return self.calculate_total_production() * self.sector_allocation[sector]

    def set_modifier(self, name: str, value: float):
        self.modifiers[name] = value
        self.recalculate()

    def set_sector_allocation(self, sector: str, share: float):
        self.sector_allocation[sector] = _clamp01(share)
        self._normalize_sectors()

    def process_turn(self):
        self.recalculate()

    def get_summary(self) -> str:
        lines = [
            "Production:",
            f"  Base Production: {self.base_production:.1f}",
            f"  Current Production: {self.production}",
            f"  Total Production: {self.calculate_total_production():.1f}",
            "Modifiers:",
        ]
        lines += [f"  {name}: x{value:.2f}" for name, value in self.modifiers.items()]
        lines.append("Sector Allocation:")
        for sector, share in self.sector_allocation.items():
            lines.append(f"  {sector}: {share:.0%} ({self.get_sector_production(sector):.1f})")
        return "\n".join(lines) + "\n"


class RegionEconomyComponent:
    """Regional wealth, GDP and tax bookkeeping."""

    HISTORY_LENGTH = 5
    MAX_GROWTH_RATE = 0.25  # Per turn, either direction

    def __init__(self, initial_gdp: float = 100.0, initial_wealth: int = 100,
                 growth_rate: float = 0.02, factors: Optional[Dict[str, float]] = None):
        self.regional_gdp = float(initial_gdp)
        self.wealth = max(0, int(initial_wealth))
        self.growth_rate = growth_rate
        self.tax_revenue = 0.0
        # Last tick's market outcome for this region
        self.unmet_demand_ratio = 0.0
        self.unrest = 0.0
        self.economic_factors: Dict[str, float] = {"Infrastructure": 1.0, "Stability": 1.0, "Resources": 1.0}
        if factors:
            self.economic_factors.update(factors)
        self.gdp_history = deque([self.regional_gdp], maxlen=self.HISTORY_LENGTH)

    def update_wealth(self, amount: int):
        self.wealth = max(0, self.wealth + int(amount))

    def set_wealth(self, value: int):
        self.wealth = max(0, int(value))

    def set_economic_factor(self, name: str, value: float):
        self.economic_factors[name] = value

    def calculate_tax_revenue(self, tax_rate: float) -> float:
        self.tax_revenue = self.regional_gdp * tax_rate
        return self.tax_revenue

    def process_turn(self, resource_production: float, infrastructure_level: float, tax_rate: float = 0.1):
        """Grow GDP by the combined economic factors and re-derive wealth from it."""
        self.set_economic_factor("Resources", 0.5 + resource_production / 100.0)
        self.set_economic_factor("Infrastructure", 0.5 + infrastructure_level / 10.0)

        multiplier = float(np.prod(list(self.economic_factors.values())))
        previous_gdp = self.regional_gdp
        self.regional_gdp *= 1.0 + self.growth_rate * multiplier
        if previous_gdp > 0:
            growth = (self.regional_gdp - previous_gdp) / previous_gdp
            self.growth_rate = float(np.clip(growth, -self.MAX_GROWTH_RATE, self.MAX_GROWTH_RATE))

        self.set_wealth(round(self.regional_gdp * 0.5))
        self.gdp_history.append(self.regional_gdp)
        self.calculate_tax_revenue(tax_rate)

    def get_summary(self) -> str:
        trend = ", ".join(f"{gdp:.0f}" for gdp in self.gdp_history)
        return (
            "Economy:\n"
            f"  Wealth: {self.wealth}\n"
            f"  Regional GDP: {self.regional_gdp:.1f}\n"
            f"  Growth Rate: {self.growth_rate:.1%}\n"
            f"  Tax Revenue: {self.tax_revenue:.1f}\n"
            f"  Unrest: {self.unrest:.1f}\n"
            f"  GDP Trend: {trend}\n"
        )


class PopulationComponent:
    """Population size, needs satisfaction and the labor it supplies."""

    MIN_POPULATION = 100

    def __init__(self, initial_population: int = 1000, initial_labor: float = 100.0,
                 growth_rate: float = 0.01, resource_needs: Optional[Dict[str, float]] = None,
                 needs_satisfaction: Optional[Dict[str, float]] = None):
        self.population = max(self.MIN_POPULATION, int(initial_population))
        self.labor_available = max(0.0, float(initial_labor))
        self.growth_rate = growth_rate
        self.satisfaction = 0.7
        self.labor_efficiency = 1.0
        # Units consumed per person per turn
        self.resource_needs: Dict[str, float] = {"Food": 0.1, "Fuel": 0.05, "Materials": 0.02}
        self.needs_satisfaction: Dict[str, float] = {
            "Food": 0.8, "Fuel": 0.7, "Materials": 0.6, "Infrastructure": 0.5
        }
        if resource_needs:
            self.resource_needs.update(resource_needs)
        if needs_satisfaction:
            self.needs_satisfaction.update({k: _clamp01(v) for k, v in needs_satisfaction.items()})

    def set_resource_need(self, resource: str, amount_per_person: float):
        self.resource_needs[resource] = amount_per_person

    def get_total_resource_need(self, resource: str) -> float:
        return self.resource_needs.get(resource, 0.0) * self.population

    def update_need_satisfaction(self, need: str, level: float):
        self.needs_satisfaction[need] = _clamp01(level)
        self._recalculate_satisfaction()

    def update_infrastructure_satisfaction(self, infrastructure_level: float):
        self.update_need_satisfaction("Infrastructure", infrastructure_level / 10.0)

    def _recalculate_satisfaction(self):
        if self.needs_satisfaction:
            self.satisfaction = float(np.mean(list(self.needs_satisfaction.values())))

    def process_turn(self, available_resources: Dict[str, float], infrastructure_level: float):
        self.update_infrastructure_satisfaction(infrastructure_level)

        for need in self.resource_needs:
            if need not in available_resources:
                continue
            required = self.get_total_resource_need(need)
            level = available_resources[need] / required if required > 0 else 1.0
            self.update_need_satisfaction(need, level)

        adjusted_growth = self.growth_rate * (self.satisfaction * 2 - 0.5)
        self.population = max(self.MIN_POPULATION, int(round(self.population * (1 + adjusted_growth))))
        self.labor_available = self.population * 0.1 * self.satisfaction
        self.labor_efficiency = 0.5 + self.satisfaction * 0.5

    def update_labor_available(self, delta: float):
        self.labor_available = max(0.0, self.labor_available + delta)

    def get_summary(self) -> str:
        lines = [
            "Population:",
            f"  Total Population: {self.population}",
            f"  Growth Rate: {self.growth_rate:.1%}",
            f"  Satisfaction: {self.satisfaction:.0%}",
            f"  Labor Available: {self.labor_available:.0f}",
            f"  Labor Efficiency: {self.labor_efficiency:.0%}",
            "Needs Satisfaction:",
        ]
        for need, level in self.needs_satisfaction.items():
            label = "High" if level > 0.8 else "Medium" if level > 0.5 else "Low"
            lines.append(f"  {need}: {label} ({level:.0%})")
        return "\n".join(lines) + "\n"


class InfrastructureComponent:
    """Infrastructure level (never below 1.0), quality and upkeep."""

    MIN_LEVEL = 1.0

    def __init__(self, initial_level: float = 5.0, initial_quality: float = 0.5,
                 aspects: Optional[Dict[str, float]] = None):
        self.level = max(self.MIN_LEVEL, float(initial_level))
        self.quality = _clamp01(initial_quality)
        self.aspects: Dict[str, float] = {"Roads": 0.5, "Buildings": 0.5, "Utilities": 0.5}
        if aspects:
            self.aspects.update({k: _clamp01(v) for k, v in aspects.items()})
        self.maintenance_cost = self._calculate_maintenance_cost()

    def _calculate_maintenance_cost(self) -> float:
        # Better quality is cheaper to keep up
        return self.level * (2.0 - self.quality * 0.5)

    def set_level(self, level: float):
        self.level = max(self.MIN_LEVEL, level)
        self.maintenance_cost = self._calculate_maintenance_cost()

    def invest(self, amount: float) -> float:
        """Raise level with diminishing returns; returns the level gained."""
        if amount <= 0:
            return 0.0
        increase = amount * (1.0 / (self.level + 1.0)) * 0.1
        self.level += increase
        self.quality = _clamp01(self.quality + increase * 0.05)
        self.maintenance_cost = self._calculate_maintenance_cost()
        return increase

    def apply_maintenance(self, funding: float):
        ratio = funding / self.maintenance_cost if self.maintenance_cost > 0 else 1.0
        if ratio < 0.8:
            self.quality = max(0.1, self.quality - 0.05 * (1.0 - ratio))
        elif ratio > 1.2:
            self.quality = min(1.0, self.quality + 0.02 * (ratio - 1.0))
        self.maintenance_cost = self._calculate_maintenance_cost()

    def process_turn(self, maintenance_funding: float):
        self.apply_maintenance(maintenance_funding)
        # Slow natural wear
        self.set_level(self.level - 0.01)
        for aspect in self.aspects:
            self.aspects[aspect] = _clamp01(self.level / 10.0 * self.quality)

    def get_production_modifier(self) -> float:
        return 0.5 + (self.level / 10.0) * self.quality

    def get_summary(self) -> str:
        q = self.quality
        label = ("Excellent" if q > 0.8 else "Good" if q > 0.6 else
                 "Average" if q > 0.4 else "Poor" if q > 0.2 else "Terrible")
        lines = [
            "Infrastructure:",
            f"  Level: {self.level:.1f}",
            f"  Quality: {label} ({q:.0%})",
            f"  Maintenance Cost: {self.maintenance_cost:.1f}",
            "Aspects:",
        ]
        lines += [f"  {aspect}: {value:.0%}" for aspect, value in self.aspects.items()]
        return "\n".join(lines) + "\n"


# Component configurations. A RegionConfig replaces the default components
# of a new region with the ones its sub-configs build.

@dataclass
class ResourceConfig:
    initial_amounts: Dict[str, float] = field(default_factory=dict)
    production_rates: Dict[str, float] = field(default_factory=dict)

    def create_component(self) -> ResourceComponent:
        return ResourceComponent(dict(self.initial_amounts), dict(self.production_rates))


@dataclass
class ProductionConfig:
    base_production: float = 50.0
    modifiers: Dict[str, float] = field(default_factory=dict)
    sectors: Dict[str, float] = field(default_factory=dict)

    def create_component(self) -> ProductionComponent:
        return ProductionComponent(self.base_production, dict(self.modifiers), dict(self.sectors) or None)


@dataclass
class EconomyConfigData:
    initial_gdp: float = 100.0
    initial_wealth: int = 100
    growth_rate: float = 0.02
    factors: Dict[str, float] = field(default_factory=dict)

    def create_component(self) -> RegionEconomyComponent:
        return RegionEconomyComponent(self.initial_gdp, self.initial_wealth,
                                      self.growth_rate, dict(self.factors))


@dataclass
class PopulationConfig:
    initial_population: int = 1000
    initial_labor: float = 100.0
    growth_rate: float = 0.01
    resource_needs: Dict[str, float] = field(default_factory=dict)
    needs_satisfaction: Dict[str, float] = field(default_factory=dict)

    def create_component(self) -> PopulationComponent:
        return PopulationComponent(self.initial_population, self.initial_labor, self.growth_rate,
                                   dict(self.resource_needs), dict(self.needs_satisfaction))


@dataclass
class InfrastructureConfig:
    initial_level: float = 5.0
    initial_quality: float = 0.5
    aspects: Dict[str, float] = field(default_factory=dict)

    def create_component(self) -> InfrastructureComponent:
        return InfrastructureComponent(self.initial_level, self.initial_quality, dict(self.aspects))


@dataclass
class RegionConfig:
    region_type: str = "Plains"
    description: str = ""
    color: Tuple[float, float, float] = (0.5, 0.5, 0.5)
    resources: Optional[ResourceConfig] = None
    production: Optional[ProductionConfig] = None
    economy: Optional[EconomyConfigData] = None
    population: Optional[PopulationConfig] = None
    infrastructure: Optional[InfrastructureConfig] = None


class RegionEntity:
    """A region: identity, weak nation reference and its owned components."""

    def __init__(self, id: str, name: str, nation_id: Optional[str] = None,
                 resources: Optional[ResourceComponent] = None,
                 production: Optional[ProductionComponent] = None,
                 economy: Optional[RegionEconomyComponent] = None,
                 population: Optional[PopulationComponent] = None,
                 infrastructure: Optional[InfrastructureComponent] = None):
        self._id = id
        self._name = name
        self.nation_id = nation_id
        self.region_type = "Plains"

        self.resources = resources or ResourceComponent()
        self.production_comp = production or ProductionComponent()
        self.economy = economy or RegionEconomyComponent()
        self.population = population or PopulationComponent()
        self.infrastructure = infrastructure or InfrastructureComponent()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    # Delegating accessors
    @property
    def wealth(self) -> int:
        return self.economy.wealth

    @wealth.setter
    def wealth(self, value: int):
        self.economy.set_wealth(value)

    @property
    def production(self) -> int:
        return self.production_comp.production

    @production.setter
    def production(self, value: int):
        self.production_comp.set_production(value)

    @property
    def labor_available(self) -> float:
        return self.population.labor_available

    @property
    def infrastructure_level(self) -> float:
        return self.infrastructure.level

    @property
    def population_count(self) -> int:
        return self.population.population

    def configure(self, config: Optional[RegionConfig]):
        """Replace default components with the ones built from config."""
        if config is None:
            logger.warning(f"No RegionConfig provided for {self.name}. Using default values.")
            return
        self.region_type = config.region_type
        if config.resources is not None:
            self.resources = config.resources.create_component()
        if config.production is not None:
            self.production_comp = config.production.create_component()
        if config.economy is not None:
            self.economy = config.economy.create_component()
        if config.population is not None:
            self.population = config.population.create_component()
        if config.infrastructure is not None:
            self.infrastructure = config.infrastructure.create_component()

    def process_turn(self, tax_rate: float = 0.1):
        """Advance the region's own components by one turn."""
        self.resources.process_production()

        # 5% of wealth funds infrastructure upkeep
        self.infrastructure.process_turn(self.economy.wealth * 0.05)

        self.production_comp.set_modifier("Infrastructure", self.infrastructure.get_production_modifier())
        self.production_comp.set_modifier("Workforce", self.population.labor_available / 100.0)
        self.production_comp.set_modifier("Efficiency", self.population.labor_efficiency)
        self.production_comp.process_turn()

        available = {r: self.resources.get_resource_amount(r) for r in ("Food", "Materials", "Fuel")}
        self.population.process_turn(available, self.infrastructure.level)

        total_rate = sum(self.resources.get_production_rate(r) for r in available)
        self.economy.process_turn(total_rate, self.infrastructure.level, tax_rate)

        for resource in available:
            needed = self.population.get_total_resource_need(resource)
            on_hand = self.resources.get_resource_amount(resource)
            self.resources.set_resource_amount(resource, on_hand - min(needed, on_hand))

    def invest_in_infrastructure(self, amount: float) -> float:
        """Spend region wealth on infrastructure. Returns the level gained (0 if unaffordable)."""
        if amount <= 0 or amount > self.economy.wealth:
            return 0.0
        improvement = self.infrastructure.invest(amount)
        self.economy.update_wealth(-int(round(amount)))
        return improvement

    def get_summary(self) -> str:
        summary = f"Region: {self.name}\nNation ID: {self.nation_id or 'None'}\n"
        summary += self.resources.get_summary()
        summary += self.production_comp.get_summary()
        summary += self.economy.get_summary()
        summary += self.population.get_summary()
        summary += self.infrastructure.get_summary()
        return summary

    def __repr__(self):
        return f"RegionEntity(id={self.id!r}, wealth={self.wealth}, production={self.production})"


def create_region(id: str, name: str, wealth: int = 100, production: int = 50,
                  config: Optional[RegionConfig] = None) -> RegionEntity:
    """
    Build a region with default components seeded from wealth and production.
    A config, when given, replaces those components wholesale.
    """
    region = RegionEntity(
        id,
        name,
        economy=RegionEconomyComponent(initial_gdp=wealth + production * 2, initial_wealth=wealth),
        production=ProductionComponent(production),
        population=PopulationComponent(1000, 100),
        infrastructure=InfrastructureComponent(5.0, 0.5),
    )
    if config is not None:
        region.configure(config)
    return region
