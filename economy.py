"""
Economic system orchestrator.
Owns the region registry and runs the four-pass economic tick:
production, consumption/demand, pricing and notification.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import random

from config import EconomyConfig
from calculators import (
    ProductionCalculator,
    InfrastructureCalculator,
    ConsumptionCalculator,
    PriceCalculator,
)
from cycle import CyclePhase, EconomicCycleCalculator
from events import NotificationQueue, TickCompleted, RegionUpdated, MapColorsRefresh
from region import RegionEntity
from logger import setup_logger

logger = setup_logger()


class EconomicSystem:
    """Region registry plus the fixed multi-pass economic tick."""

    def __init__(self, config: Optional[EconomyConfig] = None,
                 production: Optional[ProductionCalculator] = None,
                 infrastructure: Optional[InfrastructureCalculator] = None,
                 consumption: Optional[ConsumptionCalculator] = None,
                 pricing: Optional[PriceCalculator] = None,
                 cycle: Optional[EconomicCycleCalculator] = None,
                 notifications: Optional[NotificationQueue] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or EconomyConfig()
        c = self.config

        self.production_calculator = production or ProductionCalculator(
            c.productivity, c.labor_elasticity, c.capital_elasticity)
        self.infrastructure_calculator = infrastructure or InfrastructureCalculator(
            c.infrastructure_efficiency, c.infrastructure_decay, c.maintenance_cost_factor)
        self.consumption_calculator = consumption or ConsumptionCalculator(
            c.base_consumption_rate, c.consumption_exponent, c.unrest_factor)
        self.price_calculator = pricing or PriceCalculator()
        self.cycle = cycle or EconomicCycleCalculator(c.cycle_length)
        self.notifications = notifications or NotificationQueue()
        self.rng = rng or random.Random()

        self.regions: Dict[str, RegionEntity] = {}
        self.resource_types: List[str] = list(c.resource_types)
        self.prices: Dict[str, float] = {t: c.base_price for t in self.resource_types}
        self.supply: Dict[str, float] = {t: 0.0 for t in self.resource_types}
        self.demand: Dict[str, float] = {t: 0.0 for t in self.resource_types}
        self.ticks_processed = 0

    # Region registry
    def register_region(self, region: RegionEntity) -> bool:
        """Add a region; an id that is already registered is left untouched."""
        if region is None or region.id in self.regions:
            return False
        self.regions[region.id] = region
        logger.debug(f"Region registered: {region.name} with ID: {region.id}")
        return True

    def get_region(self, region_id: str) -> Optional[RegionEntity]:
        return self.regions.get(region_id)

    def get_all_regions(self) -> List[RegionEntity]:
        return list(self.regions.values())

    def get_all_region_ids(self) -> List[str]:
        return list(self.regions.keys())

    def update_region(self, region: RegionEntity):
        """
        Entry point for outside code that edited a region directly.
        Unknown regions are registered; known ones announce a RegionUpdated.
        """
        if region is None:
            return
        if region.id not in self.regions:
            self.register_region(region)
            return
        self.regions[region.id] = region
        self.notifications.publish(RegionUpdated(self.ticks_processed, region.id))
        self.notifications.flush()

    # Aggregates
    def get_total_wealth(self) -> int:
        return sum(r.wealth for r in self.regions.values())

    def set_region_wealth(self, region_id: str, value: int) -> bool:
        region = self.get_region(region_id)
        if region is None:
            return False
        region.wealth = value
        return True

    def set_total_wealth(self, target: int):
        """Rescale region wealth so the registry total lands on target."""
        if not self.regions:
            return
        target = max(0, int(target))
        current = self.get_total_wealth()
        regions = self.get_all_regions()
        if current <= 0:
            for region in regions:
                region.wealth = target // len(regions)
            return
        factor = target / current
        for region in regions:
            region.wealth = round(region.wealth * factor)

    def get_resource_price(self, resource_type: str) -> float:
        return self.prices.get(resource_type, self.config.base_price)

    def get_price_snapshot(self) -> Dict[str, float]:
        return dict(self.prices)

    def get_supply(self) -> Dict[str, float]:
        return dict(self.supply)

    def get_demand(self) -> Dict[str, float]:
        return dict(self.demand)

    def get_cycle_phase(self) -> CyclePhase:
        return self.cycle.current_phase

    def get_cycle_description(self) -> str:
        return self.cycle.get_phase_description()

    # Nation-level views. Regions name their nation by id only, so a stale
    # or unset nation_id simply contributes nothing.
    def _nation_regions(self, nation_id: str) -> List[RegionEntity]:
        return [r for r in self.regions.values() if r.nation_id == nation_id]

    def get_nation_wealth(self, nation_id: str) -> int:
        return sum(r.wealth for r in self._nation_regions(nation_id))

    def get_nation_production(self, nation_id: str) -> int:
        return sum(r.production for r in self._nation_regions(nation_id))

    def get_nation_average_infrastructure(self, nation_id: str) -> float:
        regions = self._nation_regions(nation_id)
        if not regions:
            return 0.0
        return sum(r.infrastructure.level for r in regions) / len(regions)

    def get_strongest_nation(self) -> Optional[Tuple[str, int]]:
        """(nation_id, wealth) of the wealthiest nation, or None when no region has a nation."""
        totals: Dict[str, int] = {}
        for region in self.regions.values():
            if region.nation_id:
                totals[region.nation_id] = totals.get(region.nation_id, 0) + region.wealth
        if not totals:
            return None
        best = max(totals, key=totals.get)
        return best, totals[best]

    # Tick pipeline
    def process_economic_tick(self) -> int:
        """
        Run one economic tick over every registered region.
        Returns the number of regions processed (0 for an empty registry).
        """
        if not self.regions:
            logger.warning("No regions available for economic processing")
            return 0

        self._reset_tracking()
        self._calculate_production()
        self._calculate_demand_and_consumption()
        self._update_prices()

        self.ticks_processed += 1
        self._notify()
        return len(self.regions)

    def _reset_tracking(self):
        for resource_type in self.resource_types:
            self.supply[resource_type] = 0.0
            self.demand[resource_type] = 0.0

    def _cycle_effect(self, value: float, effect_name: str) -> float:
        if not self.config.enable_cycles:
            return value
        return self.cycle.apply_effect(value, effect_name)

    def _calculate_production(self):
        share_count = len(self.resource_types)
        for region in self.regions.values():
            base = self.production_calculator.calculate_region_output(region)
            boost = self.infrastructure_calculator.calculate_efficiency_boost(region.infrastructure.level)
            final = self._cycle_effect(base * boost, "Production")

            region.production = round(final)

            # Output is spread evenly over the tracked resource types
            for resource_type in self.resource_types:
                self.supply[resource_type] += final / share_count

    def _calculate_demand_and_consumption(self):
        allocation = {t: 1.0 / len(self.resource_types) for t in self.resource_types}
        # Snapshot so every region's share is computed against the same total
        total_wealth = self.get_total_wealth()
        region_count = len(self.regions)

        for region in self.regions.values():
            if total_wealth > 0:
                wealth_share = region.wealth / total_wealth
            else:
                wealth_share = 1.0 / region_count
            available = {t: self.supply[t] * wealth_share for t in self.resource_types}

            consumption, unmet, unrest = self.consumption_calculator.process_region_consumption(
                region, available, allocation)
            consumption = self._cycle_effect(consumption, "Consumption")
            unrest = self._cycle_effect(unrest, "Unrest")

            region.economy.unmet_demand_ratio = unmet
            region.economy.unrest = unrest
            region.economy.update_wealth(-round(consumption))
            region.economy.update_wealth(round(region.production * self.config.income_share))

            for resource_type, share in allocation.items():
                self.demand[resource_type] += self.price_calculator.adjust_demand_by_income(
                    consumption * share, region.wealth, resource_type)

    def _update_prices(self):
        c = self.config
        for resource_type in self.resource_types:
            old_price = self.prices[resource_type]
            price = self.price_calculator.calculate_price(
                old_price, self.supply[resource_type], self.demand[resource_type], resource_type)
            price = self._cycle_effect(price, "PriceInflation")
            price = self.price_calculator.apply_price_shock(
                price,
                self.rng.uniform(-c.supply_shock_range, c.supply_shock_range),
                self.rng.uniform(-c.demand_trend_range, c.demand_trend_range),
                c.price_volatility,
            )
            self.prices[resource_type] = max(c.price_floor, price)
            logger.debug(f"{resource_type}: supply={self.supply[resource_type]:.1f} "
                         f"demand={self.demand[resource_type]:.1f} price={old_price:.1f}->{price:.1f}")

    def _notify(self):
        turn = self.ticks_processed
        self.notifications.publish(TickCompleted(turn, len(self.regions)))
        for region_id in self.regions:
            self.notifications.publish(RegionUpdated(turn, region_id))

        if self.config.enable_cycles:
            phase = self.cycle.current_phase
            if self.cycle.advance() != phase:
                logger.info(f"Economic cycle: {self.cycle.get_phase_description()}")

        self.notifications.publish(MapColorsRefresh(turn))
        self.notifications.flush()
