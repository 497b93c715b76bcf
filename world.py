"""
World simulation orchestration.
Builds the per-session context and runs turns in a fixed global order:
economic tick, then nation processing, then a history snapshot.
"""

from typing import Any, Dict, List, Optional
import random

from config import EconomyConfig, REGION_PRESETS, REGION_NAME_PARTS
from cycle import EconomicCycleCalculator
from economy import EconomicSystem
from events import EconomicObserver, NotificationLog, NotificationQueue, RegionUpdated
from nation_manager import NationManager, NationSystem
from region import (
    InfrastructureConfig,
    RegionConfig,
    ResourceConfig,
    create_region,
)
from logger import setup_logger

logger = setup_logger()


class SimulationContext:
    """
    The single context object of a simulation session.
    Every subsystem is constructed here and handed its collaborators explicitly.
    """

    def __init__(self, config: Optional[EconomyConfig] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        self.config = (config or EconomyConfig()).validate()
        self.rng = rng or random.Random(seed)

        # Core systems
        self.notifications = NotificationQueue()
        self.log = NotificationLog()
        self.notifications.attach(self.log)
        self.cycle = EconomicCycleCalculator(self.config.cycle_length)
        self.economic_system = EconomicSystem(
            self.config, cycle=self.cycle, notifications=self.notifications, rng=self.rng)
        self.nation_manager = NationManager(self.economic_system, self.config, self.notifications)
        self.nation_system = NationSystem(self.nation_manager)

        self.turn = 0
        self.history: List[Dict[str, Any]] = []

    def add_observer(self, observer: EconomicObserver):
        self.notifications.attach(observer)

    def remove_observer(self, observer: EconomicObserver):
        self.notifications.detach(observer)

    def on_turn_advanced(self) -> Dict[str, Any]:
        """Run one full turn and return its history snapshot."""
        # The phase in force during this turn; the tick advances the cycle at its end
        phase = self.cycle.current_phase
        efficiency = self.cycle.get_coefficient("Investment") if self.config.enable_cycles else 1.0

        # 1. Market: production, consumption, prices, notifications
        processed = self.economic_system.process_economic_tick()

        # 2. Regional component turns
        if self.config.enable_region_turns:
            for region in self.economic_system.get_all_regions():
                nation = self.nation_manager.get_region_nation(region.id)
                tax_rate = nation.economy.tax_rate if nation else self.config.default_tax_rate
                region.process_turn(tax_rate)

        # 3. Nations: economy, policy, diplomacy, stability
        self.nation_system.process_turn(efficiency)

        self.turn += 1
        snapshot = self._snapshot(phase.name, processed)
        self.history.append(snapshot)
        # The log only holds entries since the last snapshot
        self.log.clear()
        logger.debug(f"Turn {self.turn} complete: {processed} regions, "
                     f"total wealth {snapshot['total_wealth']}")
        return snapshot

    def _snapshot(self, phase_name: str, processed: int) -> Dict[str, Any]:
        es = self.economic_system
        events = [self.log.describe(e) for e in self.log.entries
                  if not isinstance(e, RegionUpdated)]
        for nation in self.nation_manager.get_all_nations():
            if nation.is_revolt_occurring():
                events.append(f"Revolt in {nation.name}")

        return {
            "turn": self.turn,
            "phase": phase_name,
            "regions_processed": processed,
            "prices": es.get_price_snapshot(),
            "supply": es.get_supply(),
            "demand": es.get_demand(),
            "total_wealth": es.get_total_wealth(),
            "total_production": sum(r.production for r in es.get_all_regions()),
            "nations": [n.to_dict() for n in self.nation_manager.get_all_nations()],
            "regions": [
                {
                    "id": r.id,
                    "name": r.name,
                    "nation_id": r.nation_id,
                    "wealth": r.wealth,
                    "production": r.production,
                    "infrastructure": r.infrastructure.level,
                    "unrest": r.economy.unrest,
                }
                for r in es.get_all_regions()
            ],
            "events": events,
        }


class TurnClock:
    """Explicit step driver for a SimulationContext (CLI loop, tests)."""

    def __init__(self, context: SimulationContext):
        self.context = context
        self.paused = False

    @property
    def current_turn(self) -> int:
        return self.context.turn

    def step(self) -> Optional[Dict[str, Any]]:
        """Advance one turn. Returns None while paused."""
        if self.paused:
            logger.debug("Turn clock paused; step ignored")
            return None
        return self.context.on_turn_advanced()

    def run(self, turns: int, callback=None) -> List[Dict[str, Any]]:
        snapshots = []
        for _ in range(max(0, turns)):
            snapshot = self.step()
            if snapshot is None:
                break
            snapshots.append(snapshot)
            if callback is not None:
                callback(snapshot)
        return snapshots

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def set_turn_number(self, turn: int):
        if turn < 0:
            logger.warning(f"Ignoring negative turn number {turn}")
            return
        self.context.turn = turn


def _generate_region_name(rng: random.Random) -> str:
    root = rng.choice(REGION_NAME_PARTS["roots"])
    if rng.random() < 0.3:
        return f"{rng.choice(REGION_NAME_PARTS['prefixes'])} {root}"
    return root


def build_sample_world(config: Optional[EconomyConfig] = None, num_regions: int = 12,
                       rng: Optional[random.Random] = None, seed: Optional[int] = None) -> SimulationContext:
    """
    Procedurally create regions from the terrain presets, the sample nations,
    and a round-robin assignment of regions to nations.
    """
    rng = rng or random.Random(seed)
    context = SimulationContext(config, rng=rng)
    terrains = list(REGION_PRESETS.keys())

    for i in range(num_regions):
        terrain = rng.choice(terrains)
        preset = REGION_PRESETS[terrain]
        resources = dict(preset["resources"])
        region_config = RegionConfig(
            region_type=terrain,
            resources=ResourceConfig(
                initial_amounts=resources,
                production_rates={k: round(v * 0.1, 1) for k, v in resources.items()},
            ),
            infrastructure=InfrastructureConfig(initial_level=preset["infrastructure"]),
        )
        region = create_region(
            f"region_{i}",
            _generate_region_name(rng),
            wealth=rng.randint(*preset["wealth"]),
            production=rng.randint(*preset["production"]),
            config=region_config,
        )
        context.economic_system.register_region(region)

    context.nation_manager.create_sample_nations()
    context.nation_manager.assign_regions_to_nations()
    logger.info(f"Built world with {num_regions} regions and "
                f"{len(context.nation_manager.nations)} nations")
    return context
