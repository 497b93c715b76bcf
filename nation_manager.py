"""
Nation registry, region-to-nation assignment and per-turn nation processing.
"""

from typing import Dict, List, Optional, Tuple

from config import EconomyConfig, SAMPLE_NATIONS
from diplomacy import DiplomaticStatus
from economy import EconomicSystem
from events import NotificationQueue, RegionNationChanged
from nation import NationEntity
from politics import PolicyType
from region import RegionEntity
from logger import setup_logger

logger = setup_logger()


class NationManager:
    """
    Registry of nations and the only place regions change owner.
    A region belongs to at most one nation at a time.
    """

    def __init__(self, economic_system: EconomicSystem, config: Optional[EconomyConfig] = None,
                 notifications: Optional[NotificationQueue] = None):
        self.economic_system = economic_system
        self.config = config or economic_system.config
        self.notifications = notifications or economic_system.notifications
        self.nations: Dict[str, NationEntity] = {}
        # region_id -> nation_id, kept in step with nation membership
        self.region_nation_map: Dict[str, str] = {}

    def create_nation(self, nation_id: str, name: str,
                      color: Tuple[float, float, float] = (0.5, 0.5, 0.5)) -> NationEntity:
        if nation_id in self.nations:
            logger.warning(f"Nation with ID {nation_id} already exists!")
            return self.nations[nation_id]
        nation = NationEntity(
            nation_id, name, color,
            tax_rate=self.config.default_tax_rate,
            infrastructure_investment=self.config.infrastructure_investment,
            inflation=self.config.base_inflation,
        )
        self.nations[nation_id] = nation
        logger.info(f"Created nation: {name} (ID: {nation_id})")
        return nation

    def create_sample_nations(self) -> List[NationEntity]:
        return [self.create_nation(nid, name, color) for nid, (name, color) in SAMPLE_NATIONS.items()]

    def get_nation(self, nation_id: str) -> Optional[NationEntity]:
        nation = self.nations.get(nation_id)
        if nation is None:
            logger.warning(f"Nation with ID {nation_id} not found!")
        return nation

    def get_all_nation_ids(self) -> List[str]:
        return list(self.nations.keys())

    def get_all_nations(self) -> List[NationEntity]:
        return list(self.nations.values())

    def get_region_nation(self, region_id: str) -> Optional[NationEntity]:
        """Owning nation of a region, or None when it is independent."""
        nation_id = self.region_nation_map.get(region_id)
        if nation_id is not None and nation_id in self.nations:
            return self.nations[nation_id]
        for nation in self.nations.values():
            if nation.has_region(region_id):
                self.region_nation_map[region_id] = nation.id
                return nation
        return None

    def get_nation_regions(self, nation_id: str) -> List[RegionEntity]:
        """Member regions that still exist in the registry."""
        nation = self.nations.get(nation_id)
        if nation is None:
            return []
        regions = []
        for region_id in nation.get_region_ids():
            region = self.economic_system.get_region(region_id)
            if region is not None:
                regions.append(region)
        return regions

    def assign_region_to_nation(self, region_id: str, nation_id: str) -> bool:
        """
        Move a region to a nation.

        The region leaves every nation first, so membership stays disjoint.
        Both the old and the new owner have their aggregates recomputed.
        """
        previous = self.get_region_nation(region_id)
        for nation in self.nations.values():
            nation.remove_region(region_id)
        self.region_nation_map.pop(region_id, None)
        region = self.economic_system.get_region(region_id)

        target = self.nations.get(nation_id)
        if target is None:
            logger.error(f"Failed to assign region {region_id} - nation {nation_id} not found!")
            if region is not None:
                region.nation_id = None
            if previous is not None:
                previous.economy.update_from_regions(self.get_nation_regions(previous.id))
            return False

        target.add_region(region_id)
        self.region_nation_map[region_id] = nation_id
        if region is not None:
            region.nation_id = nation_id

        if previous is not None and previous.id != nation_id:
            previous.economy.update_from_regions(self.get_nation_regions(previous.id))
        target.economy.update_from_regions(self.get_nation_regions(nation_id))

        self.notifications.publish(RegionNationChanged(region_id, nation_id,
                                                       previous.id if previous else ""))
        self.notifications.flush()
        return True

    def assign_regions_to_nations(self) -> int:
        """Deal every registered region out to the nations round robin."""
        region_ids = self.economic_system.get_all_region_ids()
        if not region_ids:
            logger.warning("No regions found to assign to nations")
            return 0
        nation_ids = self.get_all_nation_ids()
        if not nation_ids:
            logger.warning("No nations available to assign regions to")
            return 0
        for i, region_id in enumerate(region_ids):
            self.assign_region_to_nation(region_id, nation_ids[i % len(nation_ids)])
        return len(region_ids)


class NationSystem:
    """Runs the nation-level subsystems once per turn, after the economic tick."""

    def __init__(self, manager: NationManager):
        self.manager = manager

    def process_turn(self, investment_efficiency: float = 1.0):
        # 1. Economic, policy and stability processing per nation
        for nation in self.manager.get_all_nations():
            regions = self.manager.get_nation_regions(nation.id)
            nation.process_turn(regions, investment_efficiency)
            if nation.is_revolt_occurring():
                logger.warning(f"Revolt in {nation.name}: unrest {nation.stability.unrest_level:.0%}")

        # 2. Diplomacy: every pair of nations has a relation
        self.ensure_relations()
        logger.debug(f"Processed turn for {len(self.manager.nations)} nations")

    def ensure_relations(self):
        nation_ids = self.manager.get_all_nation_ids()
        for nation_id in nation_ids:
            nation = self.manager.nations[nation_id]
            for other_id in nation_ids:
                if other_id != nation_id:
                    nation.get_diplomatic_status(other_id)

    def set_nation_policy(self, nation_id: str, policy_type: PolicyType, value: float) -> bool:
        nation = self.manager.get_nation(nation_id)
        if nation is None:
            return False
        nation.set_policy(policy_type, value)
        logger.info(f"Set {policy_type.name} policy for {nation_id} to {nation.get_policy(policy_type):.2f}")
        return True

    def get_nation_policy(self, nation_id: str, policy_type: PolicyType) -> float:
        nation = self.manager.get_nation(nation_id)
        if nation is None:
            return 0.5
        return nation.get_policy(policy_type)

    def set_mutual_status(self, nation_a: str, nation_b: str, status: DiplomaticStatus) -> bool:
        """Set the same status on both sides of a relation."""
        a = self.manager.get_nation(nation_a)
        b = self.manager.get_nation(nation_b)
        if a is None or b is None:
            return False
        a.set_diplomatic_status(nation_b, status)
        b.set_diplomatic_status(nation_a, status)
        return True
