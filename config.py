"""
Configuration and constants for the regional economic simulation.
All tunables are plain named floats or named lists, loaded once before a session starts.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)


@dataclass
class EconomyConfig:
    """Global economic simulation configuration."""

    # Production (Cobb-Douglas A * L^a * K^b)
    productivity: float = 1.0
    labor_elasticity: float = 0.5
    capital_elasticity: float = 0.5

    # Infrastructure
    infrastructure_efficiency: float = 0.1  # Production boost per level
    infrastructure_decay: float = 0.02  # Decay per turn when unfunded
    maintenance_cost_factor: float = 0.05

    # Consumption
    base_consumption_rate: float = 0.2
    consumption_exponent: float = 0.8  # < 1 means diminishing marginal consumption
    unrest_factor: float = 0.05

    # Economic cycle
    cycle_length: int = 12
    enable_cycles: bool = True

    # Pricing and market shocks
    base_price: float = 100.0
    price_volatility: float = 0.2
    supply_shock_range: float = 0.1
    demand_trend_range: float = 0.05
    income_share: float = 0.1  # Share of production returned to a region as income
    price_floor: float = 0.01

    # Tracked market resources
    resource_types: List[str] = field(
        default_factory=lambda: ["Food", "Luxury", "RawMaterial", "Manufacturing"]
    )

    # Nation fiscal defaults
    default_tax_rate: float = 0.1
    infrastructure_investment: float = 0.3  # Share of treasury invested each turn
    base_inflation: float = 0.02

    # Run each region's own component turn (resources, population, regional GDP) after the market tick
    enable_region_turns: bool = False

    def validate(self) -> "EconomyConfig":
        """Raise ValueError for settings the simulation cannot run with."""
        if self.cycle_length < 4:
            raise ValueError(f"cycle_length must be at least 4, got {self.cycle_length}")
        if not self.resource_types:
            raise ValueError("resource_types must name at least one resource")
        for name in ("productivity", "infrastructure_decay", "maintenance_cost_factor",
                     "base_consumption_rate", "unrest_factor", "base_price",
                     "price_volatility", "default_tax_rate", "infrastructure_investment"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EconomyConfig":
        """Build a config from a plain mapping; unknown keys are ignored with a warning."""
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key '{key}'")
                continue
            default = getattr(cls(), key)
            if key == "resource_types":
                kwargs[key] = [str(v) for v in value]
            elif isinstance(default, bool):
                kwargs[key] = bool(value)
            elif isinstance(default, (int, float)):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"Config key '{key}' expects a number, got {value!r}")
                kwargs[key] = type(default)(value)
            else:
                kwargs[key] = value
        return cls(**kwargs).validate()


def load_config(path: Path) -> EconomyConfig:
    """Load an EconomyConfig from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    return EconomyConfig.from_dict(data)


# Price elasticity per market resource (necessities react less than luxuries)
PRICE_ELASTICITY = {
    "Food": 0.5,
    "Luxury": 1.5,
    "RawMaterial": 0.8,
    "Manufacturing": 1.2,
}

# Income elasticity of demand per market resource
INCOME_ELASTICITY = {
    "Food": 0.3,
    "Luxury": 1.8,
    "RawMaterial": 0.5,
    "Manufacturing": 1.2,
}

DEFAULT_ELASTICITY = 1.0

# Effect multipliers per cycle phase
CYCLE_COEFFICIENTS = {
    "EXPANSION": {"Production": 1.15, "Consumption": 1.10, "Investment": 1.25,
                  "PriceInflation": 1.05, "Unrest": 0.9},
    "PEAK": {"Production": 1.2, "Consumption": 1.3, "Investment": 1.1,
             "PriceInflation": 1.15, "Unrest": 0.95},
    "CONTRACTION": {"Production": 0.9, "Consumption": 0.85, "Investment": 0.7,
                    "PriceInflation": 0.95, "Unrest": 1.2},
    "TROUGH": {"Production": 0.8, "Consumption": 0.75, "Investment": 0.8,
               "PriceInflation": 0.9, "Unrest": 1.4},
}

# Nations created for a fresh session: id -> (name, rgb color)
SAMPLE_NATIONS = {
    "empire": ("Northern Empire", (0.8, 0.2, 0.2)),
    "republic": ("Coastal Republic", (0.2, 0.4, 0.8)),
    "kingdom": ("Southern Kingdom", (0.1, 0.6, 0.3)),
}

# Starting ranges per terrain type, used for procedural worlds
REGION_PRESETS = {
    "Desert": {"wealth": (40, 90), "production": (20, 50), "infrastructure": 3.0,
               "resources": {"Food": 40, "Materials": 120, "Fuel": 90}},
    "Plains": {"wealth": (100, 200), "production": (60, 110), "infrastructure": 5.0,
               "resources": {"Food": 160, "Materials": 80, "Fuel": 40}},
    "Forest": {"wealth": (80, 150), "production": (50, 90), "infrastructure": 4.0,
               "resources": {"Food": 110, "Materials": 150, "Fuel": 60}},
    "Mountains": {"wealth": (60, 120), "production": (40, 80), "infrastructure": 3.5,
                  "resources": {"Food": 50, "Materials": 180, "Fuel": 70}},
    "Coastal": {"wealth": (150, 260), "production": (70, 120), "infrastructure": 6.0,
                "resources": {"Food": 140, "Materials": 70, "Fuel": 50}},
    "Tundra": {"wealth": (30, 70), "production": (15, 40), "infrastructure": 2.5,
               "resources": {"Food": 30, "Materials": 90, "Fuel": 120}},
    "Jungle": {"wealth": (50, 100), "production": (30, 70), "infrastructure": 2.0,
               "resources": {"Food": 130, "Materials": 110, "Fuel": 30}},
}

REGION_NAME_PARTS = {
    "prefixes": ["North", "South", "East", "West", "Upper", "Lower", "Old"],
    "roots": ["Arden", "Brask", "Corvin", "Dunmere", "Elsmoor", "Falkreach", "Glenhaven",
              "Hollowmere", "Ironvale", "Juniper", "Kestrel", "Lowmarch", "Merrow",
              "Northwatch", "Oakridge", "Pinecrest", "Quarry", "Ravenholm", "Stonefield",
              "Thornbury", "Umberlee", "Valewood", "Westerly", "Yarrow"],
}
