"""
Tests for the closed-form calculators: production, infrastructure,
consumption and pricing.
"""

import pytest
import random

from calculators import (
    ProductionCalculator,
    InfrastructureCalculator,
    ConsumptionCalculator,
    PriceCalculator,
)
from region import create_region


@pytest.fixture
def production():
    return ProductionCalculator()


@pytest.fixture
def consumption():
    return ConsumptionCalculator()


@pytest.fixture
def pricing():
    return PriceCalculator()


class TestProductionCalculator:
    """Cobb-Douglas production."""

    def test_cobb_douglas_output(self, production):
        """Default elasticities give sqrt(L) * sqrt(K)."""
        assert production.calculate_output(100, 4) == pytest.approx(20.0)

    def test_degenerate_inputs_floored(self, production):
        """Zero or negative inputs are treated as 1, never NaN."""
        assert production.calculate_output(0, 0) == pytest.approx(1.0)
        assert production.calculate_output(-50, 9) == pytest.approx(3.0)

    def test_monotonic_in_labor_and_capital(self, production):
        """Output never decreases when either input grows."""
        values = [0, 0.5, 1, 2, 5, 10, 50, 100, 1000]
        for labor in values:
            outputs = [production.calculate_output(labor, k) for k in values]
            assert all(a <= b for a, b in zip(outputs, outputs[1:])), f"Not monotonic in capital at L={labor}"
        for capital in values:
            outputs = [production.calculate_output(l, capital) for l in values]
            assert all(a <= b for a, b in zip(outputs, outputs[1:])), f"Not monotonic in labor at K={capital}"

    def test_region_output_uses_fractional_infrastructure(self, production):
        """Region capital is the raw infrastructure level, so partial investment gains count."""
        region = create_region("r1", "Testvale")
        region.infrastructure.set_level(4.4)
        assert production.calculate_region_output(region) == pytest.approx(production.calculate_output(100, 4.4))

        base = create_region("r2", "Lowvale")
        base.infrastructure.set_level(5.0)
        improved = create_region("r3", "Highvale")
        improved.infrastructure.set_level(5.45)
        assert production.calculate_region_output(improved) > production.calculate_region_output(base)


class TestInfrastructureCalculator:
    """Efficiency, maintenance, decay and growth."""

    def test_efficiency_boost(self):
        calc = InfrastructureCalculator()
        assert calc.calculate_efficiency_boost(5) == pytest.approx(1.5)

    def test_full_maintenance_prevents_decay(self):
        calc = InfrastructureCalculator()
        cost = calc.calculate_maintenance_cost(5.0)
        assert cost == pytest.approx(1.25)
        assert calc.calculate_decay(5.0, cost) == pytest.approx(5.0)

    def test_unfunded_decay(self):
        calc = InfrastructureCalculator()
        assert calc.calculate_decay(5.0, 0.0) == pytest.approx(5.0 * 0.98)

    def test_growth_has_diminishing_returns(self):
        calc = InfrastructureCalculator()
        low = calc.calculate_growth(100, 1.0)
        high = calc.calculate_growth(100, 10.0)
        assert low > high > 0, "Higher levels should grow more slowly"
        assert calc.calculate_growth(0, 1.0) == 0.0

    def test_region_update_keeps_minimum_level(self):
        """Decay can never push a region below level 1.0."""
        calc = InfrastructureCalculator(decay_rate=0.9)
        region = create_region("r1", "Testvale")
        region.infrastructure.set_level(1.0)
        for _ in range(10):
            calc.update_region_infrastructure(region, 0.0, 0.0)
        assert region.infrastructure.level >= 1.0


class TestConsumptionCalculator:
    """Consumption, unmet demand and unrest."""

    def test_expected_consumption(self, consumption):
        assert consumption.calculate_expected_consumption(0) == 0.0
        assert consumption.calculate_expected_consumption(100) == pytest.approx(0.2 * 100 ** 0.8)

    def test_unmet_demand_scenario(self, consumption):
        """40 of 100 consumed leaves 60% unmet; unrest is the squared penalty."""
        ratio = consumption.calculate_unmet_demand(expected=100, actual=40)
        assert ratio == pytest.approx(0.6)
        assert consumption.calculate_unrest_from_unmet_demand(ratio) == pytest.approx(0.6 ** 2 * 0.05 * 100)

    def test_unmet_demand_ratio_bounded(self, consumption):
        assert consumption.calculate_unmet_demand(0, 10) == 0.0
        assert consumption.calculate_unmet_demand(100, 150) == 0.0
        assert consumption.calculate_unmet_demand(100, -50) == 1.0

    def test_resource_split_normalizes_allocation(self, consumption):
        split = consumption.calculate_resource_consumption(100, {"Food": 2, "Luxury": 2, "Bad": -1})
        assert split == pytest.approx({"Food": 50.0, "Luxury": 50.0})
        assert consumption.calculate_resource_consumption(0, {"Food": 1}) == {}

    def test_consumption_never_exceeds_available(self, consumption):
        """Each resource is consumed at most up to what is on hand."""
        rng = random.Random(3)
        allocation = {"Food": 0.25, "Luxury": 0.25, "RawMaterial": 0.25, "Manufacturing": 0.25}
        for _ in range(50):
            region = create_region("r", "R", wealth=rng.randint(0, 5000))
            available = {t: rng.uniform(0, 50) for t in allocation}
            before = dict(available)
            actual, unmet, unrest = consumption.process_region_consumption(region, available, allocation)
            for resource in allocation:
                assert 0.0 <= available[resource] <= before[resource]
            assert actual <= sum(before.values()) + 1e-9
            assert 0.0 <= unmet <= 1.0
            assert unrest >= 0.0


class TestPriceCalculator:
    """Supply/demand pricing and shocks."""

    def test_balanced_market_keeps_price(self, pricing):
        assert pricing.calculate_price(100, 50, 50, "Food") == pytest.approx(100)

    def test_price_bounds(self, pricing):
        """Price stays within [0.1x, 10x] of the base price."""
        for supply in (0, 0.01, 1, 10, 1000):
            for demand in (0, 1, 10, 1000, 1e6):
                for resource in ("Food", "Luxury", "Unknown"):
                    price = pricing.calculate_price(100, supply, demand, resource)
                    assert 10.0 - 1e-9 <= price <= 1000.0 + 1e-9, f"{price} out of bounds"

    def test_elasticity_lookup(self, pricing):
        assert pricing.get_elasticity("Food") == 0.5
        assert pricing.get_elasticity("Unobtainium") == 1.0
        pricing.set_resource_elasticity("Unobtainium", 2.0)
        assert pricing.get_elasticity("Unobtainium") == 2.0

    def test_luxury_demand_more_income_sensitive(self, pricing):
        food = pricing.adjust_demand_by_income(10, 10000, "Food")
        luxury = pricing.adjust_demand_by_income(10, 10000, "Luxury")
        assert luxury > food > 10

    def test_substitution_effect_bounded(self, pricing):
        assert pricing.calculate_substitution_effect(10, 100, 100, 0.5) == pytest.approx(10)
        assert pricing.calculate_substitution_effect(10, 1000, 100, 1.0) == pytest.approx(20)
        assert pricing.calculate_substitution_effect(10, 0, 100, 1.0) == pytest.approx(5)

    def test_price_shock_bounds(self, pricing):
        """Shocked price is always within [0.75x, 1.5x] of its input."""
        rng = random.Random(11)
        for _ in range(200):
            price = rng.uniform(0.01, 1000)
            shocked = pricing.apply_price_shock(price, rng.uniform(-2, 2), rng.uniform(-2, 2), rng.uniform(0, 3))
            assert price * 0.75 - 1e-9 <= shocked <= price * 1.5 + 1e-9
        assert pricing.apply_price_shock(100, 1.0, -1.0, 1.0) == pytest.approx(150)
        assert pricing.apply_price_shock(100, -1.0, 1.0, 1.0) == pytest.approx(75)
