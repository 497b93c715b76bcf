"""
Tests for nation aggregation, fiscal operations, policy, diplomacy and stability.
"""

import pytest

from diplomacy import DiplomaticActionType, DiplomaticStatus, NationDiplomacyComponent
from nation import NationEconomyComponent, NationEntity
from politics import (
    NationPolicyComponent,
    NationStabilityComponent,
    PolicyType,
    create_standard_policy,
)
from region import create_region


@pytest.fixture
def regions():
    return [
        create_region("r1", "Arden", wealth=200, production=100),
        create_region("r2", "Brask", wealth=100, production=50),
    ]


@pytest.fixture
def nation(regions):
    nation = NationEntity("empire", "Northern Empire", (0.8, 0.2, 0.2))
    for region in regions:
        nation.add_region(region.id)
        region.nation_id = nation.id
    return nation


class TestNationEconomy:
    """Treasury and GDP bookkeeping."""

    def test_update_from_regions(self, regions):
        economy = NationEconomyComponent()
        economy.update_from_regions(regions)
        assert economy.total_wealth == 300
        assert economy.total_production == 150
        assert economy.gdp == 300 + 2 * 150
        assert economy.gdp_growth_rate == 0.0

        regions[0].wealth = 500
        economy.update_from_regions(regions)
        assert economy.gdp_growth_rate == pytest.approx((900 - 600) / 600)

    def test_gdp_history_bounded(self, regions):
        economy = NationEconomyComponent()
        for _ in range(25):
            economy.update_from_regions(regions)
        assert len(economy.gdp_history) == 10
        assert economy.get_average_gdp() == pytest.approx(600)

    def test_empty_regions_zero_aggregates(self, regions):
        economy = NationEconomyComponent()
        economy.update_from_regions(regions)
        economy.update_from_regions([])
        assert economy.total_wealth == 0 and economy.gdp == 0 and economy.gdp_growth_rate == 0

    def test_collect_taxes(self, regions):
        economy = NationEconomyComponent(tax_rate=0.1)
        revenue = economy.collect_taxes(regions)
        assert revenue == 30
        assert economy.treasury == 30
        assert [r.wealth for r in regions] == [180, 90]

    def test_invest_in_infrastructure_scenario(self, regions):
        """Treasury drops by exactly the invested share; every member level rises."""
        economy = NationEconomyComponent(infrastructure_investment=0.3)
        economy.set_treasury_balance(1000)
        before = [r.infrastructure.level for r in regions]
        invested = economy.invest_in_infrastructure(regions)
        assert invested == pytest.approx(300)
        assert economy.treasury == pytest.approx(700)
        for region, level in zip(regions, before):
            assert region.infrastructure.level > level
            assert region.infrastructure.level == pytest.approx(level + 150 / (level * 10 + 1))

    def test_investment_efficiency_scales_gain(self, regions):
        economy = NationEconomyComponent()
        economy.set_treasury_balance(1000)
        economy.invest_in_infrastructure(regions[:1], efficiency=0.5)
        assert regions[0].infrastructure.level == pytest.approx(5.0 + 300 / 51 * 0.5)

    def test_subsidies_bounded_by_treasury(self, regions):
        economy = NationEconomyComponent()
        economy.set_treasury_balance(100)
        paid = economy.distribute_subsidies(regions, 500)
        assert paid == 100
        assert economy.treasury == 0
        assert [r.wealth for r in regions] == [250, 150]
        assert economy.distribute_subsidies(regions, 50) == 0.0

    def test_subsidies_debit_only_what_is_paid(self):
        """An amount that does not split evenly leaves the remainder in the treasury."""
        regions = [create_region(f"s{i}", f"Shire {i}", wealth=0) for i in range(3)]
        economy = NationEconomyComponent()
        economy.set_treasury_balance(10)
        paid = economy.distribute_subsidies(regions, 10)
        received = sum(r.wealth for r in regions)
        assert paid == received == 9
        assert economy.treasury == 1

    def test_subsidies_never_overdraw(self):
        regions = [create_region(f"s{i}", f"Shire {i}", wealth=0) for i in range(2)]
        economy = NationEconomyComponent()
        economy.set_treasury_balance(11)
        paid = economy.distribute_subsidies(regions, 11)
        assert paid == sum(r.wealth for r in regions) == 10
        assert economy.treasury == 1

    def test_negative_treasury_rejected(self):
        economy = NationEconomyComponent()
        economy.set_treasury_balance(-5)
        assert economy.treasury == 0

    def test_growth_description(self):
        economy = NationEconomyComponent()
        economy.gdp_growth_rate = 0.06
        assert economy.growth_description() == "Strong Growth"
        economy.gdp_growth_rate = -0.1
        assert economy.growth_description() == "Depression"


class TestNationEntity:
    """Membership, turn processing and reforms."""

    def test_membership(self, nation):
        assert nation.has_region("r1")
        nation.add_region("r1")
        assert nation.get_region_ids() == ["r1", "r2"], "Adding twice must not duplicate"
        nation.remove_region("r1")
        assert not nation.has_region("r1")

    def test_process_turn(self, nation, regions):
        nation.process_turn(regions)
        assert nation.economy.treasury > 0, "Taxes minus investment should leave something"
        assert nation.total_wealth == 300
        for region in regions:
            assert region.wealth >= 0
            assert region.infrastructure.level > 5.0

    def test_implement_policy(self, nation):
        policy = create_standard_policy("Land Reform", "Redistribute land", 500, 3, 0.05, 0.0, 0.1)
        assert not nation.implement_policy(policy), "Empty treasury cannot fund a reform"

        nation.economy.set_treasury_balance(1000)
        stability = nation.stability.stability
        assert nation.implement_policy(policy)
        assert nation.economy.treasury == 500
        assert nation.stability.stability == pytest.approx(stability + 0.1)
        assert nation.policy.get_active_policies() == [policy]

    def test_policy_expires(self, nation, regions):
        policy = create_standard_policy("Stimulus", "", 0, 2, 0.1, 0.0, 0.0)
        nation.implement_policy(policy)
        nation.process_turn(regions)
        nation.process_turn(regions)
        assert nation.policy.get_active_policies() == []

    def test_to_dict(self, nation, regions):
        nation.process_turn(regions)
        data = nation.to_dict()
        assert data["id"] == "empire"
        assert data["regions"] == 2
        assert 0.0 <= data["stability"] <= 1.0

    def test_summary(self, nation, regions):
        nation.process_turn(regions)
        summary = nation.get_summary()
        assert "Nation: Northern Empire" in summary
        assert "=== DIPLOMACY ===" in summary


class TestPolicy:
    """Policy sliders."""

    def test_sliders_clamped(self):
        policy = NationPolicyComponent()
        policy.set_policy(PolicyType.ECONOMIC, 1.7)
        policy.set_policy(PolicyType.MILITARY, -0.4)
        assert policy.get_policy(PolicyType.ECONOMIC) == 1.0
        assert policy.get_policy(PolicyType.MILITARY) == 0.0
        assert policy.get_policy(PolicyType.SOCIAL) == 0.5

    def test_slider_effects(self, regions):
        policy = NationPolicyComponent()
        policy.set_policy(PolicyType.ECONOMIC, 0.9)
        policy.set_policy(PolicyType.MILITARY, 0.9)
        policy.apply_policy_effects(regions)
        assert regions[0].production == 105
        assert regions[0].wealth == 195


class TestDiplomacy:
    """Relations and action gates."""

    def test_unknown_nation_is_neutral(self):
        diplomacy = NationDiplomacyComponent()
        assert diplomacy.get_status("nowhere") == DiplomaticStatus.NEUTRAL
        assert diplomacy.relation_count() == 1
        assert diplomacy.get_status("") == DiplomaticStatus.NEUTRAL
        assert diplomacy.get_relation("") is None

    def test_scores_move_status(self):
        diplomacy = NationDiplomacyComponent()
        diplomacy.apply_event("rival", -70, "Border skirmish")
        assert diplomacy.get_status("rival") == DiplomaticStatus.HOSTILE
        assert diplomacy.can_perform_action("rival", DiplomaticActionType.WAR_DECLARATION)
        assert not diplomacy.can_perform_action("rival", DiplomaticActionType.TRADE)

        diplomacy.apply_event("friend", 65, "Royal marriage")
        assert diplomacy.get_status("friend") == DiplomaticStatus.ALLIED
        assert diplomacy.can_perform_action("friend", DiplomaticActionType.ALLIANCE)

    def test_score_bounds_and_drift(self):
        diplomacy = NationDiplomacyComponent()
        diplomacy.apply_event("x", 500)
        assert diplomacy.get_relation("x").relation_score == 100
        diplomacy.process_turn()
        assert diplomacy.get_relation("x").relation_score == 99.5

    def test_set_allied_status_raises_score(self):
        diplomacy = NationDiplomacyComponent()
        diplomacy.set_status("x", DiplomaticStatus.ALLIED)
        assert diplomacy.get_relation("x").relation_score >= 60

    def test_influence(self):
        diplomacy = NationDiplomacyComponent()
        assert diplomacy.spend_influence(30)
        assert not diplomacy.spend_influence(1000)
        assert diplomacy.influence == 20


class TestStability:
    """Unrest factors and revolts."""

    def test_unrest_from_factors(self):
        stability = NationStabilityComponent(0.5)
        stability.set_unrest_factor("famine", "Famine", 1.0)
        assert stability.unrest_level == pytest.approx(0.75)
        assert not stability.is_revolt_occurring()

    def test_revolt(self):
        stability = NationStabilityComponent(0.0)
        stability.set_unrest_factor("famine", "Famine", 1.0)
        assert stability.is_revolt_occurring()
        stability.remove_unrest_factor("famine")
        assert stability.unrest_level == 0.0

    def test_stability_bounded(self):
        stability = NationStabilityComponent()
        for _ in range(50):
            stability.apply_stability_event(0.3, "test")
        assert stability.stability == 1.0
        assert len(stability.recent_events) == NationStabilityComponent.MAX_RECENT_EVENTS

    def test_poverty_factor(self):
        stability = NationStabilityComponent()
        stability.apply_economic_effects(0.0, wealth_per_capita=5)
        assert "poverty" in stability.unrest_factors
        stability.apply_economic_effects(0.0, wealth_per_capita=80)
        assert "poverty" not in stability.unrest_factors

    def test_regional_unrest_factor(self):
        stability = NationStabilityComponent()
        stability.apply_regional_unrest(40.0)
        assert stability.unrest_factors["shortages"].severity == pytest.approx(0.4)
        stability.apply_regional_unrest(0.0)
        assert "shortages" not in stability.unrest_factors

    def test_factors_fade(self):
        stability = NationStabilityComponent()
        stability.set_unrest_factor("riots", "Riots", 0.05)
        for _ in range(5):
            stability.process_turn()
        assert "riots" not in stability.unrest_factors
