"""Tests that every scenario lookup table covers every scenario."""

import pytest

from climate_garden.config import constants
from climate_garden.config.scenarios import (
    CropCategory,
    SummerScenario,
    WinterScenario,
    parse_summer,
    parse_winter,
)

SUMMER_TABLES = ["BASE_STRESS_DAYS", "SUMMER_SEVERITY", "SUMMER_COST_FACTORS"]
WINTER_TABLES = ["BASE_FREEZE_EVENTS", "WINTER_SEVERITY", "WINTER_PROTECTION_FACTORS"]


class TestTableExhaustiveness:
    """Scenario-keyed tables must have an entry per enum member."""

    @pytest.mark.parametrize("table_name", SUMMER_TABLES)
    def test_summer_tables_cover_all_scenarios(self, table_name):
        """Test summer tables have every summer scenario."""
        table = getattr(constants, table_name)
        assert set(table) == set(SummerScenario)

    @pytest.mark.parametrize("table_name", WINTER_TABLES)
    def test_winter_tables_cover_all_scenarios(self, table_name):
        """Test winter tables have every winter scenario."""
        table = getattr(constants, table_name)
        assert set(table) == set(WinterScenario)

    def test_summer_cost_factors_have_all_keys(self):
        """Test each summer cost entry has heat, protection and irrigation."""
        for factors in constants.SUMMER_COST_FACTORS.values():
            assert set(factors) == {"heat", "protection", "irrigation"}

    def test_yielding_categories_are_consistent(self):
        """Test yield, price and CV tables cover the same categories."""
        yielding = set(constants.CATEGORY_YIELD_MULTIPLIERS)
        assert yielding == set(constants.CATEGORY_MARKET_PRICES)
        assert yielding == set(constants.CATEGORY_YIELD_CV)
        assert CropCategory.EXPERIMENTAL not in yielding

    def test_priorities_cover_all_cost_categories(self):
        """Test every spending category has a funding priority."""
        prioritized = {category for category, _, _ in constants.CATEGORY_PRIORITIES}
        assert prioritized == set(constants.BASE_COSTS)


class TestScenarioParsing:
    """Test scenario label parsing."""

    def test_parse_known_labels(self):
        """Test known labels and enum members are accepted."""
        assert parse_summer("extreme") is SummerScenario.EXTREME
        assert parse_summer(SummerScenario.MILD) is SummerScenario.MILD
        assert parse_winter("none") is WinterScenario.NONE

    def test_unknown_summer_raises(self):
        """Test an unknown summer label raises with the valid values listed."""
        with pytest.raises(ValueError, match="catastrophic"):
            parse_summer("scorching")

    def test_unknown_winter_raises(self):
        """Test an unknown winter label raises."""
        with pytest.raises(ValueError, match="Unknown winter scenario"):
            parse_winter("arctic")
