"""Tests for portfolio strategies and allocation validation."""

import logging
import math

import pytest

from climate_garden.config import LocationConfig, PortfolioError
from climate_garden.config.scenarios import CropCategory
from climate_garden.portfolio_strategies import (
    PortfolioStrategy,
    calculate_portfolio_risk,
    get_climate_type,
    get_default_allocation,
    get_portfolio_multiplier,
    get_portfolio_strategies,
    normalize_portfolio,
    validate_portfolio_allocations,
)


class TestNormalizePortfolio:
    """Test caller-supplied portfolio validation."""

    def test_valid_portfolio(self, portfolio):
        """Test a valid portfolio is copied with float values."""
        normalized = normalize_portfolio(portfolio)
        assert normalized == {"heat_specialists": 40.0, "cool_season": 35.0, "perennials": 25.0}
        assert normalized is not portfolio

    def test_enum_keys(self):
        """Test enum keys are converted to their string values."""
        assert normalize_portfolio({CropCategory.PERENNIALS: 10}) == {"perennials": 10.0}

    def test_none_rejected(self):
        """Test a missing portfolio is an error, not an empty garden."""
        with pytest.raises(PortfolioError, match="required"):
            normalize_portfolio(None)

    def test_portfolio_error_is_value_error(self):
        """Test PortfolioError can be caught as ValueError."""
        with pytest.raises(ValueError):
            normalize_portfolio(None)

    def test_non_mapping_rejected(self):
        """Test a list is rejected."""
        with pytest.raises(PortfolioError, match="mapping"):
            normalize_portfolio([40, 60])

    @pytest.mark.parametrize("value", [-1, 100.5, math.nan, math.inf, "40", True, None])
    def test_invalid_allocations(self, value):
        """Test negative, >100, non-finite and non-numeric allocations are rejected."""
        with pytest.raises(PortfolioError):
            normalize_portfolio({"cool_season": value})

    def test_boundaries_accepted(self):
        """Test 0 and 100 are valid allocations."""
        assert normalize_portfolio({"cool_season": 0, "perennials": 100}) == {
            "cool_season": 0.0,
            "perennials": 100.0,
        }

    def test_unknown_key_logged(self, caplog):
        """Test unknown categories are kept and logged."""
        with caplog.at_level(logging.WARNING, logger="climate_garden.portfolio_strategies"):
            normalized = normalize_portfolio({"orchids": 20})
        assert normalized == {"orchids": 20.0}
        assert "orchids" in caplog.text


class TestStrategies:
    """Test preset strategies and climate adaptation."""

    @pytest.mark.parametrize(
        "heat_days,zone,expected",
        [(150, "7b", "hot"), (121, "3a", "hot"), (100, "5b", "cold"), (100, "6a", "normal")],
    )
    def test_climate_type(self, heat_days, zone, expected):
        """Test hot beats cold and zones below 6 are cold."""
        assert get_climate_type(heat_days, zone) == expected

    def test_two_digit_zone_is_not_cold(self):
        """Test zone 10 is read as ten, not one."""
        assert get_climate_type(100, "10a") == "normal"

    def test_default_strategies_sum_to_100(self):
        """Test every default strategy is a full allocation."""
        strategies = get_portfolio_strategies()
        assert set(strategies) == {"conservative", "aggressive", "hedge"}
        for strategy in strategies.values():
            assert validate_portfolio_allocations(strategy.allocation)

    def test_hot_location_strategies(self):
        """Test hot locations get heat-adapted names and allocations."""
        strategies = get_portfolio_strategies(LocationConfig(heat_days=150))
        assert strategies["aggressive"].name == "Desert Specialist"
        assert strategies["aggressive"].description == "High heat tolerance focus"
        assert strategies["conservative"].allocation["heat_specialists"] == 60

    def test_short_season_cool_share(self):
        """Test zones below 5 raise the cool-season share."""
        strategies = get_portfolio_strategies(LocationConfig(hardiness_zone="4a"))
        assert strategies["aggressive"].allocation["cool_season"] == 70
        assert strategies["hedge"].allocation["cool_season"] == 50
        assert strategies["hedge"].name == "Climate-Hedged"

    def test_custom_strategy_added(self):
        """Test a custom strategy is included under 'custom'."""
        custom = PortfolioStrategy("Mine", "All perennials", {"perennials": 100})
        strategies = get_portfolio_strategies(custom=custom)
        assert strategies["custom"] is custom

    def test_default_allocation_fallback(self):
        """Test unknown strategies fall back to the conservative allocation."""
        assert get_default_allocation("yolo") == get_default_allocation("conservative")

    def test_validate_allocations_tolerance(self):
        """Test allocations within one point of 100 are valid."""
        assert validate_portfolio_allocations({"cool_season": 60, "perennials": 39.5})
        assert not validate_portfolio_allocations({"cool_season": 60, "perennials": 30})

    def test_portfolio_risk(self):
        """Test the climate risk score."""
        allocation = {
            "heat_specialists": 30,
            "cool_season": 40,
            "perennials": 20,
            "experimental": 10,
        }
        # 30*0.4 + 40*0.3 + 20*0.2 + 10*0.7 = 35
        assert calculate_portfolio_risk(allocation, "normal") == 35
        # 30*0.1 + 40*0.9 + 4 + 7 = 50
        assert calculate_portfolio_risk(allocation, "hot") == 50

    @pytest.mark.parametrize(
        "strategy,expected", [("conservative", 0.85), ("aggressive", 1.15), ("hedge", 1.0)]
    )
    def test_multipliers(self, strategy, expected):
        """Test strategy risk multipliers."""
        assert get_portfolio_multiplier(strategy) == expected

    def test_unknown_multiplier(self):
        """Test unknown strategies use the hedge multiplier."""
        assert get_portfolio_multiplier("yolo") == 1.0
