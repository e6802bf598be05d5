"""Tests for StrategyFactory lookup, config validation and creation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from strategies import StrategyFactory
from strategies.categories import PositionStrategy
from strategies.implementations import (
    FundingRateArbitrageConfig,
    YieldHarvesterStrategy,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("fra", "funding_rate_arbitrage"),
        ("FSR", "funding_skew_reversal"),
        ("lit", "liquidity_imbalance"),
        ("mbf", "momentum_breakout"),
        ("vbh", "volatility_breakout"),
        ("yield", "yield_harvester"),
        ("rmm", "rapid_market_momentum"),
        ("funding-rate-arbitrage", "funding_rate_arbitrage"),
    ],
)
def test_resolve_name_accepts_codes_and_names(name, expected):
    assert StrategyFactory.resolve_name(name) == expected


def test_unknown_strategy_lists_alternatives():
    with pytest.raises(ValueError, match="Available: funding_rate_arbitrage"):
        StrategyFactory.resolve_name("grid")


def test_build_config_validates_params():
    config = StrategyFactory.build_config("fra", {"collateral": "12.5", "min_funding_rate_entry": 20})

    assert isinstance(config, FundingRateArbitrageConfig)
    assert config.collateral == Decimal("12.5")
    assert config.min_funding_rate_entry == 20
    assert config.min_oi_imbalance == 1.2


def test_build_config_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        StrategyFactory.build_config("fra", {"grid_step": 1})


def test_build_config_passes_instances_through():
    config = FundingRateArbitrageConfig(max_positions=5)

    assert StrategyFactory.build_config("funding_rate_arbitrage", config) is config


def test_create_strategy_requires_client():
    with pytest.raises(ValueError, match="requires exchange_client"):
        StrategyFactory.create_strategy("yield")


def test_create_strategy(fake_client, cache_dir):
    strategy = StrategyFactory.create_strategy("yield", {"cache_dir": cache_dir}, fake_client)

    assert isinstance(strategy, YieldHarvesterStrategy)
    assert strategy.exchange_client is fake_client
    assert str(strategy.state_store.path).endswith("yield-state.json")


def test_every_registered_strategy_is_a_position_strategy():
    codes = set()
    for name in StrategyFactory.get_supported_strategies():
        strategy_class = StrategyFactory.get_strategy_class(name)
        assert issubclass(strategy_class, PositionStrategy)
        codes.add(strategy_class.STRATEGY_CODE)
    assert codes == {"fra", "fsr", "lit", "mbf", "vbh", "yield", "rmm"}


def test_strategy_info():
    info = StrategyFactory.get_strategy_info("lit")

    assert info["code"] == "lit"
    assert info["display_name"] == "Liquidity Imbalance"
    assert info["parameters"]["min_oi_ratio"] == 2.0
    assert "cache_dir" not in info["parameters"]
