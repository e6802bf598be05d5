"""Tests for the Yield Harvester strategy."""

from decimal import Decimal

import pytest

from exchange_clients.base_models import Position, PositionAsset
from strategies.components import TrackedPosition
from strategies.components.models import now_ms
from strategies.implementations.yield_harvester import YieldHarvesterConfig, YieldHarvesterStrategy


@pytest.fixture
def strategy(fake_client, cache_dir):
    config = YieldHarvesterConfig(cache_dir=cache_dir, open_delay_seconds=0, retry_delay_seconds=0, debug=False)
    return YieldHarvesterStrategy(config, fake_client)


def tracked(leverage="2", entry_price=100.0, entry_funding=20.0, long=True):
    return TrackedPosition(
        id="5",
        created_at=now_ms(),
        assets=[PositionAsset("perps/ubtc", long, "1.0")],
        leverage=leverage,
        entry_prices={"perps/ubtc": entry_price},
        entry_funding_rates={"perps/ubtc": entry_funding},
    )


def test_contrarian_and_liquidity_scoring(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=20, long_oi=3, short_oi=1)
    fake_client.add_market("perps/ueth", 100, funding_rate=20, long_oi=3, short_oi=1, total_open_interest=1000)

    by_denom = {o.denom: o for o in strategy.find_opportunities(snapshot_of(fake_client))}

    # short side, longs crowded: contrarian bonus applies
    assert by_denom["perps/ubtc"].score == pytest.approx(20 * 3 * 1.2)
    assert by_denom["perps/ueth"].score == pytest.approx(20 * 3 * 1.2 * 1.3)


def test_skips_non_perp_and_balanced_markets(strategy, fake_client, snapshot_of):
    fake_client.add_market("uatom", 10, funding_rate=40, long_oi=5, short_oi=1)
    fake_client.add_market("perps/ueth", 100, funding_rate=40, long_oi=1, short_oi=1)
    fake_client.add_market("perps/usol", 100, funding_rate=10, long_oi=5, short_oi=1)

    assert strategy.find_opportunities(snapshot_of(fake_client)) == []


def test_volatile_markets_use_lower_leverage(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=-20, long_oi=1, short_oi=3, day_change=-8)
    fake_client.add_market("perps/ueth", 100, funding_rate=-20, long_oi=1, short_oi=3, day_change=2)

    by_denom = {o.denom: o for o in strategy.find_opportunities(snapshot_of(fake_client))}

    assert by_denom["perps/ubtc"].leverage == Decimal("1.5")
    assert by_denom["perps/ueth"].leverage == Decimal("2")
    assert by_denom["perps/ubtc"].direction == "long"


def test_reported_pnl_triggers_profit_target(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=20)
    position = Position(id="5", assets=[], pnl_percent=4.0)

    decision = strategy.check_exit(tracked(), position, snapshot_of(fake_client))

    assert decision.reason == "profit_target"
    assert decision.pnl == pytest.approx(0.04)


def test_estimated_pnl_is_leveraged(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 98, funding_rate=20)

    # -2% price move at 2x leverage
    assert strategy.leveraged_pnl_percent(tracked(), None, snapshot_of(fake_client)) == pytest.approx(-4.0)
    decision = strategy.check_exit(tracked(), None, snapshot_of(fake_client))
    assert decision.reason == "stop_loss"


def test_estimated_pnl_uses_leg_exec_prices(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 101, funding_rate=20)
    position = Position(
        id="5",
        assets=[PositionAsset("perps/ubtc", False, "1.0", exec_price=Decimal("100"), collateral_percent=Decimal("0.5"))],
        leverage=Decimal("3"),
    )

    pnl = strategy.leveraged_pnl_percent(tracked(), position, snapshot_of(fake_client))

    assert pnl == pytest.approx(-1.0 * 0.5 * 3)


def test_default_leverage_when_unknown(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 101, funding_rate=20)

    pnl = strategy.leveraged_pnl_percent(tracked(leverage=None), None, snapshot_of(fake_client))

    assert pnl == pytest.approx(2.0)


def test_funding_exits_on_primary_leg(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=-9)

    assert strategy.check_exit(tracked(), None, snapshot_of(fake_client)).reason == "funding_direction_change"

    fake_client.funding["perps/ubtc"].funding_rate = 1
    assert strategy.check_exit(tracked(), None, snapshot_of(fake_client)).reason == "funding_normalized"
