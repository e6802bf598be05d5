"""Tests for the Funding Rate Arbitrage strategy."""

import pytest

from exchange_clients.base_models import PositionAsset
from strategies.components import TrackedPosition
from strategies.components.models import MS_PER_HOUR, now_ms
from strategies.implementations.funding_rate_arbitrage import (
    FundingRateArbitrageConfig,
    FundingRateArbitrageStrategy,
)


@pytest.fixture
def strategy(fake_client, cache_dir):
    config = FundingRateArbitrageConfig(cache_dir=cache_dir, open_delay_seconds=0, retry_delay_seconds=0, debug=False)
    return FundingRateArbitrageStrategy(config, fake_client)


def tracked(denom="perps/ubtc", long=False, entry_price=100.0, entry_funding=20.0, hours_ago=1.0):
    return TrackedPosition(
        id="1",
        created_at=now_ms() - int(hours_ago * MS_PER_HOUR),
        assets=[PositionAsset(denom, long, "1.0")],
        entry_prices={denom: entry_price},
        entry_funding_rates={denom: entry_funding},
    )


def test_opportunities_take_the_side_paid_by_funding(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=20, long_oi=3, short_oi=1)
    fake_client.add_market("perps/ueth", 100, funding_rate=-25, long_oi=1, short_oi=4)
    fake_client.add_market("perps/usol", 100, funding_rate=5, long_oi=5, short_oi=1)
    fake_client.add_market("perps/uxrp", 100, funding_rate=30, long_oi=1, short_oi=1)
    fake_client.add_market("perps/udoge", 100, funding_rate=30, long_oi=0, short_oi=0)
    fake_client.add_market("perps/uatom", 100)

    opportunities = strategy.find_opportunities(snapshot_of(fake_client))

    assert [(o.denom, o.direction) for o in opportunities] == [("perps/ueth", "long"), ("perps/ubtc", "short")]
    assert opportunities[0].score == pytest.approx(100)
    assert opportunities[1].metrics["oiDirection"] == "long"
    assert opportunities[1].metrics["oiImbalance"] == pytest.approx(3)


def test_exit_when_funding_normalizes(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=3, long_oi=1, short_oi=1)

    decision = strategy.check_exit(tracked(), None, snapshot_of(fake_client))

    assert decision.should_exit
    assert decision.reason == "funding_normalized"


def test_exit_when_funding_flips(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=-12, long_oi=1, short_oi=1)

    decision = strategy.check_exit(tracked(), None, snapshot_of(fake_client))

    assert decision.reason == "funding_direction_change"


def test_price_exits_come_before_funding_checks(strategy, fake_client, snapshot_of):
    # short from 100, price fell 6%
    fake_client.add_market("perps/ubtc", 94, funding_rate=-12)

    decision = strategy.check_exit(tracked(), None, snapshot_of(fake_client))

    assert decision.reason == "take_profit"
    assert decision.pnl == pytest.approx(0.06)


def test_stop_loss(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 104, funding_rate=20)

    decision = strategy.check_exit(tracked(), None, snapshot_of(fake_client))

    assert decision.reason == "stop_loss"


def test_max_hold_time(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=20)

    decision = strategy.check_exit(tracked(hours_ago=49), None, snapshot_of(fake_client))

    assert decision.reason == "max_hold_time"


def test_holds_while_funding_persists(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 99, funding_rate=18)

    decision = strategy.check_exit(tracked(), None, snapshot_of(fake_client))

    assert not decision.should_exit
    assert decision.pnl == pytest.approx(0.01)


@pytest.mark.asyncio
async def test_cycle_opens_and_blacklists_after_close(strategy, fake_client):
    fake_client.add_market("perps/ubtc", 100, funding_rate=20, long_oi=3, short_oi=1)

    first = await strategy.execute_strategy()
    assert first.opened == ["100"]
    assert fake_client.open_calls[0][0][0].long is False

    fake_client.funding["perps/ubtc"].funding_rate = 2
    second = await strategy.execute_strategy()

    assert second.closed == ["100"]
    assert strategy.blacklist.is_blacklisted("perps/ubtc")
    assert second.opened == []
