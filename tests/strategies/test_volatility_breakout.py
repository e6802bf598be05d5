"""Tests for the Volatility Breakout strategy."""

from decimal import Decimal

import pytest

from exchange_clients.base_models import Position, PositionAsset
from strategies.components import TrackedPosition
from strategies.components.models import now_ms
from strategies.implementations.volatility_breakout import (
    VolatilityBreakoutConfig,
    VolatilityBreakoutStrategy,
)


def make_strategy(client, cache_dir, **overrides):
    params = dict(
        cache_dir=cache_dir,
        open_delay_seconds=0,
        retry_delay_seconds=0,
        debug=False,
        sampling_interval_minutes=0,
        volatility_window=3,
        price_range_periods=3,
        price_history_length=20,
        min_volatility=0.01,
    )
    params.update(overrides)
    return VolatilityBreakoutStrategy(VolatilityBreakoutConfig(**params), client)


@pytest.fixture
def strategy(fake_client, cache_dir):
    return make_strategy(fake_client, cache_dir)


def feed(strategy, client, snapshot_of, prices, denom="perps/ubtc"):
    if denom not in client.prices:
        client.add_market(denom, prices[0])
    latest = strategy.price_history.latest(denom)
    start = latest["timestamp"] if latest else 0
    for step, price in enumerate(prices):
        client.prices[denom] = price
        snapshot = snapshot_of(client)
        snapshot.timestamp = start + 1000 * (step + 1)
        strategy.update_history(snapshot)


def test_breakout_needs_consecutive_confirmation(strategy, fake_client, snapshot_of):
    feed(strategy, fake_client, snapshot_of, [100, 101, 100, 101, 110])

    breakout = strategy.state["breakoutData"]["perps/ubtc"]
    assert breakout["direction"] == "up"
    assert breakout["strength"] == pytest.approx(9)
    assert breakout["confirmed"] is False

    fake_client.prices["perps/ubtc"] = 112
    snapshot = snapshot_of(fake_client)
    snapshot.timestamp = 10_000
    strategy.update_history(snapshot)

    breakout = strategy.state["breakoutData"]["perps/ubtc"]
    assert breakout["confirmed"] is True
    assert breakout["strength"] == pytest.approx(0.2)
    assert (breakout["rangeMin"], breakout["rangeMax"]) == (100, 110)
    assert strategy.state["activeSamples"]["perps/ubtc"]["consecutiveCandles"] == 2


def test_price_back_inside_range_resets_the_count(strategy, fake_client, snapshot_of):
    feed(strategy, fake_client, snapshot_of, [100, 101, 100, 110, 105])

    assert strategy.state["breakoutData"]["perps/ubtc"]["direction"] is None
    assert strategy.state["activeSamples"]["perps/ubtc"]["consecutiveCandles"] == 0


def test_flat_range_gives_zero_strength(strategy, fake_client, snapshot_of):
    feed(strategy, fake_client, snapshot_of, [100, 100, 100, 101])

    breakout = strategy.state["breakoutData"]["perps/ubtc"]
    assert breakout["direction"] == "up"
    assert breakout["strength"] == 0.0


def test_volatility_readings_start_at_the_window(strategy, fake_client, snapshot_of):
    feed(strategy, fake_client, snapshot_of, [100, 101])
    assert "perps/ubtc" not in strategy.state["volatilityHistory"]

    feed(strategy, fake_client, snapshot_of, [103])
    assert len(strategy.state["volatilityHistory"]["perps/ubtc"]) == 1


def test_volatility_ratio(strategy):
    assert strategy.volatility_ratio("perps/ubtc") == 1.0

    strategy.state["volatilityHistory"]["perps/ubtc"] = [
        {"timestamp": 1, "volatility": 0.02},
        {"timestamp": 2, "volatility": 0.02},
        {"timestamp": 3, "volatility": 0.05},
    ]
    assert strategy.volatility_ratio("perps/ubtc") == pytest.approx(2.5)


def test_leverage_shrinks_with_volatility(fake_client, cache_dir):
    strategy = make_strategy(fake_client, cache_dir, min_volatility=0.03)

    assert strategy.volatility_leverage(0.06) == Decimal("1.0")
    assert strategy.volatility_leverage(0.01) == Decimal("2.0")
    assert strategy.volatility_leverage(0) == Decimal("2.0")


def seed_signal(strategy, denom, confirmed=True, latest_volatility=0.05):
    strategy.state["priceHistory"][denom] = [{"timestamp": i, "price": 100 + i} for i in range(3)]
    strategy.state["volatilityHistory"][denom] = [
        {"timestamp": 1, "volatility": 0.02},
        {"timestamp": 2, "volatility": latest_volatility},
    ]
    strategy.state["breakoutData"][denom] = {"direction": "down", "strength": 0.5, "confirmed": confirmed}


def test_confirmed_breakout_with_expanding_volatility(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100)
    fake_client.add_market("perps/ueth", 100)
    fake_client.add_market("perps/usol", 100)
    seed_signal(strategy, "perps/ubtc")
    seed_signal(strategy, "perps/ueth", confirmed=False)
    seed_signal(strategy, "perps/usol", latest_volatility=0.025)

    opportunities = strategy.find_opportunities(snapshot_of(fake_client))

    assert [(o.denom, o.direction) for o in opportunities] == [("perps/ubtc", "short")]
    assert opportunities[0].score == pytest.approx(0.5 * 2.5)
    assert opportunities[0].leverage == Decimal("0.4")


def tracked(peak=None):
    extra = {"maxPnlReached": peak} if peak is not None else {}
    return TrackedPosition(
        id="2",
        created_at=now_ms(),
        assets=[PositionAsset("perps/ubtc", True, "1.0")],
        entry_prices={"perps/ubtc": 100.0},
        extra=extra,
    )


def test_trailing_stop_after_profit_lock(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 103)

    decision = strategy.check_exit(tracked(peak=0.08), None, snapshot_of(fake_client))

    assert decision.reason == "trailing_stop"


def test_peak_is_tracked_without_take_profit(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 107)
    position = tracked(peak=0.02)

    decision = strategy.check_exit(position, None, snapshot_of(fake_client))

    assert not decision.should_exit
    assert position.extra["maxPnlReached"] == pytest.approx(0.07)


def test_stop_loss_still_applies(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 94)

    assert strategy.check_exit(tracked(), None, snapshot_of(fake_client)).reason == "stop_loss"


@pytest.mark.asyncio
async def test_peak_is_persisted_between_cycles(strategy, fake_client):
    fake_client.add_market("perps/ubtc", 107)
    fake_client.positions = [Position(id="2", assets=[PositionAsset("perps/ubtc", True, "1.0")])]
    strategy.state_store.save({"positions": {"2": tracked().to_dict()}})

    await strategy.execute_strategy()

    assert strategy.state_store.load()["positions"]["2"]["maxPnlReached"] == pytest.approx(0.07)
