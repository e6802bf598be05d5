"""Tests for the Funding Skew Reversal strategy."""

import pytest

from exchange_clients.base_models import PositionAsset
from strategies.components import ExitDecision, Opportunity, TrackedPosition
from strategies.components.models import now_ms
from strategies.implementations.funding_skew_reversal import (
    FundingSkewReversalConfig,
    FundingSkewReversalStrategy,
)


@pytest.fixture
def strategy(fake_client, cache_dir):
    config = FundingSkewReversalConfig(cache_dir=cache_dir, open_delay_seconds=0, retry_delay_seconds=0, debug=False)
    return FundingSkewReversalStrategy(config, fake_client)


def seed(strategy, denom, prices, rates, metrics=None):
    strategy.state["priceHistory"][denom] = [
        {"timestamp": 1000 * (i + 1), "price": price} for i, price in enumerate(prices)
    ]
    strategy.state["fundingRateHistory"][denom] = [
        {"timestamp": 1000 * (i + 1), "rate": rate, "longOI": 3.0, "shortOI": 1.0} for i, rate in enumerate(rates)
    ]
    if metrics is not None:
        strategy.state["correlationMetrics"][denom] = metrics


def test_correlation_from_consecutive_funding_samples(strategy):
    seed(strategy, "perps/ubtc", [100, 110, 110, 121], [10, 20, 30, 40])

    metrics = strategy.update_correlation("perps/ubtc")

    # spreads: (10% - 0.1), (0% - 0.1) and (10% - 0.1)
    assert metrics["mean"] == pytest.approx(-0.1 / 3)
    assert metrics["stdDev"] == pytest.approx(0.0577350, rel=1e-4)
    assert metrics["lastUpdated"] == 4000
    assert strategy.state["correlationMetrics"]["perps/ubtc"] is metrics


def test_correlation_needs_enough_samples(strategy):
    # three samples give only two spreads
    seed(strategy, "perps/ubtc", [100, 110, 110], [10, 20, 30])

    assert strategy.update_correlation("perps/ubtc") is None


def test_update_history_records_samples_and_metrics(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=10, long_oi=2, short_oi=1)
    for step, (price, rate) in enumerate([(100, 10), (105, 20), (103, 25), (104, 30)]):
        fake_client.prices["perps/ubtc"] = price
        fake_client.funding["perps/ubtc"].funding_rate = rate
        snapshot = snapshot_of(fake_client)
        snapshot.timestamp = 1000 * (step + 1)
        strategy.update_history(snapshot)

    assert [s["rate"] for s in strategy.state["fundingRateHistory"]["perps/ubtc"]] == [10, 20, 25, 30]
    assert strategy.state["fundingRateHistory"]["perps/ubtc"][0]["longOI"] == 2
    assert "perps/ubtc" in strategy.state["correlationMetrics"]


def test_skew_detection(strategy):
    seed(strategy, "perps/ubtc", [100, 100, 110], [30, 30, 30], {"mean": 0.0, "stdDev": 0.01})

    skew = strategy.funding_skew("perps/ubtc")

    # spread 0.10 - 0.30 sits far below its mean
    assert skew["zScore"] == pytest.approx(-20)
    assert skew["hasSkew"] is True
    assert skew["direction"] == "long"
    assert skew["longShortRatio"] == pytest.approx(3)


def test_no_skew_below_funding_floor(strategy):
    seed(strategy, "perps/ubtc", [100, 100, 110], [10, 10, 10], {"mean": 0.0, "stdDev": 0.01})

    assert strategy.funding_skew("perps/ubtc") is None


def test_no_skew_without_deviation(strategy):
    seed(strategy, "perps/ubtc", [100, 100, 110], [30, 30, 30], {"mean": 0.0, "stdDev": 0.0})

    assert strategy.funding_skew("perps/ubtc") is None


def test_find_opportunities_scores_by_z_and_funding(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 110, funding_rate=30)
    fake_client.add_market("perps/ueth", 100, funding_rate=30)
    seed(strategy, "perps/ubtc", [100, 100, 110], [30, 30, 30], {"mean": 0.0, "stdDev": 0.01})
    seed(strategy, "perps/ueth", [100, 100, 100], [30, 30, 30], {"mean": -0.3, "stdDev": 0.01})

    opportunities = strategy.find_opportunities(snapshot_of(fake_client))

    assert [o.denom for o in opportunities] == ["perps/ubtc"]
    assert opportunities[0].score == pytest.approx(20 * 30)


def test_pairs_with_opposite_direction_candidate(strategy, snapshot_of, fake_client):
    btc = Opportunity("perps/ubtc", "long", 10)
    eth = Opportunity("perps/ueth", "long", 8)
    sol = Opportunity("perps/usol", "short", 5)

    legs = strategy.build_assets(btc, [btc, eth, sol], snapshot_of(fake_client))

    assert [leg.to_order() for leg in legs] == [
        {"denom": "perps/ubtc", "long": True, "percent": "0.5"},
        {"denom": "perps/usol", "long": False, "percent": "0.5"},
    ]


def test_hedges_same_asset_without_counter_skew(strategy, snapshot_of, fake_client):
    btc = Opportunity("perps/ubtc", "short", 10)

    legs = strategy.build_assets(btc, [btc], snapshot_of(fake_client))

    assert [(leg.denom, leg.long) for leg in legs] == [("perps/ubtc", False), ("perps/ubtc", True)]


def basket(entry_funding):
    return TrackedPosition(
        id="3",
        created_at=now_ms(),
        assets=[PositionAsset("perps/ubtc", True, "0.5"), PositionAsset("perps/ueth", False, "0.5")],
        entry_prices={"perps/ubtc": 100.0, "perps/ueth": 100.0},
        entry_funding_rates=entry_funding,
    )


def test_exit_when_any_leg_funding_normalizes(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=30)
    fake_client.add_market("perps/ueth", 100, funding_rate=5)
    seed(strategy, "perps/ubtc", [100], [30])
    seed(strategy, "perps/ueth", [100], [5])

    decision = strategy.check_exit(basket({"perps/ubtc": 30.0, "perps/ueth": 20.0}), None, snapshot_of(fake_client))

    assert decision.reason == "FUNDING_NORMALIZED"


def test_exit_when_primary_skew_reverses(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=30)
    fake_client.add_market("perps/ueth", 100, funding_rate=30)
    # price fell while funding stayed high: the skew now favours shorts
    seed(strategy, "perps/ubtc", [100, 100, 90], [30, 30, 30], {"mean": -0.6, "stdDev": 0.01})

    decision = strategy.check_exit(basket({"perps/ubtc": 30.0}), None, snapshot_of(fake_client))

    assert decision.reason == "SKEW_REVERSAL"


def test_insignificant_skew_does_not_trigger_reversal(strategy, fake_client, snapshot_of):
    fake_client.add_market("perps/ubtc", 100, funding_rate=30)
    fake_client.add_market("perps/ueth", 100, funding_rate=30)
    # spread -0.40 against a mean of -0.401 is a z-score of 0.1, pointing short
    seed(strategy, "perps/ubtc", [100, 100, 90], [30, 30, 30], {"mean": -0.401, "stdDev": 0.01})

    skew = strategy.funding_skew("perps/ubtc")
    assert skew["hasSkew"] is False
    assert skew["direction"] == "short"

    decision = strategy.check_exit(basket({"perps/ubtc": 30.0}), None, snapshot_of(fake_client))

    assert not decision.should_exit


def test_reversal_exit_can_be_disabled(fake_client, cache_dir, snapshot_of):
    config = FundingSkewReversalConfig(cache_dir=cache_dir, funding_reversal_exit=False, debug=False)
    strategy = FundingSkewReversalStrategy(config, fake_client)
    fake_client.add_market("perps/ubtc", 100, funding_rate=30)
    fake_client.add_market("perps/ueth", 100, funding_rate=5)
    seed(strategy, "perps/ueth", [100], [5])

    decision = strategy.check_exit(basket({"perps/ueth": 20.0}), None, snapshot_of(fake_client))

    assert not decision.should_exit


def test_close_blacklists_every_leg(strategy):
    position = TrackedPosition(
        id="3",
        created_at=now_ms(),
        assets=[PositionAsset("perps/ubtc", True, "0.5"), PositionAsset("uatom", False, "0.5")],
    )

    strategy.after_close(position, ExitDecision.exit("SKEW_REVERSAL"))

    assert strategy.blacklist.is_blacklisted("perps/ubtc")
    assert strategy.blacklist.is_blacklisted("uatom")
