"""
Rapid Market Momentum (RMM) strategy.

Compares the two newest price samples of each asset and trades the move with
a second leg on another asset. When prices are flat it still trades, picking
the side paid by funding, or a random side without funding data.
"""

import random
from typing import Any, Dict, List, Optional

from exchange_clients.base_models import Position, PositionAsset
from strategies.categories import PositionStrategy
from strategies.components import (
    ExitDecision,
    MarketHistory,
    MarketSnapshot,
    Opportunity,
    TrackedPosition,
)
from strategies.components.indicators import funding_edge, percent_change
from strategies.components.models import now_ms

from .config import RapidMarketMomentumConfig


class RapidMarketMomentumStrategy(PositionStrategy):
    """Rapid Market Momentum (RMM)."""

    STRATEGY_CODE = "rmm"
    DISPLAY_NAME = "Rapid Market Momentum"
    CONFIG_CLASS = RapidMarketMomentumConfig

    def __init__(self, config: RapidMarketMomentumConfig, exchange_client=None):
        super().__init__(config, exchange_client)
        self.rng = random.Random()

    def default_state(self) -> Dict[str, Any]:
        state = super().default_state()
        state.update({"priceHistory": {}, "lastRotation": 0})
        return state

    @property
    def price_history(self) -> MarketHistory:
        return MarketHistory.in_state(self.state, "priceHistory", self.config.price_history_length)

    def update_history(self, snapshot: MarketSnapshot) -> None:
        history = self.price_history
        for denom, price in snapshot.prices.items():
            history.record(denom, float(price), snapshot.timestamp)

    def on_cycle_start(self, snapshot: MarketSnapshot) -> None:
        elapsed_minutes = (now_ms() - int(self.state.get("lastRotation") or 0)) / 60000
        if elapsed_minutes > self.config.rotation_minutes:
            self.logger.info(f"Rotating assets, clearing {len(self.blacklist.entries)} blacklist entries")
            self.blacklist.clear()
            self.state["lastRotation"] = now_ms()

    def random_direction(self) -> str:
        return "long" if self.rng.random() > 0.5 else "short"

    def _scan(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        cfg = self.config
        opportunities = []

        for market in self.eligible_markets(snapshot, respect_blacklist=not cfg.ignore_blacklist):
            denom = market.denom
            samples = self.price_history.samples(denom)
            if len(samples) < cfg.price_history_length:
                continue

            change = percent_change(float(samples[-1]["price"]), float(samples[0]["price"]))
            funding_rate = snapshot.funding_rate(denom)
            forced = False
            if change > cfg.min_price_change:
                direction = "long"
            elif change < -cfg.min_price_change:
                direction = "short"
            elif cfg.force_trade:
                forced = True
                if funding_rate is not None:
                    direction = "long" if funding_rate < 0 else "short"
                else:
                    direction = self.random_direction()
            else:
                continue

            strength = cfg.forced_trade_strength if forced else abs(change)
            strength += funding_edge(direction, funding_rate)
            opportunities.append(Opportunity(
                denom=denom,
                direction=direction,
                score=strength,
                funding_rate=funding_rate,
                display=market.display,
                metrics={"priceChange": change, "forcedTrade": forced},
            ))

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    def _forced_opportunity(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        for market in self.eligible_markets(snapshot, respect_blacklist=False):
            if len(self.price_history.samples(market.denom)) >= self.config.price_history_length:
                direction = self.random_direction()
                self.logger.warning(f"No signals, forcing a {direction.upper()} trade on {market.denom}")
                return [Opportunity(
                    denom=market.denom,
                    direction=direction,
                    score=self.config.forced_trade_strength,
                    funding_rate=snapshot.funding_rate(market.denom),
                    display=market.display,
                    metrics={"priceChange": 0.0, "forcedTrade": True},
                )]
        return []

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        opportunities = self._scan(snapshot)
        if not opportunities and self.config.force_trade:
            opportunities = self._forced_opportunity(snapshot)
        return opportunities

    def build_assets(
        self,
        opportunity: Opportunity,
        opportunities: List[Opportunity],
        snapshot: MarketSnapshot,
    ) -> List[PositionAsset]:
        primary = opportunity.leg("0.5")
        for other in opportunities:
            if other.denom != opportunity.denom:
                return [primary, other.leg("0.5")]
        return [primary, opportunity.leg("0.5", long=not opportunity.is_long)]

    def after_open(self, tracked: TrackedPosition, opportunity: Opportunity) -> None:
        for denom in tracked.denoms:
            self.blacklist.add(denom, reason="recently_traded")

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        pnl = self.position_pnl(tracked, snapshot)
        return self.standard_exit(tracked, pnl) or ExitDecision.hold(pnl)
