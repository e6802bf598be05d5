"""
Momentum Breakout (MBF) strategy.
"""

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
from strategies.components.indicators import funding_edge, time_weighted_momentum

from .config import MomentumBreakoutConfig


class MomentumBreakoutStrategy(PositionStrategy):
    """
    Momentum Breakout (MBF).

    Prices are sampled at most hourly unless they move by more than
    ``significant_move``. Assets whose time-weighted momentum clears the
    breakout threshold are traded in the direction of the move; funding that
    pays the chosen side adds to the score.
    """

    STRATEGY_CODE = "mbf"
    DISPLAY_NAME = "Momentum Breakout"
    CONFIG_CLASS = MomentumBreakoutConfig

    def default_state(self) -> Dict[str, Any]:
        state = super().default_state()
        state["priceHistory"] = {}
        return state

    @property
    def price_history(self) -> MarketHistory:
        cfg = self.config
        return MarketHistory.in_state(
            self.state,
            "priceHistory",
            cfg.price_history_length,
            min_interval_ms=int(cfg.sample_interval_minutes * 60 * 1000),
            significant_move=cfg.significant_move,
        )

    def update_history(self, snapshot: MarketSnapshot) -> None:
        history = self.price_history
        for denom, price in snapshot.prices.items():
            if history.record(denom, float(price), snapshot.timestamp):
                self.debug(f"Recorded price sample for {denom}: {price}")

    def momentum(self, denom: str) -> Optional[float]:
        samples = self.price_history.samples(denom)
        if len(samples) < self.config.momentum_window:
            return None
        return time_weighted_momentum(samples)

    def signal_direction(self, change: float) -> Optional[str]:
        cfg = self.config
        if change > cfg.breakout_threshold * cfg.long_bias_factor:
            return "long"
        if change < -cfg.breakout_threshold:
            return "short"
        return None

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        cfg = self.config
        opportunities = []

        for market in self.eligible_markets(snapshot):
            denom = market.denom
            change = self.momentum(denom)
            if change is None:
                self.debug(f"Skipping {denom}: not enough price history")
                continue

            direction = self.signal_direction(change)
            if direction is None:
                continue

            funding_rate = snapshot.funding_rate(denom)
            strength = abs(change) + funding_edge(direction, funding_rate)
            if cfg.priority_denom and cfg.priority_denom in denom and direction == "long":
                strength += cfg.priority_bonus

            opportunities.append(Opportunity(
                denom=denom,
                direction=direction,
                score=strength,
                funding_rate=funding_rate,
                display=market.display,
                metrics={"momentum": change, "fundingRate": funding_rate},
            ))
            self.debug(f"Momentum on {denom}: {change * 100:.2f}% -> {direction.upper()} (strength {strength:.4f})")

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    def complementary_leg(self, opportunity: Opportunity, snapshot: MarketSnapshot) -> PositionAsset:
        """Strongest asset moving against the primary, else the default pair asset."""
        opposite = "short" if opportunity.is_long else "long"
        best = None
        best_strength = 0.0

        for market in self.eligible_markets(snapshot):
            if market.denom == opportunity.denom:
                continue
            change = self.momentum(market.denom)
            if change is None:
                continue
            if (opposite == "long" and change <= 0) or (opposite == "short" and change >= 0):
                continue

            strength = abs(change) + funding_edge(opposite, snapshot.funding_rate(market.denom))
            if strength > best_strength:
                best, best_strength = market.denom, strength

        if best is None:
            self.debug(f"No complementary asset for {opportunity.denom}, using {self.config.default_pair_asset}")
            return PositionAsset(denom=self.config.default_pair_asset, long=True, percent="0.5")
        return PositionAsset(denom=best, long=opposite == "long", percent="0.5")

    def build_assets(
        self,
        opportunity: Opportunity,
        opportunities: List[Opportunity],
        snapshot: MarketSnapshot,
    ) -> List[PositionAsset]:
        if self.config.position_mode == "single":
            return [opportunity.leg("1.0")]
        return [opportunity.leg("0.5"), self.complementary_leg(opportunity, snapshot)]

    def position_extra(self, opportunity: Opportunity) -> Dict[str, Any]:
        return {"entryMomentum": opportunity.metrics.get("momentum")}

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        pnl = self.position_pnl(tracked, snapshot)
        return self.standard_exit(tracked, pnl) or ExitDecision.hold(pnl)
