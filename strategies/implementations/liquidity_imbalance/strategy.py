"""
Liquidity Imbalance (LIT) strategy.

When one side of the open interest dominates, positions are taken on the
other side unless funding strongly disagrees. Leverage grows with the size
of the imbalance or the funding rate.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from exchange_clients.base_models import Position
from strategies.categories import PositionStrategy
from strategies.components import ExitDecision, MarketSnapshot, Opportunity, TrackedPosition
from strategies.components.indicators import oi_imbalance

from .config import LiquidityImbalanceConfig


def determine_side(long_oi: float, short_oi: float, funding_rate: float, threshold: float) -> Optional[str]:
    """
    Contrarian side for the given open interest and funding rate.

    Crowded longs are faded unless funding is deeply negative, crowded shorts
    unless funding is strongly positive. Otherwise an extreme funding rate
    alone decides.
    """
    if long_oi > short_oi and funding_rate > -threshold:
        return "short"
    if short_oi > long_oi and funding_rate < threshold:
        return "long"
    if funding_rate > threshold:
        return "short"
    if funding_rate < -threshold:
        return "long"
    return None


class LiquidityImbalanceStrategy(PositionStrategy):
    """Liquidity Imbalance (LIT)."""

    STRATEGY_CODE = "lit"
    DISPLAY_NAME = "Liquidity Imbalance"
    CONFIG_CLASS = LiquidityImbalanceConfig

    def dynamic_leverage(self, imbalance: float, funding_rate: float, market_max: Optional[Decimal]) -> Decimal:
        cfg = self.config
        leverage = cfg.leverage
        if imbalance > cfg.boost_imbalance or abs(funding_rate) > cfg.boost_funding:
            leverage = cfg.leverage * cfg.boost_factor
        if imbalance > cfg.strong_imbalance or abs(funding_rate) > cfg.strong_funding:
            leverage = cfg.leverage * cfg.strong_factor

        leverage = min(leverage, market_max or cfg.leverage, cfg.max_leverage_cap)
        return leverage.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        cfg = self.config
        opportunities = []

        for market in self.eligible_markets(snapshot):
            denom = market.denom
            info = snapshot.funding(denom)
            if info is None or snapshot.price(denom) is None:
                self.debug(f"Skipping {denom}: missing funding or price data")
                continue

            imbalance, crowded_side = oi_imbalance(info.long_oi, info.short_oi)
            side = determine_side(info.long_oi, info.short_oi, info.funding_rate, cfg.min_funding_rate_threshold)
            if side is None:
                self.debug(f"Skipping {denom}: no clear side (funding {info.funding_rate:.2f}%)")
                continue
            if imbalance < cfg.min_oi_ratio:
                self.debug(f"Skipping {denom}: OI ratio {imbalance:.2f} below {cfg.min_oi_ratio}")
                continue

            score = imbalance
            if abs(info.funding_rate) > cfg.min_funding_rate_threshold:
                score += abs(info.funding_rate) / 10

            leverage = self.dynamic_leverage(imbalance, info.funding_rate, snapshot.max_leverage(denom))
            opportunities.append(Opportunity(
                denom=denom,
                direction=side,
                score=score,
                funding_rate=info.funding_rate,
                leverage=leverage,
                display=market.display,
                metrics={
                    "oiRatio": imbalance,
                    "crowdedSide": crowded_side,
                    "longOI": info.long_oi,
                    "shortOI": info.short_oi,
                    "fundingRate": info.funding_rate,
                    "price": snapshot.price(denom),
                },
            ))

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        cfg = self.config
        if snapshot.price(tracked.primary.denom) is None:
            self.logger.warning(f"No price for {tracked.primary.denom}, skipping exit check for {tracked.id}")
            return ExitDecision.hold()

        pnl = self.position_pnl(tracked, snapshot)
        if cfg.take_profit_percent is not None and pnl >= cfg.take_profit_percent:
            return ExitDecision.exit("take_profit", pnl)
        if cfg.stop_loss_percent is not None and pnl <= -cfg.stop_loss_percent:
            return ExitDecision.exit("stop_loss", pnl)
        if cfg.max_position_hours is not None and tracked.hold_hours() >= cfg.max_position_hours:
            return ExitDecision.exit("time_limit", pnl)
        return ExitDecision.hold(pnl)
