"""
Funding Rate Arbitrage (FRA) strategy.

Single-asset positions on the side that receives funding. Exits on max hold
time, take profit, stop loss, funding normalizing or funding flipping sign.
"""

from typing import List, Optional

from exchange_clients.base_models import Position
from strategies.categories import PositionStrategy
from strategies.components import ExitDecision, MarketSnapshot, Opportunity, TrackedPosition
from strategies.components.indicators import crossed_zero, is_perp, oi_imbalance

from .config import FundingRateArbitrageConfig


class FundingRateArbitrageStrategy(PositionStrategy):
    """Funding Rate Arbitrage (FRA)."""

    STRATEGY_CODE = "fra"
    DISPLAY_NAME = "Funding Rate Arbitrage"
    CONFIG_CLASS = FundingRateArbitrageConfig

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        cfg = self.config
        opportunities = []

        self.debug(f"Analyzing {len(snapshot.markets)} markets for funding rate opportunities")
        for market in self.eligible_markets(snapshot):
            denom = market.denom
            info = snapshot.funding(denom)
            if info is None:
                self.debug(f"Skipping {denom}: no funding data available")
                continue

            funding_rate = info.funding_rate
            if abs(funding_rate) < cfg.min_funding_rate_entry:
                self.debug(
                    f"Skipping {denom}: funding rate {funding_rate:.2f}% below threshold {cfg.min_funding_rate_entry}%"
                )
                continue

            imbalance, crowded_side = oi_imbalance(info.long_oi, info.short_oi)
            if imbalance < cfg.min_oi_imbalance:
                self.debug(f"Skipping {denom}: OI imbalance {imbalance:.2f} below threshold {cfg.min_oi_imbalance}")
                continue

            direction = "long" if funding_rate < 0 else "short"
            opportunities.append(Opportunity(
                denom=denom,
                direction=direction,
                score=abs(funding_rate) * imbalance,
                funding_rate=funding_rate,
                display=market.display,
                metrics={
                    "fundingRate": funding_rate,
                    "oiImbalance": imbalance,
                    "oiDirection": crowded_side,
                    "longOI": info.long_oi,
                    "shortOI": info.short_oi,
                },
            ))
            self.debug(
                f"Found opportunity: {denom} ({direction.upper()}) funding {funding_rate:.2f}%, "
                f"OI imbalance {imbalance:.2f}x ({crowded_side or 'N/A'})"
            )

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        pnl = self.position_pnl(tracked, snapshot)
        decision = self.standard_exit(tracked, pnl)
        if decision is not None:
            return decision

        for denom in tracked.denoms:
            if not is_perp(denom):
                continue
            current = snapshot.funding_rate(denom)
            entry = tracked.entry_funding_rates.get(denom)
            if current is None or not entry:
                continue

            if abs(current) < self.config.min_funding_rate_exit:
                self.logger.warning(
                    f"Position {tracked.id} funding rate has normalized (entry {entry:.2f}%, current {current:.2f}%)"
                )
                return ExitDecision.exit("funding_normalized", pnl)

            if crossed_zero(entry, current):
                self.logger.warning(
                    f"Position {tracked.id} funding rate direction has flipped (entry {entry:.2f}%, current {current:.2f}%)"
                )
                return ExitDecision.exit("funding_direction_change", pnl)

        return ExitDecision.hold(pnl)
