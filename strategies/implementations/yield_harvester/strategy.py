"""
Yield Harvester (YIELD) strategy.
"""

import math
from decimal import Decimal
from typing import List, Optional

from exchange_clients.base_models import Position, PositionAsset
from strategies.categories import PositionStrategy
from strategies.components import ExitDecision, MarketSnapshot, Opportunity, TrackedPosition
from strategies.components.indicators import crossed_zero, is_perp, oi_imbalance

from .config import YieldHarvesterConfig


class YieldHarvesterStrategy(PositionStrategy):
    """
    Yield Harvester (YIELD).

    Takes the side paid by funding on perps markets with an extreme rate and
    a skewed open interest. Liquid markets score higher. PnL for exits is
    the leveraged return reported by the platform, or estimated from the
    execution prices of each leg.
    """

    STRATEGY_CODE = "yield"
    DISPLAY_NAME = "Yield Harvester"
    CONFIG_CLASS = YieldHarvesterConfig

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        cfg = self.config
        opportunities = []

        for market in self.eligible_markets(snapshot):
            denom = market.denom
            if not is_perp(denom):
                continue
            info = snapshot.funding(denom)
            if info is None:
                continue

            rate = info.funding_rate
            if abs(rate) < cfg.min_funding_rate_entry:
                continue
            imbalance, crowded_side = oi_imbalance(info.long_oi, info.short_oi)
            if imbalance < cfg.min_oi_imbalance:
                continue

            direction = "long" if rate < 0 else "short"
            score = abs(rate) * imbalance
            if crowded_side is not None and crowded_side != direction:
                score *= cfg.contrarian_bonus

            liquidity = float(market.total_open_interest or 0)
            if cfg.prioritize_high_liquidity and liquidity > 0:
                score *= 1 + math.log10(max(liquidity, 1)) / 10

            day_change = float(market.day_change or 0)
            leverage = cfg.high_volatility_leverage if abs(day_change) > cfg.volatility_threshold else cfg.leverage

            opportunities.append(Opportunity(
                denom=denom,
                direction=direction,
                score=score,
                funding_rate=rate,
                leverage=leverage,
                display=market.display,
                metrics={
                    "fundingRate": rate,
                    "oiImbalance": imbalance,
                    "crowdedSide": crowded_side,
                    "liquidity": liquidity,
                    "dayChange": day_change,
                },
            ))
            self.debug(f"Yield candidate {denom}: {direction.upper()} funding {rate:.2f}%, score {score:.2f}")

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    def leveraged_pnl_percent(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> float:
        """Leveraged PnL in percent (3.0 = 3%)."""
        if position is not None and position.pnl_percent:
            return float(position.pnl_percent)

        if position is not None and position.assets:
            assets = position.assets
        else:
            assets = [
                PositionAsset(
                    denom=asset.denom,
                    long=asset.long,
                    percent=asset.percent,
                    exec_price=Decimal(str(tracked.entry_prices[asset.denom])),
                )
                for asset in tracked.assets
                if asset.denom in tracked.entry_prices
            ]

        total = 0.0
        for asset in assets:
            current = snapshot.price(asset.denom)
            if not asset.exec_price or current is None:
                continue
            exec_price = float(asset.exec_price)
            change = (current - exec_price) / exec_price * 100
            weight = float(asset.collateral_percent) if asset.collateral_percent is not None else 1.0
            total += (change if asset.long else -change) * weight

        if position is not None and position.leverage:
            leverage = float(position.leverage)
        elif tracked.leverage:
            leverage = float(tracked.leverage)
        else:
            leverage = float(self.config.default_pnl_leverage)
        return total * leverage

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        cfg = self.config
        # Thresholds are fractions; the platform reports percent
        pnl = self.leveraged_pnl_percent(tracked, position, snapshot) / 100

        decision = self.standard_exit(tracked, pnl)
        if decision is not None:
            if decision.reason == "take_profit":
                return ExitDecision.exit("profit_target", pnl)
            return decision

        denom = tracked.primary.denom
        current = snapshot.funding_rate(denom)
        entry = tracked.entry_funding_rates.get(denom)
        if current is not None:
            if abs(current) < cfg.min_funding_rate_exit:
                return ExitDecision.exit("funding_normalized", pnl)
            if entry and crossed_zero(entry, current):
                return ExitDecision.exit("funding_direction_change", pnl)

        return ExitDecision.hold(pnl)
