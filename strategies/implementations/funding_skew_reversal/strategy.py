"""
Funding Skew Reversal (FSR) strategy.

Each cycle records a price sample and a funding sample per asset. The spread
between the price move and the funding rate move over consecutive funding
samples gives a mean and standard deviation; when the current spread sits
more than ``skew_threshold`` deviations away, a two-leg basket is opened
betting on the reversion.
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
from strategies.components.indicators import (
    closest_sample,
    crossed_zero,
    is_perp,
    mean_stdev,
    percent_change,
    price_change,
)

from .config import FundingSkewReversalConfig


class FundingSkewReversalStrategy(PositionStrategy):
    """Funding Skew Reversal (FSR)."""

    STRATEGY_CODE = "fsr"
    DISPLAY_NAME = "Funding Skew Reversal"
    CONFIG_CLASS = FundingSkewReversalConfig

    def default_state(self) -> Dict[str, Any]:
        state = super().default_state()
        state.update({"priceHistory": {}, "fundingRateHistory": {}, "correlationMetrics": {}})
        return state

    @property
    def price_history(self) -> MarketHistory:
        return MarketHistory.in_state(self.state, "priceHistory", self.config.price_history_length)

    @property
    def funding_history(self) -> MarketHistory:
        return MarketHistory.in_state(
            self.state, "fundingRateHistory", self.config.funding_history_length, field="rate"
        )

    # ========================================================================
    # History
    # ========================================================================

    def update_history(self, snapshot: MarketSnapshot) -> None:
        prices = self.price_history
        funding = self.funding_history

        for denom, price in snapshot.prices.items():
            prices.record(denom, float(price), snapshot.timestamp)

        for denom, info in snapshot.funding_rates.items():
            funding.record(
                denom,
                info.funding_rate,
                snapshot.timestamp,
                longOI=info.long_oi,
                shortOI=info.short_oi,
            )

        minimum = self.config.min_history_for_correlation
        for denom in list(funding.series):
            if len(funding.samples(denom)) >= minimum and len(prices.samples(denom)) >= minimum:
                self.update_correlation(denom)

    def update_correlation(self, denom: str) -> Optional[Dict[str, float]]:
        """Recompute spread statistics for ``denom`` from the stored histories."""
        price_samples = self.price_history.samples(denom)
        funding_samples = self.funding_history.samples(denom)

        spreads = []
        for previous, current in zip(funding_samples, funding_samples[1:]):
            rate_change = (current["rate"] - previous["rate"]) / 100

            start = closest_sample(price_samples, previous["timestamp"])
            end = closest_sample(price_samples, current["timestamp"])
            if start is None or end is None:
                continue
            spreads.append(percent_change(float(end["price"]), float(start["price"])) - rate_change)

        if len(spreads) < self.config.min_history_for_correlation:
            return None

        mean, std_dev = mean_stdev(spreads)
        metrics = {"mean": mean, "stdDev": std_dev, "lastUpdated": funding_samples[-1]["timestamp"]}
        self.state.setdefault("correlationMetrics", {})[denom] = metrics
        return metrics

    def funding_skew(self, denom: str) -> Optional[Dict[str, Any]]:
        """Current z-score of the price/funding spread, or None without enough data."""
        cfg = self.config
        funding_samples = self.funding_history.samples(denom)
        price_samples = self.price_history.samples(denom)
        if not funding_samples or len(price_samples) < 2:
            return None

        latest = funding_samples[-1]
        rate = latest["rate"]
        if abs(rate) < cfg.min_funding_rate_for_skew:
            return None

        metrics = self.state.get("correlationMetrics", {}).get(denom)
        if not metrics or not metrics.get("stdDev"):
            return None

        recent_change = price_change(price_samples, cfg.price_change_periods)
        spread = recent_change - rate / 100
        z_score = (spread - metrics["mean"]) / metrics["stdDev"]

        direction = None
        if z_score > 0:
            direction = "short" if rate > 0 else "long"
        elif z_score < 0:
            direction = "long" if rate > 0 else "short"

        long_oi = latest.get("longOI") or 0
        short_oi = latest.get("shortOI") or 0
        return {
            "hasSkew": abs(z_score) > cfg.skew_threshold,
            "direction": direction,
            "zScore": z_score,
            "currentFundingRate": rate,
            "recentPriceChange": recent_change,
            "currentSpread": spread,
            "expectedSpread": metrics["mean"],
            "longShortRatio": long_oi / short_oi if short_oi else None,
        }

    # ========================================================================
    # Entries
    # ========================================================================

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        opportunities = []
        for market in self.eligible_markets(snapshot):
            skew = self.funding_skew(market.denom)
            if not skew or not skew["hasSkew"] or skew["direction"] is None:
                continue

            rate = skew["currentFundingRate"]
            opportunities.append(Opportunity(
                denom=market.denom,
                direction=skew["direction"],
                score=abs(skew["zScore"]) * abs(rate),
                funding_rate=rate,
                display=market.display,
                metrics=skew,
            ))
            self.debug(
                f"Skew on {market.denom}: z={skew['zScore']:.2f}, funding {rate:.2f}%, "
                f"direction {skew['direction']}"
            )

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    def build_assets(
        self,
        opportunity: Opportunity,
        opportunities: List[Opportunity],
        snapshot: MarketSnapshot,
    ) -> List[PositionAsset]:
        primary = opportunity.leg("0.5")
        for other in opportunities:
            if other.denom != opportunity.denom and other.direction != opportunity.direction:
                return [primary, other.leg("0.5")]
        # No counter-skew available: hedge with the same asset on the other side
        return [primary, opportunity.leg("0.5", long=not opportunity.is_long)]

    # ========================================================================
    # Exits
    # ========================================================================

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        pnl = self.position_pnl(tracked, snapshot)
        decision = self.standard_exit(tracked, pnl)
        if decision is not None or not self.config.funding_reversal_exit:
            return decision or ExitDecision.hold(pnl)

        for denom in tracked.denoms:
            if not is_perp(denom):
                continue
            latest = self.funding_history.latest(denom)
            entry = tracked.entry_funding_rates.get(denom)
            if latest is None or not entry:
                continue
            current = latest["rate"]
            if crossed_zero(entry, current) or abs(current) < abs(entry) * self.config.funding_normalized_ratio:
                self.logger.info(
                    f"Position {tracked.id} funding normalized on {denom} (entry {entry:.2f}%, current {current:.2f}%)"
                )
                return ExitDecision.exit("FUNDING_NORMALIZED", pnl)

        primary = tracked.primary
        skew = self.funding_skew(primary.denom)
        if skew and skew["hasSkew"] and skew["direction"] and skew["direction"] != primary.direction:
            self.logger.info(f"Position {tracked.id} skew reversed on {primary.denom}")
            return ExitDecision.exit("SKEW_REVERSAL", pnl)

        return ExitDecision.hold(pnl)

    def after_close(self, tracked: TrackedPosition, decision: ExitDecision) -> None:
        for denom in tracked.denoms:
            until = self.blacklist.add(denom, reason=decision.reason)
            self.logger.info(f"Blacklisted {denom} until {until}")
