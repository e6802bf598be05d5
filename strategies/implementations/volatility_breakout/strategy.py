"""
Volatility Breakout (VBH) strategy.

Keeps three pieces of per-asset state next to the price samples:

- ``volatilityHistory``: log-return volatility readings, one per admitted sample
- ``breakoutData``: latest breakout against the prior range
- ``activeSamples``: consecutive samples breaking out in the same direction
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from exchange_clients.base_models import Position
from strategies.categories import PositionStrategy
from strategies.components import (
    ExitDecision,
    MarketHistory,
    MarketSnapshot,
    Opportunity,
    TrackedPosition,
)
from strategies.components.indicators import log_return_volatility, price_range

from .config import VolatilityBreakoutConfig


class VolatilityBreakoutStrategy(PositionStrategy):
    """Volatility Breakout (VBH)."""

    STRATEGY_CODE = "vbh"
    DISPLAY_NAME = "Volatility Breakout"
    CONFIG_CLASS = VolatilityBreakoutConfig

    def default_state(self) -> Dict[str, Any]:
        state = super().default_state()
        state.update({"priceHistory": {}, "volatilityHistory": {}, "breakoutData": {}, "activeSamples": {}})
        return state

    @property
    def price_history(self) -> MarketHistory:
        cfg = self.config
        return MarketHistory.in_state(
            self.state,
            "priceHistory",
            cfg.price_history_length,
            min_interval_ms=int(cfg.sampling_interval_minutes * 60 * 1000),
        )

    # ========================================================================
    # History
    # ========================================================================

    def update_history(self, snapshot: MarketSnapshot) -> None:
        cfg = self.config
        history = self.price_history

        for denom, price in snapshot.prices.items():
            if not history.record(denom, float(price), snapshot.timestamp):
                continue

            samples = history.samples(denom)
            if len(samples) >= cfg.volatility_window:
                self._record_volatility(denom, samples, snapshot.timestamp)
            if len(samples) > cfg.price_range_periods:
                self._update_breakout(denom, samples, snapshot.timestamp)

    def _record_volatility(self, denom: str, samples: List[Dict[str, Any]], timestamp: int) -> None:
        volatility = log_return_volatility(samples, self.config.volatility_window)
        readings = self.state.setdefault("volatilityHistory", {}).setdefault(denom, [])
        readings.append({"timestamp": timestamp, "volatility": volatility})
        if len(readings) > self.config.price_history_length:
            del readings[:-self.config.price_history_length]

    def _update_breakout(self, denom: str, samples: List[Dict[str, Any]], timestamp: int) -> None:
        cfg = self.config
        current = float(samples[-1]["price"])
        range_min, range_max = price_range(samples[:-1], cfg.price_range_periods)
        width = range_max - range_min

        direction = None
        strength = 0.0
        if current > range_max:
            direction = "up"
            strength = (current - range_max) / width if width > 0 else 0.0
        elif current < range_min:
            direction = "down"
            strength = (range_min - current) / width if width > 0 else 0.0

        active = self.state.setdefault("activeSamples", {})
        tracker = active.get(denom)
        if tracker is None:
            tracker = {
                "lastSampleTime": timestamp,
                "consecutiveCandles": 1 if direction else 0,
                "direction": direction,
            }
        elif direction is None:
            tracker = {"lastSampleTime": timestamp, "consecutiveCandles": 0, "direction": None}
        elif direction == tracker.get("direction"):
            tracker = {
                "lastSampleTime": timestamp,
                "consecutiveCandles": tracker.get("consecutiveCandles", 0) + 1,
                "direction": direction,
            }
        else:
            tracker = {"lastSampleTime": timestamp, "consecutiveCandles": 1, "direction": direction}
        active[denom] = tracker

        confirmed = direction is not None and tracker["consecutiveCandles"] >= cfg.confirmation_candles
        self.state.setdefault("breakoutData", {})[denom] = {
            "direction": direction,
            "strength": strength,
            "rangeMin": range_min,
            "rangeMax": range_max,
            "currentPrice": current,
            "confirmed": confirmed,
            "timestamp": timestamp,
        }

    def current_volatility(self, denom: str) -> Optional[float]:
        readings = self.state.get("volatilityHistory", {}).get(denom) or []
        return readings[-1]["volatility"] if readings else None

    def volatility_ratio(self, denom: str) -> float:
        """Latest volatility over the mean of the readings before it."""
        readings = self.state.get("volatilityHistory", {}).get(denom) or []
        if len(readings) < 2:
            return 1.0
        previous = [r["volatility"] for r in readings[-1 - self.config.volatility_window:-1]]
        average = sum(previous) / len(previous)
        if average == 0:
            return 1.0
        return readings[-1]["volatility"] / average

    def volatility_leverage(self, volatility: float) -> Decimal:
        cfg = self.config
        scale = min(Decimal("1"), Decimal(str(cfg.min_volatility)) / Decimal(str(volatility))) if volatility else Decimal("1")
        leverage = min(cfg.max_leverage, cfg.leverage * scale)
        return leverage.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    # ========================================================================
    # Entries
    # ========================================================================

    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        cfg = self.config
        opportunities = []

        for market in self.eligible_markets(snapshot):
            denom = market.denom
            if len(self.price_history.samples(denom)) < cfg.volatility_window:
                continue
            readings = self.state.get("volatilityHistory", {}).get(denom) or []
            breakout = self.state.get("breakoutData", {}).get(denom)
            if len(readings) < 2 or not breakout:
                continue

            volatility = readings[-1]["volatility"]
            ratio = self.volatility_ratio(denom)
            if volatility < cfg.min_volatility:
                self.debug(f"Skipping {denom}: volatility {volatility:.4f} below {cfg.min_volatility}")
                continue
            if ratio < cfg.volatility_breakout_factor:
                self.debug(f"Skipping {denom}: volatility ratio {ratio:.2f} below {cfg.volatility_breakout_factor}")
                continue
            if not breakout.get("confirmed") or breakout.get("strength", 0) < cfg.breakout_threshold:
                continue

            direction = "long" if breakout["direction"] == "up" else "short"
            opportunities.append(Opportunity(
                denom=denom,
                direction=direction,
                score=breakout["strength"] * ratio,
                funding_rate=snapshot.funding_rate(denom),
                leverage=self.volatility_leverage(volatility),
                display=market.display,
                metrics={
                    "volatility": volatility,
                    "volatilityRatio": ratio,
                    "breakoutDirection": breakout["direction"],
                    "breakoutStrength": breakout["strength"],
                    "rangeMin": breakout.get("rangeMin"),
                    "rangeMax": breakout.get("rangeMax"),
                },
            ))

        return sorted(opportunities, key=lambda o: o.score, reverse=True)

    # ========================================================================
    # Exits
    # ========================================================================

    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        cfg = self.config
        pnl = self.position_pnl(tracked, snapshot)

        peak = float(tracked.extra.get("maxPnlReached", 0) or 0)
        if pnl > peak:
            peak = pnl
            tracked.extra["maxPnlReached"] = peak

        decision = self.standard_exit(tracked, pnl)
        if decision is not None:
            return decision

        if peak >= cfg.profit_lock_threshold:
            stop_level = max(0.0, peak - cfg.trailing_stop_distance)
            if pnl <= stop_level:
                self.logger.info(
                    f"Position {tracked.id} trailing stop hit: peak {peak * 100:.2f}%, now {pnl * 100:.2f}%"
                )
                return ExitDecision.exit("trailing_stop", pnl)

        return ExitDecision.hold(pnl)
