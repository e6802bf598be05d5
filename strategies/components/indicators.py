"""
Small numeric helpers used by the scoring and exit rules.

Price samples are ``{"timestamp": <epoch ms>, "price": float}`` dicts, oldest first.
"""

import math
import statistics
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from exchange_clients.base_models import PositionAsset


Sample = Mapping[str, Any]

PERPS_PREFIX = "perps/"


def is_perp(denom: str) -> bool:
    return denom.startswith(PERPS_PREFIX)


def percent_change(current: float, previous: float) -> float:
    """Fractional change from ``previous`` to ``current`` (0 when previous is 0)."""
    if previous == 0:
        return 0.0
    return (current - previous) / abs(previous)


def price_change(samples: Sequence[Sample], periods: int = 1) -> float:
    """Change between the newest sample and the one ``periods`` samples earlier."""
    if not samples or len(samples) < periods + 1:
        return 0.0
    newest = float(samples[-1]["price"])
    oldest = float(samples[-1 - periods]["price"])
    return percent_change(newest, oldest)


def mean_stdev(values: Sequence[float]) -> Tuple[float, float]:
    """Mean and sample standard deviation (n-1). Fewer than two values give a zero deviation."""
    if not values:
        return 0.0, 0.0
    if len(values) < 2:
        return float(values[0]), 0.0
    return statistics.mean(values), statistics.stdev(values)


def log_return_volatility(samples: Sequence[Sample], periods: int) -> float:
    """Standard deviation of log returns over the last ``periods`` samples."""
    if not samples or len(samples) < periods:
        return 0.0
    prices = [float(sample["price"]) for sample in samples[-periods:]]
    returns = [
        math.log(current / previous)
        for previous, current in zip(prices, prices[1:])
        if previous > 0 and current > 0
    ]
    return mean_stdev(returns)[1]


def price_range(samples: Sequence[Sample], periods: int) -> Tuple[float, float]:
    """(min, max) price over the last ``periods`` samples, (0, 0) when there are fewer."""
    if not samples or len(samples) < periods:
        return 0.0, 0.0
    prices = [float(sample["price"]) for sample in samples[-periods:]]
    return min(prices), max(prices)


def closest_sample(samples: Sequence[Sample], timestamp: int) -> Optional[Sample]:
    if not samples:
        return None
    return min(samples, key=lambda sample: abs(timestamp - sample["timestamp"]))


def oi_imbalance(long_oi: float, short_oi: float) -> Tuple[float, Optional[str]]:
    """
    Larger open interest over smaller, plus the crowded side.

    Returns ``(1.0, None)`` unless both sides are positive.
    """
    long_oi = float(long_oi or 0)
    short_oi = float(short_oi or 0)
    if long_oi <= 0 or short_oi <= 0:
        return 1.0, None
    if long_oi > short_oi:
        return long_oi / short_oi, "long"
    return short_oi / long_oi, "short"


def weighted_pnl(
    assets: Iterable[PositionAsset],
    entry_prices: Mapping[str, float],
    current_prices: Mapping[str, Any],
) -> float:
    """
    Weighted fractional PnL of a basket (unleveraged).

    Legs without a usable entry or current price contribute nothing.
    """
    total = 0.0
    for asset in assets:
        entry = float(entry_prices.get(asset.denom) or 0)
        current = float(current_prices.get(asset.denom) or 0)
        if not entry or not current:
            continue
        change = (current - entry) / entry
        total += (change if asset.long else -change) * asset.weight
    return total


def time_weighted_momentum(samples: Sequence[Sample]) -> float:
    """
    Momentum score blending the hourly rate of change with recent moves.

    60% is the raw change normalized per hour (capped at twice the raw
    change, not normalized when the window is under 30 minutes) and 40% the
    mean of per-sample changes weighted by ``1.5 ** i``.
    """
    if not samples or len(samples) < 2:
        return 0.0

    newest, oldest = samples[-1], samples[0]
    if float(oldest["price"]) == 0:
        return 0.0
    raw_change = (float(newest["price"]) - float(oldest["price"])) / float(oldest["price"])

    span_hours = (newest["timestamp"] - oldest["timestamp"]) / (1000 * 60 * 60)
    if span_hours < 0.5:
        return raw_change

    normalized = min(raw_change / span_hours, raw_change * 2)

    weighted = 0.0
    total_weight = 0.0
    for i in range(1, len(samples)):
        previous = float(samples[i - 1]["price"])
        if previous == 0:
            continue
        weight = 1.5 ** i
        weighted += (float(samples[i]["price"]) - previous) / previous * weight
        total_weight += weight

    if total_weight == 0:
        return normalized
    return normalized * 0.6 + (weighted / total_weight) * 0.4


def funding_edge(direction: str, funding_rate: Optional[float]) -> float:
    """|funding|/100 when the funding rate pays our side, else 0."""
    if funding_rate is None:
        return 0.0
    if (direction == "long" and funding_rate < 0) or (direction == "short" and funding_rate > 0):
        return abs(funding_rate) / 100
    return 0.0


def crossed_zero(entry: float, current: float) -> bool:
    return (entry > 0 and current < 0) or (entry < 0 and current > 0)


def latest_price(samples: Optional[List[Dict[str, Any]]]) -> Optional[float]:
    if not samples:
        return None
    return float(samples[-1]["price"])
