"""
Bounded per-denom sample series stored in strategy state.
"""

from typing import Any, Dict, List, Optional

from .indicators import percent_change


class MarketHistory:
    """
    Rolling samples for each denom, e.g. ``state["priceHistory"]``.

    A new sample is admitted when the series is empty, when at least
    ``min_interval_ms`` passed since the last one, or (if
    ``significant_move`` is set) when ``field`` moved by more than that
    fraction. Only the newest ``max_length`` samples are kept.
    """

    def __init__(
        self,
        series: Dict[str, List[Dict[str, Any]]],
        max_length: int,
        min_interval_ms: int = 0,
        significant_move: Optional[float] = None,
        field: str = "price",
    ):
        self.series = series
        self.max_length = max_length
        self.min_interval_ms = min_interval_ms
        self.significant_move = significant_move
        self.field = field

    @classmethod
    def in_state(cls, state: Dict[str, Any], key: str, max_length: int, **kwargs) -> "MarketHistory":
        series = state.get(key)
        if not isinstance(series, dict):
            series = {}
            state[key] = series
        return cls(series, max_length, **kwargs)

    def samples(self, denom: str) -> List[Dict[str, Any]]:
        return self.series.get(denom, [])

    def latest(self, denom: str) -> Optional[Dict[str, Any]]:
        samples = self.samples(denom)
        return samples[-1] if samples else None

    def should_admit(self, denom: str, value: float, timestamp: int) -> bool:
        last = self.latest(denom)
        if last is None:
            return True

        elapsed = timestamp - last["timestamp"]
        if self.significant_move is not None:
            move = abs(percent_change(value, float(last[self.field])))
            return elapsed > self.min_interval_ms or move > self.significant_move
        return elapsed >= self.min_interval_ms

    def record(self, denom: str, value: float, timestamp: int, **extra) -> bool:
        """Append a sample if admitted; returns whether it was added."""
        if not self.should_admit(denom, value, timestamp):
            return False

        samples = self.series.setdefault(denom, [])
        samples.append({"timestamp": timestamp, self.field: value, **extra})
        if len(samples) > self.max_length:
            del samples[:-self.max_length]
        return True
