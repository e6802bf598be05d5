"""
Per-asset cooldown kept inside the strategy state.
"""

from typing import Any, Callable, Dict, List, Optional

from .models import MS_PER_HOUR, now_ms


class AssetBlacklist:
    """
    View over ``state["assetBlacklist"]``.

    Entries are ``{denom: {"until": <epoch ms>, "reason": str}}``. Older state
    files stored a bare expiry (``{denom: <epoch ms>}``) or a list of
    ``{"denom", "timestamp"}`` items / bare denoms; those are converted on load
    using ``default_hours`` for anything without an explicit expiry.
    """

    STATE_KEY = "assetBlacklist"

    def __init__(
        self,
        state: Dict[str, Any],
        default_hours: float = 6,
        clock: Callable[[], int] = now_ms,
    ):
        self.default_hours = default_hours
        self._clock = clock
        self._state = state
        self._state[self.STATE_KEY] = self._normalize(state.get(self.STATE_KEY))

    @property
    def entries(self) -> Dict[str, Dict[str, Any]]:
        return self._state[self.STATE_KEY]

    def _normalize(self, raw: Any) -> Dict[str, Dict[str, Any]]:
        ttl = int(self.default_hours * MS_PER_HOUR)
        entries: Dict[str, Dict[str, Any]] = {}

        if isinstance(raw, dict):
            for denom, value in raw.items():
                if isinstance(value, dict):
                    until = value.get("until")
                    if until is None and value.get("timestamp") is not None:
                        until = int(value["timestamp"]) + ttl
                    entries[denom] = {"until": int(until or 0), "reason": value.get("reason")}
                elif isinstance(value, (int, float)):
                    entries[denom] = {"until": int(value), "reason": None}
        elif isinstance(raw, list):
            for item in raw:
                if isinstance(item, dict) and item.get("denom"):
                    started = int(item.get("timestamp") or self._clock())
                    entries[item["denom"]] = {"until": started + ttl, "reason": item.get("reason")}
                elif isinstance(item, str):
                    entries[item] = {"until": self._clock() + ttl, "reason": None}
        return entries

    def add(self, denom: str, hours: Optional[float] = None, reason: Optional[str] = None) -> int:
        """Blacklist ``denom`` for ``hours`` (default: ``default_hours``); returns the expiry."""
        hours = self.default_hours if hours is None else hours
        until = self._clock() + int(hours * MS_PER_HOUR)
        self.entries[denom] = {"until": until, "reason": reason}
        return until

    def is_blacklisted(self, denom: str) -> bool:
        entry = self.entries.get(denom)
        return bool(entry) and entry["until"] > self._clock()

    def prune(self) -> List[str]:
        """Drop expired entries and return their denoms."""
        now = self._clock()
        expired = [denom for denom, entry in self.entries.items() if entry["until"] <= now]
        for denom in expired:
            del self.entries[denom]
        return expired

    def clear(self) -> None:
        self.entries.clear()

    def active(self) -> Dict[str, int]:
        now = self._clock()
        return {denom: entry["until"] for denom, entry in self.entries.items() if entry["until"] > now}

    def __contains__(self, denom: str) -> bool:
        return self.is_blacklisted(denom)

    def __len__(self) -> int:
        return len(self.active())
