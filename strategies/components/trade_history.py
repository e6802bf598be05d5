"""
Append-only trade journal.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from helpers.unified_logger import get_core_logger


class TradeHistory:
    """JSON list of ``{timestamp, action, position, metrics, result}`` records."""

    def __init__(self, path: Union[str, Path], logger=None):
        self.path = Path(path)
        self.logger = logger or get_core_logger("trade_history")

    def load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r") as f:
                history = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error reading trade history {self.path}: {e}")
            return []
        return history if isinstance(history, list) else []

    def record(
        self,
        action: str,
        position: Dict[str, Any],
        result: Any = None,
        metrics: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append one open/close record. Failures are logged, never raised."""
        if result is not None and hasattr(result, "to_dict"):
            result = result.to_dict()

        history = self.load()
        history.append({
            "timestamp": int(time.time() * 1000),
            "action": action,
            "position": position,
            "metrics": metrics or {},
            "result": result,
        })

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(history, f, indent=2, default=str)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Error recording trade: {e}")
