"""
JSON file persistence for strategy state.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from helpers.unified_logger import get_core_logger


class JsonStateStore:
    """
    Load and save one strategy's state file.

    Missing keys are filled from ``defaults`` on load, so older state files
    pick up sections added later. A corrupt file is logged and replaced by the
    defaults on the next save.
    """

    def __init__(self, path: Union[str, Path], defaults: Optional[Dict[str, Any]] = None, logger=None):
        self.path = Path(path)
        self.defaults = defaults or {}
        self.logger = logger or get_core_logger("state_store")

    def _defaults(self) -> Dict[str, Any]:
        return copy.deepcopy(self.defaults)

    def load(self) -> Dict[str, Any]:
        state = self._defaults()
        if not self.path.exists():
            return state

        try:
            with open(self.path, "r") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error loading state from {self.path}: {e}")
            return state

        if not isinstance(stored, dict):
            self.logger.error(f"Ignoring state file {self.path}: expected an object, got {type(stored).__name__}")
            return state

        state.update(stored)
        return state

    def save(self, state: Dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(state, f, indent=2, default=str)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Error saving state to {self.path}: {e}")
            return False
        return True
