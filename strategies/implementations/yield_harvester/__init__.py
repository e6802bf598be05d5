"""
Yield Harvester Strategy Implementation

Collects funding on liquid perps markets while the rate stays extreme.
"""

from .config import YieldHarvesterConfig
from .strategy import YieldHarvesterStrategy

__all__ = [
    'YieldHarvesterStrategy',
    'YieldHarvesterConfig',
]
