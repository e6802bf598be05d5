"""
BullBear Client Module

Basket perpetual positions on Neutron, priced by the Mars oracle with
funding and open interest from the Mars perps contract.
"""

from .client import BullBearClient

__all__ = [
    'BullBearClient',
]
