"""Pytest configuration and in-memory platform client for strategy tests."""

import sys
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

pytest_plugins = ["pytest_asyncio"]

from exchange_clients.base_client import BasePerpsClient  # noqa: E402
from exchange_clients.base_models import (  # noqa: E402
    FundingRateInfo,
    Market,
    Position,
    PositionAsset,
    TxResult,
)


class FakePerpsClient(BasePerpsClient):
    """
    Records opens/closes and serves canned market data.

    ``open_results``/``close_results`` are consumed in order; once empty,
    opens get sequential ids starting at 100 and closes succeed.
    """

    def __init__(self, config=None):
        super().__init__(config)
        self.markets: List[Market] = []
        self.prices: Dict[str, Decimal] = {}
        self.funding: Dict[str, FundingRateInfo] = {}
        self.max_leverages: Dict[str, Decimal] = {}
        self.positions: List[Position] = []
        self.balance = Decimal("100")
        self.open_calls = []
        self.close_calls = []
        self.open_results: List = []
        self.close_results: List = []
        self.connect_count = 0
        self.disconnect_count = 0
        self._next_id = 100

    def _validate_config(self) -> None:
        pass

    async def connect(self) -> None:
        self.connect_count += 1

    async def disconnect(self) -> None:
        self.disconnect_count += 1

    @property
    def address(self) -> str:
        return "neutron1fake"

    def get_exchange_name(self) -> str:
        return "fake"

    def add_market(
        self,
        denom: str,
        price,
        funding_rate: Optional[float] = None,
        long_oi: float = 0.0,
        short_oi: float = 0.0,
        max_leverage="5",
        day_change=None,
        total_open_interest=None,
    ) -> None:
        self.markets.append(Market(
            denom=denom,
            display=denom.split("/")[-1].upper(),
            day_change=Decimal(str(day_change)) if day_change is not None else None,
            total_open_interest=Decimal(str(total_open_interest)) if total_open_interest is not None else None,
        ))
        self.prices[denom] = Decimal(str(price))
        if funding_rate is not None:
            self.funding[denom] = FundingRateInfo(funding_rate=funding_rate, long_oi=long_oi, short_oi=short_oi)
        if max_leverage is not None:
            self.max_leverages[denom] = Decimal(str(max_leverage))

    async def get_markets(self):
        return list(self.markets)

    async def get_prices(self):
        return dict(self.prices)

    async def get_funding_rates(self):
        return dict(self.funding)

    async def get_max_leverages(self):
        return dict(self.max_leverages)

    async def get_balance(self):
        return self.balance

    async def get_positions(self):
        return list(self.positions)

    async def open_position(self, assets, leverage, collateral):
        self.open_calls.append((list(assets), leverage, collateral))
        if self.open_results:
            outcome = self.open_results.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        position_id = str(self._next_id)
        self._next_id += 1
        self.positions.append(Position(
            id=position_id,
            assets=[PositionAsset(denom=a.denom, long=a.long, percent=a.percent) for a in assets],
            leverage=Decimal(str(leverage)),
        ))
        return TxResult(tx_hash=f"hash-{position_id}", position_id=position_id)

    async def close_position(self, position_id):
        self.close_calls.append(str(position_id))
        if self.close_results:
            outcome = self.close_results.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        self.positions = [p for p in self.positions if p.id != str(position_id)]
        return TxResult(tx_hash=f"close-{position_id}", position_id=str(position_id))


@pytest.fixture
def fake_client():
    return FakePerpsClient()


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path / "cache")


@pytest.fixture
def snapshot_of():
    """Build a MarketSnapshot from a FakePerpsClient's current data."""
    from strategies.components import MarketSnapshot

    def build(client: FakePerpsClient) -> "MarketSnapshot":
        return MarketSnapshot(
            markets=list(client.markets),
            prices=dict(client.prices),
            funding_rates=dict(client.funding),
            max_leverages=dict(client.max_leverages),
            positions=list(client.positions),
            balance=client.balance,
        )

    return build
