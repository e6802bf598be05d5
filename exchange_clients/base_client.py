"""Base interface for perpetual-futures platform clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .base_models import FundingRateInfo, Market, Position, PositionAsset, TxResult


class BasePerpsClient(ABC):
    """
    Interface the strategies use to talk to a basket-perps platform.

    Key Responsibilities:
        - Wallet/session lifecycle (connect, reconnect after a stale sequence)
        - Read queries: markets, prices, funding, leverage caps, balance, positions
        - Two write operations: open_position and close_position

    Write operations return ``None`` when the contract rejects the message and
    raise ``SequenceMismatchError`` when the account sequence is stale, so the
    caller can refresh and retry.

    Implementation Pattern:
        ```python
        class BullBearClient(BasePerpsClient):
            def _validate_config(self) -> None:
                validate_credentials("SEED", os.getenv("SEED"))

            async def connect(self) -> None:
                ...
        ```
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._validate_config()

    @abstractmethod
    def _validate_config(self) -> None:
        """Check credentials; raise MissingCredentialsError when they are unusable."""

    # ========================================================================
    # SESSION
    # ========================================================================

    @abstractmethod
    async def connect(self) -> None:
        """Create the wallet and chain session."""

    async def reconnect(self) -> None:
        """Rebuild the session (picks up a fresh account sequence)."""
        await self.disconnect()
        await self.connect()

    async def disconnect(self) -> None:
        """Release session resources. Stateless clients have nothing to do."""
        return None

    @property
    @abstractmethod
    def address(self) -> str:
        """Wallet address of the connected account."""

    @abstractmethod
    def get_exchange_name(self) -> str:
        """Return the platform identifier."""

    # ========================================================================
    # QUERIES
    # ========================================================================

    @abstractmethod
    async def get_markets(self) -> List[Market]:
        """Enabled markets."""

    @abstractmethod
    async def get_prices(self) -> Dict[str, Decimal]:
        """Oracle price per denom."""

    @abstractmethod
    async def get_funding_rates(self) -> Dict[str, FundingRateInfo]:
        """Annualized funding rate and open interest per denom."""

    @abstractmethod
    async def get_max_leverages(self) -> Dict[str, Decimal]:
        """Leverage cap per denom."""

    @abstractmethod
    async def get_balance(self) -> Decimal:
        """Spendable USDC balance."""

    @abstractmethod
    async def get_positions(self) -> List[Position]:
        """Open positions of the connected wallet."""

    # ========================================================================
    # TRANSACTIONS
    # ========================================================================

    @abstractmethod
    async def open_position(
        self,
        assets: List[PositionAsset],
        leverage: Decimal,
        collateral: Decimal,
    ) -> Optional[TxResult]:
        """Open a basket position funded with ``collateral`` USDC."""

    @abstractmethod
    async def close_position(self, position_id: str) -> Optional[TxResult]:
        """Close a position by id."""
