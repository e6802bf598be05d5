"""
BullBear client implementation.

Wallet signing, broadcasting and smart-contract queries go through cosmpy.
cosmpy is synchronous, so every chain call runs in a worker thread.
"""

import asyncio
import os
import random
from decimal import Decimal
from typing import Any, Dict, List, Optional

from cosmpy.aerial.client import LedgerClient, NetworkConfig
from cosmpy.aerial.contract import LedgerContract
from cosmpy.aerial.wallet import LocalWallet
from cosmpy.crypto.address import Address

from exchange_clients.base_client import BasePerpsClient
from exchange_clients.base_models import (
    FundingRateInfo,
    Market,
    Position,
    PositionAsset,
    SequenceMismatchError,
    TxResult,
    extract_position_id,
    format_leverage,
    is_sequence_mismatch,
    query_retry,
    to_decimal,
    validate_credentials,
)
from exchange_clients.bullbear import constants as c
from exchange_clients.cache import JsonFileCache
from helpers.unified_logger import get_exchange_logger


class BullBearClient(BasePerpsClient):
    """BullBear basket-perps client on Neutron."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.logger = get_exchange_logger("bullbear")
        self.mnemonic = self.config.get("mnemonic") or os.getenv("SEED")
        self.rest_url = (
            self.config.get("rest_url")
            or os.getenv("BULLBEAR_REST_URL")
            or random.choice(c.REST_ENDPOINTS)
        )
        cache_dir = self.config.get("cache_dir") or os.getenv("BULLBEAR_CACHE_DIR") or c.CACHE_DIR
        self.cache = JsonFileCache(cache_dir, logger=self.logger)

        self.wallet: Optional[LocalWallet] = None
        self.ledger: Optional[LedgerClient] = None
        self._contracts: Dict[str, LedgerContract] = {}

    # --------------------------------------------------------------------- #
    # Configuration & session management
    # --------------------------------------------------------------------- #

    def _validate_config(self) -> None:
        validate_credentials("SEED", self.config.get("mnemonic") or os.getenv("SEED"))

    def _network_config(self) -> NetworkConfig:
        url = self.rest_url if "+" in self.rest_url.split("://")[0] else f"rest+{self.rest_url}"
        return NetworkConfig(
            chain_id=c.CHAIN_ID,
            url=url,
            fee_minimum_gas_price=c.GAS_PRICE,
            fee_denomination=c.USDC_DENOM,
            staking_denomination=c.STAKING_DENOM,
        )

    def _build_session(self) -> None:
        self.wallet = LocalWallet.from_mnemonic(self.mnemonic, prefix=c.BECH32_PREFIX)
        self.ledger = LedgerClient(self._network_config())
        self._contracts = {}

    async def connect(self) -> None:
        self.logger.info(f"Using endpoint: {self.rest_url}")
        await asyncio.to_thread(self._build_session)
        self.logger.info(f"Connected to BullBear. Address: {self.address}")

    async def disconnect(self) -> None:
        self.ledger = None
        self._contracts = {}

    @property
    def address(self) -> str:
        if self.wallet is None:
            raise RuntimeError("BullBear client is not connected")
        return str(self.wallet.address())

    def get_exchange_name(self) -> str:
        return "bullbear"

    def _contract(self, address: str) -> LedgerContract:
        if self.ledger is None:
            raise RuntimeError("BullBear client is not connected")
        if address not in self._contracts:
            self._contracts[address] = LedgerContract(None, self.ledger, Address(address))
        return self._contracts[address]

    async def _query(self, contract_address: str, msg: Dict[str, Any]) -> Any:
        contract = self._contract(contract_address)
        return await asyncio.to_thread(contract.query, msg)

    # --------------------------------------------------------------------- #
    # Cached market data
    # --------------------------------------------------------------------- #

    async def _fetch_bvb_markets(self) -> List[Dict[str, Any]]:
        markets = await self._query(c.BVB_CONTRACT, {"markets": {}})
        if isinstance(markets, dict):
            markets = markets.get("markets") or markets.get("data") or []
        return markets or []

    async def _fetch_markets(self) -> List[Dict[str, Any]]:
        markets = await self._fetch_bvb_markets()
        return [
            Market.from_dict(market).to_dict()
            for market in markets
            if market.get("enabled")
        ]

    async def get_markets(self) -> List[Market]:
        """Enabled markets, e.g. ``[Market(denom="perps/ubtc", display="BTC")]``."""
        data = await self.cache.get_or_fetch("markets.json", c.MARKET_CACHE_SECONDS, self._fetch_markets)
        return [Market.from_dict(item) for item in data or []]

    async def _fetch_prices(self) -> Dict[str, str]:
        markets = await self.get_markets()
        denoms = [market.denom for market in markets]
        if not denoms:
            raise ValueError("no enabled markets to price")
        prices = await self._query(c.MARS_ORACLE, {"prices_by_denoms": {"denoms": denoms}})
        return {denom: str(price) for denom, price in (prices or {}).items()}

    async def get_prices(self) -> Dict[str, Decimal]:
        data = await self.cache.get_or_fetch("prices.json", c.PRICE_CACHE_SECONDS, self._fetch_prices)
        prices: Dict[str, Decimal] = {}
        for denom, raw in (data or {}).items():
            price = to_decimal(raw)
            if price is not None:
                prices[denom] = price
        return prices

    async def _fetch_max_leverages(self) -> Dict[str, str]:
        markets = await self._fetch_bvb_markets()
        leverages = {}
        for market in markets:
            max_leverage = to_decimal(market.get("max_leverage"))
            if market.get("enabled") and max_leverage is not None:
                leverages[market["denom"]] = str(max_leverage)
        return leverages

    async def get_max_leverages(self) -> Dict[str, Decimal]:
        data = await self.cache.get_or_fetch(
            "max_leverages.json", c.MAX_LEVERAGE_CACHE_SECONDS, self._fetch_max_leverages
        )
        return {denom: Decimal(value) for denom, value in (data or {}).items()}

    async def _fetch_funding_rates(self) -> Dict[str, Dict[str, float]]:
        rates: Dict[str, Dict[str, float]] = {}
        start_after: Optional[str] = None
        while True:
            query: Dict[str, Any] = {"limit": c.PERPS_MARKETS_PAGE_SIZE}
            if start_after:
                query["start_after"] = start_after
            page = await self._query(c.MARS_PERPS, {"markets": query})
            entries = page.get("data", []) if isinstance(page, dict) else (page or [])

            for entry in entries:
                daily_rate = to_decimal(entry.get("current_funding_rate"), Decimal("0"))
                long_oi = to_decimal(entry.get("long_oi_value", entry.get("long_oi")), Decimal("0"))
                short_oi = to_decimal(entry.get("short_oi_value", entry.get("short_oi")), Decimal("0"))
                rates[entry["denom"]] = FundingRateInfo(
                    funding_rate=float(daily_rate * c.DAYS_PER_YEAR * 100),
                    long_oi=float(long_oi / c.DIVISOR),
                    short_oi=float(short_oi / c.DIVISOR),
                ).to_dict()

            has_more = isinstance(page, dict) and page.get("metadata", {}).get("has_more")
            if not has_more or not entries:
                return rates
            start_after = entries[-1]["denom"]

    async def get_funding_rates(self) -> Dict[str, FundingRateInfo]:
        data = await self.cache.get_or_fetch(
            "funding_rates.json", c.FUNDING_RATE_CACHE_SECONDS, self._fetch_funding_rates
        )
        return {denom: FundingRateInfo.from_dict(info) for denom, info in (data or {}).items()}

    # --------------------------------------------------------------------- #
    # Account
    # --------------------------------------------------------------------- #

    @query_retry(default_return=Decimal("0"))
    async def get_balance(self) -> Decimal:
        amount = await asyncio.to_thread(
            self.ledger.query_bank_balance, Address(self.address), c.USDC_DENOM
        )
        return Decimal(int(amount or 0)) / c.DIVISOR

    @query_retry(reraise=True)
    async def get_positions(self) -> List[Position]:
        raw = await self._query(
            c.BVB_CONTRACT,
            {"user_positions_new": {"user": self.address, "position_type": c.POSITION_TYPE}},
        )
        if isinstance(raw, dict):
            raw = raw.get("positions") or raw.get("data") or []
        return [Position.from_raw(item) for item in raw or []]

    # --------------------------------------------------------------------- #
    # Transactions
    # --------------------------------------------------------------------- #

    def _execute_sync(self, msg: Dict[str, Any], funds: Optional[str]) -> TxResult:
        contract = self._contract(c.BVB_CONTRACT)
        tx = contract.execute(msg, self.wallet, funds=funds).wait_to_complete()
        response = tx.response

        events: Any = getattr(response, "events", None) or {}
        logs = getattr(response, "logs", None) or []
        log_events = [getattr(entry, "events", {}) for entry in logs]
        position_id = extract_position_id(events) or extract_position_id(log_events)

        return TxResult(
            tx_hash=str(getattr(response, "hash", tx.tx_hash)),
            position_id=position_id,
            height=getattr(response, "height", None),
            gas_used=getattr(response, "gas_used", None),
            events={"events": events, "logs": log_events},
            raw_log=getattr(response, "raw_log", None),
        )

    async def _execute(self, msg: Dict[str, Any], funds: Optional[str] = None) -> Optional[TxResult]:
        try:
            return await asyncio.to_thread(self._execute_sync, msg, funds)
        except Exception as e:
            if is_sequence_mismatch(e):
                raise SequenceMismatchError(str(e)) from e
            self.logger.error(f"Contract execution failed: {e}")
            return None

    async def open_position(
        self,
        assets: List[PositionAsset],
        leverage: Decimal,
        collateral: Decimal,
    ) -> Optional[TxResult]:
        amount = int(Decimal(str(collateral)) * c.DIVISOR)
        msg = {
            "open_position": {
                "assets": [asset.to_order() for asset in assets],
                "leverage": format_leverage(leverage),
                "position_type": c.POSITION_TYPE,
            }
        }
        self.logger.info(
            f"Opening position: {msg['open_position']['assets']} "
            f"leverage={msg['open_position']['leverage']}x collateral={collateral} USDC"
        )
        return await self._execute(msg, funds=f"{amount}{c.USDC_DENOM}")

    async def close_position(self, position_id: str) -> Optional[TxResult]:
        self.logger.info(f"Closing position {position_id}")
        return await self._execute({"close_position": {"position_id": int(position_id)}})
