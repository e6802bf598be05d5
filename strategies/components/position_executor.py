"""
Open/close execution with dry-run support and sequence-mismatch retries.
"""

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, List, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from exchange_clients.base_client import BasePerpsClient
from exchange_clients.base_models import PositionAsset, SequenceMismatchError, TxResult

from .models import now_ms


DRY_RUN_PREFIX = "dry-run-"


class PositionExecutor:
    """
    Wraps ``open_position``/``close_position`` of a platform client.

    - Dry run: nothing is broadcast; opens get a ``dry-run-<ms>`` position id.
    - ``SequenceMismatchError`` is retried up to ``max_attempts`` times,
      ``retry_delay`` seconds apart, refreshing the client session before each
      retry. The final failure is re-raised.
    - Optionally a ``None`` result (contract rejected the message) is retried
      too, with its own attempt count and delay.
    """

    def __init__(
        self,
        client: BasePerpsClient,
        logger,
        dry_run: bool = False,
        max_attempts: int = 3,
        retry_delay: float = 10,
        open_retry_attempts: int = 1,
        close_retry_attempts: int = 1,
        empty_result_delay: float = 20,
    ):
        self.client = client
        self.logger = logger
        self.dry_run = dry_run
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.open_retry_attempts = max(1, open_retry_attempts)
        self.close_retry_attempts = max(1, close_retry_attempts)
        self.empty_result_delay = empty_result_delay

    @staticmethod
    def is_dry_run_id(position_id: str) -> bool:
        return str(position_id).startswith(DRY_RUN_PREFIX)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        self.logger.warning(
            f"Sequence mismatch (attempt {retry_state.attempt_number}/{self.max_attempts}), "
            f"refreshing client and retrying in {self.retry_delay}s"
        )

    async def _with_sequence_retry(self, operation: Callable[[], Awaitable[Optional[TxResult]]]) -> Optional[TxResult]:
        result = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(SequenceMismatchError),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    await self.client.reconnect()
                result = await operation()
        return result

    async def _with_empty_result_retry(
        self,
        label: str,
        attempts: int,
        operation: Callable[[], Awaitable[Optional[TxResult]]],
    ) -> Optional[TxResult]:
        result = None
        for attempt in range(1, attempts + 1):
            result = await self._with_sequence_retry(operation)
            if result is not None:
                return result
            if attempt < attempts:
                self.logger.warning(
                    f"{label} attempt {attempt} failed, retrying in {self.empty_result_delay}s..."
                )
                await asyncio.sleep(self.empty_result_delay)
        return result

    async def open(
        self,
        assets: List[PositionAsset],
        leverage: Decimal,
        collateral: Decimal,
    ) -> Optional[TxResult]:
        legs = [asset.to_order() for asset in assets]
        if self.dry_run:
            position_id = f"{DRY_RUN_PREFIX}{now_ms()}"
            self.logger.warning(f"[DRY RUN] Would open {legs} at {leverage}x with {collateral} USDC")
            return TxResult(tx_hash=position_id, position_id=position_id, dry_run=True)

        return await self._with_empty_result_retry(
            "Open",
            self.open_retry_attempts,
            lambda: self.client.open_position(assets, leverage, collateral),
        )

    async def close(self, position_id: str) -> Optional[TxResult]:
        if self.dry_run or self.is_dry_run_id(position_id):
            self.logger.warning(f"[DRY RUN] Would close position {position_id}")
            return TxResult(tx_hash=f"{DRY_RUN_PREFIX}{now_ms()}", position_id=str(position_id), dry_run=True)

        return await self._with_empty_result_retry(
            "Close",
            self.close_retry_attempts,
            lambda: self.client.close_position(position_id),
        )
