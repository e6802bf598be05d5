"""
Trading Bot - runs one BullBear strategy on a fixed cycle
"""

import asyncio
import signal
import time
import traceback
from typing import Any, Dict, Optional

from exchange_clients.factory import ExchangeFactory
from helpers.unified_logger import get_logger
from strategies import StrategyFactory
from strategies.components import CycleSummary


class TradingBot:
    """Creates the platform client and strategy, then runs strategy cycles."""

    def __init__(self, strategy_name: str, config: Any = None, exchange_client=None):
        """
        Initialize Trading Bot.

        Args:
            strategy_name: Registry name or short code of the strategy
            config: Strategy config model or dict of parameters
            exchange_client: Optional pre-built client (otherwise created from config)
        """
        self.strategy_name = StrategyFactory.resolve_name(strategy_name)
        self.config = StrategyFactory.build_config(self.strategy_name, config)

        context = {"exchange": self.config.exchange}
        if self.config.dry_run:
            context["mode"] = "dry-run"
        self.logger = get_logger("bot", self.strategy_name, context=context, log_to_console=True)

        try:
            self.exchange_client = exchange_client or ExchangeFactory.create_exchange(
                self.config.exchange,
                self._client_config(),
            )
        except ValueError as e:
            raise ValueError(f"Failed to create exchange client: {e}")

        try:
            self.strategy = StrategyFactory.create_strategy(
                self.strategy_name,
                self.config,
                self.exchange_client,
            )
            self.logger.info(f"Strategy '{self.strategy.get_strategy_name()}' created successfully")
        except ValueError as e:
            raise ValueError(f"Failed to create strategy: {e}")

        self.shutdown_requested = False
        self._shutdown_event: Optional[asyncio.Event] = None

    def _client_config(self) -> Dict[str, Any]:
        client_config = {"cache_dir": self.config.cache_dir}
        if self.config.rest_url:
            client_config["rest_url"] = self.config.rest_url
        return client_config

    def _log_configuration(self):
        """Log the current strategy configuration."""
        self.logger.info("=== Strategy Configuration ===")
        self.logger.info(f"Strategy: {self.strategy.get_strategy_name()} ({self.strategy.STRATEGY_CODE})")
        self.logger.info(f"Exchange: {self.config.exchange}")
        for key, value in self.config.model_dump().items():
            self.logger.info(f"  {key}: {value}")
        self.logger.info("==============================")

    def request_shutdown(self, reason: str = "Unknown") -> None:
        if not self.shutdown_requested:
            self.logger.info(f"🛑 Shutdown requested: {reason}")
        self.shutdown_requested = True
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
            except (NotImplementedError, RuntimeError):
                # Windows loops; Ctrl+C still raises KeyboardInterrupt
                pass

    async def run_once(self) -> Optional[CycleSummary]:
        """Run a single strategy cycle; errors are logged and yield None."""
        try:
            if not await self.strategy.should_execute():
                return None
            return await self.strategy.execute_strategy()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Strategy execution error: {e}")
            self.logger.debug(traceback.format_exc())
            return None

    async def _sleep(self, seconds: float) -> None:
        if seconds <= 0 or self._shutdown_event is None:
            return
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def run(self, interval: float = 0) -> None:
        """
        Run cycles until shutdown.

        ``interval`` seconds between cycle starts; the cycle's own execution
        time is subtracted. ``0`` runs a single cycle.
        """
        self._shutdown_event = asyncio.Event()
        self._install_signal_handlers()

        try:
            self._log_configuration()
            await self.strategy.initialize()

            while not self.shutdown_requested:
                started = time.monotonic()
                summary = await self.run_once()
                if summary is not None:
                    self.logger.info(f"Cycle result: {summary.to_dict()}")

                if interval <= 0:
                    break

                remaining = interval - (time.monotonic() - started)
                if remaining > 0:
                    self.logger.info(f"Next cycle in {remaining:.0f} seconds")
                await self._sleep(remaining)

        except KeyboardInterrupt:
            self.request_shutdown("User interruption (Ctrl+C)")
        finally:
            await self.graceful_shutdown()

    async def graceful_shutdown(self) -> None:
        """Clean up the strategy and disconnect the client."""
        try:
            await asyncio.wait_for(self.strategy.cleanup(), timeout=30.0)
        except asyncio.TimeoutError:
            self.logger.warning("⚠️ Strategy cleanup timed out")
        except Exception as e:
            self.logger.error(f"❌ Strategy cleanup error: {e}")

        try:
            await asyncio.wait_for(self.exchange_client.disconnect(), timeout=10.0)
            self.logger.info(f"✅ Disconnected from: {self.config.exchange}")
        except Exception as e:
            self.logger.warning(f"Disconnect failed: {e}")
