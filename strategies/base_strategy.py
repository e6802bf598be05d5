"""
Base Strategy Interface
Defines the contract that all trading strategies must implement.
"""

from abc import ABC, abstractmethod
from typing import Any

from helpers.unified_logger import get_strategy_logger


class BaseStrategy(ABC):
    """
    Base class for all trading strategies.

    Lifecycle: ``initialize()`` once, ``execute_strategy()`` per cycle,
    ``cleanup()`` on shutdown.
    """

    def __init__(self, config, exchange_client=None):
        """
        Initialize strategy with configuration and platform client.

        Args:
            config: Strategy configuration
            exchange_client: Platform client used for queries and transactions
        """
        self.config = config
        self.exchange_client = exchange_client

        context = {'exchange': getattr(config, 'exchange', 'bullbear')}
        if getattr(config, 'dry_run', False):
            context['mode'] = 'dry-run'

        self.logger = get_strategy_logger(
            self.get_strategy_name().lower().replace(' ', '_'),
            **context
        )

        self.is_initialized = False
        self.last_action_time = 0

    async def initialize(self):
        """Initialize strategy-specific components."""
        if not self.is_initialized:
            await self._initialize_strategy()
            self.is_initialized = True
            self.logger.info(f"Strategy '{self.get_strategy_name()}' initialized")

    async def _initialize_strategy(self):
        """Strategy-specific initialization logic."""
        pass

    async def should_execute(self) -> bool:
        """Determine if strategy should execute this cycle."""
        return True

    @abstractmethod
    async def execute_strategy(self) -> Any:
        """Execute one strategy cycle and return its summary."""
        pass

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Get the strategy name."""
        pass

    async def cleanup(self):
        """Cleanup strategy resources."""
        self.logger.info(f"Strategy '{self.get_strategy_name()}' cleanup completed")
        # Flush enqueued log records before exit
        if hasattr(self.logger, 'flush'):
            self.logger.flush()
