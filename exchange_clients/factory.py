"""
Platform factory for creating clients dynamically.
"""

from typing import Any, Dict, Optional, Type

from exchange_clients.base_client import BasePerpsClient


class ExchangeFactory:
    """Factory class for creating platform clients."""

    _registered_exchanges = {
        'bullbear': 'exchange_clients.bullbear.BullBearClient',
    }

    @classmethod
    def create_exchange(cls, exchange_name: str, config: Optional[Dict[str, Any]] = None) -> BasePerpsClient:
        """Create a platform client instance.

        Args:
            exchange_name: Name of the platform (e.g., 'bullbear')
            config: Configuration dictionary for the client

        Returns:
            Client instance

        Raises:
            ValueError: If the platform is not supported
            MissingCredentialsError: If the client rejects its credentials
        """
        exchange_name = exchange_name.lower()

        if exchange_name not in cls._registered_exchanges:
            available_exchanges = ', '.join(cls._registered_exchanges.keys())
            raise ValueError(f"Unsupported exchange: {exchange_name}. Available exchanges: {available_exchanges}")

        # Import lazily so cosmpy is only loaded when a client is requested
        exchange_class = cls._import_exchange_class(cls._registered_exchanges[exchange_name])
        return exchange_class(config or {})

    @classmethod
    def _import_exchange_class(cls, class_path: str) -> Type[BasePerpsClient]:
        """Dynamically import a client class.

        Raises:
            ImportError: If the class cannot be imported
            ValueError: If the class does not inherit from BasePerpsClient
        """
        try:
            module_path, class_name = class_path.rsplit('.', 1)
            module = __import__(module_path, fromlist=[class_name])
            exchange_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ImportError(f"Failed to import exchange class {class_path}: {e}") from e

        if not isinstance(exchange_class, type) or not issubclass(exchange_class, BasePerpsClient):
            raise ValueError(f"Exchange class {class_name} must inherit from BasePerpsClient")
        return exchange_class

    @classmethod
    def get_supported_exchanges(cls) -> list:
        """Get list of supported platforms."""
        return list(cls._registered_exchanges.keys())

    @classmethod
    def register_exchange(cls, name: str, exchange_class: type) -> None:
        """Register a new client class that inherits from BasePerpsClient."""
        if not issubclass(exchange_class, BasePerpsClient):
            raise ValueError("Exchange class must inherit from BasePerpsClient")

        # Stored as a module path for lazy loading
        cls._registered_exchanges[name.lower()] = f"{exchange_class.__module__}.{exchange_class.__name__}"
