"""
Strategy lookup: registry names, short codes and validated configs.
"""

from typing import Any, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel

from .categories.position_strategy import PositionStrategy
from .implementations import (
    FundingRateArbitrageStrategy,
    FundingSkewReversalStrategy,
    LiquidityImbalanceStrategy,
    MomentumBreakoutStrategy,
    RapidMarketMomentumStrategy,
    VolatilityBreakoutStrategy,
    YieldHarvesterStrategy,
)

StrategyParams = Optional[Union[Mapping[str, Any], BaseModel]]


class StrategyFactory:
    """Maps CLI/YAML strategy names to PositionStrategy classes."""

    _strategies: Dict[str, Type[PositionStrategy]] = {
        'funding_rate_arbitrage': FundingRateArbitrageStrategy,
        'funding_skew_reversal': FundingSkewReversalStrategy,
        'liquidity_imbalance': LiquidityImbalanceStrategy,
        'momentum_breakout': MomentumBreakoutStrategy,
        'volatility_breakout': VolatilityBreakoutStrategy,
        'yield_harvester': YieldHarvesterStrategy,
        'rapid_market_momentum': RapidMarketMomentumStrategy,
    }

    @classmethod
    def resolve_name(cls, strategy_name: str) -> str:
        """Accept a registry name or a short code such as 'fra' or 'yield'."""
        name = strategy_name.lower().replace('-', '_')
        if name in cls._strategies:
            return name
        for registered, strategy_class in cls._strategies.items():
            if strategy_class.STRATEGY_CODE == name:
                return registered
        available = ', '.join(cls.get_supported_strategies())
        raise ValueError(f"Unsupported strategy: {strategy_name}. Available: {available}")

    @classmethod
    def get_strategy_class(cls, strategy_name: str) -> Type[PositionStrategy]:
        return cls._strategies[cls.resolve_name(strategy_name)]

    @classmethod
    def build_config(cls, strategy_name: str, params: StrategyParams = None) -> BaseModel:
        """Validate ``params`` against the strategy's config class."""
        config_class = cls.get_strategy_class(strategy_name).CONFIG_CLASS
        if isinstance(params, config_class):
            return params
        if isinstance(params, BaseModel):
            params = params.model_dump()
        return config_class.model_validate(dict(params or {}))

    @classmethod
    def create_strategy(
        cls,
        strategy_name: str,
        config: StrategyParams = None,
        exchange_client=None,
    ) -> PositionStrategy:
        """Build a strategy trading through ``exchange_client``.

        ``config`` may be a config model or a plain dict; missing fields take
        their defaults. Raises ValueError for unknown names, bad params or a
        missing client.
        """
        strategy_class = cls.get_strategy_class(strategy_name)
        if exchange_client is None:
            raise ValueError(f"Strategy '{strategy_name}' requires exchange_client parameter")
        return strategy_class(cls.build_config(strategy_name, config), exchange_client)

    @classmethod
    def get_supported_strategies(cls) -> List[str]:
        return list(cls._strategies)

    @classmethod
    def get_strategy_info(cls, strategy_name: str) -> Dict[str, Any]:
        """Code, display name and config defaults, for ``--list-strategies``."""
        name = cls.resolve_name(strategy_name)
        strategy_class = cls._strategies[name]

        return {
            'name': name,
            'code': strategy_class.STRATEGY_CODE,
            'display_name': strategy_class.DISPLAY_NAME,
            'class': strategy_class.__name__,
            'description': (strategy_class.__doc__ or "").strip(),
            'parameters': {
                field_name: field.default
                for field_name, field in strategy_class.CONFIG_CLASS.model_fields.items()
                if field.default_factory is None
            },
        }
