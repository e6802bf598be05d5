"""
YAML Configuration File Support

Handles loading and saving strategy configurations to/from YAML files.

Features:
- Load config from YAML
- Save config to YAML
- Validation against the strategy's pydantic config
- Decimal/datetime serialization
- Config merging (file + CLI overrides)
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError


# ============================================================================
# YAML Custom Representers (for Decimal serialization)
# ============================================================================

def decimal_representer(dumper, data):
    """Custom representer for Decimal type."""
    return dumper.represent_scalar('tag:yaml.org,2002:float', str(data))


def decimal_constructor(loader, node):
    """Custom constructor so YAML floats load as Decimal."""
    value = loader.construct_scalar(node)
    return Decimal(value)


# Register custom handlers on the safe loader/dumper used below
yaml.add_representer(Decimal, decimal_representer, Dumper=yaml.SafeDumper)
yaml.add_constructor('tag:yaml.org,2002:float', decimal_constructor, Loader=yaml.SafeLoader)


# ============================================================================
# YAML Config Operations
# ============================================================================

def _config_document(strategy_name: str, config: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "strategy": strategy_name,
        "created_at": datetime.now().isoformat(),
        "version": "1.0",
        "config": config,
    }


def _dump(document: Dict[str, Any], file_path: Path) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w') as f:
        yaml.safe_dump(
            document,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            indent=2,
        )


def save_config_to_yaml(strategy_name: str, config: Dict[str, Any], file_path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        strategy_name: Name of the strategy
        config: Configuration dictionary
        file_path: Path to save to
    """
    _dump(_config_document(strategy_name, config), Path(file_path))


def load_config_from_yaml(file_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        file_path: Path to config file

    Returns:
        Dictionary with 'strategy', 'config' and 'metadata' keys

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If config structure is invalid
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path, 'r') as f:
        full_config = yaml.safe_load(f)

    # Validate structure
    if not isinstance(full_config, dict):
        raise ValueError("Invalid config file: must be a YAML dictionary")

    if "strategy" not in full_config:
        raise ValueError("Invalid config file: missing 'strategy' field")

    config = full_config.get("config")
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError("Invalid config file: 'config' must be a dictionary")

    return {
        "strategy": full_config["strategy"],
        "config": config,
        "metadata": {
            "created_at": full_config.get("created_at"),
            "version": full_config.get("version", "1.0")
        }
    }


def validate_config_file(file_path: Path) -> Tuple[bool, Optional[str]]:
    """
    Validate a config file against its strategy's config model.

    Args:
        file_path: Path to config file

    Returns:
        (is_valid, error_message)
    """
    from strategies.factory import StrategyFactory

    try:
        loaded = load_config_from_yaml(file_path)
        StrategyFactory.build_config(loaded["strategy"], loaded["config"])
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        return False, "\n".join(errors)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        return False, str(e)

    return True, None


def merge_configs(base_config: Dict, overrides: Dict) -> Dict:
    """
    Merge two configurations (for CLI override support).

    Args:
        base_config: Base configuration (from file)
        overrides: Override values (from CLI args)

    Returns:
        Merged configuration
    """
    merged = base_config.copy()

    for key, value in overrides.items():
        if value is not None:  # Only override if value is provided
            merged[key] = value

    return merged


# Example parameters per strategy; everything else uses the model defaults
EXAMPLE_CONFIGS: Dict[str, Dict[str, Any]] = {
    "funding_rate_arbitrage": {
        "collateral": Decimal("10.1"),
        "leverage": Decimal("2"),
        "max_positions": 3,
        "min_funding_rate_entry": 15,
        "min_oi_imbalance": 1.2,
        "min_funding_rate_exit": 5,
        "take_profit_percent": 0.05,
        "stop_loss_percent": 0.03,
        "max_position_hours": 48,
        "dry_run": True,
    },
    "funding_skew_reversal": {
        "collateral": Decimal("10.1"),
        "leverage": Decimal("2.5"),
        "max_positions": 3,
        "skew_threshold": 2.0,
        "min_funding_rate_for_skew": 15,
        "take_profit_percent": 0.08,
        "stop_loss_percent": 0.05,
        "max_position_hours": 72,
        "dry_run": True,
    },
    "liquidity_imbalance": {
        "collateral": Decimal("10.1"),
        "leverage": Decimal("2.5"),
        "max_positions": 3,
        "min_oi_ratio": 2.0,
        "min_funding_rate_threshold": 15,
        "take_profit_percent": 0.03,
        "stop_loss_percent": 0.04,
        "max_position_hours": 24,
        "min_balance": Decimal("15"),
        "dry_run": True,
    },
    "momentum_breakout": {
        "collateral": Decimal("10.1"),
        "leverage": Decimal("2"),
        "max_positions": 3,
        "breakout_threshold": 0.015,
        "position_mode": "single",
        "take_profit_percent": 0.05,
        "stop_loss_percent": 0.03,
        "max_position_hours": 24,
        "blacklist_hours": 8,
        "dry_run": True,
    },
    "volatility_breakout": {
        "collateral": Decimal("10.1"),
        "leverage": Decimal("2"),
        "max_leverage": Decimal("3"),
        "max_positions": 3,
        "min_volatility": 0.03,
        "volatility_breakout_factor": 1.5,
        "trailing_stop_distance": 0.04,
        "profit_lock_threshold": 0.06,
        "stop_loss_percent": 0.05,
        "max_position_hours": 48,
        "dry_run": True,
    },
    "yield_harvester": {
        "collateral": Decimal("10.1"),
        "leverage": Decimal("2"),
        "high_volatility_leverage": Decimal("1.5"),
        "max_positions": 3,
        "min_funding_rate_entry": 15,
        "min_oi_imbalance": 1.3,
        "take_profit_percent": 0.03,
        "stop_loss_percent": 0.02,
        "max_position_hours": 72,
        "dry_run": True,
    },
    "rapid_market_momentum": {
        "collateral": Decimal("11"),
        "leverage": Decimal("2"),
        "max_positions": 3,
        "rotation_minutes": 5,
        "force_trade": True,
        "take_profit_percent": 0.05,
        "stop_loss_percent": 0.03,
        "max_position_hours": 12,
        "dry_run": True,
    },
}


def create_example_configs(configs_dir: Path = Path("configs")):
    """
    Create example configuration files for each strategy.

    Useful for users to see the format and get started quickly.
    """
    configs_dir = Path(configs_dir)
    configs_dir.mkdir(parents=True, exist_ok=True)

    created = []
    for strategy_name, config in EXAMPLE_CONFIGS.items():
        path = configs_dir / f"example_{strategy_name}.yml"
        _dump(_config_document(strategy_name, dict(config)), path)
        print(f"Created: {path}")
        created.append(path)
    return created


# ============================================================================
# Main Entry Point (for example generation)
# ============================================================================

if __name__ == "__main__":
    print("Creating example configuration files...\n")
    create_example_configs()
    print("\n✓ Example configs created in ./configs/")
    print("\nYou can use these as templates:")
    print("  python runbot.py --config configs/example_funding_rate_arbitrage.yml")
    print("  python runbot.py --config configs/example_rapid_market_momentum.yml --interval 300")
