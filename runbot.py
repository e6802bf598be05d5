#!/usr/bin/env python3
"""
BullBear Strategy Bot - launcher.

Usage:
    python runbot.py --config configs/example_funding_rate_arbitrage.yml [--env-file .env]
    python runbot.py --strategy fra --dry-run --interval 300
    python runbot.py --status
    python runbot.py --list-strategies

Generate example configs via:
    python -m trading_config.config_yaml
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import dotenv
from rich.console import Console
from rich.table import Table

from exchange_clients.factory import ExchangeFactory
from strategies import StrategyFactory
from strategies.components import MarketSnapshot
from strategies.components.opportunity_table import (
    build_account_table,
    build_markets_table,
    print_table,
)

console = Console()


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run a BullBear trading strategy from a YAML config or by name."
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to a YAML strategy configuration.",
    )
    source.add_argument(
        "--strategy",
        "-s",
        type=str,
        help="Strategy name or code (fra, fsr, lit, mbf, vbh, yield, rmm) with default parameters.",
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment file with the SEED mnemonic (default: .env).",
    )

    parser.add_argument(
        "--log-level",
        "-l",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO). Use DEBUG to see detailed logs.",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate opens and closes without broadcasting transactions.",
    )

    parser.add_argument(
        "--interval",
        "-i",
        type=float,
        default=0,
        help="Seconds between cycles; 0 runs a single cycle (default: 0).",
    )

    parser.add_argument(
        "--status",
        action="store_true",
        help="Print wallet, positions and market data, then exit.",
    )

    parser.add_argument(
        "--list-strategies",
        action="store_true",
        help="List available strategies and exit.",
    )

    args = parser.parse_args(argv)
    if not (args.config or args.strategy or args.status or args.list_strategies):
        parser.error("one of --config, --strategy, --status or --list-strategies is required")
    return args


def setup_logging(log_level: str):
    """Setup logging for standard library loggers used by dependencies."""
    # UnifiedLogger reads LOG_LEVEL when loggers are created
    os.environ['LOG_LEVEL'] = log_level

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s.%(msecs)03d - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    # Suppress noisy library debug logs
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('grpc').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def list_strategies() -> None:
    table = Table(title="[bold cyan]Available strategies[/bold cyan]", header_style="bold magenta")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("Registry name", style="dim")

    for name in StrategyFactory.get_supported_strategies():
        info = StrategyFactory.get_strategy_info(name)
        table.add_row(info["code"], info["display_name"], name)
    console.print(table)


async def show_status(client_config: dict) -> None:
    """Print address, balance, positions and market data."""
    client = ExchangeFactory.create_exchange("bullbear", client_config)
    await client.connect()
    try:
        balance = await client.get_balance()
        snapshot = MarketSnapshot(
            markets=await client.get_markets(),
            prices=await client.get_prices(),
            funding_rates=await client.get_funding_rates(),
            max_leverages=await client.get_max_leverages(),
            positions=await client.get_positions(),
            balance=balance,
        )
        print_table(build_account_table(client.address, balance, snapshot.positions))
        print_table(build_markets_table(snapshot))
    finally:
        await client.disconnect()


def load_strategy_source(args):
    """Return (strategy_name, params) from --config or --strategy."""
    from trading_config.config_yaml import load_config_from_yaml, validate_config_file

    if args.strategy:
        return args.strategy, {}

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}")
        sys.exit(1)

    is_valid, error = validate_config_file(config_path)
    if not is_valid:
        print(f"Error: Invalid config file: {error}")
        sys.exit(1)

    loaded = load_config_from_yaml(config_path)
    print(f"\n✓ Loaded configuration from: {config_path}")
    print(f"  Strategy: {loaded['strategy']}")
    print(f"  Created: {loaded['metadata'].get('created_at', 'unknown')}\n")
    return loaded["strategy"], loaded["config"]


async def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(args.log_level)

    if args.list_strategies:
        list_strategies()
        return

    env_path = Path(args.env_file)
    if env_path.exists():
        dotenv.load_dotenv(env_path)
    elif args.env_file != ".env":
        print(f"Env file not found: {env_path.resolve()}")
        sys.exit(1)

    if args.status:
        await show_status({})
        return

    from trading_bot import TradingBot

    strategy_name, params = load_strategy_source(args)
    if args.dry_run:
        params = {**params, "dry_run": True}

    try:
        bot = TradingBot(strategy_name, params)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\n" + "=" * 70)
    print("  Starting BullBear Strategy Bot")
    print("=" * 70)
    print(f"  Strategy: {bot.strategy.get_strategy_name()} ({bot.strategy.STRATEGY_CODE})")
    print(f"  Dry run:  {bot.config.dry_run}")
    print(f"  Interval: {args.interval or 'single cycle'}")
    print("=" * 70 + "\n")

    await bot.run(interval=args.interval)


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
