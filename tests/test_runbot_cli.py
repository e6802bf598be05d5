"""Tests for the runbot command line."""

import pytest

import runbot
from trading_config import save_config_to_yaml


def test_requires_a_source():
    with pytest.raises(SystemExit):
        runbot.parse_arguments([])


def test_config_and_strategy_are_exclusive():
    with pytest.raises(SystemExit):
        runbot.parse_arguments(["--config", "a.yml", "--strategy", "fra"])


def test_defaults():
    args = runbot.parse_arguments(["--strategy", "rmm"])

    assert args.interval == 0
    assert args.env_file == ".env"
    assert args.log_level == "INFO"
    assert not args.dry_run


def test_strategy_source_from_name():
    args = runbot.parse_arguments(["-s", "fra", "--dry-run"])

    assert runbot.load_strategy_source(args) == ("fra", {})


def test_strategy_source_from_yaml(tmp_path):
    path = tmp_path / "vbh.yml"
    save_config_to_yaml("volatility_breakout", {"max_positions": 2}, path)
    args = runbot.parse_arguments(["--config", str(path)])

    assert runbot.load_strategy_source(args) == ("volatility_breakout", {"max_positions": 2})


def test_invalid_yaml_exits(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("strategy: fra\nconfig:\n  leverage: -1\n")
    args = runbot.parse_arguments(["--config", str(path)])

    with pytest.raises(SystemExit):
        runbot.load_strategy_source(args)


@pytest.mark.asyncio
async def test_missing_custom_env_file_exits(tmp_path):
    with pytest.raises(SystemExit):
        await runbot.main(["--strategy", "fra", "--env-file", str(tmp_path / "missing.env")])


@pytest.mark.asyncio
async def test_list_strategies(capsys):
    await runbot.main(["--list-strategies"])

    assert "Liquidity Imbalance" in capsys.readouterr().out
