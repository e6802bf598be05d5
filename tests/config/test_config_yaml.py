"""Tests for YAML strategy config files."""

from decimal import Decimal

import pytest
import yaml

from trading_config import (
    EXAMPLE_CONFIGS,
    create_example_configs,
    load_config_from_yaml,
    merge_configs,
    save_config_to_yaml,
    validate_config_file,
)


def test_save_and_load_keeps_decimals(tmp_path):
    path = tmp_path / "fra.yml"
    save_config_to_yaml("funding_rate_arbitrage", {"collateral": Decimal("10.1"), "max_positions": 2}, path)

    loaded = load_config_from_yaml(path)

    assert loaded["strategy"] == "funding_rate_arbitrage"
    assert loaded["config"] == {"collateral": Decimal("10.1"), "max_positions": 2}
    assert loaded["metadata"]["version"] == "1.0"
    assert loaded["metadata"]["created_at"]


def test_missing_config_section_defaults_to_empty(tmp_path):
    path = tmp_path / "rmm.yml"
    path.write_text("strategy: rmm\n")

    assert load_config_from_yaml(path)["config"] == {}


@pytest.mark.parametrize(
    "content, message",
    [
        ("- a\n- b\n", "must be a YAML dictionary"),
        ("config: {}\n", "missing 'strategy'"),
        ("strategy: fra\nconfig: [1, 2]\n", "'config' must be a dictionary"),
    ],
)
def test_invalid_structure(tmp_path, content, message):
    path = tmp_path / "bad.yml"
    path.write_text(content)

    with pytest.raises(ValueError, match=message):
        load_config_from_yaml(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config_from_yaml(tmp_path / "nope.yml")


def test_validate_reports_field_errors(tmp_path):
    path = tmp_path / "lit.yml"
    path.write_text("strategy: lit\nconfig:\n  max_positions: 0\n")

    valid, error = validate_config_file(path)

    assert not valid
    assert error.startswith("max_positions:")


def test_validate_reports_unknown_strategy(tmp_path):
    path = tmp_path / "grid.yml"
    path.write_text("strategy: grid\n")

    valid, error = validate_config_file(path)

    assert not valid
    assert "Unsupported strategy" in error


def test_validate_reports_yaml_errors(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("strategy: [unclosed\n")

    valid, _ = validate_config_file(path)

    assert not valid


def test_example_configs_are_valid(tmp_path):
    created = create_example_configs(tmp_path / "configs")

    assert len(created) == len(EXAMPLE_CONFIGS)
    for path in created:
        assert validate_config_file(path) == (True, None)
        assert load_config_from_yaml(path)["config"]["dry_run"] is True


def test_floats_load_as_decimal_with_safe_loader():
    assert yaml.safe_load("value: 0.05")["value"] == Decimal("0.05")


def test_merge_ignores_unset_overrides():
    merged = merge_configs({"leverage": 2, "dry_run": False}, {"dry_run": True, "leverage": None})

    assert merged == {"leverage": 2, "dry_run": True}
