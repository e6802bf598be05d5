"""
Trading Configuration Management Module

YAML config file handling for the BullBear strategies.

Main Components:
- config_yaml: YAML file loading, saving, and validation utilities
"""

from .config_yaml import (
    EXAMPLE_CONFIGS,
    create_example_configs,
    load_config_from_yaml,
    merge_configs,
    save_config_to_yaml,
    validate_config_file,
)

__all__ = [
    'EXAMPLE_CONFIGS',
    'save_config_to_yaml',
    'load_config_from_yaml',
    'validate_config_file',
    'merge_configs',
    'create_example_configs'
]
