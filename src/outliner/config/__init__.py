"""
outliner.config - Configuration loading and defaults
"""

from outliner.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from outliner.config.loader import (
    _apply_env_overrides,
    _try_parse_env_value,
    apply_env_overrides,
    find_config_file,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
    validate_config,
)

__all__ = [
    "load_config",
    "find_config_file",
    "merge_configs",
    "apply_env_overrides",
    "validate_config",
    "parse_toml",
    "parse_toml_document",
    "_apply_env_overrides",
    "_try_parse_env_value",
    "DEFAULT_CONFIG",
    "CONFIG_FILENAME",
]
