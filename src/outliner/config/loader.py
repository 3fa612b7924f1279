"""
outliner.config.loader - Find, parse, merge and validate configuration.

Configuration comes from three layers, later ones winning:

1. ``DEFAULT_CONFIG``
2. ``.outliner.toml`` (found by walking up from the working directory)
3. ``OUTLINER_<SECTION>_<KEY>`` environment variables
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from outliner.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX


def parse_toml_document(content: str) -> tomlkit.TOMLDocument:
    """Parse TOML text, keeping formatting for round-trip edits.

    Raises:
        ValueError: On TOML syntax errors.
    """
    try:
        return tomlkit.parse(content)
    except ParseError as e:
        raise ValueError(f"Invalid TOML: {e}") from e


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python dicts and lists."""
    return parse_toml_document(content).unwrap()


def find_config_file(start: Path) -> Path | None:
    """Find ``.outliner.toml`` in start or any parent directory.

    Args:
        start: Directory to start searching from.

    Returns:
        Path to the config file, or None if not found.
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(raw: str) -> Any:
    """Interpret an environment variable value.

    JSON lists/objects, booleans and integers are converted; anything
    else (including malformed JSON) is returned as the raw string.
    """
    stripped = raw.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return raw
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        return raw


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``OUTLINER_<SECTION>_<KEY>`` variables onto config in place.

    The section is matched against existing top-level sections so keys
    containing underscores (``check_invariants``) work.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        rest = name[len(ENV_PREFIX):].lower()
        for section in sorted(config, key=len, reverse=True):
            if rest.startswith(section + "_") and isinstance(config[section], dict):
                key = rest[len(section) + 1:]
                config[section][key] = _try_parse_env_value(raw)
                break
    return config


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Return config with environment overrides applied."""
    return _apply_env_overrides(config)


def load_config(path: Path | None = None, start: Path | None = None) -> dict[str, Any]:
    """Load configuration merged over defaults.

    Args:
        path: Explicit config file. Discovered from start when omitted.
        start: Directory to search from (defaults to the working directory).

    Returns:
        The merged configuration dict.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ValueError: If the file is not valid TOML.
    """
    if path is None:
        path = find_config_file(start or Path.cwd())
    elif not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    user: dict[str, Any] = {}
    if path is not None:
        user = parse_toml(path.read_text(encoding="utf-8"))

    config = merge_configs(DEFAULT_CONFIG, user)
    return _apply_env_overrides(config)


_EXPECTED_TYPES: dict[str, dict[str, type | tuple[type, ...]]] = {
    "storage": {"name": str, "directory": str, "autosave": bool},
    "projects": {"first_name": str, "default_name": str},
    "engine": {"check_invariants": bool, "history_limit": int},
    "server": {"host": str, "port": int},
    "logging": {"level": str},
}


def validate_config(config: dict[str, Any]) -> list[str]:
    """Check section and key types plus value ranges.

    Returns:
        List of error messages; empty when the config is valid.
    """
    errors: list[str] = []
    for section, keys in _EXPECTED_TYPES.items():
        values = config.get(section)
        if values is None:
            continue
        if not isinstance(values, dict):
            errors.append(f"[{section}] must be a table")
            continue
        for key, expected in keys.items():
            if key in values and not isinstance(values[key], expected):
                errors.append(f"{section}.{key} has invalid type {type(values[key]).__name__}")
            elif key in values and expected is int and isinstance(values[key], bool):
                errors.append(f"{section}.{key} has invalid type bool")

    def _value(section: str, key: str) -> Any:
        values = config.get(section)
        return values.get(key) if isinstance(values, dict) else None

    limit = _value("engine", "history_limit")
    if isinstance(limit, int) and limit < 0:
        errors.append("engine.history_limit must be >= 0")
    port = _value("server", "port")
    if isinstance(port, int) and not 1 <= port <= 65535:
        errors.append("server.port must be between 1 and 65535")
    name = _value("storage", "name")
    if isinstance(name, str) and not name.strip():
        errors.append("storage.name must not be empty")
    return errors
