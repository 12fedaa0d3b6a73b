"""
routecov.config.loader - Configuration file loading and merging.

Finds ``.routecov.toml`` by walking up from a start directory, parses it
with tomlkit, merges it over the defaults and applies ``ROUTECOV_*``
environment overrides.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit

from routecov.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG

ENV_PREFIX = "ROUTECOV_"


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python containers.

    Args:
        content: TOML document text.

    Returns:
        Nested dicts/lists with tomlkit wrapper types unwrapped.

    Raises:
        tomlkit.exceptions.ParseError: If the document is invalid.
    """
    return tomlkit.parse(content).unwrap()


def find_config_file(start_path: Path) -> Path | None:
    """Find the configuration file in ``start_path`` or a parent.

    Args:
        start_path: Directory to start searching from.

    Returns:
        Path to ``.routecov.toml`` or None if not found.
    """
    current = start_path.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(defaults: dict[str, Any], user: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``user`` over ``defaults`` without modifying either.

    Args:
        defaults: Base configuration.
        user: Overriding configuration.

    Returns:
        New merged dictionary.
    """
    merged = copy.deepcopy(defaults)
    for key, value in user.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment value into a bool, JSON container, or string."""
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``ROUTECOV_<SECTION>_<KEY>`` environment overrides.

    Only sections present in the configuration are considered; the key
    is the remainder of the variable name, lower-cased.

    Args:
        config: Configuration to update in place.

    Returns:
        The same configuration, for chaining.
    """
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX) :].lower()
        for section, values in config.items():
            prefix = f"{section}_"
            if isinstance(values, dict) and remainder.startswith(prefix):
                values[remainder[len(prefix) :]] = _try_parse_env_value(env_value)
                break
    return config


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a configuration file merged over the defaults.

    Args:
        config_path: Path to the TOML file.

    Returns:
        Merged configuration with environment overrides applied.

    Raises:
        OSError: If the file cannot be read.
        tomlkit.exceptions.ParseError: If the file is not valid TOML.
    """
    with open(config_path, encoding="utf-8") as fh:
        user = parse_toml(fh.read())
    return apply_env_overrides(merge_configs(DEFAULT_CONFIG, user))


def get_config(
    config_path: Path | None = None,
    start_path: Path | None = None,
) -> dict[str, Any]:
    """Load the configuration for a project.

    Uses ``config_path`` when given, otherwise searches upward from
    ``start_path`` (default: the working directory). Without a file the
    defaults are used.

    Args:
        config_path: Explicit configuration file.
        start_path: Directory to search from.

    Returns:
        Configuration dictionary.
    """
    if config_path is None:
        config_path = find_config_file(start_path or Path.cwd())
    if config_path is not None and config_path.exists():
        return load_config(config_path)
    return apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))


def validate_config(config: dict[str, Any]) -> list[str]:
    """Check value types of the known configuration keys.

    Args:
        config: Configuration dictionary.

    Returns:
        List of error messages (empty when valid).
    """
    errors: list[str] = []
    project = config.get("project", {})
    for key in ("source_dirs", "resource_dirs", "test_source_dirs", "test_resource_dirs"):
        value = project.get(key, [])
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            errors.append(f"project.{key} must be a list of strings")

    coverage = config.get("coverage", {})
    for key in ("fail_on_error", "include_test", "include_nested"):
        if not isinstance(coverage.get(key, False), bool):
            errors.append(f"coverage.{key} must be a boolean")
    for key in ("includes", "excludes", "dump_dir"):
        value = coverage.get(key, "")
        if not isinstance(value, (str, list)):
            errors.append(f"coverage.{key} must be a string")

    catalog = config.get("catalog", {})
    for key in ("extra_steps", "ignored_steps"):
        if not isinstance(catalog.get(key, []), list):
            errors.append(f"catalog.{key} must be a list")
    return errors
