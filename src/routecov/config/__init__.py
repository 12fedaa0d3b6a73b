"""
routecov.config - Configuration loading and defaults
"""

from routecov.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG
from routecov.config.loader import (
    _try_parse_env_value,
    apply_env_overrides,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    validate_config,
)
from routecov.config.project import CoverageConfig, ProjectConfig

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_CONFIG",
    "CoverageConfig",
    "ProjectConfig",
    "apply_env_overrides",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml",
    "validate_config",
]
