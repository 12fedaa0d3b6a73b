"""
routecov.config.defaults - Default configuration values.
"""

CONFIG_FILE_NAME = ".routecov.toml"

DEFAULT_CONFIG = {
    "project": {
        "source_dirs": ["src"],
        "resource_dirs": ["resources"],
        "test_source_dirs": ["tests"],
        "test_resource_dirs": ["tests/resources"],
    },
    "coverage": {
        "dump_dir": "target/route-coverage",
        "includes": "",
        "excludes": "",
        "fail_on_error": False,
        "include_test": False,
        "include_nested": True,
    },
    "catalog": {
        "extra_steps": [],
        "ignored_steps": [],
    },
}
