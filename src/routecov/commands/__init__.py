"""
routecov.commands - CLI command implementations
"""

__all__ = [
    "coverage",
    "tree",
]
