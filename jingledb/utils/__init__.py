"""Utility modules for the import tooling."""

from jingledb.utils.logging import setup_logging

__all__ = [
    "setup_logging",
]
