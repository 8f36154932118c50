"""
Utility functions for the stack assembler.

Provides naming conventions, tag factories and logging setup.
"""

from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags
from infra.utils.logger import configure_logging, get_logger

__all__ = [
    "ResourceNamer",
    "create_tags",
    "configure_logging",
    "get_logger",
]
