"""Utility functions for iconsmith.

This module provides utility functions including:

- Logging setup and configuration
- Build statistics tracking
- Identifier case conversion (PascalCase glyph names, kebab-case icon names)
"""

from iconsmith.utils.logging import (
    BuildLogger,
    BuildStats,
    configure_logging,
)
from iconsmith.utils.naming import kebab_case, pascal_case, split_words

__all__ = [
    "BuildLogger",
    "BuildStats",
    "configure_logging",
    "kebab_case",
    "pascal_case",
    "split_words",
]
