"""Configuration management for iconsmith.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- ComposerOptions: SVG font composition settings
- FontConfig: Settings shared by all fonts in a run
- CollectionSpec: One icon collection to build
- OutputConfig: Output locations
- ProcessingConfig: Build processing settings
- LoggingConfig: Logging settings
- IconsmithSettings: Main application settings
"""

from iconsmith.config.settings import (
    CollectionSpec,
    ComposerOptions,
    FontConfig,
    IconsmithSettings,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
    get_default_settings,
)

__all__ = [
    "CollectionSpec",
    "ComposerOptions",
    "FontConfig",
    "IconsmithSettings",
    "LoggingConfig",
    "OutputConfig",
    "ProcessingConfig",
    "get_default_settings",
]
