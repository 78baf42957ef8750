"""Configuration loading for nexus-deploy."""

from .manager import ConfigError, ConfigManager, merge

__all__ = [
    "ConfigError",
    "ConfigManager",
    "merge",
]
