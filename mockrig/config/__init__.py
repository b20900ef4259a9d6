"""Configuration management for mockrig."""

from mockrig.config.settings import MockServerSettings, load_config

__all__ = [
    "MockServerSettings",
    "load_config",
]
