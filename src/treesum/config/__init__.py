"""Configuration management for treesum."""

from treesum.config.loader import load_config
from treesum.config.models import Config, DigestConfig, EngineConfig, LoggingConfig, WalkConfig

__all__ = [
    "Config",
    "DigestConfig",
    "EngineConfig",
    "LoggingConfig",
    "WalkConfig",
    "load_config",
]
