"""Configuration loading utilities."""

from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from treesum.config.models import Config
from treesum.errors import ConfigurationError

DEFAULT_CONFIG_LOCATIONS = (
    Path("treesum.yaml"),
    Path("~/.config/treesum/config.yaml"),
)


def find_config(locations: tuple[Path, ...] = DEFAULT_CONFIG_LOCATIONS) -> Path | None:
    """Return the first existing config file among the default locations."""
    for location in locations:
        candidate = location.expanduser()
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path | None) -> Config:
    """
    Load configuration from a YAML file, falling back to defaults.

    When no path is given the default locations are searched; if none
    exists, defaults (plus ``TREESUM_*`` environment overrides) are used.

    Args:
        config_path: Path to YAML config file, or None to search.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If an explicit config_path doesn't exist.
        ValueError: If YAML is invalid or its root is not a mapping.
        ConfigurationError: If the values fail validation.
    """
    if config_path is None:
        config_path = find_config()
        if config_path is None:
            return Config()
        logger.debug("Using config file {}", config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping, not {type(data).__name__}")

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e
