"""Loading repka.yaml."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from repka.config.schema import RepkaConfig
from repka.config.settings import DEFAULT_CONFIG_FILE
from repka.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_config(root: Path, filename: str = DEFAULT_CONFIG_FILE) -> RepkaConfig:
    """Load the configuration of the workspace at ``root``.

    A missing file yields the default, empty configuration.

    Raises:
        ConfigurationError: If the file cannot be parsed or is invalid.
    """
    path = root / filename
    if not path.is_file():
        logger.debug("No %s in %s, using defaults", filename, root)
        return RepkaConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration: {e}", path=path) from e

    if data is None:
        return RepkaConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping", path=path)

    try:
        return RepkaConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", path=path) from e
