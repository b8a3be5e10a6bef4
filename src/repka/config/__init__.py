"""repka configuration."""

from repka.config.loader import load_config
from repka.config.schema import CommandDefaults, RepkaConfig, TaskConfig
from repka.config.settings import Settings

__all__ = [
    "CommandDefaults",
    "RepkaConfig",
    "Settings",
    "TaskConfig",
    "load_config",
]
