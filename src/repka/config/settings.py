"""Settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from repka.logger import LOG_LEVEL_ENV
from repka.workspace.root import INIT_CWD_ENV

CONFIG_FILE_ENV = "REPKA_CONFIG"
DEFAULT_CONFIG_FILE = "repka.yaml"


@dataclass(frozen=True)
class Settings:
    """Environment settings of one invocation.

    Attributes:
        init_cwd: Directory the command was initiated from, overriding the
            current working directory (set by npm/pnpm when running scripts).
        log_level: Verbosity name.
        config_file: Name of the configuration file at the workspace root.
    """

    init_cwd: str | None = None
    log_level: str | None = None
    config_file: str = DEFAULT_CONFIG_FILE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            init_cwd=env.get(INIT_CWD_ENV) or None,
            log_level=env.get(LOG_LEVEL_ENV) or None,
            config_file=env.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE,
        )
