"""repka.yaml schema."""

from __future__ import annotations

import shlex
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from repka.execution.policy import ExitCodePolicy


class TaskConfig(BaseModel):
    """A task declared in repka.yaml.

    Attributes:
        run: Command line, or argv list, to execute.
        description: Shown by ``repka tasks``.
        depends_on: Tasks that have to succeed first.
        cwd: Working directory relative to the workspace root.
        env: Extra environment variables.
        exit_codes: Accepted exit codes, ``inherit`` or ``any``.
        stdio: ``pipe`` captures output and shows it on failure, ``inherit``
            streams it straight to the terminal.
    """

    model_config = ConfigDict(extra="forbid")

    run: str | list[str]
    description: str | None = None
    depends_on: list[str] = Field(default_factory=list)
    cwd: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    exit_codes: list[int] | Literal["inherit", "any"] = Field(default_factory=lambda: [0])
    stdio: Literal["pipe", "inherit"] = "pipe"

    @field_validator("run")
    @classmethod
    def _run_not_empty(cls, value: str | list[str]) -> str | list[str]:
        if not value or (isinstance(value, str) and not value.strip()):
            raise ValueError("run must not be empty")
        if isinstance(value, str):
            try:
                shlex.split(value)
            except ValueError as e:
                raise ValueError(f"run is not a valid command line: {e}") from e
        return value

    @field_validator("exit_codes")
    @classmethod
    def _codes_not_empty(cls, value: list[int] | str) -> list[int] | str:
        if isinstance(value, list) and not value:
            raise ValueError("exit_codes must list at least one code")
        return value

    @property
    def policy(self) -> ExitCodePolicy:
        return ExitCodePolicy.coerce(self.exit_codes)


class CommandDefaults(BaseModel):
    """Defaults for command line options."""

    model_config = ConfigDict(extra="forbid")

    policy: Literal["pipeline", "settle-all"] = "pipeline"


class RepkaConfig(BaseModel):
    """Root of repka.yaml."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    tasks: dict[str, TaskConfig] = Field(default_factory=dict)
    command_defaults: CommandDefaults = Field(default_factory=CommandDefaults)

    @model_validator(mode="after")
    def _dependencies_exist(self) -> RepkaConfig:
        for name, task in self.tasks.items():
            for dependency in task.depends_on:
                if dependency not in self.tasks:
                    raise ValueError(f"Task '{name}' depends on unknown task '{dependency}'")
        return self

    @property
    def task_names(self) -> list[str]:
        return list(self.tasks)

    def get_task(self, name: str) -> TaskConfig | None:
        return self.tasks.get(name)
