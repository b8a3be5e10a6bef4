"""Spawn parameters and exit-code policies."""

from __future__ import annotations

import shlex
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal

StreamName = Literal["stdout", "stderr"]

STREAMS: tuple[StreamName, ...] = ("stdout", "stderr")


@dataclass(frozen=True)
class ExitCodePolicy:
    """Which exit codes of a process count as success.

    Attributes:
        kind: ``fixed`` accepts only ``codes``; ``inherit`` accepts any code
            and forwards it as the exit code of the current program; ``any``
            accepts any code and never raises.
        codes: Accepted codes for the ``fixed`` kind.
    """

    kind: Literal["fixed", "inherit", "any"] = "fixed"
    codes: frozenset[int] = frozenset({0})

    @classmethod
    def fixed(cls, *codes: int) -> ExitCodePolicy:
        if not codes:
            raise ValueError("At least one accepted exit code is required")
        return cls("fixed", frozenset(codes))

    @classmethod
    def inherit(cls) -> ExitCodePolicy:
        return cls("inherit", frozenset())

    @classmethod
    def any(cls) -> ExitCodePolicy:
        return cls("any", frozenset())

    @classmethod
    def coerce(cls, value: ExitCodePolicy | Iterable[int] | str | None) -> ExitCodePolicy:
        """Build a policy from its shorthand forms.

        Accepts a policy, a sequence of codes, ``"inherit"``, ``"any"`` or
        ``None`` (the default ``fixed(0)``).
        """
        if value is None:
            return cls()
        if isinstance(value, ExitCodePolicy):
            return value
        if isinstance(value, str):
            if value == "inherit":
                return cls.inherit()
            if value == "any":
                return cls.any()
            raise ValueError(f"Unknown exit code policy: {value!r}")
        return cls.fixed(*value)

    def accepts(self, code: int) -> bool:
        return self.kind != "fixed" or code in self.codes

    def __str__(self) -> str:
        if self.kind == "fixed":
            return ",".join(str(code) for code in sorted(self.codes))
        return self.kind


class Stdio(str, Enum):
    """How the child's stdout and stderr are opened."""

    PIPE = "pipe"
    INHERIT = "inherit"
    DEVNULL = "devnull"


@dataclass(frozen=True)
class SpawnSpec:
    """Everything needed to start one external process.

    Attributes:
        command: Executable name or path.
        args: Arguments passed to the executable.
        cwd: Working directory, defaults to the current one.
        env: Variables merged over the current environment.
        stdio: How stdout/stderr of the child are opened.
        output: Streams whose text is captured into the result.
        exit_codes: Exit-code policy.
    """

    command: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    stdio: Stdio = Stdio.PIPE
    output: tuple[StreamName, ...] = STREAMS
    exit_codes: ExitCodePolicy = field(default_factory=ExitCodePolicy)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "output", tuple(self.output))
        object.__setattr__(self, "exit_codes", ExitCodePolicy.coerce(self.exit_codes))
        if self.cwd is not None:
            object.__setattr__(self, "cwd", Path(self.cwd))
        for stream in self.output:
            if stream not in STREAMS:
                raise ValueError(f"Unknown output stream: {stream!r}")

    @classmethod
    def from_command(cls, command: str | Sequence[str], **kwargs: object) -> SpawnSpec:
        """Create a spec from a command line string or an argv list."""
        argv = shlex.split(command) if isinstance(command, str) else list(command)
        if not argv:
            raise ValueError("Empty command")
        return cls(argv[0], tuple(argv[1:]), **kwargs)  # type: ignore[arg-type]

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)
