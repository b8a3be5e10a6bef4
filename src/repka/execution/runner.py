"""External process execution.

:class:`ProcessRunner` spawns one process per :class:`SpawnSpec`, captures
the requested output streams and applies the SpawnSpec exit-code policy:

- ``fixed``: exit codes outside the set raise :class:`ExitCodeError`,
  signal termination raises :class:`SignalError`.
- ``inherit``: exit codes never raise, the code is forwarded to the exit
  status of the current program; signals still raise.
- ``any``: never raises because of how the process ended, a signal
  termination is only attached to ``result.error``.

Processes that cannot be started raise :class:`SpawnError` regardless of
the policy. Errors carry the stack of the ``run()`` call site.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import os
import signal as signals
from collections.abc import Callable
from typing import TYPE_CHECKING

from repka.errors import ExitCodeError, ProcessError, SignalError, SpawnError
from repka.execution.policy import STREAMS, SpawnSpec, Stdio, StreamName
from repka.execution.results import ProcessResult
from repka.execution.stack import CapturedStack, capture_stack_trace
from repka.logger import is_debug_enabled

if TYPE_CHECKING:
    from repka.context import ToolContext

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_STDIO = {
    Stdio.PIPE: asyncio.subprocess.PIPE,
    Stdio.INHERIT: None,
    Stdio.DEVNULL: asyncio.subprocess.DEVNULL,
}


def abbreviate(text: str, root: str | None) -> str:
    """Replace the workspace root prefix of paths in ``text`` with ``./``."""
    if not root or root == os.sep:
        return text
    return text.replace(root.rstrip(os.sep) + os.sep, "./")


def signal_name(returncode: int) -> str:
    try:
        return signals.Signals(-returncode).name
    except ValueError:
        return f"signal {-returncode}"


class _Capture:
    """Chunks captured from the child, shared by both stream readers."""

    def __init__(self) -> None:
        self.combined: list[str] = []
        self.streams: dict[StreamName, list[str]] = {"stdout": [], "stderr": []}

    def add(self, stream: StreamName, chunk: str) -> None:
        self.combined.append(chunk)
        self.streams[stream].append(chunk)

    def text(self, stream: StreamName) -> str:
        return "".join(self.streams[stream])


async def _read_stream(
    reader: asyncio.StreamReader,
    stream: StreamName,
    capture: _Capture | None,
) -> None:
    """Read a stream until EOF, recording decoded chunks as they arrive."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await reader.read(CHUNK_SIZE)
        if capture is None:
            if not data:
                return
            continue
        chunk = decoder.decode(data, final=not data)
        if chunk:
            capture.add(stream, chunk)
        if not data:
            return


class ProcessRunner:
    """Run external commands for one tool invocation.

    Attributes:
        context: Provides the workspace root shown in log lines and the exit
            status that ``inherit`` policies forward to. A runner created
            without one gets a fresh context of its own.
    """

    def __init__(self, context: ToolContext | None = None) -> None:
        if context is None:
            from repka.context import ToolContext

            context = ToolContext()
        self.context = context

    def _log_command(self, spec: SpawnSpec) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        root = self.context.display_root()
        line = abbreviate(" ".join([">", spec.command_line]), root)
        if spec.cwd is not None:
            line = f"{line} in {abbreviate(str(spec.cwd), root)}"
        logger.debug(line)

    @staticmethod
    def _check_output_streams(spec: SpawnSpec) -> None:
        for stream in spec.output:
            assert spec.stdio == Stdio.PIPE, (
                f'Expected ".{stream}" to be piped to capture it, '
                f"but the process is spawned with stdio={spec.stdio.value!r}"
            )

    async def _spawn(self, spec: SpawnSpec, stack: CapturedStack) -> asyncio.subprocess.Process:
        env = None
        if spec.env:
            env = os.environ.copy()
            env.update(spec.env)
        stdio = _STDIO[spec.stdio]
        try:
            return await asyncio.create_subprocess_exec(
                spec.command,
                *spec.args,
                cwd=str(spec.cwd) if spec.cwd is not None else None,
                env=env,
                stdin=asyncio.subprocess.DEVNULL if spec.stdio != Stdio.INHERIT else None,
                stdout=stdio,
                stderr=stdio,
            )
        except OSError as e:
            raise stack.prepare_for_rethrow(
                SpawnError(spec.command_line, e.strerror or str(e))
            ) from e

    def _policy_error(
        self, spec: SpawnSpec, returncode: int, stack: CapturedStack
    ) -> ProcessError | None:
        policy = spec.exit_codes
        if returncode < 0:
            return stack.prepare_for_rethrow(
                SignalError(spec.command_line, signal_name(returncode))
            )
        if policy.kind == "inherit":
            self.context.exit_status.inherit(returncode)
            return None
        if not policy.accepts(returncode):
            return stack.prepare_for_rethrow(ExitCodeError(spec.command_line, returncode))
        return None

    async def _execute(self, spec: SpawnSpec, stack: CapturedStack) -> ProcessResult:
        """Spawn and await the process; policy errors are attached, not raised."""
        self._check_output_streams(spec)
        self._log_command(spec)

        process = await self._spawn(spec, stack)
        capture = _Capture()
        readers = []
        for stream in STREAMS:
            reader = getattr(process, stream)
            if reader is not None:
                sink = capture if stream in spec.output else None
                readers.append(_read_stream(reader, stream, sink))

        try:
            await asyncio.gather(*readers)
            returncode = await process.wait()
        except BaseException:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            raise

        error = self._policy_error(spec, returncode, stack)
        result = ProcessResult(
            pid=process.pid,
            status=returncode if returncode >= 0 else None,
            signal=signal_name(returncode) if returncode < 0 else None,
            stdout=capture.text("stdout"),
            stderr=capture.text("stderr"),
            output=tuple(capture.combined),
            error=error,
        )
        if error is not None:
            error.result = result
        return result

    async def run(self, spec: SpawnSpec) -> ProcessResult:
        """Run a process to completion.

        Resolves once the process exited and both of its output pipes were
        drained. When the process fails, its captured output is logged
        before the error is raised or attached.

        Raises:
            AssertionError: A stream is requested for capture but not piped.
            SpawnError: The process could not be started.
            ExitCodeError: The exit code is rejected by a ``fixed`` policy.
            SignalError: The process was killed by a signal, unless the
                policy is ``any``.
        """
        stack = capture_stack_trace()
        result = await self._execute(spec, stack)
        if result.error is None:
            return result

        if result.combined:
            logger.error(result.combined.rstrip("\n"))
        if spec.exit_codes.kind == "any":
            return result
        raise result.error

    async def output(self, spec: SpawnSpec) -> str:
        """Run a process and return its combined output."""
        result = await self.run(spec)
        return result.combined

    async def output_conditional(
        self,
        spec: SpawnSpec,
        should_output: Callable[[ProcessResult], bool] | None = None,
    ) -> ProcessResult:
        """Run a process, showing its output only when it is interesting.

        By default the output is shown when the process failed, exited
        non-zero, or debug logging is enabled.

        Raises:
            ProcessError: The error of the result, after showing the output.
        """
        stack = capture_stack_trace()
        result = await self._execute(spec, stack)
        should = should_output or _default_should_output
        if should(result) and result.combined:
            logger.error(result.combined.rstrip("\n"))
        if result.error is not None:
            raise result.error
        return result


def _default_should_output(result: ProcessResult) -> bool:
    return result.error is not None or result.status != 0 or is_debug_enabled()
