"""Tests for the process runner."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import time
from pathlib import Path

import pytest

from repka.context import ToolContext
from repka.errors import ExitCodeError, SignalError, SpawnError
from repka.execution.policy import ExitCodePolicy, SpawnSpec, Stdio
from repka.execution.runner import ProcessRunner, abbreviate, signal_name

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")


def python(code: str, **kwargs) -> SpawnSpec:
    return SpawnSpec(sys.executable, ("-c", code), **kwargs)


@pytest.fixture
def runner() -> ProcessRunner:
    return ProcessRunner()


class TestRun:
    """Tests for ProcessRunner.run."""

    async def test_captures_stdout(self, runner: ProcessRunner) -> None:
        result = await runner.run(python("print('hello')"))

        assert result.status == 0
        assert result.signal is None
        assert result.stdout == "hello\n"
        assert result.stderr == ""
        assert result.success
        assert isinstance(result.pid, int)

    async def test_rejected_exit_code_raises(self, runner: ProcessRunner) -> None:
        spec = python("import sys; print('boom'); sys.exit(3)")

        with pytest.raises(ExitCodeError) as exc_info:
            await runner.run(spec)

        error = exc_info.value
        assert error.code == 3
        assert error.message == f'Command "{spec.command_line}" has failed with code 3'
        assert error.result is not None
        assert error.result.status == 3
        assert error.result.stdout == "boom\n"

    async def test_custom_accepted_codes(self, runner: ProcessRunner) -> None:
        result = await runner.run(python("import sys; sys.exit(3)", exit_codes=[0, 3]))

        assert result.status == 3
        assert result.error is None

    async def test_any_policy_never_raises_on_exit_code(self, runner: ProcessRunner) -> None:
        result = await runner.run(python("import sys; sys.exit(5)", exit_codes="any"))

        assert result.status == 5
        assert result.error is None
        assert not result.success

    @posix_only
    async def test_signal_raises(self, runner: ProcessRunner) -> None:
        spec = python("import os, signal; os.kill(os.getpid(), signal.SIGTERM)")

        with pytest.raises(SignalError) as exc_info:
            await runner.run(spec)

        assert exc_info.value.signal == "SIGTERM"
        assert exc_info.value.message.endswith(" - SIGTERM")
        assert exc_info.value.result.status is None
        assert exc_info.value.result.signal == "SIGTERM"

    @posix_only
    async def test_signal_with_any_policy_is_attached(self, runner: ProcessRunner) -> None:
        spec = python(
            "import os, signal; os.kill(os.getpid(), signal.SIGTERM)", exit_codes="any"
        )

        result = await runner.run(spec)

        assert isinstance(result.error, SignalError)
        assert result.signal == "SIGTERM"

    async def test_spawn_failure(self, runner: ProcessRunner) -> None:
        spec = SpawnSpec("repka-definitely-missing-command", ("--flag",))

        with pytest.raises(SpawnError) as exc_info:
            await runner.run(spec)

        assert exc_info.value.message.startswith(
            'Failed to start command "repka-definitely-missing-command --flag"'
        )
        assert exc_info.value.call_site is not None

    async def test_spawn_failure_ignores_any_policy(self, runner: ProcessRunner) -> None:
        with pytest.raises(SpawnError):
            await runner.run(SpawnSpec("repka-definitely-missing-command", exit_codes="any"))

    async def test_interleaves_streams_in_arrival_order(self, runner: ProcessRunner) -> None:
        code = (
            "import sys, time\n"
            "sys.stdout.write('out1'); sys.stdout.flush(); time.sleep(0.2)\n"
            "sys.stderr.write('err1'); sys.stderr.flush(); time.sleep(0.2)\n"
            "sys.stdout.write('out2'); sys.stdout.flush()\n"
        )

        result = await runner.run(python(code))

        assert result.combined == "out1err1out2"
        assert result.stdout == "out1out2"
        assert result.stderr == "err1"

    async def test_captures_only_requested_streams(self, runner: ProcessRunner) -> None:
        code = "import sys; print('out'); print('err', file=sys.stderr)"

        result = await runner.run(python(code, output=("stderr",)))

        assert result.stdout == ""
        assert result.stderr == "err\n"
        assert result.combined == "err\n"

    async def test_large_output_does_not_block(self, runner: ProcessRunner) -> None:
        code = "import sys; sys.stdout.write('x' * 1_000_000)"

        result = await runner.run(python(code, output=("stderr",)))

        assert result.status == 0
        assert result.stdout == ""

    async def test_requesting_unpiped_output_asserts(self, runner: ProcessRunner) -> None:
        with pytest.raises(AssertionError, match="stdout"):
            await runner.run(python("pass", stdio=Stdio.INHERIT))

    async def test_env_is_merged_over_environment(self, runner: ProcessRunner) -> None:
        code = "import os; print(os.environ['REPKA_VALUE'], 'PATH' in os.environ)"

        result = await runner.run(python(code, env={"REPKA_VALUE": "42"}))

        assert result.stdout == "42 True\n"

    async def test_runs_in_cwd(self, runner: ProcessRunner, temp_dir: Path) -> None:
        result = await runner.run(python("import os; print(os.getcwd())", cwd=temp_dir))

        assert os.path.samefile(result.stdout.strip(), temp_dir)

    async def test_failure_output_is_logged(
        self, runner: ProcessRunner, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="repka")

        with pytest.raises(ExitCodeError):
            await runner.run(python("import sys; print('details'); sys.exit(1)"))

        assert "details" in caplog.text

    async def test_error_carries_call_site(self, runner: ProcessRunner) -> None:
        with pytest.raises(ExitCodeError) as exc_info:
            await runner.run(python("raise SystemExit(2)"))

        notes = "\n".join(getattr(exc_info.value, "__notes__", []))
        assert notes.startswith("Called from:")
        assert "test_error_carries_call_site" in notes

    async def test_cancellation_kills_process(self, runner: ProcessRunner) -> None:
        task = asyncio.create_task(runner.run(python("import time; time.sleep(30)")))
        await asyncio.sleep(0.5)

        start = time.monotonic()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert time.monotonic() - start < 10

    async def test_read_failure_kills_process(
        self, runner: ProcessRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        spawned = []
        spawn = runner._spawn

        async def recording_spawn(spec, stack):
            process = await spawn(spec, stack)
            spawned.append(process)
            return process

        async def failing_reader(*args):
            raise OSError("read failed")

        monkeypatch.setattr(runner, "_spawn", recording_spawn)
        monkeypatch.setattr("repka.execution.runner._read_stream", failing_reader)

        start = time.monotonic()
        with pytest.raises(OSError, match="read failed"):
            await runner.run(python("import time; time.sleep(30)"))

        assert time.monotonic() - start < 10
        assert spawned[0].returncode is not None


class TestInheritPolicy:
    """Tests for the inherit exit-code policy."""

    async def test_forwards_exit_code(self) -> None:
        context = ToolContext()
        runner = ProcessRunner(context)

        result = await runner.run(
            python("import sys; sys.exit(4)", exit_codes=ExitCodePolicy.inherit())
        )

        assert result.status == 4
        assert result.error is None
        assert context.exit_status.code == 4

    async def test_runner_without_context_records_code(self) -> None:
        runner = ProcessRunner()

        result = await runner.run(
            python("raise SystemExit(4)", exit_codes=ExitCodePolicy.inherit())
        )

        assert result.status == 4
        assert runner.context.exit_status.code == 4

    async def test_keeps_first_failure(self) -> None:
        context = ToolContext()
        runner = ProcessRunner(context)

        for code in (0, 2, 7, 0):
            await runner.run(python(f"raise SystemExit({code})", exit_codes="inherit"))

        assert context.exit_status.code == 2

    @posix_only
    async def test_signal_still_raises(self) -> None:
        runner = ProcessRunner(ToolContext())
        spec = python(
            "import os, signal; os.kill(os.getpid(), signal.SIGKILL)", exit_codes="inherit"
        )

        with pytest.raises(SignalError, match="SIGKILL"):
            await runner.run(spec)


class TestOutput:
    """Tests for output helpers."""

    async def test_output_returns_combined_text(self, runner: ProcessRunner) -> None:
        code = (
            "import sys, time; print('a'); sys.stdout.flush(); time.sleep(0.2); "
            "print('b', file=sys.stderr)"
        )

        assert await runner.output(python(code)) == "a\nb\n"

    async def test_conditional_is_quiet_on_success(
        self, runner: ProcessRunner, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="repka")

        result = await runner.output_conditional(python("print('quiet')"))

        assert result.stdout == "quiet\n"
        assert "quiet" not in caplog.text

    async def test_conditional_shows_output_in_debug(
        self, runner: ProcessRunner, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="repka")

        await runner.output_conditional(python("print('verbose')"))

        assert "verbose" in caplog.text

    async def test_conditional_shows_output_then_raises(
        self, runner: ProcessRunner, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="repka")

        with pytest.raises(ExitCodeError):
            await runner.output_conditional(python("import sys; print('broken'); sys.exit(1)"))

        assert "broken" in caplog.text

    async def test_conditional_custom_predicate(
        self, runner: ProcessRunner, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="repka")

        await runner.output_conditional(
            python("print('always')"), should_output=lambda result: True
        )

        assert "always" in caplog.text


class TestHelpers:
    """Tests for module-level helpers."""

    def test_abbreviate_replaces_root(self) -> None:
        text = "> tsc -p /repo/packages/a/tsconfig.json in /repo/packages/a"

        assert abbreviate(text, "/repo") == "> tsc -p ./packages/a/tsconfig.json in ./packages/a"

    def test_abbreviate_without_root(self) -> None:
        assert abbreviate("/repo/x", None) == "/repo/x"
        assert abbreviate("/repo/x", "/") == "/repo/x"

    @posix_only
    def test_signal_name(self) -> None:
        assert signal_name(-15) == "SIGTERM"
        assert signal_name(-9) == "SIGKILL"
