"""Tests for spawn specs and exit-code policies."""

from pathlib import Path

import pytest

from repka.execution.policy import ExitCodePolicy, SpawnSpec, Stdio


class TestExitCodePolicy:
    """Tests for ExitCodePolicy."""

    def test_default_accepts_only_zero(self) -> None:
        policy = ExitCodePolicy()

        assert policy.kind == "fixed"
        assert policy.accepts(0)
        assert not policy.accepts(1)

    def test_fixed_requires_codes(self) -> None:
        with pytest.raises(ValueError):
            ExitCodePolicy.fixed()

    def test_fixed_accepts_listed_codes(self) -> None:
        policy = ExitCodePolicy.fixed(0, 2)

        assert policy.accepts(2)
        assert not policy.accepts(1)
        assert str(policy) == "0,2"

    @pytest.mark.parametrize("kind", ["inherit", "any"])
    def test_open_policies_accept_everything(self, kind: str) -> None:
        policy = ExitCodePolicy.coerce(kind)

        assert policy.kind == kind
        assert policy.accepts(0)
        assert policy.accepts(127)
        assert str(policy) == kind

    def test_coerce(self) -> None:
        assert ExitCodePolicy.coerce(None) == ExitCodePolicy()
        assert ExitCodePolicy.coerce([0, 1]) == ExitCodePolicy.fixed(0, 1)
        policy = ExitCodePolicy.inherit()
        assert ExitCodePolicy.coerce(policy) is policy

    def test_coerce_rejects_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown exit code policy"):
            ExitCodePolicy.coerce("sometimes")


class TestSpawnSpec:
    """Tests for SpawnSpec."""

    def test_defaults(self) -> None:
        spec = SpawnSpec("node")

        assert spec.args == ()
        assert spec.stdio == Stdio.PIPE
        assert spec.output == ("stdout", "stderr")
        assert spec.exit_codes == ExitCodePolicy()

    def test_coerces_fields(self) -> None:
        spec = SpawnSpec("node", ["a.js"], cwd="/tmp", exit_codes="any")  # type: ignore[arg-type]

        assert spec.args == ("a.js",)
        assert spec.cwd == Path("/tmp")
        assert spec.exit_codes.kind == "any"

    def test_rejects_unknown_stream(self) -> None:
        with pytest.raises(ValueError, match="stdin"):
            SpawnSpec("node", output=("stdin",))  # type: ignore[arg-type]

    def test_from_command_string(self) -> None:
        spec = SpawnSpec.from_command("tsc -p 'my project/tsconfig.json'")

        assert spec.command == "tsc"
        assert spec.args == ("-p", "my project/tsconfig.json")
        assert spec.argv == ["tsc", "-p", "my project/tsconfig.json"]

    def test_from_command_list(self) -> None:
        spec = SpawnSpec.from_command(["eslint", "."], stdio=Stdio.INHERIT, output=())

        assert spec.command_line == "eslint ."
        assert spec.stdio == Stdio.INHERIT
        assert spec.output == ()

    def test_from_empty_command(self) -> None:
        with pytest.raises(ValueError, match="Empty command"):
            SpawnSpec.from_command("   ")
