"""Tests for the repka exception hierarchy."""

from pathlib import Path

import pytest

from repka.errors import (
    AggregateFailure,
    ConfigurationError,
    ExitCodeError,
    ProcessError,
    RepkaError,
    SignalError,
    SpawnError,
    TaskNotFoundError,
)


def test_process_errors_share_a_base():
    for error in (
        SpawnError("tsc", "No such file or directory"),
        ExitCodeError("tsc", 2),
        SignalError("tsc", "SIGINT"),
    ):
        assert isinstance(error, ProcessError)
        assert isinstance(error, RepkaError)
        assert error.command == "tsc"
        assert error.result is None
        assert error.call_site is None


def test_messages():
    assert ExitCodeError("jest --ci", 1).message == 'Command "jest --ci" has failed with code 1'
    assert SignalError("jest", "SIGTERM").message == 'Failed to execute command "jest" - SIGTERM'
    assert str(SpawnError("jest", "not found")) == 'Failed to start command "jest": not found'


def test_configuration_error_mentions_path():
    error = ConfigurationError("Invalid configuration", path=Path("/repo/repka.yaml"))

    assert error.message == "Invalid configuration (/repo/repka.yaml)"
    assert error.path == Path("/repo/repka.yaml")


def test_task_not_found_without_tasks():
    assert TaskNotFoundError("x", []).message == "Task 'x' not found. Available: none"


def test_aggregate_failure():
    first = ExitCodeError("a", 1)
    second = ValueError("b")

    failure = AggregateFailure([first, second])

    assert failure.first is first
    assert failure.errors == [first, second]
    assert failure.message == first.message
    assert failure.result is None


def test_aggregate_failure_requires_errors():
    with pytest.raises(ValueError):
        AggregateFailure([])
