"""Tests for call-site stack capture."""

from repka.errors import ExitCodeError
from repka.execution.stack import capture_stack_trace


def _request_operation():
    return capture_stack_trace()


def test_capture_excludes_capturing_function():
    stack = _request_operation()

    names = [frame.name for frame in stack.frames]
    assert "capture_stack_trace" not in names
    assert "_request_operation" not in names
    assert names[-1] == "test_capture_excludes_capturing_function"


def test_skip_drops_more_frames():
    stack = capture_stack_trace(skip=1)

    names = [frame.name for frame in stack.frames]
    assert "test_skip_drops_more_frames" not in names


def test_prepare_for_rethrow_attaches_frames():
    stack = _request_operation()
    error = ExitCodeError("tsc", 2)

    assert stack.prepare_for_rethrow(error) is error
    assert error.call_site is stack.frames
    assert error.__notes__[0].startswith("Called from:\n")
    assert "test_prepare_for_rethrow_attaches_frames" in error.__notes__[0]
