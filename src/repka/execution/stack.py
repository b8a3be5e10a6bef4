"""Call-site stack capture for errors raised far from their origin."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import TypeVar

E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class CapturedStack:
    """Stack frames recorded at the moment an operation was requested."""

    frames: traceback.StackSummary

    @property
    def text(self) -> str:
        return "".join(self.frames.format())

    def prepare_for_rethrow(self, err: E) -> E:
        """Attach the captured frames to ``err`` and return it.

        The frames are stored on ``err.call_site`` and appended as an
        exception note so they show up in the printed traceback.
        """
        err.call_site = self.frames  # type: ignore[attr-defined]
        if self.frames:
            err.add_note("Called from:\n" + self.text.rstrip())
        return err


def capture_stack_trace(skip: int = 0) -> CapturedStack:
    """Capture the stack of the caller.

    Args:
        skip: Additional innermost frames to drop, on top of this function
            and its direct caller.
    """
    frames = traceback.extract_stack()
    # drop capture_stack_trace itself and the function asking for the capture
    cut = len(frames) - 2 - skip
    return CapturedStack(traceback.StackSummary.from_list(frames[: max(cut, 0)]))
