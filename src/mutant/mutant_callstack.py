"""
Call stack tracking for runtime diagnostics.

The evaluator pushes a `StackFrame` on every function, method and builtin
call and pops it on the way out, whatever the outcome. The stack serves two
purposes: it bounds recursion depth so runaway programs fail with a clean
error, and it is snapshotted into every runtime error for the stack trace.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_MAX_DEPTH = 1000


class FrameType(Enum):
    GLOBAL = "Global"
    USER_FUNCTION = "Function"
    BUILTIN = "Builtin"
    METHOD = "Method"
    CONSTRUCTOR = "Constructor"


class StackFrame:
    __slots__ = ("function_name", "line", "col", "frame_type")

    def __init__(
        self,
        function_name: str,
        line: int | None = None,
        col: int | None = None,
        frame_type: FrameType = FrameType.USER_FUNCTION,
    ) -> None:
        self.function_name = function_name or "<anonymous>"
        self.line = line
        self.col = col
        self.frame_type = frame_type

    def format(self) -> str:
        where = ""
        if self.line is not None:
            where = f" (line {self.line}, column {self.col})"
        return f"at {self.function_name} [{self.frame_type.value}]{where}"

    def __repr__(self) -> str:
        return f"StackFrame({self.function_name!r}, {self.line}, {self.col}, {self.frame_type.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StackFrame):
            return NotImplemented
        return (self.function_name, self.line, self.col, self.frame_type) == (
            other.function_name,
            other.line,
            other.col,
            other.frame_type,
        )

    def __hash__(self) -> int:
        return hash((self.function_name, self.line, self.col, self.frame_type))


class StackOverflowError(RuntimeError):
    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(stack_overflow_message(max_depth))


def stack_overflow_message(max_depth: int) -> str:
    return (
        f"Stack overflow: Maximum stack depth of {max_depth} exceeded. "
        "This usually indicates infinite recursion."
    )


class CallStack:
    """Bounded stack of active call frames, innermost last."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be positive")
        self.max_depth = max_depth
        self.frames: list[StackFrame] = []

    def push(self, frame: StackFrame) -> None:
        if len(self.frames) >= self.max_depth:
            logger.debug("Call stack overflow at depth %d (%s)", len(self.frames), frame.function_name)
            raise StackOverflowError(self.max_depth)
        self.frames.append(frame)

    def pop(self) -> StackFrame | None:
        return self.frames.pop() if self.frames else None

    def peek(self) -> StackFrame | None:
        return self.frames[-1] if self.frames else None

    @contextmanager
    def frame(self, frame: StackFrame) -> Iterator[StackFrame]:
        """Pushes `frame` for the duration of the block."""
        self.push(frame)
        try:
            yield frame
        finally:
            self.pop()

    def snapshot(self) -> list[StackFrame]:
        """Copy of the active frames, innermost first."""
        return list(reversed(self.frames))

    def clear(self) -> None:
        self.frames.clear()

    @property
    def depth(self) -> int:
        return len(self.frames)

    def __len__(self) -> int:
        return len(self.frames)

    def __bool__(self) -> bool:
        return True

    def format(self) -> str:
        if not self.frames:
            return "  (empty call stack)"
        return "\n".join(f"  {f.format()}" for f in self.snapshot())
