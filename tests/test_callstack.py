import pytest

from mutant.mutant_callstack import (
    CallStack,
    FrameType,
    StackFrame,
    StackOverflowError,
    stack_overflow_message,
)


def test_push_pop_peek() -> None:
    stack = CallStack()
    assert stack.peek() is None
    assert stack.pop() is None
    stack.push(StackFrame("main", 1, 0))
    stack.push(StackFrame("helper", 2, 4))
    assert stack.depth == 2
    assert len(stack) == 2
    assert stack.peek() == StackFrame("helper", 2, 4)
    assert stack.pop() == StackFrame("helper", 2, 4)
    assert stack.depth == 1


def test_snapshot_is_innermost_first_copy() -> None:
    stack = CallStack()
    stack.push(StackFrame("a"))
    stack.push(StackFrame("b"))
    snap = stack.snapshot()
    assert [f.function_name for f in snap] == ["b", "a"]
    stack.clear()
    assert [f.function_name for f in snap] == ["b", "a"]
    assert stack.depth == 0


def test_overflow_raises() -> None:
    stack = CallStack(max_depth=2)
    stack.push(StackFrame("a"))
    stack.push(StackFrame("b"))
    with pytest.raises(StackOverflowError) as exc:
        stack.push(StackFrame("c"))
    assert exc.value.max_depth == 2
    assert str(exc.value) == stack_overflow_message(2)
    assert "Maximum stack depth of 2 exceeded" in str(exc.value)
    assert stack.depth == 2


def test_frame_context_pops_on_exception() -> None:
    stack = CallStack()
    with pytest.raises(KeyError):
        with stack.frame(StackFrame("f")):
            assert stack.depth == 1
            raise KeyError("x")
    assert stack.depth == 0


def test_invalid_max_depth() -> None:
    with pytest.raises(ValueError):
        CallStack(0)


def test_frame_format() -> None:
    assert StackFrame("f", 3, 7).format() == "at f [Function] (line 3, column 7)"
    assert StackFrame("", frame_type=FrameType.BUILTIN).format() == "at <anonymous> [Builtin]"
    assert StackFrame("C.constructor", 1, 0, FrameType.CONSTRUCTOR).format().endswith(
        "[Constructor] (line 1, column 0)"
    )


def test_stack_format() -> None:
    stack = CallStack()
    assert stack.format() == "  (empty call stack)"
    stack.push(StackFrame("outer", 1, 0))
    stack.push(StackFrame("inner", 2, 0))
    assert stack.format().splitlines() == [
        "  at inner [Function] (line 2, column 0)",
        "  at outer [Function] (line 1, column 0)",
    ]
    assert bool(CallStack())
