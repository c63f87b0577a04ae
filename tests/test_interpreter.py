import io
import sys

import pytest

from mutant.mutant_config import InterpreterConfig
from mutant.mutant_interpreter import MUTANT_VERSION, ExecutionResult, Interpreter
from mutant.mutant_lexer import LexerError
from mutant.mutant_objects import NULL, ErrorObject
from mutant.mutant_parser import ParseError


def make_interpreter(**config: object) -> Interpreter:
    return Interpreter(config=InterpreterConfig(**config), output=io.StringIO())  # type: ignore[arg-type]


def test_version() -> None:
    assert MUTANT_VERSION == "0.1.0"


def test_bindings_persist_across_runs() -> None:
    interp = make_interpreter()
    assert interp.run("let x = 40;").ok
    assert interp.run("fn add(a, b) { a + b }").ok
    result = interp.run("add(x, 2);")
    assert result.ok
    assert result.value.inspect() == "42"
    assert interp.global_names() == ["add", "x"]


def test_empty_program_is_null() -> None:
    result = make_interpreter().run("")
    assert result.ok and result.value is NULL


def test_parse_errors_skip_evaluation() -> None:
    out = io.StringIO()
    interp = Interpreter(output=out)
    result = interp.run('println("side effect");\nlet x = ;')
    assert not result.ok
    assert result.value is NULL and result.error is None
    assert all(isinstance(e, ParseError) for e in result.parse_errors)
    assert result.parse_errors[0].render().startswith("Parse Error at line 2, column 8")
    assert out.getvalue() == ""


def test_lexer_error_is_folded_into_parse_errors() -> None:
    interp = make_interpreter()
    source = 'let s = "abc;'
    result = interp.run(source)
    assert len(result.parse_errors) == 1
    assert isinstance(result.parse_errors[0], LexerError)
    assert interp.format_errors(result, source) == "Lexer Error: Unterminated string at line 1, column 8"


def test_format_errors_includes_source_context() -> None:
    interp = make_interpreter()
    source = "let x = ;"
    result = interp.run(source)
    text = interp.format_errors(result, source)
    lines = text.splitlines()
    assert lines[0].startswith("Parse Error at line 1, column 8")
    assert lines[1] == "1 | let x = ;"
    assert lines[2] == "  |         ^"


def test_runtime_error_result() -> None:
    interp = make_interpreter()
    source = "let a = 1;\na + true;"
    result = interp.run(source)
    assert not result.ok
    assert isinstance(result.error, ErrorObject)
    assert result.value is result.error
    assert result.error.message == "Type mismatch: INTEGER + BOOLEAN"
    text = interp.format_errors(result, source)
    assert text.startswith("TypeError: Type mismatch: INTEGER + BOOLEAN\n   at line 2, column 2")


def test_runtime_error_does_not_poison_later_runs() -> None:
    interp = make_interpreter()
    interp.run("let x = 1;")
    assert not interp.run("missing;").ok
    assert interp.run("x + 1;").value.inspect() == "2"


def test_stack_traces_can_be_disabled() -> None:
    interp = make_interpreter(stack_traces=False)
    result = interp.run("fn f() { 1 + null } f();")
    assert result.error is not None
    assert result.error.stack_trace == []
    assert "Stack trace" not in result.error.detailed()


def test_reset_drops_bindings() -> None:
    interp = make_interpreter()
    interp.run("let x = 1; const y = 2;")
    assert interp.global_names() == ["x", "y"]
    interp.reset()
    assert interp.global_names() == []
    assert interp.run("x;").error is not None
    assert interp.run("let x = 3; x;").value.inspect() == "3"


def test_output_stream_receives_prints() -> None:
    out = io.StringIO()
    Interpreter(output=out).run('println("hello", 1 + 1);')
    assert out.getvalue() == "hello 2\n"


def test_recursion_limit_is_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(sys, "setrecursionlimit", calls.append)
    Interpreter(config=InterpreterConfig(recursion_limit=sys.getrecursionlimit() + 1000))
    assert calls == [sys.getrecursionlimit() + 1000]
    calls.clear()
    Interpreter(config=InterpreterConfig(recursion_limit=1))
    assert calls == []


def test_execution_result_defaults() -> None:
    result = ExecutionResult()
    assert result.ok and result.value is NULL


def test_deep_nesting_is_reported_not_raised() -> None:
    interp = make_interpreter()
    source = "(" * 20000 + "1" + ")" * 20000 + ";"
    result = interp.run(source)
    assert not result.ok
    assert [e.render() for e in result.parse_errors] == [
        "Parse Error at line 1, column 0: Expression nested too deeply"
    ]
    assert interp.run("1 + 1;").value.inspect() == "2"
