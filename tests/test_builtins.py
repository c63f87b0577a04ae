import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mutant.mutant_builtins import CATEGORIES, build_builtins, category_of, register
from mutant.mutant_config import InterpreterConfig
from mutant.mutant_interpreter import Interpreter
from mutant.mutant_objects import (
    NULL,
    ArrayObject,
    BuiltinFunction,
    ErrorObject,
    IntegerObject,
    MutantObject,
    StringObject,
)


def run(source: str, output: io.StringIO | None = None) -> MutantObject:
    interp = Interpreter(config=InterpreterConfig(), output=output or io.StringIO())
    result = interp.run(source)
    assert not result.parse_errors, [str(e) for e in result.parse_errors]
    return result.value


def show(source: str) -> str:
    return run(source).inspect()


def error_of(source: str) -> ErrorObject:
    value = run(source)
    assert isinstance(value, ErrorObject), value.inspect()
    return value


@pytest.mark.parametrize(
    "source,expected",
    [
        # core
        ('len("hello");', "5"),
        ("len([1, 2]);", "2"),
        ('len({"a": 1});', "1"),
        ("type(1.5);", "FLOAT"),
        ('type("s");', "STRING"),
        ("type([]);", "ARRAY"),
        ("type(null);", "NULL"),
        ("type(len);", "BUILTIN"),
        ('str([1, "a"]);', '[1, "a"]'),
        ('int("42");', "42"),
        ("int(3.9);", "3"),
        ("int(true);", "1"),
        ('float("2.5");', "2.5"),
        ("float(2);", "2.0"),
        ('float("Infinity");', "Infinity"),
        ("bool(0);", "false"),
        ('bool("x");', "true"),
        # arrays
        ("first([7, 8]);", "7"),
        ("first([]);", "null"),
        ("last([7, 8]);", "8"),
        ("rest([1, 2, 3]);", "[2, 3]"),
        ("rest([]);", "null"),
        ("push([1], 2);", "[1, 2]"),
        ("pop([1, 2]);", "[1]"),
        ("slice([1, 2, 3, 4], 1, 3);", "[2, 3]"),
        ("slice([1, 2, 3, 4], -2);", "[3, 4]"),
        ("slice([1, 2], 5);", "[]"),
        ("concat([1], [2, 3]);", "[1, 2, 3]"),
        ("reverse([1, 2, 3]);", "[3, 2, 1]"),
        ('reverse("abc");', "cba"),
        ('join([1, 2, 3], "-");', "1-2-3"),
        ('join(["a", "b"]);', "ab"),
        # strings
        ('split("a,b", ",");', '["a", "b"]'),
        ('split("ab", "");', '["a", "b"]'),
        ('replace("aaa", "a", "b");', "bbb"),
        ('trim("  x ");', "x"),
        ('upper("abc");', "ABC"),
        ('lower("ABC");', "abc"),
        ('substr("hello", 1, 3);', "ell"),
        ('substr("hello", -3);', "llo"),
        ('indexOf("hello", "l");', "2"),
        ("indexOf([1, 2, 3], 3);", "2"),
        ("indexOf([1], 9);", "-1"),
        ('contains({"a": 1}, "a");', "true"),
        ("contains([1, 2], 2);", "true"),
        ('contains("abc", "d");', "false"),
        ('charAt("abc", 1);', "b"),
        # math
        ("abs(-3);", "3"),
        ("abs(-2.5);", "2.5"),
        ("max(1, 5, 3);", "5"),
        ("max([2, 9]);", "9"),
        ("min(2, 1.5);", "1.5"),
        ("round(2.5);", "3"),
        ("round(-2.5);", "-2"),
        ("floor(2.7);", "2"),
        ("ceil(2.1);", "3"),
        ("floor(5);", "5"),
        ("pow(2, 10);", "1024"),
        ("pow(2, -1);", "0.5"),
        ("sqrt(16);", "4.0"),
        # utility
        ("range(3);", "[0, 1, 2]"),
        ("range(1, 4);", "[1, 2, 3]"),
        ("range(5, 0, -2);", "[5, 3, 1]"),
        ('keys({"a": 1, "b": 2});', '["a", "b"]'),
        ('values({"a": 1, "b": 2});', "[1, 2]"),
        # errors
        ("assert(true);", "true"),
    ],
)
def test_builtin_results(source: str, expected: str) -> None:
    assert show(source) == expected


@pytest.mark.parametrize(
    "source,detail",
    [
        ("len(5);", "argument to 'len' not supported, got INTEGER"),
        ('int("x");', 'cannot convert "x" to integer'),
        ("first(5);", "argument to 'first' must be ARRAY, got INTEGER"),
        ('split(1, ",");', "first argument to 'split' must be STRING, got INTEGER"),
        ('charAt("abc", "1");', "second argument to 'charAt' must be INTEGER, got STRING"),
        ("pop([]);", "cannot pop from empty array"),
        ('charAt("abc", 5);', "index 5 out of range for string of length 3"),
        ("max([]);", "max() arg is an empty array"),
        ('max(1, "a");', "all arguments to 'max' must be numbers, got STRING at position 1"),
        ("sqrt(-1);", "cannot take square root of negative number"),
        ("random(0);", "argument to 'random' must be positive"),
        ("range(0, 5, 0);", "step cannot be zero"),
        ("keys([]);", "argument to 'keys' must be HASH, got ARRAY"),
    ],
)
def test_builtin_failures_are_wrapped(source: str, detail: str) -> None:
    err = error_of(source)
    name = source.split("(", 1)[0]
    assert err.message == f"Error in evaluation of the builtin function {name}: {detail}"
    assert err.kind == "BuiltinError"
    assert err.line == 1


def test_arity_errors_are_not_wrapped() -> None:
    err = error_of("len();")
    assert err.message == "Wrong number of arguments. Expected 1, got 0"
    assert err.kind == "ArgumentError"
    assert error_of("slice([1]);").message == "Wrong number of arguments. Expected 2 to 3, got 1"


def test_user_errors_are_located_but_not_wrapped() -> None:
    err = error_of('let x = 1;\nerror("boom");')
    assert err.message == "boom"
    assert err.kind == "UserError"
    assert (err.line, err.col) == (2, 0)
    assert error_of('assert(1 == 2, "nope");').message == "Assertion failed: nope"
    assert error_of("assert(false);").message == "Assertion failed"


def test_builtins_do_not_mutate_arguments() -> None:
    assert show("let a = [1]; let b = push(a, 2); [len(a), len(b)];") == "[1, 2]"
    assert show("let a = [1, 2, 3]; reverse(a); a;") == "[1, 2, 3]"


def test_random_ranges() -> None:
    value = run("random();")
    assert 0.0 <= value.value < 1.0  # type: ignore[attr-defined]
    assert 0 <= run("random(5);").value < 5  # type: ignore[attr-defined]


def test_print_and_println_write_to_output() -> None:
    out = io.StringIO()
    assert run('print("a", 1); println("b"); println();', out) is NULL
    assert out.getvalue() == "a 1b\n\n"


def test_default_output_is_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    table = build_builtins()
    table["println"].fn([StringObject("hi"), IntegerObject(2)])
    assert capsys.readouterr().out == "hi 2\n"


def test_every_category_name_is_built() -> None:
    table = build_builtins(io.StringIO())
    listed = {name for names in CATEGORIES.values() for name in names}
    assert listed == set(table)
    assert all(isinstance(b, BuiltinFunction) and b.doc for b in table.values())


def test_category_of() -> None:
    assert category_of("len") == "core"
    assert category_of("charAt") == "strings"
    assert category_of("println") == "io"
    assert category_of("nope") is None


def test_register_adds_and_overrides() -> None:
    table = build_builtins(io.StringIO())
    register(table, BuiltinFunction("answer", lambda args: IntegerObject(42), 0))
    register(table, BuiltinFunction("len", lambda args: IntegerObject(-1), 1))
    interp = Interpreter(output=io.StringIO(), builtins=table)
    assert interp.run("answer() + len([1, 2]);").value.inspect() == "41"


def test_builtins_can_be_shadowed_by_user_bindings() -> None:
    assert show("let len = fn(x) { 0 }; len([1, 2]);") == "0"


@given(st.lists(st.integers(min_value=-50, max_value=50), max_size=8))  # type: ignore[misc]
def test_reverse_matches_python(values: list[int]) -> None:
    table = build_builtins(io.StringIO())
    result = table["reverse"].fn([ArrayObject([IntegerObject(v) for v in values])])
    assert [e.value for e in result.elements] == values[::-1]  # type: ignore[attr-defined]


@given(  # type: ignore[misc]
    st.integers(min_value=-20, max_value=20),
    st.integers(min_value=-20, max_value=20),
    st.integers(min_value=-5, max_value=5).filter(lambda s: s != 0),
)
def test_range_matches_python(start: int, end: int, step: int) -> None:
    table = build_builtins(io.StringIO())
    result = table["range"].fn([IntegerObject(start), IntegerObject(end), IntegerObject(step)])
    assert [e.value for e in result.elements] == list(range(start, end, step))  # type: ignore[attr-defined]
