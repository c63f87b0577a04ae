"""
Builtin function table for the Mutant interpreter.

Builtins are injected into the evaluator as a plain name -> `BuiltinFunction`
mapping (`BuiltinTable`). `build_builtins(output)` creates a fresh table
whose `print`/`println` write to `output`, so each interpreter can be given
its own stream.

Builtins never mutate their arguments. `push`, `pop`, `rest`, `slice`,
`concat` and `reverse` return new arrays; the only way to change an array or
hash in place is index assignment.

Failures are reported by returning an `ErrorObject`; the evaluator prefixes
the builtin's name and attaches the call position.

Categories:
    core        len type str int float bool
    arrays      first last rest push pop slice concat reverse join
    strings     split replace trim upper lower substr indexOf contains charAt
    math        abs max min round floor ceil pow sqrt random
    io          print println
    utility     range keys values
    errors      error assert
"""

from __future__ import annotations

import logging
import math
import random
import sys
from collections.abc import Callable
from typing import TextIO

from mutant.evaluators.operators import values_equal
from mutant.mutant_errors import ErrorKind
from mutant.mutant_objects import (
    NULL,
    TRUE,
    ArrayObject,
    BooleanObject,
    BuiltinFunction,
    ErrorObject,
    FloatObject,
    Hashable,
    HashObject,
    IntegerObject,
    MutantObject,
    StringObject,
    format_float,
    native_bool,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

BuiltinTable = dict[str, BuiltinFunction]
Args = list[MutantObject]

CATEGORIES: dict[str, tuple[str, ...]] = {
    "core": ("len", "type", "str", "int", "float", "bool"),
    "arrays": ("first", "last", "rest", "push", "pop", "slice", "concat", "reverse", "join"),
    "strings": ("split", "replace", "trim", "upper", "lower", "substr", "indexOf", "contains", "charAt"),
    "math": ("abs", "max", "min", "round", "floor", "ceil", "pow", "sqrt", "random"),
    "io": ("print", "println"),
    "utility": ("range", "keys", "values"),
    "errors": ("error", "assert"),
}

_ORDINALS = ("first", "second", "third")


def _fail(message: str) -> ErrorObject:
    return ErrorObject(message, ErrorKind.BUILTIN)


def _expect(name: str, args: Args, position: int, *types: type) -> ErrorObject | None:
    """Checks the type of argument `position`; returns an error if it does not match."""
    arg = args[position]
    if isinstance(arg, types):
        return None
    expected = " or ".join(t.type_name for t in types)  # type: ignore[attr-defined]
    if len(args) == 1:
        return _fail(f"argument to '{name}' must be {expected}, got {arg.type_name}")
    return _fail(f"{_ORDINALS[position]} argument to '{name}' must be {expected}, got {arg.type_name}")


def _number(value: float) -> MutantObject:
    """Wraps a host number as INTEGER when it is integral, FLOAT otherwise."""
    if isinstance(value, int):
        return IntegerObject(value)
    return FloatObject(value)


# Core


def _len(args: Args) -> MutantObject:
    arg = args[0]
    if isinstance(arg, StringObject):
        return IntegerObject(len(arg.value))
    if isinstance(arg, (ArrayObject, HashObject)):
        return IntegerObject(len(arg))
    return _fail(f"argument to 'len' not supported, got {arg.type_name}")


def _type(args: Args) -> MutantObject:
    return StringObject(args[0].type_name)


def _str(args: Args) -> MutantObject:
    return StringObject(args[0].inspect())


def _int(args: Args) -> MutantObject:
    arg = args[0]
    if isinstance(arg, IntegerObject):
        return arg
    if isinstance(arg, FloatObject):
        if math.isnan(arg.value) or math.isinf(arg.value):
            return _fail(f"cannot convert {format_float(arg.value)} to integer")
        return IntegerObject(int(arg.value))
    if isinstance(arg, BooleanObject):
        return IntegerObject(1 if arg.value else 0)
    if isinstance(arg, StringObject):
        try:
            return IntegerObject(int(arg.value.strip()))
        except ValueError:
            return _fail(f'cannot convert "{arg.value}" to integer')
    return _fail(f"argument to 'int' not supported, got {arg.type_name}")


def _float(args: Args) -> MutantObject:
    arg = args[0]
    if isinstance(arg, FloatObject):
        return arg
    if isinstance(arg, IntegerObject):
        return FloatObject(float(arg.value))
    if isinstance(arg, StringObject):
        text = arg.value.strip()
        special = {"Infinity": math.inf, "-Infinity": -math.inf, "NaN": math.nan}
        if text in special:
            return FloatObject(special[text])
        try:
            return FloatObject(float(text))
        except ValueError:
            return _fail(f'cannot convert "{arg.value}" to float')
    return _fail(f"argument to 'float' not supported, got {arg.type_name}")


def _bool(args: Args) -> MutantObject:
    return native_bool(args[0].is_truthy())


# Arrays


def _first(args: Args) -> MutantObject:
    err = _expect("first", args, 0, ArrayObject)
    if err is not None:
        return err
    elements = args[0].elements  # type: ignore[attr-defined]
    return elements[0] if elements else NULL


def _last(args: Args) -> MutantObject:
    err = _expect("last", args, 0, ArrayObject)
    if err is not None:
        return err
    elements = args[0].elements  # type: ignore[attr-defined]
    return elements[-1] if elements else NULL


def _rest(args: Args) -> MutantObject:
    err = _expect("rest", args, 0, ArrayObject)
    if err is not None:
        return err
    elements = args[0].elements  # type: ignore[attr-defined]
    return ArrayObject(list(elements[1:])) if elements else NULL


def _push(args: Args) -> MutantObject:
    err = _expect("push", args, 0, ArrayObject)
    if err is not None:
        return err
    return ArrayObject([*args[0].elements, args[1]])  # type: ignore[attr-defined]


def _pop(args: Args) -> MutantObject:
    err = _expect("pop", args, 0, ArrayObject)
    if err is not None:
        return err
    elements = args[0].elements  # type: ignore[attr-defined]
    if not elements:
        return _fail("cannot pop from empty array")
    return ArrayObject(list(elements[:-1]))


def _clamp_range(start: int, end: int, length: int) -> tuple[int, int]:
    if start < 0:
        start = max(0, length + start)
    if end < 0:
        end = max(0, length + end)
    start = max(0, min(start, length))
    end = max(start, min(end, length))
    return start, end


def _slice(args: Args) -> MutantObject:
    err = _expect("slice", args, 0, ArrayObject)
    if err is not None:
        return err
    err = _expect("slice", args, 1, IntegerObject)
    if err is not None:
        return err
    elements = args[0].elements  # type: ignore[attr-defined]
    end = len(elements)
    if len(args) == 3:
        err = _expect("slice", args, 2, IntegerObject)
        if err is not None:
            return err
        end = args[2].value  # type: ignore[attr-defined]
    start, end = _clamp_range(args[1].value, end, len(elements))  # type: ignore[attr-defined]
    return ArrayObject(list(elements[start:end]))


def _concat(args: Args) -> MutantObject:
    err = _expect("concat", args, 0, ArrayObject)
    if err is not None:
        return err
    err = _expect("concat", args, 1, ArrayObject)
    if err is not None:
        return err
    return ArrayObject([*args[0].elements, *args[1].elements])  # type: ignore[attr-defined]


def _reverse(args: Args) -> MutantObject:
    arg = args[0]
    if isinstance(arg, StringObject):
        return StringObject(arg.value[::-1])
    err = _expect("reverse", args, 0, ArrayObject)
    if err is not None:
        return err
    return ArrayObject(list(reversed(arg.elements)))  # type: ignore[attr-defined]


def _join(args: Args) -> MutantObject:
    err = _expect("join", args, 0, ArrayObject)
    if err is not None:
        return err
    separator = ""
    if len(args) == 2:
        err = _expect("join", args, 1, StringObject)
        if err is not None:
            return err
        separator = args[1].value  # type: ignore[attr-defined]
    return StringObject(separator.join(e.inspect() for e in args[0].elements))  # type: ignore[attr-defined]


# Strings


def _split(args: Args) -> MutantObject:
    err = _expect("split", args, 0, StringObject)
    if err is not None:
        return err
    err = _expect("split", args, 1, StringObject)
    if err is not None:
        return err
    text, separator = args[0].value, args[1].value  # type: ignore[attr-defined]
    parts = list(text) if separator == "" else text.split(separator)
    return ArrayObject([StringObject(p) for p in parts])


def _replace(args: Args) -> MutantObject:
    for position in range(3):
        err = _expect("replace", args, position, StringObject)
        if err is not None:
            return err
    text, old, new = (a.value for a in args)  # type: ignore[attr-defined]
    return StringObject(text.replace(old, new))


def _string_transform(name: str, transform: Callable[[str], str]) -> Callable[[Args], MutantObject]:
    def apply(args: Args) -> MutantObject:
        err = _expect(name, args, 0, StringObject)
        if err is not None:
            return err
        return StringObject(transform(args[0].value))  # type: ignore[attr-defined]

    return apply


def _substr(args: Args) -> MutantObject:
    err = _expect("substr", args, 0, StringObject)
    if err is not None:
        return err
    err = _expect("substr", args, 1, IntegerObject)
    if err is not None:
        return err
    text = args[0].value  # type: ignore[attr-defined]
    start = args[1].value  # type: ignore[attr-defined]
    length = len(text)
    if len(args) == 3:
        err = _expect("substr", args, 2, IntegerObject)
        if err is not None:
            return err
        length = args[2].value  # type: ignore[attr-defined]
    if start < 0:
        start = max(0, len(text) + start)
    start = min(start, len(text))
    length = max(0, min(length, len(text) - start))
    return StringObject(text[start : start + length])


def _index_of(args: Args) -> MutantObject:
    haystack = args[0]
    if isinstance(haystack, ArrayObject):
        for i, element in enumerate(haystack.elements):
            if values_equal(element, args[1]):
                return IntegerObject(i)
        return IntegerObject(-1)
    err = _expect("indexOf", args, 0, StringObject, ArrayObject)
    if err is not None:
        return err
    err = _expect("indexOf", args, 1, StringObject)
    if err is not None:
        return err
    return IntegerObject(haystack.value.find(args[1].value))  # type: ignore[attr-defined]


def _contains(args: Args) -> MutantObject:
    haystack = args[0]
    if isinstance(haystack, ArrayObject):
        result = _index_of(args)
        return native_bool(isinstance(result, IntegerObject) and result.value >= 0)
    if isinstance(haystack, HashObject):
        key = args[1]
        return native_bool(isinstance(key, Hashable) and haystack.get(key) is not None)
    err = _expect("contains", args, 0, StringObject, ArrayObject, HashObject)
    if err is not None:
        return err
    err = _expect("contains", args, 1, StringObject)
    if err is not None:
        return err
    return native_bool(args[1].value in haystack.value)  # type: ignore[attr-defined]


def _char_at(args: Args) -> MutantObject:
    err = _expect("charAt", args, 0, StringObject)
    if err is not None:
        return err
    err = _expect("charAt", args, 1, IntegerObject)
    if err is not None:
        return err
    text, index = args[0].value, args[1].value  # type: ignore[attr-defined]
    if index < 0 or index >= len(text):
        return _fail(f"index {index} out of range for string of length {len(text)}")
    return StringObject(text[index])


# Math


def _abs(args: Args) -> MutantObject:
    err = _expect("abs", args, 0, IntegerObject, FloatObject)
    if err is not None:
        return err
    return _number(abs(args[0].value))  # type: ignore[attr-defined]


def _extreme(name: str, pick: Callable[..., float]) -> Callable[[Args], MutantObject]:
    def apply(args: Args) -> MutantObject:
        values = args
        if len(args) == 1 and isinstance(args[0], ArrayObject):
            values = args[0].elements
            if not values:
                return _fail(f"{name}() arg is an empty array")
        for position, value in enumerate(values):
            if not isinstance(value, (IntegerObject, FloatObject)):
                return _fail(f"all arguments to '{name}' must be numbers, got {value.type_name} at position {position}")
        return pick(values, key=lambda v: v.value)  # type: ignore[no-any-return]

    return apply


def _rounding(name: str, fn: Callable[[float], int]) -> Callable[[Args], MutantObject]:
    def apply(args: Args) -> MutantObject:
        err = _expect(name, args, 0, IntegerObject, FloatObject)
        if err is not None:
            return err
        arg = args[0]
        if isinstance(arg, IntegerObject):
            return arg
        value = arg.value  # type: ignore[attr-defined]
        if math.isnan(value) or math.isinf(value):
            return _fail(f"cannot {name} {format_float(value)}")
        return IntegerObject(fn(value))

    return apply


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _pow(args: Args) -> MutantObject:
    err = _expect("pow", args, 0, IntegerObject, FloatObject)
    if err is not None:
        return err
    err = _expect("pow", args, 1, IntegerObject, FloatObject)
    if err is not None:
        return err
    base, exponent = args[0].value, args[1].value  # type: ignore[attr-defined]
    if isinstance(base, int) and isinstance(exponent, int) and exponent >= 0:
        return IntegerObject(base**exponent)
    try:
        return FloatObject(math.pow(base, exponent))
    except (ValueError, OverflowError) as e:
        return _fail(f"pow({base}, {exponent}) failed: {e}")


def _sqrt(args: Args) -> MutantObject:
    err = _expect("sqrt", args, 0, IntegerObject, FloatObject)
    if err is not None:
        return err
    value = args[0].value  # type: ignore[attr-defined]
    if value < 0:
        return _fail("cannot take square root of negative number")
    return FloatObject(math.sqrt(value))


def _random(args: Args) -> MutantObject:
    if not args:
        return FloatObject(random.random())
    err = _expect("random", args, 0, IntegerObject)
    if err is not None:
        return err
    upper = args[0].value  # type: ignore[attr-defined]
    if upper <= 0:
        return _fail("argument to 'random' must be positive")
    return IntegerObject(random.randrange(upper))


# Utility


def _range(args: Args) -> MutantObject:
    for position in range(len(args)):
        err = _expect("range", args, position, IntegerObject)
        if err is not None:
            return err
    values = [a.value for a in args]  # type: ignore[attr-defined]
    if len(values) == 1:
        start, end, step = 0, values[0], 1
    else:
        start, end = values[0], values[1]
        step = values[2] if len(values) == 3 else 1
    if step == 0:
        return _fail("step cannot be zero")
    return ArrayObject([IntegerObject(i) for i in range(start, end, step)])


def _keys(args: Args) -> MutantObject:
    err = _expect("keys", args, 0, HashObject)
    if err is not None:
        return err
    return ArrayObject(args[0].keys())  # type: ignore[attr-defined]


def _values(args: Args) -> MutantObject:
    err = _expect("values", args, 0, HashObject)
    if err is not None:
        return err
    return ArrayObject(args[0].values())  # type: ignore[attr-defined]


# Errors


def _error(args: Args) -> MutantObject:
    err = _expect("error", args, 0, StringObject)
    if err is not None:
        return err
    return ErrorObject(args[0].value, ErrorKind.USER)  # type: ignore[attr-defined]


def _assert(args: Args) -> MutantObject:
    if args[0].is_truthy():
        return TRUE
    message = "Assertion failed"
    if len(args) == 2:
        message += f": {args[1].inspect()}"
    return ErrorObject(message, ErrorKind.USER)


_PURE_BUILTINS: tuple[tuple[str, Callable[[Args], MutantObject], int | tuple[int, int | None], str], ...] = (
    ("len", _len, 1, "Returns the length of an array, string or hash"),
    ("type", _type, 1, "Returns the type name of a value"),
    ("str", _str, 1, "Converts any value to its string representation"),
    ("int", _int, 1, "Converts a string, float or boolean to an integer"),
    ("float", _float, 1, "Converts a string or integer to a float"),
    ("bool", _bool, 1, "Converts any value to a boolean by truthiness"),
    ("first", _first, 1, "Returns the first element of an array"),
    ("last", _last, 1, "Returns the last element of an array"),
    ("rest", _rest, 1, "Returns a new array without the first element"),
    ("push", _push, 2, "Returns a new array with an element appended"),
    ("pop", _pop, 1, "Returns a new array without the last element"),
    ("slice", _slice, (2, 3), "Returns a new array holding a portion of an array"),
    ("concat", _concat, 2, "Returns a new array joining two arrays"),
    ("reverse", _reverse, 1, "Returns a reversed copy of an array or string"),
    ("join", _join, (1, 2), "Joins array elements into a string"),
    ("split", _split, 2, "Splits a string by a separator"),
    ("replace", _replace, 3, "Replaces every occurrence of a substring"),
    ("trim", _string_transform("trim", str.strip), 1, "Removes surrounding whitespace"),
    ("upper", _string_transform("upper", str.upper), 1, "Converts a string to uppercase"),
    ("lower", _string_transform("lower", str.lower), 1, "Converts a string to lowercase"),
    ("substr", _substr, (2, 3), "Extracts a substring by start and length"),
    ("indexOf", _index_of, 2, "Position of a substring or element, or -1"),
    ("contains", _contains, 2, "Tests membership in a string, array or hash"),
    ("charAt", _char_at, 2, "Returns the character at an index"),
    ("abs", _abs, 1, "Absolute value"),
    ("max", _extreme("max", max), (1, None), "Largest of the arguments or of an array"),
    ("min", _extreme("min", min), (1, None), "Smallest of the arguments or of an array"),
    ("round", _rounding("round", _round_half_up), 1, "Rounds to the nearest integer"),
    ("floor", _rounding("floor", math.floor), 1, "Rounds down to an integer"),
    ("ceil", _rounding("ceil", math.ceil), 1, "Rounds up to an integer"),
    ("pow", _pow, 2, "Raises a number to a power"),
    ("sqrt", _sqrt, 1, "Square root"),
    ("random", _random, (0, 1), "Random float in [0, 1), or integer in [0, n)"),
    ("range", _range, (1, 3), "Array of integers from start to end by step"),
    ("keys", _keys, 1, "Keys of a hash, in insertion order"),
    ("values", _values, 1, "Values of a hash, in insertion order"),
    ("error", _error, 1, "Creates an error value with a message"),
    ("assert", _assert, (1, 2), "Fails with an error unless the condition is truthy"),
)


def build_builtins(output: TextIO | None = None) -> BuiltinTable:
    """Creates a builtin table whose output functions write to `output`.

    Args:
        output: Stream for `print`/`println`; defaults to `sys.stdout` at
            call time.

    Returns:
        A new mutable name -> `BuiltinFunction` mapping.
    """

    def stream() -> TextIO:
        return output if output is not None else sys.stdout

    def _print(args: Args) -> MutantObject:
        stream().write(" ".join(a.inspect() for a in args))
        return NULL

    def _println(args: Args) -> MutantObject:
        stream().write(" ".join(a.inspect() for a in args) + "\n")
        return NULL

    table: BuiltinTable = {
        name: BuiltinFunction(name, fn, arity, doc) for name, fn, arity, doc in _PURE_BUILTINS
    }
    table["print"] = BuiltinFunction("print", _print, None, "Prints values separated by spaces")
    table["println"] = BuiltinFunction("println", _println, None, "Prints values followed by a newline")
    return table


def register(table: BuiltinTable, builtin: BuiltinFunction) -> None:
    """Adds or replaces a builtin in `table`."""
    if builtin.name in table:
        logger.debug("Overriding builtin %s", builtin.name)
    table[builtin.name] = builtin


def category_of(name: str) -> str | None:
    for category, names in CATEGORIES.items():
        if name in names:
            return category
    return None


__all__ = ["BuiltinTable", "CATEGORIES", "build_builtins", "category_of", "register"]
