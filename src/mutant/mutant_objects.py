"""
Runtime object model for the Mutant interpreter.

Every value a Mutant program can observe is an instance of a `MutantObject`
subclass, tagged by `type_name`:

    INTEGER, FLOAT, STRING, BOOLEAN, NULL   scalar values
    ARRAY, HASH                             mutable reference containers
    FUNCTION, BUILTIN, BOUND_METHOD         callables
    CLASS, INSTANCE                         the class system
    ERROR                                   runtime failures (ordinary values)
    RETURN, BREAK, CONTINUE                 control-flow signals

Scalars are immutable. Arrays and hashes are shared by reference: binding
one to a second name aliases it, and index assignment is visible through
every alias.

Control flow travels as data. A `ReturnValue`, `BREAK`, `CONTINUE` or
`ErrorObject` returned from a child evaluation must be handed upward
unchanged until the construct that owns it (a call, a loop, the program)
consumes it.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mutant.mutant_ast import BlockStatement
    from mutant.mutant_callstack import StackFrame
    from mutant.mutant_environment import Environment


class ObjectType:
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    ARRAY = "ARRAY"
    HASH = "HASH"
    FUNCTION = "FUNCTION"
    BUILTIN = "BUILTIN"
    BOUND_METHOD = "BOUND_METHOD"
    CLASS = "CLASS"
    INSTANCE = "INSTANCE"
    ERROR = "ERROR"
    RETURN = "RETURN"
    BREAK = "BREAK"
    CONTINUE = "CONTINUE"


class MutantObject:
    """Base class of every runtime value."""

    type_name: str = "OBJECT"

    def inspect(self) -> str:
        """Returns the display form used by `print` and the REPL."""
        raise NotImplementedError

    def is_truthy(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"<{self.type_name} {self.inspect()}>"


class Hashable:
    """Mixin for values usable as hash keys."""

    def hash_key(self) -> tuple[str, Any]:
        raise NotImplementedError


HashKey = tuple[str, Any]


# Scalars


class IntegerObject(MutantObject, Hashable):
    type_name = ObjectType.INTEGER

    def __init__(self, value: int) -> None:
        self.value = value

    def inspect(self) -> str:
        return str(self.value)

    def is_truthy(self) -> bool:
        return self.value != 0

    def hash_key(self) -> HashKey:
        return (self.type_name, self.value)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, IntegerObject) and other.value == self.value

    def __hash__(self) -> int:
        return hash(self.hash_key())


def format_float(value: float) -> str:
    """Renders floats the way Mutant prints them (`7.0`, `Infinity`, `NaN`)."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return repr(value)


class FloatObject(MutantObject):
    type_name = ObjectType.FLOAT

    def __init__(self, value: float) -> None:
        self.value = value

    def inspect(self) -> str:
        return format_float(self.value)

    def is_truthy(self) -> bool:
        return self.value != 0.0

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, FloatObject) and other.value == self.value

    def __hash__(self) -> int:
        return hash((self.type_name, self.value))


class StringObject(MutantObject, Hashable):
    type_name = ObjectType.STRING

    def __init__(self, value: str) -> None:
        self.value = value

    def inspect(self) -> str:
        return self.value

    def is_truthy(self) -> bool:
        return self.value != ""

    def hash_key(self) -> HashKey:
        return (self.type_name, self.value)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, StringObject) and other.value == self.value

    def __hash__(self) -> int:
        return hash(self.hash_key())


class BooleanObject(MutantObject, Hashable):
    """Use the `TRUE` and `FALSE` singletons rather than constructing new ones."""

    type_name = ObjectType.BOOLEAN

    def __init__(self, value: bool) -> None:
        self.value = value

    def inspect(self) -> str:
        return "true" if self.value else "false"

    def is_truthy(self) -> bool:
        return self.value

    def hash_key(self) -> HashKey:
        return (self.type_name, self.value)


class NullObject(MutantObject):
    type_name = ObjectType.NULL

    def inspect(self) -> str:
        return "null"

    def is_truthy(self) -> bool:
        return False


TRUE = BooleanObject(True)
FALSE = BooleanObject(False)
NULL = NullObject()


def native_bool(value: bool) -> BooleanObject:
    return TRUE if value else FALSE


def represent(obj: MutantObject) -> str:
    """Display form used inside containers: strings are quoted."""
    if isinstance(obj, StringObject):
        escaped = obj.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return obj.inspect()


# ids of containers whose inspect() is on the stack
_rendering: set[int] = set()


def render_once(obj: MutantObject, placeholder: str, render: Callable[[], str]) -> str:
    """Calls `render`, or returns `placeholder` if `obj` is already being rendered.

    Self-referential arrays, hashes and instances print the placeholder where
    they reappear inside themselves instead of recursing forever.
    """
    key = id(obj)
    if key in _rendering:
        return placeholder
    _rendering.add(key)
    try:
        return render()
    finally:
        _rendering.discard(key)


# Containers


class ArrayObject(MutantObject):
    type_name = ObjectType.ARRAY

    def __init__(self, elements: list[MutantObject] | None = None) -> None:
        self.elements: list[MutantObject] = elements if elements is not None else []

    def inspect(self) -> str:
        return render_once(
            self, "[...]", lambda: "[" + ", ".join(represent(e) for e in self.elements) + "]"
        )

    def is_truthy(self) -> bool:
        return bool(self.elements)

    def __len__(self) -> int:
        return len(self.elements)


class HashObject(MutantObject):
    """Insertion-ordered map from hashable Mutant values to Mutant values."""

    type_name = ObjectType.HASH

    def __init__(self) -> None:
        self.pairs: dict[HashKey, tuple[MutantObject, MutantObject]] = {}

    def get(self, key: Hashable) -> MutantObject | None:
        pair = self.pairs.get(key.hash_key())
        return pair[1] if pair else None

    def set(self, key: Hashable, value: MutantObject) -> None:
        assert isinstance(key, MutantObject)  # for mypy
        self.pairs[key.hash_key()] = (key, value)

    def keys(self) -> list[MutantObject]:
        return [k for k, _ in self.pairs.values()]

    def values(self) -> list[MutantObject]:
        return [v for _, v in self.pairs.values()]

    def items(self) -> Iterator[tuple[MutantObject, MutantObject]]:
        yield from self.pairs.values()

    def inspect(self) -> str:
        def render() -> str:
            body = ", ".join(f"{represent(k)}: {represent(v)}" for k, v in self.pairs.values())
            return "{" + body + "}"

        return render_once(self, "{...}", render)

    def is_truthy(self) -> bool:
        return bool(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)


# Callables


class FunctionObject(MutantObject):
    """A user-defined function closed over the environment it was created in.

    Attributes:
        parameters (tuple[str, ...]): Parameter names, bound positionally.
        body (BlockStatement): The function body.
        env (Environment): The captured (defining) environment.
        name (str | None): Declared name, used in stack traces.
    """

    type_name = ObjectType.FUNCTION

    def __init__(
        self,
        parameters: tuple[str, ...],
        body: BlockStatement,
        env: Environment,
        name: str | None = None,
    ) -> None:
        self.parameters = tuple(parameters)
        self.body = body
        self.env = env
        self.name = name

    @property
    def display_name(self) -> str:
        return self.name or "<anonymous>"

    def inspect(self) -> str:
        label = f"fn {self.name}" if self.name else "fn"
        return f"{label}({', '.join(self.parameters)}) {{ ... }}"


BuiltinCallable = Callable[[list[MutantObject]], MutantObject]


class BuiltinFunction(MutantObject):
    """A host-implemented function exposed to Mutant code.

    Attributes:
        name (str): Name the builtin is registered under.
        fn (BuiltinCallable): Receives the evaluated arguments.
        arity (int | tuple[int, int | None] | None): Exact count, an inclusive
            (min, max) range with `None` meaning unbounded, or None for any.
        doc (str): One-line description shown by the REPL.
    """

    type_name = ObjectType.BUILTIN

    def __init__(
        self,
        name: str,
        fn: BuiltinCallable,
        arity: int | tuple[int, int | None] | None = None,
        doc: str = "",
    ) -> None:
        self.name = name
        self.fn = fn
        self.arity = arity
        self.doc = doc

    @property
    def display_name(self) -> str:
        return self.name

    def arity_error(self, count: int) -> str | None:
        """Returns an arity mismatch message, or None if `count` is acceptable."""
        if self.arity is None:
            return None
        if isinstance(self.arity, int):
            if count != self.arity:
                return f"Wrong number of arguments. Expected {self.arity}, got {count}"
            return None
        low, high = self.arity
        if count < low or (high is not None and count > high):
            expected = f"at least {low}" if high is None else f"{low} to {high}"
            return f"Wrong number of arguments. Expected {expected}, got {count}"
        return None

    def inspect(self) -> str:
        return f"<builtin {self.name}>"


MethodCallable = Callable[["InstanceObject", list[MutantObject]], MutantObject]


class BuiltinMethod(MutantObject):
    """A host-implemented method living in a class method table."""

    type_name = ObjectType.BUILTIN

    def __init__(self, name: str, fn: MethodCallable, arity: int = 0) -> None:
        self.name = name
        self.fn = fn
        self.arity = arity

    @property
    def parameters(self) -> tuple[str, ...]:
        return tuple(f"arg{i}" for i in range(self.arity))

    def inspect(self) -> str:
        return f"<builtin method {self.name}>"


Method = FunctionObject | BuiltinMethod


class BoundMethod(MutantObject):
    """A method paired with the instance it was looked up on.

    Attributes:
        instance (InstanceObject): Receiver bound to `this`.
        method (Method): The method implementation.
        owner (ClassObject): Class whose table defines the method; this is the
            class context while the method runs.
    """

    type_name = ObjectType.BOUND_METHOD

    def __init__(self, instance: InstanceObject, method: Method, owner: ClassObject) -> None:
        self.instance = instance
        self.method = method
        self.owner = owner

    @property
    def display_name(self) -> str:
        return f"{self.owner.name}.{self.method.name}"

    def inspect(self) -> str:
        return f"<bound method {self.display_name}>"


# Classes


class ClassObject(MutantObject):
    """A class value.

    Attributes:
        name (str): Declared class name.
        parent (ClassObject | None): Superclass; only the root class has None.
        constructor (FunctionObject | None): The class's own constructor.
        methods (dict[str, Method]): The class's own methods.
        env (Environment | None): Class-body environment the methods close over.
    """

    type_name = ObjectType.CLASS

    def __init__(
        self,
        name: str,
        parent: ClassObject | None = None,
        constructor: FunctionObject | None = None,
        methods: dict[str, Method] | None = None,
        env: Environment | None = None,
    ) -> None:
        self.name = name
        self.parent = parent
        self.constructor = constructor
        self.methods: dict[str, Method] = methods or {}
        self.env = env

    def lineage(self) -> Iterator[ClassObject]:
        """Yields this class, then each ancestor up to the root."""
        cls: ClassObject | None = self
        while cls is not None:
            yield cls
            cls = cls.parent

    def find_method(self, name: str) -> tuple[Method, ClassObject] | None:
        """Looks `name` up along the parent chain; returns (method, owning class)."""
        for cls in self.lineage():
            method = cls.methods.get(name)
            if method is not None:
                return method, cls
        return None

    def find_constructor(self) -> tuple[FunctionObject, ClassObject] | None:
        """Returns the nearest constructor along the parent chain and its class."""
        for cls in self.lineage():
            if cls.constructor is not None:
                return cls.constructor, cls
        return None

    def is_subclass_of(self, other: ClassObject) -> bool:
        return any(cls is other for cls in self.lineage())

    def inspect(self) -> str:
        if self.parent is not None:
            return f"<class {self.name} extends {self.parent.name}>"
        return f"<class {self.name}>"


class InstanceObject(MutantObject):
    """An object created by `new`; owns a mutable property store."""

    type_name = ObjectType.INSTANCE

    def __init__(self, cls: ClassObject) -> None:
        self.cls = cls
        self.properties: dict[str, MutantObject] = {}

    def identity(self) -> str:
        return f"{self.cls.name}@{id(self) & 0xFFFFFFFF:x}"

    def inspect(self) -> str:
        if not self.properties:
            return f"{self.cls.name} {{}}"

        def render() -> str:
            body = ", ".join(f"{k}: {represent(v)}" for k, v in self.properties.items())
            return f"{self.cls.name} {{{body}}}"

        return render_once(self, f"{self.cls.name} {{...}}", render)


# Errors and signals


class ErrorObject(MutantObject):
    """A runtime failure, propagated like a return value.

    Attributes:
        message (str): Description of what went wrong.
        kind (str): Error category, e.g. "TypeMismatchError".
        line (int | None): Source line of the failing node, if known.
        col (int | None): Source column of the failing node, if known.
        stack_trace (list[StackFrame]): Frames active when the error was made,
            innermost first.
        source_context (str | None): Rendered source excerpt with a caret.
    """

    type_name = ObjectType.ERROR

    def __init__(
        self,
        message: str,
        kind: str = "RuntimeError",
        line: int | None = None,
        col: int | None = None,
        stack_trace: list[StackFrame] | None = None,
        source_context: str | None = None,
    ) -> None:
        self.message = message or "Unknown error"
        self.kind = kind
        self.line = line
        self.col = col
        self.stack_trace: list[StackFrame] = list(stack_trace or [])
        self.source_context = source_context

    @property
    def has_position(self) -> bool:
        return self.line is not None

    def inspect(self) -> str:
        return f"ERROR: {self.message}"

    def is_truthy(self) -> bool:
        return False

    def format_stack_trace(self) -> str:
        if not self.stack_trace:
            return "No stack trace available"
        lines = ["Stack trace (most recent call first):"]
        lines.extend(f"  {frame.format()}" for frame in self.stack_trace)
        return "\n".join(lines)

    def detailed(self) -> str:
        """Message plus position, source excerpt and stack trace, where known."""
        out = f"{self.kind}: {self.message}"
        if self.has_position:
            out += f"\n   at line {self.line}, column {self.col}"
        if self.source_context:
            out += f"\n\n{self.source_context}"
        if self.stack_trace:
            out += f"\n\n{self.format_stack_trace()}"
        return out

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, ErrorObject) and other.message == self.message

    def __hash__(self) -> int:
        return hash(self.message)


class ReturnValue(MutantObject):
    type_name = ObjectType.RETURN

    def __init__(self, value: MutantObject) -> None:
        self.value = value

    def inspect(self) -> str:
        return self.value.inspect()


class BreakSignal(MutantObject):
    type_name = ObjectType.BREAK

    def inspect(self) -> str:
        return "break"


class ContinueSignal(MutantObject):
    type_name = ObjectType.CONTINUE

    def inspect(self) -> str:
        return "continue"


BREAK = BreakSignal()
CONTINUE = ContinueSignal()

SIGNAL_TYPES = (ReturnValue, BreakSignal, ContinueSignal, ErrorObject)


def is_error(obj: MutantObject | None) -> bool:
    return isinstance(obj, ErrorObject)


def is_signal(obj: MutantObject | None) -> bool:
    """True for anything that must abort the enclosing statement sequence."""
    return isinstance(obj, SIGNAL_TYPES)


def is_callable(obj: MutantObject) -> bool:
    return isinstance(obj, (FunctionObject, BuiltinFunction, BoundMethod))


# Root class

ROOT_CLASS_NAME = "Object"


def _to_string(instance: InstanceObject, args: list[MutantObject]) -> MutantObject:
    return StringObject(instance.identity())


def _equals(instance: InstanceObject, args: list[MutantObject]) -> MutantObject:
    return native_bool(args[0] is instance)


def _hash_code(instance: InstanceObject, args: list[MutantObject]) -> MutantObject:
    return IntegerObject(id(instance) & 0x7FFFFFFF)


def _get_class(instance: InstanceObject, args: list[MutantObject]) -> MutantObject:
    return instance.cls


def build_object_class() -> ClassObject:
    """Creates the root `Object` class every parentless class inherits from."""
    methods: dict[str, Method] = {
        "toString": BuiltinMethod("toString", _to_string, 0),
        "equals": BuiltinMethod("equals", _equals, 1),
        "hashCode": BuiltinMethod("hashCode", _hash_code, 0),
        "getClass": BuiltinMethod("getClass", _get_class, 0),
    }
    return ClassObject(ROOT_CLASS_NAME, None, None, methods, None)
