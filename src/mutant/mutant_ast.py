"""
Defines the abstract syntax tree (AST) node set for the Mutant programming language.

Classes:
    ASTNode:
        Base class for every node. Subclasses declare their child slots in
        `fields`; the base class handles construction, immutability, structural
        equality, dictionary serialization and debugging output.

    Expression / Statement:
        Marker bases separating the two syntactic categories.

    ASTDict:
        TypedDict representation of a serialized node, suitable for JSON output.

Each ASTNode tracks:
    kind (str): The syntactic construct (e.g. "infix", "call", "class").
        The evaluator dispatches on this name.
    line (int): 1-based source line of the token that anchors the node.
    col (int): 0-based source column of that token.

Nodes are immutable once built: list arguments are frozen into tuples and
attribute assignment raises `AttributeError`. Every node owns its children
exclusively, so the tree is a strict tree.

`str(node)` renders a fully parenthesized source-like form that makes
precedence visible:

    >>> str(InfixExpression("+", IntegerLiteral(2), InfixExpression("*", IntegerLiteral(3), IntegerLiteral(4))))
    '(2 + (3 * 4))'
"""

import json
from collections.abc import Iterator
from typing import Any, TypedDict


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The type of AST node (e.g., "function", "call", "if").
        line (int): Line number where the node originates.
        col (int): Column number where the node originates.

    Node-specific fields are added under their own names.
    """

    kind: str
    line: int
    col: int


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, tuple):
        return tuple(_freeze(v) for v in value)
    return value


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    return value


class ASTNode:
    """
    Base class for all Mutant syntax tree nodes.

    Subclasses set `kind`, list their child slots in `fields` and may give
    defaults in `defaults`. Positional arguments fill `fields` in order.

    Args:
        *args: Values for `fields`, in declaration order.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
        **kwargs: Values for `fields`, by name.

    Raises:
        TypeError: On unknown, duplicated or missing fields.
    """

    kind: str = "node"
    fields: tuple[str, ...] = ()
    defaults: dict[str, Any] = {}

    line: int
    col: int

    def __init__(self, *args: Any, line: int = 0, col: int = 0, **kwargs: Any):
        if len(args) > len(self.fields):
            raise TypeError(
                f"{type(self).__name__} takes at most {len(self.fields)} fields, got {len(args)}"
            )
        values = dict(zip(self.fields, args))
        for name, value in kwargs.items():
            if name not in self.fields:
                raise TypeError(f"{type(self).__name__} has no field {name!r}")
            if name in values:
                raise TypeError(f"{type(self).__name__} got field {name!r} twice")
            values[name] = value
        for name in self.fields:
            if name in values:
                value = values[name]
            elif name in self.defaults:
                value = self.defaults[name]
            else:
                raise TypeError(f"{type(self).__name__} missing field {name!r}")
            object.__setattr__(self, name, _freeze(value))
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def __repr__(self) -> str:
        parts = [f"{name}={getattr(self, name)!r}" for name in self.fields]
        return f"{type(self).__name__}({', '.join(parts)})"

    def __str__(self) -> str:
        return repr(self)

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return (
            self.line == other.line
            and self.col == other.col
            and all(getattr(self, f) == getattr(other, f) for f in self.fields)
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.line, self.col))

    def iter_children(self) -> Iterator["ASTNode"]:
        """Yields every direct child node, in field order."""
        for name in self.fields:
            yield from _nodes_in(getattr(self, name))

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"kind": self.kind, "line": self.line, "col": self.col}
        for name in self.fields:
            data[name] = _serialize(getattr(self, name))
        return data  # type: ignore[return-value]

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def _nodes_in(value: Any) -> Iterator[ASTNode]:
    if isinstance(value, ASTNode):
        yield value
    elif isinstance(value, tuple):
        for item in value:
            yield from _nodes_in(item)


class Expression(ASTNode):
    """Base for nodes that produce a value."""


class Statement(ASTNode):
    """Base for nodes that appear in statement position."""


def _join(items: tuple[Any, ...]) -> str:
    return ", ".join(str(item) for item in items)


# Programs and blocks


class Program(ASTNode):
    kind = "program"
    fields = ("statements",)
    defaults = {"statements": ()}
    statements: tuple[Statement, ...]

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


class BlockStatement(Statement):
    kind = "block"
    fields = ("statements",)
    defaults = {"statements": ()}
    statements: tuple[Statement, ...]

    def __str__(self) -> str:
        return "{ " + " ".join(str(s) for s in self.statements) + " }"


# Literals


class Identifier(Expression):
    kind = "identifier"
    fields = ("name",)
    name: str

    def __str__(self) -> str:
        return self.name


class IntegerLiteral(Expression):
    kind = "integer"
    fields = ("value",)
    value: int

    def __str__(self) -> str:
        return str(self.value)


class FloatLiteral(Expression):
    kind = "float"
    fields = ("value",)
    value: float

    def __str__(self) -> str:
        return repr(self.value)


class StringLiteral(Expression):
    kind = "string"
    fields = ("value",)
    value: str

    def __str__(self) -> str:
        return json.dumps(self.value)


class FStringLiteral(Expression):
    """An interpolated string: `parts` always has one more entry than `expressions`."""

    kind = "fstring"
    fields = ("parts", "expressions")
    parts: tuple[str, ...]
    expressions: tuple[Expression, ...]

    def __str__(self) -> str:
        out = self.parts[0]
        for expr, part in zip(self.expressions, self.parts[1:]):
            out += "{" + str(expr) + "}" + part
        return f'f"{out}"'


class BooleanLiteral(Expression):
    kind = "boolean"
    fields = ("value",)
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class NullLiteral(Expression):
    kind = "null"

    def __str__(self) -> str:
        return "null"


class ArrayLiteral(Expression):
    kind = "array"
    fields = ("elements",)
    defaults = {"elements": ()}
    elements: tuple[Expression, ...]

    def __str__(self) -> str:
        return f"[{_join(self.elements)}]"


class HashLiteral(Expression):
    """`{key: value, ...}`; `pairs` is a tuple of (key, value) expression pairs."""

    kind = "hash"
    fields = ("pairs",)
    defaults = {"pairs": ()}
    pairs: tuple[tuple[Expression, Expression], ...]

    def __str__(self) -> str:
        return "{" + ", ".join(f"{k}: {v}" for k, v in self.pairs) + "}"


class FunctionLiteral(Expression):
    kind = "function"
    fields = ("parameters", "body", "name")
    defaults = {"name": None}
    parameters: tuple[Identifier, ...]
    body: BlockStatement
    name: str | None

    def __str__(self) -> str:
        label = f"fn {self.name}" if self.name else "fn"
        return f"{label}({_join(self.parameters)}) {self.body}"


# Operators and access


class PrefixExpression(Expression):
    kind = "prefix"
    fields = ("operator", "right")
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


class InfixExpression(Expression):
    kind = "infix"
    fields = ("operator", "left", "right")
    operator: str
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


class AssignmentExpression(Expression):
    """`target op value`, where op is `=` or a compound form such as `+=`."""

    kind = "assign"
    fields = ("target", "operator", "value")
    target: Expression
    operator: str
    value: Expression

    def __str__(self) -> str:
        return f"({self.target} {self.operator} {self.value})"


class IndexExpression(Expression):
    kind = "index"
    fields = ("left", "index")
    left: Expression
    index: Expression

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


class CallExpression(Expression):
    kind = "call"
    fields = ("function", "arguments")
    defaults = {"arguments": ()}
    function: Expression
    arguments: tuple[Expression, ...]

    def __str__(self) -> str:
        return f"{self.function}({_join(self.arguments)})"


class PropertyExpression(Expression):
    kind = "property"
    fields = ("target", "property")
    target: Expression
    property: Identifier

    def __str__(self) -> str:
        return f"{self.target}.{self.property}"


class IfExpression(Expression):
    """`if`/`elif`/`else` chain; conditions and consequences are parallel tuples."""

    kind = "if"
    fields = ("conditions", "consequences", "alternative")
    defaults = {"alternative": None}
    conditions: tuple[Expression, ...]
    consequences: tuple[BlockStatement, ...]
    alternative: BlockStatement | None

    def __str__(self) -> str:
        out = ""
        for i, (cond, block) in enumerate(zip(self.conditions, self.consequences)):
            out += ("if" if i == 0 else " elif") + f" {cond} {block}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


# Objects


class NewExpression(Expression):
    kind = "new"
    fields = ("class_ref", "arguments")
    defaults = {"arguments": ()}
    class_ref: Expression
    arguments: tuple[Expression, ...]

    def __str__(self) -> str:
        return f"new {self.class_ref}({_join(self.arguments)})"


class ThisExpression(Expression):
    kind = "this"

    def __str__(self) -> str:
        return "this"


class SuperExpression(Expression):
    """`super(args)` when `method` is None, otherwise `super.method(args)`."""

    kind = "super"
    fields = ("method", "arguments")
    defaults = {"method": None, "arguments": ()}
    method: str | None
    arguments: tuple[Expression, ...]

    def __str__(self) -> str:
        head = "super" if self.method is None else f"super.{self.method}"
        return f"{head}({_join(self.arguments)})"


# Statements


class LetStatement(Statement):
    kind = "let"
    fields = ("name", "value")
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


class ConstStatement(Statement):
    kind = "const"
    fields = ("name", "value")
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f"const {self.name} = {self.value};"


class ReturnStatement(Statement):
    kind = "return"
    fields = ("value",)
    defaults = {"value": None}
    value: Expression | None

    def __str__(self) -> str:
        return "return;" if self.value is None else f"return {self.value};"


class ExpressionStatement(Statement):
    kind = "expression"
    fields = ("expression",)
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)


class WhileStatement(Statement):
    kind = "while"
    fields = ("condition", "body")
    condition: Expression
    body: BlockStatement

    def __str__(self) -> str:
        return f"while {self.condition} {self.body}"


class ForStatement(Statement):
    """C-style loop; each of `init`, `condition` and `update` may be None."""

    kind = "for"
    fields = ("init", "condition", "update", "body")
    defaults = {"init": None, "condition": None, "update": None}
    init: Statement | None
    condition: Expression | None
    update: Expression | None
    body: BlockStatement

    def __str__(self) -> str:
        init = str(self.init).rstrip(";") if self.init is not None else ""
        cond = str(self.condition) if self.condition is not None else ""
        update = str(self.update) if self.update is not None else ""
        return f"for ({init}; {cond}; {update}) {self.body}"


class BreakStatement(Statement):
    kind = "break"

    def __str__(self) -> str:
        return "break;"


class ContinueStatement(Statement):
    kind = "continue"

    def __str__(self) -> str:
        return "continue;"


class FunctionStatement(Statement):
    """`fn name(params) { ... }` at statement level; binds `name` in scope."""

    kind = "function_declaration"
    fields = ("name", "function")
    name: Identifier
    function: FunctionLiteral

    def __str__(self) -> str:
        return str(self.function)


class ClassStatement(Statement):
    kind = "class"
    fields = ("name", "parent", "constructor", "methods")
    defaults = {"parent": None, "constructor": None, "methods": ()}
    name: Identifier
    parent: Identifier | None
    constructor: FunctionLiteral | None
    methods: tuple[FunctionLiteral, ...]

    def __str__(self) -> str:
        head = f"class {self.name}"
        if self.parent is not None:
            head += f" extends {self.parent}"
        members = []
        if self.constructor is not None:
            members.append(f"constructor({_join(self.constructor.parameters)}) {self.constructor.body}")
        for method in self.methods:
            members.append(f"{method.name}({_join(method.parameters)}) {method.body}")
        return head + " { " + " ".join(members) + " }"


__all__ = [
    "ASTDict",
    "ASTNode",
    "ArrayLiteral",
    "AssignmentExpression",
    "BlockStatement",
    "BooleanLiteral",
    "BreakStatement",
    "CallExpression",
    "ClassStatement",
    "ConstStatement",
    "ContinueStatement",
    "Expression",
    "ExpressionStatement",
    "FStringLiteral",
    "FloatLiteral",
    "ForStatement",
    "FunctionLiteral",
    "FunctionStatement",
    "HashLiteral",
    "Identifier",
    "IfExpression",
    "IndexExpression",
    "InfixExpression",
    "IntegerLiteral",
    "LetStatement",
    "NewExpression",
    "NullLiteral",
    "Program",
    "PrefixExpression",
    "PropertyExpression",
    "ReturnStatement",
    "Statement",
    "StringLiteral",
    "SuperExpression",
    "ThisExpression",
    "WhileStatement",
]
