"""
Mutant tree-walking evaluator.

The `Evaluator` walks the AST produced by `mutant_parser` and computes
runtime values (`mutant_objects`). Dispatch is by node kind: a node whose
`kind` is `"while"` is handled by `eval_while`, and so on. The handlers are
grouped by concern in `mutant.evaluators`:

    operators     prefix, infix, logical, numeric promotion
    statements    program, blocks, let/const, return, if, loops
    calls         user functions, builtins, bound methods, call stack
    classes       class definitions, new, this, super, properties
    collections   arrays, hashes, indexing, assignment

Literal and identifier handlers live here.

Runtime faults are values: every handler returns an `ErrorObject` rather
than raising, and `evaluate()` converts host recursion exhaustion into a
stack overflow error, so no exception escapes for a faulty program.

Usage:
    >>> from mutant.mutant_parser import parse_program_from_string
    >>> program, errors = parse_program_from_string("let x = 2; x * 21;")
    >>> evaluator = Evaluator()
    >>> evaluator.evaluate(program, Environment()).inspect()
    '42'
"""

from __future__ import annotations

import logging

from mutant.evaluators.collections import CollectionMixin
from mutant.evaluators.statements import StatementMixin
from mutant.mutant_ast import (
    BooleanLiteral,
    FloatLiteral,
    FStringLiteral,
    FunctionLiteral,
    Identifier,
    IntegerLiteral,
    NullLiteral,
    StringLiteral,
)
from mutant.mutant_environment import Environment
from mutant.mutant_errors import ErrorKind, identifier_not_found
from mutant.mutant_objects import (
    NULL,
    FloatObject,
    FunctionObject,
    IntegerObject,
    MutantObject,
    StringObject,
    is_signal,
    native_bool,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class Evaluator(StatementMixin, CollectionMixin):
    """Evaluates Mutant AST nodes against an environment.

    Combines the handler mixins and adds the literal, identifier and
    function-literal handlers. Construction (builtin table, configuration,
    source text) is inherited from `EvaluatorBase`.
    """

    def eval_integer(self, node: IntegerLiteral, env: Environment) -> MutantObject:
        return IntegerObject(node.value)

    def eval_float(self, node: FloatLiteral, env: Environment) -> MutantObject:
        return FloatObject(node.value)

    def eval_string(self, node: StringLiteral, env: Environment) -> MutantObject:
        return StringObject(node.value)

    def eval_boolean(self, node: BooleanLiteral, env: Environment) -> MutantObject:
        return native_bool(node.value)

    def eval_null(self, node: NullLiteral, env: Environment) -> MutantObject:
        return NULL

    def eval_fstring(self, node: FStringLiteral, env: Environment) -> MutantObject:
        """Interleaves literal parts with the display form of each interpolation."""
        pieces = [node.parts[0]]
        for expr, part in zip(node.expressions, node.parts[1:]):
            value = self.visit(expr, env)
            if is_signal(value):
                return value
            pieces.append(value.inspect())
            pieces.append(part)
        return StringObject("".join(pieces))

    def eval_identifier(self, node: Identifier, env: Environment) -> MutantObject:
        """Looks `node` up lexically, then among the builtins."""
        value = self.resolve_name(node.name, env)
        if value is None:
            return self.error(identifier_not_found(node.name), node, ErrorKind.NAME)
        return value

    def eval_function(self, node: FunctionLiteral, env: Environment) -> MutantObject:
        return FunctionObject(tuple(p.name for p in node.parameters), node.body, env, node.name)


__all__ = ["Evaluator"]
