"""
Shared state and plumbing for the evaluator mixins.

`EvaluatorBase` owns everything the node handlers have in common: the
injected builtin table, the configuration, the call stack, the root
`Object` class, node dispatch and runtime error construction. Handlers
live in the sibling mixin modules and are looked up by node kind, so
`IfExpression` (kind `"if"`) is evaluated by `eval_if`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from mutant.mutant_ast import ASTNode, Statement
from mutant.mutant_callstack import CallStack, stack_overflow_message
from mutant.mutant_config import InterpreterConfig
from mutant.mutant_diagnostics import source_context
from mutant.mutant_environment import Environment
from mutant.mutant_errors import ErrorKind
from mutant.mutant_objects import (
    BREAK,
    CONTINUE,
    NULL,
    ROOT_CLASS_NAME,
    BuiltinFunction,
    ErrorObject,
    MutantObject,
    ReturnValue,
    build_object_class,
    is_signal,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Scope keys for method context; programs cannot declare either name.
THIS_NAME = "this"
CLASS_CONTEXT_NAME = "<class>"

MAX_TRACE_FRAMES = 50


class EvaluatorBase:
    """Dispatch and error plumbing shared by every handler mixin.

    Attributes:
        builtins (dict[str, BuiltinFunction]): Fallback bindings consulted
            after lexical lookup fails.
        config (InterpreterConfig): Limits and diagnostic switches.
        source (str): Program text, used for error source context.
        call_stack (CallStack): Active call frames.
        object_class (ClassObject): Root class of every class hierarchy.
    """

    def __init__(
        self,
        builtins: Mapping[str, BuiltinFunction] | None = None,
        config: InterpreterConfig | None = None,
        source: str = "",
    ) -> None:
        self.config = config or InterpreterConfig()
        self.builtins: dict[str, BuiltinFunction] = dict(builtins) if builtins is not None else {}
        self.source = source
        self.call_stack = CallStack(self.config.max_call_depth)
        self.object_class = build_object_class()

    def evaluate(self, node: ASTNode, env: Environment) -> MutantObject:
        """Evaluates `node` in `env`; user-program faults come back as `ErrorObject`."""
        try:
            return self.visit(node, env)
        except RecursionError:
            logger.debug("Host recursion limit reached while evaluating %s", node.kind)
            self.call_stack.clear()
            return self.error(
                stack_overflow_message(self.call_stack.max_depth), node, ErrorKind.STACK_OVERFLOW
            )

    def visit(self, node: ASTNode, env: Environment) -> MutantObject:
        handler = getattr(self, f"eval_{node.kind}", None)
        if handler is None:
            return self.error(f"Cannot evaluate node of kind '{node.kind}'", node)
        result: MutantObject = handler(node, env)
        return result

    def error(
        self,
        message: str,
        node: ASTNode | None = None,
        kind: str = ErrorKind.RUNTIME,
    ) -> ErrorObject:
        """Builds a positioned runtime error, with stack trace and source excerpt."""
        line: int | None = None
        col: int | None = None
        if node is not None and node.line > 0:
            line, col = node.line, node.col
        trace = self.call_stack.snapshot()[:MAX_TRACE_FRAMES] if self.config.stack_traces else []
        context = None
        if line is not None and col is not None and self.source:
            context = source_context(self.source, line, col, self.config.context_lines) or None
        return ErrorObject(message, kind, line, col, trace, context)

    def locate(self, err: ErrorObject, node: ASTNode) -> ErrorObject:
        """Gives a position to an error produced without one (e.g. by a builtin)."""
        if err.has_position or node.line <= 0:
            return err
        return self.error(err.message, node, err.kind)

    def run_statements(self, statements: tuple[Statement, ...], env: Environment) -> MutantObject:
        """Runs `statements` in `env` itself; the value is the last one produced."""
        result: MutantObject = NULL
        for statement in statements:
            result = self.visit(statement, env)
            if is_signal(result):
                return result
        return result

    def resolve_name(self, name: str, env: Environment) -> MutantObject | None:
        """Lexical scopes first, then the builtin table, then the root class."""
        value = env.get(name)
        if value is not None:
            return value
        builtin = self.builtins.get(name)
        if builtin is not None:
            return builtin
        if name == ROOT_CLASS_NAME:
            return self.object_class
        return None

    @staticmethod
    def unwrap(result: MutantObject) -> MutantObject:
        """Turns a function body's outcome into the call's value."""
        if isinstance(result, ReturnValue):
            return result.value
        if result is BREAK or result is CONTINUE:
            return NULL
        return result
