"""
Interpreter facade: lex, parse and evaluate Mutant source in one call.

An `Interpreter` keeps a single global environment across `run()` calls,
which is what the REPL needs: a function defined on one line is callable on
the next. Each `run()` reports its outcome as an `ExecutionResult` instead
of raising, with lexical failures folded into `parse_errors`.

Usage:
    >>> interp = Interpreter()
    >>> interp.run("let x = 40;").ok
    True
    >>> interp.run("x + 2;").value.inspect()
    '42'
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import TextIO

from mutant.mutant_ast import Program
from mutant.mutant_builtins import BuiltinTable, build_builtins
from mutant.mutant_config import InterpreterConfig
from mutant.mutant_environment import Environment
from mutant.mutant_evaluator import Evaluator
from mutant.mutant_lexer import Lexer, LexerError
from mutant.mutant_objects import NULL, ErrorObject, MutantObject
from mutant.mutant_parser import ParseError, Parser

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

MUTANT_VERSION = "0.1.0"


@dataclass
class ExecutionResult:
    """Outcome of running one piece of source.

    Attributes:
        value (MutantObject): Value of the last statement, or NULL.
        parse_errors (list[SyntaxError]): Lexer or parser errors; when
            present nothing was evaluated.
        error (ErrorObject | None): Runtime error that stopped evaluation.
    """

    value: MutantObject = NULL
    parse_errors: list[SyntaxError] = field(default_factory=list)
    error: ErrorObject | None = None

    @property
    def ok(self) -> bool:
        return not self.parse_errors and self.error is None


class Interpreter:
    """Runs Mutant programs against a persistent global scope.

    Args:
        config: Resource limits; defaults to `InterpreterConfig()`.
        output: Stream for `print`/`println`; defaults to `sys.stdout`.
        builtins: Builtin table; defaults to `build_builtins(output)`.
    """

    def __init__(
        self,
        config: InterpreterConfig | None = None,
        output: TextIO | None = None,
        builtins: BuiltinTable | None = None,
    ) -> None:
        self.config = config or InterpreterConfig()
        self.output = output if output is not None else sys.stdout
        self.builtins = builtins if builtins is not None else build_builtins(self.output)
        self.env = Environment()
        self.evaluator = Evaluator(self.builtins, self.config)
        if sys.getrecursionlimit() < self.config.recursion_limit:
            sys.setrecursionlimit(self.config.recursion_limit)

    def parse(self, source: str) -> tuple[Program | None, list[SyntaxError]]:
        """Parses `source`; returns (program or None, errors)."""
        try:
            tokens = Lexer.from_source(source).tokenize_all()
        except LexerError as e:
            logger.debug("Lexing failed: %s", e)
            return None, [e]
        parser = Parser(tokens, source=source)
        program = parser.parse_program()
        errors: list[SyntaxError] = list(parser.get_errors())
        return program, errors

    def run(self, source: str) -> ExecutionResult:
        """Lexes, parses and evaluates `source` in the global environment."""
        program, errors = self.parse(source)
        if errors or program is None:
            return ExecutionResult(parse_errors=errors)

        self.evaluator.source = source
        self.evaluator.call_stack.clear()
        value = self.evaluator.evaluate(program, self.env)
        if isinstance(value, ErrorObject):
            return ExecutionResult(value=value, error=value)
        return ExecutionResult(value=value)

    def format_errors(self, result: ExecutionResult, source: str) -> str:
        """Renders every problem in `result` for display, with source context."""
        lines: list[str] = []
        for err in result.parse_errors:
            if isinstance(err, ParseError):
                lines.append(err.format_with_source(source, self.config.context_lines))
            else:
                lines.append(f"Lexer Error: {err}")
        if result.error is not None:
            lines.append(result.error.detailed())
        return "\n".join(lines)

    def reset(self) -> None:
        """Drops every global binding."""
        self.env = Environment()
        self.evaluator.call_stack.clear()

    def global_names(self) -> list[str]:
        return self.env.names()


__all__ = ["MUTANT_VERSION", "ExecutionResult", "Interpreter"]
