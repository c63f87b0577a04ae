"""
Statements, blocks and control flow.

Every sequence evaluator checks each child result with `is_signal` and
stops at the first `ReturnValue`, `BREAK`, `CONTINUE` or `ErrorObject`,
handing it upward untouched. Loops consume `BREAK` and `CONTINUE`; calls
consume `ReturnValue`; the program unwraps a top-level `ReturnValue`.
"""

from __future__ import annotations

import logging

from mutant.evaluators.base import EvaluatorBase
from mutant.mutant_ast import (
    BlockStatement,
    BreakStatement,
    ConstStatement,
    ContinueStatement,
    ExpressionStatement,
    ForStatement,
    FunctionStatement,
    IfExpression,
    LetStatement,
    Program,
    ReturnStatement,
    Statement,
    WhileStatement,
)
from mutant.mutant_environment import Environment
from mutant.mutant_errors import ErrorKind, already_declared, loop_limit
from mutant.mutant_objects import (
    BREAK,
    CONTINUE,
    NULL,
    ErrorObject,
    FunctionObject,
    MutantObject,
    ReturnValue,
    is_signal,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class StatementMixin(EvaluatorBase):
    """Evaluates programs, blocks, declarations and control flow.

    Declarations return NULL; the value of a block or program is the value
    of its last statement.
    """

    def eval_program(self, node: Program, env: Environment) -> MutantObject:
        """Runs top-level statements in `env`, the global scope.

        Args:
            node: The parsed program.
            env: Global environment, kept across runs by the interpreter.

        Returns:
            The last statement's value. A top-level `return` ends the program
            with its value unwrapped; a stray `break` or `continue` ends it
            with NULL; an error is returned as-is.
        """
        result: MutantObject = NULL
        for statement in node.statements:
            result = self.visit(statement, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, ErrorObject):
                return result
            if result is BREAK or result is CONTINUE:
                return NULL
        return result

    def eval_block(self, node: BlockStatement, env: Environment) -> MutantObject:
        """Runs a braced block in a fresh child scope."""
        return self.run_statements(node.statements, env.enclosed())

    def eval_expression(self, node: ExpressionStatement, env: Environment) -> MutantObject:
        return self.visit(node.expression, env)

    def eval_let(self, node: LetStatement, env: Environment) -> MutantObject:
        return self.declare(node, env, constant=False)

    def eval_const(self, node: ConstStatement, env: Environment) -> MutantObject:
        return self.declare(node, env, constant=True)

    def declare(
        self, node: LetStatement | ConstStatement, env: Environment, constant: bool
    ) -> MutantObject:
        """Binds a new name in the current scope.

        Anonymous function values take the declared name for stack traces.

        Args:
            node: The `let` or `const` statement.
            env: Scope receiving the binding.
            constant: Mark the binding write-once.

        Returns:
            NULL on success, a NameError if `env` already declares the name,
            or whatever signal the initializer produced.
        """
        name = node.name.name
        if env.contains_locally(name):
            return self.error(already_declared(name), node.name, ErrorKind.NAME)
        value = self.visit(node.value, env)
        if is_signal(value):
            return value
        if isinstance(value, FunctionObject) and value.name is None:
            value.name = name
        if constant:
            env.define_constant(name, value)
        else:
            env.define(name, value)
        return NULL

    def eval_function_declaration(self, node: FunctionStatement, env: Environment) -> MutantObject:
        """Binds a named function, closed over `env`, before the body ever runs."""
        name = node.name.name
        if env.contains_locally(name):
            return self.error(already_declared(name), node.name, ErrorKind.NAME)
        literal = node.function
        fn = FunctionObject(tuple(p.name for p in literal.parameters), literal.body, env, name)
        env.define(name, fn)
        return NULL

    def eval_return(self, node: ReturnStatement, env: Environment) -> MutantObject:
        """Wraps the value (NULL for a bare `return`) in a `ReturnValue` signal."""
        if node.value is None:
            return ReturnValue(NULL)
        value = self.visit(node.value, env)
        if is_signal(value):
            return value
        return ReturnValue(value)

    def eval_break(self, node: BreakStatement, env: Environment) -> MutantObject:
        return BREAK

    def eval_continue(self, node: ContinueStatement, env: Environment) -> MutantObject:
        return CONTINUE

    def eval_if(self, node: IfExpression, env: Environment) -> MutantObject:
        """Evaluates the first branch whose condition is truthy.

        Returns:
            The chosen branch's value, or NULL when no branch runs.
        """
        for condition, consequence in zip(node.conditions, node.consequences):
            test = self.visit(condition, env)
            if is_signal(test):
                return test
            if test.is_truthy():
                return self.visit(consequence, env)
        if node.alternative is not None:
            return self.visit(node.alternative, env)
        return NULL

    def loop_limit_error(self, node: Statement) -> ErrorObject:
        limit = self.config.max_loop_iterations
        logger.debug("Loop at line %d exceeded %d iterations", node.line, limit)
        return self.error(loop_limit(limit), node, ErrorKind.LOOP_LIMIT)

    def eval_while(self, node: WhileStatement, env: Environment) -> MutantObject:
        """Runs `while (condition) { body }`.

        `break` ends the loop, `continue` skips to the next test, and any other
        signal leaves the loop and propagates.

        Returns:
            NULL, or a LoopLimitError once the body has run more than
            `max_loop_iterations` times.
        """
        limit = self.config.max_loop_iterations
        iterations = 0
        while True:
            test = self.visit(node.condition, env)
            if is_signal(test):
                return test
            if not test.is_truthy():
                break
            iterations += 1
            if iterations > limit:
                return self.loop_limit_error(node)
            result = self.visit(node.body, env)
            if result is BREAK:
                break
            if result is CONTINUE:
                continue
            if is_signal(result):
                return result
        return NULL

    def eval_for(self, node: ForStatement, env: Environment) -> MutantObject:
        """Runs a C-style `for` loop.

        The initializer binds in a scope of its own that encloses every
        iteration, so closures created in the body share the loop variable.
        `continue` still runs the update clause.

        Returns:
            NULL, a propagated signal, or a LoopLimitError.
        """
        limit = self.config.max_loop_iterations
        loop_env = env.enclosed()
        if node.init is not None:
            init = self.visit(node.init, loop_env)
            if is_signal(init):
                return init
        iterations = 0
        while True:
            if node.condition is not None:
                test = self.visit(node.condition, loop_env)
                if is_signal(test):
                    return test
                if not test.is_truthy():
                    break
            iterations += 1
            if iterations > limit:
                return self.loop_limit_error(node)
            result = self.visit(node.body, loop_env)
            if result is BREAK:
                break
            if result is not CONTINUE and is_signal(result):
                return result
            if node.update is not None:
                update = self.visit(node.update, loop_env)
                if is_signal(update):
                    return update
        return NULL
