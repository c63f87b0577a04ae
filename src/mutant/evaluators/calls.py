"""
Function, builtin and method invocation.

All callables share one calling convention: arguments are evaluated left to
right in the caller's scope, the arity is checked, a stack frame is pushed,
and the callee runs. A user function body runs in a fresh child of the
function's captured environment, never the caller's.
"""

from __future__ import annotations

import logging

from mutant.evaluators.base import CLASS_CONTEXT_NAME, THIS_NAME, EvaluatorBase
from mutant.mutant_ast import ASTNode, CallExpression, Expression
from mutant.mutant_callstack import FrameType, StackFrame, StackOverflowError
from mutant.mutant_environment import Environment
from mutant.mutant_errors import (
    ErrorKind,
    builtin_failure,
    not_a_function,
    wrong_argument_count,
)
from mutant.mutant_objects import (
    BoundMethod,
    BuiltinFunction,
    BuiltinMethod,
    ClassObject,
    ErrorObject,
    FunctionObject,
    InstanceObject,
    MutantObject,
    is_signal,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class CallMixin(EvaluatorBase):
    """Calls to user functions, host builtins and bound methods.

    Every call pushes a frame on `call_stack` for its duration, so stack
    traces and the depth limit see builtins and methods as well.
    """

    def eval_call(self, node: CallExpression, env: Environment) -> MutantObject:
        """Evaluates the callee, then the arguments left to right, then calls."""
        callee = self.visit(node.function, env)
        if is_signal(callee):
            return callee
        args = self.eval_arguments(node.arguments, env)
        if isinstance(args, MutantObject):
            return args
        return self.apply_function(callee, args, node)

    def eval_arguments(
        self, nodes: tuple[Expression, ...], env: Environment
    ) -> list[MutantObject] | MutantObject:
        """Evaluates call arguments; returns the first signal instead if one occurs."""
        values: list[MutantObject] = []
        for arg in nodes:
            value = self.visit(arg, env)
            if is_signal(value):
                return value
            values.append(value)
        return values

    def apply_function(self, callee: MutantObject, args: list[MutantObject], node: ASTNode) -> MutantObject:
        """Dispatches on the callee type.

        Returns:
            The call's result, or a TypeError when `callee` is not callable.
            Classes get a hint to use `new`.
        """
        if isinstance(callee, FunctionObject):
            return self.call_function(callee, args, node)
        if isinstance(callee, BuiltinFunction):
            return self.call_builtin(callee, args, node)
        if isinstance(callee, BoundMethod):
            return self.call_method(callee, args, node)
        if isinstance(callee, ClassObject):
            return self.error(
                f"Class '{callee.name}' must be instantiated with 'new'", node, ErrorKind.TYPE
            )
        return self.error(not_a_function(callee.type_name), node, ErrorKind.TYPE)

    def frame_for(self, name: str, node: ASTNode, frame_type: FrameType) -> StackFrame:
        """Builds the call frame for `node`; synthetic nodes carry no position."""
        line = node.line if node.line > 0 else None
        return StackFrame(name, line, node.col if line else None, frame_type)

    def call_function(
        self,
        fn: FunctionObject,
        args: list[MutantObject],
        node: ASTNode,
        this: InstanceObject | None = None,
        class_context: ClassObject | None = None,
        frame_type: FrameType = FrameType.USER_FUNCTION,
        name: str | None = None,
    ) -> MutantObject:
        """Invokes a user function, optionally as a method bound to `this`.

        Args:
            fn: The function to run.
            args: Already-evaluated arguments.
            node: Call site, used for error positions and the stack frame.
            this: Receiver when called as a method.
            class_context: Class that defines the method, for `super` lookups.
            frame_type: Kind of frame shown in stack traces.
            name: Frame name; defaults to the function's display name.

        Returns:
            The function's result with any return signal unwrapped, or an
            ErrorObject on an arity mismatch or stack overflow.
        """
        if len(args) != len(fn.parameters):
            return self.error(
                wrong_argument_count(len(fn.parameters), len(args)), node, ErrorKind.ARGUMENT
            )

        call_env = fn.env.enclosed()
        if this is not None and class_context is not None:
            call_env.define(THIS_NAME, this)
            call_env.define(CLASS_CONTEXT_NAME, class_context)
        for param, arg in zip(fn.parameters, args):
            call_env.define(param, arg)

        try:
            with self.call_stack.frame(self.frame_for(name or fn.display_name, node, frame_type)):
                result = self.run_statements(fn.body.statements, call_env)
        except StackOverflowError as exc:
            return self.error(str(exc), node, ErrorKind.STACK_OVERFLOW)
        return self.unwrap(result)

    def call_builtin(self, builtin: BuiltinFunction, args: list[MutantObject], node: ASTNode) -> MutantObject:
        """Invokes a host builtin; Python failures inside it become builtin errors."""
        message = builtin.arity_error(len(args))
        if message is not None:
            return self.error(message, node, ErrorKind.ARGUMENT)

        try:
            with self.call_stack.frame(self.frame_for(builtin.name, node, FrameType.BUILTIN)):
                result = builtin.fn(args)
        except StackOverflowError as exc:
            return self.error(str(exc), node, ErrorKind.STACK_OVERFLOW)
        except (ArithmeticError, ValueError, TypeError) as exc:
            logger.debug("Builtin %s raised %r", builtin.name, exc)
            result = ErrorObject(str(exc), ErrorKind.BUILTIN)

        if isinstance(result, ErrorObject):
            if result.kind == ErrorKind.USER:
                return self.locate(result, node)
            return self.error(builtin_failure(builtin.name, result.message), node, ErrorKind.BUILTIN)
        return result

    def call_method(self, bound: BoundMethod, args: list[MutantObject], node: ASTNode) -> MutantObject:
        """Invokes a method with `this` bound to the receiver.

        Host-implemented root methods such as `toString` run directly; user
        methods run through `call_function` with the defining class as the
        `super` context.
        """
        method = bound.method
        if isinstance(method, BuiltinMethod):
            if len(args) != method.arity:
                return self.error(
                    wrong_argument_count(method.arity, len(args)), node, ErrorKind.ARGUMENT
                )
            try:
                with self.call_stack.frame(
                    self.frame_for(bound.display_name, node, FrameType.BUILTIN)
                ):
                    return method.fn(bound.instance, args)
            except StackOverflowError as exc:
                return self.error(str(exc), node, ErrorKind.STACK_OVERFLOW)
        return self.call_function(
            method,
            args,
            node,
            this=bound.instance,
            class_context=bound.owner,
            frame_type=FrameType.METHOD,
            name=bound.display_name,
        )
