"""
Runtime error kinds and message builders.

Runtime faults never raise out of the evaluator; they become `ErrorObject`
values. This module centralizes the wording so that the evaluator, the
builtins and the tests agree on every message.
"""

from __future__ import annotations


class ErrorKind:
    RUNTIME = "RuntimeError"
    TYPE = "TypeError"
    NAME = "NameError"
    INDEX = "IndexError"
    ARGUMENT = "ArgumentError"
    CLASS = "ClassError"
    PROPERTY = "PropertyError"
    ZERO_DIVISION = "ZeroDivisionError"
    STACK_OVERFLOW = "StackOverflowError"
    LOOP_LIMIT = "LoopLimitError"
    BUILTIN = "BuiltinError"
    USER = "UserError"


def type_mismatch(left: str, operator: str, right: str) -> str:
    return f"Type mismatch: {left} {operator} {right}"


def unknown_infix(left: str, operator: str, right: str) -> str:
    return f"Invalid operator: {left} {operator} {right}"


def unknown_prefix(operator: str, right: str) -> str:
    return f"Invalid operator: {operator}{right}"


def null_operation(operator: str) -> str:
    return f"Cannot perform '{operator}' operation with null"


def non_boolean_operand(operator: str, type_name: str) -> str:
    return f"Operator '{operator}' requires boolean operands, got {type_name}"


def identifier_not_found(name: str) -> str:
    return f"Identifier not found: {name}"


def already_declared(name: str) -> str:
    return f"Identifier '{name}' has already been declared"


def assign_to_constant(name: str) -> str:
    return f"Cannot assign to constant '{name}'"


def not_a_function(type_name: str) -> str:
    return f"Not a function: {type_name}"


def wrong_argument_count(expected: int, got: int) -> str:
    return f"Wrong number of arguments. Expected {expected}, got {got}"


def index_out_of_bounds(index: int, length: int) -> str:
    return f"Index out of bounds: {index} is not in the range [0, {max(length - 1, 0)}]"


def index_not_supported(left: str, index: str) -> str:
    return f"Index operator not supported: {left}[{index}]"


def unusable_hash_key(type_name: str) -> str:
    return f"Unusable as hash key: {type_name}"


def builtin_failure(name: str, message: str) -> str:
    return f"Error in evaluation of the builtin function {name}: {message}"


def loop_limit(limit: int) -> str:
    return f"Loop exceeded maximum iterations ({limit})"


def modulo_by_zero() -> str:
    return "modulo by zero"


def class_already_defined(name: str) -> str:
    return f"Class '{name}' is already defined in this scope"


def parent_not_found(name: str) -> str:
    return f"Parent class not found: {name}"


def parent_not_a_class(name: str, type_name: str) -> str:
    return f"Cannot extend '{name}': {type_name} is not a class"


def circular_inheritance(name: str, parent: str) -> str:
    return f"Circular inheritance detected: {name} cannot extend {parent}"


def not_a_class(type_name: str) -> str:
    return f"Cannot instantiate non-class object: {type_name}"


def no_constructor(class_name: str) -> str:
    return f"No constructor found for class: {class_name}"


def this_unavailable() -> str:
    return "'this' is not available in this context"


def super_outside_class() -> str:
    return "'super' can only be used inside a class method"


def no_parent_class(class_name: str) -> str:
    return f"No parent class found for class: {class_name}"


def parent_method_not_found(method: str, parent: str) -> str:
    return f"Method '{method}' not found in parent class '{parent}'"


def property_not_found(name: str, class_name: str) -> str:
    return f"Property '{name}' not found on instance of {class_name}"


def property_access_unsupported(name: str, type_name: str) -> str:
    return f"Cannot access property '{name}' on {type_name}"


def property_assign_unsupported(name: str, type_name: str) -> str:
    return f"Cannot set property '{name}' on {type_name}"


def invalid_assignment_target(kind: str) -> str:
    return f"Invalid assignment target: {kind}"
