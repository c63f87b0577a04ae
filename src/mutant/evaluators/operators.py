"""
Prefix, infix and logical operator evaluation.

Numeric promotion:
    INTEGER op INTEGER -> INTEGER, except `/`, which always yields FLOAT
    FLOAT involved     -> FLOAT
    comparisons        -> BOOLEAN

Division by zero follows IEEE 754 for both kinds (`Infinity`, `-Infinity`,
`NaN`). Integer `%` by zero is an error; float `%` takes the sign of the
dividend and yields `NaN` for a zero divisor.
"""

from __future__ import annotations

import math

from mutant.evaluators.base import EvaluatorBase
from mutant.mutant_ast import ASTNode, InfixExpression, PrefixExpression
from mutant.mutant_environment import Environment
from mutant.mutant_errors import (
    ErrorKind,
    modulo_by_zero,
    non_boolean_operand,
    null_operation,
    type_mismatch,
    unknown_infix,
    unknown_prefix,
)
from mutant.mutant_objects import (
    NULL,
    BooleanObject,
    FloatObject,
    IntegerObject,
    MutantObject,
    StringObject,
    is_signal,
    native_bool,
)

Number = IntegerObject | FloatObject

COMPARISONS = {"<", ">", "<=", ">="}
BITWISE = {"&", "|", "^", "<<", ">>"}
LOGICAL = {"&&", "||"}


def is_number(obj: MutantObject) -> bool:
    return isinstance(obj, (IntegerObject, FloatObject))


def values_equal(left: MutantObject, right: MutantObject) -> bool:
    """Equality as `==` sees it: numbers by value, scalars by value, the rest by identity."""
    if is_number(left) and is_number(right):
        return bool(left.value == right.value)  # type: ignore[attr-defined]
    if isinstance(left, (StringObject, BooleanObject)) and type(left) is type(right):
        return bool(left.value == right.value)  # type: ignore[attr-defined]
    return left is right


def ieee_divide(left: float | int, right: float | int) -> float:
    """True division with IEEE 754 results for a zero divisor."""
    if right == 0:
        if left == 0 or (isinstance(left, float) and math.isnan(left)):
            return math.nan
        sign = math.copysign(1.0, right) if isinstance(right, float) else 1.0
        return math.copysign(math.inf, left) * sign
    return left / right


def truncated_mod(left: int, right: int) -> int:
    """Remainder whose sign follows the dividend (`-7 % 3 == -1`)."""
    result = abs(left) % abs(right)
    return -result if left < 0 else result


def float_mod(left: float, right: float) -> float:
    try:
        return math.fmod(left, right)
    except ValueError:
        return math.nan


class OperatorMixin(EvaluatorBase):
    """Prefix, infix and short-circuit logical operators.

    Integers and floats mix freely, promoting to FLOAT. Strings support `+`
    and comparisons. Any other pairing outside `==` and `!=` is a TypeError.
    """

    def eval_prefix(self, node: PrefixExpression, env: Environment) -> MutantObject:
        right = self.visit(node.right, env)
        if is_signal(right):
            return right
        return self.apply_prefix(node.operator, right, node)

    def apply_prefix(self, operator: str, right: MutantObject, node: ASTNode) -> MutantObject:
        """Applies `!`, `-` or `~`; `!` works on any value through truthiness."""
        if operator == "!":
            return native_bool(not right.is_truthy())
        if right is NULL:
            return self.error(null_operation(operator), node, ErrorKind.TYPE)
        if operator == "-":
            if isinstance(right, IntegerObject):
                return IntegerObject(-right.value)
            if isinstance(right, FloatObject):
                return FloatObject(-right.value)
        elif operator == "~" and isinstance(right, IntegerObject):
            return IntegerObject(~right.value)
        return self.error(unknown_prefix(operator, right.type_name), node, ErrorKind.TYPE)

    def eval_infix(self, node: InfixExpression, env: Environment) -> MutantObject:
        if node.operator in LOGICAL:
            return self.eval_logical(node, env)
        left = self.visit(node.left, env)
        if is_signal(left):
            return left
        right = self.visit(node.right, env)
        if is_signal(right):
            return right
        return self.apply_infix(node.operator, left, right, node)

    def eval_logical(self, node: InfixExpression, env: Environment) -> MutantObject:
        """Evaluates `&&` and `||` with short-circuiting.

        Both operands must be booleans; the right operand is only evaluated
        when the left one does not decide the result.

        Returns:
            The deciding operand, or a TypeError for a non-boolean operand.
        """
        operator = node.operator
        left = self.visit(node.left, env)
        if is_signal(left):
            return left
        if not isinstance(left, BooleanObject):
            return self.error(non_boolean_operand(operator, left.type_name), node, ErrorKind.TYPE)
        if operator == "&&" and not left.value:
            return left
        if operator == "||" and left.value:
            return left
        right = self.visit(node.right, env)
        if is_signal(right):
            return right
        if not isinstance(right, BooleanObject):
            return self.error(non_boolean_operand(operator, right.type_name), node, ErrorKind.TYPE)
        return right

    def apply_infix(
        self, operator: str, left: MutantObject, right: MutantObject, node: ASTNode
    ) -> MutantObject:
        """Applies a binary operator to two evaluated operands."""
        if operator == "==":
            return native_bool(values_equal(left, right))
        if operator == "!=":
            return native_bool(not values_equal(left, right))
        if left is NULL or right is NULL:
            return self.error(null_operation(operator), node, ErrorKind.TYPE)
        if is_number(left) and is_number(right):
            return self.apply_numeric(operator, left, right, node)  # type: ignore[arg-type]
        if isinstance(left, StringObject) and isinstance(right, StringObject):
            return self.apply_string(operator, left, right, node)
        if left.type_name != right.type_name:
            return self.error(
                type_mismatch(left.type_name, operator, right.type_name), node, ErrorKind.TYPE
            )
        return self.error(
            unknown_infix(left.type_name, operator, right.type_name), node, ErrorKind.TYPE
        )

    def apply_numeric(self, operator: str, left: Number, right: Number, node: ASTNode) -> MutantObject:
        """Arithmetic, comparison and bitwise operators on numbers.

        Args:
            operator: Operator spelling, e.g. "+" or "<<".
            left: INTEGER or FLOAT operand.
            right: INTEGER or FLOAT operand.
            node: Node that errors are positioned at.

        Returns:
            An INTEGER when both operands are integers (except for `/`, which
            always yields a FLOAT), otherwise a FLOAT. Bitwise operators on a
            FLOAT and integer `%` by zero are errors.
        """
        lv, rv = left.value, right.value
        both_int = isinstance(left, IntegerObject) and isinstance(right, IntegerObject)

        if operator in COMPARISONS:
            if operator == "<":
                return native_bool(lv < rv)
            if operator == ">":
                return native_bool(lv > rv)
            if operator == "<=":
                return native_bool(lv <= rv)
            return native_bool(lv >= rv)

        if operator in BITWISE:
            if not both_int:
                return self.error(
                    unknown_infix(left.type_name, operator, right.type_name), node, ErrorKind.TYPE
                )
            return self.apply_bitwise(operator, int(lv), int(rv), node)

        try:
            if operator == "/":
                return FloatObject(ieee_divide(lv, rv))
            if operator == "%":
                if both_int:
                    if rv == 0:
                        return self.error(modulo_by_zero(), node, ErrorKind.ZERO_DIVISION)
                    return IntegerObject(truncated_mod(int(lv), int(rv)))
                return FloatObject(float_mod(float(lv), float(rv)))
            if operator == "+":
                result = lv + rv
            elif operator == "-":
                result = lv - rv
            elif operator == "*":
                result = lv * rv
            else:
                return self.error(
                    unknown_infix(left.type_name, operator, right.type_name), node, ErrorKind.TYPE
                )
        except OverflowError as e:
            return self.error(f"Numeric overflow: {e}", node)

        if both_int:
            return IntegerObject(int(result))
        return FloatObject(float(result))

    def apply_bitwise(self, operator: str, lv: int, rv: int, node: ASTNode) -> MutantObject:
        if operator == "&":
            return IntegerObject(lv & rv)
        if operator == "|":
            return IntegerObject(lv | rv)
        if operator == "^":
            return IntegerObject(lv ^ rv)
        if rv < 0:
            return self.error("negative shift count", node)
        if operator == "<<":
            return IntegerObject(lv << rv)
        return IntegerObject(lv >> rv)

    def apply_string(
        self, operator: str, left: StringObject, right: StringObject, node: ASTNode
    ) -> MutantObject:
        """Concatenation with `+` and lexicographic comparison."""
        lv, rv = left.value, right.value
        if operator == "+":
            return StringObject(lv + rv)
        if operator == "<":
            return native_bool(lv < rv)
        if operator == ">":
            return native_bool(lv > rv)
        if operator == "<=":
            return native_bool(lv <= rv)
        if operator == ">=":
            return native_bool(lv >= rv)
        return self.error(unknown_infix(left.type_name, operator, right.type_name), node, ErrorKind.TYPE)
