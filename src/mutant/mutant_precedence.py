"""
Operator precedence levels for the Mutant Pratt parser.

Levels run from loosest (`LOWEST`) to tightest (`INDEX`). An infix handler
only takes over an expression while its level is strictly greater than the
level the current `parse_expression` call was entered with, which gives
left-associativity for equal levels. Assignment is the exception: its
handler re-enters at `LOWEST`, making `a = b = c` group to the right.
"""

from enum import IntEnum

from mutant import mutant_tokens as tk


class Precedence(IntEnum):
    LOWEST = 1
    ASSIGN = 2
    LOGICAL_OR = 3
    LOGICAL_AND = 4
    EQUALS = 5
    LESS_GREATER = 6
    BIT_OR = 7
    BIT_XOR = 8
    BIT_AND = 9
    SHIFT = 10
    SUM = 11
    PRODUCT = 12
    PREFIX = 13
    CALL = 14
    INDEX = 15


PRECEDENCE_TABLE: dict[str, Precedence] = {
    tk.ASSIGN: Precedence.ASSIGN,
    tk.PLUS_ASSIGN: Precedence.ASSIGN,
    tk.MINUS_ASSIGN: Precedence.ASSIGN,
    tk.ASTERISK_ASSIGN: Precedence.ASSIGN,
    tk.SLASH_ASSIGN: Precedence.ASSIGN,
    tk.PERCENT_ASSIGN: Precedence.ASSIGN,
    tk.OR: Precedence.LOGICAL_OR,
    tk.AND: Precedence.LOGICAL_AND,
    tk.EQ: Precedence.EQUALS,
    tk.NOT_EQ: Precedence.EQUALS,
    tk.LT: Precedence.LESS_GREATER,
    tk.GT: Precedence.LESS_GREATER,
    tk.LE: Precedence.LESS_GREATER,
    tk.GE: Precedence.LESS_GREATER,
    tk.BIT_OR: Precedence.BIT_OR,
    tk.BIT_XOR: Precedence.BIT_XOR,
    tk.BIT_AND: Precedence.BIT_AND,
    tk.SHIFT_LEFT: Precedence.SHIFT,
    tk.SHIFT_RIGHT: Precedence.SHIFT,
    tk.PLUS: Precedence.SUM,
    tk.MINUS: Precedence.SUM,
    tk.ASTERISK: Precedence.PRODUCT,
    tk.SLASH: Precedence.PRODUCT,
    tk.PERCENT: Precedence.PRODUCT,
    tk.LPAREN: Precedence.CALL,
    tk.LBRACKET: Precedence.INDEX,
    tk.DOT: Precedence.INDEX,
}


def precedence_of(token_type: str) -> Precedence:
    """Returns the binding power of `token_type`, or LOWEST if it is not an infix token."""
    return PRECEDENCE_TABLE.get(token_type, Precedence.LOWEST)


__all__ = ["PRECEDENCE_TABLE", "Precedence", "precedence_of"]
