"""
Default prefix and infix handlers ("parselets") for the Mutant grammar.

Every handler is a plain function. Prefix handlers take the parser with its
cursor on the token that starts the expression; infix handlers additionally
take the already-parsed left operand and have the cursor on the operator.
Each handler consumes exactly the tokens of its construct and leaves the
cursor on the first token after it.

`build_default_registry()` wires them into a `ParseletRegistry`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mutant import mutant_tokens as tk
from mutant.mutant_ast import (
    ArrayLiteral,
    AssignmentExpression,
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    Expression,
    FloatLiteral,
    FStringLiteral,
    FunctionLiteral,
    HashLiteral,
    Identifier,
    IfExpression,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    NewExpression,
    NullLiteral,
    PrefixExpression,
    PropertyExpression,
    StringLiteral,
    SuperExpression,
    ThisExpression,
)
from mutant.mutant_lexer import LexerError, decode_escape
from mutant.mutant_parser import ParseError, describe, parse_expression_from_string
from mutant.mutant_precedence import Precedence
from mutant.mutant_registry import ParseletRegistry

if TYPE_CHECKING:
    from mutant.mutant_parser import Parser


# Literals


def parse_identifier(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return Identifier(tok.value, line=tok.line, col=tok.col)


def parse_integer(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return IntegerLiteral(int(tok.value), line=tok.line, col=tok.col)


def parse_float(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return FloatLiteral(float(tok.value), line=tok.line, col=tok.col)


def parse_string(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return StringLiteral(tok.value, line=tok.line, col=tok.col)


def parse_boolean(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return BooleanLiteral(tok.type == tk.TRUE, line=tok.line, col=tok.col)


def parse_null(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return NullLiteral(line=tok.line, col=tok.col)


def split_fstring(raw: str) -> tuple[list[str], list[tuple[int, str]]]:
    """Splits a raw f-string body into literal parts and embedded expressions.

    Escapes in literal text are decoded (so `\\{` is a literal brace); text
    inside `{ }` is returned verbatim together with its offset in `raw`.

    Returns:
        (parts, expressions) where `len(parts) == len(expressions) + 1`.

    Raises:
        ValueError: On unbalanced braces.
    """
    parts: list[str] = []
    expressions: list[tuple[int, str]] = []
    buf: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            buf.append(decode_escape(raw[i + 1]))
            i += 2
            continue
        if ch == "{":
            depth = 1
            j = i + 1
            quote: str | None = None
            while j < len(raw) and depth > 0:
                c = raw[j]
                if c == "\\":
                    j += 2
                    continue
                if quote is not None:
                    if c == quote:
                        quote = None
                elif c in ('"', "'"):
                    quote = c
                elif c == "{":
                    depth += 1
                elif c == "}":
                    depth -= 1
                j += 1
            if depth > 0:
                raise ValueError("Unclosed '{' in f-string")
            parts.append("".join(buf))
            buf = []
            expressions.append((i + 1, raw[i + 1 : j - 1]))
            i = j
            continue
        if ch == "}":
            raise ValueError("Unmatched '}' in f-string")
        buf.append(ch)
        i += 1
    parts.append("".join(buf))
    return parts, expressions


def parse_fstring(parser: Parser) -> Expression:
    """Parses an F_STRING token, sub-parsing each `{expression}`."""
    tok = parser.current()
    parser.advance()
    try:
        parts, embedded = split_fstring(tok.value)
    except ValueError as e:
        raise parser.error(str(e), tok) from e

    expressions: list[Expression] = []
    for offset, text in embedded:
        if not text.strip():
            raise parser.error("Empty expression in f-string", tok)
        try:
            expr = parse_expression_from_string(
                text, parser.registry, line=tok.line, col=tok.col + 2 + offset
            )
        except (ParseError, LexerError) as e:
            raise parser.error(
                f"Invalid expression in f-string: {text.strip()} ({getattr(e, 'message', e)})",
                tok,
            ) from e
        expressions.append(expr)
    return FStringLiteral(parts, expressions, line=tok.line, col=tok.col)


def parse_array(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    elements = parser.parse_expression_list(tk.RBRACKET, "array element")
    return ArrayLiteral(elements, line=tok.line, col=tok.col)


def parse_hash(parser: Parser) -> Expression:
    """Parses `{key: value, ...}`; keys are expressions checked at runtime."""
    tok = parser.current()
    parser.advance()
    pairs: list[tuple[Expression, Expression]] = []
    while not parser.check(tk.RBRACE):
        key = parser.parse_expression()
        parser.expect(tk.COLON, "after hash key")
        value = parser.parse_expression()
        pairs.append((key, value))
        if parser.check(tk.COMMA):
            parser.advance()
            continue
        if not parser.check(tk.RBRACE):
            raise parser.error(
                f"Expected ',' or '}}' after hash entry, got {describe(parser.current())}"
            )
    parser.advance()
    return HashLiteral(pairs, line=tok.line, col=tok.col)


def parse_function_literal(parser: Parser) -> FunctionLiteral:
    """Parses `fn [name](params) { body }`."""
    fn_tok = parser.expect(tk.FUNCTION)
    name = None
    if parser.check(tk.IDENT):
        name = parser.current().value
        parser.advance()
    params = parser.parse_parameters()
    body = parser.parse_function_body()
    return FunctionLiteral(params, body, name, line=fn_tok.line, col=fn_tok.col)


# Operators and grouping


def parse_prefix_operator(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    right = parser.parse_expression(Precedence.PREFIX)
    return PrefixExpression(tok.value, right, line=tok.line, col=tok.col)


def parse_grouped(parser: Parser) -> Expression:
    parser.advance()
    expr = parser.parse_expression()
    parser.expect(tk.RPAREN, "after grouped expression")
    return expr


def parse_if(parser: Parser) -> Expression:
    """Parses `if cond { } elif cond { } else { }` into one IfExpression."""
    if_tok = parser.expect(tk.IF)
    conditions = [parser.parse_expression()]
    consequences = [parser.parse_block_statement()]
    alternative: BlockStatement | None = None
    while parser.check(tk.ELIF):
        parser.advance()
        conditions.append(parser.parse_expression())
        consequences.append(parser.parse_block_statement())
    if parser.check(tk.ELSE):
        parser.advance()
        alternative = parser.parse_block_statement()
    return IfExpression(
        conditions, consequences, alternative, line=if_tok.line, col=if_tok.col
    )


# Objects


def parse_new(parser: Parser) -> Expression:
    new_tok = parser.expect(tk.NEW)
    class_ref = parser.parse_expression(Precedence.CALL)
    parser.expect(tk.LPAREN, "after class name in new expression")
    args = parser.parse_expression_list(tk.RPAREN, "constructor argument")
    return NewExpression(class_ref, args, line=new_tok.line, col=new_tok.col)


def parse_this(parser: Parser) -> Expression:
    tok = parser.current()
    parser.advance()
    return ThisExpression(line=tok.line, col=tok.col)


def parse_super(parser: Parser) -> Expression:
    """Parses `super(args)` or `super.method(args)`."""
    super_tok = parser.expect(tk.SUPER)
    method = None
    if parser.check(tk.DOT):
        parser.advance()
        method = parser.expect(tk.IDENT, "after 'super.'").value
        parser.expect(tk.LPAREN, f"after 'super.{method}'")
    elif parser.check(tk.LPAREN):
        parser.advance()
    else:
        raise parser.error(
            f"Expected '(' or '.' after 'super', got {describe(parser.current())}"
        )
    args = parser.parse_expression_list(tk.RPAREN, "argument")
    return SuperExpression(method, args, line=super_tok.line, col=super_tok.col)


# Infix handlers


def parse_infix(parser: Parser, left: Expression) -> Expression:
    tok = parser.current()
    entry = parser.registry.infix_for(tok.type)
    assert entry is not None  # for mypy
    parser.advance()
    right = parser.parse_expression(entry.precedence)
    return InfixExpression(tok.value, left, right, line=tok.line, col=tok.col)


ASSIGNABLE = (Identifier, IndexExpression, PropertyExpression)


def parse_assignment(parser: Parser, left: Expression) -> Expression:
    """Parses `target = value` and compound forms, grouping to the right."""
    tok = parser.current()
    if not isinstance(left, ASSIGNABLE):
        raise parser.error(
            f"Invalid assignment target: {left} (must be an identifier, index or property)",
            tok,
        )
    parser.advance()
    value = parser.parse_expression(Precedence.LOWEST)
    return AssignmentExpression(left, tok.value, value, line=tok.line, col=tok.col)


def parse_call(parser: Parser, left: Expression) -> Expression:
    parser.advance()
    args = parser.parse_expression_list(tk.RPAREN, "argument")
    return CallExpression(left, args, line=left.line, col=left.col)


def parse_index(parser: Parser, left: Expression) -> Expression:
    tok = parser.current()
    parser.advance()
    index = parser.parse_expression()
    parser.expect(tk.RBRACKET, "after index")
    return IndexExpression(left, index, line=tok.line, col=tok.col)


def parse_property(parser: Parser, left: Expression) -> Expression:
    dot = parser.current()
    parser.advance()
    name_tok = parser.expect(tk.IDENT, "as property name after '.'")
    prop = Identifier(name_tok.value, line=name_tok.line, col=name_tok.col)
    return PropertyExpression(left, prop, line=dot.line, col=dot.col)


BINARY_OPERATORS = (
    tk.PLUS,
    tk.MINUS,
    tk.ASTERISK,
    tk.SLASH,
    tk.PERCENT,
    tk.EQ,
    tk.NOT_EQ,
    tk.LT,
    tk.GT,
    tk.LE,
    tk.GE,
    tk.AND,
    tk.OR,
    tk.BIT_AND,
    tk.BIT_OR,
    tk.BIT_XOR,
    tk.SHIFT_LEFT,
    tk.SHIFT_RIGHT,
)


def build_default_registry() -> ParseletRegistry:
    """Creates a registry holding the complete Mutant expression grammar."""
    registry = ParseletRegistry()

    registry.register_prefix(tk.IDENT, parse_identifier)
    registry.register_prefix(tk.INT, parse_integer)
    registry.register_prefix(tk.FLOAT, parse_float)
    registry.register_prefix(tk.STRING, parse_string)
    registry.register_prefix(tk.F_STRING, parse_fstring)
    registry.register_prefix(tk.TRUE, parse_boolean)
    registry.register_prefix(tk.FALSE, parse_boolean)
    registry.register_prefix(tk.NULL, parse_null)
    registry.register_prefix(tk.BANG, parse_prefix_operator)
    registry.register_prefix(tk.MINUS, parse_prefix_operator)
    registry.register_prefix(tk.BIT_NOT, parse_prefix_operator)
    registry.register_prefix(tk.LPAREN, parse_grouped)
    registry.register_prefix(tk.LBRACKET, parse_array)
    registry.register_prefix(tk.LBRACE, parse_hash)
    registry.register_prefix(tk.FUNCTION, parse_function_literal)
    registry.register_prefix(tk.IF, parse_if)
    registry.register_prefix(tk.NEW, parse_new)
    registry.register_prefix(tk.THIS, parse_this)
    registry.register_prefix(tk.SUPER, parse_super)

    for token_type in BINARY_OPERATORS:
        registry.register_infix(token_type, parse_infix)
    for token_type in tk.ASSIGNMENT_TOKENS:
        registry.register_infix(token_type, parse_assignment)
    registry.register_infix(tk.LPAREN, parse_call)
    registry.register_infix(tk.LBRACKET, parse_index)
    registry.register_infix(tk.DOT, parse_property)

    return registry


__all__ = [
    "BINARY_OPERATORS",
    "build_default_registry",
    "parse_function_literal",
    "split_fstring",
]
