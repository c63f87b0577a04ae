"""
Mutant Language Parser

Parses Mutant source tokens into an abstract syntax tree (AST).

The expression core is a Pratt (precedence-climbing) engine: each token
type may own a prefix handler (something that can start an expression) and
an infix handler (something that continues one, with a binding power). The
handlers live in a `ParseletRegistry`, so the grammar can be extended
without touching the engine. Statements dispatch on their leading keyword.

Supported Constructs
--------------------
- Expressions:
    * Literals: integers, floats, strings, f-strings, booleans, `null`,
      arrays `[...]`, hashes `{k: v}`, function literals `fn(a) { ... }`
    * Prefix `!`, `-`, `~`; binary arithmetic, comparison, logical, bitwise
    * Calls `f(x)`, indexing `a[i]`, property access `obj.name`
    * Assignment `=` and compound `+= -= *= /= %=` (right-associative)
    * `if`/`elif`/`else` expressions
    * `new Class(args)`, `this`, `super(args)`, `super.method(args)`

- Statements:
    * `let`, `const`, `return`, `break`, `continue`, blocks
    * `while (cond) { ... }`, `for (init; cond; update) { ... }`
    * `fn name(params) { ... }` declarations
    * `class Name extends Parent { constructor(...) { ... } method(...) { ... } }`

Parser Behavior
---------------
- Syntax errors are collected, not raised: `parse_program()` always returns a
  (possibly partial) `Program`, and `errors` lists every `ParseError` found.
- After an error the parser skips ahead to the next `;`, the next statement
  keyword, or the closing `}` of the current block, then carries on.
- `break`/`continue` outside of a loop are reported as syntax errors.

Entry Points
------------
- `Parser.parse_program()` / `Parser.parse()`: parse a whole program.
- `Parser.parse_expression()`: parse one expression at the cursor.
- `parse_program_from_string()`, `parse_expression_from_string()`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from mutant import mutant_tokens as tk
from mutant.mutant_ast import (
    BlockStatement,
    BreakStatement,
    ClassStatement,
    ConstStatement,
    ContinueStatement,
    Expression,
    ExpressionStatement,
    ForStatement,
    FunctionLiteral,
    FunctionStatement,
    Identifier,
    IfExpression,
    LetStatement,
    Program,
    ReturnStatement,
    Statement,
    WhileStatement,
)
from mutant.mutant_diagnostics import source_context
from mutant.mutant_lexer import Token, tokenize
from mutant.mutant_precedence import Precedence
from mutant.mutant_registry import ParseletRegistry, default_registry

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

CONSTRUCTOR_NAME = "constructor"


class ParseError(SyntaxError):
    """A positioned syntax error collected by the parser.

    Attributes:
        message (str): Human-readable description.
        token (Token | None): The token the parser was looking at.
        line (int): 1-based line of the error.
        col (int): 0-based column of the error.
    """

    def __init__(
        self,
        message: str,
        token: Token | None = None,
        line: int | None = None,
        col: int | None = None,
    ):
        self.message = message
        self.token = token
        self.line = line if line is not None else (token.line if token else 0)
        self.col = col if col is not None else (token.col if token else 0)
        super().__init__(self.render())

    def render(self) -> str:
        return f"Parse Error at line {self.line}, column {self.col}: {self.message}"

    def format_with_source(self, source: str, context_lines: int = 1) -> str:
        """Renders the error followed by the offending source line and a caret."""
        context = source_context(source, self.line, self.col, context_lines)
        return f"{self.render()}\n{context}" if context else self.render()


def describe(tok: Token) -> str:
    """Describes a token for error messages, e.g. `IDENT ('x')` or `end of input`."""
    if tok.type == tk.EOF:
        return "end of input"
    return f"{tok.type} ('{tok.value}')"


def _spelling(token_type: str) -> str:
    return tk.spelling_of(token_type) or token_type


class Parser:
    """
    Mutant Parser Class

    Transforms a list of lexical tokens into a `Program` AST.

    Attributes
    ----------
    tokens : list[Token]
        The token stream, always terminated by an EOF token.
    position : int
        Current index into the token stream.
    registry : ParseletRegistry
        Prefix/infix handler tables driving expression parsing.
    errors : list[ParseError]
        Every syntax error recorded so far.
    loop_depth : int
        Number of enclosing loops within the current function body.
    block_depth : int
        Number of enclosing `{ }` blocks (used by error recovery).
    """

    def __init__(
        self,
        tokens: list[Token],
        registry: ParseletRegistry | None = None,
        source: str = "",
    ) -> None:
        if not tokens or tokens[-1].type != tk.EOF:
            last = tokens[-1] if tokens else None
            tokens = list(tokens) + [
                Token(tk.EOF, "EOF", last.line if last else 1, last.col + 1 if last else 0)
            ]
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.registry: ParseletRegistry = registry or default_registry()
        self.source: str = source
        self.errors: list[ParseError] = []
        self.loop_depth: int = 0
        self.block_depth: int = 0

        self.statement_parsers = {
            tk.LET: self.parse_let_statement,
            tk.CONST: self.parse_const_statement,
            tk.RETURN: self.parse_return_statement,
            tk.WHILE: self.parse_while_statement,
            tk.FOR: self.parse_for_statement,
            tk.BREAK: self.parse_break_statement,
            tk.CONTINUE: self.parse_continue_statement,
            tk.CLASS: self.parse_class_statement,
            tk.LBRACE: self.parse_block_statement,
        }

    @classmethod
    def from_source(cls, source: str, registry: ParseletRegistry | None = None) -> Parser:
        """Lexes `source` and returns a parser over it.

        Raises:
            LexerError: If the source cannot be tokenized.
        """
        return cls(tokenize(source), registry=registry, source=source)

    # Cursor

    def current(self) -> Token:
        return self.tokens[self.position]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.position + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        """Moves past the current token and returns the new current token."""
        if self.position < len(self.tokens) - 1:
            self.position += 1
        return self.current()

    def check(self, *types: str) -> bool:
        return self.current().type in types

    def match(self, *types: str, strict: bool = True, context: str | None = None) -> Token | None:
        """Consumes the current token if its type is one of `types`.

        Args:
            *types: Acceptable token types.
            strict: Raise instead of returning None on a mismatch.
            context: Phrase appended to the error, e.g. "after parameter list".

        Returns:
            The consumed token, or None when not strict and nothing matched.

        Raises:
            ParseError: On a mismatch in strict mode.
        """
        tok = self.current()
        if tok.type in types:
            self.advance()
            return tok
        if strict:
            expected = " or ".join(f"'{_spelling(t)}'" for t in types)
            suffix = f" {context}" if context else ""
            raise self.error(f"Expected {expected}{suffix}, got {describe(tok)}", tok)
        return None

    def expect(self, token_type: str, context: str | None = None) -> Token:
        tok = self.match(token_type, context=context)
        assert tok is not None  # for mypy
        return tok

    def error(self, message: str, token: Token | None = None) -> ParseError:
        return ParseError(message, token or self.current())

    # Error bookkeeping

    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_errors(self) -> list[ParseError]:
        return list(self.errors)

    def record(self, err: ParseError) -> None:
        logger.debug("Recorded %s", err.render())
        self.errors.append(err)

    def synchronize(self, start: int) -> None:
        """Skips tokens until a point where parsing can safely resume.

        Stops just after a `;`, before a `}` closing the current block, at
        EOF, or before a statement keyword other than the one the failed
        statement began with.

        Args:
            start: Token index where the failed statement began.
        """
        skipped_from = self.position
        while not self.check(tk.EOF):
            tok = self.current()
            if tok.type == tk.SEMICOLON:
                self.advance()
                break
            if tok.type == tk.RBRACE and self.block_depth > 0:
                break
            if tok.type in tk.STATEMENT_KEYWORDS and self.position != start:
                break
            self.advance()
        logger.debug("Synchronized from token %d to %d", skipped_from, self.position)

    def skip_to_closing_brace(self) -> None:
        """Skips to the `}` that closes the enclosing braces, leaving it current."""
        depth = 0
        while not self.check(tk.EOF):
            if self.check(tk.LBRACE):
                depth += 1
            elif self.check(tk.RBRACE):
                if depth == 0:
                    return
                depth -= 1
            self.advance()

    # Context tracking

    @contextmanager
    def loop_scope(self) -> Iterator[None]:
        self.loop_depth += 1
        try:
            yield
        finally:
            self.loop_depth -= 1

    @contextmanager
    def function_scope(self) -> Iterator[None]:
        """Function bodies cannot `break` out of loops that enclose the literal."""
        saved = self.loop_depth
        self.loop_depth = 0
        try:
            yield
        finally:
            self.loop_depth = saved

    # Programs and statements

    def parse_program(self) -> Program:
        """Parses the whole token stream, collecting errors instead of raising.

        Input nested deeper than the recursion limit allows is reported as a
        parse error at the start of the offending statement.
        """
        statements: list[Statement] = []
        first = self.current()
        while not self.check(tk.EOF):
            start = self.position
            try:
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
            except ParseError as err:
                self.record(err)
                self.synchronize(start)
            except RecursionError:
                self.record(self.error("Expression nested too deeply", self.tokens[start]))
                self.synchronize(start)
        return Program(statements, line=first.line, col=first.col)

    parse = parse_program

    def parse_statement(self) -> Statement | None:
        """Parses one statement; returns None for an empty `;` statement."""
        tok = self.current()
        if tok.type == tk.SEMICOLON:
            self.advance()
            return None
        if tok.type == tk.FUNCTION and self.peek().type == tk.IDENT:
            return self.parse_function_declaration()
        handler = self.statement_parsers.get(tok.type)
        if handler is not None:
            return handler()
        return self.parse_expression_statement()

    def expect_terminator(self, what: str) -> None:
        """Requires a `;` unless the statement sits right before `}` or end of input."""
        if self.check(tk.SEMICOLON):
            self.advance()
            return
        if self.check(tk.RBRACE, tk.EOF):
            return
        raise self.error(f"Expected ';' after {what}, got {describe(self.current())}")

    def parse_block_statement(self) -> BlockStatement:
        """Parses `{ statements }`, recovering from errors statement by statement."""
        open_tok = self.expect(tk.LBRACE, "to open block")
        statements: list[Statement] = []
        self.block_depth += 1
        try:
            while not self.check(tk.RBRACE, tk.EOF):
                start = self.position
                try:
                    stmt = self.parse_statement()
                    if stmt is not None:
                        statements.append(stmt)
                except ParseError as err:
                    self.record(err)
                    self.synchronize(start)
        finally:
            self.block_depth -= 1
        self.expect(tk.RBRACE, "to close block")
        return BlockStatement(statements, line=open_tok.line, col=open_tok.col)

    def parse_binding_name(self, keyword: str) -> Identifier:
        tok = self.expect(tk.IDENT, f"after '{keyword}'")
        return Identifier(tok.value, line=tok.line, col=tok.col)

    def parse_let_statement(self) -> LetStatement:
        let_tok = self.expect(tk.LET)
        name = self.parse_binding_name("let")
        self.expect(tk.ASSIGN, f"after '{name.name}' in let statement")
        value = self.parse_expression()
        self.expect_terminator("let statement")
        return LetStatement(name, value, line=let_tok.line, col=let_tok.col)

    def parse_const_statement(self) -> ConstStatement:
        const_tok = self.expect(tk.CONST)
        name = self.parse_binding_name("const")
        self.expect(tk.ASSIGN, f"after '{name.name}' in const statement")
        value = self.parse_expression()
        self.expect_terminator("const statement")
        return ConstStatement(name, value, line=const_tok.line, col=const_tok.col)

    def parse_return_statement(self) -> ReturnStatement:
        ret_tok = self.expect(tk.RETURN)
        value = None
        if not self.check(tk.SEMICOLON, tk.RBRACE, tk.EOF):
            value = self.parse_expression()
        self.expect_terminator("return statement")
        return ReturnStatement(value, line=ret_tok.line, col=ret_tok.col)

    def parse_break_statement(self) -> BreakStatement:
        tok = self.current()
        if self.loop_depth == 0:
            raise self.error("'break' outside of loop", tok)
        self.advance()
        self.expect_terminator("'break'")
        return BreakStatement(line=tok.line, col=tok.col)

    def parse_continue_statement(self) -> ContinueStatement:
        tok = self.current()
        if self.loop_depth == 0:
            raise self.error("'continue' outside of loop", tok)
        self.advance()
        self.expect_terminator("'continue'")
        return ContinueStatement(line=tok.line, col=tok.col)

    def parse_while_statement(self) -> WhileStatement:
        while_tok = self.expect(tk.WHILE)
        condition = self.parse_expression()
        with self.loop_scope():
            body = self.parse_block_statement()
        return WhileStatement(condition, body, line=while_tok.line, col=while_tok.col)

    def parse_for_statement(self) -> ForStatement:
        """Parses `for (init; condition; update) { body }`; every clause is optional."""
        for_tok = self.expect(tk.FOR)
        self.expect(tk.LPAREN, "after 'for'")

        init: Statement | None = None
        if self.check(tk.LET):
            let_tok = self.expect(tk.LET)
            name = self.parse_binding_name("let")
            self.expect(tk.ASSIGN, f"after '{name.name}' in for-loop initializer")
            init = LetStatement(
                name, self.parse_expression(), line=let_tok.line, col=let_tok.col
            )
        elif not self.check(tk.SEMICOLON):
            expr = self.parse_expression()
            init = ExpressionStatement(expr, line=expr.line, col=expr.col)
        self.expect(tk.SEMICOLON, "after for-loop initializer")

        condition = None
        if not self.check(tk.SEMICOLON):
            condition = self.parse_expression()
        self.expect(tk.SEMICOLON, "after for-loop condition")

        update = None
        if not self.check(tk.RPAREN):
            update = self.parse_expression()
        self.expect(tk.RPAREN, "after for-loop clauses")

        with self.loop_scope():
            body = self.parse_block_statement()
        return ForStatement(
            init, condition, update, body, line=for_tok.line, col=for_tok.col
        )

    def parse_function_declaration(self) -> FunctionStatement:
        from mutant.mutant_parselets import parse_function_literal

        fn_tok = self.current()
        name_tok = self.peek()
        function = parse_function_literal(self)
        self.match(tk.SEMICOLON, strict=False)
        return FunctionStatement(
            Identifier(name_tok.value, line=name_tok.line, col=name_tok.col),
            function,
            line=fn_tok.line,
            col=fn_tok.col,
        )

    def parse_parameters(self) -> list[Identifier]:
        """Parses `(a, b, c)`, rejecting duplicate names."""
        self.expect(tk.LPAREN, "to open parameter list")
        params: list[Identifier] = []
        seen: set[str] = set()
        if self.check(tk.RPAREN):
            self.advance()
            return params
        while True:
            tok = self.expect(tk.IDENT, "in parameter list")
            if tok.value in seen:
                raise self.error(f"Duplicate parameter name '{tok.value}'", tok)
            seen.add(tok.value)
            params.append(Identifier(tok.value, line=tok.line, col=tok.col))
            if self.check(tk.COMMA):
                self.advance()
                continue
            break
        self.expect(tk.RPAREN, "to close parameter list")
        return params

    def parse_function_body(self) -> BlockStatement:
        with self.function_scope():
            return self.parse_block_statement()

    def parse_class_statement(self) -> ClassStatement:
        """
        Parses a class declaration.

        Grammar:
            class Name [extends Parent] {
                [fn] constructor(params) { ... }
                [fn] method(params) { ... }
            }
        """
        class_tok = self.expect(tk.CLASS)
        name = self.parse_binding_name("class")
        parent = None
        if self.check(tk.EXTENDS):
            self.advance()
            parent_tok = self.expect(tk.IDENT, "after 'extends'")
            parent = Identifier(parent_tok.value, line=parent_tok.line, col=parent_tok.col)
        self.expect(tk.LBRACE, f"to open body of class '{name.name}'")

        constructor: FunctionLiteral | None = None
        methods: list[FunctionLiteral] = []
        seen: set[str] = set()
        while not self.check(tk.RBRACE, tk.EOF):
            if self.check(tk.SEMICOLON):
                self.advance()
                continue
            try:
                member = self.parse_class_member()
            except ParseError as err:
                self.skip_to_closing_brace()
                if self.check(tk.EOF):
                    raise
                self.record(err)
                break
            if member.name == CONSTRUCTOR_NAME:
                if constructor is not None:
                    self.record(
                        ParseError(
                            "Class can only have one constructor", line=member.line, col=member.col
                        )
                    )
                else:
                    constructor = member
                continue
            if member.name in seen:
                self.record(
                    ParseError(
                        f"Duplicate method '{member.name}' in class '{name.name}'",
                        line=member.line,
                        col=member.col,
                    )
                )
                continue
            seen.add(member.name)
            methods.append(member)
        self.expect(tk.RBRACE, f"to close body of class '{name.name}'")
        return ClassStatement(
            name, parent, constructor, methods, line=class_tok.line, col=class_tok.col
        )

    def parse_class_member(self) -> FunctionLiteral:
        """Parses `[fn] name(params) { body }` inside a class body."""
        if self.check(tk.FUNCTION):
            self.advance()
        member_tok = self.current()
        if member_tok.type != tk.IDENT:
            raise self.error(
                f"Expected method or constructor in class body, got {describe(member_tok)}",
                member_tok,
            )
        self.advance()
        params = self.parse_parameters()
        body = self.parse_function_body()
        return FunctionLiteral(
            params, body, member_tok.value, line=member_tok.line, col=member_tok.col
        )

    def parse_expression_statement(self) -> ExpressionStatement:
        expr = self.parse_expression()
        if isinstance(expr, IfExpression):
            self.match(tk.SEMICOLON, strict=False)
        else:
            self.expect_terminator("expression")
        return ExpressionStatement(expr, line=expr.line, col=expr.col)

    # Expressions

    def parse_expression(self, precedence: Precedence = Precedence.LOWEST) -> Expression:
        """The Pratt loop.

        Runs the prefix handler of the current token, then keeps handing the
        result to infix handlers whose precedence is strictly greater than
        `precedence`.

        Raises:
            ParseError: If the current token cannot start an expression.
        """
        tok = self.current()
        prefix = self.registry.prefix_for(tok.type)
        if prefix is None:
            raise self.error(self.no_prefix_message(tok), tok)
        left = prefix(self)
        while True:
            entry = self.registry.infix_for(self.current().type)
            if entry is None or entry.precedence <= precedence:
                break
            left = entry.handler(self, left)
        return left

    @staticmethod
    def no_prefix_message(tok: Token) -> str:
        if tok.type == tk.ILLEGAL:
            return f"Illegal character '{tok.value}'"
        if tok.type == tk.EOF:
            return "Unexpected end of input: expected an expression"
        return f"No prefix parser for {tok.type} ('{tok.value}'): token cannot start an expression"

    def parse_expression_list(self, end: str, item: str) -> list[Expression]:
        """Parses comma-separated expressions up to and including `end`.

        A trailing comma before `end` is accepted.

        Raises:
            ParseError: `Expected ',' or '<end>' after <item>` on a bad separator.
        """
        items: list[Expression] = []
        if self.check(end):
            self.advance()
            return items
        items.append(self.parse_expression())
        while self.check(tk.COMMA):
            self.advance()
            if self.check(end):
                break
            items.append(self.parse_expression())
        if not self.check(end):
            raise self.error(
                f"Expected ',' or '{_spelling(end)}' after {item}, got {describe(self.current())}"
            )
        self.advance()
        return items


def parse_program_from_string(
    source: str, registry: ParseletRegistry | None = None
) -> tuple[Program, list[ParseError]]:
    """Lexes and parses `source`, returning the program and its collected errors."""
    parser = Parser.from_source(source, registry)
    program = parser.parse_program()
    return program, parser.get_errors()


def parse_expression_from_string(
    source: str, registry: ParseletRegistry | None = None, line: int = 1, col: int = 0
) -> Expression:
    """Parses `source` as exactly one expression.

    Args:
        source: Expression text.
        registry: Optional handler registry.
        line: Line the text starts on (for positions of the resulting nodes).
        col: Column the text starts at.

    Raises:
        ParseError: If the text is not a single well-formed expression.
        LexerError: If the text cannot be tokenized.
    """
    from mutant.mutant_lexer import CharacterStream, Lexer

    tokens = Lexer(CharacterStream(source, 0, line, col)).tokenize_all()
    parser = Parser(tokens, registry=registry, source=source)
    expr = parser.parse_expression()
    if not parser.check(tk.EOF):
        raise parser.error(f"Unexpected {describe(parser.current())} after expression")
    return expr


__all__ = [
    "ParseError",
    "Parser",
    "describe",
    "parse_expression_from_string",
    "parse_program_from_string",
]
