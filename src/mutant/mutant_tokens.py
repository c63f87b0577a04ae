"""
Token vocabulary for the Mutant programming language.

This module is the single source of truth for token type names. The lexer
uses it to classify characters and words, and the parser uses it to key its
handler and precedence tables.

Contents:
    - Token type name constants (e.g. `IDENT`, `INT`, `PLUS`, `LET`)
    - `keywords`: reserved word -> token type
    - `operator_tokens`: operator/delimiter spelling -> token type
    - `token_hashmap`: union of the two tables above
    - `COMPOUND_ASSIGNMENTS`: compound assignment type -> arithmetic operator
    - `STATEMENT_KEYWORDS`: token types that begin a statement (used for
      error recovery)

Example:
    >>> lookup_ident("let")
    'LET'
    >>> lookup_ident("counter")
    'IDENT'
"""

# Special
ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"
FLOAT = "FLOAT"
STRING = "STRING"
F_STRING = "F_STRING"

# Operators
ASSIGN = "ASSIGN"
PLUS = "PLUS"
MINUS = "MINUS"
BANG = "BANG"
ASTERISK = "ASTERISK"
SLASH = "SLASH"
PERCENT = "PERCENT"

LT = "LT"
GT = "GT"
LE = "LE"
GE = "GE"
EQ = "EQ"
NOT_EQ = "NOT_EQ"

AND = "AND"
OR = "OR"

PLUS_ASSIGN = "PLUS_ASSIGN"
MINUS_ASSIGN = "MINUS_ASSIGN"
ASTERISK_ASSIGN = "ASTERISK_ASSIGN"
SLASH_ASSIGN = "SLASH_ASSIGN"
PERCENT_ASSIGN = "PERCENT_ASSIGN"

BIT_AND = "BIT_AND"
BIT_OR = "BIT_OR"
BIT_XOR = "BIT_XOR"
BIT_NOT = "BIT_NOT"
SHIFT_LEFT = "SHIFT_LEFT"
SHIFT_RIGHT = "SHIFT_RIGHT"

# Delimiters
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"
COLON = "COLON"
DOT = "DOT"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
CONST = "CONST"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELIF = "ELIF"
ELSE = "ELSE"
RETURN = "RETURN"
WHILE = "WHILE"
FOR = "FOR"
BREAK = "BREAK"
CONTINUE = "CONTINUE"
CLASS = "CLASS"
EXTENDS = "EXTENDS"
SUPER = "SUPER"
THIS = "THIS"
NEW = "NEW"
NULL = "NULL"

keywords: dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "const": CONST,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "elif": ELIF,
    "else": ELSE,
    "return": RETURN,
    "while": WHILE,
    "for": FOR,
    "break": BREAK,
    "continue": CONTINUE,
    "class": CLASS,
    "extends": EXTENDS,
    "super": SUPER,
    "this": THIS,
    "new": NEW,
    "null": NULL,
}

operator_tokens: dict[str, str] = {
    "=": ASSIGN,
    "+": PLUS,
    "-": MINUS,
    "!": BANG,
    "*": ASTERISK,
    "/": SLASH,
    "%": PERCENT,
    "<": LT,
    ">": GT,
    "<=": LE,
    ">=": GE,
    "==": EQ,
    "!=": NOT_EQ,
    "&&": AND,
    "||": OR,
    "+=": PLUS_ASSIGN,
    "-=": MINUS_ASSIGN,
    "*=": ASTERISK_ASSIGN,
    "/=": SLASH_ASSIGN,
    "%=": PERCENT_ASSIGN,
    "&": BIT_AND,
    "|": BIT_OR,
    "^": BIT_XOR,
    "~": BIT_NOT,
    "<<": SHIFT_LEFT,
    ">>": SHIFT_RIGHT,
    ",": COMMA,
    ";": SEMICOLON,
    ":": COLON,
    ".": DOT,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    "[": LBRACKET,
    "]": RBRACKET,
}

token_hashmap: dict[str, str] = {**operator_tokens, **keywords}

# Longest operator spelling; the lexer never looks further ahead than this.
MAX_OPERATOR_LENGTH = max(len(op) for op in operator_tokens)

COMPOUND_ASSIGNMENTS: dict[str, str] = {
    PLUS_ASSIGN: "+",
    MINUS_ASSIGN: "-",
    ASTERISK_ASSIGN: "*",
    SLASH_ASSIGN: "/",
    PERCENT_ASSIGN: "%",
}

ASSIGNMENT_TOKENS: frozenset[str] = frozenset({ASSIGN, *COMPOUND_ASSIGNMENTS})

STATEMENT_KEYWORDS: frozenset[str] = frozenset(
    {CLASS, FUNCTION, LET, CONST, FOR, IF, WHILE, RETURN, BREAK, CONTINUE}
)


def lookup_ident(word: str) -> str:
    """Returns the keyword token type for `word`, or `IDENT` if it is not reserved."""
    return keywords.get(word, IDENT)


def spelling_of(type_: str) -> str | None:
    """Returns the fixed source spelling of an operator or keyword token type.

    Args:
        type_: A token type name.

    Returns:
        The text that lexes to `type_`, or None for literal/identifier types
        whose text varies.
    """
    for text, kind in token_hashmap.items():
        if kind == type_:
            return text
    return None


__all__ = [
    "ASSIGNMENT_TOKENS",
    "COMPOUND_ASSIGNMENTS",
    "MAX_OPERATOR_LENGTH",
    "STATEMENT_KEYWORDS",
    "keywords",
    "lookup_ident",
    "operator_tokens",
    "spelling_of",
    "token_hashmap",
]
