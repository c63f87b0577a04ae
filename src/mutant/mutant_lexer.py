"""
Lexical analyzer for the Mutant programming language.

This module converts raw source text into a position-tagged token stream:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.
    LexerError: Raised when the scan cannot continue (unterminated literals).

Features:
    - Skips whitespace, line comments (`//`) and nested block comments (`/* */`)
    - Longest-match recognition of one- and two-character operators
    - Recognizes:
        * Identifiers and keywords
        * Numbers (integer and float, including `.5` and `5.`)
        * Strings (single or double quoted, with escape sequences)
        * F-strings (`f"total: {a + b}"`)
        * Operators and punctuation
    - Unknown characters become ILLEGAL tokens instead of aborting the scan

Positions:
    Lines are 1-based and columns are 0-based. A newline increments the line
    and resets the column.

Example:
    >>> lexer = Lexer(CharacterStream("let x = 42;"))
    >>> lexer.next_token()
    Token(LET, let)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - LexerError
    - tokenize
"""

from typing import Any

from mutant import mutant_tokens as tk

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "b": "\b",
    "'": "'",
    '"': '"',
    "\\": "\\",
}

_RENDER_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\f": "\\f",
    "\b": "\\b",
}

DIGITS = "0123456789"


class LexerError(SyntaxError):
    """Raised when the lexer reaches a state it cannot recover from.

    Attributes:
        line (int): 1-based line where the offending construct starts.
        col (int): 0-based column where the offending construct starts.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0):
        super().__init__(f"{message} at line {line}, column {col}")
        self.message = message
        self.line = line
        self.col = col


def decode_escape(ch: str) -> str:
    """Returns the character an escape sequence `\\<ch>` stands for."""
    return ESCAPES.get(ch, ch)


def decode_escapes(text: str) -> str:
    """Decodes every backslash escape in `text`.

    A trailing lone backslash is kept as-is.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            out.append(decode_escape(text[i + 1]))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _is_ident_start(ch: str) -> bool:
    return ch != "" and (ch.isalpha() or ch == "_")


def _is_ident_part(ch: str) -> bool:
    return ch != "" and (ch.isalpha() or ch in DIGITS or ch == "_")


def _fstring_quote(raw: str) -> str:
    """Picks a delimiter for a raw f-string body.

    Only quotes outside interpolations and not escaped can end the literal,
    so those are the ones that must differ from the delimiter.
    """
    depth = 0
    inner: str | None = None
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\":
            i += 2
            continue
        if inner is not None:
            if ch == inner:
                inner = None
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch in ('"', "'"):
            if depth == 0:
                return "'" if ch == '"' else '"'
            inner = ch
        i += 1
    return '"'


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (0-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 0):
        self.source = source
        self.position = position
        self.line = line
        self.column = column
        self._origin = (position, line, column)

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def current(self) -> str | None:
        """Returns the current character, or None at EOF."""
        return self.source[self.position] if self.position < len(self.source) else None

    def end_of_file(self) -> bool:
        """Checks if the stream has consumed all characters."""
        return self.position >= len(self.source)

    def rewind(self) -> None:
        """Moves the cursor back to where the stream started."""
        self.position, self.line, self.column = self._origin


class Token:
    """Represents a single lexical token in the Mutant language.

    Tokens are produced once by the lexer and never mutated afterwards.

    Attributes:
        type (str): The token type (e.g. 'IDENT', 'INT', 'EOF').
        value (str): The literal text of the token (decoded for strings).
        line (int): The 1-based line number where the token starts.
        col (int): The 0-based column number where the token starts.
    """

    __slots__ = ("type", "value", "line", "col")

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Token is immutable")

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))

    @property
    def position(self) -> tuple[int, int]:
        return (self.line, self.col)

    def describe_position(self) -> str:
        """Returns the position as `line L, column C`."""
        return f"line {self.line}, column {self.col}"

    def same_kind_and_literal(self, other: "Token") -> bool:
        """Compares type and value, ignoring where the tokens came from."""
        return self.type == other.type and self.value == other.value

    def render(self) -> str:
        """Renders the token back into source text.

        Re-lexing the rendered text yields a token with the same type and
        value. F-strings are rendered with double quotes unless the body
        holds a bare double quote, in which case single quotes are used.

        Returns:
            str: Source text for this token.
        """
        if self.type == tk.STRING:
            body = "".join(_RENDER_ESCAPES.get(ch, ch) for ch in self.value)
            return f'"{body}"'
        if self.type == tk.F_STRING:
            quote = _fstring_quote(self.value)
            return f"f{quote}{self.value}{quote}"
        if self.type == tk.EOF:
            return ""
        return self.value


class Lexer:
    """Lexical analyzer for the Mutant language.

    The Lexer takes a CharacterStream and converts it into a stream of Token
    objects, one per call to `next_token()`. It never looks further ahead
    than a two-character operator requires.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(CharacterStream(source))

    def peek(self, offset: int = 0) -> str:
        """Returns an upcoming character without consuming it ('' at EOF)."""
        return self.stream.peek(offset)

    def advance(self) -> str:
        """Consumes and returns the next character from the stream."""
        return self.stream.next()

    def reset(self) -> None:
        """Rewinds the lexer to the start of its source."""
        self.stream.rewind()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in " \t\r\n":
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.skip_comment()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances through the stream until the end of a `//` comment line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        """Skips a `/* ... */` comment, honouring nested comments.

        Raises:
            LexerError: If the input ends before the comment is closed.
        """
        line, col = self.stream.line, self.stream.column
        self.advance()
        self.advance()
        depth = 1
        while depth > 0:
            if self.stream.end_of_file():
                raise LexerError("Unterminated block comment", line, col)
            if self.peek() == "/" and self.peek(1) == "*":
                self.advance()
                self.advance()
                depth += 1
            elif self.peek() == "*" and self.peek(1) == "/":
                self.advance()
                self.advance()
                depth -= 1
            else:
                self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest valid operator from the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(tk.MAX_OPERATOR_LENGTH):
            ch = self.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in tk.operator_tokens:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(tk.operator_tokens[max_token], max_token, line, col)

        return None

    def read_identifier(self, line: int, col: int) -> Token:
        ident = ""
        while _is_ident_part(self.peek()):
            ident += self.advance()
        return Token(tk.lookup_ident(ident), ident, line, col)

    def read_number(self, line: int, col: int) -> Token:
        """Reads an INT or FLOAT literal.

        A dot following the integer part belongs to the number unless it is
        followed by an identifier character, so `3.method` stays INT, DOT, IDENT.
        """
        text = ""
        is_float = False
        if self.peek() == ".":
            text += self.advance()
            is_float = True
        while self.peek() != "" and self.peek() in DIGITS:
            text += self.advance()
        if not is_float and self.peek() == "." and not _is_ident_start(self.peek(1)):
            if self.peek(1) != ".":
                text += self.advance()
                is_float = True
                while self.peek() != "" and self.peek() in DIGITS:
                    text += self.advance()
        return Token(tk.FLOAT if is_float else tk.INT, text, line, col)

    def read_string(self, line: int, col: int) -> Token:
        """Reads a quoted string literal, decoding escapes.

        Raises:
            LexerError: If the input ends before the closing quote.
        """
        quote = self.advance()
        val = ""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == "\\":
                self.advance()
                if self.stream.end_of_file():
                    break
                val += decode_escape(self.advance())
            elif ch == quote:
                self.advance()
                return Token(tk.STRING, val, line, col)
            else:
                val += self.advance()
        raise LexerError("Unterminated string", line, col)

    def read_fstring(self, line: int, col: int) -> Token:
        """Reads `f"..."`, keeping the raw body for the parser to split.

        Braces are balanced here so the parser only ever sees well-formed
        interpolations. Quotes inside an interpolation open nested strings.

        Raises:
            LexerError: On an unterminated literal, a stray `}` or an unclosed `{`.
        """
        self.advance()  # the `f`
        quote = self.advance()
        raw = ""
        depth = 0
        inner_quote: str | None = None
        while True:
            if self.stream.end_of_file():
                if depth > 0:
                    raise LexerError("Unclosed '{' in f-string", line, col)
                raise LexerError("Unterminated f-string", line, col)
            ch = self.peek()
            if ch == "\\":
                raw += self.advance()
                if not self.stream.end_of_file():
                    raw += self.advance()
                continue
            if inner_quote is not None:
                if ch == inner_quote:
                    inner_quote = None
                raw += self.advance()
                continue
            if depth == 0 and ch == quote:
                self.advance()
                return Token(tk.F_STRING, raw, line, col)
            if ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    raise LexerError("Unmatched '}' in f-string", line, col)
                depth -= 1
            elif depth > 0 and ch in ('"', "'"):
                inner_quote = ch
            raw += self.advance()

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; EOF once the source is exhausted.

        Raises:
            LexerError: On an unterminated string, f-string or block comment.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token(tk.EOF, "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        if ch == "f" and self.peek(1) in ('"', "'"):
            return self.read_fstring(line, col)

        if _is_ident_start(ch):
            return self.read_identifier(line, col)

        if ch in DIGITS or (ch == "." and self.peek(1) != "" and self.peek(1) in DIGITS):
            return self.read_number(line, col)

        if ch in ('"', "'"):
            return self.read_string(line, col)

        token = self.match_operator()
        if token:
            return token

        return Token(tk.ILLEGAL, self.advance(), line, col)

    next = next_token

    def tokenize_all(self) -> list[Token]:
        """Drains the lexer into an EOF-terminated list, then rewinds it.

        The rewind means a second call returns the same tokens again rather
        than a lone EOF.
        """
        tokens: list[Token] = []
        try:
            while True:
                tok = self.next_token()
                tokens.append(tok)
                if tok.type == tk.EOF:
                    break
        finally:
            self.reset()
        return tokens


def tokenize(source: str) -> list[Token]:
    """Lexes `source` into an EOF-terminated token list."""
    return Lexer(CharacterStream(source)).tokenize_all()


__all__ = [
    "CharacterStream",
    "Lexer",
    "LexerError",
    "Token",
    "decode_escapes",
    "tokenize",
]
