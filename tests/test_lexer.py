import pytest
from hypothesis import given
from hypothesis import strategies as st

from mutant import mutant_tokens as tk
from mutant.mutant_lexer import CharacterStream, Lexer, LexerError, Token, tokenize


def types_of(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_let_statement_tokens() -> None:
    assert types_of("let x = 42;") == ["LET", "IDENT", "ASSIGN", "INT", "SEMICOLON", "EOF"]


def test_single_char_tokens() -> None:
    code = "= + - * / % < > ! & | ^ ~ , ; : . ( ) { } [ ]"
    expected = [
        "ASSIGN",
        "PLUS",
        "MINUS",
        "ASTERISK",
        "SLASH",
        "PERCENT",
        "LT",
        "GT",
        "BANG",
        "BIT_AND",
        "BIT_OR",
        "BIT_XOR",
        "BIT_NOT",
        "COMMA",
        "SEMICOLON",
        "COLON",
        "DOT",
        "LPAREN",
        "RPAREN",
        "LBRACE",
        "RBRACE",
        "LBRACKET",
        "RBRACKET",
        "EOF",
    ]
    assert types_of(code) == expected


def test_two_char_operators_use_longest_match() -> None:
    code = "== != <= >= && || += -= *= /= %= << >>"
    expected = [
        "EQ",
        "NOT_EQ",
        "LE",
        "GE",
        "AND",
        "OR",
        "PLUS_ASSIGN",
        "MINUS_ASSIGN",
        "ASTERISK_ASSIGN",
        "SLASH_ASSIGN",
        "PERCENT_ASSIGN",
        "SHIFT_LEFT",
        "SHIFT_RIGHT",
        "EOF",
    ]
    assert types_of(code) == expected


def test_operators_without_spaces() -> None:
    assert types_of("a<=b") == ["IDENT", "LE", "IDENT", "EOF"]
    assert types_of("a<-b") == ["IDENT", "LT", "MINUS", "IDENT", "EOF"]


def test_keywords() -> None:
    words = "fn let const true false if elif else return while for break continue class extends super this new null"
    assert types_of(words)[:-1] == [tk.keywords[w] for w in words.split()]


def test_keyword_prefix_is_identifier() -> None:
    tok = tokenize("letter")[0]
    assert tok.type == "IDENT"
    assert tok.value == "letter"


def test_identifier_with_digits_and_underscore() -> None:
    tok = tokenize("_my_var2")[0]
    assert tok.type == "IDENT"
    assert tok.value == "_my_var2"


def test_number_tokens() -> None:
    tokens = tokenize("123 4.5 .5 5.")
    assert [(t.type, t.value) for t in tokens[:-1]] == [
        ("INT", "123"),
        ("FLOAT", "4.5"),
        ("FLOAT", ".5"),
        ("FLOAT", "5."),
    ]


def test_dot_after_integer_followed_by_identifier() -> None:
    assert types_of("3.method") == ["INT", "DOT", "IDENT", "EOF"]


def test_string_tokens_decode_escapes() -> None:
    tokens = tokenize(r'"a\nb" ' + r"'it\'s' " + r'"tab\there" "q\"q"')
    assert [t.value for t in tokens[:-1]] == ["a\nb", "it's", "tab\there", 'q"q']
    assert all(t.type == "STRING" for t in tokens[:-1])


def test_fstring_keeps_raw_body() -> None:
    tok = tokenize('f"sum={a + b}!"')[0]
    assert tok.type == "F_STRING"
    assert tok.value == "sum={a + b}!"


def test_fstring_with_nested_string() -> None:
    tok = tokenize('f"{upper("x")}"')[0]
    assert tok.type == "F_STRING"
    assert tok.value == '{upper("x")}'


def test_identifier_f_is_not_fstring() -> None:
    assert types_of("f(1)") == ["IDENT", "LPAREN", "INT", "RPAREN", "EOF"]


def test_skip_line_and_block_comments() -> None:
    code = "// comment\nlet /* one /* nested */ still comment */ x"
    assert types_of(code) == ["LET", "IDENT", "EOF"]


def test_line_and_column_tracking() -> None:
    tokens = tokenize("let x\n  = 1")
    assign = tokens[2]
    assert assign.type == "ASSIGN"
    assert (assign.line, assign.col) == (2, 2)
    assert tokens[0].position == (1, 0)
    assert tokens[1].describe_position() == "line 1, column 4"


def test_illegal_character_becomes_token() -> None:
    tok = tokenize("@")[0]
    assert tok.type == "ILLEGAL"
    assert tok.value == "@"


def test_unterminated_string_raises() -> None:
    with pytest.raises(LexerError) as exc:
        tokenize('let s = "abc')
    assert exc.value.line == 1
    assert exc.value.col == 8
    assert str(exc.value) == "Unterminated string at line 1, column 8"


def test_unterminated_block_comment_raises() -> None:
    with pytest.raises(LexerError, match="Unterminated block comment"):
        tokenize("/* never closed")


def test_fstring_brace_errors() -> None:
    with pytest.raises(LexerError, match="Unmatched '}'"):
        tokenize('f"oops}"')
    with pytest.raises(LexerError, match="Unclosed '\\{'"):
        tokenize('f"{oops"')


def test_empty_input_returns_eof() -> None:
    tokens = tokenize("")
    assert len(tokens) == 1
    assert tokens[0].type == "EOF"


def test_tokenize_all_rewinds() -> None:
    lexer = Lexer(CharacterStream("a + 1"))
    first = lexer.tokenize_all()
    second = lexer.tokenize_all()
    assert first == second
    assert len(first) == 4


def test_character_stream_methods() -> None:
    cs = CharacterStream("ab\nc")
    assert cs.peek() == "a"
    assert cs.next() == "a"
    assert cs.current() == "b"
    cs.next()
    cs.next()
    assert (cs.line, cs.column) == (2, 0)
    assert cs.peek(5) == ""
    cs.next()
    assert cs.end_of_file()
    with pytest.raises(EOFError):
        cs.next()
    cs.rewind()
    assert (cs.position, cs.line, cs.column) == (0, 1, 0)


def test_token_repr_eq_and_immutability() -> None:
    tok = Token("IDENT", "x", 1, 2)
    assert repr(tok) == "Token(IDENT, x)"
    assert tok == Token("IDENT", "x", 1, 2)
    assert tok != Token("IDENT", "x", 1, 3)
    assert tok.same_kind_and_literal(Token("IDENT", "x", 9, 9))
    assert hash(tok) == hash(Token("IDENT", "x", 1, 2))
    with pytest.raises(AttributeError):
        tok.value = "y"  # type: ignore[misc]


def test_render_string_escapes() -> None:
    tok = Token("STRING", 'say "hi"\n', 1, 0)
    assert tok.render() == '"say \\"hi\\"\\n"'


@pytest.mark.parametrize(
    "source,rendered",
    [
        ("f'say \"hi\"'", "f'say \"hi\"'"),
        ("f'it\\'s {x}'", "f\"it\\'s {x}\""),
        ("f\"{ \"a\" + b }\"", "f\"{ \"a\" + b }\""),
        ("f'plain'", 'f"plain"'),
    ],
)
def test_render_fstring_picks_safe_quote(source: str, rendered: str) -> None:
    tok = tokenize(source)[0]
    assert tok.render() == rendered
    relexed = tokenize(tok.render())
    assert len(relexed) == 2
    assert relexed[0].same_kind_and_literal(tok)


@given(st.text(max_size=100))  # type: ignore[misc]
def test_lexer_does_not_crash_on_random_input(text: str) -> None:
    try:
        tokens = tokenize(text)
    except LexerError:
        return
    assert tokens[-1].type == "EOF"
    assert all(t.line >= 1 and t.col >= 0 for t in tokens)


identifiers = st.from_regex(r"[a-z_][a-z0-9_]{0,10}", fullmatch=True).filter(
    lambda w: w not in tk.keywords
)
strings = st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=20)
fstring_text = st.text(
    alphabet=st.characters(blacklist_categories=["Cs"], blacklist_characters="{}\\'"),
    max_size=20,
)
fstring_bodies = st.one_of(
    fstring_text,
    st.tuples(fstring_text, identifiers).map(lambda p: p[0] + "{" + p[1] + "}"),
    fstring_text.map(lambda s: s.replace('"', "'")),
)

simple_tokens = st.one_of(
    identifiers.map(lambda w: Token(tk.IDENT, w)),
    st.integers(min_value=0, max_value=10**12).map(lambda n: Token(tk.INT, str(n))),
    st.tuples(st.integers(0, 10**6), st.integers(0, 10**6)).map(
        lambda p: Token(tk.FLOAT, f"{p[0]}.{p[1]}")
    ),
    strings.map(lambda s: Token(tk.STRING, s)),
    fstring_bodies.map(lambda s: Token(tk.F_STRING, s)),
    st.sampled_from("@#$`?").map(lambda ch: Token(tk.ILLEGAL, ch)),
    st.sampled_from(sorted(tk.operator_tokens.items())).map(lambda kv: Token(kv[1], kv[0])),
    st.sampled_from(sorted(tk.keywords.items())).map(lambda kv: Token(kv[1], kv[0])),
)


@given(st.lists(simple_tokens, min_size=1, max_size=15))  # type: ignore[misc]
def test_rendered_tokens_lex_back_to_same_tokens(tokens: list[Token]) -> None:
    source = " ".join(t.render() for t in tokens)
    relexed = tokenize(source)[:-1]
    assert len(relexed) == len(tokens)
    assert all(a.same_kind_and_literal(b) for a, b in zip(tokens, relexed))
