from hypothesis import given
from hypothesis import strategies as st

from mutant.mutant_diagnostics import source_context

SOURCE = "a\nbb\nccc"


def test_context_around_middle_line() -> None:
    assert source_context(SOURCE, 2, 1) == "1 | a\n2 | bb\n  |  ^\n3 | ccc"


def test_context_lines_zero_shows_only_the_line() -> None:
    assert source_context(SOURCE, 3, 0, context_lines=0) == "3 | ccc\n  | ^"


def test_caret_is_clamped_to_line_length() -> None:
    assert source_context("ab", 1, 99, 0) == "1 | ab\n  |   ^"


def test_line_outside_source_gives_empty_string() -> None:
    assert source_context(SOURCE, 0, 0) == ""
    assert source_context(SOURCE, 4, 0) == ""


def test_line_numbers_are_right_aligned() -> None:
    source = "\n".join(f"line{i}" for i in range(1, 12))
    out = source_context(source, 10, 0, 1)
    assert out.splitlines() == [" 9 | line9", "10 | line10", "   | ^", "11 | line11"]


@given(st.lists(st.text(alphabet="abc ", max_size=8), min_size=1, max_size=6), st.data())  # type: ignore[misc]
def test_caret_line_follows_error_line(lines: list[str], data: st.DataObject) -> None:
    line = data.draw(st.integers(min_value=1, max_value=len(lines)))
    out = source_context("\n".join(lines), line, 0, 0).splitlines()
    assert out[0].endswith(lines[line - 1].rstrip("\r")) or lines[line - 1] == ""
    assert out[1].endswith("^")
