"""
Source-context rendering shared by parse and runtime diagnostics.

`source_context` prints the offending line between its neighbours, with a
caret under the failing column:

    2 | let y = 5 +;
      |            ^
"""


def source_context(source: str, line: int, col: int, context_lines: int = 1) -> str:
    """Renders numbered source lines around `line` with a caret at `col`.

    Args:
        source: The full program text.
        line: 1-based line number of the error.
        col: 0-based column of the error.
        context_lines: How many lines to show before and after.

    Returns:
        The rendered block, or an empty string if `line` is outside the source.
    """
    lines = source.split("\n")
    if line < 1 or line > len(lines):
        return ""
    first = max(1, line - context_lines)
    last = min(len(lines), line + context_lines)
    width = len(str(last))
    out: list[str] = []
    for number in range(first, last + 1):
        text = lines[number - 1].rstrip("\r")
        out.append(f"{number:>{width}} | {text}")
        if number == line:
            caret_col = max(0, min(col, len(text)))
            out.append(f"{'':>{width}} | {' ' * caret_col}^")
    return "\n".join(out)


__all__ = ["source_context"]
