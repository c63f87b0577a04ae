import builtins
import io
from collections.abc import Iterator

import pytest

from mutant.mutant_config import InterpreterConfig
from mutant.mutant_interpreter import Interpreter
from mutant.mutant_repl import handle_command, read_entry, start_repl


def feed(monkeypatch: pytest.MonkeyPatch, lines: list[str]) -> list[str]:
    """Answers `input()` from `lines`; returns the prompts that were shown."""
    prompts: list[str] = []
    calls: Iterator[str] = iter(lines)

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return next(calls)

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


def test_repl_quit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(builtins, "input", lambda _: "quit")
    start_repl()
    out = capsys.readouterr().out
    assert out.startswith("Mutant REPL 0.1.0.")
    assert "Exiting Mutant REPL." in out


def test_repl_exit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(builtins, "input", lambda _: "exit")
    start_repl()
    assert "Exiting Mutant REPL." in capsys.readouterr().out


def test_repl_empty_input_skipped(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["   ", "quit"])
    start_repl()
    assert "Exiting Mutant REPL." in capsys.readouterr().out


def test_repl_prints_values_and_keeps_state(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["let x = 40;", "x + 2;", 'println("hi");', "quit"])
    start_repl()
    lines = capsys.readouterr().out.splitlines()
    assert "42" in lines
    assert "hi" in lines
    assert "null" not in lines


def test_repl_multiline_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ["fn f() {", "  return 5;", "}", "f();", "quit"])
    start_repl()
    assert prompts[:4] == [">>> ", "... ", "... ", ">>> "]
    assert "5" in capsys.readouterr().out.splitlines()


def test_read_entry_joins_lines(monkeypatch: pytest.MonkeyPatch) -> None:
    feed(monkeypatch, ["if (true) {", "  1", "} else { 2 }"])
    assert read_entry() == "if (true) {\n  1\n} else { 2 }"


def test_repl_parse_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["let x = ;", "quit"])
    start_repl()
    out = capsys.readouterr().out
    assert "[error] >>>\nParse Error at line 1, column 8" in out
    assert "1 | let x = ;" in out


def test_repl_runtime_error_with_trace(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["1 + true;", "quit"])
    start_repl()
    out = capsys.readouterr().out
    assert "[error] >>>\nTypeError: Type mismatch: INTEGER + BOOLEAN" in out


def test_repl_runtime_error_without_trace(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["1 + true;", "quit"])
    start_repl(config=InterpreterConfig(stack_traces=False))
    out = capsys.readouterr().out
    assert "[error] >>>\nERROR: Type mismatch: INTEGER + BOOLEAN" in out


def test_repl_verbose_mode_toggle(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["verbose-mode", "1 + 2;", "verbose-mode", "3;", "quit"])
    start_repl()
    out = capsys.readouterr().out
    assert "[mode] >>> Verbose mode ON" in out
    assert "[ast] >>> (1 + 2)" in out
    assert "[mode] >>> Verbose mode OFF" in out
    assert "[ast] >>> 3" not in out


def test_repl_started_verbose(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["-5;", "quit"])
    start_repl(verbose=True)
    out = capsys.readouterr().out
    assert "[ast] >>> (-5)" in out
    assert "-5" in out.splitlines()


def test_repl_commands(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(
        monkeypatch,
        [
            ":env",
            ":history",
            "let x = 1;",
            "const y = 2;",
            ":env",
            ":history",
            ":builtins",
            ":version",
            ":help",
            ":reset",
            ":env",
            ":nope",
            "quit",
        ],
    )
    start_repl()
    out = capsys.readouterr().out
    assert out.count("[env] >>> No global bindings.") == 2
    assert "[history] >>> No entries this session." in out
    assert "           x = 1" in out
    assert "y (const) = 2" in out
    assert "   1  let x = 1;" in out
    assert "   2  const y = 2;" in out
    assert "[core] len type str int float bool" in out
    assert "[io] print println" in out
    assert "Mutant 0.1.0" in out
    assert "show entries from this session" in out
    assert "[ok] >>> Environment reset." in out
    assert "[error] >>>\nUnknown command: :nope (try :help)" in out


def test_handle_command_ignores_source() -> None:
    interp = Interpreter(output=io.StringIO())
    assert handle_command("1 + 1;", interp, []) is False


def test_repl_keyboard_interrupt(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        builtins, "input", lambda _: (_ for _ in ()).throw(KeyboardInterrupt())
    )
    start_repl()
    assert "\nExiting Mutant REPL." in capsys.readouterr().out


def test_repl_eof(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(builtins, "input", lambda _: (_ for _ in ()).throw(EOFError()))
    start_repl()
    assert "\nExiting Mutant REPL." in capsys.readouterr().out


def test_repl_prints_self_referential_array(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["let a = [1]; a[0] = a; a;", "1 + 1;", "quit"])
    start_repl()
    lines = capsys.readouterr().out.splitlines()
    assert "[[...]]" in lines
    assert "2" in lines
