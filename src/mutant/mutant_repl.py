"""
Interactive Mutant REPL.

Reads source a line at a time, keeping a `... ` continuation prompt open
while braces are unbalanced, then runs the collected text through a single
long-lived `Interpreter` so definitions persist between entries.

Commands:
    exit, quit      leave the REPL
    verbose-mode    toggle echoing of the parsed AST
    :help           list commands
    :env            show global bindings
    :builtins       list builtin functions by category
    :reset          drop every global binding
    :history        show the entries run this session
    :version        show the interpreter version
"""

from __future__ import annotations

import logging

from mutant.mutant_builtins import CATEGORIES
from mutant.mutant_config import InterpreterConfig
from mutant.mutant_interpreter import MUTANT_VERSION, ExecutionResult, Interpreter
from mutant.mutant_objects import NULL

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

HELP_TEXT = """\
Commands:
  exit, quit      leave the REPL
  verbose-mode    toggle AST echo
  :help           show this help
  :env            show global bindings
  :builtins       list builtin functions
  :reset          clear all global bindings
  :history        show entries from this session
  :version        show the interpreter version"""


def print_error(message: str) -> None:
    print("[error] >>>")
    print(message)


def report(interp: Interpreter, result: ExecutionResult, src: str) -> None:
    """Prints the outcome of one REPL entry."""
    if result.parse_errors:
        print_error(interp.format_errors(result, src))
        return
    if result.error is not None:
        print_error(result.error.detailed() if interp.config.stack_traces else result.error.inspect())
        return
    if result.value is not NULL:
        print(result.value.inspect())


def handle_command(src: str, interp: Interpreter, history: list[str]) -> bool:
    """Runs a `:command`; returns False if `src` is not one."""
    if not src.startswith(":"):
        return False
    command = src[1:].strip().lower()
    if command == "help":
        print(HELP_TEXT)
    elif command == "env":
        names = interp.global_names()
        if not names:
            print("[env] >>> No global bindings.")
        for name in names:
            value = interp.env.get(name)
            marker = " (const)" if name in interp.env.constants else ""
            print(f"{name:>12}{marker} = {value.inspect() if value is not None else 'null'}")
    elif command == "builtins":
        for category, names in CATEGORIES.items():
            print(f"[{category}] {' '.join(n for n in names if n in interp.builtins)}")
    elif command == "reset":
        interp.reset()
        print("[ok] >>> Environment reset.")
    elif command == "history":
        if not history:
            print("[history] >>> No entries this session.")
        for i, entry in enumerate(history[-20:], start=max(1, len(history) - 19)):
            print(f"{i:>4}  {entry}")
    elif command == "version":
        print(f"Mutant {MUTANT_VERSION}")
    else:
        print_error(f"Unknown command: {src} (try :help)")
    return True


def read_entry() -> str:
    """Reads one entry, continuing lines while braces are open."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            break
    return "\n".join(src_lines).strip()


def start_repl(verbose: bool = False, config: InterpreterConfig | None = None) -> None:
    print(f"Mutant REPL {MUTANT_VERSION}. Type 'exit' or 'quit' to leave, ':help' for commands.")
    interp = Interpreter(config=config)
    history: list[str] = []

    while True:
        try:
            src = read_entry()
            if not src:
                continue
            if src in ("exit", "quit"):
                print("Exiting Mutant REPL.")
                return
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue
            if handle_command(src, interp, history):
                continue

            history.append(src)
            if verbose:
                program, errors = interp.parse(src)
                if program is not None and not errors:
                    print(f"[ast] >>> {program}")
            result = interp.run(src)
            report(interp, result, src)

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Mutant REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
