"""
Mutant CLI Entrypoint.

This module provides the command-line interface for running Mutant programs.

Features:
    - Run `.mut` source files or inline strings.
    - Report lexer and parser errors with source context.
    - Report runtime errors with position and stack trace.
    - Launch an interactive REPL.

Example usage:
    mutant hello.mut
    mutant -s 'println("hi");'
    mutant --config limits.json program.mut
    mutant --repl --verbose

Exit codes:
    0   success
    1   runtime error
    2   lexer/parser error, unreadable file or bad configuration

Functions:
    run_mutant(source, is_string=False, config=None, output=None) -> int:
        Executes the full pipeline (lex -> parse -> evaluate) and returns the exit code.

    main(argv=None) -> int:
        Parses CLI arguments and invokes the appropriate action (REPL or run).
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from mutant.mutant_config import ConfigError, InterpreterConfig
from mutant.mutant_interpreter import Interpreter

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SOURCE_SUFFIX = ".mut"

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_SYNTAX_ERROR = 2


def run_mutant(
    source: str,
    is_string: bool = False,
    config: InterpreterConfig | None = None,
    output: TextIO | None = None,
) -> int:
    """
    Run a Mutant program: lex, parse and evaluate it.

    Args:
        source (str): Mutant source code, or a path to a `.mut` file.
        is_string (bool): If True, treats `source` as code instead of a file path.
        config (InterpreterConfig | None): Interpreter limits. Defaults to `InterpreterConfig()`.
        output (TextIO | None): Stream for program output. Defaults to stdout.

    Returns:
        int: The process exit code.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.mut'.

    Side Effects:
        - Program output goes to `output`.
        - Diagnostics are printed to stderr.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    interp = Interpreter(config=config, output=output)
    result = interp.run(source)

    if result.parse_errors:
        print(interp.format_errors(result, source), file=sys.stderr)
        return EXIT_SYNTAX_ERROR
    if result.error is not None:
        if interp.config.stack_traces:
            print(result.error.detailed(), file=sys.stderr)
        else:
            print(result.error.inspect(), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mutant", description="Run Mutant programs.")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead of running"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging; AST echo in the REPL"
    )
    parser.add_argument("--config", metavar="PATH", help="JSON file with interpreter limits")
    parser.add_argument(
        "--no-stack-traces",
        dest="stack_traces",
        action="store_false",
        help="Omit stack traces from runtime errors",
    )
    return parser


def load_config(path: str | None, stack_traces: bool) -> InterpreterConfig:
    """Builds the config from MUTANT_* variables, then `path`, then flags."""
    config = InterpreterConfig.from_env()
    if path:
        config.load_from_json(path)
    if not stack_traces:
        config.stack_traces = False
    return config


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point for the Mutant CLI.

    Launches the REPL if no source is given or `--repl` is specified;
    otherwise runs the program and returns its exit code.
    """
    args = build_arg_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s"
        )

    try:
        config = load_config(args.config, args.stack_traces)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_SYNTAX_ERROR

    if args.repl or args.source is None:
        from mutant.mutant_repl import start_repl

        start_repl(verbose=args.verbose, config=config)
        return EXIT_OK

    try:
        return run_mutant(source=args.source, is_string=args.string, config=config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SYNTAX_ERROR


if __name__ == "__main__":
    sys.exit(main())
