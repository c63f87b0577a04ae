"""
Interpreter configuration for Mutant.

`InterpreterConfig` holds the resource limits and diagnostic switches the
evaluator consults. Values come from keyword arguments, a JSON file or
`MUTANT_*` environment variables; every source funnels through
`configure()`, which validates the whole batch and reports all problems at
once in a `ConfigError`.

Example JSON:
    {
        "max_loop_iterations": 50000,
        "max_call_depth": 500,
        "stack_traces": false
    }

Environment variables:
    MUTANT_CONFIG               path to a JSON file, applied first
    MUTANT_MAX_LOOP_ITERATIONS
    MUTANT_MAX_CALL_DEPTH
    MUTANT_RECURSION_LIMIT
    MUTANT_STACK_TRACES         1/0, true/false, yes/no, on/off
    MUTANT_CONTEXT_LINES
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

ENV_PREFIX = "MUTANT_"
ENV_CONFIG_PATH = "MUTANT_CONFIG"

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when configuration input is unreadable or invalid.

    Attributes:
        problems (list[str]): One entry per rejected key or value.
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.problems:
            return base
        return base + ": " + "; ".join(self.problems)


@dataclass
class InterpreterConfig:
    """Limits and switches for one interpreter instance.

    Attributes:
        max_loop_iterations (int): Iterations a single loop may run before failing.
        max_call_depth (int): Maximum number of active call frames.
        recursion_limit (int): Host recursion limit raised to while evaluating.
        stack_traces (bool): Attach call-stack snapshots to runtime errors.
        context_lines (int): Source lines shown around an error position.
    """

    max_loop_iterations: int = 100000
    max_call_depth: int = 1000
    recursion_limit: int = 20000
    stack_traces: bool = True
    context_lines: int = 1

    def configure(self, cfg: Mapping[str, Any]) -> None:
        """Applies `cfg` after validating every entry.

        Raises:
            ConfigError: If `cfg` is not a mapping, or any key is unknown, or
                any value has the wrong type or is out of range. Nothing is
                applied when an error is raised.
        """
        if not isinstance(cfg, Mapping):
            raise ConfigError("Configuration must be a JSON object")

        known = {f.name: f for f in fields(self)}
        updates: dict[str, Any] = {}
        problems: list[str] = []

        for key, value in cfg.items():
            if key not in known:
                problems.append(f"unknown option '{key}'")
                continue
            if known[key].type in ("bool", bool):
                if not isinstance(value, bool):
                    problems.append(f"'{key}' must be a boolean, got {value!r}")
                    continue
            else:
                if isinstance(value, bool) or not isinstance(value, int):
                    problems.append(f"'{key}' must be an integer, got {value!r}")
                    continue
                minimum = 0 if key == "context_lines" else 1
                if value < minimum:
                    problems.append(f"'{key}' must be at least {minimum}, got {value}")
                    continue
            updates[key] = value

        if problems:
            raise ConfigError("Invalid interpreter configuration", problems)

        for key, value in updates.items():
            setattr(self, key, value)
        logger.debug("Applied configuration: %s", updates)

    def load_from_json(self, path: str) -> None:
        """Reads a JSON object from `path` and applies it via `configure`.

        Raises:
            ConfigError: If the file cannot be read or parsed, or holds
                invalid settings.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw_cfg = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to load config file: {e}") from e
        logger.debug("Loaded configuration file %s", path)
        self.configure(raw_cfg)

    @classmethod
    def from_json(cls, path: str) -> InterpreterConfig:
        config = cls()
        config.load_from_json(path)
        return config

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InterpreterConfig:
        """Builds a config from `MUTANT_*` variables (defaults to `os.environ`)."""
        env = os.environ if environ is None else environ
        config = cls()

        path = env.get(ENV_CONFIG_PATH)
        if path:
            config.load_from_json(path)

        raw: dict[str, Any] = {}
        problems: list[str] = []
        for f in fields(config):
            name = ENV_PREFIX + f.name.upper()
            if name not in env:
                continue
            text = env[name].strip()
            if f.type in ("bool", bool):
                lowered = text.lower()
                if lowered in _TRUE_WORDS:
                    raw[f.name] = True
                elif lowered in _FALSE_WORDS:
                    raw[f.name] = False
                else:
                    problems.append(f"{name} must be a boolean, got {text!r}")
            else:
                try:
                    raw[f.name] = int(text)
                except ValueError:
                    problems.append(f"{name} must be an integer, got {text!r}")

        if problems:
            raise ConfigError("Invalid environment configuration", problems)
        config.configure(raw)
        return config

    def summary(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["ConfigError", "InterpreterConfig"]
