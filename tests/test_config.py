import json
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mutant.mutant_config import ConfigError, InterpreterConfig


def test_defaults() -> None:
    config = InterpreterConfig()
    assert config.summary() == {
        "max_loop_iterations": 100000,
        "max_call_depth": 1000,
        "recursion_limit": 20000,
        "stack_traces": True,
        "context_lines": 1,
    }


def test_configure_applies_values() -> None:
    config = InterpreterConfig()
    config.configure({"max_call_depth": 50, "stack_traces": False, "context_lines": 0})
    assert config.max_call_depth == 50
    assert config.stack_traces is False
    assert config.context_lines == 0


def test_configure_is_all_or_nothing() -> None:
    config = InterpreterConfig()
    with pytest.raises(ConfigError) as exc:
        config.configure({"max_call_depth": 10, "bogus": 1, "stack_traces": "yes"})
    assert exc.value.problems == [
        "unknown option 'bogus'",
        "'stack_traces' must be a boolean, got 'yes'",
    ]
    assert str(exc.value).startswith("Invalid interpreter configuration: unknown option 'bogus'; ")
    assert config.max_call_depth == 1000


@pytest.mark.parametrize(
    "cfg,problem",
    [
        ({"max_call_depth": True}, "'max_call_depth' must be an integer, got True"),
        ({"max_call_depth": 1.5}, "'max_call_depth' must be an integer, got 1.5"),
        ({"max_loop_iterations": 0}, "'max_loop_iterations' must be at least 1, got 0"),
        ({"context_lines": -1}, "'context_lines' must be at least 0, got -1"),
        ({"stack_traces": 1}, "'stack_traces' must be a boolean, got 1"),
    ],
)
def test_configure_rejects_bad_values(cfg: dict[str, object], problem: str) -> None:
    with pytest.raises(ConfigError) as exc:
        InterpreterConfig().configure(cfg)
    assert exc.value.problems == [problem]


def test_configure_requires_mapping() -> None:
    with pytest.raises(ConfigError) as exc:
        InterpreterConfig().configure([1, 2])  # type: ignore[arg-type]
    assert str(exc.value) == "Configuration must be a JSON object"


def test_load_from_json(tmp_path: Path) -> None:
    path = tmp_path / "mutant.json"
    path.write_text(json.dumps({"max_loop_iterations": 7}), encoding="utf-8")
    config = InterpreterConfig.from_json(str(path))
    assert config.max_loop_iterations == 7


def test_load_from_json_failures(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to load config file"):
        InterpreterConfig.from_json(str(tmp_path / "missing.json"))
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to load config file"):
        InterpreterConfig.from_json(str(broken))
    array = tmp_path / "array.json"
    array.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a JSON object"):
        InterpreterConfig.from_json(str(array))


def test_from_env() -> None:
    config = InterpreterConfig.from_env(
        {"MUTANT_MAX_CALL_DEPTH": " 64 ", "MUTANT_STACK_TRACES": "off", "UNRELATED": "x"}
    )
    assert config.max_call_depth == 64
    assert config.stack_traces is False
    assert config.max_loop_iterations == 100000


def test_from_env_applies_file_then_variables(tmp_path: Path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"max_call_depth": 10, "context_lines": 3}), encoding="utf-8")
    config = InterpreterConfig.from_env({"MUTANT_CONFIG": str(path), "MUTANT_MAX_CALL_DEPTH": "20"})
    assert config.max_call_depth == 20
    assert config.context_lines == 3


def test_from_env_reports_bad_values() -> None:
    with pytest.raises(ConfigError) as exc:
        InterpreterConfig.from_env({"MUTANT_MAX_CALL_DEPTH": "x", "MUTANT_STACK_TRACES": "maybe"})
    assert str(exc.value).startswith("Invalid environment configuration")
    assert "MUTANT_MAX_CALL_DEPTH must be an integer, got 'x'" in exc.value.problems
    assert "MUTANT_STACK_TRACES must be a boolean, got 'maybe'" in exc.value.problems


def test_from_env_range_checked() -> None:
    with pytest.raises(ConfigError) as exc:
        InterpreterConfig.from_env({"MUTANT_MAX_CALL_DEPTH": "0"})
    assert exc.value.problems == ["'max_call_depth' must be at least 1, got 0"]


@given(st.integers(min_value=1, max_value=10**6), st.booleans())  # type: ignore[misc]
def test_valid_values_round_trip_through_summary(depth: int, traces: bool) -> None:
    config = InterpreterConfig()
    config.configure({"max_call_depth": depth, "stack_traces": traces})
    summary = config.summary()
    assert summary["max_call_depth"] == depth
    assert summary["stack_traces"] is traces
