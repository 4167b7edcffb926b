"""Tests for config.py: .shardplan.yml parsing and validation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import yaml

from shardplan.config import (
    OutputConfig,
    ShardPlanConfig,
    SplitConfig,
    _resolve_dict,
    _resolve_env_vars,
    load_config,
    parse_factors,
    validate_config,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


def _write_config(root: Path, data: dict[str, Any]) -> None:
    """Write .shardplan.yml with given data."""
    (root / ".shardplan.yml").write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in (
        "SHARDPLAN_PARALLELIZATION",
        "SHARDPLAN_MAX_FILTERS",
        "SHARDPLAN_CONSOLE_VERBOSITY",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


# ── _resolve_env_vars / _resolve_dict ─────────────────────────────────


class TestResolveEnvVars:
    def test_resolves_existing_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _resolve_env_vars("${MY_VAR}") == "hello"

    def test_missing_var_returns_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert _resolve_env_vars("${MISSING_VAR}") == ""

    def test_nested_and_lists(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OUT", "plan.json")
        data = {"output": {"path": "${OUT}"}, "items": ["${OUT}", 3], "n": 1}
        assert _resolve_dict(data) == {
            "output": {"path": "plan.json"},
            "items": ["plan.json", 3],
            "n": 1,
        }


# ── parse_factors ─────────────────────────────────────────────────────


class TestParseFactors:
    def test_list(self) -> None:
        assert parse_factors([2, "4"]) == [2, 4]

    def test_int(self) -> None:
        assert parse_factors(3) == [3]

    def test_comma_string(self) -> None:
        assert parse_factors(" 2, 4 ,8") == [2, 4, 8]

    def test_empty(self) -> None:
        assert parse_factors("") == []
        assert parse_factors(None) == []

    def test_invalid_entry(self) -> None:
        with pytest.raises(ValueError):
            parse_factors("2,four")

    def test_invalid_type(self) -> None:
        with pytest.raises(ValueError, match="Invalid parallelization value"):
            parse_factors({"a": 1})


# ── load_config ───────────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.split == SplitConfig()
        assert config.split.parallelization == [2]
        assert config.split.max_filters is None
        assert config.output == OutputConfig()
        assert config.raw == {}

    def test_reads_file(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "split": {
                    "parallelization": [3, 6],
                    "max_filters": 20,
                    "console_verbosity": 2,
                    "report_format": "junit",
                },
                "output": {"format": "table", "include_durations": True, "path": "out.json"},
            },
        )
        config = load_config(tmp_path)
        assert config.split == SplitConfig(
            parallelization=[3, 6],
            max_filters=20,
            console_verbosity=2,
            report_format="junit",
        )
        assert config.output == OutputConfig(format="table", include_durations=True, path="out.json")

    def test_env_fallbacks(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHARDPLAN_PARALLELIZATION", "2,4")
        monkeypatch.setenv("SHARDPLAN_MAX_FILTERS", "10")
        monkeypatch.setenv("SHARDPLAN_CONSOLE_VERBOSITY", "1")
        config = load_config(tmp_path)
        assert config.split.parallelization == [2, 4]
        assert config.split.max_filters == 10
        assert config.split.console_verbosity == 1

    def test_file_wins_over_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHARDPLAN_PARALLELIZATION", "2,4")
        _write_config(tmp_path, {"split": {"parallelization": 5}})
        assert load_config(tmp_path).split.parallelization == [5]

    def test_env_placeholder_in_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPLIT_OUT", "artifacts/plan.json")
        _write_config(tmp_path, {"output": {"path": "${SPLIT_OUT}"}})
        assert load_config(tmp_path).output.path == "artifacts/plan.json"

    def test_non_mapping_sections_ignored(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"split": "nope", "output": ["x"]})
        config = load_config(tmp_path)
        assert config.split == SplitConfig()
        assert config.output == OutputConfig()

    def test_non_mapping_document_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".shardplan.yml").write_text("- 1\n- 2\n", encoding="utf-8")
        assert load_config(tmp_path).raw == {}

    def test_invalid_number(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"split": {"max_filters": "many"}})
        with pytest.raises(ValueError):
            load_config(tmp_path)

    def test_non_scalar_number_is_value_error(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"split": {"max_filters": [1, 2]}})
        with pytest.raises(ValueError, match="split.max_filters must be an integer"):
            load_config(tmp_path)

    def test_non_scalar_factor_is_value_error(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"split": {"parallelization": [2, None]}})
        with pytest.raises(ValueError, match="split.parallelization must be an integer"):
            load_config(tmp_path)

    def test_null_verbosity_uses_default(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"split": {"console_verbosity": None, "max_filters": None}})
        config = load_config(tmp_path)
        assert config.split.console_verbosity == 0
        assert config.split.max_filters is None


# ── validate_config ───────────────────────────────────────────────────


class TestValidateConfig:
    def test_defaults_valid(self) -> None:
        assert validate_config(ShardPlanConfig()) == []

    def test_reports_every_problem(self) -> None:
        config = ShardPlanConfig(
            split=SplitConfig(
                parallelization=[0, 2],
                max_filters=0,
                console_verbosity=9,
                report_format="xml",
            ),
            output=OutputConfig(format="yaml"),
        )
        errors = validate_config(config)
        assert len(errors) == 5
        assert any("split.parallelization" in e for e in errors)
        assert any("split.max_filters" in e for e in errors)
        assert any("split.console_verbosity must be between 0 and 4" in e for e in errors)
        assert any("split.report_format" in e for e in errors)
        assert any("output.format" in e for e in errors)
