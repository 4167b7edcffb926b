"""Configuration parsing from ``.shardplan.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from shardplan.adapters.registry import available_formats
from shardplan.log import MAX_VERBOSITY

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".shardplan.yml"

OUTPUT_FORMATS = ("json", "table")

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class SplitConfig:
    """Splitting configuration."""

    parallelization: list[int] = field(default_factory=lambda: [2])
    """Parallelization factors to produce splits for."""

    max_filters: int | None = None
    """Maximum filters per partition (``None`` = no coalescing)."""

    console_verbosity: int = 0
    """Diagnostic verbosity, 0 (quiet) to 4 (every step)."""

    report_format: str = "auto"
    """Input report format: auto, trx or junit."""


@dataclass
class OutputConfig:
    """Result output configuration."""

    format: str = "json"
    """Output format: json or table."""

    include_durations: bool = False
    """Include per-partition durations and the coalescing summary in JSON."""

    path: str = ""
    """File to write the result to (empty = stdout)."""


@dataclass
class ShardPlanConfig:
    """Complete configuration from ``.shardplan.yml``."""

    split: SplitConfig = field(default_factory=SplitConfig)
    """Splitting configuration."""

    output: OutputConfig = field(default_factory=OutputConfig)
    """Output configuration."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""


def _to_int(value: Any, name: str) -> int:
    """Convert a YAML or environment scalar to ``int``.

    Raises:
        ValueError: If *value* is not an integer or numeric string.
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        msg = f"{name} must be an integer (got: {value!r})"
        raise ValueError(msg)
    return int(value)


def parse_factors(value: Any) -> list[int]:
    """Parse factors from a YAML list, an int, or a comma separated string.

    Raises:
        ValueError: If an entry is not an integer.
    """
    if value is None or value == "":
        return []
    if isinstance(value, int) and not isinstance(value, bool):
        return [value]
    if isinstance(value, str):
        items: list[Any] = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, list):
        items = value
    else:
        msg = f"Invalid parallelization value: {value!r}"
        raise ValueError(msg)
    return [_to_int(item, "split.parallelization") for item in items]


def _optional_int(value: Any, name: str) -> int | None:
    if value is None or value == "":
        return None
    return _to_int(value, name)


def _parse_split_config(raw: dict[str, Any]) -> SplitConfig:
    """Parse the ``split`` section, falling back to environment variables."""
    split_raw = raw.get("split", {})
    if not isinstance(split_raw, dict):
        split_raw = {}

    factors = parse_factors(
        split_raw.get("parallelization", os.environ.get("SHARDPLAN_PARALLELIZATION", ""))
    )
    verbosity = _optional_int(
        split_raw.get("console_verbosity", os.environ.get("SHARDPLAN_CONSOLE_VERBOSITY")),
        "split.console_verbosity",
    )
    return SplitConfig(
        parallelization=factors or [2],
        max_filters=_optional_int(
            split_raw.get("max_filters", os.environ.get("SHARDPLAN_MAX_FILTERS")),
            "split.max_filters",
        ),
        console_verbosity=0 if verbosity is None else verbosity,
        report_format=str(split_raw.get("report_format", "auto")),
    )


def _parse_output_config(raw: dict[str, Any]) -> OutputConfig:
    """Parse the ``output`` section."""
    output_raw = raw.get("output", {})
    if not isinstance(output_raw, dict):
        output_raw = {}

    return OutputConfig(
        format=str(output_raw.get("format", "json")),
        include_durations=output_raw.get("include_durations", False) in {True, "true", "1", "yes"},
        path=str(output_raw.get("path", "")),
    )


def load_config(root: str | Path) -> ShardPlanConfig:
    """Load ``.shardplan.yml`` from *root*.

    Falls back to defaults and environment variables when the file is
    missing or incomplete.

    Raises:
        ValueError: If a numeric setting cannot be parsed.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        logger.debug("Loaded configuration from %s", config_file)

    return ShardPlanConfig(
        split=_parse_split_config(raw),
        output=_parse_output_config(raw),
        raw=raw,
    )


def _validate_split_config(split: SplitConfig) -> list[str]:
    """Validate splitting settings."""
    errors: list[str] = []

    for factor in split.parallelization:
        if factor < 1:
            errors.append(f"split.parallelization entries must be at least 1 (got: {factor})")

    if split.max_filters is not None and split.max_filters < 1:
        errors.append(f"split.max_filters must be at least 1 (got: {split.max_filters})")

    if not 0 <= split.console_verbosity <= MAX_VERBOSITY:
        errors.append(
            f"split.console_verbosity must be between 0 and {MAX_VERBOSITY} "
            f"(got: {split.console_verbosity})"
        )

    formats = available_formats()
    if split.report_format not in formats:
        errors.append(
            f"split.report_format must be one of {', '.join(formats)} "
            f"(got: {split.report_format})"
        )

    return errors


def _validate_output_config(output: OutputConfig) -> list[str]:
    """Validate output settings."""
    errors: list[str] = []

    if output.format not in OUTPUT_FORMATS:
        errors.append(
            f"output.format must be one of {', '.join(OUTPUT_FORMATS)} (got: {output.format})"
        )

    return errors


def validate_config(config: ShardPlanConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []
    errors.extend(_validate_split_config(config.split))
    errors.extend(_validate_output_config(config.output))
    return errors
