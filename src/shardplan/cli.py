"""shardplan CLI: top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from shardplan import __version__
from shardplan.adapters.base import ReportFormatError
from shardplan.adapters.registry import AUTO_FORMAT, available_formats, read_report
from shardplan.config import (
    OUTPUT_FORMATS,
    ShardPlanConfig,
    load_config,
    parse_factors,
    validate_config,
)
from shardplan.log import MAX_VERBOSITY, setup_logging
from shardplan.reporters.json_reporter import JSONReporter
from shardplan.reporters.terminal import CLIReporter, console, reporter
from shardplan.sharding.plan import build_split_plan

logger = logging.getLogger(__name__)


def _config_to_dict(config: Any) -> dict[str, Any]:
    """Convert ShardPlanConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _load_valid_config(path: str) -> ShardPlanConfig:
    try:
        config = load_config(path)
    except (ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)
    if errors:
        reporter.print_error(f"Found {len(errors)} configuration error(s):")
        for idx, error in enumerate(errors, start=1):
            console.print(f"  {idx}. [red]{error}[/red]")
        raise click.Abort
    return config


def _parse_factor_options(values: tuple[str, ...]) -> list[int]:
    factors: list[int] = []
    for value in values:
        try:
            factors.extend(parse_factors(value))
        except ValueError as e:
            raise click.BadParameter(
                f"{value!r} is not an integer or comma separated list of integers.",
                param_hint="'--parallelization'",
            ) from e
    return factors


@click.group()
@click.version_option(version=__version__, prog_name="shardplan")
def cli() -> None:
    """shardplan: split a test suite into duration-balanced filter groups."""


@cli.command()
@click.option(
    "--file",
    "report_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Report produced by a single run of the whole test suite.",
)
@click.option(
    "--parallelization",
    "-p",
    multiple=True,
    help=(
        "Number of parts to split into (default: 2). Repeat, comma separate, "
        "or list further factors after it separated by spaces."
    ),
)
@click.option(
    "--max-filters",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of test filters to produce per split.",
)
@click.option(
    "--console-verbosity",
    type=click.IntRange(0, MAX_VERBOSITY),
    default=None,
    help="Diagnostic verbosity on stderr (0-4).",
)
@click.option(
    "--format",
    "report_format",
    type=click.Choice(available_formats()),
    default=None,
    help="Report format (default: detect from the document).",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the result to this file instead of stdout.",
)
@click.option(
    "--output-format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Result format (default: json).",
)
@click.option(
    "--with-durations",
    is_flag=True,
    default=False,
    help="Include partition durations and the coalescing summary in JSON output.",
)
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root holding an optional .shardplan.yml.",
)
@click.argument("extra_factors", nargs=-1, metavar="[FACTOR]...")
def split(**kwargs: Any) -> None:
    """Generate splits for parallel test runs from the time each test took.

    Bare FACTOR arguments are added to --parallelization, so
    `-p 2 4` asks for both a two-way and a four-way split.

    Example:
      shardplan split --file results.trx -p 2 4 --max-filters 50
    """
    config = _load_valid_config(kwargs["path"])
    split_config = config.split
    output_config = config.output

    factors = (
        _parse_factor_options(kwargs["parallelization"] + kwargs["extra_factors"])
        or split_config.parallelization
    )
    max_filters: int | None = kwargs["max_filters"] or split_config.max_filters
    verbosity: int = kwargs["console_verbosity"]
    if verbosity is None:
        verbosity = split_config.console_verbosity
    report_format: str = kwargs["report_format"] or split_config.report_format or AUTO_FORMAT
    output_format: str = kwargs["output_format"] or output_config.format
    output_path: Path | None = kwargs["output_path"] or (
        Path(output_config.path) if output_config.path else None
    )
    include_durations = kwargs["with_durations"] or output_config.include_durations

    setup_logging(verbosity)
    report_file: Path = kwargs["report_file"]

    try:
        records = read_report(report_file, report_format)
    except ReportFormatError as e:
        reporter.print_error(str(e))
        raise click.Abort from e
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    logger.info("Read %d test results from %s", len(records), report_file)

    try:
        plan = build_split_plan(records, factors, max_filters)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    if not plan.coalescing.budget_reached:
        reporter.print_warning(
            f"Could not reduce filters to {plan.coalescing.budget}; "
            f"{plan.coalescing.final_count} top-level filters remain."
        )

    if output_format == "table":
        if output_path is None:
            CLIReporter(Console()).print_plan(plan)
        else:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", encoding="utf-8") as fh:
                CLIReporter(Console(file=fh, width=120)).print_plan(plan)
            reporter.print_success(f"Split plan written to {output_path}")
        return

    json_reporter = JSONReporter(include_durations=include_durations)
    if output_path is not None:
        json_reporter.generate(plan, output_path)
        reporter.print_success(f"Split plan written to {output_path}")
    else:
        click.echo(json_reporter.generate_string(plan))


@cli.group("config")
def config_group() -> None:
    """Inspect `.shardplan.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Example:
      shardplan config show
      shardplan config show --json-output
    """
    try:
        config = load_config(path)
    except (ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.shardplan.yml` values.

    Example:
      shardplan config validate
    """
    _load_valid_config(path)
    reporter.print_success("Configuration is valid!")
