"""Split plan reporters."""

from shardplan.reporters.json_reporter import JSONReporter
from shardplan.reporters.terminal import CLIReporter, reporter

__all__ = ["CLIReporter", "JSONReporter", "reporter"]
