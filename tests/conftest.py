"""Shared fixtures for shardplan tests."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING
from xml.sax.saxutils import quoteattr

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

_TRX_NAMESPACE = "http://microsoft.com/schemas/VisualStudio/TeamTest/2010"


@pytest.fixture
def example_records() -> list[tuple[str, timedelta]]:
    """Three tests under two classes of one namespace."""
    return [
        ("A.B.C1", timedelta(seconds=10)),
        ("A.B.C2", timedelta(seconds=5)),
        ("A.D.C3", timedelta(seconds=2)),
    ]


@pytest.fixture
def write_trx(tmp_path: Path) -> Callable[[list[tuple[str, str]]], Path]:
    """Return a factory writing a TRX file with ``(testName, duration)`` results."""

    def _write(results: list[tuple[str, str]], name: str = "run.trx") -> Path:
        rows = "\n".join(
            f"    <UnitTestResult testName={quoteattr(test_name)} "
            f'duration="{duration}" outcome="Passed" />'
            for test_name, duration in results
        )
        path = tmp_path / name
        path.write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<TestRun id="1" xmlns="{_TRX_NAMESPACE}">\n'
            "  <Results>\n"
            f"{rows}\n"
            "  </Results>\n"
            "</TestRun>\n",
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture
def example_trx(write_trx: Callable[[list[tuple[str, str]]], Path]) -> Path:
    """TRX file holding the example records."""
    return write_trx(
        [
            ("A.B.C1", "00:00:10"),
            ("A.B.C2", "00:00:05"),
            ("A.D.C3", "00:00:02"),
        ]
    )
