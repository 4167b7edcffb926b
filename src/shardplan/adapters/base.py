"""Base types for test report readers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from pathlib import Path


class ReportFormatError(ValueError):
    """A test report is missing, malformed or holds no usable results."""


class DurationRecord(NamedTuple):
    """Duration of one executed test, as read from a report."""

    name: str
    duration: timedelta


class ReportReader(ABC):
    """Decode one report format into ``DurationRecord`` values."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Format identifier (e.g. ``'trx'``)."""

    @abstractmethod
    def detect(self, root_tag: str) -> bool:
        """Return True if a document whose root local tag is *root_tag* is handled."""

    @abstractmethod
    def read(self, path: Path) -> list[DurationRecord]:
        """Return every test record in *path*.

        Raises:
            ReportFormatError: If the report cannot be decoded or is empty.
        """


def local_tag(tag: str) -> str:
    """Strip an XML namespace from *tag*."""
    return tag.split("}")[-1] if "}" in tag else tag
