"""Reader selection by format name or by sniffing the report root element."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from defusedxml import DefusedXmlException, ElementTree
from defusedxml.ElementTree import ParseError as DefusedParseError

from shardplan.adapters.base import ReportFormatError, ReportReader, local_tag
from shardplan.adapters.junit_xml import JUnitXmlReader
from shardplan.adapters.trx import TrxReader

if TYPE_CHECKING:
    from pathlib import Path

    from shardplan.adapters.base import DurationRecord

logger = logging.getLogger(__name__)

AUTO_FORMAT = "auto"

_READERS: dict[str, type[ReportReader]] = {
    "trx": TrxReader,
    "junit": JUnitXmlReader,
}


def available_formats() -> list[str]:
    """Return the accepted ``--format`` values, ``auto`` first."""
    return [AUTO_FORMAT, *_READERS]


def get_reader(fmt: str) -> ReportReader:
    """Return a reader for the named format.

    Raises:
        ValueError: If *fmt* is not a known format.
    """
    reader_cls = _READERS.get(fmt)
    if reader_cls is None:
        msg = f"Unknown report format {fmt!r} (expected one of: {', '.join(_READERS)})"
        raise ValueError(msg)
    return reader_cls()


def detect_reader(path: Path) -> ReportReader:
    """Pick a reader from the root element of *path*.

    Raises:
        ReportFormatError: If the file is unreadable or no reader handles it.
    """
    root_tag = _root_tag(path)
    for reader_cls in _READERS.values():
        reader = reader_cls()
        if reader.detect(root_tag):
            logger.debug("Detected %s report in %s", reader.name, path)
            return reader
    msg = f"{path}: unrecognised report root element <{root_tag}>"
    raise ReportFormatError(msg)


def read_report(path: Path, fmt: str = AUTO_FORMAT) -> list[DurationRecord]:
    """Decode *path* with the named reader, or the detected one for ``auto``."""
    reader = detect_reader(path) if fmt == AUTO_FORMAT else get_reader(fmt)
    return reader.read(path)


def _root_tag(path: Path) -> str:
    try:
        with path.open("rb") as fh:
            for _event, elem in ElementTree.iterparse(fh, events=("start",)):
                return local_tag(elem.tag)
    except (DefusedParseError, DefusedXmlException, OSError) as exc:
        msg = f"Cannot read report {path}: {exc}"
        raise ReportFormatError(msg) from exc
    msg = f"{path}: empty report"
    raise ReportFormatError(msg)
