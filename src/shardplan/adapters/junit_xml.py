"""JUnit / Surefire XML reader.

Each ``testcase`` becomes one record keyed ``classname.name`` with its
``time`` attribute in seconds.
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import TYPE_CHECKING

from defusedxml import DefusedXmlException, ElementTree
from defusedxml.ElementTree import ParseError as DefusedParseError

from shardplan.adapters.base import DurationRecord, ReportFormatError, ReportReader, local_tag

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_ROOT_TAGS = frozenset({"testsuites", "testsuite"})
_CASE_TAG = "testcase"


def parse_seconds(value: str) -> timedelta:
    """Parse a JUnit ``time`` attribute (seconds, optional ``s`` suffix).

    Raises:
        ReportFormatError: If *value* is not a finite, non-negative number.
    """
    text = value.strip().lower().removesuffix("s").replace(",", "")
    try:
        seconds = float(text)
    except ValueError as exc:
        msg = f"Invalid JUnit time: {value!r}"
        raise ReportFormatError(msg) from exc
    if not math.isfinite(seconds) or seconds < 0:
        msg = f"Invalid JUnit time: {value!r}"
        raise ReportFormatError(msg)
    return timedelta(seconds=seconds)


class JUnitXmlReader(ReportReader):
    """Reader for JUnit-style XML reports (pytest, Surefire, Gradle, ...)."""

    @property
    def name(self) -> str:
        return "junit"

    def detect(self, root_tag: str) -> bool:
        return root_tag in _ROOT_TAGS

    def read(self, path: Path) -> list[DurationRecord]:
        try:
            tree = ElementTree.parse(path)
        except (DefusedParseError, DefusedXmlException, OSError) as exc:
            msg = f"Cannot read JUnit report {path}: {exc}"
            raise ReportFormatError(msg) from exc

        records: list[DurationRecord] = []
        for elem in tree.getroot().iter():
            if local_tag(elem.tag) != _CASE_TAG:
                continue

            name = elem.get("name")
            if not name:
                msg = f"{path}: testcase #{len(records) + 1} has no name attribute"
                raise ReportFormatError(msg)
            classname = elem.get("classname", "")
            full_name = f"{classname}.{name}" if classname else name

            raw_time = elem.get("time")
            if raw_time is None:
                msg = f"{path}: testcase {full_name!r} has no time attribute"
                raise ReportFormatError(msg)
            try:
                duration = parse_seconds(raw_time)
            except ReportFormatError as exc:
                msg = f"{path}: testcase {full_name!r}: {exc}"
                raise ReportFormatError(msg) from exc
            records.append(DurationRecord(full_name, duration))

        logger.debug("Read %d test cases from %s", len(records), path)
        if not records:
            msg = f"{path}: no testcase elements found"
            raise ReportFormatError(msg)
        return records
