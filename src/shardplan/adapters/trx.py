"""Visual Studio TRX reader.

Reads ``UnitTestResult`` elements (``testName`` and ``duration``
attributes) in any namespace. Durations use .NET ``TimeSpan`` text,
``[d.]hh:mm[:ss[.fraction]]``.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import TYPE_CHECKING

from defusedxml import DefusedXmlException, ElementTree
from defusedxml.ElementTree import ParseError as DefusedParseError

from shardplan.adapters.base import DurationRecord, ReportFormatError, ReportReader, local_tag

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_ROOT_TAG = "TestRun"
_RESULT_TAG = "UnitTestResult"
_MAX_FRACTION_DIGITS = 7
_MICROSECOND_DIGITS = 6

_TIMESPAN_RE = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d+):(?P<minutes>\d+)"
    r"(?::(?P<seconds>\d+)(?:\.(?P<fraction>\d+))?)?$"
)

# Upper bounds TimeSpan.Parse enforces on the clock components.
_COMPONENT_LIMITS = {"hours": 23, "minutes": 59, "seconds": 59}


def parse_timespan(value: str) -> timedelta:
    """Parse a TRX duration such as ``00:00:01.2345678``.

    Fractions beyond microsecond precision are truncated.

    Raises:
        ReportFormatError: If *value* is not a valid non-negative time span.
    """
    match = _TIMESPAN_RE.match(value.strip())
    if match is None:
        msg = f"Invalid TRX duration: {value!r}"
        raise ReportFormatError(msg)

    for component, limit in _COMPONENT_LIMITS.items():
        if int(match.group(component) or 0) > limit:
            msg = f"Invalid TRX duration: {value!r} ({component} must be at most {limit})"
            raise ReportFormatError(msg)

    fraction = match.group("fraction") or ""
    if len(fraction) > _MAX_FRACTION_DIGITS:
        msg = f"Invalid TRX duration: {value!r} (more than {_MAX_FRACTION_DIGITS} fraction digits)"
        raise ReportFormatError(msg)
    microseconds = int(fraction[:_MICROSECOND_DIGITS].ljust(_MICROSECOND_DIGITS, "0"))

    return timedelta(
        days=int(match.group("days") or 0),
        hours=int(match.group("hours")),
        minutes=int(match.group("minutes")),
        seconds=int(match.group("seconds") or 0),
        microseconds=microseconds,
    )


class TrxReader(ReportReader):
    """Reader for ``.trx`` files produced by ``dotnet test --logger trx``."""

    @property
    def name(self) -> str:
        return "trx"

    def detect(self, root_tag: str) -> bool:
        return root_tag == _ROOT_TAG

    def read(self, path: Path) -> list[DurationRecord]:
        try:
            tree = ElementTree.parse(path)
        except (DefusedParseError, DefusedXmlException, OSError) as exc:
            msg = f"Cannot read TRX report {path}: {exc}"
            raise ReportFormatError(msg) from exc

        records: list[DurationRecord] = []
        element_count = 0
        for elem in tree.getroot().iter():
            element_count += 1
            if local_tag(elem.tag) != _RESULT_TAG:
                continue

            test_name = elem.get("testName")
            if not test_name:
                msg = f"{path}: UnitTestResult #{len(records) + 1} has no testName attribute"
                raise ReportFormatError(msg)
            raw_duration = elem.get("duration")
            if raw_duration is None:
                msg = f"{path}: UnitTestResult {test_name!r} has no duration attribute"
                raise ReportFormatError(msg)

            try:
                duration = parse_timespan(raw_duration)
            except ReportFormatError as exc:
                msg = f"{path}: UnitTestResult {test_name!r}: {exc}"
                raise ReportFormatError(msg) from exc
            records.append(DurationRecord(test_name, duration))

        logger.debug("Read %d elements, %d test results from %s", element_count, len(records), path)
        if not records:
            msg = f"{path}: no UnitTestResult elements found"
            raise ReportFormatError(msg)
        return records
