"""Test report readers."""

from shardplan.adapters.base import DurationRecord, ReportFormatError, ReportReader
from shardplan.adapters.junit_xml import JUnitXmlReader
from shardplan.adapters.registry import (
    AUTO_FORMAT,
    available_formats,
    detect_reader,
    get_reader,
    read_report,
)
from shardplan.adapters.trx import TrxReader

__all__ = [
    "AUTO_FORMAT",
    "DurationRecord",
    "JUnitXmlReader",
    "ReportFormatError",
    "ReportReader",
    "TrxReader",
    "available_formats",
    "detect_reader",
    "get_reader",
    "read_report",
]
