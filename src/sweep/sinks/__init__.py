"""Output sinks for routed records."""

from .base import MemorySink, Sink
from .csv_file import CsvSink, read_rows

__all__ = ["Sink", "MemorySink", "CsvSink", "read_rows"]
