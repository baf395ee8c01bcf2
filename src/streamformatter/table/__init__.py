"""Table and output sinks."""

from streamformatter.table.base import SEPARATOR, OutputSink, TableSeparator, TableSink
from streamformatter.table.rich_table import TABLE_STYLES, BufferedOutput, RichTableSink

__all__ = [
    "SEPARATOR",
    "TABLE_STYLES",
    "BufferedOutput",
    "OutputSink",
    "RichTableSink",
    "TableSeparator",
    "TableSink",
]
