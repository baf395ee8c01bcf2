"""
Collaborator interfaces used by the formatter.

The formatter never draws tables or buffers text itself. It talks to:
- a TableSink, which accumulates rows and renders them as a bordered table
- an OutputSink, which collects lines of text until fetched

Both are reused across records and reset by the formatter on every call,
so test doubles only need to record what they receive.
"""

import abc as _abc
import collections.abc as _collections_abc
import typing as _typing


class TableSeparator:
    """Marker row ending the current table section."""

    _instance: "TableSeparator | None" = None

    def __new__(cls) -> "TableSeparator":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SEPARATOR"


SEPARATOR = TableSeparator()
"""The single separator instance passed to TableSink.add_row()."""

TableRow = _collections_abc.Sequence[_typing.Any] | TableSeparator


class OutputSink(_abc.ABC):
    """Line-oriented text buffer."""

    @_abc.abstractmethod
    def write_line(self, text: str = "") -> None:
        """Append one line of text."""
        ...

    @_abc.abstractmethod
    def fetch(self) -> str:
        """Return everything written so far and clear the buffer."""
        ...


class TableSink(_abc.ABC):
    """
    Bordered table builder.

    Rows are sequences of one to three cells:
    - one cell: a section header
    - two cells: a label and its value
    - three cells: a label, a key and the key's value
    """

    @_abc.abstractmethod
    def set_style(self, name: str) -> None:
        """
        Select the table style.

        Raises:
            ValueError: If the style name is not known.
        """
        ...

    @_abc.abstractmethod
    def set_column_max_widths(self, widths: _collections_abc.Sequence[int]) -> None:
        """Set the maximum width of each column."""
        ...

    @_abc.abstractmethod
    def set_column_widths(self, widths: _collections_abc.Sequence[int]) -> None:
        """Set the minimum width of each column."""
        ...

    @_abc.abstractmethod
    def set_title(self, title: str | None) -> None:
        """Set the title drawn with the table, or clear it with None."""
        ...

    @_abc.abstractmethod
    def set_rows(self, rows: _collections_abc.Sequence[TableRow]) -> None:
        """Replace all accumulated rows."""
        ...

    @_abc.abstractmethod
    def add_row(self, row: TableRow) -> None:
        """Append a row or SEPARATOR."""
        ...

    @_abc.abstractmethod
    def render(self) -> None:
        """Draw the accumulated rows to the output sink."""
        ...
