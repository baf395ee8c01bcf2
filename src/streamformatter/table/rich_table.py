"""
Table and output sinks backed by the Rich library.

RichTableSink lays rows out in a rich Table with a label column and a
value column; three-cell rows split the value column into key and value
with a nested grid. BufferedOutput is a rich Console writing into memory.

Colour, markup, emoji and highlighting are all disabled: cell text is
printed exactly as given.
"""

import collections.abc as _collections_abc
import io as _io
import typing as _typing

import rich.box as _rich_box
import rich.console as _rich_console
import rich.table as _rich_table
import rich.text as _rich_text

import streamformatter.constants as _constants
import streamformatter.table.base as base

TABLE_STYLES: dict[str, _rich_box.Box | None] = {
    "box": _rich_box.SQUARE,
    "box-double": _rich_box.DOUBLE,
    "default": _rich_box.ASCII,
    "borderless": _rich_box.SIMPLE,
    "compact": None,
}
"""Named table styles. Any rich.box constant name is accepted as well."""


def resolve_style(name: str) -> _rich_box.Box | None:
    """
    Look up a table style by name.

    Args:
        name: A key of TABLE_STYLES, or the name of a rich.box constant
            in any case (``rounded``, ``HEAVY_HEAD``, ``minimal-double-head``).

    Returns:
        The rich Box, or None for a table without borders.

    Raises:
        ValueError: If the name matches neither.
    """
    if name in TABLE_STYLES:
        return TABLE_STYLES[name]
    box = getattr(_rich_box, name.upper().replace("-", "_"), None)
    if isinstance(box, _rich_box.Box):
        return box
    raise ValueError(f"Unknown table style: {name!r}")


def _text(value: _typing.Any) -> _rich_text.Text:
    """Plain rich Text with carriage returns turned into newlines."""
    return _rich_text.Text(str(value).replace("\r\n", "\n").replace("\r", "\n"))


def _make_console(
    width: int, file: _typing.IO[str], *, soft_wrap: bool = False
) -> _rich_console.Console:
    return _rich_console.Console(
        file=file,
        width=width,
        color_system=None,
        force_terminal=False,
        force_jupyter=False,
        highlight=False,
        markup=False,
        emoji=False,
        soft_wrap=soft_wrap,
    )


class BufferedOutput(base.OutputSink):
    """OutputSink collecting lines in memory through a rich Console."""

    def __init__(self, width: int = _constants.DEFAULT_FULL_WIDTH) -> None:
        self._buffer = _io.StringIO()
        self._console = _make_console(width, self._buffer, soft_wrap=True)

    @property
    def console(self) -> _rich_console.Console:
        """The underlying rich Console."""
        return self._console

    def write_line(self, text: str = "") -> None:
        self._console.print(_text(text), soft_wrap=True)

    def fetch(self) -> str:
        content = self._buffer.getvalue()
        self._buffer.seek(0)
        self._buffer.truncate(0)
        return content


class RichTableSink(base.TableSink):
    """
    TableSink drawing its rows with rich.table.Table.

    The rendered table has two visible columns. The first holds labels
    and section headers, right-aligned. The second spans the key and
    value columns: two-cell rows put their value there directly, three-
    cell rows put a key/value grid there.
    """

    def __init__(self, output: base.OutputSink) -> None:
        """
        Initialize the sink.

        Args:
            output: Where render() writes the drawn table.
        """
        self._output = output
        self._box: _rich_box.Box | None = TABLE_STYLES[_constants.BOX_STYLE]
        self._min_widths: tuple[int, ...] = _constants.DEFAULT_COLUMN_WIDTHS
        self._max_widths: tuple[int, ...] = _constants.DEFAULT_COLUMN_WIDTHS
        self._rows: list[base.TableRow] = []
        self._title: str | None = None

    @property
    def rows(self) -> list[base.TableRow]:
        """Rows accumulated since the last set_rows()."""
        return list(self._rows)

    def set_style(self, name: str) -> None:
        self._box = resolve_style(name)

    def set_column_max_widths(self, widths: _collections_abc.Sequence[int]) -> None:
        self._max_widths = self._check_widths(widths)

    def set_column_widths(self, widths: _collections_abc.Sequence[int]) -> None:
        self._min_widths = self._check_widths(widths)

    def set_title(self, title: str | None) -> None:
        self._title = title or None

    def set_rows(self, rows: _collections_abc.Sequence[base.TableRow]) -> None:
        self._rows = []
        for row in rows:
            self.add_row(row)

    def add_row(self, row: base.TableRow) -> None:
        if not isinstance(row, base.TableSeparator) and not 1 <= len(row) <= 3:
            raise ValueError(f"Table rows have 1 to 3 cells, got {len(row)}")
        self._rows.append(row)

    def render(self) -> None:
        table = self._build_table()
        console = _make_console(self._table_width(), _io.StringIO())
        with console.capture() as capture:
            console.print(table)
        self._output.write_line(self._with_title(capture.get().rstrip("\n")))

    # =========================================================================
    # Layout
    # =========================================================================

    @staticmethod
    def _check_widths(widths: _collections_abc.Sequence[int]) -> tuple[int, ...]:
        if len(widths) != 3:
            raise ValueError(f"Expected 3 column widths, got {len(widths)}")
        return tuple(widths)

    def _width(self, column: int) -> int:
        return max(self._min_widths[column], self._max_widths[column])

    def _value_width(self) -> int:
        # key and value columns plus the padding between them
        return self._width(1) + self._width(2) + 3

    def _table_width(self) -> int:
        return self._width(0) + self._value_width() + 7

    def _build_table(self) -> _rich_table.Table:
        table = _rich_table.Table(
            box=self._box,
            show_header=False,
            show_edge=self._box is not None,
            expand=False,
            title=self._title if self._box is None else None,
        )
        table.add_column(
            justify="right",
            min_width=self._min_widths[0],
            max_width=self._max_widths[0],
            overflow="fold",
        )
        table.add_column(
            justify="left",
            min_width=self._value_width(),
            max_width=self._value_width(),
            overflow="fold",
        )

        for row in self._rows:
            if isinstance(row, base.TableSeparator):
                if table.rows:
                    table.add_section()
                continue
            table.add_row(*self._cells(row))
        return table

    def _with_title(self, drawn: str) -> str:
        # Bordered tables carry the title inside their top border
        if self._title is None or self._box is None:
            return drawn
        top, newline, rest = drawn.partition("\n")
        label = f" {self._title} "
        if len(label) + 4 > len(top):
            return drawn
        start = (len(top) - len(label)) // 2
        return top[:start] + label + top[start + len(label):] + newline + rest

    def _cells(
        self, row: _collections_abc.Sequence[_typing.Any]
    ) -> tuple[_rich_console.RenderableType, _rich_console.RenderableType]:
        texts = [_text(cell) for cell in row]
        if len(texts) == 1:
            texts[0].stylize("bold")
            return texts[0], _rich_text.Text("")
        if len(texts) == 2:
            return texts[0], texts[1]

        grid = _rich_table.Table.grid(padding=(0, 1))
        grid.add_column(min_width=self._min_widths[1], max_width=self._max_widths[1], overflow="fold")
        grid.add_column(overflow="fold")
        grid.add_row(texts[1], texts[2])
        return texts[0], grid
