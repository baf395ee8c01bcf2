"""
The stream formatter.

StreamFormatter turns one log record into a human-readable block:

    ==========================================================...
    [2024-01-01T12:00:00+0000] app.ERROR: Payment failed

    ┌──────────────┬──────────────────────────────────────────...
    │ General Info │
    ├──────────────┼──────────────────────────────────────────...
    │         Time │ 2024-01-01T12:00:00+0000
    │        Level │ ERROR
    ├──────────────┼──────────────────────────────────────────...
    │      Context │
    ├──────────────┼──────────────────────────────────────────...
    │        Order │ 1234
    └──────────────┴──────────────────────────────────────────...

It is a logging.Formatter, so it can be attached to any handler, and it
also formats LogEntry objects directly. Drawing the table and buffering
the text are delegated to a TableSink and an OutputSink.

The formatter never logs: it may itself be attached to a logging handler.
"""

import collections.abc as _abc
import functools as _functools
import logging as _logging
import re as _re
import typing as _typing

import streamformatter.config.types as types
import streamformatter.exceptions as exceptions
import streamformatter.normalizer as normalizer_module
import streamformatter.records as records
import streamformatter.stringify as stringify_module
import streamformatter.table.base as table_base
import streamformatter.table.rich_table as rich_table

MessageFormatter = _abc.Callable[[records.LogEntry], str]
"""Strategy building the message line from a record."""

SECTIONS = ("extra", "context")
"""Table sections after General Info, in rendering order."""

_TOP_LEVEL_FIELDS = ("message", "channel", "level", "level_name", "datetime")


class StreamFormatter(_logging.Formatter):
    """
    Formatter rendering records as a message line plus a metadata table.

    The output and table sinks are reused for every record and reset at
    the start of each format() call, so one instance must not be shared
    between threads.
    """

    def __init__(
        self,
        config: types.FormatterConfig | None = None,
        *,
        output: table_base.OutputSink | None = None,
        table: table_base.TableSink | None = None,
        normalizer: normalizer_module.Normalizer | None = None,
        message_formatter: MessageFormatter | None = None,
    ) -> None:
        """
        Initialize the formatter.

        Args:
            config: Formatter settings (defaults if not provided).
            output: Text buffer (a BufferedOutput if not provided).
            table: Table builder (a RichTableSink over output if not provided).
            normalizer: Value normalizer (built from config if not provided).
            message_formatter: Optional strategy replacing template
                substitution for the message line.

        Raises:
            ValueError: If the configured table style is unknown.
        """
        super().__init__()
        self._config = config or types.FormatterConfig()
        self._output = output or rich_table.BufferedOutput(width=self._config.full_width)
        self._table = table or rich_table.RichTableSink(self._output)
        self._normalizer = normalizer or normalizer_module.Normalizer(
            max_depth=self._config.max_normalize_depth,
            max_item_count=self._config.max_normalize_item_count,
            date_format=self._config.date_format,
        )
        self._message_formatter = message_formatter

        # Unknown table styles raise here
        self._table.set_style(self._config.table_style)
        self._table.set_column_max_widths(self._config.column_widths)
        self._table.set_column_widths(self._config.column_widths)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> types.FormatterConfig:
        """Current settings."""
        return self._config

    @property
    def date_format(self) -> str:
        return self._config.date_format

    @property
    def max_normalize_depth(self) -> int:
        return self._config.max_normalize_depth

    @property
    def max_normalize_item_count(self) -> int:
        return self._config.max_normalize_item_count

    # =========================================================================
    # Configuration
    # =========================================================================

    def allow_inline_line_breaks(self, allow: bool = True) -> "StreamFormatter":
        """Keep or collapse line breaks in rendered values."""
        self._config = self._config.model_copy(update={"allow_inline_line_breaks": allow})
        return self

    def include_stacktraces(self, include: bool = True) -> "StreamFormatter":
        """
        Add a Trace row to each exception in a chain.

        Enabling stack traces also enables inline line breaks.
        """
        update: dict[str, bool] = {"include_stacktraces": include}
        if include:
            update["allow_inline_line_breaks"] = True
        self._config = self._config.model_copy(update=update)
        return self

    def set_formatter(self, message_formatter: MessageFormatter | None) -> "StreamFormatter":
        """Install (or with None, remove) a message line strategy."""
        self._message_formatter = message_formatter
        return self

    # =========================================================================
    # Formatting
    # =========================================================================

    def format(self, record: records.LogEntry | _logging.LogRecord) -> str:  # type: ignore[override]
        """
        Render one record.

        Args:
            record: A LogEntry, or a stdlib LogRecord which is adapted
                with LogEntry.from_log_record().

        Returns:
            The rule line, message line and table, ending in a blank line.
        """
        entry = record if isinstance(record, records.LogEntry) else records.LogEntry.from_log_record(record)
        normalized = self._normalize_entry(entry)

        if self._message_formatter is not None:
            message = self._message_formatter(entry)
        else:
            message = self._substitute(self._config.format, entry, normalized)

        # Drop anything a previous failed call left behind
        self._output.fetch()
        self._output.write_line("=" * self._config.full_width)
        self._output.write_line(message)
        self._output.write_line()

        self._table.set_style(self._config.table_style)
        self._table.set_column_max_widths(self._config.column_widths)
        self._table.set_column_widths(self._config.column_widths)
        self._table.set_title(self.stringify(normalized["level_name"]))
        self._table.set_rows([])

        self._table.add_row(["General Info"])
        self._table.add_row(table_base.SEPARATOR)
        self._table.add_row(["Time", self._cell(normalized["datetime"])])
        self._table.add_row(["Level", self._cell(normalized["level_name"])])

        for section in SECTIONS:
            values = normalized[section]
            if not values:
                continue
            raw_values = getattr(entry, section)

            self._table.add_row(table_base.SEPARATOR)
            self._table.add_row([section.capitalize()])
            self._table.add_row(table_base.SEPARATOR)

            for key, value in values.items():
                raw = raw_values.get(key)
                if isinstance(raw, BaseException):
                    self._add_exception(raw)
                else:
                    self._add_fact(key, value)

        self._table.render()
        self._output.write_line()
        return self._output.fetch()

    def format_batch(self, entries: _abc.Iterable[records.LogEntry | _logging.LogRecord]) -> str:
        """Render several records, concatenated in order."""
        return "".join(self.format(entry) for entry in entries)

    def stringify(self, value: _typing.Any) -> str:
        """Convert a value to display text using this formatter's newline policy."""
        return stringify_module.stringify(
            value,
            allow_inline_line_breaks=self._config.allow_inline_line_breaks,
            pretty_print=self._config.pretty_print,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _normalize_entry(self, entry: records.LogEntry) -> dict[str, _typing.Any]:
        normalize = self._normalizer.normalize
        context = normalize(entry.context)
        extra = normalize(entry.extra)
        return {
            "message": normalize(entry.message),
            "channel": normalize(entry.channel),
            "level": normalize(entry.level),
            "level_name": normalize(entry.level_name),
            "datetime": normalize(entry.datetime),
            "context": context if isinstance(context, dict) else {},
            "extra": extra if isinstance(extra, dict) else {},
        }

    def _substitute(
        self,
        template: str,
        entry: records.LogEntry,
        normalized: dict[str, _typing.Any],
    ) -> str:
        """Replace %token% placeholders; unknown tokens are left as they are."""
        tokens: dict[str, _abc.Callable[[], str]] = {}
        for name in _TOP_LEVEL_FIELDS:
            tokens[name] = _functools.partial(self.stringify, normalized[name])
        for section in SECTIONS:
            values = normalized[section]
            tokens[section] = _functools.partial(self.stringify, values) if values else str
            raw_values = getattr(entry, section)
            for key, value in values.items():
                raw = raw_values.get(key)
                if isinstance(raw, BaseException):
                    value = exceptions.format_inline(raw)
                tokens.setdefault(f"{section}.{key}", _functools.partial(self.stringify, value))

        # Longest names first so "context.a.b" wins over "context.a"
        names = sorted(tokens, key=len, reverse=True)
        pattern = _re.compile("%(" + "|".join(_re.escape(name) for name in names) + ")%")
        return pattern.sub(lambda match: tokens[match.group(1)](), template)

    def _cell(self, value: _typing.Any) -> str:
        return stringify_module.truncate(self.stringify(value), self._config.max_value_length)

    @staticmethod
    def _key_name(key: _typing.Any) -> str:
        return str(key).replace("_", " ").strip()

    @classmethod
    def _label(cls, key: _typing.Any) -> str:
        name = cls._key_name(key)
        return name[:1].upper() + name[1:]

    def _add_fact(self, key: _typing.Any, value: _typing.Any) -> None:
        """Add the rows of one key/value pair."""
        # Multi-row values keep the key's case; single values are capitalized
        name = self._key_name(key)

        if isinstance(value, list) and value:
            for index, item in enumerate(value):
                self._table.add_row([name if index == 0 else "", self._cell(item)])
            return

        if isinstance(value, dict) and value:
            for index, (sub_key, item) in enumerate(value.items()):
                self._table.add_row([name if index == 0 else "", str(sub_key), self._cell(item)])
            return

        self._table.add_row([self._label(key), self._cell(value)])

    def _add_exception(self, exc: BaseException) -> None:
        """Add the rows describing an exception chain."""
        for row in exceptions.expand(exc, include_stacktraces=self._config.include_stacktraces):
            if isinstance(row, table_base.TableSeparator):
                self._table.add_row(row)
                continue
            label, value = row
            self._table.add_row([label, self._cell(value)])
