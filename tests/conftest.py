"""
Shared pytest fixtures for streamformatter tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import collections.abc as _collections_abc
import datetime as _datetime
import os as _os
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import streamformatter.config as config
import streamformatter.formatter as formatter
import streamformatter.records as records
import streamformatter.table.base as table_base

# Environment keys that should be cleared for isolated tests
ENV_PREFIX = "STREAMFORMATTER_"

FIXED_TIME = _datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=_datetime.timezone.utc)
"""Timestamp used by sample records."""


# =============================================================================
# Recording Fakes
# =============================================================================


class RecordingOutput(table_base.OutputSink):
    """OutputSink keeping written lines in a list."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.fetch_count = 0

    def write_line(self, text: str = "") -> None:
        self.lines.append(text)

    def fetch(self) -> str:
        self.fetch_count += 1
        content = "".join(f"{line}\n" for line in self.lines)
        self.lines = []
        return content


class RecordingTable(table_base.TableSink):
    """
    TableSink recording every call.

    render() writes one "|"-joined line per row (and "---" per separator)
    to the output, so rendered blocks can be compared as plain text.
    """

    def __init__(self, output: table_base.OutputSink) -> None:
        self.output = output
        self.style: str | None = None
        self.title: str | None = None
        self.max_widths: list[int] = []
        self.widths: list[int] = []
        self.rows: list[_typing.Any] = []
        self.render_count = 0
        self.fail_on_render = False

    def set_style(self, name: str) -> None:
        self.style = name

    def set_column_max_widths(self, widths: _collections_abc.Sequence[int]) -> None:
        self.max_widths = list(widths)

    def set_column_widths(self, widths: _collections_abc.Sequence[int]) -> None:
        self.widths = list(widths)

    def set_title(self, title: str | None) -> None:
        self.title = title

    def set_rows(self, rows: _collections_abc.Sequence[table_base.TableRow]) -> None:
        self.rows = list(rows)

    def add_row(self, row: table_base.TableRow) -> None:
        self.rows.append(row if isinstance(row, table_base.TableSeparator) else list(row))

    def render(self) -> None:
        if self.fail_on_render:
            raise RuntimeError("table rendering failed")
        self.render_count += 1
        for row in self.rows:
            if isinstance(row, table_base.TableSeparator):
                self.output.write_line("---")
            else:
                self.output.write_line("|".join(str(cell) for cell in row))

    def data_rows(self) -> list[list[_typing.Any]]:
        """Rows without separators."""
        return [row for row in self.rows if not isinstance(row, table_base.TableSeparator)]

    def rows_for(self, label: str) -> list[list[_typing.Any]]:
        """The row starting with label plus its continuation rows."""
        found: list[list[_typing.Any]] = []
        for row in self.data_rows():
            if found and row[0] == "":
                found.append(row)
            elif found:
                break
            elif row[0] == label:
                found.append(row)
        return found


# =============================================================================
# Fixtures
# =============================================================================


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with STREAMFORMATTER_* keys removed.

    Use with mock.patch.dict to isolate tests from the actual environment.
    """
    return {k: v for k, v in _os.environ.items() if not k.startswith(ENV_PREFIX)}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def recording_output() -> RecordingOutput:
    return RecordingOutput()


@_pytest.fixture
def recording_table(recording_output: RecordingOutput) -> RecordingTable:
    return RecordingTable(recording_output)


@_pytest.fixture
def make_formatter(
    recording_output: RecordingOutput,
    recording_table: RecordingTable,
) -> _typing.Callable[..., formatter.StreamFormatter]:
    """Factory for formatters wired to the recording fakes."""

    def _create(**options: _typing.Any) -> formatter.StreamFormatter:
        return formatter.StreamFormatter(
            config.FormatterConfig(**options),
            output=recording_output,
            table=recording_table,
        )

    return _create


@_pytest.fixture
def make_entry() -> _typing.Callable[..., records.LogEntry]:
    """Factory for LogEntry objects with sensible defaults."""

    def _create(**fields: _typing.Any) -> records.LogEntry:
        values: dict[str, _typing.Any] = {
            "datetime": FIXED_TIME,
            "channel": "app",
            "level": 400,
            "level_name": "ERROR",
            "message": "test message",
        }
        values.update(fields)
        return records.LogEntry(**values)

    return _create
