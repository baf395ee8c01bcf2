"""
Command line interface for streamformatter.

Renders JSON-lines log records (one JSON object per line) the way the
formatter would inside an application, which is handy for previewing
table styles and templates:

    echo '{"message": "hi", "context": {"user": "ann"}}' | streamformatter render -
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import yaml as _yaml

import streamformatter
import streamformatter.factory as factory
import streamformatter.records as records
import streamformatter.table.rich_table as rich_table

_logger = _logging.getLogger(__name__)

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _load_config_file(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """Load formatter options from a YAML file.

    Raises:
        SystemExit: If the file is not valid YAML or not a mapping.
    """
    try:
        data = _yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, _yaml.YAMLError) as e:
        _click.echo(f"Error: cannot read config {path}: {e}", err=True)
        raise SystemExit(1) from None

    if data is None:
        return {}
    if not isinstance(data, dict):
        _click.echo(f"Error: config {path} must contain a mapping of options", err=True)
        raise SystemExit(1)
    return data


def _read_entries(stream: _typing.TextIO) -> list[records.LogEntry]:
    """Parse JSON-lines records, skipping blank lines.

    Raises:
        SystemExit: On the first line that is not a valid record.
    """
    entries: list[records.LogEntry] = []
    for number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            data = _json.loads(line)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            entries.append(records.LogEntry.from_dict(data))
        except ValueError as e:
            _click.echo(f"Error: line {number}: {e}", err=True)
            raise SystemExit(1) from None
    return entries


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(streamformatter.__version__, "-v", "--version", prog_name="streamformatter")
@_click.option("--verbose", is_flag=True, help="Log factory diagnostics to stderr")
def cli(verbose: bool) -> None:
    """
    streamformatter - render log records as message lines plus tables.

    \b
    Examples:
        streamformatter render records.jsonl
        streamformatter render --style box-double -
        streamformatter render --config formatter.yaml records.jsonl
        streamformatter styles
    """
    if verbose:
        _logging.basicConfig(level=_logging.DEBUG, format="%(name)s: %(message)s")


@cli.command()
@_click.argument("source", type=_click.File("r", encoding="utf-8"), default="-")
@_click.option(
    "--config",
    "config_path",
    type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path),
    default=None,
    help="YAML file of formatter options",
)
@_click.option("--format", "message_format", type=str, default=None, help="Message line template")
@_click.option("--style", "table_style", type=str, default=None, help="Table style name")
@_click.option("--date-format", type=str, default=None, help="strftime pattern for timestamps")
@_click.option(
    "--inline-line-breaks/--no-inline-line-breaks",
    default=None,
    help="Keep line breaks in values",
)
@_click.option(
    "--stacktraces/--no-stacktraces",
    default=None,
    help="Add a Trace row to exceptions",
)
@_click.option("--pretty/--no-pretty", default=None, help="Pretty-print JSON values")
def render(
    source: _typing.TextIO,
    config_path: _pathlib.Path | None,
    message_format: str | None,
    table_style: str | None,
    date_format: str | None,
    inline_line_breaks: bool | None,
    stacktraces: bool | None,
    pretty: bool | None,
) -> None:
    """Render JSON-lines records from SOURCE (default: stdin).

    Each line holds one object with a required "message" and optional
    "datetime", "channel", "level", "level_name", "context" and "extra".
    Command line options override values from --config.
    """
    options = _load_config_file(config_path) if config_path else {}

    overrides = {
        "format": message_format,
        "table_style": table_style,
        "date_format": date_format,
        "allow_inline_line_breaks": inline_line_breaks,
        "include_stacktraces": stacktraces,
        "pretty_print": pretty,
    }
    options.update({key: value for key, value in overrides.items() if value is not None})

    try:
        formatter = factory.create_formatter(options)
    except factory.FormatterCreationError as e:
        _click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None

    entries = _read_entries(source)
    _logger.debug("Rendering %d record(s)", len(entries))
    _click.echo(formatter.format_batch(entries), nl=False)


@cli.command()
def styles() -> None:
    """List the named table styles."""
    for name in rich_table.TABLE_STYLES:
        _click.echo(name)
    _click.echo("(any rich.box name, e.g. rounded or heavy, is accepted too)")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="streamformatter")


if __name__ == "__main__":
    main()
