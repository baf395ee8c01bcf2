"""
Formatter factory.

Builds StreamFormatter instances from plain option mappings, the way
logging configuration files describe them:

    LOGGING = {
        "version": 1,
        "formatters": {
            "table": {
                "()": "streamformatter.factory.stream_formatter",
                "tableStyle": "box-double",
                "includeStacktraces": True,
            },
        },
        ...
    }
    logging.config.dictConfig(LOGGING)

Option names may be snake_case or camelCase. Options set to None fall
back to their defaults.
"""

import collections.abc as _abc
import logging as _logging
import typing as _typing

import pydantic as _pydantic

import streamformatter.config as config
import streamformatter.formatter as formatter

_logger = _logging.getLogger(__name__)


class FormatterCreationError(Exception):
    """Raised when a formatter cannot be built from its options."""

    pass


def create_formatter(
    options: _abc.Mapping[str, _typing.Any] | None = None,
) -> formatter.StreamFormatter:
    """
    Create a StreamFormatter from an options mapping.

    Args:
        options: Formatter options (see FormatterConfig). Unknown keys are
            ignored with a warning.

    Returns:
        A ready-to-use formatter with rich-backed sinks.

    Raises:
        FormatterCreationError: If the options are invalid or the
            formatter cannot be constructed.
    """
    values = {key: value for key, value in (options or {}).items() if value is not None}

    try:
        formatter_config = config.FormatterConfig.model_validate(values)
    except _pydantic.ValidationError as e:
        raise FormatterCreationError(f"Invalid formatter options: {e}") from e

    if formatter_config.has_extra_fields():
        _logger.warning(
            "Ignoring unknown formatter options: %s",
            ", ".join(sorted(formatter_config.get_extra_fields())),
        )

    return _build(formatter_config)


def stream_formatter(**options: _typing.Any) -> formatter.StreamFormatter:
    """Factory for logging.config.dictConfig ``"()"`` entries."""
    return create_formatter(options)


def create_formatter_from_settings(
    settings: config.Settings | None = None,
) -> formatter.StreamFormatter:
    """
    Create a StreamFormatter from environment settings.

    Args:
        settings: Settings to use (read from STREAMFORMATTER_* variables
            if not provided).

    Raises:
        FormatterCreationError: If the settings do not form a valid
            formatter configuration.
    """
    try:
        if settings is None:
            settings = config.Settings()
        formatter_config = settings.to_config()
    except _pydantic.ValidationError as e:
        raise FormatterCreationError(f"Invalid formatter settings: {e}") from e

    return _build(formatter_config)


def _build(formatter_config: config.FormatterConfig) -> formatter.StreamFormatter:
    try:
        instance = formatter.StreamFormatter(formatter_config)
    except (TypeError, ValueError) as e:
        raise FormatterCreationError(f"Cannot create formatter: {e}") from e

    _logger.debug(
        "Created stream formatter (style=%s, width=%d)",
        formatter_config.table_style,
        formatter_config.full_width,
    )
    return instance
