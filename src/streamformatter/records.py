"""
Log record type consumed by the formatter.

LogEntry is the read-only view of one log record: timestamp, channel,
level, message and the two free-form context/extra maps. It can be built
from a standard library logging.LogRecord or from a JSON object.
"""

import collections.abc as _abc
import dataclasses as _dataclasses
import datetime as _datetime
import logging as _logging
import typing as _typing

# Attributes every stdlib LogRecord carries; anything else was passed via extra=
_RESERVED_RECORD_ATTRS = frozenset(
    _logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "context", "taskName"}

EXCEPTION_KEY = "exception"
"""Key under which a record's exc_info exception is placed in extra."""


@_dataclasses.dataclass(frozen=True)
class LogEntry:
    """One structured log record."""

    datetime: _datetime.datetime
    channel: str
    level: int
    level_name: str
    message: str
    context: _abc.Mapping[_typing.Any, _typing.Any] = _dataclasses.field(default_factory=dict)
    extra: _abc.Mapping[_typing.Any, _typing.Any] = _dataclasses.field(default_factory=dict)

    @classmethod
    def from_log_record(cls, record: _logging.LogRecord) -> "LogEntry":
        """
        Adapt a standard library LogRecord.

        The record's ``context`` attribute (if a mapping) becomes the context;
        every other attribute set through ``extra=`` becomes the extra map.
        An exception attached via ``exc_info`` is added to extra under
        EXCEPTION_KEY.
        """
        context = getattr(record, "context", None)
        if not isinstance(context, _abc.Mapping):
            context = {}

        extra: dict[str, _typing.Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if record.exc_info and record.exc_info[1] is not None:
            extra[EXCEPTION_KEY] = record.exc_info[1]

        return cls(
            datetime=_datetime.datetime.fromtimestamp(record.created).astimezone(),
            channel=record.name,
            level=record.levelno,
            level_name=record.levelname,
            message=record.getMessage(),
            context=dict(context),
            extra=extra,
        )

    @classmethod
    def from_dict(cls, data: _abc.Mapping[str, _typing.Any]) -> "LogEntry":
        """
        Build an entry from a decoded JSON object.

        Args:
            data: Mapping with ``message`` (required) and optional
                ``datetime`` (ISO 8601), ``channel``, ``level``,
                ``level_name``, ``context`` and ``extra``.

        Raises:
            ValueError: If a field has the wrong type or the timestamp
                cannot be parsed.
        """
        if "message" not in data:
            raise ValueError("record has no 'message' field")

        raw_datetime = data.get("datetime")
        if raw_datetime is None:
            timestamp = _datetime.datetime.now().astimezone()
        elif isinstance(raw_datetime, str):
            timestamp = _datetime.datetime.fromisoformat(raw_datetime)
        else:
            raise ValueError(f"'datetime' must be an ISO 8601 string, got {raw_datetime!r}")

        level = data.get("level", _logging.INFO)
        if isinstance(level, str):
            level_name = level.upper()
            level = _logging.getLevelName(level_name)
            if not isinstance(level, int):
                raise ValueError(f"unknown level name {data['level']!r}")
        elif isinstance(level, int) and not isinstance(level, bool):
            level_name = _logging.getLevelName(level)
        else:
            raise ValueError(f"'level' must be a number or name, got {level!r}")

        context = data.get("context") or {}
        extra = data.get("extra") or {}
        if not isinstance(context, _abc.Mapping) or not isinstance(extra, _abc.Mapping):
            raise ValueError("'context' and 'extra' must be JSON objects")

        return cls(
            datetime=timestamp,
            channel=str(data.get("channel", "app")),
            level=level,
            level_name=str(data.get("level_name", level_name)),
            message=str(data["message"]),
            context=dict(context),
            extra=dict(extra),
        )
