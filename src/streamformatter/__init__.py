"""
streamformatter - table-style log record formatter

Renders structured log records as a message line followed by a
bordered metadata table, for the standard library logging package.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("streamformatter")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "streamformatter Contributors"

from streamformatter.config import FormatterConfig, Settings  # noqa: E402
from streamformatter.factory import (  # noqa: E402
    FormatterCreationError,
    create_formatter,
    stream_formatter,
)
from streamformatter.formatter import StreamFormatter  # noqa: E402
from streamformatter.records import LogEntry  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "FormatterConfig",
    "FormatterCreationError",
    "LogEntry",
    "Settings",
    "StreamFormatter",
    "create_formatter",
    "stream_formatter",
]
