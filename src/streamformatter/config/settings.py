"""
Settings configuration using pydantic-settings.

Loads formatter configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with STREAMFORMATTER_ prefix
3. .env file (if STREAMFORMATTER_ENV_FILE points at one)
4. Field defaults (lowest)

Example:
  STREAMFORMATTER_TABLE_STYLE=box-double
  STREAMFORMATTER_INCLUDE_STACKTRACES=true
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import streamformatter.config.types as types
import streamformatter.constants as _constants


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Only STREAMFORMATTER_ENV_FILE is honoured; a formatter is usually
    embedded in a host application that owns its own .env handling.
    """
    if env_file := _os.environ.get("STREAMFORMATTER_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    Formatter settings read from the environment.

    All settings can be overridden via environment variables with the
    STREAMFORMATTER_ prefix. Use to_config() to obtain the immutable
    FormatterConfig a StreamFormatter is built from.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="STREAMFORMATTER_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation and for reproducing issues without .env
        interference.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    format: str = _pydantic.Field(
        default=_constants.DEFAULT_FORMAT,
        description="Message line template",
    )

    table_style: str = _pydantic.Field(
        default=_constants.BOX_STYLE,
        description="Table style name",
    )

    date_format: str = _pydantic.Field(
        default=_constants.DEFAULT_DATE_FORMAT,
        description="strftime pattern for record timestamps",
    )

    allow_inline_line_breaks: bool = False
    include_stacktraces: bool = False

    max_normalize_depth: int = _pydantic.Field(
        default=_constants.DEFAULT_MAX_NORMALIZE_DEPTH, ge=1
    )
    max_normalize_item_count: int = _pydantic.Field(
        default=_constants.DEFAULT_MAX_NORMALIZE_ITEM_COUNT, ge=1
    )

    pretty_print: bool = False

    max_value_length: int = _pydantic.Field(
        default=_constants.DEFAULT_MAX_VALUE_LENGTH, ge=0
    )

    def to_config(self) -> types.FormatterConfig:
        """Convert to the FormatterConfig consumed by StreamFormatter."""
        return types.FormatterConfig.model_validate(self.model_dump())

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert settings to dictionary (for display)."""
        return self.model_dump()
