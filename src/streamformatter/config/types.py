"""Configuration type definitions for streamformatter.

This module defines the Pydantic model holding one formatter's settings.
A FormatterConfig is created once and never mutated; the formatter's two
toggles (inline line breaks, stack traces) replace it with an updated copy.

Option names are accepted in snake_case (``table_style``) and in the
camelCase spelling used by logging configuration files (``tableStyle``).
"""

import typing as _typing

import pydantic as _pydantic
import pydantic.alias_generators as _alias_generators

import streamformatter.constants as _constants


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for config types.

    Unknown fields are preserved rather than silently dropped, so callers
    can report typos in option names.
    """

    model_config = _pydantic.ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
        alias_generator=_alias_generators.to_camel,
    )

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """
        Return fields that were provided but not in the schema.

        Returns:
            Dict of field_name → value for all unrecognized fields.
        """
        return dict(self.model_extra) if self.model_extra else {}

    def has_extra_fields(self) -> bool:
        """Check if this config has any unrecognized fields."""
        return bool(self.model_extra)


class FormatterConfig(ConfigBase):
    """
    Settings of one StreamFormatter.

    Invariant: include_stacktraces implies allow_inline_line_breaks.
    """

    format: str = _constants.DEFAULT_FORMAT
    """Message line template with %placeholder% tokens."""

    table_style: str = _constants.BOX_STYLE
    """Table style name (see streamformatter.table.rich_table.TABLE_STYLES)."""

    date_format: str = _constants.DEFAULT_DATE_FORMAT
    """strftime pattern for the record timestamp."""

    allow_inline_line_breaks: bool = False
    """Keep line breaks in values instead of collapsing them to spaces."""

    include_stacktraces: bool = False
    """Add a Trace row to every exception in a chain."""

    max_normalize_depth: int = _pydantic.Field(
        default=_constants.DEFAULT_MAX_NORMALIZE_DEPTH, ge=1
    )
    """Maximum nesting depth the normalizer descends into."""

    max_normalize_item_count: int = _pydantic.Field(
        default=_constants.DEFAULT_MAX_NORMALIZE_ITEM_COUNT, ge=1
    )
    """Maximum items kept per sequence or mapping."""

    pretty_print: bool = False
    """Pretty-print JSON for structured values."""

    column_widths: tuple[int, int, int] = _constants.DEFAULT_COLUMN_WIDTHS
    """Label, key and value column widths."""

    max_value_length: int = _pydantic.Field(
        default=_constants.DEFAULT_MAX_VALUE_LENGTH, ge=0
    )
    """Cell values are truncated to this many characters."""

    @_pydantic.field_validator("column_widths")
    @classmethod
    def _check_column_widths(cls, value: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(width < 1 for width in value):
            raise ValueError(f"column widths must be positive, got {value}")
        return value

    @_pydantic.model_validator(mode="after")
    def _stacktraces_need_line_breaks(self) -> "FormatterConfig":
        """Force allow_inline_line_breaks on when stack traces are included."""
        if self.include_stacktraces and not self.allow_inline_line_breaks:
            # frozen model: bypass the pydantic setattr guard
            object.__setattr__(self, "allow_inline_line_breaks", True)
        return self

    @property
    def full_width(self) -> int:
        """Total rendered width: the columns plus borders and padding."""
        return sum(self.column_widths) + _constants.TABLE_CHROME_WIDTH
