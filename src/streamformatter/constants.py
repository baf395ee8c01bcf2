"""
Shared constants for streamformatter.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Message line defaults
DEFAULT_FORMAT = "[%datetime%] %channel%.%level_name%: %message%"
"""Default message line template."""

DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
"""Default strftime pattern for record timestamps."""

# Table defaults
BOX_STYLE = "box"
"""Default table style (single-line box drawing characters)."""

WIDTH_FIRST_COLUMN = 20
WIDTH_SECOND_COLUMN = 20
WIDTH_THIRD_COLUMN = 220

DEFAULT_COLUMN_WIDTHS: tuple[int, int, int] = (
    WIDTH_FIRST_COLUMN,
    WIDTH_SECOND_COLUMN,
    WIDTH_THIRD_COLUMN,
)
"""Label, key and value column widths."""

TABLE_CHROME_WIDTH = 10
"""Characters added around the columns by borders and cell padding.

Two cells of one-space padding on each side plus three vertical borders,
plus the divider and padding of the nested key/value grid.
"""

# Normalization defaults
DEFAULT_MAX_NORMALIZE_DEPTH = 9
"""Maximum nesting depth before normalization gives up."""

DEFAULT_MAX_NORMALIZE_ITEM_COUNT = 1000
"""Maximum items per sequence or mapping before normalization gives up."""

# Truncation limits for display
DEFAULT_MAX_VALUE_LENGTH = 1000
"""Maximum characters of a single table cell value."""

DEFAULT_FULL_WIDTH = sum(DEFAULT_COLUMN_WIDTHS) + TABLE_CHROME_WIDTH
"""Width of the rule line and the table with default column widths."""
