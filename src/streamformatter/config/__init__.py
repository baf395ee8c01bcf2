"""
Configuration module for streamformatter.

Uses pydantic for the formatter config model and pydantic-settings for
environment variable loading.
"""

from streamformatter.config.settings import Settings
from streamformatter.config.types import FormatterConfig

__all__ = ["FormatterConfig", "Settings"]
