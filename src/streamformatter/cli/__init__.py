"""
CLI module for streamformatter.

Provides the command-line interface using Click.
"""

from streamformatter.cli.main import cli, main

__all__ = ["main", "cli"]
