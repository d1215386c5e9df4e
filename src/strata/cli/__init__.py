"""
CLI module for strata.

Provides the command-line interface using Click.
"""

from strata.cli.main import cli, main

__all__ = ["main", "cli"]
