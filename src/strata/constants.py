"""
Shared constants for strata.

This module provides a single source of truth for values that are used
across multiple modules.
"""

INT_MIN = -(2**63)
"""Smallest value an Int can hold (signed 64-bit)."""

INT_MAX = 2**63 - 1
"""Largest value an Int can hold (signed 64-bit)."""

RUNTIME_SOURCE = "<runtime>"
"""Provenance name recorded for values written through an Accessor."""

ENV_PREFIX = "STRATA_"
"""Environment variable prefix for the library's own settings."""

DEFAULT_ENV_DELIMITER = "__"
"""Separator between nested keys in environment variable names."""
