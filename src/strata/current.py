"""
Process-wide "current configuration" holder.

Applications that want a single globally reachable config can publish it
here. Nothing else in strata reads this module.
"""

from __future__ import annotations

import strata.merge as merge

_current: merge.MergedConfig | None = None


def set_current(config: merge.MergedConfig) -> None:
    """Publish ``config`` as the current configuration."""
    global _current
    if not isinstance(config, merge.MergedConfig):
        raise TypeError(f"expected a MergedConfig, got {type(config).__name__}")
    _current = config


def get_current() -> merge.MergedConfig:
    """
    Return the published configuration.

    Raises:
        LookupError: If nothing has been published.
    """
    if _current is None:
        raise LookupError("no current configuration has been set")
    return _current


def clear_current() -> None:
    global _current
    _current = None
