"""
Configuration sources.

A source is any object with ``name()`` and ``snapshot()``; see Source.
File and environment readers live in strata.sources.adapters.
"""

from strata.sources._base import CallableSource, MemorySource, Source

__all__ = ["CallableSource", "MemorySource", "Source"]
