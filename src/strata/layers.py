"""
Layers: a registry of prioritized sources with a cached merge.

Example:
    >>> import strata.sources as sources
    >>> layers = Layers()
    >>> layers.add(sources.MemorySource("defaults", {"debug": False}), priority=0)
    >>> layers.add(sources.MemorySource("overrides", {"debug": True}), priority=10)
    >>> layers.accessor().get_bool("debug")
    True

Thread safety:
    Not thread-safe. Registering or removing sources while another thread
    reads ``config`` needs external locking.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import logging as _logging

import strata.accessor as accessor
import strata.merge as merge
import strata.sources as sources_mod

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True, slots=True)
class _Entry:
    source: sources_mod.Source
    priority: int
    sequence: int


class Layers:
    """
    Prioritized sources and their merged result.

    Higher priority wins. Sources with equal priority are ordered by
    registration, later registrations winning.

    Args:
        policy: Failure policy passed to every merge. None uses the
            library setting.
    """

    def __init__(self, policy: merge.FailurePolicy | None = None) -> None:
        self._merger = merge.Merger(policy)
        self._entries: list[_Entry] = []
        self._counter = 0
        self._cache: merge.MergedConfig | None = None

    def add(self, source: sources_mod.Source, priority: int = 0) -> None:
        """Register ``source``. Invalidates the cached config."""
        if not isinstance(source, sources_mod.Source):
            raise TypeError(f"not a Source: {type(source).__name__}")
        self._entries.append(_Entry(source, priority, self._counter))
        self._counter += 1
        self._entries.sort(key=lambda entry: (entry.priority, entry.sequence))
        self._clear_cache()

    def remove(self, name: str) -> sources_mod.Source:
        """
        Unregister the highest-precedence source called ``name``.

        Raises:
            KeyError: If no registered source has that name.
        """
        for index in range(len(self._entries) - 1, -1, -1):
            if self._entries[index].source.name() == name:
                entry = self._entries.pop(index)
                self._clear_cache()
                return entry.source
        raise KeyError(name)

    def names(self) -> list[str]:
        """Source names, lowest precedence first."""
        return [entry.source.name() for entry in self._entries]

    def sources(self) -> list[sources_mod.Source]:
        """Registered sources, lowest precedence first."""
        return [entry.source for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> _abc.Iterator[sources_mod.Source]:
        return iter(self.sources())

    @property
    def config(self) -> merge.MergedConfig:
        """The merged result, computed on first access after a change."""
        if self._cache is None:
            _logger.debug("Merging %d layer(s)", len(self._entries))
            self._cache = self._merger.merge(self.sources())
        return self._cache

    def reload(self) -> merge.MergedConfig:
        """Drop the cached result and merge again."""
        self._clear_cache()
        return self.config

    def accessor(self) -> accessor.Accessor:
        """An Accessor over the current config."""
        return accessor.Accessor(self.config)

    def _clear_cache(self) -> None:
        self._cache = None

    def __repr__(self) -> str:
        return f"Layers({self.names()!r})"
