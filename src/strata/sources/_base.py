"""
The Source protocol and in-memory reference implementations.

A source is anything with a stable ``name()`` (used only in diagnostics
and provenance) and a ``snapshot()`` that returns the layer's current
Value tree, or raises SourceUnavailable. Sources are stateless from the
merger's point of view: each merge asks for one fresh snapshot per source
and never assumes two snapshots are identical.

Priority is not a property of the source. It is the position in the list
handed to merge(), or the priority given to Layers.add().
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import strata.errors as errors
import strata.value as value


@_typing.runtime_checkable
class Source(_typing.Protocol):
    """A named producer of Value snapshots."""

    def name(self) -> str:
        """Stable name for diagnostics. Not required to be unique."""
        ...

    def snapshot(self) -> value.Value:
        """
        Produce the layer's current tree.

        Raises:
            SourceUnavailable: If the layer cannot produce data right now.
        """
        ...


class MemorySource:
    """
    Source backed by an in-memory tree.

    Accepts a Value or plain Python data (converted with from_python).
    Every snapshot is an independent clone, so callers may mutate what
    they get back without affecting the source.

    Example:
        >>> defaults = MemorySource("defaults", {"server": {"port": 8080}})
        >>> defaults.snapshot()
        Mapping({'server': Mapping({'port': Int(8080)})})
    """

    def __init__(self, name: str, data: _typing.Any = None) -> None:
        self._name = name
        self._data = value.Mapping() if data is None else value.from_python(data)

    def name(self) -> str:
        return self._name

    def snapshot(self) -> value.Value:
        return self._data.clone()

    def update(self, data: _typing.Any) -> None:
        """Replace the held tree. Takes effect on the next snapshot."""
        self._data = value.from_python(data)

    def __repr__(self) -> str:
        return f"MemorySource({self._name!r})"


class CallableSource:
    """
    Source that calls a producer function for every snapshot.

    The producer takes no arguments and returns a Value or plain Python
    data. An OSError from the producer is reported as SourceUnavailable;
    a SourceUnavailable raised by the producer passes through untouched.
    """

    def __init__(
        self,
        name: str,
        producer: _abc.Callable[[], _typing.Any],
    ) -> None:
        self._name = name
        self._producer = producer

    def name(self) -> str:
        return self._name

    def snapshot(self) -> value.Value:
        try:
            data = self._producer()
        except OSError as e:
            raise errors.SourceUnavailable(self._name, str(e)) from e
        return value.from_python(data)

    def __repr__(self) -> str:
        return f"CallableSource({self._name!r})"
