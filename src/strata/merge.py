"""
Merger: fold prioritized source snapshots into one configuration tree.

Sources are given lowest precedence first. Each is snapshotted exactly
once and folded into an accumulator that starts as an empty Mapping:

- Mapping + Mapping: merged key by key, recursively. Keys only in the
  accumulator survive, keys only in the incoming layer are copied in.
- Sequence + Sequence: the incoming Sequence replaces the old one.
- Anything else: the incoming value replaces the old one.

Provenance records, for every leaf path, the name of the last source that
wrote it. A leaf is any Value that is not a non-empty Mapping, so a whole
Sequence is one leaf.

Example:
    >>> import strata.sources as sources
    >>> config = merge([
    ...     sources.MemorySource("defaults", {"server": {"host": "0.0.0.0", "port": 80}}),
    ...     sources.MemorySource("user", {"server": {"port": 8080}}),
    ... ])
    >>> config.to_python()
    {'server': {'host': '0.0.0.0', 'port': 8080}}
    >>> config.source_of("server.port")
    'user'
"""

from __future__ import annotations

import collections.abc as _abc
import enum as _enum
import logging as _logging
import types as _types
import typing as _typing

import strata.errors as errors
import strata.path as path_mod
import strata.settings as settings
import strata.sources as sources_mod
import strata.value as value

if _typing.TYPE_CHECKING:
    import strata.accessor as accessor_mod

_logger = _logging.getLogger(__name__)

# Nested provenance while folding: a source name for a leaf, or a dict of
# child provenance for a non-empty Mapping.
_Provenance = _typing.Union[str, dict[str, "_Provenance"]]


class FailurePolicy(_enum.Enum):
    """What to do when a source raises SourceUnavailable."""

    STRICT = "strict"
    """Abort the merge with SourceFailedError."""

    SKIP_UNAVAILABLE = "skip_unavailable"
    """Log a warning and treat the layer as an empty Mapping."""

    @classmethod
    def default(cls) -> FailurePolicy:
        """The policy configured in the library settings."""
        return cls(settings.get_settings().failure_policy)


class MergedConfig:
    """
    Result of a merge: the owned root tree plus leaf provenance.

    The root may be mutated through accessor(); provenance is kept in
    step with such writes. Otherwise the result is inert, and a new merge
    produces a new MergedConfig.
    """

    __slots__ = ("_root", "_provenance", "_sources", "_skipped")

    def __init__(
        self,
        root: value.Value,
        provenance: dict[path_mod.Path, str],
        sources: tuple[str, ...] = (),
        skipped: tuple[str, ...] = (),
    ) -> None:
        self._root = root
        self._provenance = provenance
        self._sources = sources
        self._skipped = skipped

    @property
    def root(self) -> value.Value:
        return self._root

    @property
    def provenance(self) -> _abc.Mapping[path_mod.Path, str]:
        """Read-only view of leaf path -> source name."""
        return _types.MappingProxyType(self._provenance)

    @property
    def sources(self) -> tuple[str, ...]:
        """Names of the sources that were folded, lowest precedence first."""
        return self._sources

    @property
    def skipped(self) -> tuple[str, ...]:
        """Names of the sources skipped as unavailable."""
        return self._skipped

    def source_of(self, path: path_mod.Path | str) -> str | None:
        """
        Name of the source that supplied the value at ``path``.

        Paths inside a Sequence resolve to whoever wrote the Sequence.
        Returns None for paths with no recorded writer, such as a
        Mapping whose keys came from several sources.
        """
        current = path_mod.Path.coerce(path)
        while True:
            name = self._provenance.get(current)
            if name is not None:
                return name
            if current.is_root:
                return None
            current = current.parent

    def leaves(self) -> _abc.Iterator[tuple[path_mod.Path, value.Value, str | None]]:
        """Yield ``(path, value, source)`` for every leaf, in tree order."""
        stack: list[tuple[path_mod.Path, value.Value]] = [(path_mod.Path.root(), self._root)]
        while stack:
            path, node = stack.pop()
            if isinstance(node, value.Mapping) and len(node):
                for key in reversed(list(node)):
                    stack.append((path / key, node[key]))
            else:
                yield path, node, self.source_of(path)

    def accessor(self) -> accessor_mod.Accessor:
        """An Accessor bound to this config."""
        import strata.accessor as accessor_mod

        return accessor_mod.Accessor(self)

    def to_python(self) -> _typing.Any:
        return value.to_python(self._root)

    # Used by Accessor to keep provenance current.

    def _replace_root(self, root: value.Value) -> None:
        self._root = root

    def _forget(self, prefix: path_mod.Path) -> None:
        for path in [p for p in self._provenance if p.startswith(prefix)]:
            del self._provenance[path]

    def _discard(self, path: path_mod.Path) -> None:
        self._provenance.pop(path, None)

    def _mark(self, path: path_mod.Path, source: str) -> None:
        self._provenance[path] = source

    def _record(self, path: path_mod.Path, written: value.Value, source: str) -> None:
        self._forget(path)
        self._provenance.update(_flatten(_build_provenance(written, source), path))

    def _shift(self, sequence_path: path_mod.Path, removed_index: int) -> None:
        """Renumber entries for Sequence elements after ``removed_index``."""
        depth = len(sequence_path)
        moved: dict[path_mod.Path, str] = {}
        for path in list(self._provenance):
            if len(path) <= depth or not path.startswith(sequence_path):
                continue
            index = path.segments[depth]
            if isinstance(index, int) and index > removed_index:
                source = self._provenance.pop(path)
                shifted = sequence_path.extend((index - 1,) + path.segments[depth + 1 :])
                moved[shifted] = source
        self._provenance.update(moved)

    def __repr__(self) -> str:
        return (
            f"MergedConfig(sources={list(self._sources)!r}, "
            f"skipped={list(self._skipped)!r}, leaves={len(self._provenance)})"
        )


class Merger:
    """
    Folds a list of sources into a MergedConfig.

    Args:
        policy: Behavior on SourceUnavailable. None uses the library
            setting (strict unless configured otherwise).
    """

    def __init__(self, policy: FailurePolicy | None = None) -> None:
        self._policy = policy

    @property
    def policy(self) -> FailurePolicy:
        return self._policy if self._policy is not None else FailurePolicy.default()

    def merge(self, sources: _abc.Iterable[sources_mod.Source]) -> MergedConfig:
        """
        Merge ``sources``, given in ascending precedence.

        Raises:
            SourceFailedError: A source was unavailable under STRICT.
            InvalidSnapshotError: A snapshot was not a Value.
            CyclicValueError: A snapshot contains itself.
        """
        policy = self.policy
        root: value.Value = value.Mapping()
        provenance: _Provenance = {}
        merged: list[str] = []
        skipped: list[str] = []

        for source in sources:
            name = source.name()
            try:
                snapshot = source.snapshot()
            except errors.SourceUnavailable as e:
                if policy is FailurePolicy.STRICT:
                    raise errors.SourceFailedError(name) from e
                _logger.warning("Skipping unavailable source %r: %s", name, e.reason)
                skipped.append(name)
                continue

            if not isinstance(snapshot, value.Value):
                raise errors.InvalidSnapshotError(name, type(snapshot))

            _logger.debug("Folding source %r (%s)", name, snapshot.kind().value)
            fold = _Fold(name)
            root, provenance = fold.merge(root, snapshot, provenance, path_mod.Path.root())
            merged.append(name)

        return MergedConfig(
            root,
            dict(_flatten(provenance, path_mod.Path.root())),
            tuple(merged),
            tuple(skipped),
        )


def merge(
    sources: _abc.Iterable[sources_mod.Source],
    policy: FailurePolicy | None = None,
) -> MergedConfig:
    """Merge ``sources`` (lowest precedence first). See Merger.merge."""
    return Merger(policy).merge(sources)


class _Fold:
    """One source's contribution to the accumulator."""

    def __init__(self, source_name: str) -> None:
        self._name = source_name
        # ids of incoming containers on the current descent path
        self._active: set[int] = set()

    def merge(
        self,
        base: value.Value,
        incoming: value.Value,
        provenance: _Provenance,
        path: path_mod.Path,
    ) -> tuple[value.Value, _Provenance]:
        if isinstance(base, value.Mapping) and isinstance(incoming, value.Mapping):
            return self._merge_mappings(base, incoming, provenance, path)
        copied = self._copy(incoming, path)
        return copied, _build_provenance(copied, self._name)

    def _merge_mappings(
        self,
        base: value.Mapping,
        incoming: value.Mapping,
        provenance: _Provenance,
        path: path_mod.Path,
    ) -> tuple[value.Value, _Provenance]:
        if not len(incoming):
            if not len(base):
                # an empty Mapping is itself a leaf
                return base, self._name
            return base, provenance

        self._enter(incoming, path)
        try:
            children = provenance if isinstance(provenance, dict) else {}
            for key, item in incoming.items():
                child_path = path / key
                if key in base:
                    base[key], children[key] = self.merge(
                        base[key], item, children.get(key, {}), child_path
                    )
                else:
                    copied = self._copy(item, child_path)
                    base[key] = copied
                    children[key] = _build_provenance(copied, self._name)
        finally:
            self._active.discard(id(incoming))
        return base, children

    def _copy(self, node: value.Value, path: path_mod.Path) -> value.Value:
        """Deep-copy ``node``, failing on cycles."""
        if isinstance(node, value.Mapping):
            self._enter(node, path)
            try:
                result = value.Mapping()
                for key, item in node.items():
                    result[key] = self._copy(item, path / key)
                return result
            finally:
                self._active.discard(id(node))
        if isinstance(node, value.Sequence):
            self._enter(node, path)
            try:
                return value.Sequence(
                    self._copy(item, path / index) for index, item in enumerate(node)
                )
            finally:
                self._active.discard(id(node))
        return node

    def _enter(self, container: value.Value, path: path_mod.Path) -> None:
        node_id = id(container)
        if node_id in self._active:
            raise errors.CyclicValueError(self._name, path)
        self._active.add(node_id)


def _build_provenance(node: value.Value, source_name: str) -> _Provenance:
    """Attribute every leaf under ``node`` to ``source_name``."""
    if isinstance(node, value.Mapping) and len(node):
        return {key: _build_provenance(item, source_name) for key, item in node.items()}
    return source_name


def _flatten(
    provenance: _Provenance,
    prefix: path_mod.Path,
) -> _abc.Iterator[tuple[path_mod.Path, str]]:
    if isinstance(provenance, str):
        yield prefix, provenance
        return
    for key, sub in provenance.items():
        yield from _flatten(sub, prefix / key)
