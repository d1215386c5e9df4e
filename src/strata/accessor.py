"""
Accessor: typed, path-based reads and writes over a Value tree.

An Accessor wraps either a MergedConfig or a bare Value. Reads never
coerce beyond the small, explicit table in get_as(); writes clone what
they insert and, for a MergedConfig, keep its provenance in step.

Example:
    >>> import strata.value as value
    >>> acc = Accessor(value.from_python({"server": {"port": 8080}}))
    >>> acc.get_int("server.port")
    8080
    >>> acc.set("server.tls.enabled", True)
    >>> acc.get_as("server.tls.enabled", bool)
    True
    >>> acc.get_as("server.timeout", float, default=30.0)
    30.0
    >>> acc.get_model("server.tls", dict[str, bool])
    {'enabled': True}
"""

from __future__ import annotations

import typing as _typing

import pydantic as _pydantic

import strata.constants as constants
import strata.errors as errors
import strata.merge as merge
import strata.path as path_mod
import strata.value as value

PathLike = _typing.Union[path_mod.Path, str, tuple]

T = _typing.TypeVar("T", bool, int, float, str)

_MISSING: _typing.Any = object()

# target type -> Value classes it accepts
_COERCIONS: dict[type, tuple[type[value.Value], ...]] = {
    bool: (value.Bool,),
    int: (value.Int,),
    float: (value.Float, value.Int),
    str: (value.String,),
}

_EXPECTED_KIND: dict[type, value.Kind] = {
    bool: value.Kind.BOOL,
    int: value.Kind.INT,
    float: value.Kind.FLOAT,
    str: value.Kind.STRING,
}


class Accessor:
    """
    Path-based access to a configuration tree.

    Args:
        target: A MergedConfig (writes update its provenance) or a Value
            (accessed and mutated in place).
    """

    def __init__(self, target: merge.MergedConfig | value.Value) -> None:
        if isinstance(target, merge.MergedConfig):
            self._config: merge.MergedConfig | None = target
            self._value: value.Value | None = None
        elif isinstance(target, value.Value):
            self._config = None
            self._value = target
        else:
            raise TypeError(
                f"Accessor needs a MergedConfig or a Value, got {type(target).__name__}"
            )

    @property
    def root(self) -> value.Value:
        if self._config is not None:
            return self._config.root
        return _typing.cast(value.Value, self._value)

    def _replace_root(self, root: value.Value) -> None:
        if self._config is None:
            self._value = root
        else:
            self._config._replace_root(root)
            self._config._discard(path_mod.Path.root())

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, path: PathLike) -> value.Value:
        """
        Return the Value at ``path`` (not a copy).

        Raises:
            NotFoundError: If any segment cannot be resolved.
        """
        target = path_mod.Path.coerce(path)
        node = self.root
        for depth, segment in enumerate(target.segments):
            node = _step(node, segment, target, depth)
        return node

    def contains(self, path: PathLike) -> bool:
        try:
            self.get(path)
        except errors.NotFoundError:
            return False
        return True

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (path_mod.Path, str, tuple)):
            return False
        return self.contains(path)

    @_typing.overload
    def get_as(self, path: PathLike, target_type: type[T]) -> T: ...

    @_typing.overload
    def get_as(self, path: PathLike, target_type: type[T], default: T) -> T: ...

    def get_as(
        self,
        path: PathLike,
        target_type: type[T],
        default: _typing.Any = _MISSING,
    ) -> _typing.Any:
        """
        Read the value at ``path`` as a Python ``bool``, ``int``, ``float``
        or ``str``.

        Only these conversions exist: Bool to bool, Int to int, Float to
        float, Int to float, String to str. There is no string parsing and
        no int/bool crossover.

        Args:
            path: Where to read.
            target_type: One of bool, int, float, str.
            default: Returned if the path does not exist. A value of the
                wrong kind still raises.

        Raises:
            NotFoundError: Path missing and no default given.
            TypeMismatchError: The value's kind has no conversion to
                ``target_type``.
            TypeError: ``target_type`` is not supported.
        """
        accepted = _COERCIONS.get(target_type)
        if accepted is None:
            raise TypeError(f"unsupported target type: {target_type!r}")
        target = path_mod.Path.coerce(path)
        try:
            node = self.get(target)
        except errors.NotFoundError:
            if default is _MISSING:
                raise
            return default
        if not isinstance(node, accepted):
            raise errors.TypeMismatchError(
                target, _EXPECTED_KIND[target_type], node.kind()
            )
        payload = node.value  # type: ignore[attr-defined]
        return target_type(payload)

    def get_bool(self, path: PathLike, default: _typing.Any = _MISSING) -> bool:
        return self.get_as(path, bool, default)

    def get_int(self, path: PathLike, default: _typing.Any = _MISSING) -> int:
        return self.get_as(path, int, default)

    def get_float(self, path: PathLike, default: _typing.Any = _MISSING) -> float:
        return self.get_as(path, float, default)

    def get_str(self, path: PathLike, default: _typing.Any = _MISSING) -> str:
        return self.get_as(path, str, default)

    def get_model(
        self,
        path: PathLike,
        model: _typing.Any,
        default: _typing.Any = _MISSING,
        *,
        strict: bool = True,
    ) -> _typing.Any:
        """
        Read the subtree at ``path`` as an instance of ``model``.

        ``model`` is anything pydantic can validate: a BaseModel, a
        dataclass, a TypedDict or a type such as ``dict[str, int]``. The
        subtree is converted with to_python() and validated in strict mode
        by default, so strings are not parsed into numbers.

        Raises:
            NotFoundError: Path missing and no default given.
            ExtractionError: The subtree does not validate as ``model``.
        """
        target = path_mod.Path.coerce(path)
        try:
            node = self.get(target)
        except errors.NotFoundError:
            if default is _MISSING:
                raise
            return default
        adapter = _pydantic.TypeAdapter(model)
        try:
            return adapter.validate_python(value.to_python(node), strict=strict)
        except _pydantic.ValidationError as e:
            raise errors.ExtractionError(target, model, str(e)) from e

    # =========================================================================
    # Writes
    # =========================================================================

    def set(self, path: PathLike, new_value: _typing.Any) -> None:
        """
        Store a copy of ``new_value`` at ``path``.

        Plain Python data is converted with from_python. Missing or Null
        intermediates become containers: a Mapping when the next segment
        is a key, a Sequence when it is an index. An index equal to the
        Sequence length appends.

        Raises:
            NotFoundError: An index is beyond the end of a Sequence.
            TypeMismatchError: An intermediate holds a value that cannot
                take the next segment.
        """
        target = path_mod.Path.coerce(path)
        written = value.from_python(new_value)

        if target.is_root:
            if self._config is None:
                self._value = written
            else:
                self._config._replace_root(written)
                self._config._record(target, written, constants.RUNTIME_SOURCE)
            return

        segments = target.segments
        if isinstance(self.root, value.Null):
            self._replace_root(_empty_container_for(segments[0]))

        node = self.root
        for depth, segment in enumerate(segments[:-1]):
            node = _descend_for_write(node, segment, segments[depth + 1], target, depth)
        _assign(node, segments[-1], written, target)

        if self._config is not None:
            self._config._record(target, written, constants.RUNTIME_SOURCE)
            ancestors: list[tuple[path_mod.Path, value.Value]] = []
            ancestor = target
            while not ancestor.is_root:
                ancestor = ancestor.parent
                ancestors.append((ancestor, self.get(ancestor)))
            # ancestors that used to be leaves are Mappings now
            for ancestor, held in ancestors:
                if isinstance(held, value.Mapping):
                    self._config._discard(ancestor)
            # a Sequence is a leaf, so one created here needs a writer
            for ancestor, held in ancestors:
                if isinstance(held, value.Sequence) and self._config.source_of(ancestor) is None:
                    self._config._mark(ancestor, constants.RUNTIME_SOURCE)

    def remove(self, path: PathLike) -> value.Value:
        """
        Remove and return the Value at ``path``.

        Remaining Mapping keys keep their order; later Sequence elements
        shift down by one.

        Raises:
            PathError: ``path`` is the root.
            NotFoundError: Nothing exists at ``path``.
        """
        target = path_mod.Path.coerce(path)
        if target.is_root:
            raise errors.PathError(target, "cannot remove the root")

        parent = self.root
        for depth, segment in enumerate(target.segments[:-1]):
            parent = _step(parent, segment, target, depth)
        last = target.segments[-1]
        _step(parent, last, target, len(target) - 1)

        if isinstance(parent, value.Mapping):
            removed = parent.pop(_typing.cast(str, last))
        else:
            removed = _typing.cast(value.Sequence, parent).pop(_typing.cast(int, last))

        if self._config is not None:
            self._config._forget(target)
            # later elements moved down; so does their provenance
            if isinstance(parent, value.Sequence):
                self._config._shift(target.parent, _typing.cast(int, last))
            # a leaf left without a writer is attributed to the runtime
            is_leaf = isinstance(parent, value.Sequence) or not len(parent)
            if is_leaf and self._config.source_of(target.parent) is None:
                self._config._mark(target.parent, constants.RUNTIME_SOURCE)
        return removed

    def __repr__(self) -> str:
        return f"Accessor({self.root!r})"


def _step(
    node: value.Value,
    segment: str | int,
    path: path_mod.Path,
    depth: int,
) -> value.Value:
    """Resolve one segment or raise NotFoundError."""
    resolved = path_mod.Path(path.segments[:depth])
    if isinstance(segment, str):
        if not isinstance(node, value.Mapping):
            raise errors.NotFoundError(
                path, resolved, f"key {segment!r} on a {node.kind().value}"
            )
        if segment not in node:
            raise errors.NotFoundError(path, resolved, f"no key {segment!r}")
        return node[segment]
    if not isinstance(node, value.Sequence):
        raise errors.NotFoundError(
            path, resolved, f"index {segment} on a {node.kind().value}"
        )
    if segment >= len(node):
        raise errors.NotFoundError(
            path, resolved, f"index {segment} out of range for length {len(node)}"
        )
    return node[segment]


def _empty_container_for(segment: str | int) -> value.Value:
    return value.Mapping() if isinstance(segment, str) else value.Sequence()


def _descend_for_write(
    node: value.Value,
    segment: str | int,
    next_segment: str | int,
    path: path_mod.Path,
    depth: int,
) -> value.Value:
    """Return the child at ``segment``, creating it when absent or Null."""
    if isinstance(segment, str):
        if not isinstance(node, value.Mapping):
            raise errors.TypeMismatchError(
                path_mod.Path(path.segments[:depth]), value.Kind.MAPPING, node.kind()
            )
        child = node.get(segment)
        if child is None or isinstance(child, value.Null):
            child = _empty_container_for(next_segment)
            node[segment] = child
    else:
        if not isinstance(node, value.Sequence):
            raise errors.TypeMismatchError(
                path_mod.Path(path.segments[:depth]), value.Kind.SEQUENCE, node.kind()
            )
        if segment > len(node):
            raise errors.NotFoundError(
                path,
                path_mod.Path(path.segments[:depth]),
                f"index {segment} beyond end of sequence of length {len(node)}",
            )
        if segment == len(node):
            child = _empty_container_for(next_segment)
            node.append(child)
        else:
            child = node[segment]
            if isinstance(child, value.Null):
                child = _empty_container_for(next_segment)
                node[segment] = child

    expected = value.Mapping if isinstance(next_segment, str) else value.Sequence
    if not isinstance(child, expected):
        raise errors.TypeMismatchError(
            path_mod.Path(path.segments[: depth + 1]), expected.KIND, child.kind()
        )
    return child


def _assign(
    node: value.Value,
    segment: str | int,
    written: value.Value,
    path: path_mod.Path,
) -> None:
    depth = len(path) - 1
    if isinstance(segment, str):
        if not isinstance(node, value.Mapping):
            raise errors.TypeMismatchError(
                path_mod.Path(path.segments[:depth]), value.Kind.MAPPING, node.kind()
            )
        node[segment] = written
        return
    if not isinstance(node, value.Sequence):
        raise errors.TypeMismatchError(
            path_mod.Path(path.segments[:depth]), value.Kind.SEQUENCE, node.kind()
        )
    if segment > len(node):
        raise errors.NotFoundError(
            path,
            path_mod.Path(path.segments[:depth]),
            f"index {segment} beyond end of sequence of length {len(node)}",
        )
    if segment == len(node):
        node.append(written)
    else:
        node[segment] = written
