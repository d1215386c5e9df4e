"""
Exception hierarchy for strata.

Every exception raised by the library derives from StrataError, so callers
can catch everything with a single except clause, or branch on the
specific failure:

- PathSyntaxError: a path expression could not be parsed.
- PathError: a path could not be resolved against a tree.
    - NotFoundError: a segment does not exist.
    - TypeMismatchError: a value has the wrong kind for the request.
    - ExtractionError: a subtree does not fit the requested model.
- DuplicateKeyError: a Mapping was built with a repeated key.
- SourceUnavailable: a source could not produce a snapshot.
- MergeError: a merge pass failed.
    - SourceFailedError: a source was unavailable under the strict policy.
    - CyclicValueError: a snapshot contains itself.
    - InvalidSnapshotError: a snapshot was not a Value.

Every exception carries the context needed to render its message (path,
source name, expected/found kind), so a diagnostic never has to re-walk
the tree.
"""

from __future__ import annotations

import typing as _typing

if _typing.TYPE_CHECKING:
    import strata.path as path_mod

__all__ = [
    "StrataError",
    "PathSyntaxError",
    "PathError",
    "NotFoundError",
    "TypeMismatchError",
    "ExtractionError",
    "DuplicateKeyError",
    "SourceUnavailable",
    "MergeError",
    "SourceFailedError",
    "CyclicValueError",
    "InvalidSnapshotError",
]


def _describe(kind: object) -> str:
    """Render a Kind, a type, or a plain string for an error message."""
    value = getattr(kind, "value", None)
    if isinstance(value, str):
        return value
    if isinstance(kind, type):
        return kind.__name__
    return str(kind)


def _render_path(path: object) -> str:
    text = str(path)
    return text if text else "<root>"


class StrataError(Exception):
    """Base exception for all strata errors."""

    pass


class PathSyntaxError(StrataError, ValueError):
    """A path expression is malformed.

    Attributes:
        expression: The text that failed to parse.
        position: Zero-based offset of the offending character.
        reason: Short description of what was wrong.
    """

    def __init__(self, expression: str, position: int, reason: str) -> None:
        self.expression = expression
        self.position = position
        self.reason = reason
        super().__init__(
            f"invalid path {expression!r} at position {position}: {reason}"
        )


class PathError(StrataError):
    """A path could not be used against a tree."""

    def __init__(self, path: path_mod.Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class NotFoundError(PathError):
    """A path segment could not be resolved.

    Attributes:
        path: The full path that was requested.
        resolved: The longest prefix of ``path`` that did resolve.
        reason: Why resolution stopped.
    """

    def __init__(
        self,
        path: path_mod.Path,
        resolved: path_mod.Path,
        reason: str,
    ) -> None:
        self.resolved = resolved
        self.reason = reason
        super().__init__(
            path,
            f"path {_render_path(path)!r} not found: {reason} "
            f"(resolved up to {_render_path(resolved)!r})",
        )


class TypeMismatchError(PathError):
    """The value at a path has the wrong kind for the request.

    Attributes:
        path: Where the mismatch was detected.
        expected: What the operation needed (a Kind, a type, or a description).
        found: The Kind actually present.
    """

    def __init__(
        self,
        path: path_mod.Path,
        expected: object,
        found: object,
    ) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            path,
            f"type mismatch at {_render_path(path)!r}: "
            f"expected {_describe(expected)}, found {_describe(found)}",
        )


class ExtractionError(PathError):
    """A subtree could not be converted into the requested type.

    Raised by Accessor.get_model(). The pydantic ValidationError is
    chained as ``__cause__``.

    Attributes:
        path: Where the subtree was read.
        target: The type that was requested.
        reason: The validation failure, as text.
    """

    def __init__(self, path: path_mod.Path, target: object, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(
            path,
            f"cannot read {_render_path(path)!r} as {_describe(target)}: {reason}",
        )


class DuplicateKeyError(StrataError, ValueError):
    """A Mapping was constructed with the same key twice."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"duplicate mapping key {key!r}")


class SourceUnavailable(StrataError):
    """A source cannot currently produce a snapshot.

    Raised by Source.snapshot(). The merge failure policy decides whether
    this aborts the merge or the layer is skipped.
    """

    def __init__(self, source_name: str, reason: str) -> None:
        self.source_name = source_name
        self.reason = reason
        super().__init__(f"source {source_name!r} unavailable: {reason}")


class MergeError(StrataError):
    """A merge pass could not complete."""

    pass


class SourceFailedError(MergeError):
    """A source was unavailable and the failure policy is strict.

    The original SourceUnavailable is chained as ``__cause__``.
    """

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        super().__init__(f"merge aborted: source {source_name!r} failed")


class CyclicValueError(MergeError):
    """A snapshot contains a container that (transitively) contains itself."""

    def __init__(self, source_name: str, path: path_mod.Path) -> None:
        self.source_name = source_name
        self.path = path
        super().__init__(
            f"cyclic value in source {source_name!r} at {_render_path(path)!r}"
        )


class InvalidSnapshotError(MergeError):
    """A source returned something that is not a Value."""

    def __init__(self, source_name: str, found_type: type) -> None:
        self.source_name = source_name
        self.found_type = found_type
        super().__init__(
            f"source {source_name!r} returned {found_type.__name__}, expected a Value"
        )
