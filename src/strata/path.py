"""
Path: an address of a sub-Value inside a Value tree.

A Path is an immutable tuple of segments. A ``str`` segment selects a
Mapping key, an ``int`` segment selects a Sequence index. Zero segments
address the root. Paths carry no reference to a tree; the same Path can
be resolved against any number of trees.

Expression syntax (Path.parse):

    server.port             keys separated by dots
    server.ports.0          a bare all-digit segment is an index
    server.ports[0]         bracketed index, may repeat: matrix[0][1]
    labels["app.io/name"]   quoted key: dots, brackets or digits allowed
    ""                      the root

Malformed expressions raise PathSyntaxError. Nothing is normalized: there
are no wildcards, and a key never matches an index.

Example:
    >>> p = Path.parse("server.ports[0]")
    >>> p.segments
    ('server', 'ports', 0)
    >>> str(p / "host")
    'server.ports[0].host'
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import re as _re
import typing as _typing

import strata.errors as errors

Segment: _typing.TypeAlias = str | int
"""A mapping key (str) or a sequence index (non-negative int)."""

_DIGITS = _re.compile(r"[0-9]+")
_SPECIAL = frozenset(".[]")
_QUOTES = frozenset("\"'")


def _check_segment(segment: object) -> str | int:
    if isinstance(segment, bool):
        raise TypeError("path segments must be str or int, got bool")
    if isinstance(segment, int):
        if segment < 0:
            raise ValueError(f"sequence index must be non-negative, got {segment}")
        return segment
    if isinstance(segment, str):
        return segment
    raise TypeError(f"path segments must be str or int, got {type(segment).__name__}")


@_dataclasses.dataclass(frozen=True, slots=True)
class Path:
    """Immutable sequence of key/index segments."""

    segments: tuple[str | int, ...] = ()

    def __post_init__(self) -> None:
        checked = tuple(_check_segment(segment) for segment in self.segments)
        object.__setattr__(self, "segments", checked)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def root(cls) -> Path:
        """The empty path."""
        return cls(())

    @classmethod
    def parse(cls, expression: str) -> Path:
        """
        Parse a path expression.

        Raises:
            PathSyntaxError: On an empty segment, bad brackets, or a
                malformed index.
        """
        return cls(tuple(_Parser(expression).parse()))

    @classmethod
    def coerce(cls, obj: Path | str | _abc.Iterable[str | int]) -> Path:
        """Accept a Path, an expression, or an iterable of segments."""
        if isinstance(obj, Path):
            return obj
        if isinstance(obj, str):
            return cls.parse(obj)
        if isinstance(obj, (tuple, list)):
            return cls(tuple(obj))
        raise TypeError(f"cannot build a Path from {type(obj).__name__}")

    def child(self, segment: str | int) -> Path:
        """Return a new path with one more segment."""
        return Path(self.segments + (segment,))

    def __truediv__(self, segment: str | int) -> Path:
        return self.child(segment)

    def extend(self, segments: _abc.Iterable[str | int]) -> Path:
        """Return a new path with all of ``segments`` appended."""
        return Path(self.segments + tuple(segments))

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def parent(self) -> Path:
        """The path without its last segment.

        Raises:
            ValueError: For the root path.
        """
        if not self.segments:
            raise ValueError("the root path has no parent")
        return Path(self.segments[:-1])

    @property
    def last(self) -> str | int | None:
        """The final segment, or None for the root."""
        return self.segments[-1] if self.segments else None

    def startswith(self, prefix: Path) -> bool:
        """True if ``prefix`` is this path or one of its ancestors."""
        return self.segments[: len(prefix.segments)] == prefix.segments

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> _typing.Iterator[str | int]:
        return iter(self.segments)

    def __str__(self) -> str:
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            elif _is_bare_key(segment):
                parts.append(f".{segment}" if parts else segment)
            else:
                parts.append(f"[{_quote(segment)}]")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


def _is_bare_key(key: str) -> bool:
    if not key or _DIGITS.fullmatch(key):
        return False
    if key[0] in _QUOTES:
        return False
    return not any(ch in _SPECIAL for ch in key)


def _quote(key: str) -> str:
    escaped = key.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class _Parser:
    """Single-pass scanner over a path expression."""

    def __init__(self, expression: str) -> None:
        if not isinstance(expression, str):
            raise TypeError(
                f"path expression must be str, got {type(expression).__name__}"
            )
        self._text = expression
        self._pos = 0

    def _fail(self, reason: str, position: int | None = None) -> _typing.NoReturn:
        raise errors.PathSyntaxError(
            self._text, self._pos if position is None else position, reason
        )

    def parse(self) -> list[str | int]:
        text = self._text
        segments: list[str | int] = []
        if not text:
            return segments

        # "start": nothing read yet; "dot": just read a '.'; "segment": just
        # finished a segment
        state = "start"
        while self._pos < len(text):
            ch = text[self._pos]
            if ch == ".":
                if state != "segment":
                    self._fail("empty segment")
                self._pos += 1
                state = "dot"
            elif ch == "[":
                if state == "dot":
                    self._fail("empty segment before '['")
                segments.append(self._bracket())
                state = "segment"
            elif ch == "]":
                self._fail("unexpected ']'")
            else:
                if state == "segment":
                    self._fail("expected '.' or '[' after ']'")
                segments.append(self._bare())
                state = "segment"

        if state == "dot":
            self._fail("empty segment")
        return segments

    def _bare(self) -> str | int:
        text = self._text
        start = self._pos
        while self._pos < len(text) and text[self._pos] not in ".[":
            if text[self._pos] == "]":
                self._fail("unexpected ']'")
            self._pos += 1
        token = text[start : self._pos]
        if _DIGITS.fullmatch(token):
            return int(token)
        return token

    def _bracket(self) -> str | int:
        text = self._text
        open_pos = self._pos
        self._pos += 1
        if self._pos >= len(text):
            self._fail("unterminated '['", open_pos)

        if text[self._pos] in _QUOTES:
            key = self._quoted()
            if self._pos >= len(text) or text[self._pos] != "]":
                self._fail("expected ']' after quoted key")
            self._pos += 1
            return key

        close = text.find("]", self._pos)
        if close == -1:
            self._fail("unterminated '['", open_pos)
        token = text[self._pos : close]
        if not token:
            self._fail("empty brackets", open_pos)
        if not _DIGITS.fullmatch(token):
            if token.startswith("-") and _DIGITS.fullmatch(token[1:]):
                self._fail("negative index", self._pos)
            self._fail("index must be a non-negative integer", self._pos)
        self._pos = close + 1
        return int(token)

    def _quoted(self) -> str:
        text = self._text
        quote = text[self._pos]
        open_pos = self._pos
        self._pos += 1
        chars: list[str] = []
        while self._pos < len(text):
            ch = text[self._pos]
            if ch == "\\":
                if self._pos + 1 >= len(text):
                    self._fail("dangling escape")
                chars.append(text[self._pos + 1])
                self._pos += 2
            elif ch == quote:
                self._pos += 1
                return "".join(chars)
            else:
                chars.append(ch)
                self._pos += 1
        self._fail("unterminated quoted key", open_pos)
