"""
Value: the format-agnostic tagged union for configuration data.

Every configuration datum is one of seven variants, each its own class:

- Null, Bool, Int, Float, String: immutable scalars (frozen, hashable)
- Sequence: ordered list of Values (mutable, order-significant equality)
- Mapping: str -> Value with unique keys (mutable, order-independent equality)

Containers hold their children directly, so a tree is built bottom-up and
owns everything beneath it. There is no implicit numeric coercion here:
Int(1), Float(1.0) and Bool(True) are three different values. Coercion is
the Accessor's job.

Example:
    >>> tree = Mapping({"server": Mapping({"port": Int(8080)})})
    >>> tree["server"]["port"]
    Int(8080)
    >>> tree.kind()
    <Kind.MAPPING: 'mapping'>
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import enum as _enum
import typing as _typing

import strata.constants as constants
import strata.errors as errors


class Kind(_enum.Enum):
    """Variant tag of a Value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class Value:
    """Base class of all Value variants.

    Not instantiated directly; use one of the variant classes.
    """

    __slots__ = ()

    KIND: _typing.ClassVar[Kind]

    def kind(self) -> Kind:
        """Return the variant tag."""
        return self.KIND

    def is_container(self) -> bool:
        """True for Sequence and Mapping."""
        return False

    def is_scalar(self) -> bool:
        """True for Null, Bool, Int, Float and String."""
        return not self.is_container()

    def clone(self) -> Value:
        """Return a fully independent deep copy.

        Scalars are immutable, so they are returned as-is.
        """
        return self


def _require_value(item: object, where: str) -> Value:
    if not isinstance(item, Value):
        raise TypeError(f"{where} must be a Value, got {type(item).__name__}")
    return item


# =============================================================================
# Scalars
# =============================================================================


class _Scalar(Value):
    __slots__ = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({getattr(self, 'value')!r})"


@_dataclasses.dataclass(frozen=True, slots=True, repr=False)
class Null(_Scalar):
    """The absence of a value."""

    KIND: _typing.ClassVar[Kind] = Kind.NULL

    def __repr__(self) -> str:
        return "Null()"


@_dataclasses.dataclass(frozen=True, slots=True, repr=False)
class Bool(_Scalar):
    """A boolean."""

    KIND: _typing.ClassVar[Kind] = Kind.BOOL

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"Bool requires a bool, got {type(self.value).__name__}")


@_dataclasses.dataclass(frozen=True, slots=True, repr=False)
class Int(_Scalar):
    """A signed 64-bit integer."""

    KIND: _typing.ClassVar[Kind] = Kind.INT

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Int requires an int, got {type(self.value).__name__}")
        if not constants.INT_MIN <= self.value <= constants.INT_MAX:
            raise OverflowError(f"Int out of 64-bit range: {self.value}")


@_dataclasses.dataclass(frozen=True, slots=True, repr=False)
class Float(_Scalar):
    """A double-precision float.

    An int argument is widened to float at construction.
    """

    KIND: _typing.ClassVar[Kind] = Kind.FLOAT

    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Float requires a float, got {type(self.value).__name__}")
        if isinstance(self.value, int):
            object.__setattr__(self, "value", float(self.value))


@_dataclasses.dataclass(frozen=True, slots=True, repr=False)
class String(_Scalar):
    """A text string."""

    KIND: _typing.ClassVar[Kind] = Kind.STRING

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"String requires a str, got {type(self.value).__name__}")


# =============================================================================
# Containers
# =============================================================================


class Sequence(Value, _abc.MutableSequence[Value]):
    """
    Ordered list of Values.

    Equality is order-dependent: Sequence([Int(1), Int(2)]) differs from
    Sequence([Int(2), Int(1)]).
    """

    __slots__ = ("_items",)

    KIND: _typing.ClassVar[Kind] = Kind.SEQUENCE

    def __init__(self, items: _abc.Iterable[Value] = ()) -> None:
        self._items: list[Value] = [
            _require_value(item, "Sequence element") for item in items
        ]

    def is_container(self) -> bool:
        return True

    def clone(self) -> Sequence:
        return Sequence(item.clone() for item in self._items)

    @_typing.overload
    def __getitem__(self, index: int) -> Value: ...

    @_typing.overload
    def __getitem__(self, index: slice) -> Sequence: ...

    def __getitem__(self, index: int | slice) -> Value | Sequence:
        if isinstance(index, slice):
            return Sequence(item.clone() for item in self._items[index])
        return self._items[index]

    def __setitem__(self, index: int, value: Value) -> None:  # type: ignore[override]
        self._items[index] = _require_value(value, "Sequence element")

    def __delitem__(self, index: int) -> None:  # type: ignore[override]
        del self._items[index]

    def insert(self, index: int, value: Value) -> None:
        self._items.insert(index, _require_value(value, "Sequence element"))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> _typing.Iterator[Value]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence):
            return self._items == other._items
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Sequence({self._items!r})"


class Mapping(Value, _abc.MutableMapping[str, Value]):
    """
    Ordered str -> Value mapping with unique keys.

    Insertion order is preserved (and used by the merger and by to_python),
    but equality ignores it: two Mappings are equal when they have the same
    key set and equal values per key.
    """

    __slots__ = ("_entries",)

    KIND: _typing.ClassVar[Kind] = Kind.MAPPING

    def __init__(self, entries: _abc.Mapping[str, Value] | None = None) -> None:
        self._entries: dict[str, Value] = {}
        if entries is not None:
            for key, value in entries.items():
                self[key] = value

    @classmethod
    def from_pairs(cls, pairs: _abc.Iterable[tuple[str, Value]]) -> Mapping:
        """
        Build a Mapping from (key, value) pairs, in order.

        Raises:
            DuplicateKeyError: If a key appears more than once.
        """
        mapping = cls()
        for key, value in pairs:
            if key in mapping._entries:
                raise errors.DuplicateKeyError(key)
            mapping[key] = value
        return mapping

    def is_container(self) -> bool:
        return True

    def clone(self) -> Mapping:
        result = Mapping()
        for key, value in self._entries.items():
            result._entries[key] = value.clone()
        return result

    def __getitem__(self, key: str) -> Value:
        return self._entries[key]

    def __setitem__(self, key: str, value: Value) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Mapping keys must be str, got {type(key).__name__}")
        self._entries[key] = _require_value(value, f"Mapping value for {key!r}")

    def __delitem__(self, key: str) -> None:
        del self._entries[key]

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return self._entries == other._entries
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Mapping({self._entries!r})"
