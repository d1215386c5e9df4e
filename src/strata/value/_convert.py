"""
Conversion between Value trees and plain Python data.

from_python() is what format decoders and in-memory sources use to turn
parsed data (dicts, lists, scalars) into a Value tree; to_python() goes
the other way for encoders, display and tests.

Example:
    >>> from_python({"ports": [80, 443], "debug": False})
    Mapping({'ports': Sequence([Int(80), Int(443)]), 'debug': Bool(False)})
    >>> to_python(Mapping({"a": Float(1.5)}))
    {'a': 1.5}
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import strata.value._core as _core


def from_python(obj: _typing.Any) -> _core.Value:
    """
    Build a Value tree from plain Python data.

    Accepted inputs: None, bool, int, float, str, Mappings with str keys,
    lists and tuples, and existing Values (which are cloned).

    Raises:
        TypeError: On an unsupported type or a non-str mapping key.
        ValueError: If the input contains itself.
        OverflowError: If an int does not fit in 64 bits.
    """
    return _from_python(obj, set())


def _from_python(obj: _typing.Any, active: set[int]) -> _core.Value:
    if isinstance(obj, _core.Value):
        return obj.clone()
    if obj is None:
        return _core.Null()
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return _core.Bool(obj)
    if isinstance(obj, int):
        return _core.Int(obj)
    if isinstance(obj, float):
        return _core.Float(obj)
    if isinstance(obj, str):
        return _core.String(obj)

    if isinstance(obj, (_abc.Mapping, list, tuple)):
        obj_id = id(obj)
        if obj_id in active:
            raise ValueError("cannot convert a self-referencing structure")
        active.add(obj_id)
        try:
            if isinstance(obj, _abc.Mapping):
                result = _core.Mapping()
                for key, item in obj.items():
                    if not isinstance(key, str):
                        raise TypeError(
                            f"mapping keys must be str, got {type(key).__name__}"
                        )
                    result[key] = _from_python(item, active)
                return result
            return _core.Sequence(_from_python(item, active) for item in obj)
        finally:
            active.discard(obj_id)

    raise TypeError(f"cannot convert {type(obj).__name__} to a Value")


def to_python(value: _core.Value) -> _typing.Any:
    """
    Convert a Value tree to plain Python data.

    Mappings become dicts (key order preserved), Sequences become lists,
    Null becomes None and scalars become their payload.
    """
    if isinstance(value, _core.Mapping):
        return {key: to_python(item) for key, item in value.items()}
    if isinstance(value, _core.Sequence):
        return [to_python(item) for item in value]
    if isinstance(value, _core.Null):
        return None
    if isinstance(value, (_core.Bool, _core.Int, _core.Float, _core.String)):
        return value.value
    raise TypeError(f"not a Value: {type(value).__name__}")
