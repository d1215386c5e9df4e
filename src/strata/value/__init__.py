"""
Value: the recursive, format-agnostic configuration datum.

Example:
    >>> import strata.value as value
    >>> tree = value.from_python({"server": {"ports": [80, 443]}})
    >>> tree["server"]["ports"][1]
    Int(443)
    >>> tree.kind() is value.Kind.MAPPING
    True
"""

from strata.value._convert import from_python, to_python
from strata.value._core import (
    Bool,
    Float,
    Int,
    Kind,
    Mapping,
    Null,
    Sequence,
    String,
    Value,
)

__all__ = [
    "Bool",
    "Float",
    "Int",
    "Kind",
    "Mapping",
    "Null",
    "Sequence",
    "String",
    "Value",
    "from_python",
    "to_python",
]
