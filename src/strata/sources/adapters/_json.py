"""
JSON file source.

A blank file is read as an empty Mapping, like an empty YAML document.
``NaN`` and ``Infinity`` are rejected; they are not JSON.
"""

import json as _json
import typing as _typing

import strata.errors as errors
import strata.sources.adapters._file as file_base
import strata.value as value


def _reject_constant(name: str) -> _typing.NoReturn:
    raise ValueError(f"{name} is not valid JSON")


def load_json_text(text: str, *, origin: str = "<string>") -> value.Value:
    """
    Parse JSON text into a Value tree.

    Raises:
        SourceUnavailable: If the text is not valid JSON or holds an
            integer outside the 64-bit range.
    """
    if not text.strip():
        return value.Mapping()
    try:
        parsed = _json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        # JSONDecodeError is a ValueError
        raise errors.SourceUnavailable(origin, f"invalid JSON: {e}") from e

    try:
        return value.from_python(parsed)
    except (TypeError, ValueError, OverflowError) as e:
        raise errors.SourceUnavailable(origin, f"unsupported JSON content: {e}") from e


class JsonFileSource(file_base.FileSource):
    """Source reading a JSON file on every snapshot."""

    format_name = "JSON"

    def _parse(self, text: str) -> value.Value:
        return load_json_text(text, origin=self._name)
