"""
TOML file source.

TOML documents always have a table at the top, so a TOML layer is always
a Mapping. Dates and times have no Value variant and are kept as their
ISO 8601 text, the same way the YAML source leaves timestamps alone.
"""

import datetime as _datetime
import tomllib as _tomllib
import typing as _typing

import strata.errors as errors
import strata.sources.adapters._file as file_base
import strata.value as value


def _plain(data: _typing.Any) -> _typing.Any:
    if isinstance(data, dict):
        return {key: _plain(item) for key, item in data.items()}
    if isinstance(data, list):
        return [_plain(item) for item in data]
    if isinstance(data, (_datetime.datetime, _datetime.date, _datetime.time)):
        return data.isoformat()
    return data


def load_toml_text(text: str, *, origin: str = "<string>") -> value.Value:
    """
    Parse TOML text into a Value tree.

    Raises:
        SourceUnavailable: If the text is not valid TOML or holds an
            integer outside the 64-bit range.
    """
    try:
        parsed = _tomllib.loads(text)
    except _tomllib.TOMLDecodeError as e:
        raise errors.SourceUnavailable(origin, f"invalid TOML: {e}") from e

    try:
        return value.from_python(_plain(parsed))
    except (TypeError, ValueError, OverflowError) as e:
        raise errors.SourceUnavailable(origin, f"unsupported TOML content: {e}") from e


class TomlFileSource(file_base.FileSource):
    """Source reading a TOML file on every snapshot."""

    format_name = "TOML"

    def _parse(self, text: str) -> value.Value:
        return load_toml_text(text, origin=self._name)
