"""
YAML file source.

Reads one YAML document per snapshot with a safe loader. Timestamps are
not resolved, so ``2024-01-01`` stays the string it was written as, and
non-string mapping keys (``1: a``, ``true: b``) are turned into strings.
"""

import typing as _typing

import yaml as _yaml

import strata.errors as errors
import strata.sources.adapters._file as file_base
import strata.value as value


class _ConfigLoader(_yaml.SafeLoader):
    """SafeLoader without the timestamp resolver."""

    pass


_ConfigLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:timestamp"
    ]
    for first, resolvers in _yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _normalize(data: _typing.Any, active: set[int] | None = None) -> _typing.Any:
    """Stringify mapping keys, recursively.

    Raises:
        ValueError: If an anchor makes the document contain itself.
    """
    if not isinstance(data, (dict, list)):
        if isinstance(data, bytes):
            return data.decode("utf-8", errors="replace")
        return data
    if active is None:
        active = set()
    if id(data) in active:
        raise ValueError("document refers to itself through an anchor")
    active.add(id(data))
    try:
        if isinstance(data, dict):
            return {
                key if isinstance(key, str) else _key_text(key): _normalize(item, active)
                for key, item in data.items()
            }
        return [_normalize(item, active) for item in data]
    finally:
        active.discard(id(data))


def _key_text(key: _typing.Any) -> str:
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def load_yaml_text(text: str, *, origin: str = "<string>") -> value.Value:
    """
    Parse YAML text into a Value tree.

    An empty document yields an empty Mapping.

    Raises:
        SourceUnavailable: If the text is not valid YAML or holds data
            that has no Value equivalent.
    """
    try:
        parsed = _yaml.load(text, Loader=_ConfigLoader)  # noqa: S506 - safe loader subclass
    except _yaml.YAMLError as e:
        raise errors.SourceUnavailable(origin, f"invalid YAML: {e}") from e

    if parsed is None:
        return value.Mapping()

    try:
        return value.from_python(_normalize(parsed))
    except (TypeError, ValueError, OverflowError) as e:
        raise errors.SourceUnavailable(origin, f"unsupported YAML content: {e}") from e


class YamlFileSource(file_base.FileSource):
    """
    Source reading a YAML file on every snapshot.

    Args:
        path: File to read.
        name: Source name; defaults to the path as given.
        required: If True, a missing file makes the source unavailable.
            Otherwise a missing file contributes an empty Mapping.
    """

    format_name = "YAML"

    def _parse(self, text: str) -> value.Value:
        return load_yaml_text(text, origin=self._name)
