"""
Environment variable source.

Variables named ``<prefix><key>[<delimiter><key>...]`` become nested
Mapping entries, the way pydantic-settings reads nested models:

    APP_LOG_LEVEL=debug          ->  log_level: "debug"
    APP_SERVER__PORT=8080        ->  server: {port: "8080"}

Keys are lowercased after the prefix is removed. Variables are applied in
sorted name order, and a nested key replaces a scalar already sitting at
its parent, so ``APP_A=1`` together with ``APP_A__B=2`` always yields
``a: {b: "2"}``.
"""

import collections.abc as _abc
import logging as _logging
import os as _os

import yaml as _yaml

import strata.constants as constants
import strata.value as value

_logger = _logging.getLogger(__name__)


def parse_scalar(text: str) -> value.Value:
    """
    Read an environment value as a YAML scalar.

    ``"80"`` becomes Int(80), ``"true"`` Bool(True), ``"1.5"`` Float(1.5)
    and ``""`` or ``"null"`` Null(). Anything that is not a plain scalar
    (lists, mappings, invalid YAML, out-of-range ints) stays a String.
    """
    try:
        parsed = _yaml.safe_load(text)
    except _yaml.YAMLError:
        return value.String(text)
    if parsed is None:
        return value.Null()
    if isinstance(parsed, (bool, int, float, str)):
        try:
            return value.from_python(parsed)
        except OverflowError:
            return value.String(text)
    return value.String(text)


class EnvironmentSource:
    """
    Source built from prefixed environment variables.

    Args:
        prefix: Variable name prefix, e.g. ``"APP_"``. Matching is
            case-sensitive. Variables equal to the bare prefix are ignored.
        delimiter: Separator between nested keys.
        environ: Mapping to read instead of ``os.environ``.
        parse_values: Read values as YAML scalars instead of strings.
        name: Source name; defaults to ``env:<prefix>``.
    """

    def __init__(
        self,
        prefix: str,
        *,
        delimiter: str = constants.DEFAULT_ENV_DELIMITER,
        environ: _abc.Mapping[str, str] | None = None,
        parse_values: bool = False,
        name: str | None = None,
    ) -> None:
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self._prefix = prefix
        self._delimiter = delimiter
        self._environ = environ
        self._parse_values = parse_values
        self._name = name if name is not None else f"env:{prefix}"

    def name(self) -> str:
        return self._name

    def snapshot(self) -> value.Value:
        environ = _os.environ if self._environ is None else self._environ
        root = value.Mapping()
        for var in sorted(environ):
            if not var.startswith(self._prefix) or var == self._prefix:
                continue
            keys = var[len(self._prefix) :].lower().split(self._delimiter)
            if any(not key for key in keys):
                _logger.debug("Ignoring environment variable %s: empty key", var)
                continue
            raw = environ[var]
            leaf = parse_scalar(raw) if self._parse_values else value.String(raw)
            self._insert(root, keys, leaf, var)
        return root

    @staticmethod
    def _insert(
        root: value.Mapping, keys: list[str], leaf: value.Value, var: str
    ) -> None:
        node = root
        for key in keys[:-1]:
            child = node.get(key)
            if not isinstance(child, value.Mapping):
                child = value.Mapping()
                node[key] = child
            node = child
        last = keys[-1]
        # a variable that names an existing table does not flatten it
        if isinstance(node.get(last), value.Mapping):
            _logger.debug(
                "Ignoring environment variable %s: %s is already a table",
                var,
                ".".join(keys),
            )
            return
        node[last] = leaf

    def __repr__(self) -> str:
        return f"EnvironmentSource({self._prefix!r}, name={self._name!r})"
