"""
Shared pytest fixtures for strata tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import strata.current as current
import strata.errors as errors
import strata.settings as settings
import strata.value as value

# =============================================================================
# Isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def clean_strata_env(monkeypatch: _pytest.MonkeyPatch) -> _typing.Iterator[None]:
    """
    Remove STRATA_* variables and reset cached library state.

    Applied to every test so a developer's environment never changes the
    default failure policy or log level under test.
    """
    for key in list(_os.environ):
        if key.startswith("STRATA_"):
            monkeypatch.delenv(key)
    settings.reset_settings()
    current.clear_current()
    yield
    settings.reset_settings()
    current.clear_current()


# =============================================================================
# Trees and sources
# =============================================================================


class FailingSource:
    """Source whose snapshot is always unavailable."""

    def __init__(self, name: str = "broken", reason: str = "offline") -> None:
        self._name = name
        self._reason = reason
        self.calls = 0

    def name(self) -> str:
        return self._name

    def snapshot(self) -> value.Value:
        self.calls += 1
        raise errors.SourceUnavailable(self._name, self._reason)


class CountingSource:
    """Source that records how often it was snapshotted."""

    def __init__(self, name: str, data: _typing.Any) -> None:
        self._name = name
        self._data = data
        self.calls = 0

    def name(self) -> str:
        return self._name

    def snapshot(self) -> value.Value:
        self.calls += 1
        return value.from_python(self._data)


class RawSource:
    """Source returning whatever it was given, without conversion."""

    def __init__(self, name: str, payload: _typing.Any) -> None:
        self._name = name
        self._payload = payload

    def name(self) -> str:
        return self._name

    def snapshot(self) -> _typing.Any:
        return self._payload


@_pytest.fixture
def failing_source() -> FailingSource:
    return FailingSource()


@_pytest.fixture
def make_failing() -> type[FailingSource]:
    return FailingSource


@_pytest.fixture
def make_counting() -> type[CountingSource]:
    return CountingSource


@_pytest.fixture
def make_raw() -> type[RawSource]:
    return RawSource


@_pytest.fixture
def server_tree() -> value.Mapping:
    """A small nested tree used across accessor tests."""
    tree = value.from_python(
        {
            "server": {
                "host": "localhost",
                "port": 8080,
                "ratio": 0.5,
                "debug": False,
                "ports": [80, 443],
                "tls": None,
            },
            "name": "demo",
        }
    )
    assert isinstance(tree, value.Mapping)
    return tree


@_pytest.fixture
def write_file(tmp_path: _pathlib.Path) -> _typing.Callable[[str, str], _pathlib.Path]:
    """Factory writing text to a file under tmp_path."""

    def _write(filename: str, text: str) -> _pathlib.Path:
        path = tmp_path / filename
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@_pytest.fixture
def write_yaml(
    write_file: _typing.Callable[[str, str], _pathlib.Path],
) -> _typing.Callable[[str, str], _pathlib.Path]:
    """Factory writing YAML text to a file under tmp_path."""
    return write_file
