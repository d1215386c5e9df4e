"""
Tests that enforce coding standards.

Import conventions for strata:
- ``import x as _x`` for standard library and third-party modules
- ``import strata.x as x`` for our own modules
- no ``from X import Y`` outside ``__init__.py`` re-exports,
  ``from __future__`` and ``TYPE_CHECKING`` blocks
- no bare ``except:`` in library code
"""

import ast as _ast
import pathlib as _pathlib

import pytest as _pytest

SRC_DIR = _pathlib.Path(__file__).parent.parent / "src" / "strata"
TESTS_DIR = _pathlib.Path(__file__).parent


def _python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    return sorted(directory.rglob("*.py"))


def _is_type_checking_block(node: _ast.AST) -> bool:
    if not isinstance(node, _ast.If):
        return False
    test = node.test
    if isinstance(test, _ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, _ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


def _module_imports(tree: _ast.Module) -> list[_ast.stmt]:
    """Import statements at module level and in functions, minus TYPE_CHECKING blocks."""
    found: list[_ast.stmt] = []

    def visit(node: _ast.AST) -> None:
        for child in _ast.iter_child_nodes(node):
            if _is_type_checking_block(child):
                continue
            if isinstance(child, (_ast.Import, _ast.ImportFrom)):
                found.append(child)
            visit(child)

    visit(tree)
    return found


def from_import_violations(source: str, filename: str = "<string>") -> list[str]:
    """Describe every forbidden ``from X import Y`` in ``source``."""
    tree = _ast.parse(source, filename)
    violations = []
    for node in _module_imports(tree):
        if isinstance(node, _ast.ImportFrom) and node.module != "__future__":
            names = ", ".join(alias.name for alias in node.names)
            violations.append(f"{filename}:{node.lineno}: from {node.module} import {names}")
    return violations


def alias_violations(source: str, filename: str = "<string>") -> list[str]:
    """Describe external imports that are not aliased with a leading underscore."""
    tree = _ast.parse(source, filename)
    violations = []
    for node in _module_imports(tree):
        if not isinstance(node, _ast.Import):
            continue
        for alias in node.names:
            if alias.name == "strata" or alias.name.startswith("strata."):
                continue
            if alias.asname is None or not alias.asname.startswith("_"):
                violations.append(f"{filename}:{node.lineno}: import {alias.name}")
    return violations


def bare_except_violations(source: str, filename: str = "<string>") -> list[str]:
    tree = _ast.parse(source, filename)
    return [
        f"{filename}:{node.lineno}: bare except"
        for node in _ast.walk(tree)
        if isinstance(node, _ast.ExceptHandler) and node.type is None
    ]


class TestImportStyle:
    """The source tree and tests follow the import conventions."""

    def test_src_no_from_imports(self) -> None:
        violations: list[str] = []
        for path in _python_files(SRC_DIR):
            if path.name == "__init__.py":
                continue
            violations.extend(from_import_violations(path.read_text(), str(path)))
        if violations:
            _pytest.fail(
                "Found forbidden 'from X import Y' imports:\n  "
                + "\n  ".join(violations)
                + "\n\nUse 'import X as _x' (external) or 'import X as x' (internal) instead."
            )

    def test_tests_no_from_imports(self) -> None:
        violations: list[str] = []
        for path in _python_files(TESTS_DIR):
            violations.extend(from_import_violations(path.read_text(), str(path)))
        assert violations == []

    def test_src_external_imports_are_private(self) -> None:
        violations: list[str] = []
        for path in _python_files(SRC_DIR):
            violations.extend(alias_violations(path.read_text(), str(path)))
        assert violations == []

    def test_src_has_no_bare_except(self) -> None:
        violations: list[str] = []
        for path in _python_files(SRC_DIR):
            violations.extend(bare_except_violations(path.read_text(), str(path)))
        assert violations == []


class TestViolationDetection:
    """The checks themselves."""

    def test_detects_from_import(self) -> None:
        assert from_import_violations("from pathlib import Path") == [
            "<string>:1: from pathlib import Path"
        ]

    def test_allows_future_imports(self) -> None:
        assert from_import_violations("from __future__ import annotations") == []

    def test_ignores_type_checking_block(self) -> None:
        source = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from some_module import SomeType

def foo():
    pass
"""
        assert from_import_violations(source) == []

    def test_detects_import_after_type_checking(self) -> None:
        source = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from allowed import Type

from forbidden import Other
"""
        violations = from_import_violations(source)
        assert len(violations) == 1
        assert "from forbidden import Other" in violations[0]

    def test_detects_from_import_inside_function(self) -> None:
        source = """
def load():
    from json import loads
    return loads
"""
        assert len(from_import_violations(source)) == 1

    def test_alias_rules(self) -> None:
        source = "import os\nimport json as _json\nimport strata.path as path_mod\n"
        assert alias_violations(source) == ["<string>:1: import os"]

    def test_bare_except(self) -> None:
        source = "try:\n    pass\nexcept:\n    pass\n"
        assert bare_except_violations(source) == ["<string>:3: bare except"]
