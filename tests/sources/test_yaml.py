"""Tests for the YAML file source."""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import strata.errors as errors
import strata.sources.adapters as adapters
import strata.value as value

WriteYaml = _typing.Callable[[str, str], _pathlib.Path]


class TestYamlFileSource:
    """Reading YAML files into Value trees."""

    def test_reads_nested_mapping(self, write_yaml: WriteYaml) -> None:
        path = write_yaml(
            "config.yaml",
            "server:\n  host: localhost\n  port: 8080\n  ports: [80, 443]\ndebug: true\n",
        )
        snapshot = adapters.YamlFileSource(path).snapshot()
        assert value.to_python(snapshot) == {
            "server": {"host": "localhost", "port": 8080, "ports": [80, 443]},
            "debug": True,
        }
        assert snapshot["server"]["port"] == value.Int(8080)

    def test_default_name_is_path(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("a.yaml", "a: 1\n")
        assert adapters.YamlFileSource(path).name() == str(path)
        assert adapters.YamlFileSource(path, name="site").name() == "site"

    def test_key_order_preserved(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("order.yaml", "zeta: 1\nalpha: 2\nmid: 3\n")
        assert list(adapters.YamlFileSource(path).snapshot()) == ["zeta", "alpha", "mid"]

    def test_empty_file_is_empty_mapping(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("empty.yaml", "")
        assert adapters.YamlFileSource(path).snapshot() == value.Mapping()

    def test_comment_only_file_is_empty_mapping(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("comments.yaml", "# nothing here\n")
        assert adapters.YamlFileSource(path).snapshot() == value.Mapping()

    def test_missing_optional_file(self, tmp_path: _pathlib.Path) -> None:
        src = adapters.YamlFileSource(tmp_path / "absent.yaml")
        assert src.snapshot() == value.Mapping()

    def test_missing_required_file(self, tmp_path: _pathlib.Path) -> None:
        src = adapters.YamlFileSource(tmp_path / "absent.yaml", required=True)
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            src.snapshot()
        assert "file not found" in excinfo.value.reason
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_malformed_yaml(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("bad.yaml", "server: [unclosed\n")
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            adapters.YamlFileSource(path).snapshot()
        assert "invalid YAML" in excinfo.value.reason
        assert excinfo.value.__cause__ is not None

    def test_directory_is_unavailable(self, tmp_path: _pathlib.Path) -> None:
        with _pytest.raises(errors.SourceUnavailable):
            adapters.YamlFileSource(tmp_path, required=True).snapshot()

    @_pytest.mark.skipif(
        not hasattr(_os, "geteuid") or _os.geteuid() == 0,
        reason="permission checks do not apply to root",
    )
    def test_unreadable_file(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("secret.yaml", "a: 1\n")
        path.chmod(0)
        try:
            with _pytest.raises(errors.SourceUnavailable) as excinfo:
                adapters.YamlFileSource(path).snapshot()
            assert "permission denied" in excinfo.value.reason
        finally:
            path.chmod(0o644)

    def test_non_mapping_top_level(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("list.yaml", "- a\n- b\n")
        assert adapters.YamlFileSource(path).snapshot() == value.Sequence(
            [value.String("a"), value.String("b")]
        )

    def test_reads_fresh_on_each_snapshot(self, write_yaml: WriteYaml) -> None:
        path = write_yaml("live.yaml", "a: 1\n")
        src = adapters.YamlFileSource(path)
        assert value.to_python(src.snapshot()) == {"a": 1}
        path.write_text("a: 2\n", encoding="utf-8")
        assert value.to_python(src.snapshot()) == {"a": 2}


class TestLoadYamlText:
    """Type handling of the YAML loader."""

    def test_null_values(self) -> None:
        tree = adapters.load_yaml_text("a: null\nb: ~\nc:\n")
        assert tree == value.Mapping(
            {"a": value.Null(), "b": value.Null(), "c": value.Null()}
        )

    def test_dates_stay_strings(self) -> None:
        tree = adapters.load_yaml_text("released: 2024-01-15\n")
        assert tree["released"] == value.String("2024-01-15")

    def test_non_string_keys_are_stringified(self) -> None:
        tree = adapters.load_yaml_text("1: one\ntrue: yes-key\nnull: nothing\n")
        assert list(tree) == ["1", "true", "null"]

    def test_floats(self) -> None:
        tree = adapters.load_yaml_text("ratio: 0.75\n")
        assert tree["ratio"] == value.Float(0.75)

    def test_out_of_range_int(self) -> None:
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            adapters.load_yaml_text("big: 99999999999999999999\n", origin="big.yaml")
        assert excinfo.value.source_name == "big.yaml"

    def test_self_referencing_anchor(self) -> None:
        with _pytest.raises(errors.SourceUnavailable):
            adapters.load_yaml_text("a: &loop [*loop]\n")

    def test_python_tags_rejected(self) -> None:
        with _pytest.raises(errors.SourceUnavailable):
            adapters.load_yaml_text("a: !!python/object:os.system {}\n")
