"""Tests for the JSON file source."""

import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import strata.errors as errors
import strata.sources.adapters as adapters
import strata.value as value

WriteFile = _typing.Callable[[str, str], _pathlib.Path]


class TestJsonFileSource:
    """Reading JSON files into Value trees."""

    def test_reads_nested_objects(self, write_file: WriteFile) -> None:
        path = write_file(
            "config.json",
            '{"server": {"host": "localhost", "port": 8080, "tls": null},'
            ' "ports": [80, 443], "debug": false}',
        )
        snapshot = adapters.JsonFileSource(path).snapshot()
        assert value.to_python(snapshot) == {
            "server": {"host": "localhost", "port": 8080, "tls": None},
            "ports": [80, 443],
            "debug": False,
        }
        assert snapshot["server"]["tls"] == value.Null()

    def test_blank_file_is_empty_mapping(self, write_file: WriteFile) -> None:
        path = write_file("blank.json", "  \n")
        assert adapters.JsonFileSource(path).snapshot() == value.Mapping()

    def test_top_level_array(self, write_file: WriteFile) -> None:
        path = write_file("list.json", '["a", "b"]')
        assert adapters.JsonFileSource(path).snapshot() == value.Sequence(
            [value.String("a"), value.String("b")]
        )

    def test_missing_optional_file(self, tmp_path: _pathlib.Path) -> None:
        src = adapters.JsonFileSource(tmp_path / "absent.json")
        assert src.snapshot() == value.Mapping()

    def test_missing_required_file(self, tmp_path: _pathlib.Path) -> None:
        src = adapters.JsonFileSource(tmp_path / "absent.json", required=True)
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            src.snapshot()
        assert "file not found" in excinfo.value.reason

    def test_malformed_json(self, write_file: WriteFile) -> None:
        path = write_file("bad.json", '{"a": 1,}')
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            adapters.JsonFileSource(path, name="bad").snapshot()
        assert excinfo.value.source_name == "bad"
        assert "invalid JSON" in excinfo.value.reason
        assert excinfo.value.__cause__ is not None


class TestLoadJsonText:
    """Type handling of the JSON loader."""

    @_pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_constants_rejected(self, constant: str) -> None:
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            adapters.load_json_text(f'{{"a": {constant}}}')
        assert "invalid JSON" in excinfo.value.reason

    def test_out_of_range_int(self) -> None:
        with _pytest.raises(errors.SourceUnavailable) as excinfo:
            adapters.load_json_text('{"big": 99999999999999999999}', origin="big.json")
        assert excinfo.value.source_name == "big.json"
        assert "unsupported JSON content" in excinfo.value.reason

    def test_floats_and_ints_stay_distinct(self) -> None:
        tree = adapters.load_json_text('{"i": 1, "f": 1.0}')
        assert tree["i"] == value.Int(1)
        assert tree["f"] == value.Float(1.0)
