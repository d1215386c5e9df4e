"""Tests for the environment variable source."""

import logging as _logging

import pytest as _pytest

import strata.sources.adapters as adapters
import strata.value as value


class TestEnvironmentSource:
    """Prefixed variables become nested Mapping entries."""

    def test_strips_prefix_and_lowercases(self) -> None:
        src = adapters.EnvironmentSource("APP_", environ={"APP_LOG_LEVEL": "debug"})
        assert value.to_python(src.snapshot()) == {"log_level": "debug"}

    def test_nested_keys(self) -> None:
        environ = {"APP_SERVER__PORT": "8080", "APP_SERVER__HOST": "0.0.0.0"}
        src = adapters.EnvironmentSource("APP_", environ=environ)
        assert value.to_python(src.snapshot()) == {
            "server": {"host": "0.0.0.0", "port": "8080"}
        }

    def test_ignores_other_variables(self) -> None:
        environ = {"APP_A": "1", "OTHER_B": "2", "APP": "bare", "app_c": "lower"}
        src = adapters.EnvironmentSource("APP_", environ=environ)
        assert value.to_python(src.snapshot()) == {"a": "1"}

    def test_ignores_variable_equal_to_prefix(self) -> None:
        src = adapters.EnvironmentSource("APP_", environ={"APP_": "x"})
        assert src.snapshot() == value.Mapping()

    def test_values_are_strings_by_default(self) -> None:
        src = adapters.EnvironmentSource("APP_", environ={"APP_PORT": "80"})
        assert src.snapshot()["port"] == value.String("80")

    def test_parse_values(self) -> None:
        environ = {
            "APP_PORT": "80",
            "APP_DEBUG": "true",
            "APP_RATIO": "1.5",
            "APP_NAME": "web",
            "APP_EMPTY": "",
        }
        src = adapters.EnvironmentSource("APP_", environ=environ, parse_values=True)
        tree = src.snapshot()
        assert tree["port"] == value.Int(80)
        assert tree["debug"] == value.Bool(True)
        assert tree["ratio"] == value.Float(1.5)
        assert tree["name"] == value.String("web")
        assert tree["empty"] == value.Null()

    def test_parse_values_keeps_structures_as_strings(self) -> None:
        environ = {"APP_LIST": "[1, 2]", "APP_BAD": "a: [b"}
        src = adapters.EnvironmentSource("APP_", environ=environ, parse_values=True)
        tree = src.snapshot()
        assert tree["list"] == value.String("[1, 2]")
        assert tree["bad"] == value.String("a: [b")

    def test_nested_key_replaces_scalar_parent(self) -> None:
        environ = {"APP_A": "1", "APP_A__B": "2"}
        src = adapters.EnvironmentSource("APP_", environ=environ)
        assert value.to_python(src.snapshot()) == {"a": {"b": "2"}}

    def test_scalar_does_not_replace_table(
        self, caplog: _pytest.LogCaptureFixture
    ) -> None:
        # "APP_a" sorts after "APP_A__B" and names the same key
        environ = {"APP_A__B": "1", "APP_a": "2"}
        src = adapters.EnvironmentSource("APP_", environ=environ)
        with caplog.at_level(
            _logging.DEBUG, logger="strata.sources.adapters._env"
        ):
            tree = src.snapshot()
        assert value.to_python(tree) == {"a": {"b": "1"}}
        assert "APP_a" in caplog.text
        assert "already a table" in caplog.text

    def test_resolution_ignores_mapping_order(self) -> None:
        forward = {"APP_A": "1", "APP_A__B": "2"}
        backward = {"APP_A__B": "2", "APP_A": "1"}
        a = adapters.EnvironmentSource("APP_", environ=forward).snapshot()
        b = adapters.EnvironmentSource("APP_", environ=backward).snapshot()
        assert a == b

    def test_custom_delimiter(self) -> None:
        src = adapters.EnvironmentSource(
            "APP_", delimiter=".", environ={"APP_SERVER.PORT": "1"}
        )
        assert value.to_python(src.snapshot()) == {"server": {"port": "1"}}

    def test_empty_key_segments_are_skipped(self) -> None:
        environ = {"APP_A____B": "x", "APP_C__": "y", "APP_OK": "z"}
        src = adapters.EnvironmentSource("APP_", environ=environ)
        assert value.to_python(src.snapshot()) == {"ok": "z"}

    def test_empty_delimiter_rejected(self) -> None:
        with _pytest.raises(ValueError):
            adapters.EnvironmentSource("APP_", delimiter="")

    def test_default_name(self) -> None:
        assert adapters.EnvironmentSource("APP_").name() == "env:APP_"
        assert adapters.EnvironmentSource("APP_", name="env").name() == "env"

    def test_reads_os_environ(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRATATEST_SERVER__PORT", "9000")
        src = adapters.EnvironmentSource("STRATATEST_", parse_values=True)
        assert src.snapshot()["server"]["port"] == value.Int(9000)


class TestParseScalar:
    """parse_scalar() reads one value as a YAML scalar."""

    @_pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("42", value.Int(42)),
            ("-7", value.Int(-7)),
            ("false", value.Bool(False)),
            ("2.5", value.Float(2.5)),
            ("null", value.Null()),
            ("hello world", value.String("hello world")),
            ("99999999999999999999", value.String("99999999999999999999")),
            ("{a: 1}", value.String("{a: 1}")),
        ],
    )
    def test_parse(self, text: str, expected: value.Value) -> None:
        assert adapters.parse_scalar(text) == expected
