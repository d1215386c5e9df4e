"""Sources that read configuration from outside the process."""

from strata.sources.adapters._env import EnvironmentSource, parse_scalar
from strata.sources.adapters._file import FileSource
from strata.sources.adapters._json import JsonFileSource, load_json_text
from strata.sources.adapters._select import SUPPORTED_SUFFIXES, file_source
from strata.sources.adapters._toml import TomlFileSource, load_toml_text
from strata.sources.adapters._yaml import YamlFileSource, load_yaml_text

__all__ = [
    "SUPPORTED_SUFFIXES",
    "EnvironmentSource",
    "FileSource",
    "JsonFileSource",
    "TomlFileSource",
    "YamlFileSource",
    "file_source",
    "load_json_text",
    "load_toml_text",
    "load_yaml_text",
    "parse_scalar",
]
