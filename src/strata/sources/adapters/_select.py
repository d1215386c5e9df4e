"""
Choosing a file source from the file name.

    .yaml, .yml  ->  YamlFileSource
    .toml        ->  TomlFileSource
    .json        ->  JsonFileSource

Extensions are matched case-insensitively. Anything else is reported as
an unavailable source rather than guessed at.
"""

import os as _os
import pathlib as _pathlib

import strata.errors as errors
import strata.sources.adapters._file as file_base
import strata.sources.adapters._json as json_source
import strata.sources.adapters._toml as toml_source
import strata.sources.adapters._yaml as yaml_source

_BY_SUFFIX: dict[str, type[file_base.FileSource]] = {
    ".yaml": yaml_source.YamlFileSource,
    ".yml": yaml_source.YamlFileSource,
    ".toml": toml_source.TomlFileSource,
    ".json": json_source.JsonFileSource,
}

SUPPORTED_SUFFIXES: tuple[str, ...] = tuple(_BY_SUFFIX)


def file_source(
    path: str | _os.PathLike[str],
    *,
    name: str | None = None,
    required: bool = False,
) -> file_base.FileSource:
    """
    Build the source for ``path`` based on its extension.

    Raises:
        SourceUnavailable: If the extension is missing or not supported.
            The source name is ``name`` or the path, as for the sources
            themselves.
    """
    suffix = _pathlib.Path(path).suffix
    source_cls = _BY_SUFFIX.get(suffix.lower())
    if source_cls is None:
        reason = (
            f"unsupported file type {suffix!r}" if suffix else "file has no extension"
        )
        raise errors.SourceUnavailable(
            name if name is not None else str(path),
            f"{reason} (expected one of {', '.join(SUPPORTED_SUFFIXES)})",
        )
    return source_cls(path, name=name, required=required)
