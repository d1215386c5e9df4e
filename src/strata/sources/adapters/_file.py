"""
Common behavior for sources that read one file per snapshot.

Subclasses only parse text; reading, missing-file handling and error
translation live here. The file is re-read on every snapshot, so a merge
always sees the current contents.
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import strata.errors as errors
import strata.value as value

_logger = _logging.getLogger(__name__)


class FileSource:
    """
    Base class for file-backed sources.

    Args:
        path: File to read.
        name: Source name; defaults to the path as given.
        required: If True, a missing file makes the source unavailable.
            Otherwise a missing file contributes an empty Mapping.
    """

    format_name: _typing.ClassVar[str] = "file"

    def __init__(
        self,
        path: str | _os.PathLike[str],
        *,
        name: str | None = None,
        required: bool = False,
    ) -> None:
        self._path = _pathlib.Path(path)
        self._name = name if name is not None else str(path)
        self._required = required

    @property
    def path(self) -> _pathlib.Path:
        return self._path

    @property
    def required(self) -> bool:
        return self._required

    def name(self) -> str:
        return self._name

    def snapshot(self) -> value.Value:
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            if self._required:
                raise errors.SourceUnavailable(
                    self._name, f"file not found: {self._path}"
                ) from e
            _logger.debug("Optional %s file %s not found", self.format_name, self._path)
            return value.Mapping()
        except PermissionError as e:
            raise errors.SourceUnavailable(self._name, f"permission denied: {e}") from e
        except OSError as e:
            raise errors.SourceUnavailable(self._name, f"cannot read file: {e}") from e
        except UnicodeDecodeError as e:
            raise errors.SourceUnavailable(self._name, f"file is not UTF-8: {e}") from e

        return self._parse(content)

    def _parse(self, text: str) -> value.Value:
        """Turn the file's text into a Value, raising SourceUnavailable."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r}, name={self._name!r})"
