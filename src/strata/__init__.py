"""
Strata - layered configuration trees.

Configuration is read from prioritized sources (files, environment,
in-memory defaults), deep-merged into a single tree of typed Values with
per-leaf provenance, and queried or edited by path.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("strata")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from strata.accessor import Accessor  # noqa: E402
from strata.errors import (  # noqa: E402
    CyclicValueError,
    DuplicateKeyError,
    ExtractionError,
    InvalidSnapshotError,
    MergeError,
    NotFoundError,
    PathError,
    PathSyntaxError,
    SourceFailedError,
    SourceUnavailable,
    StrataError,
    TypeMismatchError,
)
from strata.layers import Layers  # noqa: E402
from strata.merge import FailurePolicy, MergedConfig, Merger  # noqa: E402
from strata.path import Path  # noqa: E402
from strata.sources import CallableSource, MemorySource, Source  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Accessor",
    "CallableSource",
    "CyclicValueError",
    "DuplicateKeyError",
    "ExtractionError",
    "FailurePolicy",
    "InvalidSnapshotError",
    "Layers",
    "MemorySource",
    "MergeError",
    "MergedConfig",
    "Merger",
    "NotFoundError",
    "Path",
    "PathError",
    "PathSyntaxError",
    "Source",
    "SourceFailedError",
    "SourceUnavailable",
    "StrataError",
    "TypeMismatchError",
]
