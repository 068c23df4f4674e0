"""Decide whether a built file needs a fresh compressed artifact."""

from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from .models import CandidateFile
from .utils import artifact_path

# Source path -> dirty flag for the current build, owned by the host.
FreshnessCache = Mapping[str, bool]


def snapshot_cache(flags: Optional[Mapping[str, bool]]) -> FreshnessCache:
    """Copy the host's dirty flags once so repeated lookups agree within a run."""
    return MappingProxyType({os.fspath(key): bool(value) for key, value in (flags or {}).items()})


def is_dirty(cache: FreshnessCache, source: Path) -> bool:
    """Unknown sources count as dirty."""
    return cache.get(os.fspath(source), True)


def needs_compression(candidate: CandidateFile, cache: FreshnessCache) -> bool:
    """A candidate is stale if its source changed or its artifact is missing."""
    if is_dirty(cache, candidate.source_path):
        return True
    return not artifact_path(candidate.destination_path).exists()


def artifact_is_current(source: Path, artifact: Path) -> bool:
    """Compare modification times of a file and its artifact.

    Artifacts carry their source's timestamps, so any later edit of the source
    leaves the two out of step.
    """
    try:
        artifact_stat = artifact.stat()
    except FileNotFoundError:
        return False
    return source.stat().st_mtime_ns == artifact_stat.st_mtime_ns
