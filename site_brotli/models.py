"""Data models used throughout the compression pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class CandidateFile:
    """A built file that may receive a compressed sibling.

    ``source_path`` is the key the build freshness cache knows the file by.
    For a logical page ``relative_path`` is set and ``source_path`` holds its
    resolution against the site source directory. ``destination_path`` is the
    built output that actually gets compressed.
    """

    source_path: Path
    destination_path: Path
    relative_path: Optional[Path] = None

    @property
    def is_page(self) -> bool:
        return self.relative_path is not None


@dataclass
class FileFailure:
    """A candidate that could not be compressed."""

    source_path: Path
    error: str


@dataclass
class RunSummary:
    """Outcome of a single compression run."""

    compressed: List[Path] = field(default_factory=list)
    skipped: int = 0
    failures: List[FileFailure] = field(default_factory=list)
    total_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures

    def merge(self, other: "RunSummary") -> "RunSummary":
        return RunSummary(
            compressed=[*self.compressed, *other.compressed],
            skipped=self.skipped + other.skipped,
            failures=[*self.failures, *other.failures],
            total_seconds=self.total_seconds + other.total_seconds,
        )
