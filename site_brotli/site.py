"""Sources of candidate files: a structured site or a plain directory."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Mapping, Optional

from .config import CompressionConfig
from .freshness import FreshnessCache, artifact_is_current, needs_compression
from .models import CandidateFile
from .utils import artifact_path, is_eligible

logger = logging.getLogger("site_brotli")

ASSETS_CAPABILITY = "assets"

# Called with the artifact path of every file left alone because it is up to date.
SkipCallback = Callable[[Path], None]


@dataclass(frozen=True)
class SiteFile:
    """A file the host build wrote into the site destination.

    Static files carry the on-disk ``path`` they were copied from; pages carry
    the ``relative_path`` they were rendered from instead.
    """

    destination: Path
    path: Optional[Path] = None
    relative_path: Optional[Path] = None


@dataclass
class Site:
    """The parts of a built site the compressor needs to see."""

    source: Path
    destination: Path
    files: List[SiteFile] = field(default_factory=list)
    regenerator_cache: Mapping[str, bool] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)
    capabilities: FrozenSet[str] = frozenset()
    assets_prefix: Optional[str] = None

    def in_source_dir(self, relative: Path) -> Path:
        return self.source / relative

    def in_dest_dir(self, relative: Path) -> Path:
        return self.destination / relative

    @property
    def has_assets(self) -> bool:
        return ASSETS_CAPABILITY in self.capabilities and bool(self.assets_prefix)

    @classmethod
    def from_manifest(cls, manifest_path: Path) -> "Site":
        """Load a site description written by the host build as JSON."""
        manifest_path = Path(manifest_path)
        if not manifest_path.is_file():
            raise FileNotFoundError(f"Site manifest does not exist: {manifest_path}")
        try:
            raw = json.loads(manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid site manifest {manifest_path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Site manifest must be a JSON object: {manifest_path}")

        base = manifest_path.parent
        source = base / raw.get("source", ".")
        destination = base / raw.get("destination", "_site")

        entries = raw.get("files") or []
        if not isinstance(entries, list):
            raise ValueError(f"Manifest 'files' must be a list: {manifest_path}")
        files: List[SiteFile] = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValueError(f"Manifest entry must be an object: {entry!r}")
            if "destination" not in entry:
                raise ValueError(f"Manifest entry without destination: {entry!r}")
            for key in ("destination", "path", "relative_path"):
                if entry.get(key) is not None and not isinstance(entry[key], str):
                    raise ValueError(f"Manifest entry '{key}' must be a string: {entry!r}")
            files.append(
                SiteFile(
                    destination=Path(entry["destination"]),
                    path=source / entry["path"] if entry.get("path") else None,
                    relative_path=Path(entry["relative_path"]) if entry.get("relative_path") else None,
                )
            )

        flags = raw.get("dirty") or {}
        if not isinstance(flags, dict):
            raise ValueError(f"Manifest 'dirty' must be an object: {manifest_path}")
        dirty = {str(source / key): bool(value) for key, value in flags.items()}
        site_config = raw.get("config") or {}
        if not isinstance(site_config, dict):
            raise ValueError(f"Manifest 'config' must be an object: {manifest_path}")
        capabilities = raw.get("capabilities") or []
        if not isinstance(capabilities, list):
            raise ValueError(f"Manifest 'capabilities' must be a list: {manifest_path}")
        return cls(
            source=source,
            destination=destination,
            files=files,
            regenerator_cache=dirty,
            config=site_config,
            capabilities=frozenset(capabilities),
            assets_prefix=raw.get("assets_prefix"),
        )


def candidate_for(site: Site, site_file: SiteFile) -> CandidateFile:
    destination = site.in_dest_dir(site_file.destination)
    if site_file.relative_path is not None:
        return CandidateFile(
            source_path=site.in_source_dir(site_file.relative_path),
            destination_path=destination,
            relative_path=site_file.relative_path,
        )
    if site_file.path is None:
        raise ValueError(f"Site file {site_file.destination} has neither path nor relative_path")
    return CandidateFile(source_path=site_file.path, destination_path=destination)


def _skipped(artifact: Path, on_skip: Optional[SkipCallback]) -> None:
    logger.debug("Up to date: %s", artifact)
    if on_skip is not None:
        on_skip(artifact)


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def iter_site_candidates(
    site: Site,
    cache: FreshnessCache,
    config: CompressionConfig,
    on_skip: Optional[SkipCallback] = None,
) -> Iterator[CandidateFile]:
    """Yield the eligible site files whose artifact must be (re)written."""
    for site_file in site.files:
        candidate = candidate_for(site, site_file)
        if not is_eligible(candidate.destination_path, config):
            continue
        if not needs_compression(candidate, cache):
            _skipped(artifact_path(candidate.destination_path), on_skip)
            continue
        yield candidate


def iter_directory_candidates(
    root: Path,
    config: CompressionConfig,
    incremental: bool = False,
    on_skip: Optional[SkipCallback] = None,
) -> Iterator[CandidateFile]:
    """Yield every file under ``root`` matching the configured extensions.

    Without ``incremental`` every match is yielded so each run recompresses the
    whole directory. With it, files whose artifact already carries their
    modification time are left alone. Hidden files and anything below a hidden
    directory are not matched.
    """
    root = Path(root)
    matches = set()
    for extension in sorted(config.extensions):
        matches.update(root.rglob(f"*{extension}"))

    for path in sorted(matches):
        if _is_hidden(path, root) or not path.is_file() or not is_eligible(path, config):
            continue
        if incremental and artifact_is_current(path, artifact_path(path)):
            _skipped(artifact_path(path), on_skip)
            continue
        yield CandidateFile(source_path=path, destination_path=path)
