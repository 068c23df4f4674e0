"""High-level orchestration for compressing a built site or directory."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .compressor import compress_file
from .config import CompressionConfig, RunMode
from .freshness import snapshot_cache
from .models import CandidateFile, FileFailure, RunSummary
from .site import Site, iter_directory_candidates, iter_site_candidates
from .utils import is_artifact

logger = logging.getLogger("site_brotli")


def _unique(candidates: Iterable[CandidateFile]) -> List[CandidateFile]:
    """Drop candidates that would write the same artifact twice."""
    seen = set()
    unique: List[CandidateFile] = []
    for candidate in candidates:
        key = candidate.destination_path.resolve()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def _compress_one(
    candidate: CandidateFile,
    config: CompressionConfig,
) -> Optional[Path]:
    return compress_file(candidate.destination_path, config)


def compress_candidates(
    candidates: Iterable[CandidateFile],
    config: CompressionConfig,
    workers: int = 1,
) -> RunSummary:
    """Compress each candidate, collecting per-file failures instead of aborting."""
    start = time.perf_counter()
    summary = RunSummary()
    pending = _unique(candidates)

    def record(candidate: CandidateFile, error: Optional[OSError], artifact: Optional[Path]) -> None:
        if error is not None:
            logger.warning("Failed to compress %s: %s", candidate.destination_path, error)
            summary.failures.append(
                FileFailure(source_path=candidate.destination_path, error=str(error))
            )
        elif artifact is not None:
            summary.compressed.append(artifact)

    if workers <= 1:
        for candidate in pending:
            try:
                artifact = _compress_one(candidate, config)
            except OSError as exc:
                record(candidate, exc, None)
                continue
            record(candidate, None, artifact)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(_compress_one, candidate, config): candidate
                for candidate in pending
            }
            for future in as_completed(futures):
                candidate = futures[future]
                try:
                    artifact = future.result()
                except OSError as exc:
                    record(candidate, exc, None)
                    continue
                record(candidate, None, artifact)
        summary.compressed.sort()

    summary.total_seconds = time.perf_counter() - start
    return summary


def compress_site(
    site: Site,
    config: Optional[CompressionConfig] = None,
    workers: int = 1,
) -> RunSummary:
    """Compress every stale, eligible file the site build wrote."""
    if config is None:
        config = CompressionConfig.from_site_config(site.config)
    cache = snapshot_cache(site.regenerator_cache)
    up_to_date: List[Path] = []
    summary = compress_candidates(
        iter_site_candidates(site, cache, config, on_skip=up_to_date.append),
        config,
        workers,
    )
    summary.skipped = len(up_to_date)
    logger.info(
        "Compressed %d site file%s in %.2fs (%d up to date, %d failed)",
        len(summary.compressed),
        "" if len(summary.compressed) == 1 else "s",
        summary.total_seconds,
        summary.skipped,
        len(summary.failures),
    )
    return summary


def compress_directory(
    root: Path,
    config: CompressionConfig,
    incremental: bool = False,
    workers: int = 1,
) -> RunSummary:
    """Compress every matching file below a directory in place."""
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(f"Directory does not exist: {root}")
    up_to_date: List[Path] = []
    summary = compress_candidates(
        iter_directory_candidates(root, config, incremental=incremental, on_skip=up_to_date.append),
        config,
        workers,
    )
    summary.skipped = len(up_to_date)
    logger.info(
        "Compressed %d file%s under %s in %.2fs (%d up to date, %d failed)",
        len(summary.compressed),
        "" if len(summary.compressed) == 1 else "s",
        root,
        summary.total_seconds,
        summary.skipped,
        len(summary.failures),
    )
    return summary


def run_post_write(
    site: Site,
    mode: RunMode,
    workers: int = 1,
) -> Optional[RunSummary]:
    """Entry point for a finished site build.

    Nothing happens outside production runs. When the host reports an asset
    pipeline, its output directory is compressed as well.
    """
    if mode is not RunMode.PRODUCTION:
        logger.debug("Skipping compression for %s run", mode.value)
        return None

    config = CompressionConfig.from_site_config(site.config)
    summary = compress_site(site, config, workers)
    if site.has_assets:
        assets_dir = site.destination / site.assets_prefix.strip("/")
        if assets_dir.is_dir():
            summary = summary.merge(compress_directory(assets_dir, config, workers=workers))
    return summary


def prune_obsolete(paths: Sequence[str]) -> List[str]:
    """Keep compressed artifacts out of the host's obsolete-file cleanup."""
    return [path for path in paths if not is_artifact(path)]
