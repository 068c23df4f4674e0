"""Brotli compression of individual built files."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

import brotli

from .config import CompressionConfig
from .utils import PathLike, artifact_path, is_eligible

logger = logging.getLogger("site_brotli")


def sync_timestamps(source: PathLike, artifact: PathLike) -> None:
    """Give the artifact the access and modification times of its source."""
    source_stat = os.stat(source)
    os.utime(artifact, ns=(source_stat.st_atime_ns, source_stat.st_mtime_ns))


def _write_atomically(target: Path, data: bytes, mode: int) -> None:
    handle = tempfile.NamedTemporaryFile(
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with handle:
            handle.write(data)
        os.chmod(handle.name, mode)
        os.replace(handle.name, target)
    except BaseException:
        try:
            os.unlink(handle.name)
        except FileNotFoundError:
            pass
        raise


def compress_file(source: PathLike, config: CompressionConfig) -> Optional[Path]:
    """Write ``<source>.br`` next to an eligible file.

    Returns the artifact path, or ``None`` when the extension is not one of the
    configured ones. The artifact gets the permission bits of its source. Read
    and write errors propagate as ``OSError``; a previous artifact is only ever
    replaced by a complete one.
    """
    source = Path(source)
    if not is_eligible(source, config):
        return None

    data = source.read_bytes()
    compressed = brotli.compress(data, quality=config.quality)
    target = artifact_path(source)
    logger.debug("Brotli: %s", target)

    _write_atomically(target, compressed, stat.S_IMODE(source.stat().st_mode))
    sync_timestamps(source, target)
    return target
