"""Utility helpers for extension matching and artifact naming."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from .config import ARTIFACT_SUFFIX, CompressionConfig

PathLike = Union[str, os.PathLike]


def is_eligible(path: PathLike, config: CompressionConfig) -> bool:
    """Return True when the file extension is one of the configured ones."""
    return Path(path).suffix in config.extensions


def artifact_path(destination: PathLike) -> Path:
    """Return the compressed sibling path for a built file."""
    destination = Path(destination)
    return destination.with_name(destination.name + ARTIFACT_SUFFIX)


def is_artifact(path: PathLike) -> bool:
    return os.fspath(path).endswith(ARTIFACT_SUFFIX)
