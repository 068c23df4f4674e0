"""Configuration objects and constants for the compressor."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Mapping, Optional

CONFIG_KEY = "brotli"
ARTIFACT_SUFFIX = ".br"
BROTLI_QUALITY = 11
PRODUCTION_ENV = "production"

DEFAULT_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        ".html",
        ".css",
        ".js",
        ".json",
        ".svg",
        ".txt",
        ".xml",
        ".atom",
        ".eot",
        ".ttf",
        ".stl",
    }
)


class RunMode(enum.Enum):
    """Whether a build should produce compressed artifacts."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def from_environment(cls, value: Optional[str]) -> "RunMode":
        if value == PRODUCTION_ENV:
            return cls.PRODUCTION
        return cls.DEVELOPMENT


def _normalize_extensions(values: Optional[Iterable[Any]]) -> FrozenSet[str]:
    if values is None:
        return DEFAULT_EXTENSIONS
    if isinstance(values, str):
        raise ValueError("extensions must be a list of strings, not a single string")
    extensions = set()
    for value in values:
        if not isinstance(value, str) or not value.startswith(".") or len(value) < 2:
            raise ValueError(f"Invalid extension {value!r}: expected a dot-prefixed suffix")
        extensions.add(value)
    return frozenset(extensions) or DEFAULT_EXTENSIONS


@dataclass(frozen=True)
class CompressionConfig:
    """Settings shared by every component for the duration of one run."""

    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS
    quality: int = field(default=BROTLI_QUALITY, init=False)

    @classmethod
    def from_extensions(cls, extensions: Optional[Iterable[Any]]) -> "CompressionConfig":
        """Build a config, falling back to the defaults for a missing or empty list."""
        return cls(extensions=_normalize_extensions(extensions))

    @classmethod
    def from_site_config(cls, site_config: Optional[Mapping[str, Any]]) -> "CompressionConfig":
        """Merge the options stored under the ``brotli`` key into the defaults."""
        options = (site_config or {}).get(CONFIG_KEY) or {}
        if not isinstance(options, Mapping):
            raise ValueError(f"'{CONFIG_KEY}' configuration must be a mapping")
        return cls.from_extensions(options.get("extensions"))
