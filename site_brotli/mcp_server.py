"""MCP server exposing the directory compressor as a tool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .config import CompressionConfig
from .pipeline import compress_directory as run_compress_directory

logger = logging.getLogger("site_brotli.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="site-brotli")


@mcp.tool()
def compress_directory(
    path: str,
    extensions: Optional[List[str]] = None,
) -> str:
    """Write .br siblings for every matching file below a directory."""

    root = Path(path).expanduser()
    if not root.is_dir():
        raise FileNotFoundError(f"Directory does not exist: {root}")

    config = CompressionConfig.from_extensions(extensions)
    summary = run_compress_directory(root, config)
    lines = [
        f"Compressed {len(summary.compressed)} file(s) under {root} "
        f"({len(summary.failures)} failed)"
    ]
    lines.extend(f"- {artifact.relative_to(root)}" for artifact in summary.compressed)
    lines.extend(f"! {failure.source_path}: {failure.error}" for failure in summary.failures)
    return "\n".join(lines)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
