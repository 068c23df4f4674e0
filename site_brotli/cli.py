"""Command-line entry point for the Brotli precompressor."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .config import PRODUCTION_ENV, CompressionConfig, RunMode
from .models import RunSummary
from .pipeline import compress_directory, run_post_write
from .site import Site

logger = logging.getLogger("site_brotli.cli")

ENVIRONMENT_VARIABLE = "SITE_ENV"


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("directory", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of files to compress in parallel",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_directory_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("root", type=Path, help="Directory of built files to compress in place")
    parser.add_argument(
        "--extension",
        dest="extensions",
        action="append",
        default=None,
        help="File extension to compress, including the leading dot (repeatable)",
    )
    parser.add_argument(
        "--incremental",
        action="store_true",
        help="Skip files whose .br artifact already matches their modification time",
    )
    _add_common_arguments(parser)


def _add_site_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("manifest", type=Path, help="JSON description of the built site")
    parser.add_argument(
        "--env",
        default=os.getenv(ENVIRONMENT_VARIABLE, "development"),
        help=f"Build environment; only '{PRODUCTION_ENV}' compresses (default: ${ENVIRONMENT_VARIABLE})",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="site-brotli",
        description="Write Brotli-compressed .br siblings for built site files.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    directory_parser = subparsers.add_parser(
        "directory", help="Compress every matching file below a directory"
    )
    _add_directory_arguments(directory_parser)

    site_parser = subparsers.add_parser(
        "site", help="Compress the stale files of a built site described by a manifest"
    )
    _add_site_arguments(site_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.command == "directory":
        try:
            args.config = CompressionConfig.from_extensions(args.extensions)
        except ValueError as exc:
            parser.error(str(exc))
    return args


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _report(summary: Optional[RunSummary], verbose: bool) -> int:
    if summary is None:
        return 0
    if verbose:
        for artifact in summary.compressed:
            logger.debug("Wrote %s", artifact)
    for failure in summary.failures:
        logger.error("%s: %s", failure.source_path, failure.error)
    return 0 if summary.ok else 1


def _run_directory(args: argparse.Namespace) -> int:
    try:
        summary = compress_directory(
            args.root.resolve(),
            args.config,
            incremental=args.incremental,
            workers=args.workers,
        )
    except NotADirectoryError as exc:
        logger.error("%s", exc)
        return 2
    return _report(summary, args.verbose)


def _run_site(args: argparse.Namespace) -> int:
    try:
        site = Site.from_manifest(args.manifest.resolve())
        mode = RunMode.from_environment(args.env)
        summary = run_post_write(site, mode, workers=args.workers)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Skipping %s: %s", args.manifest, exc)
        return 2
    if summary is None:
        logger.info("Environment is '%s'; nothing to compress", args.env)
    return _report(summary, args.verbose)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "directory":
        return _run_directory(args)
    return _run_site(args)


if __name__ == "__main__":
    sys.exit(main())
