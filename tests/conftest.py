"""Shared fixtures for the compressor tests."""

from pathlib import Path

import pytest

from site_brotli.site import Site, SiteFile


@pytest.fixture
def built_site(tmp_path: Path) -> Site:
    """A small site with one page and two static files already built."""
    source = tmp_path / "src"
    destination = tmp_path / "_site"
    (source / "css").mkdir(parents=True)
    (source / "img").mkdir()
    (destination / "css").mkdir(parents=True)
    (destination / "img").mkdir()

    (source / "index.md").write_text("# Home\n", encoding="utf-8")
    (destination / "index.html").write_text("<html><body>Home</body></html>\n" * 20, encoding="utf-8")
    (source / "css" / "site.css").write_text("body { margin: 0; }\n" * 20, encoding="utf-8")
    (destination / "css" / "site.css").write_text("body { margin: 0; }\n" * 20, encoding="utf-8")
    (source / "img" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(64)))
    (destination / "img" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(64)))

    return Site(
        source=source,
        destination=destination,
        files=[
            SiteFile(destination=Path("index.html"), relative_path=Path("index.md")),
            SiteFile(destination=Path("css/site.css"), path=source / "css" / "site.css"),
            SiteFile(destination=Path("img/logo.png"), path=source / "img" / "logo.png"),
        ],
        regenerator_cache={},
    )
