"""
Unit tests for the compression pipeline entry points.
"""

import brotli
import pytest

from site_brotli.config import CompressionConfig, RunMode
from site_brotli.models import CandidateFile
from site_brotli.pipeline import (
    compress_candidates,
    compress_directory,
    compress_site,
    prune_obsolete,
    run_post_write,
)


def _all_clean(site):
    return {
        str(site.source / "index.md"): False,
        str(site.source / "css" / "site.css"): False,
        str(site.source / "img" / "logo.png"): False,
    }


class TestCompressSite:
    """Test compressing a structured site."""

    def test_eligible_files_get_artifacts(self, built_site):
        summary = compress_site(built_site)

        dest = built_site.destination
        assert summary.ok
        assert sorted(summary.compressed) == sorted([dest / "index.html.br", dest / "css" / "site.css.br"])
        for artifact in summary.compressed:
            assert artifact.stat().st_size > 0
        assert not (dest / "img" / "logo.png.br").exists()

    def test_artifacts_round_trip(self, built_site):
        compress_site(built_site)

        dest = built_site.destination
        for name in ("index.html", "css/site.css"):
            original = (dest / name).read_bytes()
            assert brotli.decompress((dest / (name + ".br")).read_bytes()) == original

    def test_artifact_times_match_source(self, built_site):
        summary = compress_site(built_site)

        for artifact in summary.compressed:
            built = artifact.with_name(artifact.name[: -len(".br")])
            assert artifact.stat().st_mtime_ns == built.stat().st_mtime_ns
            assert artifact.stat().st_atime_ns == built.stat().st_atime_ns

    def test_clean_rerun_writes_nothing(self, built_site):
        """Test an unchanged build leaves existing artifacts untouched."""
        compress_site(built_site)
        artifact = built_site.destination / "index.html.br"
        before = artifact.stat()
        content = artifact.read_bytes()
        built_site.regenerator_cache = _all_clean(built_site)

        summary = compress_site(built_site)

        after = artifact.stat()
        assert summary.compressed == []
        assert summary.skipped == 2
        assert after.st_ino == before.st_ino
        assert after.st_mtime_ns == before.st_mtime_ns
        assert artifact.read_bytes() == content

    def test_dirty_rerun_overwrites(self, built_site):
        """Test a dirty source forces recompression of an existing artifact."""
        compress_site(built_site)
        artifact = built_site.destination / "index.html.br"
        before = artifact.stat()
        (built_site.destination / "index.html").write_text("<p>changed</p>\n", encoding="utf-8")
        flags = _all_clean(built_site)
        flags[str(built_site.source / "index.md")] = True
        built_site.regenerator_cache = flags

        summary = compress_site(built_site)

        assert summary.compressed == [artifact]
        assert artifact.stat().st_ino != before.st_ino
        assert brotli.decompress(artifact.read_bytes()) == b"<p>changed</p>\n"

    def test_missing_artifact_recompressed_even_when_clean(self, built_site):
        compress_site(built_site)
        (built_site.destination / "css" / "site.css.br").unlink()
        built_site.regenerator_cache = _all_clean(built_site)

        summary = compress_site(built_site)

        assert summary.compressed == [built_site.destination / "css" / "site.css.br"]

    def test_site_config_extensions(self, built_site):
        built_site.config = {"brotli": {"extensions": [".css"]}}

        summary = compress_site(built_site)

        assert summary.compressed == [built_site.destination / "css" / "site.css.br"]


class TestCompressCandidates:
    """Test per-candidate processing."""

    def test_missing_source_does_not_stop_run(self, tmp_path):
        present = tmp_path / "present.html"
        present.write_text("<p>here</p>", encoding="utf-8")
        missing = tmp_path / "missing.html"
        candidates = [
            CandidateFile(source_path=missing, destination_path=missing),
            CandidateFile(source_path=present, destination_path=present),
        ]

        summary = compress_candidates(candidates, CompressionConfig())

        assert not summary.ok
        assert [f.source_path for f in summary.failures] == [missing]
        assert summary.compressed == [tmp_path / "present.html.br"]
        assert not (tmp_path / "missing.html.br").exists()

    def test_duplicates_compressed_once(self, tmp_path):
        page = tmp_path / "index.html"
        page.write_text("<p>x</p>", encoding="utf-8")
        candidate = CandidateFile(source_path=page, destination_path=page)

        summary = compress_candidates([candidate, candidate], CompressionConfig())

        assert summary.compressed == [tmp_path / "index.html.br"]

    def test_worker_pool(self, tmp_path):
        paths = []
        for index in range(12):
            path = tmp_path / f"page-{index:02d}.html"
            path.write_text(f"<p>{index}</p>" * 10, encoding="utf-8")
            paths.append(path)

        summary = compress_candidates(
            (CandidateFile(source_path=p, destination_path=p) for p in paths),
            CompressionConfig(),
            workers=4,
        )

        assert summary.ok
        assert summary.compressed == [p.with_name(p.name + ".br") for p in paths]
        for path in paths:
            artifact = path.with_name(path.name + ".br")
            assert artifact.stat().st_mtime_ns == path.stat().st_mtime_ns


class TestCompressDirectory:
    """Test compressing a plain directory."""

    def test_html_and_png(self, tmp_path):
        """Test only the configured extension is compressed."""
        content = b"0123456789" * 5
        (tmp_path / "a.html").write_bytes(content)
        (tmp_path / "b.png").write_bytes(bytes(range(50)))

        summary = compress_directory(tmp_path, CompressionConfig.from_extensions([".html"]))

        assert summary.compressed == [tmp_path / "a.html.br"]
        assert brotli.decompress((tmp_path / "a.html.br").read_bytes()) == content
        assert not (tmp_path / "b.png.br").exists()

    def test_recompresses_every_run(self, tmp_path):
        (tmp_path / "a.html").write_text("<p>a</p>", encoding="utf-8")
        config = CompressionConfig.from_extensions([".html"])
        compress_directory(tmp_path, config)

        summary = compress_directory(tmp_path, config)

        assert summary.compressed == [tmp_path / "a.html.br"]
        assert summary.skipped == 0

    def test_incremental_rerun_skips(self, tmp_path):
        (tmp_path / "a.html").write_text("<p>a</p>", encoding="utf-8")
        config = CompressionConfig.from_extensions([".html"])
        compress_directory(tmp_path, config, incremental=True)

        summary = compress_directory(tmp_path, config, incremental=True)

        assert summary.compressed == []
        assert summary.skipped == 1

    def test_missing_directory(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            compress_directory(tmp_path / "nope", CompressionConfig())


class TestRunPostWrite:
    """Test the gated build hook."""

    def test_development_is_noop(self, built_site):
        assert run_post_write(built_site, RunMode.DEVELOPMENT) is None
        assert list(built_site.destination.rglob("*.br")) == []

    def test_production_compresses(self, built_site):
        summary = run_post_write(built_site, RunMode.PRODUCTION)

        assert summary is not None
        assert (built_site.destination / "index.html.br").exists()

    def test_assets_compressed_when_capability_present(self, built_site):
        assets = built_site.destination / "assets"
        assets.mkdir()
        (assets / "app.js").write_text("console.log('hi');\n" * 10, encoding="utf-8")
        built_site.capabilities = frozenset({"assets"})
        built_site.assets_prefix = "/assets"

        summary = run_post_write(built_site, RunMode.PRODUCTION)

        assert assets / "app.js.br" in summary.compressed

    def test_rerun_counts_up_to_date_files(self, built_site):
        assets = built_site.destination / "assets"
        assets.mkdir()
        (assets / "app.js").write_text("console.log('hi');\n" * 10, encoding="utf-8")
        built_site.capabilities = frozenset({"assets"})
        built_site.assets_prefix = "/assets"
        run_post_write(built_site, RunMode.PRODUCTION)
        built_site.regenerator_cache = _all_clean(built_site)

        summary = run_post_write(built_site, RunMode.PRODUCTION)

        assert summary.skipped == 2
        assert summary.compressed == [assets / "app.js.br"]

    def test_assets_ignored_without_capability(self, built_site):
        assets = built_site.destination / "assets"
        assets.mkdir()
        (assets / "app.js").write_text("console.log('hi');\n", encoding="utf-8")
        built_site.assets_prefix = "/assets"

        run_post_write(built_site, RunMode.PRODUCTION)

        assert not (assets / "app.js.br").exists()


class TestPruneObsolete:
    """Test keeping artifacts out of cleanup."""

    def test_removes_artifacts(self):
        obsolete = ["_site/old.html", "_site/index.html.br", "_site/css/a.css.br"]

        assert prune_obsolete(obsolete) == ["_site/old.html"]
