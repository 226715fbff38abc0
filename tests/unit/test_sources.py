"""Tests for loading plugin source from files, archives and directories."""

from __future__ import annotations

import zipfile
from dataclasses import replace
from pathlib import Path

import pytest

from thinktest.analysis.splitter import split_sources
from thinktest.sources import SourceError, file_hash, load_source


def _write_zip(path: Path, members: dict[str, str]) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return path


class TestSingleFile:
    def test_php_file(self, tmp_path: Path, config):
        plugin = tmp_path / "hello.php"
        plugin.write_text("<?php add_action('init', 'boot');", encoding="utf-8")

        source = load_source(plugin, config)
        assert source.filename == "hello.php"
        assert source.file_count == 1
        assert "add_action" in source.content

    def test_disallowed_extension(self, tmp_path: Path, config):
        readme = tmp_path / "readme.txt"
        readme.write_text("hello", encoding="utf-8")
        with pytest.raises(SourceError, match="File type 'txt' is not allowed"):
            load_source(readme, config)

    def test_size_limit(self, tmp_path: Path, config):
        plugin = tmp_path / "big.php"
        plugin.write_text("<?php " + "x" * 200, encoding="utf-8")
        with pytest.raises(SourceError, match="exceeds maximum allowed size"):
            load_source(plugin, replace(config, max_file_size=100))

    def test_missing_path(self, tmp_path: Path, config):
        with pytest.raises(SourceError, match="No such file"):
            load_source(tmp_path / "nope.php", config)


class TestZip:
    def test_php_members_bundled(self, tmp_path: Path, config):
        archive = _write_zip(
            tmp_path / "my-plugin.zip",
            {
                "my-plugin/my-plugin.php": "<?php echo 1;",
                "my-plugin/readme.txt": "docs",
                "my-plugin/inc/api.php": "<?php echo 2;",
            },
        )
        source = load_source(archive, config)

        assert source.filename == "my-plugin@upload"
        assert source.file_count == 2
        assert [s.path for s in split_sources(source.content)] == [
            "my-plugin/my-plugin.php",
            "my-plugin/inc/api.php",
        ]

    def test_member_limit(self, tmp_path: Path, config):
        members = {f"f{i}.php": f"<?php echo {i};" for i in range(5)}
        archive = _write_zip(tmp_path / "many.zip", members)

        source = load_source(archive, replace(config, max_files_in_zip=3))
        assert source.file_count == 3

    def test_no_php_members(self, tmp_path: Path, config):
        archive = _write_zip(tmp_path / "docs.zip", {"readme.txt": "docs"})
        with pytest.raises(SourceError, match="No PHP files"):
            load_source(archive, config)

    def test_corrupt_archive(self, tmp_path: Path, config):
        archive = tmp_path / "bad.zip"
        archive.write_bytes(b"not a zip")
        with pytest.raises(SourceError, match="Failed to open ZIP"):
            load_source(archive, config)


class TestDirectory:
    def test_walk_skips_vendor(self, tmp_path: Path, config):
        root = tmp_path / "acme"
        (root / "inc").mkdir(parents=True)
        (root / "vendor" / "lib").mkdir(parents=True)
        (root / "acme.php").write_text("<?php echo 1;", encoding="utf-8")
        (root / "inc" / "admin.php").write_text("<?php echo 2;", encoding="utf-8")
        (root / "vendor" / "lib" / "dep.php").write_text("<?php echo 3;", encoding="utf-8")
        (root / "style.css").write_text("body {}", encoding="utf-8")

        source = load_source(root, config)

        assert source.filename == "acme@local"
        assert source.file_count == 2
        assert [s.path for s in split_sources(source.content)] == ["acme.php", "inc/admin.php"]

    def test_empty_directory(self, tmp_path: Path, config):
        with pytest.raises(SourceError, match="No PHP files"):
            load_source(tmp_path, config)


class TestFileHash:
    def test_stable(self):
        assert file_hash("<?php") == file_hash("<?php")
        assert file_hash("<?php") != file_hash("<?php ")
        assert len(file_hash("")) == 64
