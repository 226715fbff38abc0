"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from thinktest.config import DEFAULT_MAX_FILE_SIZE, ConfigError, ThinkTestConfig


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    for name in ("THINKTEST_MAX_FILE_SIZE", "THINKTEST_MAX_FILES_IN_ZIP", "THINKTEST_WEB_PORT"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self, tmp_path: Path):
        config = ThinkTestConfig.load()
        assert config.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert config.max_files_in_zip == 100
        assert config.allowed_extensions == ("php", "zip")
        assert config.web_port == 8471
        assert config.rules.detect_hooks is True
        assert config.data_dir == tmp_path / "xdg-data" / "thinktest"
        assert config.db_path == tmp_path / "xdg-data" / "thinktest" / "thinktest.db"


class TestConfigFile:
    def test_explicit_file(self, fixtures_dir: Path):
        config = ThinkTestConfig.load(fixtures_dir / "thinktest.yaml")
        assert config.data_dir == Path("/tmp/thinktest-fixture")
        assert config.max_file_size == 2048
        assert config.max_files_in_zip == 5
        assert config.web_port == 9000
        assert config.rules.detect_security is False
        assert config.rules.detect_hooks is True

    def test_default_location(self, tmp_path: Path):
        config_dir = tmp_path / "xdg-config" / "thinktest"
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text(
            "analysis:\n  allowed_extensions: [.PHP]\n", encoding="utf-8"
        )
        assert ThinkTestConfig.load().allowed_extensions == ("php",)

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert ThinkTestConfig.load(path).max_file_size == DEFAULT_MAX_FILE_SIZE

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a mapping"):
            ThinkTestConfig.load(path)

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("analysis: [\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Cannot read config file"):
            ThinkTestConfig.load(path)


class TestEnvironment:
    def test_env_overrides_file(self, fixtures_dir: Path, monkeypatch):
        monkeypatch.setenv("THINKTEST_MAX_FILE_SIZE", "4096")
        monkeypatch.setenv("THINKTEST_MAX_FILES_IN_ZIP", "7")
        monkeypatch.setenv("THINKTEST_WEB_PORT", "9100")

        config = ThinkTestConfig.load(fixtures_dir / "thinktest.yaml")
        assert config.max_file_size == 4096
        assert config.max_files_in_zip == 7
        assert config.web_port == 9100


class TestInvalidValues:
    @pytest.mark.parametrize(
        "yaml_text,key",
        [
            ("analysis:\n  max_file_size: big\n", "analysis.max_file_size"),
            ("analysis:\n  max_files_in_zip: -1\n", "analysis.max_files_in_zip"),
            ("analysis:\n  max_file_size: true\n", "analysis.max_file_size"),
            ("analysis:\n  allowed_extensions: php\n", "analysis.allowed_extensions"),
            ("web:\n  port: [1]\n", "web.port"),
            ("data_dir: 5\n", "data_dir"),
        ],
    )
    def test_bad_file_value(self, tmp_path: Path, yaml_text: str, key: str):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml_text, encoding="utf-8")
        with pytest.raises(ConfigError, match=f"Invalid value for {key}"):
            ThinkTestConfig.load(path)

    def test_section_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("analysis: 5\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="'analysis' must be a mapping"):
            ThinkTestConfig.load(path)

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("THINKTEST_MAX_FILE_SIZE", "10MB")
        with pytest.raises(ConfigError, match="THINKTEST_MAX_FILE_SIZE"):
            ThinkTestConfig.load()
