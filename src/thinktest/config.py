"""Global configuration — XDG paths, YAML config file, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from thinktest.analysis.models import AnalysisRules

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_FILES_IN_ZIP = 100


class ConfigError(ValueError):
    """Raised for a malformed configuration file."""


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "thinktest"
    return Path.home() / ".local" / "share" / "thinktest"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "thinktest"
    return Path.home() / ".config" / "thinktest"


@dataclass
class ThinkTestConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    config_dir: Path = field(default_factory=_default_config_dir)
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_files_in_zip: int = DEFAULT_MAX_FILES_IN_ZIP
    allowed_extensions: tuple[str, ...] = ("php", "zip")
    rules: AnalysisRules = field(default_factory=AnalysisRules)
    web_host: str = "127.0.0.1"
    web_port: int = 8471
    verbose: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_dir / "thinktest.db"

    @classmethod
    def load(cls, path: str | Path | None = None) -> ThinkTestConfig:
        """Load config from a YAML file and environment variables.

        Without an explicit *path*, ``<config_dir>/config.yaml`` is read if
        it exists. Environment variables override file values.
        """
        config = cls()

        config_file = Path(path) if path else config.config_dir / "config.yaml"
        if path or config_file.is_file():
            config._apply_file(config_file)

        env_size = os.environ.get("THINKTEST_MAX_FILE_SIZE")
        if env_size:
            config.max_file_size = _int_setting(env_size, "THINKTEST_MAX_FILE_SIZE")

        env_zip = os.environ.get("THINKTEST_MAX_FILES_IN_ZIP")
        if env_zip:
            config.max_files_in_zip = _int_setting(env_zip, "THINKTEST_MAX_FILES_IN_ZIP")

        env_port = os.environ.get("THINKTEST_WEB_PORT")
        if env_port:
            config.web_port = _int_setting(env_port, "THINKTEST_WEB_PORT")

        return config

    def _apply_file(self, config_file: Path) -> None:
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {config_file}: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError("Config YAML must be a mapping")

        if "data_dir" in data:
            if not isinstance(data["data_dir"], str):
                raise ConfigError(f"Invalid value for data_dir: {data['data_dir']!r}")
            self.data_dir = Path(data["data_dir"]).expanduser()

        analysis = _section(data, "analysis")
        if "max_file_size" in analysis:
            self.max_file_size = _int_setting(
                analysis["max_file_size"], "analysis.max_file_size"
            )
        if "max_files_in_zip" in analysis:
            self.max_files_in_zip = _int_setting(
                analysis["max_files_in_zip"], "analysis.max_files_in_zip"
            )
        if "allowed_extensions" in analysis:
            extensions = analysis["allowed_extensions"]
            if not isinstance(extensions, list):
                raise ConfigError(
                    f"Invalid value for analysis.allowed_extensions: {extensions!r}"
                )
            self.allowed_extensions = tuple(str(ext).lower().lstrip(".") for ext in extensions)
        rules = analysis.get("rules")
        if isinstance(rules, dict):
            self.rules = AnalysisRules.from_mapping(rules)

        web = _section(data, "web")
        if "port" in web:
            self.web_port = _int_setting(web["port"], "web.port")


def _section(data: dict, key: str) -> dict:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return section


def _int_setting(value: object, key: str) -> int:
    """Convert a config value to a non-negative integer or raise ``ConfigError``."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid value for {key}: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
    if number < 0:
        raise ConfigError(f"Invalid value for {key}: {value!r}")
    return number
