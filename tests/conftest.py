"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from thinktest.config import ThinkTestConfig


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_plugin(fixtures_dir: Path) -> str:
    return (fixtures_dir / "sample_plugin.php").read_text(encoding="utf-8")


@pytest.fixture
def broken_plugin(fixtures_dir: Path) -> str:
    return (fixtures_dir / "broken_plugin.php").read_text(encoding="utf-8")


@pytest.fixture
def hello_widget(fixtures_dir: Path) -> str:
    return (fixtures_dir / "hello_widget.php").read_text(encoding="utf-8")


@pytest.fixture
def config(tmp_path: Path) -> ThinkTestConfig:
    return ThinkTestConfig(data_dir=tmp_path / "data", config_dir=tmp_path / "config")
