"""Plugin source loading — single files, ZIP archives and directories.

Archives and directories are flattened into one ``// File:`` bundle named
``<name>@<label>`` so the analyzer treats them as multi-file sources.
"""

from __future__ import annotations

import hashlib
import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path

from thinktest.analysis.splitter import join_sources
from thinktest.config import ThinkTestConfig

logger = logging.getLogger(__name__)

# Directories to always skip
_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "vendor",
    ".idea",
    ".vscode",
}

_PHP_SUFFIX = ".php"


class SourceError(Exception):
    """Raised when plugin source cannot be loaded."""


@dataclass(frozen=True)
class PluginSource:
    """Source text ready for analysis."""

    content: str
    filename: str
    file_count: int = 1


def file_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8", errors="replace")).hexdigest()


def load_source(path: str | Path, config: ThinkTestConfig | None = None) -> PluginSource:
    """Load a ``.php`` file, a ``.zip`` archive or a plugin directory."""
    config = config or ThinkTestConfig()
    path = Path(path)

    if path.is_dir():
        return load_directory(path, config)
    if not path.is_file():
        raise SourceError(f"No such file or directory: {path}")

    extension = path.suffix.lower().lstrip(".")
    if extension not in config.allowed_extensions:
        raise SourceError(
            f"File type '{extension}' is not allowed. "
            f"Allowed types: {', '.join(config.allowed_extensions)}"
        )
    _check_size(path.stat().st_size, config)

    if extension == "zip":
        return load_zip(path, config)
    content = path.read_text(encoding="utf-8", errors="ignore")
    return PluginSource(content=content, filename=path.name)


def load_zip(path: Path, config: ThinkTestConfig) -> PluginSource:
    """Bundle the PHP members of a ZIP archive."""
    files: list[tuple[str, str]] = []
    try:
        with zipfile.ZipFile(path) as archive:
            for info in archive.infolist():
                if info.is_dir() or not info.filename.endswith(_PHP_SUFFIX):
                    continue
                if len(files) >= config.max_files_in_zip:
                    logger.warning(
                        "ZIP file %s contains more than %d PHP files, truncating",
                        path,
                        config.max_files_in_zip,
                    )
                    break
                data = archive.read(info)
                files.append((info.filename, data.decode("utf-8", errors="ignore")))
    except zipfile.BadZipFile as e:
        raise SourceError(f"Failed to open ZIP file {path}: {e}") from e

    if not files:
        raise SourceError(f"No PHP files found in ZIP archive {path}")
    return PluginSource(
        content=join_sources(files),
        filename=f"{path.stem}@upload",
        file_count=len(files),
    )


def load_directory(directory: Path, config: ThinkTestConfig) -> PluginSource:
    """Bundle every PHP file below *directory*."""
    directory = directory.resolve()
    files: list[tuple[str, str]] = []
    for file_path in _walk(directory):
        try:
            size = file_path.stat().st_size
            if size > config.max_file_size:
                logger.debug("Skipping %s: %d bytes exceeds limit", file_path, size)
                continue
            content = file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.debug("Skipping %s: %s", file_path, e)
            continue
        files.append((file_path.relative_to(directory).as_posix(), content))

    if not files:
        raise SourceError(f"No PHP files found in {directory}")
    return PluginSource(
        content=join_sources(files),
        filename=f"{directory.name}@local",
        file_count=len(files),
    )


def _walk(directory: Path):
    """Walk directory yielding PHP files in a stable order."""
    for root, dirs, files in os.walk(directory):
        # Prune skipped directories in-place
        dirs[:] = sorted(d for d in dirs if d not in _SKIP_DIRS)
        for name in sorted(files):
            if name.endswith(_PHP_SUFFIX):
                yield Path(root) / name


def _check_size(size: int, config: ThinkTestConfig) -> None:
    if size > config.max_file_size:
        raise SourceError(
            "File size exceeds maximum allowed size of "
            f"{config.max_file_size / 1024 / 1024:g}MB"
        )
