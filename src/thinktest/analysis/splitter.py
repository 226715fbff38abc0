"""Detection and splitting of concatenated multi-file plugin sources.

Repository and archive imports join every file into one string, each file
preceded by ``\\n\\n// File: <relative/path>\\n``. Such bundles are named
``owner/repo@branch`` so a literal ``// File: `` inside ordinary code does
not trigger splitting on its own.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

FILE_MARKER = "// File: "
BUNDLE_NAME_SEPARATOR = "@"

_SPLIT = re.compile(r"\n\n// File: (.+?)\n")


@dataclass(frozen=True)
class SourceSegment:
    """One file recovered from a bundle."""

    path: str
    content: str


def is_multi_file(content: str, filename: str) -> bool:
    return FILE_MARKER in content and BUNDLE_NAME_SEPARATOR in filename


def split_sources(content: str) -> list[SourceSegment]:
    """Split a bundle into its files, dropping blank ones.

    Text before the first marker is not part of any file and is discarded.
    """
    parts = _SPLIT.split(content)
    segments = []
    for i in range(1, len(parts), 2):
        body = parts[i + 1] if i + 1 < len(parts) else ""
        if not body.strip():
            continue
        segments.append(SourceSegment(path=parts[i], content=body))
    return segments


def join_sources(files: Iterable[tuple[str, str]]) -> str:
    """Render ``(path, content)`` pairs in the bundle format."""
    return "".join(f"\n\n{FILE_MARKER}{path}\n{content}" for path, content in files)
