"""Repository classes for async CRUD operations on SQLite."""

from __future__ import annotations

import json
import time
import uuid

import aiosqlite

from thinktest.analysis.models import AnalysisResult
from thinktest.elementor.models import ElementorWidgetAnalysis


def _decode(row: aiosqlite.Row | None) -> dict | None:
    if row is None:
        return None
    result = dict(row)
    result["analysis"] = json.loads(result.pop("analysis_data"))
    return result


class AnalysisRepo:
    """CRUD for plugin analysis results, de-duplicated by content hash."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def save(self, result: AnalysisResult, file_hash: str) -> str:
        """Store a result and return its id; re-analysis of the same content
        replaces the stored facts but keeps the id."""
        existing = await self.get_by_hash(file_hash)
        analysis_id = existing["id"] if existing else uuid.uuid4().hex[:12]

        await self._db.execute(
            "INSERT INTO analysis_results "
            "(id, filename, file_hash, analysis_method, parsed_files, "
            "failed_files, analysis_data, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(file_hash) DO UPDATE SET "
            "filename = excluded.filename, "
            "analysis_method = excluded.analysis_method, "
            "parsed_files = excluded.parsed_files, "
            "failed_files = excluded.failed_files, "
            "analysis_data = excluded.analysis_data, "
            "created_at = excluded.created_at",
            (
                analysis_id,
                result.filename,
                file_hash,
                result.analysis_method.value,
                result.parsed_file_count,
                result.failed_file_count,
                json.dumps(result.to_dict()),
                time.time(),
            ),
        )
        await self._db.commit()
        return analysis_id

    async def get(self, analysis_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM analysis_results WHERE id = ?", (analysis_id,)
        )
        return _decode(await cursor.fetchone())

    async def get_by_hash(self, file_hash: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM analysis_results WHERE file_hash = ?", (file_hash,)
        )
        return _decode(await cursor.fetchone())

    async def list_all(self, limit: int = 50, offset: int = 0) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT id, filename, file_hash, analysis_method, parsed_files, "
            "failed_files, created_at FROM analysis_results "
            "ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [dict(row) async for row in cursor]


class ElementorRepo:
    """CRUD for Elementor widget analyses."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def save(self, analysis: ElementorWidgetAnalysis) -> str:
        analysis_id = uuid.uuid4().hex[:12]
        await self._db.execute(
            "INSERT INTO elementor_analyses "
            "(id, widget_name, is_elementor_widget, analysis_data, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                analysis_id,
                analysis.widget_name,
                int(analysis.is_elementor_widget),
                json.dumps(analysis.to_dict()),
                time.time(),
            ),
        )
        await self._db.commit()
        return analysis_id

    async def get(self, analysis_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT * FROM elementor_analyses WHERE id = ?", (analysis_id,)
        )
        return _decode(await cursor.fetchone())

    async def list_all(self, limit: int = 50, offset: int = 0) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT id, widget_name, is_elementor_widget, created_at "
            "FROM elementor_analyses ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [dict(row) async for row in cursor]
