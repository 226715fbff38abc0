"""REST API for plugin analyses."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from thinktest.sources import file_hash
from thinktest.storage.repos import AnalysisRepo

router = APIRouter(tags=["analyses"])


class AnalysisCreate(BaseModel):
    code: str
    filename: str = "plugin.php"


def too_large(request: Request, code: str) -> JSONResponse | None:
    limit = request.app.state.config.max_file_size
    if len(code.encode("utf-8", errors="replace")) > limit:
        return JSONResponse(
            status_code=413,
            content={"detail": f"Source exceeds maximum size of {limit} bytes"},
        )
    return None


@router.post("/analyses")
async def create_analysis(body: AnalysisCreate, request: Request):
    rejected = too_large(request, body.code)
    if rejected:
        return rejected

    # Parsing is CPU-bound; keep it off the event loop
    result = await run_in_threadpool(
        request.app.state.analyzer.analyze, body.code, body.filename
    )
    repo = AnalysisRepo(request.app.state.db)
    analysis_id = await repo.save(result, file_hash(body.code))
    return {"id": analysis_id, "analysis": result.to_dict()}


@router.get("/analyses")
async def list_analyses(request: Request, limit: int = 50, offset: int = 0):
    repo = AnalysisRepo(request.app.state.db)
    return await repo.list_all(limit=limit, offset=offset)


@router.get("/analyses/{analysis_id}")
async def get_analysis(analysis_id: str, request: Request):
    repo = AnalysisRepo(request.app.state.db)
    result = await repo.get(analysis_id)
    if not result:
        return JSONResponse(
            status_code=404,
            content={"detail": "Analysis not found"},
        )
    return result
