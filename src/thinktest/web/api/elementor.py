"""REST API for Elementor widget analyses."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from thinktest.elementor.analyzer import analyze_elementor_widget
from thinktest.storage.repos import ElementorRepo
from thinktest.web.api.analyses import too_large

router = APIRouter(tags=["elementor"])


class WidgetCreate(BaseModel):
    code: str


@router.post("/elementor")
async def create_widget_analysis(body: WidgetCreate, request: Request):
    rejected = too_large(request, body.code)
    if rejected:
        return rejected

    analysis = await run_in_threadpool(analyze_elementor_widget, body.code)
    repo = ElementorRepo(request.app.state.db)
    analysis_id = await repo.save(analysis)
    return {"id": analysis_id, "analysis": analysis.to_dict()}


@router.get("/elementor")
async def list_widget_analyses(request: Request, limit: int = 50, offset: int = 0):
    repo = ElementorRepo(request.app.state.db)
    return await repo.list_all(limit=limit, offset=offset)


@router.get("/elementor/{analysis_id}")
async def get_widget_analysis(analysis_id: str, request: Request):
    repo = ElementorRepo(request.app.state.db)
    result = await repo.get(analysis_id)
    if not result:
        return JSONResponse(
            status_code=404,
            content={"detail": "Elementor analysis not found"},
        )
    return result
