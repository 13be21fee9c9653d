"""JSON API endpoints backing the desktop shell: settings, history, live metrics."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from pulse.exceptions import PersistenceError
from pulse.history.models import HistoricalData
from pulse.history.store import utc_today
from pulse.history.trends import sparkline
from pulse.models import AppMetrics
from pulse.revenue.models import to_number

log = structlog.get_logger(__name__)

router = APIRouter()


async def _json_object(request: Request) -> dict[str, Any]:
    """Request body as a JSON object, or 400."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Body is not valid JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    return body


def _history_or_400(request: Request, app_id: str) -> HistoricalData:
    try:
        return request.app.state.history_store.load(app_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/settings")
async def get_settings(request: Request) -> JSONResponse:
    """Settings document, or the default document when none is stored."""
    return JSONResponse(content=request.app.state.settings_store.load())


@router.put("/settings")
async def save_settings(request: Request) -> JSONResponse:
    document = await _json_object(request)
    try:
        request.app.state.settings_store.save(document)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return JSONResponse(content={"success": True})


@router.get("/history/{app_id}")
async def get_history(request: Request, app_id: str) -> JSONResponse:
    history = _history_or_400(request, app_id)
    return JSONResponse(content=history.to_dict())


@router.post("/history/{app_id}/snapshots")
async def save_snapshot(request: Request, app_id: str) -> JSONResponse:
    """Commit today's snapshot from a posted AppMetrics document."""
    body = await _json_object(request)
    metrics = AppMetrics.from_dict(body)
    try:
        history = request.app.state.history_store.commit_snapshot(
            app_id, metrics, date=utc_today()
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return JSONResponse(content=history.to_dict())


@router.get("/history/{app_id}/sparkline/{metric}")
async def get_sparkline(
    request: Request, app_id: str, metric: str, days: int = 7
) -> JSONResponse:
    history = _history_or_400(request, app_id)
    try:
        values = sparkline(history.snapshots, metric, days)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return JSONResponse(content=[to_number(v) for v in values])


@router.get("/apps/{app_id}/metrics")
async def get_app_metrics(request: Request, app_id: str) -> JSONResponse:
    """Collect metrics for a configured app right now."""
    app = request.app.state.settings_store.get_app(app_id)
    if app is None:
        raise HTTPException(status_code=404, detail=f"Unknown app: {app_id}")

    metrics = await request.app.state.collector.collect(app)
    log.info("app_metrics_served", app_id=app_id)
    return JSONResponse(content=metrics.to_dict())
