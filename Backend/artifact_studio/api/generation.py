# artifact_studio/api/generation.py
"""
Artifact generation routes.

Runs execute in the background; clients poll GET /runs/{id} or subscribe to
/ws/{run_id} for live progress.
"""
from fastapi import APIRouter, Request, HTTPException
from pydantic import BaseModel
from typing import Optional

from artifact_studio.catalog import get_catalog
from artifact_studio.core.config import settings
from artifact_studio.core.logging import log
from artifact_studio.core.types import ProjectSpecification
from artifact_studio.generation.orchestrator import compute_total, order_templates


router = APIRouter(prefix="/api/generation", tags=["Generation"])


class StartRunRequest(BaseModel):
    spec: ProjectSpecification
    provider: Optional[str] = None
    model: Optional[str] = None


def _catalog(request: Request):
    registry = request.app.state.registry
    return registry.catalog or get_catalog()


def _config(request: Request):
    registry = request.app.state.registry
    return registry.config or settings.generation


@router.get("/templates")
async def list_templates(request: Request):
    """Catalog templates in generation order."""
    templates = order_templates(_catalog(request).templates)
    return {
        "templates": [t.model_dump(mode="json") for t in templates],
        "total": compute_total(_config(request).configured_minimum, len(templates)),
    }


@router.get("/connection")
async def check_connection(request: Request, provider: Optional[str] = None, model: Optional[str] = None):
    """Provider info plus a live round-trip check."""
    registry = request.app.state.registry
    try:
        client = registry.client_factory(provider, model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    info = client.api_info()
    info["connected"] = await client.check_connection()
    return info


@router.post("/runs", status_code=202)
async def start_run(request: Request, data: StartRunRequest):
    """Start a generation run in the background."""
    registry = request.app.state.registry
    try:
        record = await registry.start(data.spec, provider=data.provider, model=data.model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    log("API", f"Run {record.run_id[:8]} started for '{data.spec.name}'")
    return {
        "success": True,
        "run_id": record.run_id,
        "message": "Generation started",
    }


@router.get("/runs/{run_id}")
async def get_run(request: Request, run_id: str):
    record = request.app.state.registry.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    return record.snapshot()


@router.post("/runs/{run_id}/cancel")
async def cancel_run(request: Request, run_id: str):
    registry = request.app.state.registry
    record = registry.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    if not registry.cancel(run_id):
        raise HTTPException(status_code=409, detail=f"Run {run_id} already finished ({record.state.value})")
    return {"success": True, "run_id": run_id, "message": "Cancellation requested"}


@router.delete("/runs/{run_id}")
async def delete_run(request: Request, run_id: str):
    """Drop a finished run from memory."""
    registry = request.app.state.registry
    record = registry.get(run_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    if not await registry.cleanup(run_id):
        raise HTTPException(status_code=409, detail=f"Run {run_id} is still running ({record.state.value})")
    return {"success": True, "run_id": run_id, "message": "Run removed"}
