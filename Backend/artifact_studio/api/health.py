# artifact_studio/api/health.py
"""
Health check endpoints.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/healthz")
async def healthz():
    """Simple health check."""
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/api/health")
async def api_health(request: Request):
    """API health check with the number of runs held in memory."""
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "healthy",
        "runs": len(registry) if registry is not None else 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
