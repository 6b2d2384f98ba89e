# artifact_studio/main.py
"""
Artifact Studio Backend
"""
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from starlette.middleware.cors import CORSMiddleware

# Rate limiting
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from artifact_studio.core.config import settings
from artifact_studio.core.logging import log
from artifact_studio.lib.websocket import manager
from artifact_studio.orchestration.state import RunRegistry

# Print environment status
print("🔑 Environment check:")
print(f"  DEEPSEEK_API_KEY loaded: {bool(settings.llm.deepseek_api_key)}")
print(f"  OPENAI_API_KEY loaded: {bool(settings.llm.openai_api_key)}")
print(f"  GEMINI_API_KEY loaded: {bool(settings.llm.gemini_api_key)}")
print(f"  Default provider: {settings.llm.default_provider}")
print(f"  Default model: {settings.llm.default_model}")
print(f"  Minimum artifacts per run: {settings.generation.configured_minimum}")


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    print("🚀 Artifact Studio starting...")

    yield

    print("🔌 Shutting down...")
    # Ask in-flight runs to stop at their next checkpoint
    registry: RunRegistry = app.state.registry
    await registry.cancel_all(timeout=settings.llm.request_timeout)


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Artifact Studio",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.manager = manager
app.state.registry = RunRegistry(manager)

# Monitoring
from artifact_studio.lib.monitoring import register_monitoring
register_monitoring(app)

if settings.cors_origins == ["*"] and not settings.debug:
    print("⚠️ [CORS] Warning: Using allow_origins=['*'] - consider setting CORS_ORIGINS in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate Limiting - default 100 requests per minute per IP (RATE_LIMIT env var)
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
print(f"🛡️ [SECURITY] Rate limiting enabled: {settings.rate_limit}")


# ---------------------------------------------------------------------------
# WEBSOCKET
# ---------------------------------------------------------------------------

@app.websocket("/ws/{run_id}")
async def websocket_endpoint(websocket: WebSocket, run_id: str):
    await manager.connect(websocket, run_id)
    try:
        while True:
            data = await websocket.receive_json()

            # Clients may cancel over the socket as well as over HTTP
            if data.get("type") == "CANCEL" and data.get("runId") == run_id:
                app.state.registry.cancel(run_id)

    except WebSocketDisconnect:
        await manager.disconnect(websocket, run_id)
    except Exception as e:
        log("API", f"[WS] Error: {e}")
        await manager.disconnect(websocket, run_id)


# ---------------------------------------------------------------------------
# API ROUTES
# ---------------------------------------------------------------------------

from artifact_studio.api import health, generation

app.include_router(health.router)
app.include_router(generation.router)


# ---------------------------------------------------------------------------
# RUN
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "artifact_studio.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )
