# artifact_studio/lib/monitoring.py
from fastapi import FastAPI
from prometheus_client.registry import CollectorRegistry as Registry
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

from artifact_studio.core.constants import Provenance, RunState
from artifact_studio.core.logging import log

# Separate registry so tests and multiple app instances don't collide
registry = Registry()

artifacts_total = Counter(
    'artifact_studio_artifacts_total',
    'Artifacts produced, by provenance',
    ['provenance'],
    registry=registry
)

runs_total = Counter(
    'artifact_studio_runs_total',
    'Generation runs finished, by final state',
    ['state'],
    registry=registry
)


def record_artifact(provenance: Provenance):
    artifacts_total.labels(provenance=provenance.value).inc()


def record_run(state: RunState):
    runs_total.labels(state=state.value).inc()


def register_monitoring(app: FastAPI):
    """
    Registers Prometheus monitoring on the FastAPI app and exposes /metrics.
    """
    instrumentator = Instrumentator(
        excluded_handlers=["/metrics"],
        registry=registry
    ).instrument(app)

    instrumentator.expose(app, include_in_schema=False, should_gzip=True)

    log("MONITORING", "Prometheus instrumentation registered at /metrics.")
