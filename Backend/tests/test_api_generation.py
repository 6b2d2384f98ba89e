# tests/test_api_generation.py
"""
HTTP surface of the generation service: templates, runs, cancellation.

The app's run registry is swapped for one backed by stub providers so no
request ever leaves the process.
"""
import pytest

from artifact_studio.lib.websocket import ConnectionManager
from artifact_studio.orchestration.state import RunRegistry

from tests.utils.stubs import GatedProvider, RecordingSleep, StubProvider


SPEC_PAYLOAD = {
    "name": "Inventory Hub",
    "target_language": "Java (Spring Boot)",
    "storage": "MySQL",
    "platforms": ["Web"],
}


@pytest.fixture
def providers():
    """Every provider handed out by the registry, in order."""
    return []


@pytest.fixture
def registry(two_template_catalog, config, make_client, providers):
    from artifact_studio.main import app

    def factory(provider, model):
        if provider not in (None, "deepseek", "gated"):
            raise ValueError(f"Unknown provider: {provider}")
        stub = GatedProvider() if provider == "gated" else StubProvider()
        providers.append(stub)
        return make_client(stub)

    stub_registry = RunRegistry(
        ConnectionManager(),
        client_factory=factory,
        catalog=two_template_catalog,
        config=config,
        sleep=RecordingSleep(),
    )
    original = app.state.registry
    app.state.registry = stub_registry
    yield stub_registry
    app.state.registry = original


async def _start(async_client, provider=None):
    response = await async_client.post(
        "/api/generation/runs",
        json={"spec": SPEC_PAYLOAD, "provider": provider},
    )
    assert response.status_code == 202
    return response.json()["run_id"]


@pytest.mark.asyncio
async def test_list_templates(async_client, registry):
    response = await async_client.get("/api/generation/templates")

    assert response.status_code == 200
    data = response.json()
    assert [t["name"] for t in data["templates"]] == ["A", "B"]
    assert data["total"] == 2


@pytest.mark.asyncio
async def test_run_completes_and_snapshot_has_artifacts(async_client, registry):
    run_id = await _start(async_client)
    await registry.get(run_id).task

    response = await async_client.get(f"/api/generation/runs/{run_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "completed"
    assert data["project"] == "Inventory Hub"
    assert [a["title"] for a in data["artifacts"]] == ["A", "B"]
    assert data["result"]["generated_count"] == 2
    assert data["progress"]["status"] == "completed"
    assert data["error"] is None


@pytest.mark.asyncio
async def test_unknown_provider_is_rejected(async_client, registry):
    response = await async_client.post(
        "/api/generation/runs",
        json={"spec": SPEC_PAYLOAD, "provider": "nope"},
    )
    assert response.status_code == 400
    assert "Unknown provider" in response.json()["detail"]
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_invalid_spec_is_rejected(async_client, registry):
    response = await async_client.post(
        "/api/generation/runs",
        json={"spec": {"name": "", "target_language": "Go"}},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_run_is_404(async_client, registry):
    assert (await async_client.get("/api/generation/runs/missing")).status_code == 404
    assert (await async_client.post("/api/generation/runs/missing/cancel")).status_code == 404


@pytest.mark.asyncio
async def test_cancel_running_run(async_client, registry, providers):
    run_id = await _start(async_client, provider="gated")

    response = await async_client.post(f"/api/generation/runs/{run_id}/cancel")
    assert response.status_code == 200

    providers[0].gate.set()
    await registry.get(run_id).task

    data = (await async_client.get(f"/api/generation/runs/{run_id}")).json()
    assert data["state"] == "cancelled"
    assert data["artifacts"] == []
    assert "cancelled" in data["error"]
    providers[0].counter.assert_exact("artifact", 0)


@pytest.mark.asyncio
async def test_cancel_finished_run_conflicts(async_client, registry):
    run_id = await _start(async_client)
    await registry.get(run_id).task

    response = await async_client.post(f"/api/generation/runs/{run_id}/cancel")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_connection_check(async_client, registry):
    response = await async_client.get("/api/generation/connection")

    assert response.status_code == 200
    data = response.json()
    assert data["provider"] == "deepseek"
    assert data["model"] == "stub-model"
    assert data["connected"] is True


@pytest.mark.asyncio
async def test_connection_check_unknown_provider(async_client, registry):
    response = await async_client.get("/api/generation/connection", params={"provider": "nope"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_finished_run(async_client, registry):
    run_id = await _start(async_client)
    await registry.get(run_id).task

    response = await async_client.delete(f"/api/generation/runs/{run_id}")

    assert response.status_code == 200
    assert (await async_client.get(f"/api/generation/runs/{run_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_running_run_conflicts(async_client, registry, providers):
    run_id = await _start(async_client, provider="gated")

    response = await async_client.delete(f"/api/generation/runs/{run_id}")
    assert response.status_code == 409

    providers[0].gate.set()
    await registry.get(run_id).task
