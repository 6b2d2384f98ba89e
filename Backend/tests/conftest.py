# tests/conftest.py
"""
Shared pytest fixtures for Artifact Studio tests.

Provides:
- A sample project specification
- Small catalogs built from the real catalog's prompts
- Stub providers, clients and a recording sleep (no network, no waiting)
- An httpx client bound to the FastAPI app
"""
import pytest
import pytest_asyncio
import httpx

from artifact_studio.catalog import Catalog, load_catalog
from artifact_studio.core.config import GenerationSettings
from artifact_studio.core.constants import Category
from artifact_studio.core.types import ProjectSpecification, Template
from artifact_studio.generation.progress import CollectingProgressReporter
from artifact_studio.llm.adapter import GenerationClient
from artifact_studio.orchestration.retry_policy import RetryPolicy

from tests.utils.stubs import RecordingSleep, StubProvider, make_catalog


# ═══════════════════════════════════════════════════════
# FIXTURES - Inputs
# ═══════════════════════════════════════════════════════

@pytest.fixture
def spec():
    """Sample project specification."""
    return ProjectSpecification(
        name="Inventory Hub",
        target_language="Java (Spring Boot)",
        storage="MySQL",
        platforms=["Web", "Android"],
        functional_description="Track stock levels across warehouses and alert on shortages.",
        generation_hint="Prefer constructor injection.",
        developer="Ops Team",
        company="Example Corp",
    )


@pytest.fixture(scope="session")
def real_catalog() -> Catalog:
    """The packaged catalog, loaded once."""
    return load_catalog()


@pytest.fixture
def two_template_catalog(real_catalog):
    """Backend template declared before the database one."""
    return make_catalog(real_catalog, [
        Template(name="B", description="backend piece", category=Category.BACKEND, min_lines=5, priority=1),
        Template(name="A", description="database piece", category=Category.DATABASE, min_lines=5, priority=1),
    ])


@pytest.fixture
def config():
    """Generation settings with a minimum of one artifact and 3s pacing."""
    return GenerationSettings(
        min_artifacts=1,
        test_mode=False,
        step_delay=3.0,
        failure_delay_multiplier=1.5,
        initial_backoff=5.0,
        backoff_multiplier=1.5,
    )


# ═══════════════════════════════════════════════════════
# FIXTURES - Stubs
# ═══════════════════════════════════════════════════════

@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def make_client(sleep):
    """Build a GenerationClient around a stub provider with instant backoff."""
    def _make(stub) -> GenerationClient:
        return GenerationClient(
            provider="deepseek",
            model="stub-model",
            provider_call=stub,
            retry_policy=RetryPolicy(initial_delay=5.0, multiplier=1.5, sleep=sleep),
            timeout=5,
        )
    return _make


@pytest.fixture
def reporter():
    return CollectingProgressReporter()


# ═══════════════════════════════════════════════════════
# FIXTURES - HTTP
# ═══════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def async_client():
    """httpx client talking to the app in-process."""
    from artifact_studio.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
