# tests/test_context.py
"""
RunContext accumulation and rendering.
"""
from artifact_studio.core.constants import Category, ModelKind
from artifact_studio.core.types import (
    ApiEndpoint,
    ArtifactSummary,
    ProjectArchitecture,
    SharedModel,
    StorageTable,
)
from artifact_studio.generation.context import RunContext


def _architecture():
    return ProjectArchitecture(
        package_name="com.example.shop",
        main_identifier="ShopApplication",
        storage_schema_name="shop_db",
        api_prefix="/api/v1",
    )


def test_empty_context_renders_placeholder():
    assert RunContext().render_for_prompt() == "(no architecture defined yet)"


def test_appends_are_not_deduplicated():
    context = RunContext("run-1")
    user = SharedModel(name="User", fields=["id"])
    context.append_models([user])
    context.append_models([user])
    context.append_endpoints([ApiEndpoint(path="/users", method="get")] * 2)

    assert len(context.models) == 2
    assert len(context.endpoints) == 2
    assert context.endpoints[0].method == "GET"


def test_render_includes_everything_produced_so_far():
    context = RunContext()
    context.set_architecture(_architecture())
    context.append_models([SharedModel(name="Order", fields=["Long id", "BigDecimal total"], kind=ModelKind.ENTITY)])
    context.append_endpoints([ApiEndpoint(path="/api/v1/orders", method="POST", description="Create order")])
    context.append_tables([StorageTable(name="orders", fields=["id", "total"], relationships=["user_id -> users.id"])])
    context.append_summary(ArtifactSummary(
        title="Order Service",
        category=Category.BACKEND,
        main_identifiers=["OrderService"],
        main_operations=["placeOrder"],
    ))

    rendered = context.render_for_prompt()

    assert "com.example.shop" in rendered
    assert "Order (entity): Long id, BigDecimal total" in rendered
    assert "POST /api/v1/orders: Create order" in rendered
    assert "orders: id, total [relations: user_id -> users.id]" in rendered
    assert "1. Order Service (backend)" in rendered
    assert "operations: placeOrder" in rendered


def test_summary_digest():
    context = RunContext()
    assert context.render_summary() == "No architecture was established."

    context.set_architecture(_architecture())
    context.append_models([SharedModel(name="User"), SharedModel(name="User")])
    digest = context.render_summary()
    assert "Package: com.example.shop" in digest
    assert "Shared models (2): User" in digest
