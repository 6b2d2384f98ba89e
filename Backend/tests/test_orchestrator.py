# tests/test_orchestrator.py
"""
Generation Orchestrator: ordering, sizing, fallback, pacing, documentation
failure and cancellation. All runs use stub providers and recorded sleeps.
"""
import dataclasses
import pytest

from artifact_studio.core.constants import Category, ProgressStatus, Provenance, RunState
from artifact_studio.core.exceptions import (
    AuthError,
    GenerationRunError,
    RateLimitError,
    RunCancelledError,
)
from artifact_studio.core.types import Template
from artifact_studio.generation.orchestrator import (
    GenerationOrchestrator,
    completion_message,
    compute_total,
    order_templates,
    plan_templates,
)
from artifact_studio.generation.progress import CallbackProgressReporter, CollectingProgressReporter
from artifact_studio.orchestration.cancellation import CancellationToken

from tests.utils.stubs import (
    make_catalog,
    RecordingSleep,
    StubProvider,
    always_raise,
    artifact_response,
    module_name,
)


def failing_for(name, error):
    """Artifact handler that raises `error` for one template only."""
    def handler(prompt):
        if module_name(prompt) == name:
            raise error
        return artifact_response(prompt)
    return handler


def _template(name, category, priority=1, min_lines=5):
    return Template(name=name, description=f"{name} description", category=category, min_lines=min_lines, priority=priority)


@pytest.fixture
def build(spec, config, make_client, reporter):
    """Build an orchestrator around a stub provider and a recording step sleep."""
    def _build(catalog, stub=None, step_sleep=None, run_config=None, run_spec=None, **kwargs):
        return GenerationOrchestrator(
            run_spec or spec,
            client=make_client(stub or StubProvider()),
            catalog=catalog,
            reporter=kwargs.pop("run_reporter", reporter),
            config=run_config or config,
            sleep=step_sleep or RecordingSleep(),
            **kwargs,
        )
    return _build


# ═══════════════════════════════════════════════════════
# ORDERING / SIZING
# ═══════════════════════════════════════════════════════

class TestPlanning:
    def test_order_is_category_then_priority(self):
        templates = [
            _template("cfg", Category.CONFIG, 1),
            _template("ui", Category.FRONTEND, 1),
            _template("svc2", Category.BACKEND, 2),
            _template("svc1", Category.BACKEND, 1),
            _template("db", Category.DATABASE, 3),
        ]
        assert [t.name for t in order_templates(templates)] == ["db", "svc1", "svc2", "ui", "cfg"]

    def test_total_is_max_of_minimum_and_catalog(self):
        assert compute_total(30, 5) == 30
        assert compute_total(1, 5) == 5

    def test_continuations_follow_their_source(self):
        templates = [_template("db", Category.DATABASE), _template("svc", Category.BACKEND)]
        planned = plan_templates(templates, 5)
        assert [t.name for t in planned] == [
            "db", "db (Part 2)", "db (Part 3)", "svc", "svc (Part 2)",
        ]

    def test_continuation_precedes_templates_sharing_its_key(self):
        templates = [_template("X", Category.BACKEND, 1), _template("Y", Category.BACKEND, 1)]
        planned = plan_templates(templates, 3)
        assert [t.name for t in planned] == ["X", "X (Part 2)", "Y"]
        assert all(t.sort_key == (Category.BACKEND.rank, 1) for t in planned)

    def test_completion_messages(self):
        assert completion_message(30, 0) == "All 30 artifacts generated"
        assert completion_message(28, 2) == "28 generated, 2 fallback"


# ═══════════════════════════════════════════════════════
# FULL RUNS
# ═══════════════════════════════════════════════════════

class TestRun:
    @pytest.mark.asyncio
    async def test_full_catalog_run(self, build, real_catalog, reporter):
        stub = StubProvider()
        orchestrator = build(real_catalog, stub)

        result = await orchestrator.run()

        assert result.state == RunState.COMPLETED
        assert len(result.artifacts) == 30
        assert [a.id for a in result.artifacts] == list(range(1, 31))
        ranks = [(a.category.rank) for a in result.artifacts]
        assert ranks == sorted(ranks)
        assert result.generated_count == 30 and result.fallback_count == 0
        assert result.documentation.startswith("# Technical Documentation")
        assert "Package: com.example.inventoryhub" in result.architecture_summary

        by_name = {t.name: t for t in real_catalog.templates}
        for artifact in result.artifacts:
            assert artifact.line_count >= by_name[artifact.title].min_lines

        assert reporter.last.status == ProgressStatus.COMPLETED
        assert reporter.last.message == "All 30 artifacts generated"
        stub.counter.assert_exact("bootstrap", 1)
        stub.counter.assert_exact("artifact", 30)
        stub.counter.assert_exact("documentation", 1)

    @pytest.mark.asyncio
    async def test_call_parameters_per_stage(self, build, two_template_catalog):
        stub = StubProvider()
        await build(two_template_catalog, stub).run()

        params = {kind: kw for kind, _, kw in stub.requests}
        assert params["artifact"] == {"temperature": 0.3, "max_tokens": 3000}
        assert params["bootstrap"] == {"temperature": 0.2, "max_tokens": 2000}
        assert params["documentation"] == {"temperature": 0.5, "max_tokens": 6000}

    @pytest.mark.asyncio
    async def test_minimum_above_catalog_size_cycles_templates(self, build, two_template_catalog, config):
        run_config = dataclasses.replace(config, min_artifacts=5)
        result = await build(two_template_catalog, run_config=run_config).run()

        assert len(result.artifacts) == 5
        assert [a.title for a in result.artifacts] == ["A", "A (Part 2)", "A (Part 3)", "B", "B (Part 2)"]

    @pytest.mark.asyncio
    async def test_database_before_backend_scenario(self, build, two_template_catalog):
        result = await build(two_template_catalog).run()
        assert [a.title for a in result.artifacts] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_runs_are_idempotent_with_a_deterministic_stub(self, build, real_catalog):
        error = RateLimitError("stub", "429")
        first = await build(real_catalog, StubProvider(artifact=failing_for("Cache Manager", error))).run()
        second = await build(real_catalog, StubProvider(artifact=failing_for("Cache Manager", error))).run()

        def shape(result):
            return [(a.title, a.provenance) for a in result.artifacts]

        assert shape(first) == shape(second)

    @pytest.mark.asyncio
    async def test_progress_events_are_ordered(self, build, two_template_catalog, reporter):
        await build(two_template_catalog).run()

        statuses = [e.status for e in reporter.events]
        assert statuses[0] == ProgressStatus.PREPARING
        assert statuses[-1] == ProgressStatus.COMPLETED
        generating = [e.current for e in reporter.events if e.status == ProgressStatus.GENERATING]
        assert generating == [1, 2]
        assert all(e.total == 2 for e in reporter.events)

    @pytest.mark.asyncio
    async def test_later_prompts_see_earlier_artifacts(self, build, two_template_catalog):
        stub = StubProvider()
        orchestrator = build(two_template_catalog, stub)
        await orchestrator.run()

        first_prompt, second_prompt = stub.prompts("artifact")
        assert "Artifacts generated so far" not in first_prompt
        assert "1. A (database)" in second_prompt
        # Bootstrap architecture is in every prompt
        assert "com.example.inventoryhub" in first_prompt

    @pytest.mark.asyncio
    async def test_short_python_artifact_is_padded_with_hash_comments(self, build, two_template_catalog, spec):
        python_spec = spec.model_copy(update={"target_language": "Python (FastAPI)"})
        stub = StubProvider(artifact=lambda prompt: "def find_all():\n    return []")

        result = await build(two_template_catalog, stub, run_spec=python_spec).run()

        backend = next(a for a in result.artifacts if a.category == Category.BACKEND)
        assert backend.content.startswith("def find_all():\n    return []\n# implementation detail 1")
        assert "//" not in backend.content
        assert backend.line_count == 5
        database = next(a for a in result.artifacts if a.category == Category.DATABASE)
        assert database.content.endswith("-- implementation detail 3")

    @pytest.mark.asyncio
    async def test_run_cannot_be_started_twice(self, build, two_template_catalog):
        orchestrator = build(two_template_catalog)
        await orchestrator.run()
        with pytest.raises(RuntimeError):
            await orchestrator.run()


# ═══════════════════════════════════════════════════════
# FAILURE HANDLING
# ═══════════════════════════════════════════════════════

class TestFailures:
    @pytest.mark.asyncio
    async def test_exhausted_template_falls_back_and_run_completes(self, build, real_catalog, reporter, config):
        stub = StubProvider(artifact=failing_for("User Service Layer", RateLimitError("stub", "429")))
        orchestrator = build(real_catalog, stub)

        result = await orchestrator.run()

        assert result.state == RunState.COMPLETED
        fallbacks = [a for a in result.artifacts if a.provenance == Provenance.FALLBACK]
        assert [a.title for a in fallbacks] == ["User Service Layer"]
        assert fallbacks[0].line_count >= 85
        # One summary per template, fallback included
        assert len(orchestrator.context.summaries) == len(result.artifacts)
        assert reporter.last.message == "29 generated, 1 fallback"
        assert len([p for p in stub.prompts("artifact") if 'Generate the "User Service Layer"' in p]) == config.artifact_max_attempts

    @pytest.mark.asyncio
    async def test_auth_error_falls_back_without_retry(self, build, two_template_catalog, sleep):
        stub = StubProvider(artifact=failing_for("B", AuthError("stub", "401")))

        result = await build(two_template_catalog, stub).run()

        assert [a.provenance for a in result.artifacts] == [Provenance.GENERATED, Provenance.FALLBACK]
        assert len([p for p in stub.prompts("artifact") if 'Generate the "B"' in p]) == 1
        # No backoff sleeps at all: the only failure was not retryable
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_pacing_is_longer_after_failure_and_skipped_after_last(self, build, real_catalog):
        templates = [
            Template(name="one", description="d", category=Category.DATABASE, min_lines=3, priority=1),
            Template(name="two", description="d", category=Category.DATABASE, min_lines=3, priority=2),
            Template(name="three", description="d", category=Category.DATABASE, min_lines=3, priority=3),
        ]
        step_sleep = RecordingSleep()
        stub = StubProvider(artifact=failing_for("two", AuthError("stub", "401")))

        await build(make_catalog(real_catalog, templates), stub, step_sleep=step_sleep).run()

        assert step_sleep.delays == [3.0, pytest.approx(4.5)]

    @pytest.mark.asyncio
    async def test_documentation_failure_errors_the_run(self, build, two_template_catalog, reporter, config):
        stub = StubProvider(documentation=always_raise(RateLimitError("stub", "429")))
        orchestrator = build(two_template_catalog, stub)

        with pytest.raises(GenerationRunError) as exc_info:
            await orchestrator.run()

        assert orchestrator.state == RunState.ERROR
        assert len(exc_info.value.artifacts) == 2
        assert isinstance(exc_info.value.cause, RateLimitError)
        assert reporter.last.status == ProgressStatus.ERROR
        stub.counter.assert_exact("documentation", config.documentation_max_attempts)


# ═══════════════════════════════════════════════════════
# CANCELLATION
# ═══════════════════════════════════════════════════════

class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_before_first_artifact_call(self, build, two_template_catalog):
        token = CancellationToken("run-x")
        events = CollectingProgressReporter()

        def on_event(event):
            events.events.append(event)
            if event.status == ProgressStatus.GENERATING:
                token.cancel()

        stub = StubProvider()
        orchestrator = build(
            two_template_catalog,
            stub,
            cancel_token=token,
            run_reporter=CallbackProgressReporter(on_event),
        )

        with pytest.raises(RunCancelledError):
            await orchestrator.run()

        assert orchestrator.state == RunState.CANCELLED
        assert orchestrator.artifacts == []
        stub.counter.assert_exact("artifact", 0)
        assert events.events[-1].status == ProgressStatus.ERROR
        assert "cancelled" in events.events[-1].message

    @pytest.mark.asyncio
    async def test_cancel_between_artifacts(self, build, two_template_catalog):
        token = CancellationToken("run-y")

        async def cancelling_sleep(delay):
            token.cancel()

        stub = StubProvider()
        orchestrator = build(two_template_catalog, stub, step_sleep=cancelling_sleep, cancel_token=token)

        with pytest.raises(RunCancelledError) as exc_info:
            await orchestrator.run()

        assert exc_info.value.completed == 1
        assert [a.title for a in orchestrator.artifacts] == ["A"]
        stub.counter.assert_exact("artifact", 1)
        stub.counter.assert_exact("documentation", 0)
