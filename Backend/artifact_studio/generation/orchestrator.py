# artifact_studio/generation/orchestrator.py
"""
Generation Orchestrator - drives one artifact-generation run.

IDLE -> PREPARING -> BOOTSTRAPPING -> GENERATING -> DOCUMENTING -> COMPLETED | ERROR
Any state before COMPLETED may end in CANCELLED.

Artifacts are produced strictly one at a time: every prompt embeds the
RunContext left behind by all earlier steps. A failed artifact degrades to a
deterministic fallback and never stops the run; only the documentation stage
can end a run in ERROR.
"""
import asyncio
import uuid
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from artifact_studio.catalog import Catalog, get_catalog
from artifact_studio.core.config import GenerationSettings, settings
from artifact_studio.core.constants import ProgressStatus, Provenance, RunState
from artifact_studio.core.exceptions import (
    GenerationError,
    GenerationRunError,
    RunCancelledError,
)
from artifact_studio.core.logging import log, log_run_result, log_section
from artifact_studio.core.types import (
    Artifact,
    ArtifactSummary,
    GenerationRunResult,
    ProgressEvent,
    ProjectSpecification,
    Template,
)
from artifact_studio.generation.bootstrap import ArchitectureBootstrapper
from artifact_studio.generation.context import RunContext
from artifact_studio.generation.documentation import DocumentationSynthesizer
from artifact_studio.generation.fallback import comment_prefix, count_lines, pad_to_min_lines, synthesize
from artifact_studio.generation.progress import CollectingProgressReporter, ProgressReporter
from artifact_studio.generation.prompts import build_artifact_prompts
from artifact_studio.generation.summary import extract_structures, extract_summary
from artifact_studio.lib.monitoring import record_artifact, record_run
from artifact_studio.llm.adapter import GenerationClient
from artifact_studio.orchestration.cancellation import CancellationToken

Sleep = Callable[[float], Awaitable[None]]


# ═══════════════════════════════════════════════════════════════════════════════
# ORDERING
# ═══════════════════════════════════════════════════════════════════════════════

def order_templates(templates: Sequence[Template]) -> List[Template]:
    """Stable sort by (category rank, priority)."""
    return sorted(templates, key=lambda t: t.sort_key)


def compute_total(configured_minimum: int, template_count: int) -> int:
    return max(configured_minimum, template_count)


def plan_templates(templates: Sequence[Template], total: int) -> List[Template]:
    """
    Exactly `total` templates in generation order.

    When the minimum exceeds the catalog, the catalog is cycled into
    "<name> (Part n)" continuations. A continuation keeps its source's
    category and priority and follows its source directly, ahead of other
    templates with the same (category, priority).
    """
    ordered = order_templates(templates)
    if not ordered:
        return []

    # (template, position of its source, part number)
    planned = [(template, position, 1) for position, template in enumerate(ordered)]
    index = 0
    while len(planned) < total:
        position = index % len(ordered)
        source = ordered[position]
        part = index // len(ordered) + 2
        planned.append((source.model_copy(update={"name": f"{source.name} (Part {part})"}), position, part))
        index += 1

    planned.sort(key=lambda entry: (entry[0].sort_key, entry[1], entry[2]))
    return [template for template, _, _ in planned]


def completion_message(generated: int, fallback: int) -> str:
    if fallback == 0:
        return f"All {generated} artifacts generated"
    return f"{generated} generated, {fallback} fallback"


# ═══════════════════════════════════════════════════════════════════════════════
# ORCHESTRATOR
# ═══════════════════════════════════════════════════════════════════════════════

class GenerationOrchestrator:
    """
    One instance per run. Owns the run's RunContext exclusively.

    Usage:
        orchestrator = GenerationOrchestrator(spec, reporter=reporter)
        result = await orchestrator.run()
    """

    def __init__(
        self,
        spec: ProjectSpecification,
        client: Optional[GenerationClient] = None,
        catalog: Optional[Catalog] = None,
        reporter: Optional[ProgressReporter] = None,
        config: Optional[GenerationSettings] = None,
        sleep: Optional[Sleep] = None,
        cancel_token: Optional[CancellationToken] = None,
        run_id: Optional[str] = None,
    ) -> None:
        self.spec = spec
        self.run_id = run_id or uuid.uuid4().hex
        self.client = client or GenerationClient()
        self.catalog = catalog or get_catalog()
        self.reporter = reporter or CollectingProgressReporter()
        self.config = config or settings.generation
        self._sleep = sleep or asyncio.sleep
        self.cancel_token = cancel_token or CancellationToken(self.run_id)

        self.state = RunState.IDLE
        self.context: Optional[RunContext] = None
        self.artifacts: List[Artifact] = []
        self.total = 0

        self.bootstrapper = ArchitectureBootstrapper(self.client, self.catalog, self.config)
        self.documenter = DocumentationSynthesizer(self.client, self.catalog, self.config)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(self, state: RunState) -> None:
        log("ORCHESTRATOR", f"{self.state.value} → {state.value}", run_id=self.run_id)
        self.state = state

    async def _emit(self, current: int, label: str, status: ProgressStatus, message: str) -> None:
        await self.reporter.emit(ProgressEvent(
            current=current,
            total=self.total,
            label=label,
            status=status,
            message=message,
        ))

    @property
    def generated_count(self) -> int:
        return sum(1 for a in self.artifacts if a.provenance == Provenance.GENERATED)

    @property
    def fallback_count(self) -> int:
        return sum(1 for a in self.artifacts if a.provenance == Provenance.FALLBACK)

    def _wrap_generated(self, template: Template, artifact_id: int, text: str) -> Tuple[Artifact, ArtifactSummary]:
        content = pad_to_min_lines(
            text, template.min_lines, comment_prefix(template.category, self.spec.target_language)
        )
        artifact = Artifact(
            id=artifact_id,
            title=template.name,
            content=content,
            line_count=count_lines(content),
            category=template.category,
            description=template.description,
            provenance=Provenance.GENERATED,
        )

        structures = extract_structures(content)
        self.context.append_models(structures.models)
        self.context.append_endpoints(structures.endpoints)
        self.context.append_tables(structures.tables)

        return artifact, extract_summary(template.name, template.category, content)

    def _fallback(self, template: Template, artifact_id: int, error: GenerationError) -> Tuple[Artifact, ArtifactSummary]:
        log("FALLBACK", f"⚠️ {template.name}: {error.category.value} - using fallback", run_id=self.run_id)
        return synthesize(template, artifact_id)

    async def _pace(self, failed: bool) -> None:
        delay = self.config.step_delay
        if failed:
            delay *= self.config.failure_delay_multiplier
        if delay > 0:
            await self._sleep(delay)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _generate_all(self, templates: List[Template]) -> None:
        for index, template in enumerate(templates, 1):
            self.cancel_token.raise_if_cancelled()
            await self._emit(
                index,
                template.name,
                ProgressStatus.GENERATING,
                f"Generating {template.name} ({index}/{self.total})",
            )

            system_prompt, user_prompt = build_artifact_prompts(
                self.catalog, self.spec, template, index, self.total, self.context
            )
            result = await self.client.try_generate(
                system_prompt,
                user_prompt,
                max_attempts=self.config.artifact_max_attempts,
                temperature=self.config.artifact_temperature,
                max_tokens=self.config.artifact_max_tokens,
                cancel_token=self.cancel_token,
                label=f"artifact {index}/{self.total} '{template.name}'",
            )

            artifact, summary = result.map(
                lambda text: self._wrap_generated(template, index, text)
            ).unwrap_or_else(
                lambda error: self._fallback(template, index, error)
            )
            self.context.append_summary(summary)
            self.artifacts.append(artifact)
            self.cancel_token.completed = len(self.artifacts)
            record_artifact(artifact.provenance)

            if index < len(templates):
                await self._pace(failed=not result.is_ok())

    async def run(self) -> GenerationRunResult:
        """
        Execute the run.

        Raises:
            GenerationRunError: Documentation stage failed (state ERROR)
            RunCancelledError: Cancelled cooperatively (state CANCELLED)
        """
        if self.state != RunState.IDLE:
            raise RuntimeError(f"Run {self.run_id} already started (state={self.state.value})")

        log_section("ORCHESTRATOR", f"Generation run: {self.spec.name} ({self.spec.target_language})", run_id=self.run_id)

        try:
            # Preparing
            self._transition(RunState.PREPARING)
            self.context = RunContext(self.run_id)
            self.artifacts = []
            self.total = compute_total(self.config.configured_minimum, len(self.catalog.templates))
            templates = plan_templates(self.catalog.templates, self.total)
            await self._emit(0, "Preparing", ProgressStatus.PREPARING, f"Preparing {self.total} artifacts")

            # Bootstrapping
            self.cancel_token.raise_if_cancelled()
            self._transition(RunState.BOOTSTRAPPING)
            outcome = await self.bootstrapper.bootstrap(self.spec, self.context, self.cancel_token)
            await self._emit(
                0,
                "Architecture",
                ProgressStatus.PREPARING,
                "Architecture ready" if not outcome.used_default
                else f"Architecture ready (default {outcome.bucket.value} layout)",
            )

            # Generating
            self._transition(RunState.GENERATING)
            await self._generate_all(templates)

            # Documenting
            self.cancel_token.raise_if_cancelled()
            self._transition(RunState.DOCUMENTING)
            try:
                documentation = await self.documenter.synthesize(self.spec, self.artifacts, self.cancel_token)
            except GenerationError as e:
                self._transition(RunState.ERROR)
                await self._emit(
                    self.total,
                    "Documentation",
                    ProgressStatus.ERROR,
                    f"Documentation failed ({e.category.value}): {completion_message(self.generated_count, self.fallback_count)}",
                )
                record_run(RunState.ERROR)
                raise GenerationRunError(
                    f"Documentation stage failed: {e.message}",
                    artifacts=self.artifacts,
                    cause=e,
                ) from e

        except RunCancelledError:
            self._transition(RunState.CANCELLED)
            await self._emit(
                len(self.artifacts),
                "Cancelled",
                ProgressStatus.ERROR,
                f"Run cancelled after {len(self.artifacts)} of {self.total} artifacts",
            )
            record_run(RunState.CANCELLED)
            raise

        # Completed
        self._transition(RunState.COMPLETED)
        message = completion_message(self.generated_count, self.fallback_count)
        await self._emit(self.total, "Completed", ProgressStatus.COMPLETED, message)
        record_run(RunState.COMPLETED)
        log_run_result("ORCHESTRATOR", self.generated_count, self.fallback_count, run_id=self.run_id)

        return GenerationRunResult(
            state=self.state,
            artifacts=list(self.artifacts),
            documentation=documentation,
            architecture_summary=self.context.render_summary(),
            generated_count=self.generated_count,
            fallback_count=self.fallback_count,
        )
