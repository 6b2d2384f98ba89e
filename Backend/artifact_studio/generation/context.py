# artifact_studio/generation/context.py
"""
Run-scoped context accumulator.

One RunContext is created per generation run and owned by the orchestrator
executing that run. It only grows: every step appends, nothing is removed or
deduplicated, and the full state is rendered into every later prompt.
"""
from typing import Iterable, List, Optional

from artifact_studio.core.logging import log
from artifact_studio.core.types import (
    ApiEndpoint,
    ArtifactSummary,
    ProjectArchitecture,
    SharedModel,
    StorageTable,
)

# Keep rendered lists bounded so prompts stay within model limits
MAX_RENDERED_ITEMS = 5


class RunContext:
    """Accumulated architecture, models, endpoints, tables and summaries for one run."""

    def __init__(self, run_id: str = "") -> None:
        self.run_id = run_id
        self.architecture: Optional[ProjectArchitecture] = None
        self.models: List[SharedModel] = []
        self.endpoints: List[ApiEndpoint] = []
        self.tables: List[StorageTable] = []
        self.summaries: List[ArtifactSummary] = []

    # ------------------------------------------------------------------
    # Mutations (append-only)
    # ------------------------------------------------------------------

    def set_architecture(self, architecture: ProjectArchitecture) -> None:
        self.architecture = architecture
        log("CONTEXT", f"Architecture set: {architecture.package_name}", run_id=self.run_id)

    def append_models(self, models: Iterable[SharedModel]) -> None:
        self.models.extend(models)

    def append_endpoints(self, endpoints: Iterable[ApiEndpoint]) -> None:
        self.endpoints.extend(endpoints)

    def append_tables(self, tables: Iterable[StorageTable]) -> None:
        self.tables.extend(tables)

    def append_summary(self, summary: ArtifactSummary) -> None:
        self.summaries.append(summary)
        log("CONTEXT", f"Summary #{len(self.summaries)}: {summary.title}", run_id=self.run_id)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_for_prompt(self) -> str:
        """Serialize the whole state into a readable block for the next prompt."""
        sections: List[str] = []

        if self.architecture:
            arch = self.architecture
            sections.append(
                "## Project structure\n"
                f"- Package: {arch.package_name}\n"
                f"- Main identifier: {arch.main_identifier}\n"
                f"- Storage schema: {arch.storage_schema_name}\n"
                f"- API prefix: {arch.api_prefix}"
            )

        if self.models:
            lines = [
                f"- {m.name} ({m.kind.value}): {', '.join(m.fields[:MAX_RENDERED_ITEMS * 2])}"
                for m in self.models
            ]
            sections.append("## Shared data models\n" + "\n".join(lines))

        if self.endpoints:
            lines = [f"- {e.method} {e.path}: {e.description}".rstrip(": ") for e in self.endpoints]
            sections.append("## API endpoints\n" + "\n".join(lines))

        if self.tables:
            lines = []
            for t in self.tables:
                line = f"- {t.name}: {', '.join(t.fields)}"
                if t.relationships:
                    line += f" [relations: {'; '.join(t.relationships)}]"
                lines.append(line)
            sections.append("## Storage tables\n" + "\n".join(lines))

        if self.summaries:
            lines = []
            for index, s in enumerate(self.summaries, 1):
                parts = [f"{index}. {s.title} ({s.category.value})"]
                if s.main_identifiers:
                    parts.append(f"identifiers: {', '.join(s.main_identifiers[:MAX_RENDERED_ITEMS])}")
                if s.main_operations:
                    parts.append(f"operations: {', '.join(s.main_operations[:MAX_RENDERED_ITEMS])}")
                if s.dependencies:
                    parts.append(f"depends on: {', '.join(s.dependencies[:MAX_RENDERED_ITEMS])}")
                if s.exports:
                    parts.append(f"exports: {', '.join(s.exports[:MAX_RENDERED_ITEMS])}")
                lines.append(" | ".join(parts))
            sections.append("## Artifacts generated so far\n" + "\n".join(lines))

        if not sections:
            return "(no architecture defined yet)"
        return "\n\n".join(sections)

    def render_summary(self) -> str:
        """Short human-readable digest of the run's final architecture."""
        if not self.architecture:
            return "No architecture was established."

        arch = self.architecture
        model_names = ", ".join(dict.fromkeys(m.name for m in self.models)) or "none"
        table_names = ", ".join(dict.fromkeys(t.name for t in self.tables)) or "none"
        return "\n".join([
            f"Package: {arch.package_name}",
            f"Main identifier: {arch.main_identifier}",
            f"Storage schema: {arch.storage_schema_name}",
            f"API prefix: {arch.api_prefix}",
            f"Shared models ({len(self.models)}): {model_names}",
            f"API endpoints: {len(self.endpoints)}",
            f"Storage tables ({len(self.tables)}): {table_names}",
            f"Artifacts summarized: {len(self.summaries)}",
        ])
