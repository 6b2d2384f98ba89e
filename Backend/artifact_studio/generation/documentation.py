# artifact_studio/generation/documentation.py
"""
Documentation synthesizer.

Turns the final artifact manifest and the project specification into one
prose document. This stage has no fallback text: a GenerationError here
propagates to the orchestrator and ends the run in the error state.
"""
from typing import List, Optional, Sequence

from artifact_studio.catalog import Catalog
from artifact_studio.core.config import GenerationSettings
from artifact_studio.core.logging import log
from artifact_studio.core.types import Artifact, ProjectSpecification
from artifact_studio.llm.adapter import GenerationClient
from artifact_studio.llm.sanitizer import sanitize_document
from artifact_studio.orchestration.cancellation import CancellationToken


def build_manifest(artifacts: Sequence[Artifact]) -> str:
    """One line per artifact, in final order: index, title, line count, description."""
    return "\n".join(
        f"{index}. {artifact.title} ({artifact.line_count} lines) - {artifact.description}"
        for index, artifact in enumerate(artifacts, 1)
    )


def _render_sections(sections: List[str]) -> str:
    return "\n".join(f"{index}. {title}" for index, title in enumerate(sections, 1))


class DocumentationSynthesizer:
    def __init__(self, client: GenerationClient, catalog: Catalog, config: GenerationSettings) -> None:
        self.client = client
        self.catalog = catalog
        self.config = config

    def build_prompts(self, spec: ProjectSpecification, artifacts: Sequence[Artifact]) -> tuple:
        system_prompt = self.catalog.render("documentation_system")
        user_prompt = self.catalog.render(
            "documentation_user",
            project_name=spec.name,
            version=spec.version,
            developer=spec.developer or "unspecified",
            company=spec.company or "unspecified",
            language=spec.target_language,
            storage=spec.storage,
            platforms=", ".join(spec.platforms) or "unspecified",
            completion_date=spec.completion_date or "unspecified",
            software_type=spec.software_type or "unspecified",
            industry=spec.industry or "unspecified",
            functional_description=spec.functional_description or "(none)",
            manifest=build_manifest(artifacts),
            sections=_render_sections(self.catalog.documentation_sections),
        )
        return system_prompt, user_prompt

    async def synthesize(
        self,
        spec: ProjectSpecification,
        artifacts: Sequence[Artifact],
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Raises:
            GenerationError: When the client is exhausted or fails permanently
            RunCancelledError: When cancelled before an attempt
        """
        system_prompt, user_prompt = self.build_prompts(spec, artifacts)
        log("DOCS", f"📝 Writing documentation for {len(artifacts)} artifacts")

        document = await self.client.generate(
            system_prompt,
            user_prompt,
            max_attempts=self.config.documentation_max_attempts,
            temperature=self.config.documentation_temperature,
            max_tokens=self.config.documentation_max_tokens,
            cancel_token=cancel_token,
            label="documentation",
            postprocess=sanitize_document,
        )
        log("DOCS", f"✅ Documentation ready ({len(document)} chars)")
        return document
