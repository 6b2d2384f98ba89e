# artifact_studio/generation/prompts.py
"""
Prompt builders for per-artifact generation.
"""
from typing import Tuple

from artifact_studio.catalog import Catalog
from artifact_studio.core.types import ProjectSpecification, Template
from artifact_studio.generation.context import RunContext
from artifact_studio.generation.languages import normalize_language


def build_artifact_prompts(
    catalog: Catalog,
    spec: ProjectSpecification,
    template: Template,
    position: int,
    total: int,
    context: RunContext,
) -> Tuple[str, str]:
    """
    Returns (system_prompt, user_prompt) for one template.

    The user prompt embeds the full rendered context so the call is
    conditioned on everything produced earlier in the run.
    """
    bucket = normalize_language(spec.target_language)

    system_prompt = catalog.render(
        "artifact_system",
        language=spec.target_language,
        min_lines=template.min_lines,
    )
    user_prompt = catalog.render(
        "artifact_user",
        module_name=template.name,
        project_name=spec.name,
        language=spec.target_language,
        storage=spec.storage,
        platforms=", ".join(spec.platforms) or "unspecified",
        functional_description=spec.functional_description or "(none)",
        module_description=template.description,
        category=template.category.value,
        min_lines=template.min_lines,
        position=position,
        total=total,
        language_guidance=catalog.guidance_for_language(bucket),
        category_guidance=catalog.guidance_for_category(template.category),
        context=context.render_for_prompt(),
        generation_hint=spec.generation_hint or "none",
    )
    return system_prompt, user_prompt
