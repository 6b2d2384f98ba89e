# artifact_studio/catalog/loader.py
"""
Catalog loading and validation.

The catalog is validated once at load time. A catalog that loads is
guaranteed to be non-empty, to use known categories only, and to have
positive minimum sizes.
"""
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from artifact_studio.core.config import settings
from artifact_studio.core.constants import Category, LanguageBucket
from artifact_studio.core.exceptions import CatalogError
from artifact_studio.core.logging import log
from artifact_studio.core.types import Template

logger = logging.getLogger(__name__)

REQUIRED_PROMPTS = (
    "artifact_system",
    "artifact_user",
    "bootstrap_system",
    "bootstrap_user",
    "documentation_system",
    "documentation_user",
)


class _KeepMissing(dict):
    """format_map helper: unknown placeholders are left as-is."""
    def __missing__(self, key: str) -> str:
        logger.warning("Prompt placeholder {%s} has no value", key)
        return "{" + key + "}"


@dataclass(frozen=True)
class Catalog:
    templates: List[Template]
    prompts: Dict[str, str]
    documentation_sections: List[str] = field(default_factory=list)
    category_guidance: Dict[str, str] = field(default_factory=dict)
    language_guidance: Dict[str, str] = field(default_factory=dict)

    def render(self, prompt_name: str, **fields: Any) -> str:
        """Fill a prompt template. Missing fields stay as literal placeholders."""
        return self.prompts[prompt_name].format_map(_KeepMissing(fields)).strip()

    def guidance_for_category(self, category: Category) -> str:
        return self.category_guidance.get(category.value, "")

    def guidance_for_language(self, bucket: LanguageBucket) -> str:
        return self.language_guidance.get(
            bucket.value, self.language_guidance.get(LanguageBucket.GENERIC.value, "")
        )


def _parse_templates(raw_templates: Any) -> List[Template]:
    if not isinstance(raw_templates, Mapping) or not raw_templates:
        raise CatalogError("Catalog has no templates section")

    templates: List[Template] = []
    for category_name, entries in raw_templates.items():
        try:
            category = Category(category_name)
        except ValueError:
            raise CatalogError(
                f"Unknown template category: {category_name}",
                {"known": [c.value for c in Category]},
            )

        for entry in entries or []:
            try:
                templates.append(Template(category=category, **entry))
            except (TypeError, ValidationError) as e:
                raise CatalogError(
                    f"Invalid template in category '{category_name}': {e}",
                    {"entry": entry},
                )

    if not templates:
        raise CatalogError("Catalog defines no templates")
    return templates


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """
    Load and validate the catalog resource.

    Raises:
        CatalogError: If the file is missing, unparseable or fails validation
    """
    path = Path(path or settings.generation.catalog_path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise CatalogError(f"Catalog not found: {path}", {"path": str(path)})
    except yaml.YAMLError as e:
        raise CatalogError(f"Catalog is not valid YAML: {e}", {"path": str(path)})

    if not isinstance(raw, Mapping):
        raise CatalogError("Catalog root must be a mapping", {"path": str(path)})

    templates = _parse_templates(raw.get("templates"))

    prompts = raw.get("prompts") or {}
    missing = [name for name in REQUIRED_PROMPTS if not prompts.get(name)]
    if missing:
        raise CatalogError(f"Catalog is missing prompts: {missing}", {"path": str(path)})

    catalog = Catalog(
        templates=templates,
        prompts=dict(prompts),
        documentation_sections=list(raw.get("documentation_sections") or []),
        category_guidance=dict(raw.get("category_guidance") or {}),
        language_guidance=dict(raw.get("language_guidance") or {}),
    )
    log("CATALOG", f"Loaded {len(templates)} templates from {path.name}")
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """The process-wide catalog, loaded once."""
    return load_catalog()


def all_templates() -> List[Template]:
    """All templates in declaration order."""
    return list(get_catalog().templates)
