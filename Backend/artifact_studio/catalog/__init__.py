# artifact_studio/catalog/__init__.py
"""
Template catalog - static, ordered set of artifact templates plus the prompt
templates used to drive generation. Loaded once from catalog.yaml.
"""
from .loader import (
    Catalog,
    load_catalog,
    get_catalog,
    all_templates,
    REQUIRED_PROMPTS,
)

__all__ = [
    "Catalog",
    "load_catalog",
    "get_catalog",
    "all_templates",
    "REQUIRED_PROMPTS",
]
