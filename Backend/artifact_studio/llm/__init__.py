# artifact_studio/llm/__init__.py
"""
LLM module - Unified interface for the text-generation providers.
"""
from .adapter import GenerationClient, ProviderCall
from .sanitizer import sanitize_response, sanitize_document

__all__ = ["GenerationClient", "ProviderCall", "sanitize_response", "sanitize_document"]
