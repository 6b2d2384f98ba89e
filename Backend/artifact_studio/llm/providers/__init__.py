# artifact_studio/llm/providers/__init__.py
"""
LLM Providers - Individual provider implementations.
"""
from . import deepseek, openai, gemini

PROVIDERS = {
    "deepseek": deepseek.call,
    "openai": openai.call,
    "gemini": gemini.call,
}

__all__ = ["deepseek", "openai", "gemini", "PROVIDERS"]
