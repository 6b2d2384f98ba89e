# artifact_studio/api/__init__.py
"""
API module - All route handlers.
"""
from . import health, generation

__all__ = [
    "health",
    "generation",
]
