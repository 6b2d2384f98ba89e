# artifact_studio/__init__.py
"""
Artifact Studio - contextual artifact generation backend.
"""
__version__ = "1.0.0"
