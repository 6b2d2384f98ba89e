# artifact_studio/generation/__init__.py
"""
Generation pipeline - context, bootstrap, fallback, orchestration, documentation.
"""
from .context import RunContext
from .bootstrap import ArchitectureBootstrapper, BootstrapOutcome, default_architecture, extract_json_block
from .fallback import synthesize, pad_to_min_lines
from .summary import extract_summary, extract_structures
from .documentation import DocumentationSynthesizer, build_manifest
from .progress import (
    ProgressReporter,
    CallbackProgressReporter,
    CollectingProgressReporter,
    WebSocketProgressReporter,
)
from .orchestrator import GenerationOrchestrator, order_templates, plan_templates, compute_total

__all__ = [
    "RunContext",
    "ArchitectureBootstrapper",
    "BootstrapOutcome",
    "default_architecture",
    "extract_json_block",
    "synthesize",
    "pad_to_min_lines",
    "extract_summary",
    "extract_structures",
    "DocumentationSynthesizer",
    "build_manifest",
    "ProgressReporter",
    "CallbackProgressReporter",
    "CollectingProgressReporter",
    "WebSocketProgressReporter",
    "GenerationOrchestrator",
    "order_templates",
    "plan_templates",
    "compute_total",
]
