import sys
import os
from datetime import datetime
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# LOG FILTERING
# ═══════════════════════════════════════════════════════════════════════════════
# Only these scopes are shown at INFO level
# Everything else is gated behind DEBUG

INFO_SCOPES = {
    "ORCHESTRATOR",  # Run lifecycle
    "BOOTSTRAP",     # Architecture seeding
    "LLM",           # Provider boundary
    "RETRY",         # Backoff decisions
    "FALLBACK",      # Deterministic substitutes
    "DOCS",          # Documentation stage
    "API",           # HTTP surface
}

# DEBUG-only scopes (hidden by default)
DEBUG_SCOPES = {
    "CONTEXT",
    "SANITIZER",
    "SUMMARY",
    "CATALOG",
    "PROGRESS",
    "MONITORING",
}

# Check if DEBUG mode is enabled
DEBUG_MODE = os.getenv("ARTIFACT_STUDIO_DEBUG", "false").lower() == "true"


def log(scope: str, message: str, data: Any = None, run_id: Optional[str] = None) -> None:
    """
    Unified logging function for Artifact Studio.

    Only INFO_SCOPES are shown by default.
    Set ARTIFACT_STUDIO_DEBUG=true to see all scopes.
    """
    if not DEBUG_MODE and scope not in INFO_SCOPES:
        return

    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"

    if run_id:
        prefix += f" [{run_id[:8]}]"

    print(f"{prefix} {message}")

    if data:
        print(f"  Data: {data}")

    sys.stdout.flush()


def log_section(scope: str, title: str, run_id: Optional[str] = None) -> None:
    """
    Log a section header with visual separator.
    """
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"\n{'='*60}")
    if run_id:
        print(f"[{timestamp}] [{scope}] [{run_id[:8]}] {title}")
    else:
        print(f"[{timestamp}] [{scope}] {title}")
    print(f"{'='*60}")
    sys.stdout.flush()


def log_run_result(scope: str, generated: int, fallback: int, run_id: Optional[str] = None) -> None:
    """
    Log the provenance split of a finished run.
    """
    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"
    if run_id:
        prefix += f" [{run_id[:8]}]"

    if fallback == 0:
        print(f"\n{prefix} ✅ ALL GENERATED - {generated} artifacts")
    else:
        print(f"\n{prefix} ⚠️ DEGRADED - {generated} generated, {fallback} fallback")

    print(f"{'='*60}\n")
    sys.stdout.flush()
