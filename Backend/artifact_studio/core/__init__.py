# artifact_studio/core/__init__.py
"""
Core module - configuration, constants, shared types and exceptions.
"""
from .config import settings
from .constants import (
    Category,
    CATEGORY_RANK,
    Provenance,
    ModelKind,
    ProgressStatus,
    RunState,
    WSMessageType,
    LanguageBucket,
)
from .exceptions import (
    ArtifactStudioError,
    CatalogError,
    ErrorCategory,
    GenerationError,
    AuthError,
    BadRequestError,
    RateLimitError,
    ServerError,
    GenerationTimeoutError,
    NetworkUnreachableError,
    MalformedResponseError,
    GenerationRunError,
    RunCancelledError,
)
from .result import Ok, Err, Result
from .types import (
    Template,
    ProjectArchitecture,
    SharedModel,
    ApiEndpoint,
    StorageTable,
    ArtifactSummary,
    Artifact,
    ProgressEvent,
    ProjectSpecification,
    GenerationRunResult,
)

__all__ = [
    # Config
    "settings",
    # Constants
    "Category",
    "CATEGORY_RANK",
    "Provenance",
    "ModelKind",
    "ProgressStatus",
    "RunState",
    "WSMessageType",
    "LanguageBucket",
    # Exceptions
    "ArtifactStudioError",
    "CatalogError",
    "ErrorCategory",
    "GenerationError",
    "AuthError",
    "BadRequestError",
    "RateLimitError",
    "ServerError",
    "GenerationTimeoutError",
    "NetworkUnreachableError",
    "MalformedResponseError",
    "GenerationRunError",
    "RunCancelledError",
    # Result
    "Ok",
    "Err",
    "Result",
    # Types
    "Template",
    "ProjectArchitecture",
    "SharedModel",
    "ApiEndpoint",
    "StorageTable",
    "ArtifactSummary",
    "Artifact",
    "ProgressEvent",
    "ProjectSpecification",
    "GenerationRunResult",
]
