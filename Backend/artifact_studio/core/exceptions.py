# artifact_studio/core/exceptions.py
"""
Custom exceptions for the application.
"""
from enum import Enum
from typing import Optional, Dict, Any, List


class ArtifactStudioError(Exception):
    """Base exception for all Artifact Studio errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CatalogError(ArtifactStudioError):
    """Template catalog could not be loaded or failed validation."""
    pass


class ErrorCategory(str, Enum):
    """Failure categories of the external generation service."""
    AUTH = "auth"
    BAD_REQUEST = "bad_request"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    MALFORMED_RESPONSE = "malformed_response"


RETRYABLE_CATEGORIES = frozenset({
    ErrorCategory.RATE_LIMIT,
    ErrorCategory.SERVER_ERROR,
    ErrorCategory.TIMEOUT,
    ErrorCategory.NETWORK_UNREACHABLE,
})


class GenerationError(ArtifactStudioError):
    """Generation service error."""
    category: ErrorCategory = ErrorCategory.SERVER_ERROR

    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        super().__init__(
            f"Generation error ({provider}, {self.category.value}): {message}",
            {"provider": provider, "category": self.category.value, "status": status}
        )
        self.provider = provider
        self.status = status

    @property
    def retryable(self) -> bool:
        return self.category in RETRYABLE_CATEGORIES


class AuthError(GenerationError):
    """Credentials rejected - configuration problem, never retried."""
    category = ErrorCategory.AUTH


class BadRequestError(GenerationError):
    """Request rejected as invalid - caller problem, never retried."""
    category = ErrorCategory.BAD_REQUEST


class RateLimitError(GenerationError):
    """Provider throttled the request."""
    category = ErrorCategory.RATE_LIMIT


class ServerError(GenerationError):
    """Provider-side failure (5xx)."""
    category = ErrorCategory.SERVER_ERROR


class GenerationTimeoutError(GenerationError):
    """Request exceeded its timeout."""
    category = ErrorCategory.TIMEOUT


class NetworkUnreachableError(GenerationError):
    """Provider could not be reached."""
    category = ErrorCategory.NETWORK_UNREACHABLE


class MalformedResponseError(GenerationError):
    """Response arrived but could not be interpreted."""
    category = ErrorCategory.MALFORMED_RESPONSE


class GenerationRunError(ArtifactStudioError):
    """A run terminated in the error state (documentation stage failed)."""
    def __init__(self, message: str, artifacts: Optional[List[Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, {"artifact_count": len(artifacts or [])})
        self.artifacts = list(artifacts or [])
        self.cause = cause


class RunCancelledError(ArtifactStudioError):
    """A run was cancelled cooperatively."""
    def __init__(self, run_id: str, completed: int = 0):
        super().__init__(
            f"Run {run_id} cancelled after {completed} artifacts",
            {"run_id": run_id, "completed": completed}
        )
        self.run_id = run_id
        self.completed = completed
