# artifact_studio/orchestration/__init__.py
"""
Execution plumbing shared by every generation stage: bounded retries with
backoff and cooperative cancellation.
"""
from .cancellation import CancellationToken
from .retry_policy import RetryPolicy

__all__ = ["CancellationToken", "RetryPolicy"]
