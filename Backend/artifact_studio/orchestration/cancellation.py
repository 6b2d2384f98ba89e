# artifact_studio/orchestration/cancellation.py
"""
Cooperative cancellation for long-running generation runs.

A run checks its token between artifacts and before every network attempt;
an in-flight request is never interrupted.
"""
import asyncio

from artifact_studio.core.exceptions import RunCancelledError


class CancellationToken:
    def __init__(self, run_id: str = "") -> None:
        self.run_id = run_id
        self._event = asyncio.Event()
        self.completed = 0

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelledError(self.run_id, self.completed)
