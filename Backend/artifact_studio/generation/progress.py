# artifact_studio/generation/progress.py
"""
Progress sinks.

The orchestrator awaits every emit() in order; a sink never retries and
never buffers on the orchestrator's behalf.
"""
import inspect
from typing import Awaitable, Callable, List, Optional, Protocol, Union

from artifact_studio.core.constants import WSMessageType
from artifact_studio.core.logging import log
from artifact_studio.core.types import ProgressEvent
from artifact_studio.lib.websocket import ConnectionManager


class ProgressReporter(Protocol):
    async def emit(self, event: ProgressEvent) -> None:
        ...


class CallbackProgressReporter:
    """Forward events to a plain or async callable."""

    def __init__(self, callback: Callable[[ProgressEvent], Union[None, Awaitable[None]]]) -> None:
        self.callback = callback

    async def emit(self, event: ProgressEvent) -> None:
        result = self.callback(event)
        if inspect.isawaitable(result):
            await result


class CollectingProgressReporter:
    """Keep every event in memory. Used by the run registry and in tests."""

    def __init__(self, forward: Optional[ProgressReporter] = None) -> None:
        self.events: List[ProgressEvent] = []
        self.forward = forward

    @property
    def last(self) -> Optional[ProgressEvent]:
        return self.events[-1] if self.events else None

    async def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)
        if self.forward is not None:
            await self.forward.emit(event)


class WebSocketProgressReporter:
    """Broadcast events to every socket subscribed to a run."""

    def __init__(self, manager: ConnectionManager, run_id: str) -> None:
        self.manager = manager
        self.run_id = run_id

    async def emit(self, event: ProgressEvent) -> None:
        log("PROGRESS", f"{event.current}/{event.total} [{event.status.value}] {event.message}", run_id=self.run_id)
        await self.manager.send_to_run(self.run_id, {
            "type": WSMessageType.PROGRESS.value,
            "runId": self.run_id,
            "data": event.model_dump(mode="json"),
        })
