# artifact_studio/orchestration/state.py
"""
Run state management.

Runs are held in memory only: results belong to the caller, nothing is
persisted. Each run gets its own orchestrator, RunContext and cancellation
token; the registry never shares them between runs.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from artifact_studio.catalog import Catalog
from artifact_studio.core.config import GenerationSettings, settings
from artifact_studio.core.constants import RunState, WSMessageType
from artifact_studio.core.exceptions import GenerationRunError, RunCancelledError
from artifact_studio.core.logging import log
from artifact_studio.core.types import GenerationRunResult, ProjectSpecification
from artifact_studio.generation.orchestrator import GenerationOrchestrator
from artifact_studio.generation.progress import CollectingProgressReporter, WebSocketProgressReporter
from artifact_studio.lib.websocket import ConnectionManager
from artifact_studio.llm.adapter import GenerationClient
from artifact_studio.orchestration.cancellation import CancellationToken

ClientFactory = Callable[[Optional[str], Optional[str]], GenerationClient]


def _default_client_factory(provider: Optional[str], model: Optional[str]) -> GenerationClient:
    return GenerationClient(provider=provider, model=model)


@dataclass
class RunRecord:
    run_id: str
    spec: ProjectSpecification
    orchestrator: GenerationOrchestrator
    reporter: CollectingProgressReporter
    cancel_token: CancellationToken
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    task: Optional[asyncio.Task] = None
    result: Optional[GenerationRunResult] = None
    error: Optional[str] = None
    finished_at: Optional[str] = None

    @property
    def state(self) -> RunState:
        return self.orchestrator.state

    def snapshot(self) -> Dict[str, Any]:
        last = self.reporter.last
        return {
            "run_id": self.run_id,
            "project": self.spec.name,
            "state": self.state.value,
            "created_at": self.created_at,
            "finished_at": self.finished_at,
            "progress": last.model_dump(mode="json") if last else None,
            "artifacts": [a.model_dump(mode="json") for a in self.orchestrator.artifacts],
            "result": self.result.model_dump(mode="json") if self.result else None,
            "error": self.error,
        }


class RunRegistry:
    """In-process registry of generation runs."""

    def __init__(
        self,
        manager: ConnectionManager,
        client_factory: Optional[ClientFactory] = None,
        catalog: Optional[Catalog] = None,
        config: Optional[GenerationSettings] = None,
        sleep: Optional[Callable] = None,
        max_finished_runs: Optional[int] = None,
    ) -> None:
        self.manager = manager
        self.client_factory = client_factory or _default_client_factory
        self.catalog = catalog
        self.config = config
        self.sleep = sleep
        self.max_finished_runs = (
            max_finished_runs if max_finished_runs is not None
            else (config or settings.generation).max_finished_runs
        )
        self._runs: Dict[str, RunRecord] = {}
        self._lock = asyncio.Lock()

    def get(self, run_id: str) -> Optional[RunRecord]:
        return self._runs.get(run_id)

    def __len__(self) -> int:
        return len(self._runs)

    async def start(
        self,
        spec: ProjectSpecification,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> RunRecord:
        """
        Create a run and schedule it on the event loop.

        Raises:
            ValueError: Unknown provider
        """
        run_id = uuid.uuid4().hex
        client = self.client_factory(provider, model)
        token = CancellationToken(run_id)
        reporter = CollectingProgressReporter(forward=WebSocketProgressReporter(self.manager, run_id))
        orchestrator = GenerationOrchestrator(
            spec,
            client=client,
            catalog=self.catalog,
            reporter=reporter,
            config=self.config,
            sleep=self.sleep,
            cancel_token=token,
            run_id=run_id,
        )
        record = RunRecord(
            run_id=run_id,
            spec=spec,
            orchestrator=orchestrator,
            reporter=reporter,
            cancel_token=token,
        )

        async with self._lock:
            self._runs[run_id] = record
        record.task = asyncio.create_task(self._execute(record))
        log("API", f"🚀 Run {run_id[:8]} scheduled for '{spec.name}'")
        return record

    async def _execute(self, record: RunRecord) -> None:
        try:
            record.result = await record.orchestrator.run()
        except GenerationRunError as e:
            record.error = e.message
        except RunCancelledError as e:
            record.error = e.message
        except Exception as e:
            # Background task: nothing above us to report to
            log("ORCHESTRATOR", f"ERROR run {record.run_id[:8]}: {e}")
            record.error = str(e)

        record.finished_at = datetime.now(timezone.utc).isoformat()
        await self._evict_finished()

        await self.manager.send_to_run(record.run_id, {
            "type": WSMessageType.RUN_FINISHED.value,
            "runId": record.run_id,
            "state": record.state.value,
            "error": record.error,
        })

    def cancel(self, run_id: str) -> bool:
        """
        Request cooperative cancellation.

        Returns False when the run is unknown or already finished.
        """
        record = self._runs.get(run_id)
        if record is None or record.state.is_terminal:
            return False
        record.cancel_token.cancel()
        log("API", f"🛑 Cancellation requested for run {run_id[:8]}")
        return True

    async def cleanup(self, run_id: str) -> bool:
        """
        Drop a finished run and everything it holds.

        Returns False when the run is unknown or still running.
        """
        async with self._lock:
            record = self._runs.get(run_id)
            if record is None or record.finished_at is None:
                return False
            del self._runs[run_id]
        log("API", f"🧹 Run {run_id[:8]} removed")
        return True

    async def _evict_finished(self) -> None:
        """Keep at most `max_finished_runs` finished runs, dropping the oldest."""
        async with self._lock:
            finished = sorted(
                (r for r in self._runs.values() if r.finished_at is not None),
                key=lambda r: r.finished_at,
            )
            excess = finished[:max(0, len(finished) - self.max_finished_runs)]
            for record in excess:
                del self._runs[record.run_id]
        for record in excess:
            log("API", f"🧹 Run {record.run_id[:8]} evicted")

    async def cancel_all(self, timeout: Optional[float] = None) -> None:
        """Cancel every unfinished run and wait (up to `timeout`) for its task to settle."""
        pending = []
        for record in list(self._runs.values()):
            if record.finished_at is None:
                record.cancel_token.cancel()
            if record.task is not None and not record.task.done():
                pending.append(record.task)
        if not pending:
            return
        log("API", f"🛑 Waiting for {len(pending)} run(s) to stop")
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            log("API", f"⚠️ {len(still_running)} run(s) still in flight at shutdown")
