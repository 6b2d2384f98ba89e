# artifact_studio/lib/websocket.py
from typing import Dict, List
import asyncio

from fastapi import WebSocket


class ConnectionManager:
    """
    Per-run WebSocket connection manager.

    - Each run_id has its own list of subscribed sockets.
    - Progress for a run goes to that run's sockets only.
    """

    def __init__(self) -> None:
        # run_id -> list[WebSocket]
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, run_id: str) -> None:
        await websocket.accept()
        async with self._lock:
            self.active_connections.setdefault(run_id, []).append(websocket)

    async def disconnect(self, websocket: WebSocket, run_id: str) -> None:
        async with self._lock:
            connections = self.active_connections.get(run_id, [])
            if websocket in connections:
                connections.remove(websocket)
            if not connections and run_id in self.active_connections:
                del self.active_connections[run_id]

    def connection_count(self, run_id: str) -> int:
        return len(self.active_connections.get(run_id, []))

    async def send_to_run(self, run_id: str, message: dict) -> None:
        """
        Send a JSON message to every socket subscribed to `run_id`.
        Sockets that fail to receive are dropped.
        """
        # Snapshot under lock, send outside it
        async with self._lock:
            connections = list(self.active_connections.get(run_id, []))

        disconnected: List[WebSocket] = []
        for ws in connections:
            try:
                await ws.send_json(message)
            except Exception:
                disconnected.append(ws)

        for ws in disconnected:
            await self.disconnect(ws, run_id)


manager = ConnectionManager()
