"""
WebSocket handlers for streaming run progress.
"""

import queue
from typing import Dict, List

from fastapi import WebSocket
from starlette.concurrency import run_in_threadpool

from ..services.simulation_service import SimulationRun

POLL_SECONDS = 0.5


class RunStreamManager:
    """Manage WebSocket connections per run."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, run_id: str):
        await websocket.accept()
        self.active_connections.setdefault(run_id, []).append(websocket)

    def disconnect(self, websocket: WebSocket, run_id: str):
        if run_id in self.active_connections:
            self.active_connections[run_id].remove(websocket)
            if not self.active_connections[run_id]:
                del self.active_connections[run_id]

    async def stream(self, websocket: WebSocket, run: SimulationRun):
        """Forward queued messages until the terminal one has been sent."""
        while True:
            try:
                message = await run_in_threadpool(run.messages.get, timeout=POLL_SECONDS)
            except queue.Empty:
                # Another stream drained the queue; replay the outcome
                terminal = run.terminal_message()
                if terminal is not None and run.messages.empty():
                    await websocket.send_json(terminal)
                    return
                continue
            await websocket.send_json(message)
            if message["type"] != "progress":
                return


manager = RunStreamManager()
