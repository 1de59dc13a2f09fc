from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from typing import Any, Dict, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from dispatch import DEFAULT_STRATEGY, StrategyLoadError, load_strategy
from simulation import ArrivalQueue, Simulation, SimulationConfig, load_config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ELEVATOR_SIM_CONFIG"

DEFAULT_SCENARIO: Dict[str, Any] = {
    "building": {"floors": 10, "basement_floors": 0},
    "elevators": {
        "main": {
            "count": 2,
            "capacity": 8,
            "speed_floors_per_second": 1.0,
            "door_open_time": 2.0,
            "door_close_time": 2.0,
        }
    },
    "simulation": {"duration_minutes": 10, "user_spawn_rate": 0.1, "random_seed": 42},
}


class AlgorithmSelection(BaseModel):
    name: str
    options: Dict[str, Any] = Field(default_factory=dict)


class SimulationManager:
    """Steps one simulation in the background and fans its state out to clients."""

    def __init__(
        self,
        config: SimulationConfig,
        strategy_name: str = DEFAULT_STRATEGY,
        speed: float = 1.0,
    ) -> None:
        self.config = config
        self.queue = ArrivalQueue.generate(config)
        self.strategy_name = strategy_name
        self.simulation = self._build(strategy_name, {})
        self.tick_interval = self.simulation.tick / speed
        self.clients: Set[WebSocket] = set()
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_env(cls) -> "SimulationManager":
        path = os.environ.get(CONFIG_ENV_VAR)
        if path:
            config = load_config(path)
        else:
            config = SimulationConfig.from_dict(DEFAULT_SCENARIO)
        return cls(config)

    def _build(self, name: str, options: Dict[str, Any]) -> Simulation:
        strategy = load_strategy(name, **options)
        self.queue.reset()
        simulation = Simulation(self.config, strategy, queue=self.queue)
        simulation.start()
        return simulation

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        while True:
            async with self._lock:
                advanced = self._advance()
                payload = self.current_state()
            if advanced:
                await self.broadcast(payload)
            await asyncio.sleep(self.tick_interval)

    def _advance(self) -> bool:
        simulation = self.simulation
        if not simulation.running:
            return False
        if simulation.finished:
            simulation.finish()
            return True
        simulation.step()
        return True

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except WebSocketDisconnect:
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps(self.current_state()))

    async def unregister(self, websocket: WebSocket) -> None:
        if websocket in self.clients:
            self.clients.remove(websocket)
        with contextlib.suppress(Exception):
            await websocket.close()

    def current_state(self) -> dict:
        return self.simulation.current_state()

    def statistics(self) -> dict:
        return self.simulation.statistics().to_dict()

    async def set_strategy(self, name: str, options: Dict[str, Any]) -> dict:
        async with self._lock:
            simulation = self._build(name, options)
            self.simulation = simulation
            self.strategy_name = name
            logger.info("Restarted simulation with strategy %s", name)
            return self.current_state()

    async def stop_simulation(self) -> dict:
        async with self._lock:
            simulation = self.simulation
            if simulation.running:
                simulation.stop()
                simulation.finish()
            return self.current_state()


def create_app(manager: SimulationManager) -> FastAPI:
    app = FastAPI(title="Elevator Dispatch Simulation API")
    app.state.manager = manager
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        await manager.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await manager.stop()

    @app.get("/state")
    async def get_state() -> dict:
        return manager.current_state()

    @app.get("/statistics")
    async def get_statistics() -> dict:
        return manager.statistics()

    @app.post("/algorithm")
    async def set_algorithm(selection: AlgorithmSelection) -> dict:
        try:
            return await manager.set_strategy(selection.name, selection.options)
        except StrategyLoadError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.post("/stop")
    async def stop_simulation() -> dict:
        return await manager.stop_simulation()

    @app.websocket("/ws/stream")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await manager.register(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            await manager.unregister(websocket)

    return app


app = create_app(SimulationManager.from_env())


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
