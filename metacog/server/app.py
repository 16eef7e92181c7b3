from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional

from metacog.agents.journal import ARCHITECT_STREAM
from metacog.mission.scheduler import CycleScheduler, SchedulerStateError

import logging

# ============================================================
# LOGGING
# ============================================================

logger = logging.getLogger("metacog.server")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

# ============================================================
# Models
# ============================================================

class ResetRequest(BaseModel):
    confirm: bool = False


# ============================================================
# App Factory
# ============================================================

def create_app(scheduler: Optional[CycleScheduler] = None) -> FastAPI:
    """
    Build the mission control API around one scheduler.

    Without an explicit scheduler, one is assembled from METACOG_*
    environment variables. Run with:

        uvicorn --factory metacog.server.app:create_app
    """

    if scheduler is None:
        from metacog.app import MetacogApp
        from metacog.config import MissionConfig

        scheduler = MetacogApp.create(config=MissionConfig.from_env())

    app = FastAPI(title="Metacog Research Collective", version="1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.scheduler = scheduler
    context = scheduler.context

    # ============================================================
    # Health / Status
    # ============================================================

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "goal": context.config.goal,
            "llm_backend": context.config.llm_backend,
            "oracle": getattr(context.oracle, "name", None),
            "sandbox_healthy": context.sandbox.health(),
        }

    @app.get("/status")
    def mission_status():
        return scheduler.status()

    # ============================================================
    # Lifecycle
    # ============================================================

    @app.post("/start")
    def start():
        try:
            scheduler.start()
        except SchedulerStateError as e:
            raise HTTPException(status_code=409, detail=str(e))

        return scheduler.status()

    @app.post("/stop")
    def stop():
        stopped = scheduler.stop()
        return {"stopped": stopped, "state": scheduler.state.value}

    @app.post("/reset")
    def reset(request: ResetRequest):
        try:
            done = scheduler.reset(confirm=request.confirm)
        except SchedulerStateError as e:
            raise HTTPException(status_code=409, detail=str(e))

        return {"reset": done, "state": scheduler.state.value}

    @app.post("/resume")
    def resume():
        try:
            resumed = scheduler.resume_from_snapshot()
        except SchedulerStateError as e:
            raise HTTPException(status_code=409, detail=str(e))

        if not resumed:
            raise HTTPException(status_code=404, detail="No saved mission to resume")

        return scheduler.status()

    # ============================================================
    # Mission State
    # ============================================================

    @app.get("/graph")
    def graph():
        records = context.graph.to_records()
        return {"count": len(records), "nodes": records}

    @app.get("/agents")
    def agents():
        return {
            "count": len(context.agents),
            "agents": [agent.to_dict() for agent in context.agents.agents()],
            "ranking": context.agents.ranking(),
        }

    @app.get("/journal/{agent_id}")
    def journal(agent_id: str):
        known = context.agents.has(agent_id) or agent_id in context.journal.streams()
        if agent_id != ARCHITECT_STREAM and not known:
            raise HTTPException(status_code=404, detail="Agent not found")

        return {
            "agent_id": agent_id,
            "entries": [entry.to_dict() for entry in context.journal.entries(agent_id)],
        }

    return app
