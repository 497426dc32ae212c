# crawl_queue/agent/server.py
"""
Worker control endpoint.

A crawl worker embeds this on its slot port so the controller can stop it
remotely. The worker binding the port is also what the slot probe sees.
"""

import logging
from typing import Callable

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class StopResponse(BaseModel):
    """Stop acknowledgement."""
    status: str
    slot: int


def create_control_app(slot: int, on_stop: Callable[[], None]) -> FastAPI:
    """
    Build the control app for a worker.

    Args:
        slot: Port the worker occupies
        on_stop: Called once per stop request; should make the worker exit
    """
    app = FastAPI(
        title="Crawl Worker Control",
        description="Control endpoint of a crawl worker",
        version="1.0.0",
    )
    app.state.stop_requested = False

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "running", "slot": slot, "stop_requested": app.state.stop_requested}

    @app.post("/stop", response_model=StopResponse)
    def stop():
        """Stop the worker."""
        logger.info(f"[worker {slot}] stop requested")
        try:
            on_stop()
        except Exception as e:
            logger.error(f"[worker {slot}] stop failed: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))
        app.state.stop_requested = True
        return StopResponse(status="stopping", slot=slot)

    return app


def serve_control_endpoint(slot: int, on_stop: Callable[[], None], host: str = "127.0.0.1") -> None:
    """Run the control endpoint on the slot port (blocking)."""
    import uvicorn

    uvicorn.run(
        create_control_app(slot, on_stop),
        host=host,
        port=slot,
        log_level="info",
    )
