from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from crawl_queue.api.routes.requests import router as requests_router
from crawl_queue.api.routes.slots import router as slots_router
from crawl_queue.container import build_controller
from crawl_queue.controller import CrawlQueueController


def create_app(controller: Optional[CrawlQueueController] = None) -> FastAPI:
    """
    HTTP front of the controller. The controller is started with the app
    and shut down with it.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.controller = controller or build_controller()
        app.state.controller.start()
        try:
            yield
        finally:
            app.state.controller.shutdown()

    app = FastAPI(title="Crawl Queue API", lifespan=lifespan)

    @app.get("/health")
    def health():
        running = getattr(app.state, "controller", None)
        return {"status": "ok" if running is not None and running.is_started() else "stopped"}

    app.include_router(requests_router)
    app.include_router(slots_router)
    return app
