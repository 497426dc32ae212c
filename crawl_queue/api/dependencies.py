from fastapi import HTTPException, Request

from crawl_queue.controller import CrawlQueueController


def get_controller(request: Request) -> CrawlQueueController:
    controller = getattr(request.app.state, "controller", None)
    if controller is None or not controller.is_started():
        raise HTTPException(status_code=503, detail="Controller not running")
    return controller
