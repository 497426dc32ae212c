from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from crawl_queue.api.dependencies import get_controller
from crawl_queue.api.schemas.requests import CrawlRequestCreate, CrawlRequestResponse
from crawl_queue.core.errors import RequestNotFound, RequestStoreError
from crawl_queue.core.models import RequestState

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("/", response_model=CrawlRequestResponse, status_code=201)
def submit_request(
    body: CrawlRequestCreate,
    controller=Depends(get_controller),
):
    try:
        request = controller.submit(body.crawl_data_path, body.collection_name)
    except RequestStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return CrawlRequestResponse.from_domain(request)


@router.get("/", response_model=List[CrawlRequestResponse])
def list_requests(
    state: Optional[RequestState] = None,
    limit: int = Query(100, ge=1, le=1000),
    controller=Depends(get_controller),
):
    requests = controller.list_requests(state=state, limit=limit)
    return [CrawlRequestResponse.from_domain(r) for r in requests]


@router.get("/{request_id}", response_model=CrawlRequestResponse)
def get_request(
    request_id: UUID,
    controller=Depends(get_controller),
):
    try:
        request = controller.get_request(request_id)
    except RequestNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return CrawlRequestResponse.from_domain(request)
