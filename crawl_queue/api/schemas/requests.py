from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from crawl_queue.core.models import CrawlRequest


class CrawlRequestCreate(BaseModel):
    crawl_data_path: str = Field(..., min_length=1, description="Directory with the crawl configuration")
    collection_name: str = Field(..., min_length=1, description="Target collection")


class CrawlRequestResponse(BaseModel):
    request_id: UUID
    crawl_data_path: str
    collection_name: str
    state: str
    slot: Optional[int]
    created_at: datetime
    last_state_change_at: datetime

    @classmethod
    def from_domain(cls, request: CrawlRequest) -> "CrawlRequestResponse":
        return cls(
            request_id=request.request_id,
            crawl_data_path=request.crawl_data_path,
            collection_name=request.collection_name,
            state=request.state.value,
            slot=request.slot,
            created_at=request.created_at,
            last_state_change_at=request.last_state_change_at,
        )


class SlotResponse(BaseModel):
    slot: int
    request_id: Optional[UUID]
    port_free: bool
    free: bool


class SlotListResponse(BaseModel):
    slots: List[SlotResponse]


class CancelResponse(BaseModel):
    slot: int
    stop_sent: bool
