"""Core domain models (crawl requests)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from crawl_queue.core.errors import InvalidStateTransition


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestState(Enum):
    """Crawl request lifecycle."""

    WAITING = "WAITING"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


ALLOWED_TRANSITIONS = {
    RequestState.WAITING: {
        RequestState.RUNNING,
    },
    RequestState.RUNNING: {
        RequestState.FINISHED,
        RequestState.WAITING,  # failed spawn only
    },
}


@dataclass
class CrawlRequest:
    """A submitted crawl, queued until a slot is free for its worker."""

    crawl_data_path: str
    collection_name: str

    # Assigned by the store on first save
    request_id: Optional[UUID] = None

    # State
    state: RequestState = RequestState.WAITING
    slot: Optional[int] = None

    # Lifecycle timestamps
    created_at: datetime = field(default_factory=utcnow)
    last_state_change_at: datetime = field(default_factory=utcnow)

    # -------------------------
    # STATE TRANSITIONS
    # -------------------------

    def claim(self, slot: int, *, now: Optional[datetime] = None) -> None:
        """Bind to a slot (WAITING -> RUNNING)."""
        self._transition(RequestState.RUNNING, now)
        self.slot = slot

    def revert(self, *, now: Optional[datetime] = None) -> None:
        """Give the slot back after a failed launch (RUNNING -> WAITING)."""
        self._transition(RequestState.WAITING, now)
        self.slot = None

    def finish(self, *, now: Optional[datetime] = None) -> None:
        """Mark the worker as gone (RUNNING -> FINISHED). The slot is kept as history."""
        self._transition(RequestState.FINISHED, now)

    def _transition(self, new_state: RequestState, now: Optional[datetime]) -> None:
        if new_state not in ALLOWED_TRANSITIONS.get(self.state, set()):
            raise InvalidStateTransition(
                f"Cannot transition from {self.state.value} to {new_state.value}"
            )
        self.state = new_state
        self.last_state_change_at = now or utcnow()

    def __repr__(self) -> str:
        where = f", slot={self.slot}" if self.slot is not None else ""
        return f"<CrawlRequest(id={self.request_id}, {self.state.value}{where})>"
