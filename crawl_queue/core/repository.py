# crawl_queue/core/repository.py

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from crawl_queue.core.models import CrawlRequest, RequestState


class RequestStore(ABC):
    """
    Persistence contract for crawl requests.

    Implementations own their connection resources: they are created when
    the controller starts and closed when it shuts down.
    """

    @abstractmethod
    def save(self, request: CrawlRequest) -> CrawlRequest:
        """
        Insert or update a request by request_id.
        Assigns request_id when it is unset.
        Raises RequestStoreError if the write fails; nothing is persisted then.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, request_id: UUID) -> Optional[CrawlRequest]:
        """
        Fetch request by ID.
        Returns None if not found.
        """
        raise NotImplementedError

    @abstractmethod
    def find_by_state(
        self,
        state: RequestState,
        limit: Optional[int] = None,
    ) -> List[CrawlRequest]:
        """
        List requests in a given state, oldest created_at first.
        """
        raise NotImplementedError

    @abstractmethod
    def list_all(self, limit: Optional[int] = None) -> List[CrawlRequest]:
        """
        List every request, oldest created_at first.
        """
        raise NotImplementedError

    def oldest_waiting(self) -> Optional[CrawlRequest]:
        """Next request in FIFO order, if any."""
        waiting = self.find_by_state(RequestState.WAITING, limit=1)
        return waiting[0] if waiting else None

    def close(self) -> None:
        """Release connection resources."""
        pass
