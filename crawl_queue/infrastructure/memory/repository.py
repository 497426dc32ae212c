# crawl_queue/infrastructure/memory/repository.py

from dataclasses import replace
from threading import Lock
from typing import List, Optional
from uuid import UUID, uuid4

from crawl_queue.core.models import CrawlRequest, RequestState
from crawl_queue.core.repository import RequestStore


class InMemoryRequestStore(RequestStore):
    """
    Process-local store. Keeps copies so callers mutating a request
    do not change stored state until they save it.
    """

    def __init__(self):
        self._store: dict[UUID, CrawlRequest] = {}
        self._lock = Lock()

    def save(self, request: CrawlRequest) -> CrawlRequest:
        with self._lock:
            if request.request_id is None:
                request.request_id = uuid4()
            self._store[request.request_id] = replace(request)
            return request

    def get(self, request_id: UUID) -> CrawlRequest | None:
        with self._lock:
            stored = self._store.get(request_id)
            return replace(stored) if stored else None

    def find_by_state(
        self,
        state: RequestState,
        limit: Optional[int] = None,
    ) -> List[CrawlRequest]:
        with self._lock:
            results = [replace(r) for r in self._store.values() if r.state == state]
        return self._oldest_first(results, limit)

    def list_all(self, limit: Optional[int] = None) -> List[CrawlRequest]:
        with self._lock:
            results = [replace(r) for r in self._store.values()]
        return self._oldest_first(results, limit)

    def close(self) -> None:
        pass

    @staticmethod
    def _oldest_first(results: List[CrawlRequest], limit: Optional[int]) -> List[CrawlRequest]:
        # request_id breaks created_at ties the same way as the SQL store
        results = sorted(results, key=lambda r: (r.created_at, r.request_id))
        if limit is not None:
            results = results[:limit]
        return results
