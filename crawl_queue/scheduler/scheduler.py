# crawl_queue/scheduler/scheduler.py
"""Launch scheduler - claims a free slot for the oldest waiting request."""

import logging
import threading
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from crawl_queue.core.errors import RequestStoreError, SpawnError
from crawl_queue.core.models import CrawlRequest
from crawl_queue.core.repository import RequestStore
from crawl_queue.scheduler.launcher import WorkerHandle, WorkerLauncher
from crawl_queue.scheduler.reconciler import SlotReconciler

logger = logging.getLogger(__name__)


class LaunchScheduler:
    """
    Decides whether and what to launch.

    try_launch() is the only code that assigns requests to slots. Every
    call runs under one lock, whether it comes from submit() or from the
    poller, so two callers can never see the same free slot.
    """

    def __init__(
        self,
        *,
        store: RequestStore,
        reconciler: SlotReconciler,
        launcher: WorkerLauncher,
        slots: Iterable[int],
    ):
        self._store = store
        self._reconciler = reconciler
        self._launcher = launcher
        self.slots = sorted(set(slots))
        if not self.slots:
            raise ValueError("at least one slot is required")

        self._lock = threading.RLock()

        # Spawned workers by slot: {slot: handle}
        self._workers: Dict[int, WorkerHandle] = {}

        # Failed-spawn requests whose WAITING revert could not be saved yet
        self._pending_reverts: Dict[UUID, CrawlRequest] = {}

    # -------------------------
    # SUBMIT
    # -------------------------

    def submit(self, crawl_data_path: str, collection_name: str) -> CrawlRequest:
        """
        Queue a request and try to launch it right away.

        Raises:
            RequestStoreError: The request could not be persisted (nothing queued)
        """
        request = CrawlRequest(
            crawl_data_path=crawl_data_path,
            collection_name=collection_name,
        )
        self._store.save(request)
        logger.info(f"[scheduler] queued {request.request_id} ({collection_name})")

        launched = None
        try:
            launched = self.try_launch()
        except RequestStoreError as e:
            # Already durable: the next poll picks it up
            logger.error(f"[scheduler] launch after submit failed: {e}")

        if launched is not None and launched.request_id == request.request_id:
            return launched
        return request

    # -------------------------
    # LAUNCH
    # -------------------------

    def try_launch(self) -> Optional[CrawlRequest]:
        """
        Launch at most one waiting request.

        Returns the request now RUNNING, or None if nothing was launched.
        """
        with self._lock:
            if not self._retry_reverts():
                # Reconciling now would finish a request that never ran
                return None

            free = self._reconciler.reconcile(self.slots)
            self._forget_workers(free)

            if not free:
                logger.debug("[scheduler] no free slot")
                return None

            request = self._store.oldest_waiting()
            if request is None:
                logger.debug(f"[scheduler] no waiting request, free slots {free}")
                return None

            return self._launch(request, free[0])

    def _launch(self, request: CrawlRequest, slot: int) -> Optional[CrawlRequest]:
        # Claim first so no later cycle can hand this slot to another request
        request.claim(slot)
        self._store.save(request)

        try:
            handle = self._launcher.launch(slot)
        except SpawnError as e:
            logger.error(f"[scheduler] {e}; returning {request.request_id} to the queue")
            request.revert()
            self._pending_reverts[request.request_id] = request
            self._retry_reverts()
            return None

        self._workers[slot] = handle
        logger.info(f"[scheduler] ✅ {request.request_id} running on slot {slot}")
        return request

    def _retry_reverts(self) -> bool:
        """Save pending WAITING reverts. True once none is left."""
        for request_id, request in list(self._pending_reverts.items()):
            try:
                self._store.save(request)
            except RequestStoreError as e:
                logger.error(f"[scheduler] cannot return {request_id} to the queue yet: {e}")
                return False
            del self._pending_reverts[request_id]
        return True

    # -------------------------
    # WORKER HANDLES
    # -------------------------

    def workers(self) -> List[WorkerHandle]:
        with self._lock:
            return list(self._workers.values())

    def _forget_workers(self, free_slots: Iterable[int]) -> None:
        """Drop handles for slots whose worker is gone, reaping the process."""
        for slot in free_slots:
            handle = self._workers.pop(slot, None)
            if handle is not None:
                code = handle.poll()
                logger.debug(f"[scheduler] worker pid {handle.pid} on slot {slot} gone (exit {code})")
