# crawl_queue/controller.py
"""
Crawl queue controller - public entry point.

Persists submitted crawl requests, polls at a fixed rate and starts a
worker whenever a slot of the pool is free.

A RUNNING record whose port probes free is finished on the next cycle.
With startup_grace_seconds = 0 (the default) a worker that has not bound
its port yet is indistinguishable from one that has exited, so set a
grace period when workers are slow to start.
"""

import logging
import threading
from typing import Callable, List, Optional
from uuid import UUID

from crawl_queue.agent.client import AgentController
from crawl_queue.config import ControllerSettings
from crawl_queue.container import build_store
from crawl_queue.core.errors import ControllerNotStarted, RequestNotFound
from crawl_queue.core.models import CrawlRequest, RequestState
from crawl_queue.core.repository import RequestStore
from crawl_queue.scheduler.launcher import WorkerLauncher
from crawl_queue.scheduler.poller import Poller
from crawl_queue.scheduler.probe import SlotProbe
from crawl_queue.scheduler.reconciler import SlotReconciler
from crawl_queue.scheduler.scheduler import LaunchScheduler
from crawl_queue.scheduler.slots import SlotPool

logger = logging.getLogger(__name__)


class CrawlQueueController:
    """
    Owns the request store, the launch scheduler and the poller.

    Nothing is acquired until start(); shutdown() stops the poller and
    closes the store. Spawned workers are left running.
    """

    def __init__(
        self,
        settings: Optional[ControllerSettings] = None,
        *,
        store_factory: Optional[Callable[[], RequestStore]] = None,
        probe: Optional[SlotProbe] = None,
        launcher: Optional[WorkerLauncher] = None,
        agent: Optional[AgentController] = None,
    ):
        self.settings = settings or ControllerSettings()
        self._store_factory = store_factory or (lambda: build_store(self.settings))
        self._probe = probe or SlotProbe(self.settings.probe_host)
        self._launcher = launcher or WorkerLauncher(
            self.settings.launch_command,
            cwd=self.settings.launch_cwd,
        )
        self._agent = agent or AgentController(
            self.settings.control_url_template,
            timeout=self.settings.stop_timeout_seconds,
        )

        self._lifecycle_lock = threading.Lock()
        self._store: Optional[RequestStore] = None
        self._scheduler: Optional[LaunchScheduler] = None
        self._poller: Optional[Poller] = None

    # -------------------------
    # LIFECYCLE
    # -------------------------

    def start(self) -> "CrawlQueueController":
        """Open the store and start polling for free slots."""
        with self._lifecycle_lock:
            if self._store is not None:
                raise RuntimeError("Controller already started")

            logger.info(f"[controller] 🚀 starting with slots {self.settings.slots}")

            store = self._store_factory()
            reconciler = SlotReconciler(
                store,
                self._probe,
                startup_grace_seconds=self.settings.startup_grace_seconds,
            )
            scheduler = LaunchScheduler(
                store=store,
                reconciler=reconciler,
                launcher=self._launcher,
                slots=self.settings.slots,
            )
            poller = Poller(
                scheduler.try_launch,
                interval=self.settings.poll_interval_seconds,
                initial_delay=self.settings.initial_delay_seconds,
            )

            self._store, self._scheduler, self._poller = store, scheduler, poller
            poller.start()
            return self

    def shutdown(self) -> None:
        """Stop polling and release the store. Safe to call more than once."""
        with self._lifecycle_lock:
            poller, store = self._poller, self._store
            self._poller = self._scheduler = self._store = None

        if poller is not None:
            poller.stop()
        if store is not None:
            store.close()
            logger.info("[controller] shut down")

    def is_started(self) -> bool:
        return self._store is not None

    def __enter__(self) -> "CrawlQueueController":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # -------------------------
    # REQUESTS
    # -------------------------

    def submit(self, crawl_data_path: str, collection_name: str) -> CrawlRequest:
        """
        Submit a new crawl request; launched at once if a slot is free.

        Raises:
            RequestStoreError: The request could not be persisted
        """
        logger.info(f"[controller] submit event: {collection_name} <- {crawl_data_path}")
        return self._require_scheduler().submit(crawl_data_path, collection_name)

    def try_launch(self) -> Optional[CrawlRequest]:
        """Run one scheduling cycle now, outside the poller."""
        return self._require_scheduler().try_launch()

    def get_request(self, request_id: UUID) -> CrawlRequest:
        """
        Raises:
            RequestNotFound: No request with this id
        """
        request = self._require_store().get(request_id)
        if request is None:
            raise RequestNotFound(f"Request {request_id} not found")
        return request

    def list_requests(
        self,
        state: Optional[RequestState] = None,
        limit: Optional[int] = None,
    ) -> List[CrawlRequest]:
        store = self._require_store()
        if state is None:
            return store.list_all(limit=limit)
        return store.find_by_state(state, limit=limit)

    # -------------------------
    # SLOTS
    # -------------------------

    def cancel(self, slot: int) -> bool:
        """
        Ask the worker on a slot to stop. Best effort: returns False on
        failure, never raises, and changes no request state.
        """
        return self._agent.cancel(slot)

    def slot_status(self) -> SlotPool:
        """
        Read-only view of the pool: claimant and port state per slot.
        Stale records are not reclaimed here.
        """
        scheduler = self._require_scheduler()
        reconciler = SlotReconciler(self._require_store(), self._probe)
        return reconciler.snapshot(scheduler.slots, reclaim=False)

    # -------------------------
    # INTERNAL HELPERS
    # -------------------------

    def _require_store(self) -> RequestStore:
        store = self._store
        if store is None:
            raise ControllerNotStarted("Controller is not started")
        return store

    def _require_scheduler(self) -> LaunchScheduler:
        scheduler = self._scheduler
        if scheduler is None:
            raise ControllerNotStarted("Controller is not started")
        return scheduler
