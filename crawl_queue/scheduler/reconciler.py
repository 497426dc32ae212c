# crawl_queue/scheduler/reconciler.py
"""Reconciles RUNNING records against what is actually bound to each port."""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from crawl_queue.core.errors import RequestStoreError
from crawl_queue.core.models import CrawlRequest, RequestState, utcnow
from crawl_queue.core.repository import RequestStore
from crawl_queue.scheduler.probe import SlotProbe
from crawl_queue.scheduler.slots import SlotPool

logger = logging.getLogger(__name__)


class SlotReconciler:
    """
    Computes the free slots for a cycle.

    A RUNNING record whose port probes free belongs to a worker that
    exited without updating the store: it is marked FINISHED and its
    slot is reclaimed.
    """

    def __init__(
        self,
        store: RequestStore,
        probe: SlotProbe,
        startup_grace_seconds: float = 0.0,
    ):
        self._store = store
        self._probe = probe
        self._grace = timedelta(seconds=startup_grace_seconds)

    def reconcile(self, slot_ids: Iterable[int]) -> List[int]:
        """Free slot ids usable for a launch this cycle, lowest first."""
        pool = self.snapshot(slot_ids)
        return [slot.slot_id for slot in pool.free_slots()]

    def snapshot(
        self,
        slot_ids: Iterable[int],
        *,
        reclaim: bool = True,
        now: Optional[datetime] = None,
    ) -> SlotPool:
        """
        Build the slot pool from RUNNING records and live probes.

        Args:
            slot_ids: Configured pool.
            reclaim: Finish stale RUNNING records. False gives a read-only view.
            now: Clock override for the startup grace check.
        """
        now = now or utcnow()
        pool = SlotPool(slot_ids)
        claimants = self._running_by_slot(pool)

        for slot in pool:
            slot.port_free = self._probe.is_free(slot.slot_id)
            owners = claimants.get(slot.slot_id, [])

            if not owners:
                continue

            if len(owners) > 1:
                logger.warning(
                    f"[reconciler] slot {slot.slot_id} claimed by {len(owners)} RUNNING requests"
                )

            if slot.port_free and reclaim and not self._starting(owners, now):
                if self._finish_all(owners, now):
                    logger.info(
                        f"[reconciler] slot {slot.slot_id} released by its worker, "
                        f"reclaimed from {[str(r.request_id) for r in owners]}"
                    )
                    continue

            slot.bind(owners[0].request_id)

        return pool

    def _running_by_slot(self, pool: SlotPool) -> Dict[int, List[CrawlRequest]]:
        claimants: Dict[int, List[CrawlRequest]] = {}
        for request in self._store.find_by_state(RequestState.RUNNING):
            if request.slot is None or request.slot not in pool:
                continue
            claimants.setdefault(request.slot, []).append(request)
        return claimants

    def _starting(self, owners: List[CrawlRequest], now: datetime) -> bool:
        """A claimant launched within the grace period may not have bound its port yet."""
        if not self._grace:
            return False
        return any(now - r.last_state_change_at < self._grace for r in owners)

    def _finish_all(self, owners: List[CrawlRequest], now: datetime) -> bool:
        for request in owners:
            request.finish(now=now)
            try:
                self._store.save(request)
            except RequestStoreError as e:
                # Keep the slot busy this cycle rather than risk a double launch
                logger.error(f"[reconciler] failed to finish {request.request_id}: {e}")
                return False
        return True
