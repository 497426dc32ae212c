# crawl_queue/scheduler/slots.py

"""Slot pool - the fixed set of ports workers run on."""

from typing import Iterable, List, Optional
from uuid import UUID


class Slot:
    """One port of the pool and the request currently recorded on it."""

    def __init__(self, slot_id: int):
        self.slot_id = slot_id
        self.request_id: Optional[UUID] = None
        self.port_free: bool = False

    def is_free(self) -> bool:
        """Usable for a new launch: no claimant and nothing bound to the port."""
        return self.request_id is None and self.port_free

    def bind(self, request_id: UUID) -> None:
        """Record the request that claims this slot."""
        if self.request_id is not None and self.request_id != request_id:
            raise ValueError(f"Slot {self.slot_id} already claimed by {self.request_id}")
        self.request_id = request_id

    def __repr__(self) -> str:
        if self.request_id is not None:
            status = f"claimed({self.request_id})"
        else:
            status = "free" if self.port_free else "port-busy"
        return f"<Slot(id={self.slot_id}, {status})>"


class SlotPool:
    """
    Snapshot of the slot pool for one scheduling cycle.

    Built fresh on every cycle from store records and probe results,
    never kept between cycles.
    """

    def __init__(self, slot_ids: Iterable[int]):
        slot_ids = sorted(set(slot_ids))
        if not slot_ids:
            raise ValueError("slot pool must not be empty")

        self._slots = {slot_id: Slot(slot_id) for slot_id in slot_ids}

    def __contains__(self, slot_id: int) -> bool:
        return slot_id in self._slots

    def __iter__(self):
        return iter(self._slots.values())

    def get(self, slot_id: int) -> Optional[Slot]:
        return self._slots.get(slot_id)

    def slot_ids(self) -> List[int]:
        return list(self._slots)

    def free_slots(self) -> List[Slot]:
        """Slots usable for a launch, lowest port first."""
        return [s for s in self._slots.values() if s.is_free()]

    def claimed_slots(self) -> List[Slot]:
        return [s for s in self._slots.values() if s.request_id is not None]

    def first_free(self) -> Optional[Slot]:
        free = self.free_slots()
        return free[0] if free else None

    def total_slots(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return (
            f"<SlotPool(total={self.total_slots()}, "
            f"free={len(self.free_slots())}, "
            f"claimed={len(self.claimed_slots())})>"
        )
