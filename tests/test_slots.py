"""Test slot pool snapshot."""

from uuid import uuid4

import pytest

from crawl_queue.scheduler.slots import Slot, SlotPool


class TestSlot:
    """Test individual slot."""

    def test_slot_needs_free_port_and_no_claimant(self):
        slot = Slot(slot_id=9995)
        assert not slot.is_free()

        slot.port_free = True
        assert slot.is_free()

        slot.bind(uuid4())
        assert not slot.is_free()

    def test_bind_claimed_slot_fails(self):
        slot = Slot(slot_id=9995)
        slot.bind(uuid4())

        with pytest.raises(ValueError):
            slot.bind(uuid4())


class TestSlotPool:
    """Test pool queries."""

    def test_slots_sorted_and_deduplicated(self):
        pool = SlotPool([9997, 9995, 9996, 9995])

        assert pool.slot_ids() == [9995, 9996, 9997]
        assert pool.total_slots() == 3

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError):
            SlotPool([])

    def test_first_free_is_lowest_port(self):
        pool = SlotPool([9995, 9996, 9997])
        for slot in pool:
            slot.port_free = True
        pool.get(9995).bind(uuid4())

        assert pool.first_free().slot_id == 9996
        assert [s.slot_id for s in pool.free_slots()] == [9996, 9997]
        assert len(pool.claimed_slots()) == 1

    def test_no_free_slot(self):
        pool = SlotPool([9995])

        assert pool.first_free() is None
        assert 9995 in pool
        assert 9996 not in pool
