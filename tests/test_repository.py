"""Test request store implementations."""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from crawl_queue.core.errors import RequestStoreError
from crawl_queue.core.models import CrawlRequest, RequestState
from crawl_queue.infrastructure.postgres.repository import SqlRequestStore

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_request(name, minutes=0):
    created = T0 + timedelta(minutes=minutes)
    return CrawlRequest(
        crawl_data_path=f"/crawls/{name}",
        collection_name=name,
        created_at=created,
        last_state_change_at=created,
    )


@pytest.fixture(params=["memory", "sql"])
def any_store(request, store, sql_store):
    return store if request.param == "memory" else sql_store


class TestRequestStore:
    """Behaviour shared by every store."""

    # -------------------------
    # SAVE
    # -------------------------

    def test_save_assigns_id(self, any_store):
        request = any_store.save(make_request("a"))

        assert request.request_id is not None
        stored = any_store.get(request.request_id)
        assert stored.collection_name == "a"
        assert stored.state == RequestState.WAITING
        assert stored.slot is None

    def test_save_upserts_by_id(self, any_store):
        request = any_store.save(make_request("a"))
        request.claim(9995)
        any_store.save(request)

        stored = any_store.get(request.request_id)
        assert stored.state == RequestState.RUNNING
        assert stored.slot == 9995
        assert len(any_store.list_all()) == 1

    def test_unsaved_changes_are_not_visible(self, any_store):
        request = any_store.save(make_request("a"))

        request.claim(9995)

        assert any_store.get(request.request_id).state == RequestState.WAITING

    def test_get_missing(self, any_store):
        assert any_store.get(uuid4()) is None

    # -------------------------
    # QUERY
    # -------------------------

    def test_find_by_state_filters(self, any_store):
        waiting = any_store.save(make_request("a", 0))
        running = any_store.save(make_request("b", 1))
        running.claim(9995)
        any_store.save(running)

        found = any_store.find_by_state(RequestState.RUNNING)

        assert [r.request_id for r in found] == [running.request_id]
        assert [r.request_id for r in any_store.find_by_state(RequestState.WAITING)] == [
            waiting.request_id
        ]

    def test_find_by_state_oldest_first(self, any_store):
        newer = any_store.save(make_request("newer", 5))
        older = any_store.save(make_request("older", 1))

        found = any_store.find_by_state(RequestState.WAITING)

        assert [r.request_id for r in found] == [older.request_id, newer.request_id]
        assert any_store.oldest_waiting().request_id == older.request_id

    def test_equal_timestamps_ordered_by_id(self, any_store):
        second = make_request("second")
        second.request_id = UUID("00000000-0000-0000-0000-000000000002")
        first = make_request("first")
        first.request_id = UUID("00000000-0000-0000-0000-000000000001")
        any_store.save(second)
        any_store.save(first)

        found = any_store.find_by_state(RequestState.WAITING)

        assert [r.collection_name for r in found] == ["first", "second"]
        assert [r.collection_name for r in any_store.list_all()] == ["first", "second"]
        assert any_store.oldest_waiting().collection_name == "first"

    def test_find_by_state_limit(self, any_store):
        for i in range(3):
            any_store.save(make_request(f"r{i}", i))

        assert len(any_store.find_by_state(RequestState.WAITING, limit=2)) == 2

    def test_oldest_waiting_empty(self, any_store):
        assert any_store.oldest_waiting() is None


class TestSqlRequestStore:
    """SQL specifics."""

    def test_timestamps_come_back_timezone_aware(self, sql_store):
        request = sql_store.save(make_request("a"))

        stored = sql_store.get(request.request_id)

        assert stored.created_at.tzinfo is not None
        assert stored.created_at == T0

    def test_write_failure_raises_store_error(self):
        store = SqlRequestStore("sqlite://", create_tables=False)
        request = make_request("a")

        with pytest.raises(RequestStoreError):
            store.save(request)
        assert request.request_id is None
        store.close()

    def test_read_failure_raises_store_error(self):
        store = SqlRequestStore("sqlite://", create_tables=False)

        with pytest.raises(RequestStoreError):
            store.find_by_state(RequestState.RUNNING)
        store.close()
