#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest

from crawl_queue.config import ControllerSettings
from crawl_queue.controller import CrawlQueueController
from crawl_queue.infrastructure.memory.repository import InMemoryRequestStore
from crawl_queue.infrastructure.postgres.repository import SqlRequestStore
from crawl_queue.scheduler.reconciler import SlotReconciler
from crawl_queue.scheduler.scheduler import LaunchScheduler
from tests.fakes import FakeLauncher, FakeProbe


@pytest.fixture
def store():
    return InMemoryRequestStore()


@pytest.fixture
def sql_store():
    """SQL store on a private in-memory SQLite database."""
    store = SqlRequestStore("sqlite://")
    yield store
    store.close()


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def launcher(probe):
    return FakeLauncher(probe)


@pytest.fixture
def make_scheduler(store, probe, launcher):
    """Scheduler over the given slots, sharing the store/probe/launcher fixtures."""

    def _make(slots=(9995,), grace=0.0):
        reconciler = SlotReconciler(store, probe, startup_grace_seconds=grace)
        return LaunchScheduler(
            store=store,
            reconciler=reconciler,
            launcher=launcher,
            slots=slots,
        )

    return _make


@pytest.fixture
def settings():
    """Settings whose poller never fires on its own during a test."""
    return ControllerSettings(
        slots=[9995],
        poll_interval_seconds=3600,
        initial_delay_seconds=3600,
        store_backend="memory",
    )


@pytest.fixture
def controller(settings, probe, launcher):
    controller = CrawlQueueController(
        settings,
        store_factory=InMemoryRequestStore,
        probe=probe,
        launcher=launcher,
    )
    controller.start()
    yield controller
    controller.shutdown()
